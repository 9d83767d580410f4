"""
Sensor data models - RFID readers, their personality, and antenna aliases.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

DEFAULT_FACILITY = "DEFAULT_FACILITY"


class Personality(str, Enum):
    """Functional role assigned to a sensor."""

    NONE = "NONE"
    EXIT = "EXIT"
    POS = "POS"
    FITTING_ROOM = "FITTING_ROOM"

    @classmethod
    def parse(cls, value: str | None) -> "Personality":
        """Parse a personality string, treating empty or unknown values as NONE."""
        if not value:
            return cls.NONE
        try:
            return cls(str(value).upper())
        except ValueError:
            return cls.NONE


@dataclass
class Sensor:
    """
    A fixed RFID reader with one or more antenna ports.

    Attributes:
        device_id: Unique reader identity (e.g. RSP-150009)
        facility_id: Facility the reader belongs to
        personality: Role of the reader (exit, point of sale, ...)
        aliases: Antenna alias per port, indexed by port number
        is_in_deep_scan: Transient flag, never serialized
    """

    device_id: str
    facility_id: str = DEFAULT_FACILITY
    personality: Personality = Personality.NONE
    aliases: list[str] = field(default_factory=list)
    is_in_deep_scan: bool = field(default=False, compare=False, repr=False)

    @classmethod
    def new(cls, device_id: str) -> "Sensor":
        """Create a sensor with default facility, no personality and a port 0 alias."""
        sensor = cls(device_id=device_id)
        sensor.aliases = [sensor.antenna_alias(0)]
        return sensor

    @classmethod
    def from_config_notification(cls, notification: dict[str, Any]) -> "Sensor":
        """
        Create a sensor from a sensor configuration notification.

        Accepts either the full notification (with a "params" object) or the
        bare params dictionary.
        """
        params = notification.get("params", notification)
        return cls(
            device_id=params["device_id"],
            facility_id=params.get("facility_id") or DEFAULT_FACILITY,
            personality=Personality.parse(params.get("personality")),
            aliases=list(params.get("aliases") or []),
        )

    def antenna_alias(self, antenna_id: int) -> str:
        """
        Get the alias of an antenna port.

        Uses the configured alias for that port when there is one, otherwise
        falls back to "{device_id}-{antenna_id}" (e.g. RSP-150009-0).
        """
        if len(self.aliases) > antenna_id:
            return self.aliases[antenna_id]
        return f"{self.device_id}-{antenna_id}"

    def is_exit_sensor(self) -> bool:
        return self.personality == Personality.EXIT

    def is_pos_sensor(self) -> bool:
        return self.personality == Personality.POS

    def to_dict(self) -> dict[str, Any]:
        return {
            "device_id": self.device_id,
            "facility_id": self.facility_id,
            "personality": self.personality.value,
            "aliases": list(self.aliases),
        }
