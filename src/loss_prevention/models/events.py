"""
Tag event models - movement events from the inventory service and the
recording triggers derived from them.
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class LocationEntry:
    """One entry of a tag's location history."""

    location: str
    timestamp: int = 0
    source: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any] | str) -> "LocationEntry":
        if isinstance(data, str):
            return cls(location=data)
        return cls(
            location=data.get("location") or "",
            timestamp=data.get("timestamp", 0) or 0,
            source=data.get("source", "") or "",
        )


@dataclass
class TagMovementEvent:
    """
    A single tag event from an inventory data payload.

    Attributes:
        epc: Unique electronic product code of the tagged item
        product_id: SKU of the item
        event: Event kind ("moved", "arrival", "departed", ...)
        location_history: Locations, most recent first. Entry 0 is the
            antenna alias the tag is currently read at, entry 1 the one
            immediately before it.
    """

    epc: str
    product_id: str
    event: str
    location_history: list[LocationEntry] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TagMovementEvent":
        """
        Create from an inventory payload entry (epc_code or epc key).

        JSON nulls read as empty strings.
        """
        return cls(
            epc=data.get("epc_code") or data.get("epc") or "",
            product_id=data.get("product_id") or "",
            event=data.get("event") or "",
            location_history=[
                LocationEntry.from_dict(entry)
                for entry in data.get("location_history") or []
            ],
        )

    @property
    def current_location(self) -> str | None:
        return self.location_history[0].location if self.location_history else None

    @property
    def previous_location(self) -> str | None:
        if len(self.location_history) < 2:
            return None
        return self.location_history[1].location


@dataclass(frozen=True)
class RecordingTrigger:
    """Request to record an exiting item. Timestamp is epoch milliseconds."""

    product_id: str
    epc: str
    timestamp: int
