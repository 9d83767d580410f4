"""
Sensor registry - resolves antenna aliases to the sensor that owns them.

Snapshots are replaced wholesale. The alias index for a new snapshot is built
before it is swapped in, so readers always see one complete snapshot.
"""

import logging
import threading
from collections.abc import Iterable
from typing import Any

from ..models import Sensor

logger = logging.getLogger(__name__)


class SensorRegistry:
    """Lookup structure over the known sensors and their antenna aliases."""

    def __init__(self, sensors: Iterable[Sensor] = ()):
        self._lock = threading.Lock()
        self._by_device: dict[str, Sensor] = {}
        self._by_alias: dict[str, Sensor] = {}
        self.replace(sensors)

    @classmethod
    def from_config(cls, sensor_configs: Iterable[dict[str, Any]]) -> "SensorRegistry":
        """Build a registry from sensor configuration entries."""
        return cls(Sensor.from_config_notification(cfg) for cfg in sensor_configs)

    def replace(self, sensors: Iterable[Sensor]) -> None:
        """Replace the whole snapshot. Never merges with the previous one."""
        by_device: dict[str, Sensor] = {}
        by_alias: dict[str, Sensor] = {}

        for sensor in sensors:
            if sensor.device_id in by_device:
                logger.warning(f"Duplicate sensor in snapshot: {sensor.device_id}")
            by_device[sensor.device_id] = sensor
            for alias in sensor.aliases:
                if alias in by_alias and by_alias[alias] is not sensor:
                    logger.warning(
                        f"Alias {alias} used by {by_alias[alias].device_id} "
                        f"and {sensor.device_id}"
                    )
                by_alias[alias] = sensor

        with self._lock:
            self._by_device = by_device
            self._by_alias = by_alias

        logger.debug(f"Sensor registry loaded: {len(by_device)} sensor(s)")

    def resolve(self, antenna_alias: str | None) -> Sensor | None:
        """
        Find the sensor an antenna alias belongs to.

        Configured aliases win. Otherwise "{device_id}-{port}" resolves to the
        device when that port has no configured alias.
        """
        with self._lock:
            by_alias = self._by_alias
            by_device = self._by_device

        if not antenna_alias:
            return None

        sensor = by_alias.get(antenna_alias)
        if sensor is not None:
            return sensor

        device_id, sep, port = antenna_alias.rpartition("-")
        if not sep or not port.isdigit():
            return None
        sensor = by_device.get(device_id)
        if sensor is None or int(port) < len(sensor.aliases):
            return None
        return sensor

    def get(self, device_id: str) -> Sensor | None:
        with self._lock:
            return self._by_device.get(device_id)

    @property
    def sensors(self) -> list[Sensor]:
        with self._lock:
            return list(self._by_device.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._by_device)
