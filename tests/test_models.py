"""
Tests for data models
"""

import unittest

from loss_prevention.models import (
    DEFAULT_FACILITY,
    DetectionParams,
    Detector,
    Personality,
    Rect,
    Sensor,
    TagMovementEvent,
    color_from_rgb,
)


class TestSensor(unittest.TestCase):
    """Test Sensor dataclass functionality."""

    def test_new_sensor_defaults(self):
        """Test a new sensor gets the default facility and a port 0 alias."""
        sensor = Sensor.new("RSP-150009")

        self.assertEqual(sensor.facility_id, DEFAULT_FACILITY)
        self.assertEqual(sensor.personality, Personality.NONE)
        self.assertEqual(sensor.aliases, ["RSP-150009-0"])

    def test_antenna_alias_configured(self):
        sensor = Sensor("RSP-150009", aliases=["FrontDoor", "BackDoor"])

        self.assertEqual(sensor.antenna_alias(0), "FrontDoor")
        self.assertEqual(sensor.antenna_alias(1), "BackDoor")

    def test_antenna_alias_fallback(self):
        """Test ports without an alias fall back to device_id-port."""
        sensor = Sensor("RSP-150009", aliases=["FrontDoor"])

        self.assertEqual(sensor.antenna_alias(3), "RSP-150009-3")

    def test_personality_checks(self):
        exit_sensor = Sensor("RSP-1", personality=Personality.EXIT)
        pos_sensor = Sensor("RSP-2", personality=Personality.POS)

        self.assertTrue(exit_sensor.is_exit_sensor())
        self.assertFalse(exit_sensor.is_pos_sensor())
        self.assertTrue(pos_sensor.is_pos_sensor())
        self.assertFalse(pos_sensor.is_exit_sensor())

    def test_from_config_notification(self):
        """Test building a sensor from a config notification."""
        sensor = Sensor.from_config_notification(
            {
                "jsonrpc": "2.0",
                "method": "sensor_config_notification",
                "params": {
                    "device_id": "RSP-150009",
                    "facility_id": "Store-1",
                    "personality": "exit",
                    "aliases": ["FrontDoor"],
                },
            }
        )

        self.assertEqual(sensor.device_id, "RSP-150009")
        self.assertEqual(sensor.facility_id, "Store-1")
        self.assertEqual(sensor.personality, Personality.EXIT)
        self.assertEqual(sensor.aliases, ["FrontDoor"])

    def test_unknown_personality_is_none(self):
        self.assertEqual(Personality.parse("GATEWAY"), Personality.NONE)
        self.assertEqual(Personality.parse(None), Personality.NONE)

    def test_deep_scan_not_serialized(self):
        sensor = Sensor("RSP-1", is_in_deep_scan=True)

        self.assertNotIn("is_in_deep_scan", sensor.to_dict())
        self.assertEqual(sensor, Sensor("RSP-1"))


class TestTagMovementEvent(unittest.TestCase):
    """Test tag event decoding."""

    def test_from_dict(self):
        event = TagMovementEvent.from_dict(
            {
                "epc_code": "3014ABC",
                "product_id": "00888446671424",
                "event": "moved",
                "location_history": [
                    {"location": "FrontDoor", "timestamp": 2, "source": "fixed"},
                    {"location": "SalesFloor", "timestamp": 1, "source": "fixed"},
                ],
            }
        )

        self.assertEqual(event.epc, "3014ABC")
        self.assertEqual(event.current_location, "FrontDoor")
        self.assertEqual(event.previous_location, "SalesFloor")

    def test_short_history(self):
        event = TagMovementEvent.from_dict(
            {"epc": "E1", "product_id": "P1", "event": "arrival",
             "location_history": ["FrontDoor"]}
        )

        self.assertEqual(event.current_location, "FrontDoor")
        self.assertIsNone(event.previous_location)


class TestDetectionModels(unittest.TestCase):
    """Test regions, colors and detection parameters."""

    def test_color_from_rgb(self):
        """Test 0xRRGGBB is converted to BGR."""
        self.assertEqual(color_from_rgb(0xFF0000), (0, 0, 255))
        self.assertEqual(color_from_rgb(0x00FF00), (0, 255, 0))
        self.assertEqual(color_from_rgb(0x0000FF), (255, 0, 0))

    def test_rect_scaled(self):
        rect = Rect(2, 3, 4, 5).scaled(4)

        self.assertEqual(rect, Rect(8, 12, 16, 20))
        self.assertEqual(rect.bottom_right, (24, 32))

    def test_params_default(self):
        self.assertTrue(DetectionParams().is_default())
        self.assertFalse(DetectionParams(scale_factor=1.1).is_default())

    def test_params_window_sizes(self):
        params = DetectionParams(1.4, 4, 0, 0.05, 0.05, 0.8, 0.8)

        self.assertEqual(params.min_size(1280, 720), (64, 36))
        self.assertEqual(params.max_size(1280, 720), (1024, 576))

    def test_detector_high_water_mark(self):
        """Test observe() only reports a new maximum."""
        detector = Detector("face", "face.xml")

        results = [detector.observe(n) for n in [1, 1, 3, 2, 3]]

        self.assertEqual(results, [True, False, True, False, False])
        self.assertEqual(detector.highest_count_seen, 3)

    def test_reserve_indices_continue(self):
        detector = Detector("face", "face.xml")

        self.assertEqual(list(detector.reserve_indices(1)), [0])
        self.assertEqual(list(detector.reserve_indices(3)), [1, 2, 3])
        self.assertEqual(detector.artifacts_written, 4)


if __name__ == "__main__":
    unittest.main()
