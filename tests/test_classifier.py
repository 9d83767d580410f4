"""
Tests for the movement trigger classifier.
"""

import re
import unittest

from loss_prevention.core import MovementTriggerClassifier, SensorRegistry
from loss_prevention.models import Personality, RecordingTrigger, Sensor, TagMovementEvent


def tag(epc="E1", product_id="P1", event="moved", history=("FrontDoor", "SalesFloor")):
    return TagMovementEvent.from_dict(
        {
            "epc_code": epc,
            "product_id": product_id,
            "event": event,
            "location_history": [{"location": loc} for loc in history],
        }
    )


class TestMovementTriggerClassifier(unittest.TestCase):
    """Test exit classification over tag event batches."""

    def setUp(self):
        self.registry = SensorRegistry(
            [
                Sensor("RSP-1", personality=Personality.EXIT, aliases=["FrontDoor"]),
                Sensor("RSP-2", personality=Personality.EXIT, aliases=["BackDoor"]),
                Sensor("RSP-3", aliases=["SalesFloor"]),
                Sensor("RSP-4", personality=Personality.POS, aliases=["Register"]),
            ]
        )
        self.fired = []
        self.classifier = self.make_classifier()

    def make_classifier(self, sku=".*", epc=".*"):
        return MovementTriggerClassifier(
            self.registry,
            re.compile(sku),
            re.compile(epc),
            self.fired.append,
            clock=lambda: 1700000000000,
        )

    def test_exit_from_sales_floor_fires(self):
        trigger = self.classifier.handle_batch([tag()])

        self.assertEqual(trigger, RecordingTrigger("P1", "E1", 1700000000000))
        self.assertEqual(self.fired, [trigger])

    def test_exit_from_pos_fires(self):
        self.classifier.handle_batch([tag(history=("BackDoor", "Register"))])

        self.assertEqual(len(self.fired), 1)

    def test_first_qualifying_event_wins(self):
        """Test only one trigger per batch, for the first match in order."""
        batch = [
            tag(epc="E0", event="arrival"),
            tag(epc="E1"),
            tag(epc="E2"),
        ]

        trigger = self.classifier.handle_batch(batch)

        self.assertEqual(trigger.epc, "E1")
        self.assertEqual(len(self.fired), 1)

    def test_non_moved_event_ignored(self):
        self.assertIsNone(self.classifier.handle_batch([tag(event="departed")]))
        self.assertEqual(self.fired, [])

    def test_short_history_ignored(self):
        self.assertIsNone(self.classifier.handle_batch([tag(history=("FrontDoor",))]))

    def test_sku_and_epc_filters(self):
        classifier = self.make_classifier(sku="^P9", epc="^30")

        self.assertIsNone(classifier.handle_batch([tag(product_id="P1", epc="3001")]))
        self.assertIsNone(classifier.handle_batch([tag(product_id="P9", epc="E1")]))
        self.assertIsNotNone(classifier.handle_batch([tag(product_id="P9", epc="3001")]))

    def test_filter_matches_anywhere(self):
        classifier = self.make_classifier(sku="446")

        self.assertIsNotNone(classifier.handle_batch([tag(product_id="00888446671424")]))

    def test_current_not_exit_ignored(self):
        self.assertIsNone(
            self.classifier.handle_batch([tag(history=("SalesFloor", "Register"))])
        )

    def test_exit_to_exit_ignored(self):
        """Test a tag that was already at an exit does not fire again."""
        self.assertIsNone(
            self.classifier.handle_batch([tag(history=("FrontDoor", "BackDoor"))])
        )
        self.assertIsNone(
            self.classifier.handle_batch([tag(history=("FrontDoor", "FrontDoor"))])
        )

    def test_unknown_locations_ignored(self):
        self.assertIsNone(
            self.classifier.handle_batch([tag(history=("Warehouse", "SalesFloor"))])
        )
        self.assertIsNone(
            self.classifier.handle_batch([tag(history=("FrontDoor", "Warehouse"))])
        )

    def test_fallback_alias_resolves(self):
        self.assertIsNotNone(
            self.classifier.handle_batch([tag(history=("RSP-1-2", "RSP-3-1"))])
        )

    def test_empty_batch(self):
        self.assertIsNone(self.classifier.handle_batch([]))


if __name__ == "__main__":
    unittest.main()
