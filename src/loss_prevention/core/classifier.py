"""
Movement Trigger Classifier

Decides whether a batch of tag events contains an item leaving the store.
A tag counts as exiting when it is read at an EXIT sensor and was previously
read at a known sensor that is not an EXIT sensor. Tags lingering in range of
an exit sensor therefore do not fire again on the next poll.
"""

import logging
import re
import time
from collections.abc import Callable, Iterable

from ..models import RecordingTrigger, TagMovementEvent
from ..utils.constants import EVENT_MOVED, MIN_LOCATION_HISTORY
from .registry import SensorRegistry

logger = logging.getLogger(__name__)


def _now_millis() -> int:
    return int(time.time() * 1000)


class MovementTriggerClassifier:
    """
    Fires at most one recording trigger per batch of tag events.

    The first event in batch order that passes every check wins, so batches
    must be handed over in the order they were received.
    """

    def __init__(
        self,
        registry: SensorRegistry,
        sku_filter: re.Pattern,
        epc_filter: re.Pattern,
        fire: Callable[[RecordingTrigger], None],
        clock: Callable[[], int] = _now_millis,
    ):
        """
        Args:
            registry: Sensor registry used to resolve antenna aliases
            sku_filter: Pattern a product id must match
            epc_filter: Pattern an EPC must match
            fire: Called once with the trigger; expected to return immediately
            clock: Epoch milliseconds source for the trigger timestamp
        """
        self.registry = registry
        self.sku_filter = sku_filter
        self.epc_filter = epc_filter
        self.fire = fire
        self.clock = clock

    def is_exiting(self, tag: TagMovementEvent) -> bool:
        """Run every check against a single tag event."""
        if tag.event != EVENT_MOVED:
            logger.debug(
                f"skipping non-moved event: epc: {tag.epc} (sku: {tag.product_id}), event: {tag.event}"
            )
            return False

        if len(tag.location_history) < MIN_LOCATION_HISTORY:
            logger.debug(
                f"skipping tag with not enough location history: epc: {tag.epc} (sku: {tag.product_id})"
            )
            return False

        if not self.sku_filter.search(tag.product_id):
            logger.debug(
                f"skipping tag that does not match sku filter: epc: {tag.epc} "
                f"(sku: {tag.product_id}), filter: {self.sku_filter.pattern}"
            )
            return False

        if not self.epc_filter.search(tag.epc):
            logger.debug(
                f"skipping tag that does not match epc filter: epc: {tag.epc} "
                f"(sku: {tag.product_id}), filter: {self.epc_filter.pattern}"
            )
            return False

        current = self.registry.resolve(tag.location_history[0].location)
        logger.debug(f"current: {current}")
        if current is None or not current.is_exit_sensor():
            logger.debug(
                f"skipping non-exiting tag: epc: {tag.epc} (sku: {tag.product_id})"
            )
            return False

        previous = self.registry.resolve(tag.location_history[1].location)
        logger.debug(f"previous: {previous}")
        if previous is None or previous.is_exit_sensor():
            logger.debug(
                f"skipping exiting tag that was exiting before as well: epc: {tag.epc} (sku: {tag.product_id})"
            )
            return False

        return True

    def handle_batch(self, events: Iterable[TagMovementEvent]) -> RecordingTrigger | None:
        """
        Check a batch of events and fire a trigger for the first exiting tag.

        Returns:
            The trigger that was fired, or None if no event qualified
        """
        for tag in events:
            if not self.is_exiting(tag):
                continue

            logger.debug(
                f"triggering on exiting tag: epc: {tag.epc} (sku: {tag.product_id})"
            )
            trigger = RecordingTrigger(
                product_id=tag.product_id, epc=tag.epc, timestamp=self.clock()
            )
            self.fire(trigger)
            return trigger

        return None
