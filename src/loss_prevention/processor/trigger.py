"""
Trigger Handler - turns a recording trigger into a recording and a notification.

Each trigger is handled on its own daemon thread so the event path that
classified it is never blocked by capture, disk or network.
"""

import logging
import os
import threading
from typing import Any

from ..config.schemas import Config
from ..core.artifacts import ArtifactWriter
from ..core.recorder import RecordingOrchestrator
from ..core.session import RecordingResult
from ..models import RecordingTrigger
from ..utils.constants import ARTIFACT_WAIT_TIMEOUT, RECORDING_FOLDER_NAME, THUMBNAIL
from .notifiers import Notifier

logger = logging.getLogger(__name__)

NOTIFICATION_TEMPLATE = (
    "\nAn item was detected leaving. "
    "A video clip has been recorded for loss prevention purposes.\n\n"
    " Timestamp: {timestamp}\n"
    "Product ID: {product_id}\n"
    "       EPC: {epc}\n"
)


def recording_folder(root: str, trigger: RecordingTrigger) -> str:
    """Session folder for trigger under root: {timestamp}_{product_id}_{epc}."""
    name = RECORDING_FOLDER_NAME.format(
        timestamp=trigger.timestamp,
        product_id=trigger.product_id,
        epc=trigger.epc,
    )
    return os.path.join(root, name)


def format_notification(trigger: RecordingTrigger) -> str:
    return NOTIFICATION_TEMPLATE.format(
        timestamp=trigger.timestamp,
        product_id=trigger.product_id,
        epc=trigger.epc,
    )


class TriggerHandler:
    """
    Records every trigger it is given and notifies about completed recordings.

    Triggers that arrive while a recording is running are dropped by the
    orchestrator, so no notification is sent for them.
    """

    def __init__(
        self,
        config: Config,
        orchestrator: RecordingOrchestrator,
        notifiers: dict[str, Notifier] | None = None,
    ):
        self.config = config
        self.orchestrator = orchestrator
        self.notifiers = notifiers or {}

    def fire(self, trigger: RecordingTrigger) -> threading.Thread:
        """Handle trigger in the background; returns the started thread."""
        thread = threading.Thread(
            target=self.record_trigger,
            args=(trigger,),
            name=f"trigger:{trigger.epc}",
            daemon=True,
        )
        thread.start()
        logger.debug(f"Recording queued for {trigger.product_id} {trigger.epc}")
        return thread

    def record_trigger(self, trigger: RecordingTrigger) -> bool:
        """
        Record a clip for trigger and notify when it completed.

        Returns:
            True if a recording was made
        """
        try:
            return self._record_trigger(trigger)
        except Exception as e:
            logger.error(f"Error handling trigger {trigger}: {e}", exc_info=True)
            return False

    def _record_trigger(self, trigger: RecordingTrigger) -> bool:
        recording = self.config.recording
        folder = recording_folder(recording.output_root, trigger)

        result = self.orchestrator.record(
            self.config.camera.device,
            recording.duration_seconds,
            folder,
            recording.live_view,
        )
        if result.error is not None:
            logger.warning(f"error recording video: {result.error}")
            return False
        if not result.recorded:
            return False

        logger.info(f"Recorded {trigger.product_id} {trigger.epc} to {folder}")
        self._notify(trigger, folder, result)
        return True

    def _notify(
        self, trigger: RecordingTrigger, folder: str, result: RecordingResult
    ) -> None:
        notifications = self.config.notifications
        if not notifications.enabled or not self.notifiers:
            return

        image_path = None
        if notifications.attach_thumbnail:
            self._wait_for_artifacts(result.artifacts, folder)
            thumbnail = os.path.join(folder, THUMBNAIL)
            if os.path.isfile(thumbnail):
                image_path = thumbnail

        message = format_notification(trigger)
        context: dict[str, Any] = {
            "product_id": trigger.product_id,
            "epc": trigger.epc,
            "timestamp": trigger.timestamp,
            "folder": folder,
        }

        for notifier_id, notifier in self.notifiers.items():
            try:
                if notifier.send(message, image_path, context):
                    logger.debug(f"Notification sent via {notifier_id}")
                else:
                    logger.warning(f"Notification failed via {notifier_id}")
            except Exception as e:
                logger.error(f"Notifier {notifier_id} error: {e}")

    def _wait_for_artifacts(self, artifacts: ArtifactWriter | None, folder: str) -> None:
        if artifacts is not None and not artifacts.wait(ARTIFACT_WAIT_TIMEOUT):
            logger.warning(f"Artifacts still being written for {folder}")
