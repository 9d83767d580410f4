"""
Tests for trigger handling (recording folder, notification dispatch).
"""

import os
import shutil
import tempfile
import unittest

from loss_prevention.config import parse_config
from loss_prevention.core import RecordingResult
from loss_prevention.models import RecordingTrigger
from loss_prevention.processor import TriggerHandler, format_notification, recording_folder
from loss_prevention.processor.notifiers import Notifier

TRIGGER = RecordingTrigger(product_id="00888446671424", epc="3014ABC", timestamp=1700000000000)


class StubOrchestrator:
    def __init__(self, result):
        self.result = result
        self.calls = []

    def record(self, video_device, seconds, output_folder, live_view=False):
        self.calls.append((video_device, seconds, output_folder, live_view))
        return self.result


class ThumbnailOnWait:
    """Artifact writer stand-in whose thumbnail only lands once waited on."""

    def __init__(self, folder):
        self.folder = folder
        self.timeouts = []

    def wait(self, timeout=None):
        self.timeouts.append(timeout)
        os.makedirs(self.folder, exist_ok=True)
        with open(os.path.join(self.folder, "thumb.jpg"), "wb") as f:
            f.write(b"jpeg")
        return True


class StubNotifier(Notifier):
    def __init__(self, notifier_id="stub", ok=True, error=None):
        self._id = notifier_id
        self.ok = ok
        self.error = error
        self.sent = []

    @property
    def id(self):
        return self._id

    def send(self, message, image_path, context):
        if self.error is not None:
            raise self.error
        self.sent.append((message, image_path, context))
        return self.ok


class TestRecordingFolder(unittest.TestCase):
    """Test recording folder layout."""

    def test_folder_name(self):
        self.assertEqual(
            recording_folder("/recordings", TRIGGER),
            "/recordings/1700000000000_00888446671424_3014ABC",
        )

    def test_trailing_slash(self):
        self.assertEqual(
            recording_folder("/recordings/", TRIGGER),
            "/recordings/1700000000000_00888446671424_3014ABC",
        )


class TestNotificationText(unittest.TestCase):
    def test_format(self):
        text = format_notification(TRIGGER)

        self.assertIn("An item was detected leaving.", text)
        self.assertIn(" Timestamp: 1700000000000\n", text)
        self.assertIn("Product ID: 00888446671424\n", text)
        self.assertIn("       EPC: 3014ABC\n", text)


class TestTriggerHandler(unittest.TestCase):
    """Test recording and notification for a trigger."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.config = parse_config(
            {
                "camera": {"device": "2"},
                "recording": {"output_root": self.temp_dir, "duration_seconds": 5},
                "notifications": {"enabled": True},
            }
        )
        self.folder = recording_folder(self.temp_dir, TRIGGER)

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def test_records_with_configured_settings(self):
        orchestrator = StubOrchestrator(RecordingResult(recorded=True))
        handler = TriggerHandler(self.config, orchestrator)

        self.assertTrue(handler.record_trigger(TRIGGER))
        self.assertEqual(orchestrator.calls, [("2", 5.0, self.folder, False)])

    def test_notifies_after_recording(self):
        os.makedirs(self.folder)
        with open(os.path.join(self.folder, "thumb.jpg"), "wb") as f:
            f.write(b"jpeg")
        notifier = StubNotifier()
        handler = TriggerHandler(
            self.config,
            StubOrchestrator(RecordingResult(recorded=True)),
            {"stub": notifier},
        )

        handler.record_trigger(TRIGGER)

        message, image_path, context = notifier.sent[0]
        self.assertEqual(message, format_notification(TRIGGER))
        self.assertEqual(image_path, os.path.join(self.folder, "thumb.jpg"))
        self.assertEqual(context["epc"], "3014ABC")
        self.assertEqual(context["folder"], self.folder)

    def test_waits_on_result_artifacts(self):
        """Test the thumbnail is attached once this recording's writes finish."""
        artifacts = ThumbnailOnWait(self.folder)
        notifier = StubNotifier()
        handler = TriggerHandler(
            self.config,
            StubOrchestrator(RecordingResult(recorded=True, artifacts=artifacts)),
            {"stub": notifier},
        )

        handler.record_trigger(TRIGGER)

        self.assertEqual(len(artifacts.timeouts), 1)
        self.assertEqual(notifier.sent[0][1], os.path.join(self.folder, "thumb.jpg"))

    def test_missing_thumbnail_sends_text_only(self):
        notifier = StubNotifier()
        handler = TriggerHandler(
            self.config,
            StubOrchestrator(RecordingResult(recorded=True)),
            {"stub": notifier},
        )

        handler.record_trigger(TRIGGER)

        self.assertIsNone(notifier.sent[0][1])

    def test_no_notification_when_busy(self):
        """Test a dropped recording (already recording) sends nothing."""
        notifier = StubNotifier()
        handler = TriggerHandler(
            self.config,
            StubOrchestrator(RecordingResult(recorded=False)),
            {"stub": notifier},
        )

        self.assertFalse(handler.record_trigger(TRIGGER))
        self.assertEqual(notifier.sent, [])

    def test_no_notification_on_error(self):
        notifier = StubNotifier()
        handler = TriggerHandler(
            self.config,
            StubOrchestrator(RecordingResult(recorded=False, error=OSError("no camera"))),
            {"stub": notifier},
        )

        self.assertFalse(handler.record_trigger(TRIGGER))
        self.assertEqual(notifier.sent, [])

    def test_notifier_failure_does_not_stop_others(self):
        broken = StubNotifier("broken", error=RuntimeError("down"))
        working = StubNotifier("working")
        handler = TriggerHandler(
            self.config,
            StubOrchestrator(RecordingResult(recorded=True)),
            {"broken": broken, "working": working},
        )

        self.assertTrue(handler.record_trigger(TRIGGER))
        self.assertEqual(len(working.sent), 1)

    def test_notifications_disabled(self):
        config = parse_config({"recording": {"output_root": self.temp_dir}})
        notifier = StubNotifier()
        handler = TriggerHandler(
            config, StubOrchestrator(RecordingResult(recorded=True)), {"stub": notifier}
        )

        handler.record_trigger(TRIGGER)

        self.assertEqual(notifier.sent, [])

    def test_fire_runs_in_background(self):
        orchestrator = StubOrchestrator(RecordingResult(recorded=True))
        handler = TriggerHandler(self.config, orchestrator)

        thread = handler.fire(TRIGGER)
        thread.join(5)

        self.assertFalse(thread.is_alive())
        self.assertEqual(len(orchestrator.calls), 1)
        self.assertTrue(thread.daemon)


if __name__ == "__main__":
    unittest.main()
