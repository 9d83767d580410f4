"""
Tests for notification backends.
"""

import os
import tempfile
import unittest
from unittest import mock

import requests

from loss_prevention.processor.notifiers import (
    create_notifier,
    create_notifiers,
    format_title,
    with_retry,
)

CONTEXT = {
    "product_id": "P1",
    "epc": "3014ABC",
    "timestamp": 1700000000000,
    "folder": "/recordings/1700000000000_P1_3014ABC",
}


def response(status=200):
    resp = mock.Mock(spec=requests.Response)
    resp.status_code = status
    resp.ok = status < 400
    resp.text = ""
    return resp


class TestFormatTitle(unittest.TestCase):
    def test_default(self):
        self.assertEqual(format_title(None, CONTEXT), "Loss prevention: P1")

    def test_template(self):
        self.assertEqual(format_title("{epc} at {timestamp}", CONTEXT), "3014ABC at 1700000000000")

    def test_unknown_key(self):
        self.assertEqual(format_title("{zone}", CONTEXT), "{zone}")


class TestWithRetry(unittest.TestCase):
    """Test retry of transient failures."""

    @mock.patch("loss_prevention.processor.notifiers.base.time.sleep")
    def test_retries_server_errors(self, _sleep):
        func = mock.Mock(side_effect=[response(503), response(200)])

        self.assertEqual(with_retry(func).status_code, 200)
        self.assertEqual(func.call_count, 2)

    @mock.patch("loss_prevention.processor.notifiers.base.time.sleep")
    def test_client_error_not_retried(self, _sleep):
        func = mock.Mock(return_value=response(401))

        self.assertEqual(with_retry(func).status_code, 401)
        self.assertEqual(func.call_count, 1)

    @mock.patch("loss_prevention.processor.notifiers.base.time.sleep")
    def test_network_error_raised_after_retries(self, _sleep):
        func = mock.Mock(side_effect=requests.ConnectionError("down"))

        with self.assertRaises(requests.ConnectionError):
            with_retry(func, max_retries=2)
        self.assertEqual(func.call_count, 3)


class TestCreateNotifiers(unittest.TestCase):
    def test_unknown_type(self):
        with self.assertRaises(ValueError):
            create_notifier({"id": "x", "type": "pager"})

    def test_bad_entries_skipped(self):
        notifiers = create_notifiers(
            [
                {"id": "phone", "type": "ntfy", "topic": "store"},
                {"id": "broken", "type": "ntfy"},
                {"id": "hook", "type": "webhook", "url": "http://localhost/hook"},
            ]
        )

        self.assertEqual(sorted(notifiers), ["hook", "phone"])


class TestNtfyNotifier(unittest.TestCase):
    @mock.patch("loss_prevention.processor.notifiers.ntfy.requests.post")
    def test_sends_image_then_text(self, post):
        post.return_value = response(200)
        notifier = create_notifier({"id": "phone", "type": "ntfy", "topic": "store"})

        with tempfile.NamedTemporaryFile(suffix=".jpg", delete=False) as f:
            f.write(b"jpeg")
        try:
            self.assertTrue(notifier.send("message", f.name, CONTEXT))
        finally:
            os.unlink(f.name)

        self.assertEqual(post.call_count, 2)
        image_call, text_call = post.call_args_list
        self.assertEqual(image_call.args[0], "https://ntfy.sh/store")
        self.assertEqual(image_call.kwargs["data"], b"jpeg")
        self.assertEqual(text_call.kwargs["data"], b"message")

    @mock.patch("loss_prevention.processor.notifiers.ntfy.requests.post")
    def test_failure_reported(self, post):
        post.return_value = response(403)
        notifier = create_notifier({"id": "phone", "type": "ntfy", "topic": "store"})

        self.assertFalse(notifier.send("message", None, CONTEXT))


class TestWebhookNotifier(unittest.TestCase):
    @mock.patch("loss_prevention.processor.notifiers.webhook.requests.post")
    def test_payload(self, post):
        post.return_value = response(200)
        notifier = create_notifier(
            {"id": "hook", "type": "webhook", "url": "http://localhost/hook"}
        )

        self.assertTrue(notifier.send("message", None, CONTEXT))

        payload = post.call_args.kwargs["json"]
        self.assertEqual(payload["message"], "message")
        self.assertEqual(payload["recording"]["epc"], "3014ABC")
        self.assertNotIn("image_base64", payload)

    @mock.patch("loss_prevention.processor.notifiers.webhook.requests.post")
    def test_network_error(self, post):
        post.side_effect = requests.ConnectionError("down")
        notifier = create_notifier(
            {"id": "hook", "type": "webhook", "url": "http://localhost/hook"}
        )

        with mock.patch("loss_prevention.processor.notifiers.base.time.sleep"):
            self.assertFalse(notifier.send("message", None, CONTEXT))


if __name__ == "__main__":
    unittest.main()
