"""Tests for the webhook-backed and in-process collaborators."""

from unittest.mock import MagicMock, patch

import httpx
import pytest

from automation_core.collaborators import (
    HttpIntegrationSyncer,
    LoggingEmailSender,
    LoggingNotificationSender,
    UnconfiguredIntegrationSyncer,
    WebhookEmailSender,
    WebhookNotificationSender,
    WebhookPoster,
)

HOOK_URL = "https://hooks.example.com/automation"


def ok_response(body=None):
    response = MagicMock()
    response.raise_for_status = MagicMock()
    response.json = MagicMock(return_value=body or {})
    return response


def error_response(status_code=500):
    request = httpx.Request("POST", HOOK_URL)
    response = MagicMock()
    response.raise_for_status = MagicMock(
        side_effect=httpx.HTTPStatusError(
            "Server error", request=request, response=httpx.Response(status_code, request=request)
        )
    )
    return response


@pytest.fixture
def poster():
    return WebhookPoster(HOOK_URL, timeout=2.0, max_attempts=3, retry_wait_seconds=0)


@pytest.mark.asyncio
class TestWebhookPoster:
    @patch("httpx.AsyncClient.post")
    async def test_posts_json(self, mock_post, poster):
        mock_post.return_value = ok_response()

        await poster.post({"hello": "world"})

        mock_post.assert_called_once_with(HOOK_URL, json={"hello": "world"}, timeout=2.0)

    @patch("httpx.AsyncClient.post")
    async def test_retries_transport_errors(self, mock_post, poster):
        mock_post.side_effect = [httpx.ConnectError("refused"), ok_response()]

        await poster.post({"n": 1})

        assert mock_post.call_count == 2

    @patch("httpx.AsyncClient.post")
    async def test_gives_up_after_max_attempts(self, mock_post, poster):
        mock_post.side_effect = httpx.ConnectError("refused")

        with pytest.raises(httpx.ConnectError):
            await poster.post({"n": 1})

        assert mock_post.call_count == 3

    @patch("httpx.AsyncClient.post")
    async def test_status_errors_are_not_retried(self, mock_post, poster):
        mock_post.return_value = error_response(503)

        with pytest.raises(httpx.HTTPStatusError):
            await poster.post({"n": 1})

        assert mock_post.call_count == 1


@pytest.mark.asyncio
class TestWebhookSenders:
    @patch("httpx.AsyncClient.post")
    async def test_notification_envelope(self, mock_post, poster):
        mock_post.return_value = ok_response()
        sender = WebhookNotificationSender(poster)

        sent = await sender.send_notification({"recipient": "u-1", "message": "Hi"})

        assert sent is True
        payload = mock_post.call_args.kwargs["json"]
        assert payload == {
            "event": "notification.send",
            "notification": {"recipient": "u-1", "message": "Hi"},
        }

    @patch("httpx.AsyncClient.post")
    async def test_notification_rejected(self, mock_post, poster):
        mock_post.return_value = error_response(422)

        sent = await WebhookNotificationSender(poster).send_notification({"recipient": "u-1"})

        assert sent is False

    @patch("httpx.AsyncClient.post")
    async def test_email_envelope(self, mock_post, poster):
        mock_post.return_value = ok_response()

        sent = await WebhookEmailSender(poster).send_email({"recipient": "a@example.com"})

        assert sent is True
        assert mock_post.call_args.kwargs["json"]["event"] == "email.send"

    @patch("httpx.AsyncClient.post")
    async def test_email_rejected(self, mock_post, poster):
        mock_post.return_value = error_response(400)

        assert await WebhookEmailSender(poster).send_email({"recipient": "x"}) is False

    @patch("httpx.AsyncClient.post")
    async def test_transport_failure_propagates(self, mock_post, poster):
        mock_post.side_effect = httpx.ConnectError("refused")

        with pytest.raises(httpx.ConnectError):
            await WebhookEmailSender(poster).send_email({"recipient": "x"})


@pytest.mark.asyncio
class TestIntegrationSyncers:
    @patch("httpx.AsyncClient.post")
    async def test_http_syncer(self, mock_post, poster):
        mock_post.return_value = ok_response(
            {"success": True, "message": "Synced 4 events", "synced_items": 4}
        )

        result = await HttpIntegrationSyncer(poster).sync("cal-1")

        assert result.success is True
        assert result.synced_items == 4
        assert mock_post.call_args.args[0] == f"{HOOK_URL}/cal-1/sync"

    async def test_unconfigured_syncer(self):
        result = await UnconfiguredIntegrationSyncer().sync("cal-1")

        assert result.success is False
        assert result.synced_items == 0


@pytest.mark.asyncio
class TestLoggingSenders:
    async def test_notification_history_is_bounded(self):
        sender = LoggingNotificationSender(history_size=3)

        for n in range(5):
            assert await sender.send_notification({"recipient": "u-1", "message": f"m{n}"})

        assert [p["message"] for p in sender.sent] == ["m2", "m3", "m4"]

    async def test_email_history_is_bounded(self):
        sender = LoggingEmailSender(history_size=2)

        for n in range(4):
            await sender.send_email({"recipient": "lead@example.com", "subject": f"s{n}"})

        assert [p["subject"] for p in sender.sent] == ["s2", "s3"]

    async def test_default_history_size(self):
        assert LoggingNotificationSender().sent.maxlen == 100
        assert LoggingEmailSender().sent.maxlen == 100
