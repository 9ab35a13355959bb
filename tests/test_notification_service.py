"""Tests for webhook notifications."""

from __future__ import annotations

import pytest
import requests

from cdnsync.models.sync_result import SyncResult
from cdnsync.services import notification_service
from cdnsync.services.notification_service import NotificationService
from cdnsync.services.pipeline import ExitCode, PipelineReport, PipelineState


class FakeResponse:
    def __init__(self, status_code=200, body=None, text=""):
        self.status_code = status_code
        self._body = body
        self.text = text

    def json(self):
        if self._body is None:
            raise ValueError("no json")
        return self._body


@pytest.fixture
def posts(monkeypatch):
    sent = []

    def fake_post(url, json=None, timeout=None):
        sent.append({"url": url, "json": json, "timeout": timeout})
        return FakeResponse()

    monkeypatch.setattr(notification_service.requests, "post", fake_post)
    return sent


def _partial_report():
    result = SyncResult()
    result.record_success("index.html", 1)
    result.record_failure("img/hero.png", "AccessDenied: denied", attempts=1)
    return PipelineReport(PipelineState.FAILED, ExitCode.PARTIAL_UPLOAD_FAILURE,
                          result=result, error="1 of 2 upload(s) failed")


def _settings(**overrides):
    settings = {
        "notification_enabled": True,
        "notification_type": "discord",
        "notification_webhook_url": "https://hooks.example.test/abc",
    }
    settings.update(overrides)
    return settings


def test_disabled_by_default(posts):
    service = NotificationService({})
    assert not service.is_enabled()
    assert service.send_publish_notification(_partial_report(), "prd", "s3://b/") is False
    assert posts == []


def test_unknown_webhook_type_is_disabled():
    assert not NotificationService(_settings(notification_type="teams")).is_enabled()


def test_discord_payload(posts):
    service = NotificationService(_settings())

    assert service.send_publish_notification(_partial_report(), "prd", "s3://cdn/",
                                             username="octocat")

    content = posts[0]["json"]["content"]
    assert "prd" in content
    assert "img/hero.png: AccessDenied: denied" in content
    assert "Triggered by: octocat" in content


def test_slack_incoming_webhook_payload(posts):
    service = NotificationService(_settings(notification_type="slack"))

    assert service.send_publish_notification(_partial_report(), "stg", "s3://cdn/stg/")
    assert list(posts[0]["json"]) == ["text"]
    assert "Failed: 1" in posts[0]["json"]["text"]
    assert posts[0]["timeout"] == 10


def test_slack_error_body_returns_false(monkeypatch):
    monkeypatch.setattr(notification_service.requests, "post",
                        lambda *a, **kw: FakeResponse(200, body={"ok": False, "error": "invalid_token"}))
    assert NotificationService(_settings(notification_type="slack")).send_publish_notification(
        _partial_report(), "prd", "s3://cdn/") is False


def test_http_error_returns_false(monkeypatch):
    monkeypatch.setattr(notification_service.requests, "post",
                        lambda *a, **kw: FakeResponse(500, text="boom"))
    assert NotificationService(_settings()).send_publish_notification(
        _partial_report(), "prd", "s3://cdn/") is False


def test_request_exception_is_swallowed(monkeypatch):
    def boom(*args, **kwargs):
        raise requests.ConnectionError("no route")

    monkeypatch.setattr(notification_service.requests, "post", boom)
    assert NotificationService(_settings()).send_publish_notification(
        _partial_report(), "prd", "s3://cdn/") is False


def test_logs_under_cdnsync_namespace():
    assert notification_service.logger.name == "cdnsync.services.notification_service"
