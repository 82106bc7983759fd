"""Unit tests for src.inspection.http_client covering deadlines and response checks.

Execute with coverage to validate networking helpers:
    pytest tests/test_http_client.py --maxfail=1 -v --cov=src.inspection.http_client --cov-report=term-missing
"""

import json
from typing import Any, Dict, Optional
from unittest.mock import MagicMock, patch

import pytest
import requests

from src.inspection import http_client
from src.inspection.errors import (
    DeadlineExceededError,
    FetchError,
    MalformedResponseError,
    RateLimitError,
)


def _make_resp(status: int = 200, payload: Any = None, headers: Optional[Dict[str, str]] = None):
    resp = MagicMock()
    resp.status_code = status
    resp.headers = headers or {}
    resp.json.return_value = payload
    resp.text = json.dumps(payload)
    return resp


def _request(**overrides):
    kwargs = dict(
        provider="GitHub",
        headers={"Authorization": "token t"},
        deadline=http_client.Deadline(0),
        rate_limit_marker="API rate limit exceeded",
        rate_limit_message="Rate limit exceeded for GitHub commits.",
    )
    kwargs.update(overrides)
    return http_client.request_json("https://api.github.com/x", **kwargs)


def test_deadline_without_budget_uses_request_timeout():
    deadline = http_client.Deadline(0)
    assert deadline.remaining() is None
    assert deadline.timeout_for(30) == 30


def test_deadline_caps_timeout_and_expires():
    now = {"t": 100.0}
    deadline = http_client.Deadline(10, clock=lambda: now["t"])
    assert deadline.timeout_for(30) == 10
    now["t"] = 105.0
    assert deadline.timeout_for(30) == 5
    now["t"] = 111.0
    with pytest.raises(DeadlineExceededError):
        deadline.timeout_for(30)


def test_log_http_error_handles_json_and_text(capsys):
    resp = _make_resp(404, {"message": "Not Found"})
    http_client.log_http_error(resp, "url")
    assert "Not Found" in capsys.readouterr().out

    resp = _make_resp(500)
    resp.json.side_effect = ValueError()
    resp.text = "plain"
    http_client.log_http_error(resp, "url")
    assert "plain" in capsys.readouterr().out


def test_log_progress_only_when_verbose(monkeypatch, capsys):
    monkeypatch.setattr(http_client, "VERBOSE", False)
    http_client.log_progress("quiet")
    assert capsys.readouterr().err == ""
    monkeypatch.setattr(http_client, "VERBOSE", True)
    http_client.log_progress("page 1")
    assert "[fetch] page 1" in capsys.readouterr().err


def test_has_message_marker_in_object_and_list():
    marker = "API rate limit exceeded"
    assert http_client.has_message_marker({"message": "API rate limit exceeded for 1.2.3.4"}, marker)
    assert http_client.has_message_marker([{"sha": "a"}, {"message": marker}], marker)
    assert not http_client.has_message_marker([{"sha": "a"}], marker)
    assert not http_client.has_message_marker("text", marker)


@patch("src.inspection.http_client.SESSION")
def test_request_json_success_passes_params_and_timeout(mock_session):
    mock_session.get.return_value = _make_resp(200, [{"sha": "a"}])
    payload, resp = _request(params={"page": 2})
    assert payload == [{"sha": "a"}]
    kwargs = mock_session.get.call_args.kwargs
    assert kwargs["params"] == {"page": 2}
    assert kwargs["timeout"] == http_client.REQUEST_TIMEOUT
    assert kwargs["headers"]["Authorization"] == "token t"


@patch("src.inspection.http_client.SESSION")
def test_request_json_rate_limit_marker_in_body(mock_session):
    mock_session.get.return_value = _make_resp(403, {"message": "API rate limit exceeded for x"})
    with pytest.raises(RateLimitError) as excinfo:
        _request()
    assert "Rate limit exceeded" in str(excinfo.value)


@patch("src.inspection.http_client.SESSION")
def test_request_json_rate_limit_from_headers(mock_session):
    resp = _make_resp(403, None, headers={"X-RateLimit-Remaining": "0"})
    resp.json.side_effect = ValueError()
    mock_session.get.return_value = resp
    with pytest.raises(RateLimitError):
        _request()


@patch("src.inspection.http_client.SESSION")
def test_request_json_null_body_is_malformed(mock_session):
    mock_session.get.return_value = _make_resp(200, None)
    with pytest.raises(MalformedResponseError) as excinfo:
        _request()
    assert "null response from GitHub" in str(excinfo.value)


@patch("src.inspection.http_client.SESSION")
def test_request_json_non_json_body_is_malformed(mock_session):
    resp = _make_resp(200)
    resp.json.side_effect = ValueError("no json")
    mock_session.get.return_value = resp
    with pytest.raises(MalformedResponseError) as excinfo:
        _request()
    assert str(excinfo.value) == "Received invalid JSON response from GitHub."


@patch("src.inspection.http_client.log_http_error")
@patch("src.inspection.http_client.SESSION")
def test_request_json_error_status_raises_fetch_error(mock_session, mock_log):
    mock_session.get.return_value = _make_resp(404, {"message": "Not Found"})
    with pytest.raises(FetchError) as excinfo:
        _request()
    assert excinfo.value.status_code == 404
    assert not isinstance(excinfo.value, RateLimitError)
    mock_log.assert_called_once()


@patch("src.inspection.http_client.SESSION")
def test_request_json_transport_error(mock_session):
    mock_session.get.side_effect = requests.ConnectionError("boom")
    with pytest.raises(FetchError):
        _request()


@patch("src.inspection.http_client.SESSION")
def test_request_json_after_deadline_sends_nothing(mock_session):
    now = {"t": 0.0}
    deadline = http_client.Deadline(1, clock=lambda: now["t"])
    now["t"] = 2.0
    with pytest.raises(DeadlineExceededError):
        _request(deadline=deadline)
    mock_session.get.assert_not_called()


def test_has_message_marker_can_skip_list_items():
    marker = "Rate limit exceeded"
    assert not http_client.has_message_marker([{"message": f"Show '{marker}' banner"}], marker, scan_items=False)
    assert http_client.has_message_marker({"message": marker}, marker, scan_items=False)
