# tests/test_calendar_export.py
from datetime import date, datetime, timedelta
from unittest.mock import MagicMock, patch

import pytest
import requests

from study_planner.calendar_export import (
    TOKEN_URL, ExportResult, build_authorization_url, connect_calendar, disconnect_calendar, get_credentials,
    is_calendar_connected, push_plan_to_calendar, save_credentials,
)
from study_planner.errors import ExportError
from study_planner.models import TimeOfDay
from study_planner.planner import build_plan
from study_planner.plans import save_plan


def _seed_plan(db_path, owner="alice", days=1):
    items = build_plan(date(2024, 3, 4), ["Math", "Physics"], days, TimeOfDay(9, 0), TimeOfDay(17, 0), 420)
    return save_plan(db_path, owner, items)


def _connect(db_path, owner="alice", expired=False):
    expiry = datetime.now() + (timedelta(hours=-1) if expired else timedelta(hours=1))
    save_credentials(db_path, owner, "refresh-1", access_token="tok-1", token_expiry=expiry.isoformat())


def _push(db_path, **kwargs):
    kwargs.setdefault("client_id", "client")
    kwargs.setdefault("client_secret", "secret")
    return push_plan_to_calendar(db_path, "alice", **kwargs)


def test_connection_state(tmp_db):
    assert is_calendar_connected(tmp_db, "alice") is False
    _connect(tmp_db)
    assert is_calendar_connected(tmp_db, "alice") is True
    disconnect_calendar(tmp_db, "alice")
    assert is_calendar_connected(tmp_db, "alice") is False


def test_push_requires_connection(tmp_db):
    _seed_plan(tmp_db)
    with pytest.raises(ExportError) as exc:
        _push(tmp_db)
    assert exc.value.credential is True


def test_push_requires_client_config(tmp_db, monkeypatch):
    monkeypatch.setattr("study_planner.config.GOOGLE_CLIENT_ID", None)
    _connect(tmp_db)
    _seed_plan(tmp_db)
    with pytest.raises(ExportError, match="configuration missing"):
        push_plan_to_calendar(tmp_db, "alice")


def test_push_requires_plan(tmp_db):
    _connect(tmp_db)
    with patch("study_planner.calendar_export.requests.post") as post:
        with pytest.raises(ExportError, match="No study plan"):
            _push(tmp_db)
    post.assert_not_called()


def test_push_creates_one_event_per_item(tmp_db):
    _connect(tmp_db)
    plan = _seed_plan(tmp_db)
    with patch("study_planner.calendar_export.requests.post") as post:
        result = _push(tmp_db, time_zone="Europe/Berlin")
    assert result == ExportResult(created=5, total=5, errors=[])
    assert result.ok
    assert post.call_count == 5
    first = post.call_args_list[0]
    assert first.kwargs["headers"] == {"Authorization": "Bearer tok-1"}
    assert first.kwargs["json"] == {
        "summary": plan.items[0].title,
        "start": {"dateTime": "2024-03-04T09:00:00", "timeZone": "Europe/Berlin"},
        "end": {"dateTime": "2024-03-04T11:00:00", "timeZone": "Europe/Berlin"},
    }


def test_expired_token_is_refreshed_first(tmp_db):
    _connect(tmp_db, expired=True)
    _seed_plan(tmp_db)
    refresh = MagicMock()
    refresh.json.return_value = {"access_token": "tok-2", "expires_in": 3599}
    with patch("study_planner.calendar_export.requests.post", return_value=refresh) as post:
        result = _push(tmp_db)
    assert post.call_args_list[0].args[0] == TOKEN_URL
    assert post.call_args_list[0].kwargs["data"]["grant_type"] == "refresh_token"
    assert post.call_args_list[1].kwargs["headers"] == {"Authorization": "Bearer tok-2"}
    assert result.created == 5
    creds = get_credentials(tmp_db, "alice")
    assert creds["access_token"] == "tok-2"
    assert creds["refresh_token"] == "refresh-1"
    assert datetime.fromisoformat(creds["token_expiry"]) > datetime.now()


def test_refresh_failure_aborts_batch(tmp_db):
    _connect(tmp_db, expired=True)
    _seed_plan(tmp_db)
    failed = MagicMock()
    failed.raise_for_status.side_effect = requests.HTTPError("400 invalid_grant")
    with patch("study_planner.calendar_export.requests.post", return_value=failed) as post:
        with pytest.raises(ExportError) as exc:
            _push(tmp_db)
    assert exc.value.credential is True
    assert post.call_count == 1


def test_per_event_failures_are_collected(tmp_db):
    _connect(tmp_db)
    _seed_plan(tmp_db)
    ok = MagicMock()
    side_effect = [requests.ConnectionError("boom"), ok, ok, ok, ok]
    with patch("study_planner.calendar_export.requests.post", side_effect=side_effect):
        result = _push(tmp_db)
    assert result.created == 4
    assert result.total == 5
    assert result.errors == ["Study Math: boom"]
    assert result.ok


def test_all_events_failing_reports_failure_with_sample_errors(tmp_db):
    _connect(tmp_db)
    _seed_plan(tmp_db, days=2)
    with patch(
        "study_planner.calendar_export.requests.post",
        side_effect=requests.HTTPError("403 Forbidden"),
    ):
        result = _push(tmp_db)
    assert result.created == 0
    assert result.total == 10
    assert len(result.errors) == 5
    assert result.ok is False


def test_push_defaults_to_configured_time_zone(tmp_db, monkeypatch):
    monkeypatch.setattr("study_planner.config.DEFAULT_TIMEZONE", "Asia/Kolkata")
    _connect(tmp_db)
    _seed_plan(tmp_db)
    with patch("study_planner.calendar_export.requests.post") as post:
        _push(tmp_db)
    body = post.call_args_list[0].kwargs["json"]
    assert body["start"]["timeZone"] == "Asia/Kolkata"
    assert body["end"]["timeZone"] == "Asia/Kolkata"


def test_authorization_url_requests_offline_calendar_access():
    url = build_authorization_url("client", "http://localhost")
    assert url.startswith("https://accounts.google.com/o/oauth2/v2/auth?")
    assert "client_id=client" in url
    assert "access_type=offline" in url
    assert "calendar.events" in url


def test_connect_with_refresh_token_needs_no_request(tmp_db):
    with patch("study_planner.calendar_export.requests.post") as post:
        connect_calendar(tmp_db, "alice", refresh_token=" refresh-9 ")
    post.assert_not_called()
    creds = get_credentials(tmp_db, "alice")
    assert creds["refresh_token"] == "refresh-9"
    assert creds["access_token"] is None


def test_connect_exchanges_authorization_code(tmp_db):
    token = MagicMock()
    token.json.return_value = {"access_token": "tok-1", "refresh_token": "refresh-1", "expires_in": 3599}
    with patch("study_planner.calendar_export.requests.post", return_value=token) as post:
        connect_calendar(
            tmp_db, "alice", code="auth-code",
            client_id="client", client_secret="secret", redirect_uri="http://localhost:8765",
        )
    assert post.call_args.args[0] == TOKEN_URL
    data = post.call_args.kwargs["data"]
    assert data["grant_type"] == "authorization_code"
    assert data["code"] == "auth-code"
    assert data["redirect_uri"] == "http://localhost:8765"
    creds = get_credentials(tmp_db, "alice")
    assert creds["access_token"] == "tok-1"
    assert creds["refresh_token"] == "refresh-1"
    expiry = datetime.fromisoformat(creds["token_expiry"])
    assert datetime.now() < expiry <= datetime.now() + timedelta(minutes=55)


def test_connect_without_refresh_token_in_response_fails(tmp_db):
    token = MagicMock()
    token.json.return_value = {"access_token": "tok-1", "expires_in": 3599}
    with patch("study_planner.calendar_export.requests.post", return_value=token):
        with pytest.raises(ExportError, match="refresh token") as exc:
            connect_calendar(tmp_db, "alice", code="auth-code", client_id="client")
    assert exc.value.credential is True
    assert get_credentials(tmp_db, "alice") is None


def test_connect_rejected_code_raises_credential_error(tmp_db):
    rejected = MagicMock()
    rejected.raise_for_status.side_effect = requests.HTTPError("400 invalid_grant")
    with patch("study_planner.calendar_export.requests.post", return_value=rejected):
        with pytest.raises(ExportError) as exc:
            connect_calendar(tmp_db, "alice", code="stale", client_id="client")
    assert exc.value.credential is True
    assert is_calendar_connected(tmp_db, "alice") is False


def test_connect_requires_code_or_token(tmp_db):
    with pytest.raises(ExportError, match="required"):
        connect_calendar(tmp_db, "alice", code="  ")
