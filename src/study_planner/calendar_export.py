"""Google Calendar export of the current study plan."""
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from urllib.parse import urlencode

import requests
from loguru import logger

from study_planner import config
from study_planner.db import get_connection
from study_planner.errors import ExportError
from study_planner.plans import get_latest_plan

AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
TOKEN_URL = "https://oauth2.googleapis.com/token"
CALENDAR_SCOPE = "https://www.googleapis.com/auth/calendar.events"
EVENTS_URL = "https://www.googleapis.com/calendar/v3/calendars/{calendar_id}/events"
# Stored expiry is kept slightly short of Google's one hour
TOKEN_LIFETIME = timedelta(minutes=55)
MAX_REPORTED_ERRORS = 5


@dataclass
class ExportResult:
    created: int
    total: int
    errors: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not (self.created == 0 and self.errors)


def get_credentials(db_path: str, owner: str) -> dict | None:
    conn = get_connection(db_path)
    row = conn.execute("SELECT * FROM calendar_credentials WHERE owner = ?", (owner,)).fetchone()
    conn.close()
    return dict(row) if row else None


def save_credentials(
    db_path: str,
    owner: str,
    refresh_token: str | None,
    access_token: str | None = None,
    token_expiry: str | None = None,
) -> None:
    conn = get_connection(db_path)
    conn.execute(
        """INSERT INTO calendar_credentials (owner, access_token, refresh_token, token_expiry)
        VALUES (?, ?, ?, ?)
        ON CONFLICT(owner) DO UPDATE SET
            access_token=excluded.access_token,
            refresh_token=COALESCE(excluded.refresh_token, calendar_credentials.refresh_token),
            token_expiry=excluded.token_expiry""",
        (owner, access_token, refresh_token, token_expiry),
    )
    conn.commit()
    conn.close()


def is_calendar_connected(db_path: str, owner: str) -> bool:
    creds = get_credentials(db_path, owner)
    return bool(creds and (creds["refresh_token"] or creds["access_token"]))


def disconnect_calendar(db_path: str, owner: str) -> None:
    conn = get_connection(db_path)
    conn.execute("DELETE FROM calendar_credentials WHERE owner = ?", (owner,))
    conn.commit()
    conn.close()


def build_authorization_url(client_id: str, redirect_uri: str) -> str:
    params = {
        "client_id": client_id,
        "response_type": "code",
        "redirect_uri": redirect_uri,
        "scope": CALENDAR_SCOPE,
        "access_type": "offline",  # Required to get refresh token
        "prompt": "consent",  # Force consent screen to get refresh token
    }
    return f"{AUTH_URL}?{urlencode(params)}"


def exchange_code_for_token(
    *,
    client_id: str,
    client_secret: str | None,
    code: str,
    redirect_uri: str,
) -> dict:
    """Exchange a Google authorization code for access and refresh tokens.

    Args:
        client_id: Google application client ID
        client_secret: Google application client secret
        code: Authorization code pasted back from the consent page
        redirect_uri: Redirect URI used in authorization (must match exactly)

    Raises:
        requests.HTTPError: If Google rejects the code
    """
    logger.info("Exchanging Google authorization code for access token")
    resp = requests.post(
        TOKEN_URL,
        data={
            "client_id": client_id,
            "client_secret": client_secret or "",
            "code": code,
            "grant_type": "authorization_code",
            "redirect_uri": redirect_uri,
        },
        timeout=10,
    )
    resp.raise_for_status()
    return resp.json()


def connect_calendar(
    db_path: str,
    owner: str,
    *,
    code: str | None = None,
    refresh_token: str | None = None,
    client_id: str | None = None,
    client_secret: str | None = None,
    redirect_uri: str | None = None,
) -> None:
    """Store Google credentials for ``owner``.

    A refresh token is stored as given and exchanged for an access token on
    the next push. An authorization code is exchanged right away.
    """
    refresh_token = (refresh_token or "").strip()
    code = (code or "").strip()
    if refresh_token:
        save_credentials(db_path, owner, refresh_token)
        logger.info(f"Stored Google refresh token for owner={owner}")
        return
    if not code:
        raise ExportError("An authorization code or refresh token is required", credential=True)

    client_id = client_id or config.GOOGLE_CLIENT_ID
    client_secret = client_secret or config.GOOGLE_CLIENT_SECRET
    if not client_id:
        raise ExportError("Google OAuth configuration missing")
    try:
        token_data = exchange_code_for_token(
            client_id=client_id,
            client_secret=client_secret,
            code=code,
            redirect_uri=redirect_uri or config.GOOGLE_REDIRECT_URI,
        )
        access_token = token_data["access_token"]
        lifetime = min(timedelta(seconds=int(token_data.get("expires_in") or 3600)), TOKEN_LIFETIME)
    except (requests.RequestException, KeyError, ValueError) as e:
        logger.error(f"Google OAuth token exchange failed for owner={owner}: {e}")
        raise ExportError("Failed to connect Google Calendar. Please try again.", credential=True) from e
    if not token_data.get("refresh_token"):
        raise ExportError(
            "Google did not return a refresh token. Remove the app's access and connect again.",
            credential=True,
        )
    save_credentials(
        db_path, owner, token_data["refresh_token"],
        access_token=access_token,
        token_expiry=(datetime.now() + lifetime).isoformat(),
    )
    logger.info(f"Google Calendar connected for owner={owner}")


def refresh_access_token(*, refresh_token: str, client_id: str, client_secret: str | None) -> dict:
    """Exchange a refresh token for a new access token.

    Raises:
        requests.HTTPError: If Google rejects the refresh
    """
    logger.info("Refreshing Google access token")
    resp = requests.post(
        TOKEN_URL,
        data={
            "client_id": client_id,
            "client_secret": client_secret or "",
            "refresh_token": refresh_token,
            "grant_type": "refresh_token",
        },
        timeout=10,
    )
    resp.raise_for_status()
    return resp.json()


def _token_expired(token_expiry: str | None, now: datetime) -> bool:
    if not token_expiry:
        return True
    try:
        return now >= datetime.fromisoformat(token_expiry)
    except ValueError:
        return True


def _valid_access_token(db_path: str, owner: str, creds: dict, client_id: str, client_secret: str | None) -> str:
    access_token = creds["access_token"]
    now = datetime.now()
    if access_token and not _token_expired(creds["token_expiry"], now):
        return access_token
    try:
        token_data = refresh_access_token(
            refresh_token=creds["refresh_token"],
            client_id=client_id,
            client_secret=client_secret,
        )
        access_token = token_data["access_token"]
    except (requests.RequestException, KeyError, ValueError) as e:
        logger.error(f"Google token refresh failed for owner={owner}: {e}")
        raise ExportError(
            "Failed to refresh Google token. Please reconnect your Google account.", credential=True
        ) from e
    save_credentials(
        db_path, owner, None,
        access_token=access_token,
        token_expiry=(now + TOKEN_LIFETIME).isoformat(),
    )
    return access_token


def _event_body(title: str, start: datetime, end: datetime, time_zone: str) -> dict:
    return {
        "summary": title or "Study Session",
        "start": {"dateTime": start.isoformat(), "timeZone": time_zone},
        "end": {"dateTime": end.isoformat(), "timeZone": time_zone},
    }


def push_plan_to_calendar(
    db_path: str,
    owner: str,
    time_zone: str | None = None,
    calendar_id: str = "primary",
    client_id: str | None = None,
    client_secret: str | None = None,
) -> ExportResult:
    """Create one calendar event per item of the owner's latest plan.

    Per-event failures are collected and reported; credential and
    configuration problems raise ExportError before any event is sent.
    Events are stamped with ``time_zone``, defaulting to the configured
    zone (the system zone unless STUDY_PLANNER_TZ is set).
    """
    time_zone = time_zone or config.DEFAULT_TIMEZONE
    creds = get_credentials(db_path, owner)
    if not creds or not creds["refresh_token"]:
        raise ExportError(
            "Google Calendar not connected. Please connect your Google account first.", credential=True
        )
    client_id = client_id or config.GOOGLE_CLIENT_ID
    client_secret = client_secret or config.GOOGLE_CLIENT_SECRET
    if not client_id:
        raise ExportError("Google OAuth configuration missing")

    access_token = _valid_access_token(db_path, owner, creds, client_id, client_secret)

    plan = get_latest_plan(db_path, owner)
    if not plan or not plan.items:
        raise ExportError("No study plan found. Please create a study plan first.")

    url = EVENTS_URL.format(calendar_id=calendar_id)
    headers = {"Authorization": f"Bearer {access_token}"}
    created = 0
    errors = []
    for item in plan.items:
        if not item.end > item.start:
            errors.append(f"Invalid date for: {item.title}")
            continue
        try:
            resp = requests.post(
                url,
                json=_event_body(item.title, item.start, item.end, time_zone),
                headers=headers,
                timeout=10,
            )
            resp.raise_for_status()
            created += 1
        except requests.RequestException as e:
            logger.error(f"Error creating calendar event for {item.title}: {e}")
            errors.append(f"{item.title}: {e}")

    logger.info(f"Calendar export for owner={owner}: {created}/{len(plan.items)} events created")
    return ExportResult(created=created, total=len(plan.items), errors=errors[:MAX_REPORTED_ERRORS])
