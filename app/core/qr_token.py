"""Signed, time-limited check-in tokens embedded in event QR codes.

A token is an HS256 JWT carrying ``event_id`` and ``issued_at`` (milliseconds
since the epoch) plus an ``exp`` claim. The string itself is opaque outside
this module.

``verify_checkin_token`` never raises: a bad signature, an expired token or a
malformed payload all come back as ``None`` so callers can branch on it like
any other outcome.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from app.core import config
from app.core.constants import QR_TOKEN_ALGORITHM
from app.core.logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class QRPayload:
    event_id: int
    issued_at: int


def issue_checkin_token(event_id: int, now: Optional[datetime] = None) -> str:
    """Sign a check-in token for ``event_id`` valid for QR_TOKEN_TTL_HOURS."""
    now = now or datetime.now(timezone.utc)
    claims = {
        "event_id": event_id,
        "issued_at": int(now.timestamp() * 1000),
        "exp": now + timedelta(hours=config.settings.QR_TOKEN_TTL_HOURS),
    }
    return jwt.encode(claims, config.settings.QR_SECRET, algorithm=QR_TOKEN_ALGORITHM)


def _is_int(value) -> bool:
    # bool is an int subclass; True must not pass as event 1
    return isinstance(value, int) and not isinstance(value, bool)


def verify_checkin_token(token: str) -> Optional[QRPayload]:
    """Return the decoded payload, or None if the token is not usable."""
    if not token:
        return None

    try:
        claims = jwt.decode(
            token,
            config.settings.QR_SECRET,
            algorithms=[QR_TOKEN_ALGORITHM],
            options={"require": ["exp"]},
        )
    except jwt.ExpiredSignatureError:
        logger.debug("qr_token_expired")
        return None
    except jwt.PyJWTError as e:
        logger.debug("qr_token_rejected", error=str(e))
        return None

    event_id = claims.get("event_id")
    issued_at = claims.get("issued_at")

    if not _is_int(event_id) or event_id <= 0:
        logger.debug("qr_token_malformed", field="event_id")
        return None
    if not (_is_int(issued_at) or isinstance(issued_at, float)) or issued_at <= 0:
        logger.debug("qr_token_malformed", field="issued_at")
        return None

    return QRPayload(event_id=event_id, issued_at=int(issued_at))
