"""Expiry horizons for orders and renewal offers."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Union

from dateutil.relativedelta import relativedelta

Clock = Callable[[], datetime]

# Calendar arithmetic: Feb 29 + 2 years lands on Feb 28
WARRANTY_TERM = relativedelta(years=2)
OFFER_TERM = timedelta(days=30)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_MILLISECOND = timedelta(milliseconds=1)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ExpiryHorizon:
    """An expiry instant in every representation the record needs."""

    expires_at: datetime

    @property
    def warranty_expiry(self) -> int:
        """Epoch milliseconds."""
        return (self.expires_at - _EPOCH) // _MILLISECOND

    @property
    def ttl(self) -> int:
        """Epoch seconds, as used for automatic deletion."""
        return self.warranty_expiry // 1000

    @property
    def sk(self) -> str:
        """Sort key; lexical order matches chronological order."""
        return self.expires_at.isoformat(timespec="milliseconds")

    @property
    def display_date(self) -> str:
        """Human-facing date, e.g. 'Sat Oct 18 2028'."""
        return self.expires_at.strftime("%a %b %d %Y")


def compute_horizon(
    now: datetime,
    term: Union[relativedelta, timedelta],
) -> ExpiryHorizon:
    """Add `term` to `now` and normalise to UTC with millisecond precision."""
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    expires_at = (now + term).astimezone(timezone.utc)
    expires_at = expires_at.replace(microsecond=expires_at.microsecond // 1000 * 1000)
    return ExpiryHorizon(expires_at=expires_at)


def warranty_horizon(now: datetime) -> ExpiryHorizon:
    return compute_horizon(now, WARRANTY_TERM)


def offer_horizon(now: datetime) -> ExpiryHorizon:
    return compute_horizon(now, OFFER_TERM)
