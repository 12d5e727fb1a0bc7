"""Turn the --date / --time strings into a single target instant."""

from __future__ import annotations

import logging
import re
from datetime import date, datetime, time

from endzeit.errors import InvalidDateFormat, InvalidTimeFormat
from endzeit.models import TargetSpec

log = logging.getLogger(__name__)

_DATE_FORMAT = "%Y-%m-%d"
_TIME_RE = re.compile(r"^(\d{1,2})(?::(\d{2}))?(?::(\d{2}))?$")


def parse_date(value: str) -> date:
    """Parse a YYYY-MM-DD string."""
    try:
        return datetime.strptime(value.strip(), _DATE_FORMAT).date()
    except ValueError as exc:
        raise InvalidDateFormat(
            f"Invalid date {value!r}, use YYYY-MM-DD."
        ) from exc


def parse_time(value: str) -> time:
    """Parse HH:MM:SS, HH:MM or HH. Missing minutes/seconds default to zero."""
    match = _TIME_RE.match(value.strip())
    if match is None:
        raise InvalidTimeFormat(f"Invalid time {value!r}, use HH[:MM[:SS]].")
    hours, minutes, seconds = (int(part) if part else 0 for part in match.groups())
    try:
        return time(hours, minutes, seconds)
    except ValueError as exc:
        raise InvalidTimeFormat(
            f"Invalid time {value!r}: {exc}."
        ) from exc


def _localize(naive: datetime) -> datetime:
    # Interpret as local wall-clock time so DST offsets match the target day.
    return naive.astimezone()


def resolve_target(spec: TargetSpec, now: datetime) -> datetime:
    """Combine the spec with ``now`` into one aware target instant.

    A missing date falls back to ``now``'s calendar date, a missing time to its
    time of day. With neither given the target is ``now`` itself.
    """
    target_date = parse_date(spec.date) if spec.date is not None else None
    target_time = parse_time(spec.time) if spec.time is not None else None

    if target_date is None and target_time is None:
        target = now
    else:
        if target_date is None:
            target_date = now.date()
        if target_time is None:
            target_time = now.time()
        target = _localize(datetime.combine(target_date, target_time))
    log.debug("Resolved date=%r time=%r to %s", spec.date, spec.time, target.isoformat())
    return target
