from __future__ import annotations
import logging
from datetime import datetime, date
from typing import Dict, List, Tuple
from icalendar import Calendar
from models import DAYS, Commitment


logger = logging.getLogger(__name__)


def _normalize_to_datetime(value) -> datetime | None:
    dt_value = getattr(value, "dt", value)

    # All-day events carry a plain date; they don't block specific hours
    if isinstance(dt_value, date) and not isinstance(dt_value, datetime):
        return None

    if isinstance(dt_value, datetime):
        if dt_value.tzinfo:
            dt_value = dt_value.astimezone().replace(tzinfo=None)
        return dt_value
    return None


def _hour_span(start: datetime, end: datetime) -> Tuple[int, int] | None:
    if end.date() != start.date():
        return None
    start_hour = start.hour
    end_hour = end.hour + (1 if (end.minute or end.second) else 0)
    if end_hour > 23 or end_hour <= start_hour:
        return None
    return start_hour, end_hour


def parse_ics_commitments(data: bytes) -> List[Commitment]:
    """
    Read timed events from an .ics file as weekly commitments.

    Each event blocks its start weekday from the start hour up to the next
    full hour after it ends. Events with the same title and hours are merged
    into one commitment spanning all their weekdays.
    """
    cal = Calendar.from_ical(data)
    merged: Dict[Tuple[str, int, int], List[str]] = {}

    for component in cal.walk():
        if component.name != "VEVENT":
            continue

        summary = str(component.get("SUMMARY", "Untitled")).strip() or "Untitled"
        dtstart = component.get("DTSTART")
        dtend = component.get("DTEND")

        if not dtstart or not dtend:
            continue

        start_dt = _normalize_to_datetime(dtstart)
        end_dt = _normalize_to_datetime(dtend)

        if not start_dt or not end_dt or end_dt <= start_dt:
            continue

        span = _hour_span(start_dt, end_dt)
        if span is None:
            logger.debug("Skipping event %r: does not fit in a single day", summary)
            continue

        day = DAYS[start_dt.weekday()]
        days = merged.setdefault((summary, span[0], span[1]), [])
        if day not in days:
            days.append(day)

    out = [
        Commitment(
            name=name,
            days=sorted(days, key=DAYS.index),
            start_hour=start_hour,
            end_hour=end_hour,
        )
        for (name, start_hour, end_hour), days in merged.items()
    ]
    return sorted(out, key=lambda c: (DAYS.index(c.days[0]), c.start_hour, c.name))
