from __future__ import annotations
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import List, Tuple
from icalendar import Calendar, Event as IcsEvent
from models import DAYS, Schedule, TimeBlock
from paths import get_timezone


def _merge_blocks(blocks: List[TimeBlock]) -> List[Tuple[int, int, TimeBlock]]:
    """
    Group consecutive blocks with the same activity and subject.

    Returns (offset of first hour from wake-up, number of hours, first block)
    for each run, skipping Free time.
    """
    runs: List[Tuple[int, int, TimeBlock]] = []
    for i, block in enumerate(blocks):
        if block.activity == "Free":
            continue
        if runs:
            start, length, first = runs[-1]
            if (
                start + length == i
                and first.activity == block.activity
                and first.subject == block.subject
            ):
                runs[-1] = (start, length + 1, first)
                continue
        runs.append((i, 1, block))
    return runs


def _to_utc(wall_clock: datetime, tz: tzinfo) -> datetime:
    # Hours skipped by a DST jump resolve to the first valid instant after it
    return wall_clock.replace(tzinfo=tz).astimezone(timezone.utc)


def _summary(block: TimeBlock) -> str:
    if block.activity == "Study":
        return f"Study: {block.subject}"
    if block.activity == "Review":
        return "Review: all subjects"
    return block.subject or block.activity


def schedule_to_ics(
    schedule: Schedule,
    week_start: date,
    tz: tzinfo | None = None,
) -> bytes:
    cal = Calendar()
    cal.add("PRODID", "-//StudySync//Local//")
    cal.add("version", "2.0")
    cal.add("X-WR-CALNAME", "Study Schedule")

    tz = tz or get_timezone()
    monday = week_start - timedelta(days=week_start.weekday())

    for day_index, day in enumerate(DAYS):
        blocks = schedule.weekly_schedule.get(day, [])
        if not blocks:
            continue
        # Day starts at wake-up; hours after midnight belong to the next date
        first_day = monday + timedelta(days=day_index)
        day_start = datetime.combine(first_day, time(hour=blocks[0].start_hour))

        for offset, hours, block in _merge_blocks(blocks):
            start_time = _to_utc(day_start + timedelta(hours=offset), tz)
            end_time = _to_utc(day_start + timedelta(hours=offset + hours), tz)

            event = IcsEvent()
            uid = f"{day.lower()}-{start_time.strftime('%Y%m%dT%H%M')}"
            event.add("uid", f"{uid}@studysync")
            event.add("summary", _summary(block))
            event.add("dtstart", start_time)
            event.add("dtend", end_time)
            event.add("categories", [block.activity])
            if block.activity == "Study":
                tasks = [
                    t.description for t in schedule.daily_tasks.get(day, [])
                    if t.subject == block.subject
                ]
                if tasks:
                    event.add("description", "; ".join(dict.fromkeys(tasks)))
            cal.add_component(event)

    return cal.to_ical()
