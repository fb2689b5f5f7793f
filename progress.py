from __future__ import annotations
import threading
from fractions import Fraction
from math import floor
from datetime import date, datetime
from typing import List, Optional, Sequence
from models import Schedule, Subject, SubjectProgress, Task


PROGRESS_STEP = 10


class ProgressStore:
    """
    Dashboard-side bookkeeping on a generated schedule.

    Mutates ``Task.completed`` and the per-subject progress entries in
    place. Updates are serialized with a lock since a UI may fire them from
    more than one thread.
    """

    def __init__(self, schedule: Schedule):
        self.schedule = schedule
        self._lock = threading.Lock()

    def _progress_for(self, subject: str) -> Optional[SubjectProgress]:
        for entry in self.schedule.progress_tracking:
            if entry.name == subject:
                return entry
        return None

    def toggle_task(self, day: str, index: int, now: datetime | None = None) -> Task:
        with self._lock:
            task = self.schedule.daily_tasks[day][index]
            was_completed = task.completed
            task.completed = not was_completed

            entry = self._progress_for(task.subject)
            if entry is not None:
                if was_completed:
                    entry.progress = max(0, entry.progress - PROGRESS_STEP)
                else:
                    entry.progress = min(100, entry.progress + PROGRESS_STEP)
                    entry.last_studied = now or datetime.now()
            return task

    def overall_progress(self) -> int:
        subjects = self.schedule.progress_tracking
        if not subjects:
            return 0
        # Half up, so a 2.5% mean shows as 3%
        mean = Fraction(sum(s.progress for s in subjects), len(subjects))
        return floor(mean + Fraction(1, 2))

    def completed_count(self) -> int:
        return sum(1 for tasks in self.schedule.daily_tasks.values() for t in tasks if t.completed)

    def total_count(self) -> int:
        return sum(len(tasks) for tasks in self.schedule.daily_tasks.values())


def upcoming_deadlines(subjects: Sequence[Subject], today: date) -> List[dict]:
    deadlines = []
    for s in subjects:
        if s.due_date:
            deadlines.append({"type": "Assignment", "subject": s.name, "date": s.due_date})
        if s.exam_date:
            deadlines.append({"type": "Exam", "subject": s.name, "date": s.exam_date})

    for d in deadlines:
        d["days_until"] = (d["date"] - today).days

    deadlines.sort(key=lambda x: x["date"])
    return deadlines
