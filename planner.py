from __future__ import annotations
import logging
import random
from fractions import Fraction
from math import floor
from typing import Dict, List, Optional, Sequence, Tuple
from models import (
    DAYS,
    Commitment,
    Profile,
    ReviewSlot,
    Schedule,
    Subject,
    SubjectProgress,
    Task,
    TimeBlock,
)
from techniques import CONTINGENCY_PLANS, break_patterns, recommend_techniques


logger = logging.getLogger(__name__)

REVIEW_SUBJECT = "All Subjects"
TASK_DURATION = "1 hour"


class ScheduleError(ValueError):
    pass


class AmbiguousBoundaryError(ScheduleError):
    """Wake and sleep hour are equal: zero hours or a full day, so we refuse to guess."""


def available_hours(wake_hour: int, sleep_hour: int) -> int:
    if wake_hour == sleep_hour:
        raise AmbiguousBoundaryError(
            f"Wake-up and bedtime are both {wake_hour:02d}:00; pick different hours."
        )
    if sleep_hour > wake_hour:
        return sleep_hour - wake_hour
    return (24 - wake_hour) + sleep_hour


def build_day_grid(
    day: str,
    wake_hour: int,
    sleep_hour: int,
    commitments: Sequence[Commitment],
) -> List[TimeBlock]:
    blocks: List[TimeBlock] = []
    for i in range(available_hours(wake_hour, sleep_hour)):
        hour = (wake_hour + i) % 24
        block = TimeBlock(day=day, start_hour=hour, end_hour=(hour + 1) % 24)
        for c in commitments:
            if c.covers(day, hour):
                block.activity = "Commitment"
                block.subject = c.name
                break
        blocks.append(block)
    return blocks


def priority_score(s: Subject) -> float:
    # higher = claims free hours first
    return s.difficulty * s.urgency / s.proficiency


def rank_subjects(subjects: Sequence[Subject]) -> List[Subject]:
    # sorted() is stable, so equal scores keep profile order
    return sorted(subjects, key=priority_score, reverse=True)


def _round_half_up(value: Fraction) -> int:
    return floor(value + Fraction(1, 2))


def daily_targets(subjects: Sequence[Subject], study_hours_per_day: float) -> Dict[str, int]:
    """
    Hours per day each subject should get, keyed by subject name.

    Weekly hours are split in proportion to difficulty, then divided back
    over seven days and rounded half up. Exact fractions keep 1.5 -> 2.
    """
    total_difficulty = sum(s.difficulty for s in subjects)
    if total_difficulty == 0:
        return {}
    weekly_hours = Fraction(str(study_hours_per_day)) * 7
    targets = {}
    for s in subjects:
        subject_weekly = Fraction(s.difficulty, total_difficulty) * weekly_hours
        targets[s.name] = _round_half_up(subject_weekly / 7)
    return targets


def allocate_day(
    blocks: List[TimeBlock],
    ranked: Sequence[Subject],
    targets: Dict[str, int],
    all_subject_names: List[str],
) -> Tuple[List[TimeBlock], Optional[ReviewSlot]]:
    """
    Turn free blocks of one day into Study blocks, then one into Review.

    Free blocks are a single pool shared by all subjects, claimed front to
    back in ranking order. Returns the blocks newly tagged Study (in claim
    order) and the review slot, if a free block was left over.
    """
    pool = [b for b in blocks if b.activity == "Free"]
    cursor = 0
    studied: List[TimeBlock] = []

    for s in ranked:
        want = targets.get(s.name, 0)
        take = pool[cursor:cursor + want]
        for block in take:
            block.activity = "Study"
            block.subject = s.name
        studied.extend(take)
        cursor += len(take)

    review = None
    if cursor < len(pool):
        block = pool[cursor]
        block.activity = "Review"
        block.subject = REVIEW_SUBJECT
        review = ReviewSlot(day=block.day, start_hour=block.start_hour, subjects=list(all_subject_names))

    return studied, review


def synthesize_tasks(
    study_blocks: Sequence[TimeBlock],
    subjects_by_name: Dict[str, Subject],
    rng: random.Random,
) -> List[Task]:
    tasks: List[Task] = []
    for block in study_blocks:
        subject = subjects_by_name[block.subject]
        topic = rng.choice(subject.topics)
        tasks.append(Task(
            subject=subject.name,
            description=f"Study {topic}",
            duration=TASK_DURATION,
            completed=False,
        ))
    return tasks


def generate_schedule(profile: Profile, rng: random.Random | None = None) -> Schedule:
    """
    Build a full week from one profile snapshot.

    Nothing is returned unless every day was built; any error aborts the
    whole run. Pass a seeded ``random.Random`` for reproducible task text.
    """
    rng = rng or random.Random()
    subjects = list(profile.subjects)
    subject_names = [s.name for s in subjects]
    subjects_by_name = {s.name: s for s in subjects}
    ranked = rank_subjects(subjects)
    targets = daily_targets(subjects, profile.study_hours_per_day)
    if not targets:
        logger.info("No subjects in profile; skipping study allocation")

    weekly_schedule: Dict[str, List[TimeBlock]] = {}
    daily_tasks: Dict[str, List[Task]] = {}
    review_slots: List[ReviewSlot] = []

    for day in DAYS:
        try:
            blocks = build_day_grid(day, profile.wake_hour, profile.sleep_hour, profile.commitments_on(day))
        except AmbiguousBoundaryError:
            logger.warning("Aborting generation: wake hour equals sleep hour (%s)", profile.wake_hour)
            raise

        study_blocks, review = allocate_day(blocks, ranked, targets, subject_names)
        tasks = synthesize_tasks(study_blocks, subjects_by_name, rng)
        logger.debug(
            "%s: %d blocks, %d study, review=%s",
            day, len(blocks), len(study_blocks), review is not None,
        )

        weekly_schedule[day] = blocks
        daily_tasks[day] = tasks
        if review is not None:
            review_slots.append(review)

    techniques = recommend_techniques(profile.learning_style, profile.preferred_methods)

    schedule = Schedule(
        weekly_schedule=weekly_schedule,
        daily_tasks=daily_tasks,
        study_techniques=techniques,
        break_patterns=break_patterns(),
        review_slots=review_slots,
        progress_tracking=[SubjectProgress(name=name) for name in subject_names],
        contingency_plans=list(CONTINGENCY_PLANS),
    )
    logger.info(
        "Generated schedule: %d subjects, %d study hours, %d review slots",
        len(subjects),
        sum(len(t) for t in daily_tasks.values()),
        len(review_slots),
    )
    return schedule
