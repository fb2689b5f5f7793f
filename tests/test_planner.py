import random

import pytest

from models import DAYS, Commitment, Profile, Subject
from planner import (
    AmbiguousBoundaryError,
    REVIEW_SUBJECT,
    allocate_day,
    available_hours,
    build_day_grid,
    daily_targets,
    generate_schedule,
    rank_subjects,
)


def _subject(name, difficulty=3, proficiency=3, urgency=3, topics=None):
    return Subject(
        name=name,
        topics=topics or [f"{name} basics"],
        difficulty=difficulty,
        proficiency=proficiency,
        urgency=urgency,
    )


def test_available_hours_same_day_and_overnight():
    assert available_hours(7, 23) == 16
    assert available_hours(22, 6) == 8
    assert available_hours(23, 0) == 1
    assert available_hours(0, 23) == 23


def test_wake_equal_to_sleep_is_rejected():
    with pytest.raises(AmbiguousBoundaryError):
        available_hours(8, 8)
    with pytest.raises(ValueError):
        generate_schedule(Profile(wake_hour=8, sleep_hour=8, subjects=[_subject("Math")]))


@pytest.mark.parametrize("wake, sleep", [(7, 23), (22, 2), (0, 1), (23, 22), (12, 0)])
def test_grid_is_contiguous_partition_of_waking_hours(wake, sleep):
    blocks = build_day_grid("Monday", wake, sleep, [])
    assert len(blocks) == available_hours(wake, sleep)
    assert blocks[0].start_hour == wake
    assert blocks[-1].end_hour == sleep
    for prev, nxt in zip(blocks, blocks[1:]):
        assert prev.end_hour == nxt.start_hour
    assert all(b.activity == "Free" and b.subject is None for b in blocks)


def test_grid_wraps_past_midnight():
    blocks = build_day_grid("Friday", 22, 2, [])
    assert [b.start_hour for b in blocks] == [22, 23, 0, 1]
    assert [b.end_hour for b in blocks] == [23, 0, 1, 2]


def test_commitment_hours_are_tagged_half_open():
    lecture = Commitment(name="Lecture", days=["Monday"], start_hour=9, end_hour=12)
    blocks = build_day_grid("Monday", 8, 14, [lecture])
    tags = {b.start_hour: (b.activity, b.subject) for b in blocks}
    assert tags[8] == ("Free", None)
    assert tags[9] == tags[10] == tags[11] == ("Commitment", "Lecture")
    assert tags[12] == ("Free", None)

    tuesday = build_day_grid("Tuesday", 8, 14, [lecture])
    assert all(b.activity == "Free" for b in tuesday)


def test_rank_subjects_by_priority_keeps_profile_order_on_ties():
    a = _subject("A", difficulty=2, urgency=2, proficiency=1)  # 4
    b = _subject("B", difficulty=4, urgency=1, proficiency=1)  # 4
    c = _subject("C", difficulty=5, urgency=5, proficiency=1)  # 25
    d = _subject("D", difficulty=1, urgency=1, proficiency=5)  # 0.2
    assert [s.name for s in rank_subjects([a, b, c, d])] == ["C", "A", "B", "D"]


def test_daily_targets_follow_difficulty_share():
    subjects = [_subject("A", difficulty=3), _subject("B", difficulty=5)]
    assert daily_targets(subjects, 4) == {"A": 2, "B": 3}


def test_daily_targets_round_half_up():
    # 2.5 hours a day would be 2 with banker's rounding
    assert daily_targets([_subject("Only", difficulty=1)], 2.5) == {"Only": 3}
    assert daily_targets([_subject("Only", difficulty=1)], 0.5) == {"Only": 1}
    assert daily_targets([_subject("Only", difficulty=1)], 0.4) == {"Only": 0}


def test_daily_targets_empty_without_subjects():
    assert daily_targets([], 4) == {}


def test_scenario_higher_difficulty_claims_first(two_subject_profile):
    schedule = generate_schedule(two_subject_profile, rng=random.Random(1))

    for day in DAYS:
        blocks = schedule.weekly_schedule[day]
        assert len(blocks) == 16
        assert [b.subject for b in blocks[:6]] == [
            "Physics", "Physics", "Physics", "History", "History", REVIEW_SUBJECT,
        ]
        assert [b.activity for b in blocks[:6]] == ["Study"] * 5 + ["Review"]
        assert all(b.activity == "Free" for b in blocks[6:])
        assert len(schedule.daily_tasks[day]) == 5

    assert len(schedule.review_slots) == 7
    assert schedule.review_slots[0].day == "Monday"
    assert schedule.review_slots[0].start_hour == 12
    assert schedule.review_slots[0].subjects == ["History", "Physics"]


def test_shared_pool_exhausted_by_higher_priority_subject():
    profile = Profile(
        wake_hour=9,
        sleep_hour=12,
        study_hours_per_day=3,
        subjects=[_subject("Low", difficulty=1), _subject("High", difficulty=5)],
    )
    schedule = generate_schedule(profile, rng=random.Random(0))

    for day in DAYS:
        blocks = schedule.weekly_schedule[day]
        assert [b.subject for b in blocks] == ["High", "High", "High"]
        assert {t.subject for t in schedule.daily_tasks[day]} == {"High"}
    assert schedule.review_slots == []


def test_commitments_shrink_free_pool_per_day():
    profile = Profile(
        wake_hour=8,
        sleep_hour=12,
        study_hours_per_day=1,
        subjects=[_subject("Math")],
        commitments=[Commitment(name="Gym", days=["Monday"], start_hour=8, end_hour=10)],
    )
    schedule = generate_schedule(profile, rng=random.Random(0))

    monday = [(b.activity, b.subject) for b in schedule.weekly_schedule["Monday"]]
    assert monday == [
        ("Commitment", "Gym"), ("Commitment", "Gym"), ("Study", "Math"), ("Review", REVIEW_SUBJECT),
    ]
    tuesday = [(b.activity, b.subject) for b in schedule.weekly_schedule["Tuesday"]]
    assert tuesday == [
        ("Study", "Math"), ("Review", REVIEW_SUBJECT), ("Free", None), ("Free", None),
    ]


def test_study_blocks_never_exceed_free_blocks():
    subjects = [_subject(f"S{i}", difficulty=5) for i in range(6)]
    lecture = Commitment(name="Lecture", days=list(DAYS), start_hour=9, end_hour=17)
    blocks = build_day_grid("Monday", 7, 20, [lecture])
    free_before = sum(1 for b in blocks if b.activity == "Free")
    targets = daily_targets(subjects, 12)

    studied, review = allocate_day(blocks, rank_subjects(subjects), targets, [s.name for s in subjects])

    assert len(studied) <= free_before
    assert len(studied) == free_before
    assert review is None
    assert sum(1 for b in blocks if b.activity == "Commitment") == 8


def test_no_subjects_produces_review_only():
    schedule = generate_schedule(Profile(wake_hour=7, sleep_hour=10))

    for day in DAYS:
        activities = [b.activity for b in schedule.weekly_schedule[day]]
        assert activities == ["Review", "Free", "Free"]
        assert schedule.daily_tasks[day] == []
    assert all(slot.subjects == [] for slot in schedule.review_slots)
    assert schedule.progress_tracking == []


def test_one_task_per_study_block_with_seeded_topics(two_subject_profile):
    schedule = generate_schedule(two_subject_profile, rng=random.Random(7))

    replay = random.Random(7)
    topics = {s.name: s.topics for s in two_subject_profile.subjects}
    for day in DAYS:
        study = [b for b in schedule.weekly_schedule[day] if b.activity == "Study"]
        tasks = schedule.daily_tasks[day]
        assert [t.subject for t in tasks] == [b.subject for b in study]
        for task in tasks:
            assert task.description == f"Study {replay.choice(topics[task.subject])}"
            assert task.duration == "1 hour"
            assert task.completed is False


def test_same_seed_same_schedule(two_subject_profile):
    first = generate_schedule(two_subject_profile, rng=random.Random(99))
    second = generate_schedule(two_subject_profile, rng=random.Random(99))
    assert first.model_dump_json() == second.model_dump_json()


def test_schedule_carries_presets_and_fresh_progress(two_subject_profile):
    schedule = generate_schedule(two_subject_profile, rng=random.Random(0))

    assert len(schedule.break_patterns) == 3
    assert len(schedule.contingency_plans) == 3
    assert schedule.study_techniques[0] == "Create mind maps for complex topics"
    assert [(p.name, p.progress, p.last_studied) for p in schedule.progress_tracking] == [
        ("History", 0, None),
        ("Physics", 0, None),
    ]


def test_urgent_easy_subject_outranks_harder_one_end_to_end():
    profile = Profile(
        wake_hour=9,
        sleep_hour=11,
        study_hours_per_day=7,
        subjects=[
            _subject("Hard", difficulty=5, urgency=1, proficiency=5),  # priority 1
            _subject("Urgent", difficulty=2, urgency=5, proficiency=1),  # priority 10
        ],
    )
    schedule = generate_schedule(profile, rng=random.Random(0))

    # Urgent wants 2 hours a day, Hard wants 5, but only 2 free hours exist
    for day in DAYS:
        assert [b.subject for b in schedule.weekly_schedule[day]] == ["Urgent", "Urgent"]
        assert [t.subject for t in schedule.daily_tasks[day]] == ["Urgent", "Urgent"]
    assert schedule.review_slots == []
