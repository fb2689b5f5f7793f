import random

import pytest
from pydantic import ValidationError

from models import Commitment, Profile, Schedule, Subject, TimeBlock
from planner import generate_schedule


def test_hours_accept_clock_strings():
    profile = Profile(wake_hour="06:30", sleep_hour="22:00")
    assert (profile.wake_hour, profile.sleep_hour) == (6, 22)

    c = Commitment(name="Work", days=["Monday"], start_hour="09:00", end_hour=17)
    assert (c.start_hour, c.end_hour) == (9, 17)


@pytest.mark.parametrize("bad", [24, -1, "25:00", "noon"])
def test_hours_out_of_range_are_rejected(bad):
    with pytest.raises(ValidationError):
        Profile(wake_hour=bad)


def test_commitment_must_end_after_start_on_same_day():
    with pytest.raises(ValidationError):
        Commitment(name="Night shift", days=["Friday"], start_hour=22, end_hour=2)
    with pytest.raises(ValidationError):
        Commitment(name="Nothing", days=["Friday"], start_hour=10, end_hour=10)


def test_commitment_needs_a_valid_day():
    with pytest.raises(ValidationError):
        Commitment(name="Club", days=[], start_hour=10, end_hour=11)
    with pytest.raises(ValidationError):
        Commitment(name="Club", days=["Funday"], start_hour=10, end_hour=11)


def test_subject_needs_name_and_topics():
    with pytest.raises(ValidationError):
        Subject(name="Math", topics=[])
    with pytest.raises(ValidationError):
        Subject(name="Math", topics=["  "])
    with pytest.raises(ValidationError):
        Subject(name="   ", topics=["Algebra"])


@pytest.mark.parametrize("field", ["difficulty", "proficiency", "urgency"])
def test_subject_scores_between_one_and_five(field):
    with pytest.raises(ValidationError):
        Subject(name="Math", topics=["Algebra"], **{field: 0})
    with pytest.raises(ValidationError):
        Subject(name="Math", topics=["Algebra"], **{field: 6})


def test_duplicate_subject_names_rejected():
    with pytest.raises(ValidationError):
        Profile(subjects=[
            Subject(name="Math", topics=["Algebra"]),
            Subject(name="Math", topics=["Geometry"]),
        ])


def test_learning_style_is_enumerated():
    with pytest.raises(ValidationError):
        Profile(learning_style="telepathic")


def test_block_label():
    assert TimeBlock(day="Monday", start_hour=23, end_hour=0).label == "23:00 - 00:00"


def test_schedule_survives_json_round_trip(two_subject_profile):
    schedule = generate_schedule(two_subject_profile, rng=random.Random(5))
    restored = Schedule.model_validate_json(schedule.model_dump_json())
    assert restored == schedule

    profile_again = Profile.model_validate(two_subject_profile.model_dump(mode="json"))
    assert profile_again == two_subject_profile
