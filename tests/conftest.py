import pytest

from models import Profile, Subject


@pytest.fixture
def data_dir(tmp_path, monkeypatch):
    monkeypatch.setenv("STUDYSYNC_DATA_DIR", str(tmp_path))
    return tmp_path


@pytest.fixture
def two_subject_profile():
    # 07:00-23:00, difficulty 3 and 5, 4 hours a day
    return Profile(
        wake_hour="07:00",
        sleep_hour="23:00",
        study_hours_per_day=4,
        subjects=[
            Subject(name="History", topics=["Rome", "Greece"], difficulty=3, proficiency=3, urgency=3),
            Subject(name="Physics", topics=["Optics", "Waves", "Heat"], difficulty=5, proficiency=3, urgency=3),
        ],
        learning_style="visual",
    )
