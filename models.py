from __future__ import annotations
from pydantic import BaseModel, Field, field_validator, model_validator
from datetime import date, datetime
from typing import Dict, List, Literal, Optional


DAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]

Weekday = Literal["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]
LearningStyle = Literal["visual", "auditory", "reading/writing", "kinesthetic"]
Activity = Literal["Free", "Study", "Commitment", "Review", "Break"]


def parse_hour(value: object) -> object:
    # "07:00" / "7:30" -> 7; ints pass through for the range check
    if isinstance(value, str):
        head = value.strip().split(":", 1)[0]
        if not head.isdigit():
            raise ValueError(f"Invalid time value: {value!r}")
        return int(head)
    return value


class Subject(BaseModel):
    name: str = Field(min_length=1)
    topics: List[str] = Field(min_length=1)
    difficulty: int = Field(ge=1, le=5, default=3)
    proficiency: int = Field(ge=1, le=5, default=3)
    urgency: int = Field(ge=1, le=5, default=3)
    due_date: Optional[date] = None
    exam_date: Optional[date] = None

    @field_validator("name")
    @classmethod
    def _strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Subject name is required")
        return v

    @field_validator("topics")
    @classmethod
    def _clean_topics(cls, v: List[str]) -> List[str]:
        topics = [t.strip() for t in v if t.strip()]
        if not topics:
            raise ValueError("At least one topic is required")
        return topics


class Commitment(BaseModel):
    name: str = Field(min_length=1)
    days: List[Weekday] = Field(min_length=1)
    start_hour: int = Field(ge=0, le=23)
    end_hour: int = Field(ge=0, le=23)

    @field_validator("start_hour", "end_hour", mode="before")
    @classmethod
    def _parse_hours(cls, v: object) -> object:
        return parse_hour(v)

    @model_validator(mode="after")
    def _check_order(self) -> "Commitment":
        if self.start_hour >= self.end_hour:
            raise ValueError(
                f"Commitment '{self.name}' must end after it starts (same day only)"
            )
        return self

    def covers(self, day: str, hour: int) -> bool:
        return day in self.days and self.start_hour <= hour < self.end_hour


class Profile(BaseModel):
    wake_hour: int = Field(ge=0, le=23, default=7)
    sleep_hour: int = Field(ge=0, le=23, default=23)
    subjects: List[Subject] = Field(default_factory=list)
    commitments: List[Commitment] = Field(default_factory=list)
    study_hours_per_day: float = Field(gt=0, le=24, default=4)
    learning_style: LearningStyle = "visual"
    preferred_methods: List[str] = Field(default_factory=list)

    # Collected by the profile form, shown back to the user, never used by the planner
    peak_hours: List[str] = Field(default_factory=list)
    avoid_methods: List[str] = Field(default_factory=list)
    study_locations: List[str] = Field(default_factory=list)
    available_resources: List[str] = Field(default_factory=list)
    distractions: List[str] = Field(default_factory=list)
    tech_tools: List[str] = Field(default_factory=list)
    sleep_hours: int = Field(ge=0, le=24, default=8)
    exercise_routine: str = ""
    meal_times: List[str] = Field(default_factory=list)
    stress_management: List[str] = Field(default_factory=list)

    @field_validator("wake_hour", "sleep_hour", mode="before")
    @classmethod
    def _parse_hours(cls, v: object) -> object:
        return parse_hour(v)

    @model_validator(mode="after")
    def _unique_subject_names(self) -> "Profile":
        seen = set()
        for s in self.subjects:
            if s.name in seen:
                raise ValueError(f"Duplicate subject name: {s.name}")
            seen.add(s.name)
        return self

    def commitments_on(self, day: str) -> List[Commitment]:
        return [c for c in self.commitments if day in c.days]


class TimeBlock(BaseModel):
    day: Weekday
    start_hour: int = Field(ge=0, le=23)
    end_hour: int = Field(ge=0, le=23)
    activity: Activity = "Free"
    subject: Optional[str] = None

    @property
    def label(self) -> str:
        return f"{self.start_hour:02d}:00 - {self.end_hour:02d}:00"


class Task(BaseModel):
    subject: str
    description: str
    duration: str = "1 hour"
    completed: bool = False


class ReviewSlot(BaseModel):
    day: Weekday
    start_hour: int = Field(ge=0, le=23)
    subjects: List[str] = Field(default_factory=list)


class BreakPattern(BaseModel):
    duration: str
    repeat: int = Field(ge=1)
    long_break: str


class SubjectProgress(BaseModel):
    name: str
    progress: int = Field(ge=0, le=100, default=0)
    last_studied: Optional[datetime] = None


class Schedule(BaseModel):
    weekly_schedule: Dict[str, List[TimeBlock]] = Field(default_factory=dict)
    daily_tasks: Dict[str, List[Task]] = Field(default_factory=dict)
    study_techniques: List[str] = Field(default_factory=list)
    break_patterns: List[BreakPattern] = Field(default_factory=list)
    review_slots: List[ReviewSlot] = Field(default_factory=list)
    progress_tracking: List[SubjectProgress] = Field(default_factory=list)
    contingency_plans: List[str] = Field(default_factory=list)


class AppState(BaseModel):
    user: Profile = Field(default_factory=Profile)
    schedule: Optional[Schedule] = None
    last_generated_on: Optional[date] = None
    profile: str = "default"
