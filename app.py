from __future__ import annotations
import logging
import streamlit as st
import pandas as pd
from datetime import date, datetime
from pydantic import ValidationError

from calendar_export import schedule_to_ics
from calendar_import import parse_ics_commitments
from models import DAYS, AppState, Commitment, Profile
from paths import get_log_level
from pdf_export import schedule_to_pdf
from planner import ScheduleError, generate_schedule
from profiles import (
    create_profile,
    delete_profile,
    list_profiles,
    load_profile,
    reset_profile,
    save_profile,
)
from progress import ProgressStore, upcoming_deadlines


logging.basicConfig(level=get_log_level(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger("studysync")

LEARNING_STYLES = ["visual", "auditory", "reading/writing", "kinesthetic"]
HOURS = list(range(24))
ACTIVITY_ICONS = {"Study": "📘", "Commitment": "📌", "Review": "🔁", "Break": "☕", "Free": "·"}

st.set_page_config(page_title="StudySync", page_icon="🧠", layout="wide")


def _ensure_session_state() -> list[str]:
    profiles = list_profiles()
    if not profiles:
        create_profile("default")
        profiles = list_profiles()

    if "profile_name" not in st.session_state:
        st.session_state.profile_name = profiles[0]

    if st.session_state.profile_name not in profiles:
        st.session_state.profile_name = profiles[0]

    if "state" not in st.session_state:
        st.session_state.state = load_profile(st.session_state.profile_name)

    return profiles


def _switch_profile(name: str) -> None:
    logger.info("Switching to profile '%s'", name)
    st.session_state.profile_name = name
    st.session_state.state = load_profile(name)


def _coerce_date(value: object) -> date | None:
    if value is None or value is pd.NaT:
        return None
    if isinstance(value, pd.Timestamp):
        return value.date()
    if isinstance(value, date):
        return value
    return None


def _int_cell(value: object, default: int | None) -> int | None:
    if value is None or pd.isna(value):
        return default
    return int(value)


def _split_list(value: object, sep: str = ",") -> list[str]:
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return []
    return [part.strip() for part in str(value).split(sep) if part.strip()]


def _parse_days(value: object) -> list[str]:
    days = []
    for part in _split_list(value):
        match = next((d for d in DAYS if d.lower().startswith(part.lower()[:3])), None)
        if match and match not in days:
            days.append(match)
    return days


def _queue_toast(message: str) -> None:
    st.session_state.toast_message = message


def _flush_toast() -> None:
    message = st.session_state.pop("toast_message", None)
    if message:
        st.toast(message)


def _format_errors(err: ValidationError) -> list[str]:
    out = []
    for item in err.errors():
        where = ".".join(str(p) for p in item["loc"])
        out.append(f"{where}: {item['msg']}" if where else item["msg"])
    return out


def _has_progress(state: AppState) -> bool:
    if state.schedule is None:
        return False
    if any(p.progress for p in state.schedule.progress_tracking):
        return True
    return any(t.completed for tasks in state.schedule.daily_tasks.values() for t in tasks)


def _generate(state: AppState, user: Profile) -> None:
    try:
        with st.spinner("Generating your personalized study plan..."):
            schedule = generate_schedule(user)
    except ScheduleError as e:
        st.error(str(e))
        return
    state.user = user
    state.schedule = schedule
    state.last_generated_on = date.today()
    save_profile(current_profile, state)
    _queue_toast("Schedule generated.")
    st.session_state.pending_page = "Schedule"
    st.rerun()


def _subjects_frame(user: Profile) -> pd.DataFrame:
    rows = [
        {
            "Name": s.name,
            "Topics": ", ".join(s.topics),
            "Difficulty": s.difficulty,
            "Proficiency": s.proficiency,
            "Urgency": s.urgency,
            "Due date": s.due_date,
            "Exam date": s.exam_date,
        }
        for s in user.subjects
    ]
    columns = ["Name", "Topics", "Difficulty", "Proficiency", "Urgency", "Due date", "Exam date"]
    return pd.DataFrame(rows, columns=columns)


def _subjects_from_records(records: list[dict]) -> list[dict]:
    subjects = []
    for row in records:
        name = str(row.get("Name") or "").strip()
        topics = _split_list(row.get("Topics"))
        if not name and not topics:
            continue
        subjects.append({
            "name": name,
            "topics": topics,
            "difficulty": _int_cell(row.get("Difficulty"), 3),
            "proficiency": _int_cell(row.get("Proficiency"), 3),
            "urgency": _int_cell(row.get("Urgency"), 3),
            "due_date": _coerce_date(row.get("Due date")),
            "exam_date": _coerce_date(row.get("Exam date")),
        })
    return subjects


def _commitments_frame(commitments: list[Commitment]) -> pd.DataFrame:
    rows = [
        {
            "Name": c.name,
            "Days": ", ".join(d[:3] for d in c.days),
            "Start": c.start_hour,
            "End": c.end_hour,
        }
        for c in commitments
    ]
    return pd.DataFrame(rows, columns=["Name", "Days", "Start", "End"])


def _commitments_from_records(records: list[dict]) -> list[dict]:
    commitments = []
    for row in records:
        name = str(row.get("Name") or "").strip()
        if not name:
            continue
        start, end = row.get("Start"), row.get("End")
        commitments.append({
            "name": name,
            "days": _parse_days(row.get("Days")),
            "start_hour": _int_cell(start, None),
            "end_hour": _int_cell(end, None),
        })
    return commitments


def render_profile(state: AppState) -> None:
    st.header("Profile")
    user = state.user

    st.subheader("Commitments from calendar (optional)")
    uploaded = st.file_uploader("Upload .ics file", type=["ics"], key="ics_upload")
    if uploaded:
        try:
            imported = parse_ics_commitments(uploaded.read())
        except ValueError as e:
            st.error(f"Could not read ICS file: {e}")
        else:
            if not imported:
                st.warning("No timed single-day events found in this file.")
            else:
                st.dataframe(_commitments_frame(imported), use_container_width=True, hide_index=True)
                if st.button("Add these commitments"):
                    existing = {(c.name, c.start_hour, c.end_hour): c for c in user.commitments}
                    for c in imported:
                        key = (c.name, c.start_hour, c.end_hour)
                        if key in existing:
                            merged = existing[key]
                            merged.days = [d for d in DAYS if d in merged.days or d in c.days]
                        else:
                            existing[key] = c
                    user.commitments = list(existing.values())
                    save_profile(current_profile, state)
                    _queue_toast("Commitments imported.")
                    st.rerun()

    st.divider()

    with st.form("profile_form"):
        st.subheader("Daily rhythm")
        col1, col2, col3 = st.columns(3)
        with col1:
            wake_hour = st.selectbox(
                "Wake-up time", HOURS, index=user.wake_hour, format_func=lambda h: f"{h:02d}:00"
            )
        with col2:
            sleep_hour = st.selectbox(
                "Bedtime", HOURS, index=user.sleep_hour, format_func=lambda h: f"{h:02d}:00"
            )
        with col3:
            study_hours = st.number_input(
                "Study hours per day", min_value=0.5, max_value=24.0,
                value=float(user.study_hours_per_day), step=0.5,
            )

        st.subheader("Subjects")
        st.caption("Topics are comma separated. Difficulty, proficiency and urgency go from 1 to 5.")
        level = st.column_config.SelectboxColumn
        subjects_edit = st.data_editor(
            _subjects_frame(user),
            num_rows="dynamic",
            hide_index=True,
            use_container_width=True,
            column_config={
                "Name": st.column_config.TextColumn("Name", required=True),
                "Topics": st.column_config.TextColumn("Topics", width="large"),
                "Difficulty": level("Difficulty", options=[1, 2, 3, 4, 5], default=3),
                "Proficiency": level("Proficiency", options=[1, 2, 3, 4, 5], default=3),
                "Urgency": level("Urgency", options=[1, 2, 3, 4, 5], default=3),
                "Due date": st.column_config.DateColumn("Due date"),
                "Exam date": st.column_config.DateColumn("Exam date"),
            },
            key=f"subjects_editor_{current_profile}",
        )

        st.subheader("Fixed commitments")
        st.caption("Days as 'Mon, Wed, Fri'. Hours 0-23, end after start.")
        commitments_edit = st.data_editor(
            _commitments_frame(user.commitments),
            num_rows="dynamic",
            hide_index=True,
            use_container_width=True,
            column_config={
                "Name": st.column_config.TextColumn("Name"),
                "Days": st.column_config.TextColumn("Days"),
                "Start": st.column_config.NumberColumn("Start", min_value=0, max_value=23, step=1),
                "End": st.column_config.NumberColumn("End", min_value=0, max_value=23, step=1),
            },
            key=f"commitments_editor_{current_profile}",
        )

        st.subheader("Learning preferences")
        learning_style = st.selectbox(
            "Learning style", LEARNING_STYLES, index=LEARNING_STYLES.index(user.learning_style)
        )
        preferred = st.text_area(
            "Preferred study methods (one per line)", value="\n".join(user.preferred_methods), height=100
        )

        with st.expander("Other preferences", expanded=False):
            peak_hours = st.multiselect(
                "Peak hours", ["Morning", "Afternoon", "Evening", "Night"], default=user.peak_hours
            )
            avoid = st.text_input("Methods to avoid", value=", ".join(user.avoid_methods))
            locations = st.text_input("Study locations", value=", ".join(user.study_locations))
            resources = st.text_input("Available resources", value=", ".join(user.available_resources))
            distractions = st.text_input("Distractions", value=", ".join(user.distractions))
            tools = st.text_input("Tech tools", value=", ".join(user.tech_tools))
            sleep_hours = st.number_input("Sleep hours", min_value=0, max_value=24, value=user.sleep_hours)
            exercise = st.text_input("Exercise routine", value=user.exercise_routine)
            meals = st.text_input("Meal times", value=", ".join(user.meal_times))
            stress = st.text_input("Stress management", value=", ".join(user.stress_management))

        col_save, col_generate = st.columns(2)
        save_clicked = col_save.form_submit_button("Save profile")
        generate_clicked = col_generate.form_submit_button("Save & generate schedule", type="primary")

    if not (save_clicked or generate_clicked):
        return

    try:
        new_user = Profile.model_validate({
            "wake_hour": wake_hour,
            "sleep_hour": sleep_hour,
            "study_hours_per_day": study_hours,
            "subjects": _subjects_from_records(subjects_edit.to_dict("records")),
            "commitments": _commitments_from_records(commitments_edit.to_dict("records")),
            "learning_style": learning_style,
            "preferred_methods": _split_list(preferred, sep="\n"),
            "peak_hours": peak_hours,
            "avoid_methods": _split_list(avoid),
            "study_locations": _split_list(locations),
            "available_resources": _split_list(resources),
            "distractions": _split_list(distractions),
            "tech_tools": _split_list(tools),
            "sleep_hours": int(sleep_hours),
            "exercise_routine": exercise.strip(),
            "meal_times": _split_list(meals),
            "stress_management": _split_list(stress),
        })
    except ValidationError as e:
        st.error("Please fix the following before continuing:")
        for line in _format_errors(e):
            st.write(f"- {line}")
        return

    if save_clicked:
        state.user = new_user
        save_profile(current_profile, state)
        st.toast("Profile saved.")
        return

    if not new_user.subjects:
        st.warning("Add at least one subject to generate a schedule.")
        return

    if _has_progress(state):

        @st.dialog("Replace current schedule?")
        def _confirm_regenerate() -> None:
            st.write("A new schedule starts all subject progress and task checkmarks from zero.")
            if st.button("Generate anyway", type="primary"):
                _generate(state, new_user)

        _confirm_regenerate()
    else:
        _generate(state, new_user)


def render_schedule(state: AppState) -> None:
    st.header("Schedule")
    schedule = state.schedule
    if schedule is None:
        st.info("Fill in your profile and generate a schedule first.")
        return

    if state.last_generated_on:
        st.caption(f"Generated on {state.last_generated_on.isoformat()}")

    day = st.radio("Day", DAYS, horizontal=True, format_func=lambda d: d[:3], key="schedule_day")
    col_blocks, col_tasks = st.columns([3, 2])

    with col_blocks:
        st.subheader(f"Daily schedule for {day}")
        blocks = schedule.weekly_schedule.get(day, [])
        if not blocks:
            st.info("No schedule available for this day.")
        else:
            rows = [
                {
                    "Time": b.label,
                    "Activity": f"{ACTIVITY_ICONS.get(b.activity, '')} {b.activity}",
                    "Subject": b.subject or "",
                }
                for b in blocks
            ]
            st.dataframe(pd.DataFrame(rows), hide_index=True, use_container_width=True, height=35 * len(rows) + 40)

    with col_tasks:
        st.subheader(f"Tasks for {day}")
        tasks = schedule.daily_tasks.get(day, [])
        if not tasks:
            st.info("No tasks scheduled for this day.")
        for t in tasks:
            st.write(f"{'✅' if t.completed else '⬜'} **{t.description}** · {t.subject} · {t.duration}")

    st.divider()
    col_tech, col_breaks = st.columns(2)
    with col_tech:
        st.subheader("Recommended study techniques")
        for technique in schedule.study_techniques:
            st.write(f"- {technique}")
    with col_breaks:
        st.subheader("Break patterns")
        st.table([
            {"Pattern": p.duration, "Repeat": p.repeat, "Long break": p.long_break}
            for p in schedule.break_patterns
        ])

    col_review, col_plans = st.columns(2)
    with col_review:
        st.subheader("Review sessions")
        if not schedule.review_slots:
            st.info("No free time left for review sessions this week.")
        for slot in schedule.review_slots:
            st.write(f"- {slot.day} at {slot.start_hour:02d}:00: {', '.join(slot.subjects)}")
    with col_plans:
        st.subheader("Contingency plans")
        for plan in schedule.contingency_plans:
            st.write(f"- {plan}")

    st.divider()
    st.subheader("Exports")
    week_start = st.date_input("Week starting", value=date.today())
    col_ics, col_pdf = st.columns(2)
    col_ics.download_button(
        "Download ICS",
        data=schedule_to_ics(schedule, week_start),
        file_name=f"study_schedule_{week_start.isoformat()}.ics",
        mime="text/calendar",
    )
    col_pdf.download_button(
        "Download PDF",
        data=schedule_to_pdf(schedule, week_start),
        file_name=f"study_schedule_{week_start.isoformat()}.pdf",
        mime="application/pdf",
    )


def render_dashboard(state: AppState) -> None:
    st.header("Dashboard")
    schedule = state.schedule
    if schedule is None:
        st.info("Generate a schedule to start tracking progress.")
        return

    store = ProgressStore(schedule)
    a, b, c = st.columns(3)
    a.metric("Overall progress", f"{store.overall_progress()}%")
    b.metric("Tasks completed", f"{store.completed_count()} / {store.total_count()}")
    c.metric("Review sessions", len(schedule.review_slots))

    today_name = DAYS[date.today().weekday()]
    col_today, col_deadlines = st.columns([3, 2])

    with col_today:
        st.subheader("Tasks")
        day = st.selectbox("Day", DAYS, index=DAYS.index(today_name), key="dashboard_day")
        tasks = schedule.daily_tasks.get(day, [])
        if not tasks:
            st.info("No tasks for this day.")
        for i, task in enumerate(tasks):
            checked = st.checkbox(
                f"{task.description} ({task.subject}, {task.duration})",
                value=task.completed,
                key=f"task_{current_profile}_{day}_{i}",
            )
            if checked != task.completed:
                store.toggle_task(day, i, now=datetime.now())
                save_profile(current_profile, state)
                st.rerun()

        upcoming = [b for b in schedule.weekly_schedule.get(day, []) if b.activity != "Free"][:3]
        if upcoming:
            st.caption("Coming up: " + " | ".join(f"{b.label} {b.activity} {b.subject or ''}" for b in upcoming))

    with col_deadlines:
        st.subheader("Upcoming deadlines")
        deadlines = upcoming_deadlines(state.user.subjects, date.today())
        if not deadlines:
            st.info("No due dates or exams entered.")
        for d in deadlines[:3]:
            days_until = d["days_until"]
            when = "today" if days_until == 0 else (f"in {days_until} days" if days_until > 0 else f"{-days_until} days ago")
            st.write(f"**{d['type']}** · {d['subject']} · {d['date'].strftime('%b %d, %Y')} ({when})")

    st.divider()
    st.subheader("Subject progress")
    if not schedule.progress_tracking:
        st.info("No subjects yet.")
    for entry in schedule.progress_tracking:
        last = entry.last_studied.strftime("%Y-%m-%d %H:%M") if entry.last_studied else "never"
        st.progress(entry.progress / 100, text=f"{entry.name}: {entry.progress}% (last studied {last})")


profiles = _ensure_session_state()
state: AppState = st.session_state.state
current_profile = st.session_state.profile_name

st.title("StudySync")
st.caption("Weekly study schedules built from your availability, subjects and learning style.")
_flush_toast()

if "nav_page" not in st.session_state:
    st.session_state.nav_page = "Profile"
if "pending_page" in st.session_state:
    st.session_state.nav_page = st.session_state.pop("pending_page")
if state.schedule is None:
    st.session_state.nav_page = "Profile"

with st.sidebar:
    st.header("Profile")
    profiles = list_profiles()
    selected_profile = st.selectbox(
        "Active profile",
        options=profiles,
        index=profiles.index(current_profile) if current_profile in profiles else 0,
    )
    if selected_profile != current_profile:
        _switch_profile(selected_profile)
        st.rerun()

    with st.form("create_profile_form"):
        new_profile_name = st.text_input("New profile name", placeholder="e.g. Semester A")
        if st.form_submit_button("Create profile"):
            try:
                new_state = create_profile(new_profile_name)
            except ValueError as e:
                st.error(str(e))
            else:
                _queue_toast(f"Profile '{new_profile_name.strip()}' created.")
                st.session_state.profile_name = new_profile_name.strip()
                st.session_state.state = new_state
                st.rerun()

    if st.button("Reset data"):

        @st.dialog("Reset all data?")
        def _confirm_reset() -> None:
            st.write("This clears the profile and schedule of this slot. It cannot be undone.")
            if st.button("Reset", type="primary"):
                st.session_state.state = reset_profile(current_profile)
                _queue_toast("Profile reset.")
                st.rerun()

        _confirm_reset()

    if st.button("Delete profile", disabled=len(profiles) <= 1):

        @st.dialog("Delete profile?")
        def _confirm_delete_profile() -> None:
            st.write(f"Delete profile '{current_profile}' and its data?")
            if st.button("Delete", type="primary"):
                delete_profile(current_profile)
                remaining = list_profiles()
                _switch_profile(remaining[0])
                _queue_toast("Profile deleted.")
                st.rerun()

        _confirm_delete_profile()

    st.divider()
    st.header("Navigate")
    pages = ["Profile", "Schedule", "Dashboard"]
    page = st.radio("Page", pages, key="nav_page", label_visibility="collapsed")

    st.caption("Workflow: Profile -> Schedule -> Dashboard")
    st.caption("Data is stored locally on this machine.")

if page == "Profile":
    render_profile(state)
elif page == "Schedule":
    render_schedule(state)
else:
    render_dashboard(state)
