# state.py — DashboardState: the in-memory copy of every dashboard document.
# Each edit takes a state and returns a new one; nothing here touches the database or cache.

import copy
import datetime
import time

from .allocations import (
    compute_quarterly_from_milestones,
    format_allocations,
    parse_percent,
)
from .models import DOC_DAILY, DOC_MILESTONES, DOC_RESOURCING, DOC_WEEKLY


class MilestoneNotFound(LookupError):
    pass


class DashboardState:
    """milestones / weekly_plans / daily_logs / resourcing documents as plain dicts."""

    def __init__(self, milestones=None, weekly_plans=None, daily_logs=None, resourcing=None):
        self.milestones = milestones if isinstance(milestones, dict) else {}
        self.weekly_plans = weekly_plans if isinstance(weekly_plans, dict) else {}
        self.daily_logs = daily_logs if isinstance(daily_logs, dict) else {}
        self.resourcing = resourcing if isinstance(resourcing, dict) else {}

    def copy(self):
        return DashboardState(
            milestones=copy.deepcopy(self.milestones),
            weekly_plans=copy.deepcopy(self.weekly_plans),
            daily_logs=copy.deepcopy(self.daily_logs),
            resourcing=copy.deepcopy(self.resourcing),
        )

    def documents(self):
        return {
            DOC_MILESTONES: self.milestones,
            DOC_WEEKLY: self.weekly_plans,
            DOC_DAILY: self.daily_logs,
            DOC_RESOURCING: self.resourcing,
        }

    def __eq__(self, other):
        if not isinstance(other, DashboardState):
            return NotImplemented
        return self.documents() == other.documents()

    def __repr__(self):
        return f"<DashboardState quarters={sorted(self.milestones)} days={len(self.daily_logs)}>"


# ─── Milestones ───
def recompute_quarter(state, quarter, categories, people):
    """Returns a new state whose resourcing[quarter] is rebuilt from the milestones."""
    new_state = state.copy()
    table = compute_quarterly_from_milestones(new_state.milestones, quarter, categories, people)
    new_state.resourcing[quarter] = {c: dict(row) for c, row in table.items()}
    return new_state


def find_milestone(state, quarter, category, milestone_id):
    items = (state.milestones.get(quarter) or {}).get(category) or []
    for milestone in items:
        if isinstance(milestone, dict) and str(milestone.get("id")) == str(milestone_id):
            return milestone
    raise MilestoneNotFound(f"Milestone {milestone_id!r} not found in {quarter}/{category}")


def set_milestone_progress(state, quarter, category, milestone_id, progress):
    new_state = state.copy()
    milestone = find_milestone(new_state, quarter, category, milestone_id)
    milestone["progress"] = max(0, min(100, parse_percent(progress)))
    return new_state


def set_milestone_resourcing(state, quarter, category, milestone_id, percents, categories, people):
    """
    يحفظ توزيع الأشخاص على الـ milestone كنص "Name:NN;..." (الأصفار بتتشال)
    وبعدها يعيد حساب resourcing للربع كله.
    """
    new_state = state.copy()
    milestone = find_milestone(new_state, quarter, category, milestone_id)
    milestone["resourcing"] = format_allocations(percents)
    return recompute_quarter(new_state, quarter, categories, people)


# ─── Weekly tasks ───
def split_subtasks(raw):
    if isinstance(raw, (list, tuple)):
        return [str(s).strip() for s in raw if str(s).strip()]
    if not raw:
        return []
    return [s.strip() for s in str(raw).split(";") if s.strip()]


def add_weekly_task(state, quarter, week, category, title, person, percent, subtasks=None):
    title = (title or "").strip()
    if not title:
        raise ValueError("Task title is required")
    new_state = state.copy()
    week_tasks = new_state.weekly_plans.setdefault(quarter, {}).setdefault(week, {})
    task = {
        "title": title,
        "subtasks": split_subtasks(subtasks),
        "person": person,
        "percent": parse_percent(percent),
    }
    week_tasks.setdefault(category, []).append(task)
    return new_state


def week_snapshot(state, quarter, week, ts=None):
    """History entry for one week: {ts (ms), quarter, data}."""
    data = copy.deepcopy((state.weekly_plans.get(quarter) or {}).get(week) or {})
    if ts is None:
        ts = int(time.time() * 1000)
    return {"ts": ts, "quarter": quarter, "data": data}


# ─── Daily standup ───
def _day_key(day):
    if isinstance(day, datetime.datetime):
        day = day.date()
    if isinstance(day, datetime.date):
        return day.isoformat()
    return str(day)


def set_daily_update(state, day, person, text):
    new_state = state.copy()
    entry = new_state.daily_logs.setdefault(_day_key(day), {}).setdefault(person, {})
    entry["today"] = text or ""
    return new_state


def daily_boxes(state, today, people):
    """لكل شخص: تحديث امبارح وتحديث النهارده."""
    if isinstance(today, datetime.datetime):
        today = today.date()
    today_key = today.isoformat()
    yesterday_key = (today - datetime.timedelta(days=1)).isoformat()
    today_logs = state.daily_logs.get(today_key) or {}
    yesterday_logs = state.daily_logs.get(yesterday_key) or {}
    return [
        {
            "name": name,
            "date": today_key,
            "yesterday": (yesterday_logs.get(name) or {}).get("today", ""),
            "today": (today_logs.get(name) or {}).get("today", ""),
        }
        for name in people
    ]
