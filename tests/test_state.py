from __future__ import annotations

import datetime

import pytest

from pmdashboard.state import (
    DashboardState,
    MilestoneNotFound,
    add_weekly_task,
    daily_boxes,
    recompute_quarter,
    set_daily_update,
    set_milestone_progress,
    set_milestone_resourcing,
    split_subtasks,
    week_snapshot,
)
from tests.conftest import CATEGORIES, PEOPLE


@pytest.fixture()
def state(milestones_doc) -> DashboardState:
    return DashboardState(milestones=milestones_doc)


class TestDashboardState:
    def test_defaults_are_empty_dicts(self) -> None:
        s = DashboardState(milestones=None, weekly_plans=[], daily_logs="x")
        assert s.milestones == {} and s.weekly_plans == {} and s.daily_logs == {} and s.resourcing == {}

    def test_copy_is_deep(self, state) -> None:
        clone = state.copy()
        clone.milestones["Q425"]["Materials"][0]["title"] = "changed"
        assert state.milestones["Q425"]["Materials"][0]["title"] == "Alloy study"
        assert clone != state


class TestMilestoneEdits:
    def test_recompute_quarter_returns_new_state(self, state) -> None:
        new_state = recompute_quarter(state, "Q425", CATEGORIES, PEOPLE)
        assert new_state.resourcing["Q425"]["Materials"]["Allison"] == 100
        assert state.resourcing == {}

    def test_recompute_is_idempotent(self, state) -> None:
        once = recompute_quarter(state, "Q425", CATEGORIES, PEOPLE)
        twice = recompute_quarter(once, "Q425", CATEGORIES, PEOPLE)
        assert once == twice

    def test_progress_is_clamped(self, state) -> None:
        new_state = set_milestone_progress(state, "Q425", "Materials", "m1", "140")
        assert new_state.milestones["Q425"]["Materials"][0]["progress"] == 100
        assert state.milestones["Q425"]["Materials"][0]["progress"] == 10

    def test_unknown_milestone(self, state) -> None:
        with pytest.raises(MilestoneNotFound):
            set_milestone_progress(state, "Q425", "Materials", "nope", 10)
        with pytest.raises(MilestoneNotFound):
            set_milestone_progress(state, "Q126", "Materials", "m1", 10)

    def test_resourcing_edit_writes_string_and_recomputes(self, state) -> None:
        new_state = set_milestone_resourcing(
            state, "Q425", "Materials", "m1", {"Allison": 20, "Mike": "0", "SamL": 50}, CATEGORIES, PEOPLE
        )
        milestone = new_state.milestones["Q425"]["Materials"][0]
        assert milestone["resourcing"] == "Allison:20;SamL:50"
        table = new_state.resourcing["Q425"]["Materials"]
        assert table["Allison"] == 80
        assert table["SamL"] == 50
        assert table["Mike"] == 30


class TestWeeklyTasks:
    def test_split_subtasks(self) -> None:
        assert split_subtasks("a; b ;;c") == ["a", "b", "c"]
        assert split_subtasks(["a", " ", "b"]) == ["a", "b"]
        assert split_subtasks(None) == []

    def test_add_task(self) -> None:
        s = add_weekly_task(DashboardState(), "Q425", "2025-W47", "Materials", " Polish ", "Mike", "40", "a;b")
        tasks = s.weekly_plans["Q425"]["2025-W47"]["Materials"]
        assert tasks == [{"title": "Polish", "subtasks": ["a", "b"], "person": "Mike", "percent": 40}]

    def test_title_required(self) -> None:
        with pytest.raises(ValueError):
            add_weekly_task(DashboardState(), "Q425", "2025-W47", "Materials", "  ", "Mike", 10)

    def test_snapshot(self) -> None:
        s = add_weekly_task(DashboardState(), "Q425", "2025-W47", "Materials", "Polish", "Mike", 40)
        snap = week_snapshot(s, "Q425", "2025-W47", ts=123)
        assert snap == {"ts": 123, "quarter": "Q425", "data": s.weekly_plans["Q425"]["2025-W47"]}
        assert week_snapshot(s, "Q425", "2025-W01", ts=1)["data"] == {}


class TestDailyUpdates:
    def test_boxes_show_yesterday_and_today(self) -> None:
        today = datetime.date(2025, 11, 19)
        s = set_daily_update(DashboardState(), today - datetime.timedelta(days=1), "Mike", "wrote tests")
        s = set_daily_update(s, today, "Mike", "fixing bugs")
        boxes = daily_boxes(s, today, PEOPLE)
        assert [b["name"] for b in boxes] == PEOPLE
        mike = next(b for b in boxes if b["name"] == "Mike")
        assert mike == {"name": "Mike", "date": "2025-11-19", "yesterday": "wrote tests", "today": "fixing bugs"}
        allison = boxes[0]
        assert allison["today"] == "" and allison["yesterday"] == ""

    def test_update_overwrites(self) -> None:
        s = set_daily_update(DashboardState(), "2025-11-19", "Mike", "a")
        s = set_daily_update(s, "2025-11-19", "Mike", None)
        assert s.daily_logs == {"2025-11-19": {"Mike": {"today": ""}}}
