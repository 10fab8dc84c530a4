# context_helpers.py — Functions that turn DashboardState into plain dicts for the dashboard endpoints


def get_categories():
    """Configured category list (PM_DASHBOARD_CATEGORIES) or the defaults."""
    from django.conf import settings
    from .models import DEFAULT_CATEGORIES

    return list(getattr(settings, "PM_DASHBOARD_CATEGORIES", None) or DEFAULT_CATEGORIES)


def get_people():
    from django.conf import settings
    from .models import DEFAULT_PEOPLE

    return list(getattr(settings, "PM_DASHBOARD_PEOPLE", None) or DEFAULT_PEOPLE)


def get_quarters():
    from django.conf import settings
    from .models import ALL_QUARTERS

    return list(getattr(settings, "PM_DASHBOARD_QUARTERS", None) or ALL_QUARTERS)


def get_default_quarter():
    from django.conf import settings
    from .allocations import quarter_code

    return getattr(settings, "PM_DASHBOARD_DEFAULT_QUARTER", None) or quarter_code()


def get_milestones_list(state, quarter, categories):
    """Category -> milestones of the quarter, every category present."""
    quarter_data = state.milestones.get(quarter) or {}
    return {category: list(quarter_data.get(category) or []) for category in categories}


def get_resourcing_grid(table, categories, people):
    """
    Rows for the quarterly resourcing grid: one row per person, one cell per category.
    Each cell carries the value, its palette index (1-based, by category position) and
    whether it is empty ("Set Resourcing").
    """
    table = table or {}
    rows = []
    for person in people:
        cells = []
        for i, category in enumerate(categories):
            value = (table.get(category) or {}).get(person, 0) or 0
            cells.append({
                "category": category,
                "value": value,
                "palette": i + 1,
                "is_empty": value <= 0,
            })
        rows.append({"person": person, "cells": cells})
    return rows


def get_weekly_resourcing_rows(totals, categories):
    """
    Rows for the weekly allocation bar: only non-zero segments, plus the person's total
    and the over-allocated flag (total above 100).
    """
    rows = []
    for person, per_category in totals.items():
        segments = []
        for i, category in enumerate(categories):
            value = per_category.get(category, 0)
            if value > 0:
                segments.append({"category": category, "value": value, "palette": i + 1})
        total = sum(per_category.values())
        rows.append({
            "person": person,
            "segments": segments,
            "total": total,
            "over_allocated": total > 100,
        })
    return rows


def get_history_context(state, history, quarter):
    """
    History tab: milestones, weekly plans and resourcing of one quarter plus every daily log
    sorted by day. Missing quarters come back as empty dicts.
    """
    weekly_snapshots = {
        week: entry
        for week, entry in sorted((history or {}).items())
        if isinstance(entry, dict) and entry.get("quarter") == quarter
    }
    daily = [
        {
            "day": day,
            "entries": [
                {"name": name, "today": (entry or {}).get("today") or "—"}
                for name, entry in (state.daily_logs.get(day) or {}).items()
            ],
        }
        for day in sorted(state.daily_logs)
    ]
    return {
        "quarter": quarter,
        "milestones": state.milestones.get(quarter) or {},
        "weekly_plans": state.weekly_plans.get(quarter) or {},
        "weekly_snapshots": weekly_snapshots,
        "resourcing": state.resourcing.get(quarter) or {},
        "daily": daily,
    }
