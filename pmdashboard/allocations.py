# allocations.py — Resourcing allocation model: parse "Name:40;Other:60" strings,
# aggregate them per quarter (clamped) and per week (uncapped), and compute week keys.

import datetime
import logging
import re
from collections import OrderedDict, namedtuple

import pandas as pd

logger = logging.getLogger(__name__)

AllocationEntry = namedtuple("AllocationEntry", ["person", "percent"])

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
_SATURATED = 1_000_000


def _clamp(value, low=0, high=100):
    return max(low, min(high, value))


def parse_percent(value):
    """
    Leading-integer parse: 40 -> 40, "40%" -> 40, "40.7" -> 40, "abc" -> 0.
    Anything that can't be read returns 0 (not clamped here).
    """
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if value != value or value in (float("inf"), float("-inf")):
            return 0
        return int(value)
    match = _LEADING_INT.match(str(value))
    if not match:
        return 0
    digits = match.group(1).lstrip("+-").lstrip("0")
    # anything past 6 digits is far outside 0..100; saturate instead of converting
    if len(digits) > 6:
        return -_SATURATED if match.group(1).startswith("-") else _SATURATED
    return int(match.group(1))


def parse_allocations(raw):
    """
    يحوّل نص التوزيع لقائمة AllocationEntry.

    - "Alice:40;Bob:60" -> كل عنصر بنسبته (مقصوصة على 0..100)
    - "Alice;Bob;Carl" -> تقسيم 100 بالتساوي (33 لكل واحد، الباقي بيضيع)
    - فاضي أو مش نص -> []
    """
    if not raw or not isinstance(raw, str):
        return []

    parts = [p.strip() for p in raw.split(";")]
    parts = [p for p in parts if p]
    if not parts:
        return []

    if any(":" in p for p in parts):
        entries = []
        for part in parts:
            pieces = [x.strip() for x in part.split(":")]
            name = pieces[0]
            pct = pieces[1] if len(pieces) > 1 else ""
            entries.append(AllocationEntry(name, _clamp(parse_percent(pct))))
        return entries

    # floor division; the remainder (e.g. 1 for three people) is dropped
    per = 100 // len(parts)
    return [AllocationEntry(name, per) for name in parts]


def format_allocations(percents):
    """Inverse used by the resourcing editor: {"Alice": 40, "Bob": 0} -> "Alice:40"."""
    if not percents:
        return ""
    items = []
    for person, pct in percents.items():
        pct = _clamp(parse_percent(pct))
        if person and pct > 0:
            items.append(f"{person}:{pct}")
    return ";".join(items)


def empty_resourcing_table(categories, people):
    """Category -> Person -> 0 for every pair, so renderers never need a sparse lookup."""
    return OrderedDict(
        (category, OrderedDict((person, 0) for person in people)) for category in categories
    )


def compute_quarterly_from_milestones(milestones, quarter, categories, people):
    """
    Rebuild the resourcing table of one quarter from its milestones.

    ``milestones`` is the whole milestones document (quarter -> category -> [milestone]).
    Totals are summed per (category, person) and then clamped to 0..100; over-allocation
    is capped, not rescaled. The table is rebuilt from zero on every call and the input
    is not modified, so running it twice on the same data gives the same table.
    """
    table = empty_resourcing_table(categories, people)
    quarter_data = (milestones or {}).get(quarter) if isinstance(milestones, dict) else None
    if not isinstance(quarter_data, dict):
        return table

    for category in categories:
        items = quarter_data.get(category) or []
        if not isinstance(items, list):
            continue
        for milestone in items:
            if not isinstance(milestone, dict):
                continue
            raw = milestone.get("resourcing") or milestone.get("people") or ""
            for entry in parse_allocations(raw):
                row = table[category]
                row[entry.person] = row.get(entry.person, 0) + entry.percent

    for category, row in table.items():
        for person in row:
            row[person] = _clamp(int(round(row[person])))
    return table


def compute_weekly_resourcing(tasks_by_category, categories, people):
    """
    Person -> Category -> summed task percent for one week.

    Unlike the quarterly table nothing is clamped here: a person can end up above 100
    and that is what the over-allocated flag shows.
    """
    totals = OrderedDict(
        (person, OrderedDict((category, 0) for category in categories)) for person in people
    )
    if not isinstance(tasks_by_category, dict):
        return totals

    for category in categories:
        tasks = tasks_by_category.get(category) or []
        if not isinstance(tasks, list):
            continue
        for task in tasks:
            if not isinstance(task, dict):
                continue
            person = str(task.get("person") or "").strip()
            if not person:
                continue
            percent = parse_percent(task.get("percent"))
            if person not in totals:
                totals[person] = OrderedDict((c, 0) for c in categories)
            totals[person][category] += percent
    return totals


def over_allocated_people(totals, limit=100):
    """Names whose weekly total across categories is above ``limit``."""
    return [person for person, row in totals.items() if sum(row.values()) > limit]


def _coerce_date(value):
    # NaT is a datetime subclass but has no date
    if value is None or value is pd.NaT:
        return None
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    try:
        ts = pd.to_datetime(str(value), errors="coerce")
    except (ValueError, TypeError, OverflowError):
        return None
    if ts is None or pd.isna(ts):
        return None
    return ts.date()


def week_key(value=None):
    """
    ISO-8601 week key for a date, e.g. 2025-W47.

    Weeks start on Monday and the Thursday of the week decides year and number, so
    2024-12-30 gives 2025-W01. ``None`` or anything unparseable uses today.
    """
    day = _coerce_date(value)
    if day is None:
        if value is not None:
            logger.warning("[week_key] could not read date %r, using today", value)
        day = datetime.date.today()
    iso_year, iso_week, _ = day.isocalendar()
    return f"{iso_year}-W{iso_week:02d}"


def quarter_code(value=None):
    """Quarter code like Q425 (4th quarter of 2025) for a date; today when missing."""
    day = _coerce_date(value) or datetime.date.today()
    return f"Q{(day.month - 1) // 3 + 1}{day.year % 100:02d}"
