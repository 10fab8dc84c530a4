# استيراد الـ Milestones من ملف CSV أو Excel
# الأعمدة: quarter | category | title | date | people | resourcing | progress | id
# الملف بيستبدل دوكيومنت milestones كله، وبعدها resourcing بيتحسب من جديد لكل ربع.

import logging
import os
import uuid

import numpy as np
import pandas as pd
from django.utils.text import slugify

from .allocations import compute_quarterly_from_milestones, quarter_code
from .models import DOC_MILESTONES, DOC_RESOURCING
from .state import DashboardState

logger = logging.getLogger(__name__)

EXCEL_EXTENSIONS = (".xlsx", ".xlsm", ".xls")


def _normalize_col(s):
    if s is None or (isinstance(s, float) and pd.isna(s)):
        return ""
    return str(s).strip()


def _find_column(df, *candidates):
    """يرجع اسم العمود الأول الموجود في الداتا فريم من قائمة الأسماء (بدون مراعاة حالة الأحرف والمسافات و%)"""
    def normalize_for_match(s):
        return _normalize_col(s).lower().replace(" ", "").replace("_", "").replace("%", "")

    for cand in candidates:
        cand_norm = normalize_for_match(cand)
        if not cand_norm:
            continue
        for col in df.columns:
            if normalize_for_match(col) == cand_norm:
                return col
    # Loose match: "Progress %" or "Milestone Title" still match
    for cand in candidates:
        cand_norm = normalize_for_match(cand)
        if not cand_norm or len(cand_norm) < 4:
            continue
        for col in df.columns:
            if cand_norm in normalize_for_match(col):
                return col
    return None


def _parse_progress(progress_raw):
    """75 / "75%" / 0.75 -> 75, clamped to 0..100; anything unreadable is 0."""
    try:
        if progress_raw is None or (isinstance(progress_raw, float) and pd.isna(progress_raw)):
            return 0
        raw = progress_raw
        if isinstance(raw, str):
            raw = raw.strip().replace("%", "").strip()
            if not raw:
                return 0
        val = float(raw)
        if np.isnan(val) or np.isinf(val):
            return 0
        # 0.75 is a fraction -> 75
        if 0 <= val <= 1 and val != int(val):
            val = val * 100
        return max(0, min(100, int(round(val))))
    except (ValueError, TypeError):
        return 0


def _normalize_id(val):
    """Excel numeric ids come back as floats: 12.0 -> "12"."""
    if isinstance(val, (float, np.floating)) and not pd.isna(val) and float(val).is_integer():
        return str(int(val))
    return _normalize_col(val)


def _normalize_date(val):
    if val is None or (not isinstance(val, str) and pd.isna(val)):
        return ""
    if isinstance(val, pd.Timestamp):
        return val.date().isoformat()
    return _normalize_col(val)


def _read_frame(file, sheet_name=0):
    name = getattr(file, "name", file if isinstance(file, str) else "")
    ext = os.path.splitext(str(name or ""))[1].lower()
    if ext in EXCEL_EXTENSIONS:
        return pd.read_excel(file, sheet_name=sheet_name, engine="openpyxl", header=0)
    return pd.read_csv(file, dtype=str, keep_default_na=False, skipinitialspace=True)


def read_milestones_table(file, categories, default_quarter=None, sheet_name=0):
    """
    يقرأ الملف ويرجع (milestones_document, قائمة_أخطاء).
    milestones_document: quarter -> category -> [milestone]
    """
    errors = []

    try:
        df = _read_frame(file, sheet_name=sheet_name)
    except Exception as e:
        return {}, [f"Could not read file: {e}"]

    if df.empty:
        return {}, ["File or sheet is empty."]

    col_quarter = _find_column(df, "quarter", "Quarter", "Q")
    col_category = _find_column(df, "category", "Category")
    col_title = _find_column(df, "title", "Title", "Milestone")
    col_date = _find_column(df, "date", "Date", "Due Date")
    col_people = _find_column(df, "people", "People", "Personnel")
    col_resourcing = _find_column(df, "resourcing", "Resourcing", "Allocation")
    col_progress = _find_column(df, "progress", "Progress %", "Progress")
    col_id = _find_column(df, "id", "ID")

    if not col_category:
        errors.append("Column 'category' not found.")
    if not col_title:
        errors.append(
            "Column 'title' not found. Available columns: " + ", ".join(str(c) for c in df.columns[:10])
        )
    if errors:
        return {}, errors

    default_quarter = default_quarter or quarter_code()
    df = df.dropna(how="all")
    milestones = {}
    seen_ids = set()

    for idx, row in df.iterrows():
        category = _normalize_col(row.get(col_category, ""))
        title = _normalize_col(row.get(col_title, ""))
        if not category and not title:
            continue
        if category not in categories:
            errors.append(f"Row {idx + 2}: unknown category '{category}', skipped.")
            continue

        quarter = _normalize_col(row.get(col_quarter, "")) if col_quarter else ""
        quarter = quarter.upper() or default_quarter

        people = _normalize_col(row.get(col_people, "")) if col_people else ""
        resourcing = _normalize_col(row.get(col_resourcing, "")) if col_resourcing else ""

        milestone_id = _normalize_id(row.get(col_id, "")) if col_id else ""
        if not milestone_id:
            milestone_id = f"{slugify(title) or 'milestone'}-{uuid.uuid4().hex[:6]}"
        key = (quarter, category, milestone_id)
        if key in seen_ids:
            errors.append(f"Row {idx + 2}: duplicate id '{milestone_id}', renamed.")
            milestone_id = f"{milestone_id}-{uuid.uuid4().hex[:6]}"
            key = (quarter, category, milestone_id)
        seen_ids.add(key)

        milestones.setdefault(quarter, {c: [] for c in categories})[category].append(
            {
                "id": milestone_id,
                "title": title or "(untitled)",
                "date": _normalize_date(row.get(col_date, "")) if col_date else "",
                "people": people,
                "resourcing": resourcing or people,
                "progress": _parse_progress(row.get(col_progress, 0)) if col_progress else 0,
            }
        )

    return milestones, errors


def import_milestones(file, repository, categories, people, default_quarter=None, sheet_name=0):
    """
    يستبدل milestones بالملف، يعيد حساب resourcing لكل ربع موجود في الملف، ويحفظ.
    ترجع: (عدد_الـmilestones, قائمة_أخطاء)
    """
    milestones, errors = read_milestones_table(
        file, categories, default_quarter=default_quarter, sheet_name=sheet_name
    )
    created_count = sum(len(items) for quarter in milestones.values() for items in quarter.values())
    if not created_count:
        return 0, errors or ["No milestones found in file."]

    state = repository.load_state()
    state = DashboardState(
        milestones=milestones,
        weekly_plans=state.weekly_plans,
        daily_logs=state.daily_logs,
        resourcing=state.resourcing,
    )
    for quarter in milestones:
        table = compute_quarterly_from_milestones(milestones, quarter, categories, people)
        state.resourcing[quarter] = {c: dict(row) for c, row in table.items()}

    repository.save(state, DOC_MILESTONES, merge=False)
    repository.save(state, DOC_RESOURCING)
    logger.info("[import] %s milestones across %s quarters", created_count, len(milestones))
    return created_count, errors
