import datetime
import logging

from django.http import JsonResponse
from django.views import View

from . import context_helpers
from .allocations import compute_weekly_resourcing, over_allocated_people, week_key
from .forms import (
    DailyUpdateForm,
    MilestoneProgressForm,
    MilestoneRefForm,
    MilestoneUploadForm,
    WeeklyTaskForm,
)
from .milestones_import import import_milestones
from .models import DOC_DAILY, DOC_MILESTONES, DOC_RESOURCING, DOC_WEEKLY
from .state import (
    MilestoneNotFound,
    add_weekly_task,
    daily_boxes,
    set_daily_update,
    set_milestone_progress,
    set_milestone_resourcing,
    week_snapshot,
)
from .store import DashboardRepository

logger = logging.getLogger(__name__)


def _form_error(form):
    return JsonResponse({"error": "Invalid data", "fields": form.errors.get_json_data()}, status=400)


class DashboardView(View):
    """
    🔹 بيانات الداشبورد كلها لربع وأسبوع: milestones، resourcing الربع،
    مهام الأسبوع و resourcing الأسبوع، وتحديثات اليوم لكل شخص.
    """

    def get(self, request, *args, **kwargs):
        categories = context_helpers.get_categories()
        people = context_helpers.get_people()
        quarter = (request.GET.get("quarter") or "").strip() or context_helpers.get_default_quarter()
        week = (request.GET.get("week") or "").strip() or week_key()

        try:
            state = DashboardRepository().load_state()
            week_tasks = (state.weekly_plans.get(quarter) or {}).get(week) or {}
            weekly_totals = compute_weekly_resourcing(week_tasks, categories, people)
            table = state.resourcing.get(quarter) or {}
            return JsonResponse(
                {
                    "quarter": quarter,
                    "week": week,
                    "quarters": context_helpers.get_quarters(),
                    "categories": categories,
                    "people": people,
                    "milestones": context_helpers.get_milestones_list(state, quarter, categories),
                    "resourcing_grid": context_helpers.get_resourcing_grid(table, categories, people),
                    "weekly_tasks": {c: week_tasks.get(c) or [] for c in categories},
                    "weekly_resourcing": context_helpers.get_weekly_resourcing_rows(weekly_totals, categories),
                    "over_allocated": over_allocated_people(weekly_totals),
                    "daily": daily_boxes(state, datetime.date.today(), people),
                }
            )
        except Exception as e:
            logger.exception("[dashboard] could not build dashboard for %s", quarter)
            return JsonResponse({"error": f"An error occurred while loading data: {e}"}, status=500)


class MilestoneProgressView(View):
    def post(self, request, *args, **kwargs):
        form = MilestoneProgressForm(request.POST)
        if not form.is_valid():
            return _form_error(form)
        data = form.cleaned_data
        repository = DashboardRepository()
        try:
            state = set_milestone_progress(
                repository.load_state(), data["quarter"], data["category"], data["id"], data["progress"]
            )
        except MilestoneNotFound as e:
            return JsonResponse({"error": str(e)}, status=404)
        saved = repository.save(state, DOC_MILESTONES)
        return JsonResponse({"id": data["id"], "progress": data["progress"], "saved": saved})


class MilestoneResourcingView(View):
    """
    يحفظ نسب الأشخاص على milestone واحدة (حقل لكل شخص: Allison=40 ...)
    ويرجع resourcing الربع بعد إعادة الحساب.
    """

    def post(self, request, *args, **kwargs):
        form = MilestoneRefForm(request.POST)
        if not form.is_valid():
            return _form_error(form)
        data = form.cleaned_data
        categories = context_helpers.get_categories()
        people = context_helpers.get_people()
        percents = {person: request.POST.get(person, "0") for person in people}

        repository = DashboardRepository()
        try:
            state = set_milestone_resourcing(
                repository.load_state(),
                data["quarter"],
                data["category"],
                data["id"],
                percents,
                categories,
                people,
            )
        except MilestoneNotFound as e:
            return JsonResponse({"error": str(e)}, status=404)

        saved = repository.save(state, DOC_MILESTONES, DOC_RESOURCING)
        table = state.resourcing.get(data["quarter"]) or {}
        return JsonResponse(
            {
                "id": data["id"],
                "saved": saved,
                "resourcing": table,
                "resourcing_grid": context_helpers.get_resourcing_grid(table, categories, people),
            }
        )


class MilestoneImportView(View):
    def post(self, request, *args, **kwargs):
        form = MilestoneUploadForm(request.POST, request.FILES)
        if not form.is_valid():
            return _form_error(form)
        created_count, errors = import_milestones(
            request.FILES["milestones_file"],
            DashboardRepository(),
            context_helpers.get_categories(),
            context_helpers.get_people(),
            default_quarter=(form.cleaned_data.get("default_quarter") or "").strip().upper() or None,
        )
        status = 200 if created_count else 400
        return JsonResponse({"created": created_count, "errors": errors}, status=status)


class WeeklyTaskCreateView(View):
    def post(self, request, *args, **kwargs):
        categories = context_helpers.get_categories()
        people = context_helpers.get_people()
        form = WeeklyTaskForm(request.POST, categories=categories, people=people)
        if not form.is_valid():
            return _form_error(form)
        data = form.cleaned_data
        week = (data.get("week") or "").strip() or week_key()

        repository = DashboardRepository()
        state = add_weekly_task(
            repository.load_state(),
            data["quarter"],
            week,
            data["category"],
            data["title"],
            data["person"],
            data.get("percent") or 0,
            data.get("subtasks"),
        )
        saved = repository.save(state, DOC_WEEKLY)
        repository.snapshot_week(week, week_snapshot(state, data["quarter"], week))

        week_tasks = state.weekly_plans[data["quarter"]][week]
        totals = compute_weekly_resourcing(week_tasks, categories, people)
        return JsonResponse(
            {
                "week": week,
                "saved": saved,
                "tasks": week_tasks.get(data["category"]) or [],
                "weekly_resourcing": context_helpers.get_weekly_resourcing_rows(totals, categories),
                "over_allocated": over_allocated_people(totals),
            }
        )


class DailyUpdateView(View):
    def post(self, request, *args, **kwargs):
        form = DailyUpdateForm(request.POST)
        if not form.is_valid():
            return _form_error(form)
        data = form.cleaned_data
        day = data.get("day") or datetime.date.today()

        repository = DashboardRepository()
        state = set_daily_update(repository.load_state(), day, data["name"], data.get("today"))
        saved = repository.save(state, DOC_DAILY)
        return JsonResponse({"day": day.isoformat(), "name": data["name"], "saved": saved})


class HistoryView(View):
    def get(self, request, *args, **kwargs):
        quarter = (request.GET.get("quarter") or "").strip() or context_helpers.get_default_quarter()
        try:
            repository = DashboardRepository()
            context = context_helpers.get_history_context(
                repository.load_state(), repository.load_history(), quarter
            )
            return JsonResponse(context)
        except Exception as e:
            logger.exception("[history] could not load history for %s", quarter)
            return JsonResponse({"error": f"Error loading history: {e}"}, status=500)
