from django.urls import path
from . import views

app_name = "pmdashboard"

urlpatterns = [
    path("", views.DashboardView.as_view(), name="dashboard"),
    path("history/", views.HistoryView.as_view(), name="history"),

    path("milestones/progress/", views.MilestoneProgressView.as_view(), name="milestone_progress"),
    path("milestones/resourcing/", views.MilestoneResourcingView.as_view(), name="milestone_resourcing"),
    path("milestones/import/", views.MilestoneImportView.as_view(), name="milestone_import"),

    path("weekly/tasks/", views.WeeklyTaskCreateView.as_view(), name="weekly_task_create"),
    path("daily/", views.DailyUpdateView.as_view(), name="daily_update"),
]
