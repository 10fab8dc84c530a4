from django.db import models


# ─── القوائم الثابتة (تقدر تتغير من settings) ───
DEFAULT_CATEGORIES = ["Materials", "Fabrication", "Durability", "ScaleUp", "Operations"]
DEFAULT_PEOPLE = ["Allison", "Christian", "Cyril", "Mike", "Ryszard", "SamL", "SamW"]
ALL_QUARTERS = ["Q125", "Q225", "Q325", "Q425", "Q126", "Q226", "Q326", "Q426"]

# ─── مسارات الدوكيومنتات في الـ store ومفاتيح الكاش المقابلة ───
DOC_MILESTONES = "milestones"
DOC_WEEKLY = "weekly_plans"
DOC_DAILY = "daily_logs"
DOC_RESOURCING = "resourcing"
DOC_HISTORY = "history"

STORE_PATHS = {
    DOC_MILESTONES: "dashboard/milestones",
    DOC_WEEKLY: "dashboard/weeklyPlans",
    DOC_DAILY: "dashboard/dailyLogs",
    DOC_RESOURCING: "dashboard/resourcing",
    DOC_HISTORY: "dashboard/history/weeks",
}

CACHE_KEYS = {
    DOC_MILESTONES: "milestonesData",
    DOC_WEEKLY: "weeklyPlans",
    DOC_DAILY: "dailyLogs",
    DOC_RESOURCING: "resourcingData_v1",
}


# ─── دوكيومنت JSON واحد لكل نوع بيانات (milestones, weeklyPlans, ...) ───
class DashboardDocument(models.Model):
    """Whole JSON document stored under a path such as dashboard/milestones."""
    path = models.CharField(max_length=200, unique=True, help_text="مثال: dashboard/milestones")
    data = models.JSONField(default=dict, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Dashboard Document"
        verbose_name_plural = "Dashboard Documents"
        ordering = ["path"]

    def __str__(self):
        return f"{self.path} ({len(self.data or {})} keys)"
