from django.contrib import admin
from django.contrib import messages
from django.shortcuts import redirect, render
from django.urls import path

from .models import DashboardDocument


# ─── Dashboard Documents (milestones, weeklyPlans, dailyLogs, resourcing, history) ───
@admin.register(DashboardDocument)
class DashboardDocumentAdmin(admin.ModelAdmin):
    list_display = ("path", "key_count", "updated_at")
    search_fields = ("path",)
    readonly_fields = ("updated_at",)
    change_list_template = "admin/pmdashboard/dashboarddocument/change_list.html"

    @admin.display(description="Keys")
    def key_count(self, obj):
        return len(obj.data or {})

    def get_urls(self):
        urls = super().get_urls()
        custom = [
            path(
                "import-milestones/",
                self.admin_site.admin_view(self.import_milestones_view),
                name="pmdashboard_dashboarddocument_import_milestones",
            ),
        ]
        return custom + urls

    def import_milestones_view(self, request):
        from . import context_helpers
        from .forms import MilestoneUploadForm
        from .milestones_import import import_milestones
        from .store import DashboardRepository

        if request.method == "POST":
            form = MilestoneUploadForm(request.POST, request.FILES)
            if form.is_valid():
                default_quarter = (form.cleaned_data.get("default_quarter") or "").strip().upper() or None
                created_count, err_list = import_milestones(
                    request.FILES["milestones_file"],
                    DashboardRepository(),
                    context_helpers.get_categories(),
                    context_helpers.get_people(),
                    default_quarter=default_quarter,
                )
                if created_count > 0:
                    messages.success(request, f"Successfully imported {created_count} milestones.")
                if err_list:
                    for err in err_list[:10]:
                        messages.warning(request, err)
                    if len(err_list) > 10:
                        messages.warning(request, f"... and {len(err_list) - 10} more messages.")
                if created_count > 0 or not err_list:
                    return redirect("admin:pmdashboard_dashboarddocument_changelist")
        else:
            form = MilestoneUploadForm()
        context = {
            **self.admin_site.each_context(request),
            "form": form,
            "title": "Import milestones from CSV / Excel",
            "opts": self.model._meta,
        }
        return render(request, "admin/pmdashboard/dashboarddocument/import_milestones.html", context)
