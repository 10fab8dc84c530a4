from __future__ import annotations

import datetime

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile
from django.urls import reverse

from pmdashboard.allocations import week_key
from pmdashboard.models import DashboardDocument
from tests.conftest import CATEGORIES, MILESTONES_CSV, PEOPLE

pytestmark = pytest.mark.django_db


def _upload(client, content=MILESTONES_CSV, name="milestones.csv"):
    return client.post(
        reverse("pmdashboard:milestone_import"),
        {"milestones_file": SimpleUploadedFile(name, content.encode("utf-8")), "default_quarter": "q425"},
    )


class TestDashboardView:
    def test_empty_dashboard(self, client) -> None:
        resp = client.get(reverse("pmdashboard:dashboard"), {"quarter": "Q425", "week": "2025-W47"})
        assert resp.status_code == 200
        data = resp.json()
        assert data["quarter"] == "Q425"
        assert data["week"] == "2025-W47"
        assert data["categories"] == CATEGORIES
        assert [row["person"] for row in data["resourcing_grid"]] == PEOPLE
        assert all(cell["is_empty"] for row in data["resourcing_grid"] for cell in row["cells"])
        assert data["over_allocated"] == []
        assert len(data["daily"]) == len(PEOPLE)

    def test_defaults_to_current_week(self, client) -> None:
        data = client.get(reverse("pmdashboard:dashboard")).json()
        assert data["week"] == week_key()

    def test_after_import(self, client) -> None:
        assert _upload(client).status_code == 200
        data = client.get(reverse("pmdashboard:dashboard"), {"quarter": "Q425"}).json()
        assert [m["id"] for m in data["milestones"]["Materials"]] == ["m1", "m2"]
        allison = data["resourcing_grid"][0]
        assert allison["person"] == "Allison"
        assert allison["cells"][0] == {"category": "Materials", "value": 100, "palette": 1, "is_empty": False}


class TestMilestoneImportView:
    def test_import(self, client) -> None:
        resp = _upload(client)
        assert resp.status_code == 200
        assert resp.json()["created"] == 4
        assert DashboardDocument.objects.filter(path="dashboard/milestones").exists()

    def test_bad_file(self, client) -> None:
        resp = _upload(client, content="foo,bar\n1,2\n")
        assert resp.status_code == 400
        assert resp.json()["created"] == 0

    def test_missing_file(self, client) -> None:
        resp = client.post(reverse("pmdashboard:milestone_import"), {})
        assert resp.status_code == 400


class TestMilestoneEditViews:
    def test_progress(self, client) -> None:
        _upload(client)
        resp = client.post(
            reverse("pmdashboard:milestone_progress"),
            {"quarter": "Q425", "category": "Materials", "id": "m1", "progress": 90},
        )
        assert resp.status_code == 200
        assert resp.json() == {"id": "m1", "progress": 90, "saved": True}
        data = client.get(reverse("pmdashboard:dashboard"), {"quarter": "Q425"}).json()
        assert data["milestones"]["Materials"][0]["progress"] == 90

    def test_progress_out_of_range(self, client) -> None:
        resp = client.post(
            reverse("pmdashboard:milestone_progress"),
            {"quarter": "Q425", "category": "Materials", "id": "m1", "progress": 150},
        )
        assert resp.status_code == 400

    def test_unknown_milestone(self, client) -> None:
        _upload(client)
        resp = client.post(
            reverse("pmdashboard:milestone_progress"),
            {"quarter": "Q425", "category": "Materials", "id": "nope", "progress": 10},
        )
        assert resp.status_code == 404

    def test_resourcing(self, client) -> None:
        _upload(client)
        resp = client.post(
            reverse("pmdashboard:milestone_resourcing"),
            {"quarter": "Q425", "category": "Materials", "id": "m2", "Allison": "10", "SamW": "30"},
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["resourcing"]["Materials"]["Allison"] == 60
        assert data["resourcing"]["Materials"]["SamW"] == 30
        assert data["resourcing"]["Materials"]["Mike"] == 50


class TestWeeklyTaskView:
    def _post(self, client, **overrides):
        payload = {
            "quarter": "Q425",
            "week": "2025-W47",
            "category": "Materials",
            "title": "Polish samples",
            "subtasks": "cut; polish",
            "person": "Mike",
            "percent": 60,
        }
        payload.update(overrides)
        return client.post(reverse("pmdashboard:weekly_task_create"), payload)

    def test_over_allocation_is_flagged(self, client) -> None:
        self._post(client)
        resp = self._post(client, title="Etch samples")
        assert resp.status_code == 200
        data = resp.json()
        assert len(data["tasks"]) == 2
        assert data["tasks"][0]["subtasks"] == ["cut", "polish"]
        assert data["over_allocated"] == ["Mike"]
        mike = next(r for r in data["weekly_resourcing"] if r["person"] == "Mike")
        assert mike["total"] == 120
        assert mike["over_allocated"] is True

    def test_snapshot_lands_in_history(self, client) -> None:
        self._post(client)
        history = client.get(reverse("pmdashboard:history"), {"quarter": "Q425"}).json()
        snap = history["weekly_snapshots"]["2025-W47"]
        assert snap["quarter"] == "Q425"
        assert snap["data"]["Materials"][0]["title"] == "Polish samples"

    def test_unknown_person_is_rejected(self, client) -> None:
        resp = self._post(client, person="Zed")
        assert resp.status_code == 400
        assert "person" in resp.json()["fields"]


class TestDailyAndHistoryViews:
    def test_daily_update_shows_on_dashboard(self, client) -> None:
        resp = client.post(reverse("pmdashboard:daily_update"), {"name": "Mike", "today": "reviewing"})
        assert resp.status_code == 200
        assert resp.json()["day"] == datetime.date.today().isoformat()
        daily = client.get(reverse("pmdashboard:dashboard")).json()["daily"]
        mike = next(b for b in daily if b["name"] == "Mike")
        assert mike["today"] == "reviewing"

    def test_history(self, client) -> None:
        _upload(client)
        client.post(reverse("pmdashboard:daily_update"), {"name": "Mike", "today": "x", "day": "2025-11-18"})
        client.post(reverse("pmdashboard:daily_update"), {"name": "SamL", "today": "", "day": "2025-11-17"})
        data = client.get(reverse("pmdashboard:history"), {"quarter": "Q425"}).json()
        assert data["resourcing"]["Materials"]["Allison"] == 100
        assert [d["day"] for d in data["daily"]] == ["2025-11-17", "2025-11-18"]
        assert data["daily"][0]["entries"] == [{"name": "SamL", "today": "—"}]

    def test_history_of_empty_quarter(self, client) -> None:
        data = client.get(reverse("pmdashboard:history"), {"quarter": "Q126"}).json()
        assert data["milestones"] == {} and data["resourcing"] == {} and data["daily"] == []


class TestAdminImport:
    def test_changelist_and_import(self, admin_client) -> None:
        resp = admin_client.get(reverse("admin:pmdashboard_dashboarddocument_changelist"))
        assert resp.status_code == 200
        url = reverse("admin:pmdashboard_dashboarddocument_import_milestones")
        assert admin_client.get(url).status_code == 200
        resp = admin_client.post(
            url, {"milestones_file": SimpleUploadedFile("m.csv", MILESTONES_CSV.encode("utf-8"))}
        )
        assert resp.status_code == 302
        assert DashboardDocument.objects.filter(path="dashboard/resourcing").exists()
