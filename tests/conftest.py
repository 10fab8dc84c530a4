"""Shared fixtures for the dashboard tests."""

from __future__ import annotations

import pytest
from django.core.cache import cache

CATEGORIES = ["Materials", "Fabrication", "Durability", "ScaleUp", "Operations"]
PEOPLE = ["Allison", "Christian", "Cyril", "Mike", "Ryszard", "SamL", "SamW"]

MILESTONES_CSV = (
    "quarter,category,title,date,people,resourcing,progress,id\n"
    "Q425,Materials,Alloy study,2025-11-01,Allison;Mike,,40,m1\n"
    "Q425,Materials,Coating trial,2025-12-01,,Allison:60,75%,m2\n"
    "Q125,Fabrication,Line setup,2026-02-01,Cyril,Cyril:80,0.5,\n"
    "Q425,Marketing,Launch,2025-10-01,Mike,,10,x1\n"
    ",Operations,Rollout,,SamL,,,\n"
)


@pytest.fixture(autouse=True)
def clear_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture()
def milestones_doc() -> dict:
    return {
        "Q425": {
            "Materials": [
                {"id": "m1", "title": "Alloy study", "resourcing": "Allison:60", "people": "", "progress": 10},
                {"id": "m2", "title": "Coating trial", "resourcing": "Allison:60;Mike:30", "people": "", "progress": 0},
            ],
            "Fabrication": [
                {"id": "f1", "title": "Press line", "resourcing": "", "people": "Cyril;SamW", "progress": 50},
            ],
        }
    }
