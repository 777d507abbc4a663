"""
Pytest configuration and fixtures.

Provides an in-memory stand-in for the spreadsheet transport so loader and
router tests never touch the network.
"""

from typing import Any, Dict, List

import pytest

from career_quiz.errors import DataLoadError
from career_quiz.models import Job, OptionJobMapItem, TableProbe


class FakeTableSource:
    """Serves canned rows per sheet name; an Exception value is raised instead."""

    def __init__(self, tables: Dict[str, Any]):
        self.tables = tables
        self.fetched: List[str] = []
        self.probed: List[str] = []

    async def fetch_table(self, sheet_name: str) -> List[Dict[str, Any]]:
        self.fetched.append(sheet_name)
        value = self.tables.get(sheet_name, [])
        if isinstance(value, Exception):
            raise value
        return list(value)

    async def probe_table(self, sheet_name: str) -> TableProbe:
        self.probed.append(sheet_name)
        value = self.tables.get(sheet_name, [])
        if isinstance(value, DataLoadError):
            return TableProbe(table=sheet_name, ok=False, reason=value.kind, details=str(value))
        labels = list(value[0].keys()) if value else []
        return TableProbe(
            table=sheet_name,
            ok=True,
            row_count=len(value),
            column_count=len(labels),
            column_labels=labels,
        )


@pytest.fixture
def sheet_rows() -> Dict[str, Any]:
    """A small but complete spreadsheet: two questions, three jobs."""
    return {
        "Questions": [
            {"question_id": "q2", "order": 2, "text": "Pick a weekend activity"},
            {"question_id": "q1", "order": 1, "text": "Pick a school subject"},
        ],
        "Options": [
            {"question_id": "q1", "option_id": "o1", "option_text": "Cooking class", "icon": "🍳"},
            {"question_id": "q1", "option_id": "o2", "option_text": "Physics", "icon": "🧲"},
            {"question_id": "q2", "option_id": "o3", "option_text": "Flying kites", "icon": "🪁"},
            {"question_id": "q2", "option_id": "o4", "option_text": "Baking", "icon": "🧁"},
        ],
        "Jobs": [
            {"job_id": "j1", "job_name": "Chef", "cluster_code": "HOS", "cluster_name": "Hospitality", "emoji": "👩‍🍳"},
            {"job_id": "j2", "job_name": "Pilot", "cluster_code": "TRN", "cluster_name": "Transportation", "emoji": "✈️"},
            {"job_id": "j3", "job_name": "Engineer", "cluster_code": "STM", "cluster_name": "STEM", "emoji": "🛠️"},
        ],
        "OptionJobMap": [
            {"option_id": "o1", "job_id": "j1"},
            {"option_id": "o2", "job_id": "j3"},
            {"option_id": "o2", "job_id": "j2"},
            {"option_id": "o3", "job_id": "j2"},
            {"option_id": "o4", "job_id": "j1"},
        ],
    }


@pytest.fixture
def fake_source(sheet_rows):
    return FakeTableSource(sheet_rows)


@pytest.fixture
def chef_pilot():
    """Jobs and map from the Chef/Pilot scoring example."""
    jobs = [Job(id="j1", name="Chef"), Job(id="j2", name="Pilot")]
    option_job_map = [
        OptionJobMapItem(option_id="o1", job_id="j1"),
        OptionJobMapItem(option_id="o2", job_id="j1"),
        OptionJobMapItem(option_id="o3", job_id="j2"),
    ]
    return jobs, option_job_map
