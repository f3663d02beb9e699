import json

import pytest
import requests

from foundry_lab.config import settings
from foundry_lab.core.taxonomy import MovementPattern
from foundry_lab.data_access.json_dal import JsonDal
from integrations.wger import catalog

PAGE_1 = {
    "next": "https://wger.test/api/v2/exerciseinfo/?limit=200&offset=200",
    "results": [
        {"id": 20, "category": {"name": "Legs"}, "translations": [{"language": 2, "name": "Barbell Back Squat"}]},
        {
            "id": 5,
            "category": {"name": "Arms"},
            "muscles": [{"name": "Biceps brachii", "name_en": "Biceps"}],
            "translations": [{"language": 1, "name": "Bizepscurl"}, {"language": 2, "name": "Biceps Curl"}],
        },
        {"id": 7, "category": {"name": "Chest"}, "translations": []},
        {"id": 3, "category": {"name": "Abs"}, "translations": [{"language": 2, "name": "Farmer's Walk"}]},
    ],
}
PAGE_2 = {
    "next": None,
    "results": [
        {
            "id": 11,
            "category": {"name": "Chest"},
            "equipment": [{"name": "Barbell"}, {"name": "Bench"}],
            "translations": [{"language": 2, "name": "Bench Press"}],
        },
    ],
}


class FakeResponse:
    def __init__(self, payload):
        self.payload = payload

    def raise_for_status(self):
        pass

    def json(self):
        return self.payload


@pytest.fixture
def wger_pages(monkeypatch):
    calls = []

    def fake_get(url, params=None, timeout=None):
        calls.append((url, params))
        return FakeResponse(PAGE_2 if "offset" in url else PAGE_1)

    monkeypatch.setattr(settings, "WGER_API_URL", "https://wger.test/api/v2/")
    monkeypatch.setattr(catalog.requests, "get", fake_get)
    return calls


@pytest.mark.parametrize(
    "name, pattern",
    [
        ("Romanian Deadlift", MovementPattern.HINGE),
        ("Bulgarian Split Squat", MovementPattern.SQUAT),
        ("Push Press", MovementPattern.VERTICAL_PUSH),
        ("Incline Bench Press", MovementPattern.HORIZONTAL_PUSH),
        ("Push-Up", MovementPattern.HORIZONTAL_PUSH),
        ("Lat Pulldown", MovementPattern.VERTICAL_PULL),
        ("Seated Cable Row", MovementPattern.HORIZONTAL_PULL),
        ("Suitcase Carry", MovementPattern.CARRY),
        ("Side Plank", MovementPattern.CORE),
        ("Biceps Curl", None),
    ],
)
def test_movement_pattern_from_name(name, pattern):
    assert catalog.infer_movement_pattern(name) == pattern


def test_muscle_groups():
    assert catalog.muscle_group_for("Abs", []) == "Core"
    assert catalog.muscle_group_for("Calves", []) == "Legs"
    assert catalog.muscle_group_for("Arms", ["Triceps brachii"]) == "Triceps"
    assert catalog.muscle_group_for("Arms", []) == "Arms"
    assert catalog.muscle_group_for("Neck", []) == "Other"


def test_refresh_catalog_follows_pages_and_writes_rows(wger_pages):
    assert catalog.refresh_catalog() == 4
    assert wger_pages[0] == ("https://wger.test/api/v2/exerciseinfo/", {"limit": 200})
    assert wger_pages[1][1] is None

    rows = json.loads(settings.exercise_catalog_path.read_text(encoding="utf-8"))
    # patterned rows first, each group by id
    assert [r["id"] for r in rows] == ["3", "11", "20", "5"]
    bench = rows[1]
    assert bench["muscle_group"] == "Chest"
    assert bench["movement_pattern"] == "horizontal_push"
    assert bench["equipment"] == ["Barbell", "Bench"]
    assert rows[3]["name"] == "Biceps Curl"
    assert rows[3]["muscle_group"] == "Biceps"
    assert rows[3]["movement_pattern"] is None

    dal = JsonDal()
    assert dal.find_exercise(movement_pattern=MovementPattern.SQUAT).name == "Barbell Back Squat"
    assert dal.find_exercise(muscle_groups=["Biceps"]).id == "5"


def test_refresh_failure_keeps_existing_catalog(monkeypatch):
    def failing_get(url, params=None, timeout=None):
        raise requests.ConnectionError("offline")

    monkeypatch.setattr(catalog.requests, "get", failing_get)
    assert catalog.refresh_catalog() == 0
    assert not settings.exercise_catalog_path.exists()
    assert "Catalog refresh failed" in settings.log_path.read_text(encoding="utf-8")
