#!/usr/bin/env python3
"""
Fetch the public wger exercise catalog and cache it for the planner.

Writes settings.exercise_catalog_path, the JSON catalog that JsonDal reads
for exercise selection. Each row carries the planner's muscle group and,
where the name gives it away, a movement pattern.
"""
import json
import re
from typing import Any, Dict, List, Optional

import requests

from foundry_lab.config import settings
from foundry_lab.core.taxonomy import MovementPattern
from foundry_lab.infra.log_utils import log_message

CATEGORY_TO_GROUP = {
    "Abs": "Core",
    "Back": "Back",
    "Calves": "Legs",
    "Cardio": "Cardio",
    "Chest": "Chest",
    "Legs": "Legs",
    "Shoulders": "Shoulders",
}

# Arms are split by the primary muscle, so biceps and triceps work can be told apart.
ARM_MUSCLES = {
    "Biceps": "Biceps",
    "Biceps brachii": "Biceps",
    "Brachialis": "Biceps",
    "Triceps": "Triceps",
    "Triceps brachii": "Triceps",
}

# Ordered: "Push Press" is a vertical push before "push" can match anything else.
PATTERN_RULES = [
    (re.compile(r"deadlift|\brdl\b|good morning|hip thrust|kettlebell swing"), MovementPattern.HINGE),
    (re.compile(r"squat|lunge|leg press|step[\s-]?up"), MovementPattern.SQUAT),
    (re.compile(r"overhead press|shoulder press|military press|arnold|push press|landmine press"), MovementPattern.VERTICAL_PUSH),
    (re.compile(r"bench|push[\s-]?up|chest press|\bdips?\b"), MovementPattern.HORIZONTAL_PUSH),
    (re.compile(r"pull[\s-]?up|chin[\s-]?up|pull[\s-]?down"), MovementPattern.VERTICAL_PULL),
    (re.compile(r"\brows?\b|rowing"), MovementPattern.HORIZONTAL_PULL),
    (re.compile(r"carry|farmer"), MovementPattern.CARRY),
    (re.compile(r"plank|crunch|sit[\s-]?up|leg raise|rollout|dead bug|pallof"), MovementPattern.CORE),
]


def fetch_all(url: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
    """Follow wger's `next` links until every page is collected."""
    results: List[Dict[str, Any]] = []
    next_url = url
    while next_url:
        r = requests.get(next_url, params=params if next_url == url else None, timeout=60)
        r.raise_for_status()
        data = r.json()
        if isinstance(data, dict) and "results" in data:
            results.extend(data["results"])
            next_url = data.get("next")
        elif isinstance(data, list):
            results.extend(data)
            next_url = None
        else:
            break
    return results


def pick_english(translations: List[Dict[str, Any]]) -> str:
    """Name in the configured language; fallback to any translation with a name."""
    if not isinstance(translations, list):
        return ""
    preferred = next(
        (t for t in translations if t.get("language") == settings.WGER_LANGUAGE_ID and t.get("name")), None
    )
    chosen = preferred or next((t for t in translations if t.get("name")), None)
    return (chosen.get("name") or "").strip() if chosen else ""


def infer_movement_pattern(name: str) -> Optional[MovementPattern]:
    lowered = name.lower()
    for pattern, movement in PATTERN_RULES:
        if pattern.search(lowered):
            return movement
    return None


def muscle_group_for(category: str, primary_muscles: List[str]) -> str:
    if category == "Arms":
        for muscle in primary_muscles:
            if muscle in ARM_MUSCLES:
                return ARM_MUSCLES[muscle]
        return "Arms"
    return CATEGORY_TO_GROUP.get(category, "Other")


def tidy_row(ex: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    name = pick_english(ex.get("translations") or [])
    if not name or ex.get("id") is None:
        return None
    category = (ex.get("category") or {}).get("name", "")
    primary = [m.get("name_en") or m.get("name", "") for m in (ex.get("muscles") or [])]
    pattern = infer_movement_pattern(name)
    return {
        "id": str(ex["id"]),
        "name": name,
        "category": category,
        "muscle_group": muscle_group_for(category, primary),
        "movement_pattern": pattern.value if pattern else None,
        "modality": "Cardio" if category == "Cardio" else "Strength",
        "equipment": [e.get("name", "") for e in (ex.get("equipment") or [])],
    }


def refresh_catalog() -> int:
    """
    Download the catalog and overwrite the local copy.

    Returns the number of rows written; 0 when the API could not be reached,
    in which case the existing catalog is left untouched.
    """
    base = settings.WGER_API_URL.strip().rstrip("/")
    log_message(f"[wger] Fetching exercises from: {base}/exerciseinfo/")
    try:
        rows = fetch_all(f"{base}/exerciseinfo/", params={"limit": 200})
    except requests.RequestException as e:
        log_message(f"[wger] Catalog refresh failed: {e}", "ERROR")
        return 0

    tidy = [row for row in (tidy_row(ex) for ex in rows) if row is not None]
    tidy.sort(key=lambda r: (r["movement_pattern"] is None, int(r["id"]) if r["id"].isdigit() else 0))

    out_path = settings.exercise_catalog_path
    out_path.parent.mkdir(parents=True, exist_ok=True)
    with open(out_path, "w", encoding="utf-8") as f:
        json.dump(tidy, f, ensure_ascii=False, indent=2)

    log_message(f"[wger] Wrote {len(tidy)} exercises to {out_path}")
    return len(tidy)


if __name__ == "__main__":
    refresh_catalog()
