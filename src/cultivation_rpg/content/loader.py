from __future__ import annotations
import csv
import tomllib
from pathlib import Path
from typing import Any

CONTENT_DIR = Path(__file__).parent
TEMPLATES_DIR = CONTENT_DIR / "templates"

def load_toml(filepath: Path) -> dict[str, Any]:
    with open(filepath, "rb") as f:
        return tomllib.load(f)

def load_all_items() -> dict[str, dict]:
    items = {}
    items_dir = CONTENT_DIR / "items"
    for f in sorted(items_dir.glob("*.toml")):
        data = load_toml(f)
        for item in data.get("items", []):
            items[item["id"]] = item
    return items

def load_pill_effects() -> dict[str, dict]:
    return load_toml(CONTENT_DIR / "pill_effects.toml")

def load_classes() -> dict[str, dict]:
    return load_toml(CONTENT_DIR / "classes.toml")

def load_spiritual_roots() -> list[dict]:
    return load_toml(CONTENT_DIR / "spiritual_roots.toml").get("roots", [])

def load_herb_drops() -> dict[int, list[dict]]:
    data = load_toml(CONTENT_DIR / "herb_drops.toml")
    return {int(key.removeprefix("tier_")): entries for key, entries in data.items()}

def load_monsters() -> dict[str, Any]:
    data = load_toml(CONTENT_DIR / "monsters.toml")
    return {
        "archetypes": {a["tier"]: a for a in data.get("archetypes", [])},
        "rival": data.get("rival", {}),
    }


def load_pill_table(filepath: Path | None = None) -> list[dict[str, str]]:
    """Read the elixir table: one row per pill with name, ingredients and use text."""
    path = filepath or CONTENT_DIR / "pill_recipes.csv"
    rows = []
    with open(path, newline="", encoding="utf-8") as f:
        for row in csv.DictReader(f):
            name = (row.get("Elixir Name") or "").strip()
            if not name:
                continue
            rows.append({
                "name": name,
                "ingredients": (row.get("Ingredients") or "").strip(),
                "use": (row.get("Use") or "").strip(),
            })
    return rows
