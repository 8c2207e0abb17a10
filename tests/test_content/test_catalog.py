"""Tests for the bundled content: items, pill table, classes, roots and panels."""
from __future__ import annotations

import pytest

from cultivation_rpg.content.catalog import build_catalog
from cultivation_rpg.content.loader import load_classes, load_pill_table
from cultivation_rpg.content.panels import render_panel
from cultivation_rpg.models.character import CURRENCY_KEY
from cultivation_rpg.models.item import EffectKind, ItemType


class TestPillTable:
    def test_rows(self):
        rows = load_pill_table()
        assert len(rows) == 15
        assert rows[0]["name"] == "Basic Qi Recovery Pill"
        assert rows[0]["ingredients"] == "Jadeleaf Grass + Crimson Spirit Berry"

    def test_quoted_use_text(self):
        rows = {row["name"]: row for row in load_pill_table()}
        assert rows["Spirit-Eye Elixir"]["use"].startswith("Improves spiritual perception, range of sight")

    def test_blank_rows_skipped(self, tmp_path):
        table = tmp_path / "pills.csv"
        table.write_text(
            "Elixir Name,Ingredients,Use\n"
            ",,\n"
            "Dew Pill,Moondew Flower,Soothes.\n",
            encoding="utf-8",
        )
        assert [row["name"] for row in load_pill_table(table)] == ["Dew Pill"]


class TestCatalog:
    def test_every_ingredient_is_an_item(self, catalog):
        for recipe in catalog.recipes.values():
            for key in recipe.ingredients:
                assert catalog.item(key) is not None, key

    def test_unknown_ingredient_becomes_material(self, tmp_path):
        table = tmp_path / "pills.csv"
        table.write_text(
            "Elixir Name,Ingredients,Use\n"
            "Dew Pill,Moondew Flower + Ghost Moss,Soothes.\n",
            encoding="utf-8",
        )
        built = build_catalog(table)
        moss = built.item("ghost_moss")
        assert moss is not None
        assert moss.item_type == ItemType.MATERIAL
        assert built.recipe("dew_pill").ingredients == {"moondew_flower": 1, "ghost_moss": 1}

    def test_breakthrough_pills_locked_in_combat(self, catalog):
        pill = catalog.item("foundation_establishment_pill")
        assert pill.effects[0].kind == EffectKind.BREAKTHROUGH
        assert not pill.usable_in_combat
        assert catalog.item("basic_qi_recovery_pill").usable_in_combat

    def test_starting_resources(self, catalog):
        resources = catalog.starting_resources()
        assert resources[CURRENCY_KEY] == 0
        assert "jadeleaf_grass" in resources
        assert not any(key.startswith("recipe_") for key in resources)
        assert all(qty == 0 for qty in resources.values())

    def test_item_name_fallback(self, catalog):
        assert catalog.item_name("jadeleaf_grass") == "Jadeleaf Grass"
        assert catalog.item_name("nothing_here") == "nothing_here"


class TestClasses:
    @pytest.mark.parametrize("key", [
        "martial_cultivator", "qi_cultivator", "alchemist", "artifact_refiner",
        "talisman_master", "formation_master", "beast_tamer", "poison_master",
        "puppet_master", "demon_cultivator",
    ])
    def test_class_has_description(self, key):
        data = load_classes()[key]
        assert data["name"]
        assert data["specialty"]
        assert data["recommendation"]


class TestPanels:
    def test_class_info(self, catalog):
        text = render_panel("class_info.j2", info=catalog.classes["alchemist"])
        assert "Alchemist" in text
        assert "Specialty: Crafting pills" in text

    def test_stats_sheet(self, player):
        text = render_panel(
            "stats.j2",
            player=player,
            realm="Qi Condensation Stage 1",
            xp_next=200,
            sect_name=None,
            weapon_name=None,
            slots_used=0,
            known_recipes=[],
        )
        assert "Lin Feng" in text
        assert "Progress:   0/200" in text
        assert "Sect:       None" in text
        assert "Corruption" not in text
