"""Tests for src/cultivation_rpg/mechanics/crafting.py."""
from __future__ import annotations

import pytest

from cultivation_rpg.mechanics.crafting import (
    CLASS_CRAFTS,
    available_recipes,
    can_class_craft,
    class_craft,
    concoct,
    derive_recipe,
    is_recipe_available,
    max_concoct_quantity,
    recipe_qi_cost,
    required_level_for,
)


class TestRecipeDerivation:
    def test_basic_recipe(self, catalog):
        recipe = catalog.recipe("basic_qi_recovery_pill")
        assert recipe.is_basic
        assert recipe.recipe_item_key is None
        assert recipe.ingredients == {"jadeleaf_grass": 1, "crimson_spirit_berry": 1}
        assert recipe.qi_cost == 22
        assert recipe.required_cultivation_level == 1

    def test_every_non_basic_recipe_has_a_scroll(self, catalog):
        for recipe in catalog.recipes.values():
            if recipe.is_basic:
                continue
            scroll = catalog.item(recipe.recipe_item_key)
            assert scroll is not None
            assert scroll.name == f"Recipe: {recipe.name}"

    def test_fifteen_recipes_loaded(self, catalog):
        assert len(catalog.recipes) == 15

    def test_qi_cost_formula(self):
        assert recipe_qi_cost("Golden Core Nine Revolutions Pill", 3) == 30

    @pytest.mark.parametrize("name,use,breakthrough,expected", [
        ("Foundation Establishment Pill", "", 9, 9),
        ("Advanced Spirit Pill", "", None, 19),
        ("Nascent Soul Vital Pill", "", None, 28),
        ("Mystery Pill", "Meant for core cultivators.", None, 19),
        ("Mystery Pill", "Only for Nascent Soul experts.", None, 28),
        ("Mind-Calming Elixir", "Clears mental fatigue.", None, 1),
    ])
    def test_required_level(self, name, use, breakthrough, expected):
        assert required_level_for(name, use, breakthrough) == expected

    def test_derive_keys(self):
        recipe = derive_recipe("Spirit-Eye Elixir", {"spirit_eye_flower": 1})
        assert recipe.recipe_key == "spirit_eye_elixir"
        assert recipe.produces_item_key == "spirit_eye_elixir"
        assert recipe.recipe_item_key == "recipe_spirit_eye_elixir"

    def test_breakthrough_recipes_need_plateau_level(self, catalog):
        assert catalog.recipe("golden_core_nine_revolutions_pill").required_cultivation_level == 18


class TestAvailability:
    def test_new_player_only_has_basic(self, player, catalog):
        keys = [r.recipe_key for r in available_recipes(player, catalog)]
        assert keys == ["basic_qi_recovery_pill"]

    def test_known_recipe_needs_level(self, player, catalog):
        player.known_recipes.append("advanced_spirit_pill")
        recipe = catalog.recipe("advanced_spirit_pill")
        assert not is_recipe_available(player, recipe)
        player.cultivation_level = 19
        assert is_recipe_available(player, recipe)


class TestConcoct:
    def test_max_quantity_limited_by_qi(self, player, catalog):
        recipe = catalog.recipe("basic_qi_recovery_pill")
        player.add_item("jadeleaf_grass", 5)
        player.add_item("crimson_spirit_berry", 5)
        assert max_concoct_quantity(player, recipe) == 2  # 50 QI // 22

    def test_success(self, player, catalog):
        recipe = catalog.recipe("basic_qi_recovery_pill")
        player.add_item("jadeleaf_grass", 3)
        player.add_item("crimson_spirit_berry", 3)
        ok, message = concoct(player, recipe, 2)
        assert ok
        assert message == "Successfully concocted 2 x Basic Qi Recovery Pill!"
        assert player.count("jadeleaf_grass") == 1
        assert player.count("crimson_spirit_berry") == 1
        assert player.current_qi == 50 - 44
        assert player.count("basic_qi_recovery_pill") == 2

    def test_missing_ingredient_is_atomic(self, player, catalog):
        recipe = catalog.recipe("basic_qi_recovery_pill")
        player.add_item("jadeleaf_grass", 2)
        player.add_item("crimson_spirit_berry", 1)
        ok, _ = concoct(player, recipe, 2)
        assert not ok
        assert player.count("jadeleaf_grass") == 2
        assert player.count("crimson_spirit_berry") == 1
        assert player.current_qi == 50
        assert player.count("basic_qi_recovery_pill") == 0

    def test_insufficient_qi_is_atomic(self, player, catalog):
        recipe = catalog.recipe("basic_qi_recovery_pill")
        player.add_item("jadeleaf_grass", 5)
        player.add_item("crimson_spirit_berry", 5)
        ok, reason = concoct(player, recipe, 3)
        assert not ok
        assert "QI" in reason
        assert player.count("jadeleaf_grass") == 5
        assert player.current_qi == 50

    @pytest.mark.parametrize("quantity", [0, -1])
    def test_rejects_non_positive_quantity(self, player, catalog, quantity):
        ok, _ = concoct(player, catalog.recipe("basic_qi_recovery_pill"), quantity)
        assert not ok

    def test_unknown_recipe_rejected(self, player, catalog):
        recipe = catalog.recipe("vitality_rejuvenation_pill")
        player.add_item("moondew_flower", 1)
        player.add_item("earthroot_ginseng", 1)
        ok, _ = concoct(player, recipe, 1)
        assert not ok
        assert player.count("moondew_flower") == 1


class TestClassCrafts:
    def test_forge_artifact(self, player):
        craft = CLASS_CRAFTS["forge_artifact"]
        player.chosen_class_key = "artifact_refiner"
        player.add_item("rough_iron_ore", 3)
        ok, _ = class_craft(player, craft)
        assert ok
        assert player.count("rough_iron_ore") == 0
        assert player.count("rough_sword") == 1
        assert player.current_qi == 35

    def test_draw_talisman_wrong_class(self, player):
        player.add_item("blank_talisman_paper", 1)
        ok, reason = can_class_craft(player, CLASS_CRAFTS["draw_talisman"])
        assert not ok
        assert "path" in reason

    def test_draw_talisman_needs_paper(self, player):
        player.chosen_class_key = "talisman_master"
        ok, reason = class_craft(player, CLASS_CRAFTS["draw_talisman"], {"blank_talisman_paper": "Blank Talisman Paper"})
        assert not ok
        assert "Blank Talisman Paper" in reason
        assert player.current_qi == 50
