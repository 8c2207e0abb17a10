"""Tests for the inventory and crafting systems."""
from __future__ import annotations

import pytest

from cultivation_rpg.models.action import Action
from cultivation_rpg.models.character import Monster
from cultivation_rpg.systems.combat.system import start_combat
from cultivation_rpg.systems.crafting.system import CraftingSystem
from cultivation_rpg.systems.inventory.system import InventorySystem


def _act(system, context, action_type: str, target_id: str | None = None, **parameters):
    return system.resolve(Action(action_type, context.player.player_id, target_id, parameters), context)


class TestInventorySystem:
    @pytest.fixture
    def system(self):
        return InventorySystem()

    def test_show_lists_usable_items(self, system, context):
        context.player.add_item("minor_healing_pill", 2)
        context.player.add_item("rough_sword", 1)
        context.player.add_item("jadeleaf_grass", 4)
        result = _act(system, context, "show_inventory")
        assert context.display.inventory_shown == 1
        assert result.messages[0].text == "Inventory: 3/50 slots used. Spirit Stones: 0"
        labels = [c.text for c in result.choices]
        assert "Use Minor Healing Pill (2)" in labels
        assert "Equip Rough Sword (1)" in labels
        assert not any("Jadeleaf" in label for label in labels)
        assert result.choices[-1].action == "main_menu"

    def test_use_item(self, system, context):
        context.player.health = 50
        context.player.add_item("minor_healing_pill", 1)
        result = _act(system, context, "use_item", "minor_healing_pill")
        assert result.success
        assert result.state_changed
        assert context.player.health == 75

    def test_use_in_combat_refused(self, system, context):
        context.player.add_item("minor_healing_pill", 1)
        start_combat(context, Monster(name="Wolf", max_health=10, health=10))
        result = _act(system, context, "use_item", "minor_healing_pill")
        assert not result.success
        assert context.player.count("minor_healing_pill") == 1

    def test_failed_use_is_not_saved(self, system, context):
        result = _act(system, context, "use_item", "minor_healing_pill")
        assert not result.success
        assert not result.state_changed


class TestCraftingSystem:
    @pytest.fixture
    def system(self):
        return CraftingSystem()

    def test_menu_lists_basic_recipe(self, system, context):
        result = _act(system, context, "concoct_menu")
        assert [c.value for c in result.choices] == ["basic_qi_recovery_pill", None]

    def test_concoct_with_prompt(self, system, context, display):
        context.player.add_item("jadeleaf_grass", 2)
        context.player.add_item("crimson_spirit_berry", 2)
        display.inputs = ["2"]
        result = _act(system, context, "concoct", "basic_qi_recovery_pill")
        assert result.success
        assert display.prompts == ["How many Basic Qi Recovery Pill to concoct? (max 2)"]
        assert context.player.count("basic_qi_recovery_pill") == 2

    def test_cancelled_prompt(self, system, context):
        result = _act(system, context, "concoct", "basic_qi_recovery_pill")
        assert result.messages[0].text == "Concoction cancelled."

    def test_missing_ingredients(self, system, context):
        result = _act(system, context, "concoct", "basic_qi_recovery_pill", quantity=1)
        assert not result.success
        assert context.player.current_qi == 50

    def test_class_craft_menu_and_forge(self, system, context):
        context.player.chosen_class_key = "artifact_refiner"
        context.player.add_item("rough_iron_ore", 3)
        assert "forge_artifact" in [c.action for c in system.get_available_actions(context)]
        result = _act(system, context, "forge_artifact")
        assert result.messages[0].text == "You forge a Rough Sword!"
        assert context.player.count("rough_sword") == 1

    def test_draw_talisman(self, system, context):
        context.player.chosen_class_key = "talisman_master"
        context.player.add_item("blank_talisman_paper", 2)
        result = _act(system, context, "draw_talisman")
        assert result.messages[0].text == "You draw a Minor Fire Talisman!"
        assert context.player.count("blank_talisman_paper") == 1
        assert context.player.current_qi == 45

    def test_wrong_class(self, system, context):
        context.player.add_item("rough_iron_ore", 3)
        result = _act(system, context, "forge_artifact")
        assert not result.success
        assert context.player.count("rough_iron_ore") == 3
