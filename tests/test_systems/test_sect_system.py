"""Tests for src/cultivation_rpg/systems/sect/system.py."""
from __future__ import annotations

import pytest

from cultivation_rpg.errors import ValidationError
from cultivation_rpg.models.action import Action
from cultivation_rpg.models.character import Player
from cultivation_rpg.systems.sect.system import SectSystem


@pytest.fixture
def system(repos):
    sect_system = SectSystem()
    sect_system.inject(repos=repos)
    return sect_system


@pytest.fixture
def founder(context, repos):
    context.player.cultivation_level = 10
    repos["player"].create(context.player)
    return context.player


def _act(system, context, action_type: str, target_id: str | None = None, **parameters):
    return system.resolve(Action(action_type, context.player.player_id, target_id, parameters), context)


class TestFoundSect:
    def test_level_gate(self, system, context):
        result = _act(system, context, "sect_create", name="Azure Cloud Sect")
        assert result.messages[0].text == "You must reach Cultivation Level 10 to found a sect."

    def test_found(self, system, context, founder, repos):
        result = _act(system, context, "sect_create", name="Azure Cloud Sect", description="")
        assert result.messages[0].text == "You have founded the Azure Cloud Sect!"
        sect = repos["sect"].get(founder.sect_id)
        assert sect.description == "A mysterious sect."

    def test_duplicate_name(self, system, context, founder, repos):
        other = repos["player"].create(Player(name="Rival", username="rival"))
        repos["sect"].create("Azure Cloud Sect", other.player_id)
        with pytest.raises(ValidationError, match="already exists"):
            _act(system, context, "sect_create", name="AZURE CLOUD SECT", description="")
        assert founder.sect_id is None

    def test_menu_depends_on_membership(self, system, context, founder):
        actions = [c.action for c in _act(system, context, "sect_menu").choices]
        assert actions[0] == "sect_create"
        _act(system, context, "sect_create", name="Azure Cloud Sect", description="")
        actions = [c.action for c in _act(system, context, "sect_menu").choices]
        assert actions[:2] == ["sect_view", "sect_leave"]


class TestMembership:
    def test_join_view_leave(self, system, context, repos):
        master = repos["player"].create(Player(name="Master Yun", username="yun"))
        sect = repos["sect"].create("Azure Cloud Sect", master.player_id)
        repos["player"].create(context.player)

        listing = _act(system, context, "sect_list")
        assert ("sect_join", sect.sect_id) in [(c.action, c.value) for c in listing.choices]

        joined = _act(system, context, "sect_join", sect.sect_id)
        assert joined.messages[0].text == "You have joined the Azure Cloud Sect!"
        assert context.player.sect_id == sect.sect_id

        view = _act(system, context, "sect_view")
        assert "Master Yun" in view.messages[0].text
        assert "Lin Feng" in view.messages[0].text

        left = _act(system, context, "sect_leave")
        assert left.messages[0].text == "You have left Azure Cloud Sect."
        assert len(left.messages) == 1
        assert context.player.sect_id is None

    def test_last_member_disbands(self, system, context, founder, repos):
        _act(system, context, "sect_create", name="Lonely Peak", description="")
        result = _act(system, context, "sect_leave")
        assert result.messages[-1].text == "With no members remaining, Lonely Peak has been disbanded."
        assert repos["sect"].list_all() == []

    def test_stale_sect_reference_is_cleared(self, system, context):
        context.player.sect_id = "gone"
        result = _act(system, context, "sect_view")
        assert result.messages[0].text == "Your sect no longer exists."
        assert context.player.sect_id is None
        assert result.state_changed
