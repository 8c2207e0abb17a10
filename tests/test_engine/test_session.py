"""Tests for src/cultivation_rpg/engine/session.py — full intent loop against a real store."""
from __future__ import annotations

import sqlite3

import pytest

from cultivation_rpg.errors import SAVE_FAILED
from cultivation_rpg.mechanics.monsters import generate_monster
from cultivation_rpg.models.character import CURRENCY_KEY
from cultivation_rpg.models.combat import CombatSession


def _new_cultivator(make_session, username: str, class_key: str = "alchemist"):
    session = make_session()
    session.perform("create_account", username=username, password="pw", name=username.title())
    session.perform("roll_spiritual_root")
    session.perform("choose_class", class_key)
    return session


class TestAccountFlow:
    def test_logged_out_menu(self, make_session):
        session = make_session()
        session.start()
        assert session.display.button_actions() == ["create_account", "login"]

    def test_create_account_then_root_then_class(self, make_session, repos):
        session = make_session()
        result = session.perform("create_account", username="lin", password="pw", name="Lin Feng")
        assert result.success
        assert session.display.button_actions() == ["roll_spiritual_root", "logout"]

        session.perform("roll_spiritual_root")
        stored = repos["player"].get_by_username("lin")
        assert stored.has_rolled_spiritual_root
        assert "show_class_info" in session.display.button_actions()

        info = session.perform("show_class_info", "alchemist")
        assert "choose_class" in [c.action for c in info.choices]

        session.perform("choose_class", "alchemist")
        stored = repos["player"].get_by_username("lin")
        assert stored.chosen_class_key == "alchemist"
        assert stored.count("jadeleaf_grass") == 5
        actions = session.display.button_actions()
        assert "explore" in actions
        assert "concoct_menu" in actions
        assert "market_menu" in actions

    def test_prompts_when_no_parameters(self, make_session):
        session = make_session(["mei", "pw", ""])
        session.perform("create_account")
        assert session.context.player.name == "Nameless One"
        assert session.display.prompts == ["Username:", "Password:", "Name your cultivator:"]

    def test_duplicate_username(self, make_session):
        make_session().perform("create_account", username="lin", password="pw", name="A")
        session = make_session()
        result = session.perform("create_account", username="lin", password="pw", name="B")
        assert not result.success
        assert "already taken" in session.display.texts()[-1]
        assert session.context.player is None

    def test_login_and_logout(self, make_session):
        first = _new_cultivator(make_session, "lin")
        first.perform("logout")
        assert first.context.player is None

        second = make_session()
        bad = second.perform("login", username="lin", password="wrong")
        assert not bad.success
        assert "Invalid username or password." in second.display.texts()

        good = second.perform("login", username="lin", password="pw")
        assert good.success
        assert second.context.player.chosen_class_key == "alchemist"


class TestSessionGuards:
    def test_busy_rejects_new_intents(self, make_session):
        session = _new_cultivator(make_session, "lin")
        session.busy = True
        assert session.perform("meditate") is None
        assert session.display.texts()[-1] == "Please wait for the current action to finish."

    def test_main_menu_is_not_dispatched(self, make_session):
        session = _new_cultivator(make_session, "lin")
        assert session.perform("main_menu") is None
        assert "explore" in session.display.button_actions()

    def test_save_failure_keeps_state_and_warns(self, make_session, repos, monkeypatch):
        session = _new_cultivator(make_session, "lin")
        session.context.player.health = 10

        def broken_save(player, base=None):
            raise sqlite3.OperationalError("disk I/O error")

        monkeypatch.setattr(repos["player"], "save", broken_save)
        result = session.perform("meditate")
        assert result.success
        assert session.context.player.health > 10
        assert (SAVE_FAILED, "error") in session.display.messages

    @pytest.mark.parametrize("action_type,parameters", [
        ("meditate", {}),
        ("sect_create", {"name": "Azure Cloud Sect", "description": ""}),
        ("sect_menu", {}),
        ("chat_send", {"text": "Hold on, a wolf."}),
        ("chat_view", {}),
    ])
    @pytest.mark.parametrize("busy_with", ["stealth_prompt", "combat"])
    def test_town_actions_refused_while_occupied(self, make_session, repos, catalog, action_type, parameters, busy_with):
        session = _new_cultivator(make_session, "lin")
        player = session.context.player
        player.cultivation_level = 10
        player.health = 10
        wolf = generate_monster(catalog, 1)
        if busy_with == "combat":
            session.context.combat = CombatSession(player=player, opponent=wolf)
        else:
            session.context.pending_encounter = wolf

        result = session.perform(action_type, **parameters)
        assert not result.success
        assert player.health == 10
        assert player.sect_id is None
        assert repos["sect"].list_all() == []
        assert repos["chat"].recent() == []

    def test_stats_refreshed_after_each_intent(self, make_session):
        session = _new_cultivator(make_session, "lin")
        before = session.display.stats_updates
        session.perform("view_stats")
        assert session.display.stats_updates == before + 1


class TestCrossSessionTrade:
    def test_seller_sees_proceeds_after_next_save(self, make_session, repos):
        seller = _new_cultivator(make_session, "seller")
        buyer = _new_cultivator(make_session, "buyer", class_key="martial_cultivator")
        buyer.context.player.resources[CURRENCY_KEY] = 50
        assert buyer.save()

        listed = seller.perform("market_sell_item", "jadeleaf_grass", quantity=2, price=7)
        assert listed.success
        assert seller.context.player.count("jadeleaf_grass") == 3

        listing = repos["market"].list_active()[0]
        bought = buyer.perform("market_buy", listing.listing_id, quantity=2, confirm=True)
        assert bought.success
        assert buyer.context.player.spirit_stones == 36
        assert buyer.context.player.count("jadeleaf_grass") == 2

        # The seller's session has not seen the sale yet; its next save merges it.
        assert seller.context.player.spirit_stones == 0
        seller.perform("meditate")
        assert seller.context.player.spirit_stones == 14
        assert repos["player"].get(seller.context.player.player_id).spirit_stones == 14
        assert repos["player"].get(seller.context.player.player_id).count("jadeleaf_grass") == 3

    def test_online_seller_spends_proceeds(self, make_session, repos):
        alice = _new_cultivator(make_session, "alice")
        bob = _new_cultivator(make_session, "bob", class_key="martial_cultivator")
        carol = _new_cultivator(make_session, "carol")
        bob.context.player.resources[CURRENCY_KEY] = 50
        assert bob.save()

        alice.perform("market_sell_item", "jadeleaf_grass", quantity=1, price=50)
        alice_listing = repos["market"].list_by_seller(alice.context.player.player_id)[0]
        assert bob.perform("market_buy", alice_listing.listing_id, quantity=1, confirm=True).success

        carol.perform("market_sell_item", "crimson_spirit_berry", quantity=1, price=30)
        berry = repos["market"].list_by_seller(carol.context.player.player_id)[0]

        alice.perform("market_menu")
        assert alice.context.player.spirit_stones == 50
        bought = alice.perform("market_buy", berry.listing_id, quantity=1, confirm=True)
        assert bought.success
        assert alice.context.player.spirit_stones == 20
        assert alice.context.player.count("crimson_spirit_berry") == 4
        stored = repos["player"].get(alice.context.player.player_id)
        assert stored.spirit_stones == 20
        assert stored.count("crimson_spirit_berry") == 4
        assert repos["player"].get(carol.context.player.player_id).spirit_stones == 30

    def test_second_buyer_gets_refreshed_listings(self, make_session, repos):
        seller = _new_cultivator(make_session, "seller")
        buyer = _new_cultivator(make_session, "buyer", class_key="martial_cultivator")
        seller.perform("market_sell_item", "jadeleaf_grass", quantity=1, price=1)
        listing = repos["market"].list_active()[0]
        repos["market"].remove(listing.listing_id, seller.context.player.player_id)

        result = buyer.perform("market_buy", listing.listing_id, quantity=1, confirm=True)
        assert not result.success
        assert result.messages[0].text.startswith("Purchase failed:")
        assert [c.action for c in result.choices] == ["market_menu"]


class TestMarketPrompts:
    def test_buy_asks_before_paying(self, make_session, repos):
        seller = _new_cultivator(make_session, "seller")
        buyer = _new_cultivator(make_session, "buyer", class_key="martial_cultivator")
        buyer.context.player.resources[CURRENCY_KEY] = 50
        assert buyer.save()
        seller.perform("market_sell_item", "jadeleaf_grass", quantity=2, price=7)
        listing = repos["market"].list_active()[0]

        buyer.display.inputs = ["no"]
        declined = buyer.perform("market_buy", listing.listing_id, quantity=2)
        assert not declined.success
        assert buyer.display.prompts[-1] == "Buy 2x Jadeleaf Grass for 14 Spirit Stones? (yes/no)"
        assert "Purchase cancelled." in buyer.display.texts()
        assert repos["market"].get(listing.listing_id).quantity == 2
        assert buyer.context.player.spirit_stones == 50

        buyer.display.inputs = ["YES"]
        assert buyer.perform("market_buy", listing.listing_id, quantity=2).success
        assert buyer.context.player.spirit_stones == 36

    def test_remove_asks_before_withdrawing(self, make_session, repos):
        seller = _new_cultivator(make_session, "seller")
        seller.perform("market_sell_item", "jadeleaf_grass", quantity=2, price=7)
        listing = repos["market"].list_active()[0]

        seller.display.inputs = [None]
        assert not seller.perform("market_remove", listing.listing_id).success
        assert seller.display.prompts[-1].startswith("Remove your listing of 2x Jadeleaf Grass?")
        assert repos["market"].get(listing.listing_id).status == "active"
        assert seller.context.player.count("jadeleaf_grass") == 3

        seller.display.inputs = ["yes"]
        assert seller.perform("market_remove", listing.listing_id).success
        assert repos["market"].get(listing.listing_id).status == "removed"
        assert seller.context.player.count("jadeleaf_grass") == 5


class TestListingEquippedWeapon:
    def _armed(self, make_session):
        session = _new_cultivator(make_session, "smith", class_key="artifact_refiner")
        player = session.context.player
        player.add_item("rough_sword", 2)
        player.equipped_weapon = "rough_sword"
        player.weapon_attack_bonus = 5
        assert session.save()
        return session

    def test_last_copy_listed_unequips(self, make_session, repos):
        session = self._armed(make_session)
        player = session.context.player
        session.perform("market_sell_item", "rough_sword", quantity=2, price=10)
        assert player.count("rough_sword") == 0
        assert player.equipped_weapon is None
        assert player.total_attack == player.attack
        assert repos["player"].get(player.player_id).equipped_weapon is None

    def test_spare_copy_listed_keeps_weapon(self, make_session):
        session = self._armed(make_session)
        session.perform("market_sell_item", "rough_sword", quantity=1, price=10)
        assert session.context.player.equipped_weapon == "rough_sword"
        assert session.context.player.weapon_attack_bonus == 5


class TestChatDelivery:
    def test_history_then_live_messages(self, make_session):
        speaker = _new_cultivator(make_session, "speaker")
        speaker.perform("chat_send", text="Anyone selling berries?")

        listener = make_session()
        listener.perform("create_account", username="listener", password="pw", name="Listener")
        assert [m.text for m in listener.display.chat] == ["Anyone selling berries?"]

        speaker.perform("chat_send", text="Paying well.")
        listener.perform("roll_spiritual_root")
        assert [m.text for m in listener.display.chat][-1] == "Paying well."

    @pytest.mark.parametrize("text", ["", "   "])
    def test_empty_message_rejected(self, make_session, text):
        speaker = _new_cultivator(make_session, "speaker")
        result = speaker.perform("chat_send", text=text)
        assert not result.success
