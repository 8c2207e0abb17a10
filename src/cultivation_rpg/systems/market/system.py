"""Market system — list goods for sale, browse and buy, withdraw listings.

All trades are committed by ``MarketRepo`` in a single store transaction. The
session's in-memory player only mirrors the committed change afterwards, via
the receipt's resource delta. Opening the market, browsing and buying first
fold in whatever other sessions credited to the player, so sale proceeds are
spendable without logging out.
"""
from __future__ import annotations

import logging
from typing import Any

from cultivation_rpg.content.panels import render_panel
from cultivation_rpg.errors import ConflictError, NotFoundError
from cultivation_rpg.models.action import Action, ActionResult, Choice, GameMessage, MessageStyle, fail
from cultivation_rpg.models.character import CURRENCY_KEY
from cultivation_rpg.models.event import EventType
from cultivation_rpg.models.market import MarketListing
from cultivation_rpg.systems.base import GameContext, GameSystem

logger = logging.getLogger(__name__)


class MarketSystem(GameSystem):
    def __init__(self, page_size: int = 20) -> None:
        self._repos: dict[str, Any] = {}
        self._page_size = page_size

    def inject(self, *, repos: dict | None = None, config: dict | None = None, **kwargs: Any) -> None:
        if repos is not None:
            self._repos = repos
        if config is not None:
            self._page_size = int(config.get("game", {}).get("market_page_size", self._page_size))

    @property
    def system_id(self) -> str:
        return "market"

    @property
    def handled_action_types(self) -> set[str]:
        return {
            "market_menu", "market_view", "market_buy", "market_sell",
            "market_sell_item", "market_my_listings", "market_remove",
        }

    def get_available_actions(self, context: GameContext) -> list[Choice]:
        if not context.in_town:
            return []
        return [Choice("Marketplace", "market_menu")]

    @property
    def _market(self):
        return self._repos["market"]

    def resolve(self, action: Action, context: GameContext) -> ActionResult:
        if context.player is None:
            return fail(action, "You must be logged in.")
        if not context.in_town:
            return fail(action, "You cannot trade right now.")
        if "market" not in self._repos:
            return fail(action, "The marketplace is closed.")
        action_type = action.action_type.lower()
        if action_type in ("market_menu", "market_view", "market_buy"):
            self._pull_remote_changes(context)
        if action_type == "market_menu":
            return self._resolve_menu(action)
        elif action_type == "market_view":
            return self._resolve_view(action, context)
        elif action_type == "market_buy":
            return self._resolve_buy(action, context)
        elif action_type == "market_sell":
            return self._resolve_sell_menu(action, context)
        elif action_type == "market_sell_item":
            return self._resolve_sell_item(action, context)
        elif action_type == "market_my_listings":
            return self._resolve_my_listings(action, context)
        return self._resolve_remove(action, context)

    def _pull_remote_changes(self, context: GameContext) -> None:
        """Fold in resource changes other sessions committed, e.g. proceeds from sales."""
        if "player" not in self._repos:
            return
        player = context.player
        foreign = self._repos["player"].save(player, context.synced_resources)
        context.synced_resources = dict(player.resources)
        if foreign.get(CURRENCY_KEY, 0) > 0:
            logger.info(f"{player.player_id} received {foreign[CURRENCY_KEY]} Spirit Stones from the market")

    def _resolve_menu(self, action: Action) -> ActionResult:
        result = ActionResult(action_id=action.id, success=True)
        result.say("Welcome to the Marketplace.", MessageStyle.SYSTEM)
        result.choices = [
            Choice("View Listings", "market_view"),
            Choice("Sell Item", "market_sell"),
            Choice("My Listings", "market_my_listings"),
            Choice("Back", "main_menu", style="neutral"),
        ]
        return result

    def _listing_choices(self, listings: list[MarketListing], context: GameContext) -> list[Choice]:
        choices = []
        for listing in listings:
            if listing.seller_id == context.player.player_id:
                continue
            choices.append(Choice(
                f"Buy {listing.item_name} ({listing.quantity} @ {listing.price_per_item})",
                "market_buy",
                listing.listing_id,
            ))
        choices.append(Choice("Back", "market_menu", style="neutral"))
        return choices

    def _resolve_view(self, action: Action, context: GameContext) -> ActionResult:
        listings = self._market.list_active(limit=self._page_size)
        return ActionResult(
            action_id=action.id,
            success=True,
            messages=[GameMessage(render_panel("market.j2", listings=listings), MessageStyle.PANEL)],
            choices=self._listing_choices(listings, context),
        )

    def _resolve_buy(self, action: Action, context: GameContext) -> ActionResult:
        player = context.player
        listing = self._market.get(action.target_id or "")
        if listing is None:
            return fail(action, "Listing not found.")
        quantity = action.parameters.get("quantity")
        if quantity is None:
            if listing.quantity == 1:
                quantity = 1
            else:
                quantity = context.prompt_int(
                    f"How many {listing.item_name} to buy? (1-{listing.quantity}, "
                    f"{listing.price_per_item} Spirit Stones each)"
                )
            if quantity is None:
                return fail(action, "Purchase cancelled.")
        quantity = int(quantity)
        if quantity <= 0:
            return fail(action, "Quantity must be at least 1.")
        confirmed = action.parameters.get("confirm")
        if confirmed is None:
            total = quantity * listing.price_per_item
            confirmed = context.confirm(f"Buy {quantity}x {listing.item_name} for {total} Spirit Stones?")
        if not confirmed:
            result = ActionResult(action_id=action.id, success=False)
            result.say("Purchase cancelled.", MessageStyle.NARRATION)
            result.choices = self._listing_choices(self._market.list_active(limit=self._page_size), context)
            return result
        try:
            receipt = self._market.buy(listing.listing_id, player, quantity)
        except (ConflictError, NotFoundError) as e:
            logger.warning(f"Purchase of {listing.listing_id} by {player.player_id} failed: {e.message}")
            result = fail(action, f"Purchase failed: {e.message}")
            result.choices = self._listing_choices(self._market.list_active(limit=self._page_size), context)
            return result
        context.apply_delta(receipt.delta)
        result = ActionResult(action_id=action.id, success=True, state_changed=True)
        result.say(
            f"Purchased {quantity} x {listing.item_name} for {receipt.total_price} Spirit Stones.",
            MessageStyle.SUCCESS,
        )
        result.events.append({
            "event_type": EventType.MARKET_PURCHASE.value,
            "listing_id": listing.listing_id,
            "quantity": quantity,
        })
        return result

    def _resolve_sell_menu(self, action: Action, context: GameContext) -> ActionResult:
        player = context.player
        choices = []
        for key, qty in sorted(player.resources.items()):
            if qty <= 0 or key == CURRENCY_KEY:
                continue
            choices.append(Choice(f"{context.catalog.item_name(key)} ({qty})", "market_sell_item", key))
        if not choices:
            return fail(action, "You have nothing to sell.")
        choices.append(Choice("Back", "market_menu", style="neutral"))
        result = ActionResult(action_id=action.id, success=True, choices=choices)
        result.say("Choose an item to list:", MessageStyle.SYSTEM)
        return result

    def _resolve_sell_item(self, action: Action, context: GameContext) -> ActionResult:
        player = context.player
        item_key = action.target_id or ""
        item_name = context.catalog.item_name(item_key)
        quantity = action.parameters.get("quantity")
        if quantity is None:
            quantity = context.prompt_int(f"How many {item_name} to sell? (you have {player.count(item_key)})")
        if quantity is None:
            return fail(action, "Listing cancelled.")
        price = action.parameters.get("price")
        if price is None:
            price = context.prompt_int(f"Price per {item_name} in Spirit Stones?")
        if price is None:
            return fail(action, "Listing cancelled.")

        receipt = self._market.create_listing(player, item_key, item_name, int(quantity), int(price))
        context.apply_delta(receipt.delta)
        result = ActionResult(action_id=action.id, success=True, state_changed=True)
        if player.equipped_weapon == item_key and player.count(item_key) == 0:
            player.unequip_weapon()
            result.say(f"You unequip your {item_name}.", MessageStyle.ITEM_USE)
        result.say(
            f"Listed {quantity} x {item_name} for {price} Spirit Stones each.", MessageStyle.SUCCESS,
        )
        result.events.append({"event_type": EventType.MARKET_LISTED.value, "listing_id": receipt.listing.listing_id})
        return result

    def _resolve_my_listings(self, action: Action, context: GameContext) -> ActionResult:
        listings = self._market.list_by_seller(context.player.player_id)
        result = ActionResult(
            action_id=action.id,
            success=True,
            messages=[GameMessage(render_panel("market.j2", listings=listings), MessageStyle.PANEL)],
        )
        result.choices = [
            Choice(f"Remove {listing.item_name} ({listing.quantity})", "market_remove", listing.listing_id, style="danger")
            for listing in listings
        ]
        result.choices.append(Choice("Back", "market_menu", style="neutral"))
        return result

    def _resolve_remove(self, action: Action, context: GameContext) -> ActionResult:
        pending = self._market.get(action.target_id or "")
        if pending is None:
            return fail(action, "Listing not found.")
        confirmed = action.parameters.get("confirm")
        if confirmed is None:
            confirmed = context.confirm(
                f"Remove your listing of {pending.quantity}x {pending.item_name}? "
                "The items will be returned to your inventory."
            )
        if not confirmed:
            result = ActionResult(action_id=action.id, success=False)
            result.say("Removal cancelled.", MessageStyle.NARRATION)
            return result
        receipt = self._market.remove(pending.listing_id, context.player.player_id)
        context.apply_delta(receipt.delta)
        listing = receipt.listing
        result = ActionResult(action_id=action.id, success=True, state_changed=True)
        result.say(
            f"Listing removed. {listing.quantity} x {listing.item_name} returned to your inventory.",
            MessageStyle.SUCCESS,
        )
        result.events.append({"event_type": EventType.MARKET_REMOVED.value, "listing_id": listing.listing_id})
        return result
