"""Repository for the marketplace.

Every operation runs inside ``Database.transaction()``: the listing and the
player documents involved are re-read under the write lock, all preconditions
are checked against that fresh state, and only then is anything written. A
failed precondition raises before the first write, so the transaction rolls
back with no partial mutation.
"""
from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass, field

from cultivation_rpg.errors import ConflictError, NotFoundError, ValidationError
from cultivation_rpg.models.character import CURRENCY_KEY, Player
from cultivation_rpg.models.market import ListingStatus, MarketListing
from cultivation_rpg.storage.database import Database
from cultivation_rpg.storage.repos.player_repo import apply_resource_delta, read_player

logger = logging.getLogger(__name__)


@dataclass
class TradeReceipt:
    """Outcome of a committed trade. ``delta`` is the caller's own resource change."""

    listing: MarketListing
    delta: dict[str, int] = field(default_factory=dict)
    total_price: int = 0


def _deserialize(row) -> MarketListing | None:
    if not row:
        return None
    return MarketListing.model_validate(dict(row))


def _read_listing(conn: sqlite3.Connection, listing_id: str) -> MarketListing | None:
    row = conn.execute("SELECT * FROM market_listings WHERE listing_id = ?", (listing_id,)).fetchone()
    return _deserialize(row)


class MarketRepo:
    def __init__(self, db: Database) -> None:
        self.db = db

    def create_listing(
        self, seller: Player, item_id: str, item_name: str, quantity: int, price_per_item: int,
    ) -> TradeReceipt:
        """Move ``quantity`` of an item out of the seller's stored inventory into a new listing."""
        if item_id == CURRENCY_KEY:
            raise ValidationError("Spirit Stones cannot be listed.")
        if quantity <= 0 or price_per_item <= 0:
            raise ValidationError("Quantity and price must be positive.")
        if seller.count(item_id) < quantity:
            raise ValidationError(f"You only have {seller.count(item_id)} {item_name}.")

        listing = MarketListing(
            item_id=item_id,
            item_name=item_name,
            quantity=quantity,
            price_per_item=price_per_item,
            seller_id=seller.player_id,
            seller_name=seller.name,
        )
        delta = {item_id: -quantity}
        with self.db.transaction() as conn:
            apply_resource_delta(conn, seller.player_id, delta)
            conn.execute(
                """INSERT INTO market_listings
                   (listing_id, item_id, item_name, quantity, price_per_item, seller_id, seller_name, status)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    listing.listing_id, listing.item_id, listing.item_name, listing.quantity,
                    listing.price_per_item, listing.seller_id, listing.seller_name, listing.status.value,
                ),
            )
            listing = _read_listing(conn, listing.listing_id)
        logger.info(f"Listing {listing.listing_id}: {quantity} x {item_id} at {price_per_item} by {seller.player_id}")
        return TradeReceipt(listing=listing, delta=delta)

    def get(self, listing_id: str) -> MarketListing | None:
        with self.db.get_connection() as conn:
            return _read_listing(conn, listing_id)

    def list_active(self, limit: int = 20) -> list[MarketListing]:
        """Active listings, newest first."""
        with self.db.get_connection() as conn:
            rows = conn.execute(
                """SELECT * FROM market_listings WHERE status = ?
                   ORDER BY listed_at DESC, rowid DESC LIMIT ?""",
                (ListingStatus.ACTIVE.value, limit),
            ).fetchall()
        return [_deserialize(r) for r in rows]

    def list_by_seller(self, seller_id: str) -> list[MarketListing]:
        with self.db.get_connection() as conn:
            rows = conn.execute(
                """SELECT * FROM market_listings WHERE seller_id = ? AND status = ?
                   ORDER BY listed_at DESC, rowid DESC""",
                (seller_id, ListingStatus.ACTIVE.value),
            ).fetchall()
        return [_deserialize(r) for r in rows]

    def buy(self, listing_id: str, buyer: Player, quantity: int) -> TradeReceipt:
        """Buy ``quantity`` units: debit buyer, credit seller, shrink or close the listing."""
        if quantity <= 0:
            raise ValidationError("Quantity must be at least 1.")
        with self.db.transaction() as conn:
            listing = _read_listing(conn, listing_id)
            if listing is None:
                raise NotFoundError("Listing not found.")
            if listing.status != ListingStatus.ACTIVE:
                raise ConflictError("This listing is no longer active.")
            if quantity > listing.quantity:
                raise ConflictError("Not enough items in stock for this quantity.")
            if listing.seller_id == buyer.player_id:
                raise ValidationError("You cannot buy your own items.")
            total = quantity * listing.price_per_item
            stored_buyer = read_player(conn, buyer.player_id)
            if stored_buyer is None:
                raise NotFoundError("Buyer not found.")
            if stored_buyer.spirit_stones < total:
                raise ValidationError("Not enough Spirit Stones.")
            if read_player(conn, listing.seller_id) is None:
                raise NotFoundError("Seller not found. Purchase cannot be completed.")

            buyer_delta = {CURRENCY_KEY: -total, listing.item_id: quantity}
            apply_resource_delta(conn, buyer.player_id, buyer_delta)
            apply_resource_delta(conn, listing.seller_id, {CURRENCY_KEY: total})
            remaining = listing.quantity - quantity
            status = ListingStatus.SOLD if remaining == 0 else ListingStatus.ACTIVE
            cursor = conn.execute(
                """UPDATE market_listings SET quantity = ?, status = ?
                   WHERE listing_id = ? AND status = ? AND quantity = ?""",
                (remaining, status.value, listing_id, ListingStatus.ACTIVE.value, listing.quantity),
            )
            if cursor.rowcount != 1:
                raise ConflictError("This listing is no longer active.")
            listing = _read_listing(conn, listing_id)
        logger.info(f"Listing {listing_id}: {buyer.player_id} bought {quantity} for {total}")
        return TradeReceipt(listing=listing, delta=buyer_delta, total_price=total)

    def remove(self, listing_id: str, caller_id: str) -> TradeReceipt:
        """Withdraw an active listing and refund its remaining quantity to the seller."""
        with self.db.transaction() as conn:
            listing = _read_listing(conn, listing_id)
            if listing is None:
                raise NotFoundError("Listing not found.")
            if listing.seller_id != caller_id:
                raise ValidationError("Cannot remove: Not your listing.")
            if listing.status != ListingStatus.ACTIVE:
                raise ConflictError("Cannot remove: Listing is not active.")
            delta = {listing.item_id: listing.quantity}
            apply_resource_delta(conn, caller_id, delta)
            conn.execute(
                "UPDATE market_listings SET status = ? WHERE listing_id = ? AND status = ?",
                (ListingStatus.REMOVED.value, listing_id, ListingStatus.ACTIVE.value),
            )
            listing = _read_listing(conn, listing_id)
        logger.info(f"Listing {listing_id} removed by seller {caller_id}")
        return TradeReceipt(listing=listing, delta=delta)
