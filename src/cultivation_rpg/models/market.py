from __future__ import annotations

import uuid
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ListingStatus(str, Enum):
    ACTIVE = "active"
    SOLD = "sold"
    REMOVED = "removed"


class MarketListing(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    listing_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    item_id: str
    item_name: str
    quantity: int = Field(ge=0)
    price_per_item: int = Field(gt=0)
    seller_id: str
    seller_name: str
    listed_at: str = ""
    status: ListingStatus = ListingStatus.ACTIVE

    @property
    def total_price(self) -> int:
        return self.quantity * self.price_per_item
