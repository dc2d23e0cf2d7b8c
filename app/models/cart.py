# app/models/cart.py
import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import JSON, Column
from sqlmodel import SQLModel, Field


class Cart(SQLModel, table=True):
    """
    Shopping cart document for a user.

    Items are stored inline as an ordered JSON list of
    {productId, productName, quantity, price} objects.

    user_id is indexed but NOT unique: one cart per user is the intent,
    concurrent creates for the same user can still produce duplicates.
    """

    __tablename__ = "carts"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    user_id: str = Field(
        index=True,
        description="Owner of the cart (opaque identifier)",
    )

    items: list[dict[str, Any]] = Field(
        default_factory=list,
        sa_column=Column(JSON, nullable=False),
        description="Line items in insertion order",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )

    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
