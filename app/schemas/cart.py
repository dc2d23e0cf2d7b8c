# app/schemas/cart.py
import uuid
from datetime import datetime

from pydantic import ConfigDict
from pydantic.alias_generators import to_camel
from sqlmodel import SQLModel, Field


class CamelModel(SQLModel):
    """
    Base for wire models: camelCase on the wire, snake_case in Python.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class CartItem(CamelModel):
    """
    A product line inside a cart.

    quantity is required but not range-checked here: add-or-increase
    accepts negative deltas, and the zero check belongs to the
    mutation rules.
    """

    product_id: str | None = None
    product_name: str | None = None
    quantity: int
    price: float = Field(default=0.0, ge=0)


class CartCreate(CamelModel):
    """
    Payload for creating a cart.
    """

    user_id: str
    items: list[CartItem] = Field(default_factory=list)


class CartUpdate(CamelModel):
    """
    Payload for replacing a cart's owner and items wholesale.
    """

    user_id: str
    items: list[CartItem] = Field(default_factory=list)


class CartRead(CamelModel):
    """
    Cart representation for clients.
    """

    id: uuid.UUID
    user_id: str
    items: list[CartItem]
    created_at: datetime
    updated_at: datetime
