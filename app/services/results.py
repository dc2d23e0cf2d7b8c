# app/services/results.py
from typing import Union

from pydantic import ConfigDict
from sqlmodel import SQLModel

from app.models.cart import Cart


class Ok(SQLModel):
    """Mutation succeeded; `cart` is the persisted state."""

    model_config = ConfigDict(frozen=True)

    cart: Cart


class InvalidArgument(SQLModel):
    """Rejected before touching the store."""

    model_config = ConfigDict(frozen=True)

    reason: str


class NotFound(SQLModel):
    """Cart or item missing; nothing was persisted."""

    model_config = ConfigDict(frozen=True)

    reason: str


CartResult = Union[Ok, InvalidArgument, NotFound]
