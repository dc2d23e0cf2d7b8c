# app/repositories/cart_repo.py
import uuid
from datetime import datetime, timezone

from sqlmodel import Session, select

from app.models.cart import Cart


class CartRepository:
    """
    Data access layer for Cart documents.

    Responsibilities:
      - Pure DB operations, one round trip per call
      - No FastAPI, no HTTP, no business logic
      - No caching: every read hits the database
    """

    def get_by_id(self, session: Session, cart_id: uuid.UUID) -> Cart | None:
        return session.get(Cart, cart_id)

    def get_by_user_id(self, session: Session, user_id: str) -> Cart | None:
        """
        Return the first cart for a user.

        No ordering guarantee if duplicates exist.
        """
        stmt = select(Cart).where(Cart.user_id == user_id)
        return session.exec(stmt).first()

    def list_all(self, session: Session) -> list[Cart]:
        return session.exec(select(Cart)).all()

    def list_distinct_user_ids(self, session: Session) -> set[str]:
        stmt = select(Cart.user_id).distinct()
        return set(session.exec(stmt).all())

    # CRUD
    def create(self, session: Session, cart: Cart) -> Cart:
        session.add(cart)
        session.commit()
        session.refresh(cart)
        return cart

    def save(self, session: Session, cart: Cart) -> Cart:
        cart.updated_at = datetime.now(timezone.utc)
        session.add(cart)
        session.commit()
        session.refresh(cart)
        return cart

    def delete_by_id(self, session: Session, cart_id: uuid.UUID) -> None:
        """Delete a cart if present; absent ids are ignored."""
        cart = session.get(Cart, cart_id)
        if cart is None:
            return
        session.delete(cart)
        session.commit()
