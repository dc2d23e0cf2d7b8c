# app/services/cart_mutations.py
import logging
from typing import Any, Callable

from sqlmodel import Session

from app.core.dispatch import Dispatcher
from app.core.locks import KeyedLocks, no_lock
from app.models.cart import Cart
from app.repositories.cart_repo import CartRepository
from app.schemas.cart import CartItem
from app.services.results import CartResult, InvalidArgument, NotFound, Ok

logger = logging.getLogger(__name__)


def _load_items(cart: Cart) -> list[CartItem]:
    # Work on copies; the persisted JSON is only replaced on save.
    return [CartItem.model_validate(raw) for raw in cart.items]


def _dump_items(items: list[CartItem]) -> list[dict[str, Any]]:
    return [it.model_dump(by_alias=True) for it in items]


class CartMutationEngine:
    """
    Item-level read-modify-write operations on a user's cart.

    Every operation follows the same shape:
      1. fetch the cart by user id
      2. validate / merge the item against it
      3. persist the whole item list back

    Each public method takes a Dispatcher that decides where steps 1-3
    run (caller thread or worker pool). The logic and the returned
    CartResult are identical either way.

    Concurrency:
      - Without `locks`, two mutations for the same user can interleave
        and the later save silently discards the earlier one (lost update).
      - With `locks`, mutations for one user are serialized within this
        process.
    """

    def __init__(
        self,
        cart_repo: CartRepository,
        create_if_missing: bool = True,
        locks: KeyedLocks | None = None,
    ):
        self.cart_repo = cart_repo
        self.create_if_missing = create_if_missing
        self._hold = locks.hold if locks is not None else no_lock

    # ---- public operations ----

    def add_item(
        self,
        dispatcher: Dispatcher,
        session: Session,
        user_id: str,
        item: CartItem | None,
    ) -> CartResult:
        return self._dispatch(dispatcher, self._add_item, session, user_id, item)

    def remove_item(
        self,
        dispatcher: Dispatcher,
        session: Session,
        user_id: str,
        product_id: str | None,
    ) -> CartResult:
        return self._dispatch(
            dispatcher, self._remove_item, session, user_id, product_id
        )

    def add_or_increase_item(
        self,
        dispatcher: Dispatcher,
        session: Session,
        user_id: str,
        item: CartItem | None,
    ) -> CartResult:
        return self._dispatch(
            dispatcher, self._add_or_increase_item, session, user_id, item
        )

    # ---- internal helpers ----

    def _dispatch(
        self,
        dispatcher: Dispatcher,
        op: Callable[..., CartResult],
        session: Session,
        user_id: str,
        arg: Any,
    ) -> CartResult:
        result = dispatcher.run_await(op, session, user_id, arg)
        if isinstance(result, Ok):
            logger.debug(
                "%s (%s) ok for user %s", op.__name__, dispatcher.name, user_id
            )
        else:
            logger.info(
                "%s (%s) rejected for user %s: %s",
                op.__name__,
                dispatcher.name,
                user_id,
                result.reason,
            )
        return result

    def _persist(
        self,
        session: Session,
        cart: Cart,
        items: list[CartItem],
        is_new: bool,
    ) -> Cart:
        cart.items = _dump_items(items)
        if is_new:
            return self.cart_repo.create(session, cart)
        return self.cart_repo.save(session, cart)

    def _add_item(
        self,
        session: Session,
        user_id: str,
        item: CartItem | None,
    ) -> CartResult:
        """
        Append `item` to the user's cart.

        Duplicated product ids are NOT merged here; that is
        add-or-increase's job. A line without a product id is rejected
        since remove-item could never reach it.
        """
        if item is None:
            return InvalidArgument(reason="Item cannot be null")
        if not item.product_id:
            return InvalidArgument(reason="Product ID cannot be null or empty")

        with self._hold(user_id):
            cart = self.cart_repo.get_by_user_id(session, user_id)
            is_new = cart is None
            if is_new:
                if not self.create_if_missing:
                    return NotFound(reason=f"Cart not found for user: {user_id}")
                cart = Cart(user_id=user_id)

            items = _load_items(cart)
            items.append(item.model_copy())
            return Ok(cart=self._persist(session, cart, items, is_new))

    def _remove_item(
        self,
        session: Session,
        user_id: str,
        product_id: str | None,
    ) -> CartResult:
        """
        Drop every line whose product id matches.

        Fails if the cart is missing or nothing matched; in both cases
        the store is left untouched.
        """
        if not product_id:
            return InvalidArgument(reason="Product ID cannot be null or empty")

        with self._hold(user_id):
            cart = self.cart_repo.get_by_user_id(session, user_id)
            if cart is None:
                return NotFound(reason=f"Cart not found for user: {user_id}")

            items = _load_items(cart)
            kept = [it for it in items if it.product_id != product_id]
            if len(kept) == len(items):
                return NotFound(
                    reason=f"Item with product ID {product_id} not found in cart"
                )

            return Ok(cart=self._persist(session, cart, kept, is_new=False))

    def _add_or_increase_item(
        self,
        session: Session,
        user_id: str,
        item: CartItem | None,
    ) -> CartResult:
        """
        Merge `item.quantity` into the line with the same product id.

        Rules:
          - existing line: quantity += delta; removed when the sum <= 0.
            Name and price of the existing line are kept.
          - no line: inserted only when delta > 0, otherwise a no-op.
          - the cart is created when missing, whatever the policy.
        """
        if item is None or not item.product_id:
            return InvalidArgument(reason="Item or product ID cannot be null or empty")
        if item.quantity == 0:
            return InvalidArgument(reason="Quantity cannot be zero")

        with self._hold(user_id):
            cart = self.cart_repo.get_by_user_id(session, user_id)
            is_new = cart is None
            if is_new:
                cart = Cart(user_id=user_id)

            items = _load_items(cart)
            existing = next(
                (it for it in items if it.product_id == item.product_id), None
            )

            if existing is not None:
                new_qty = existing.quantity + item.quantity
                if new_qty <= 0:
                    items = [it for it in items if it.product_id != item.product_id]
                else:
                    existing.quantity = new_qty
            elif item.quantity > 0:
                items.append(item.model_copy())

            return Ok(cart=self._persist(session, cart, items, is_new))
