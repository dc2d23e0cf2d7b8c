# app/services/cart_service.py
import uuid

from sqlmodel import Session

from app.core.dispatch import Dispatcher
from app.models.cart import Cart
from app.repositories.cart_repo import CartRepository
from app.schemas.cart import CartCreate, CartItem, CartUpdate
from app.services.cart_mutations import CartMutationEngine
from app.services.results import CartResult, NotFound, Ok


class CartService:
    """
    Business facade for carts.

    Responsibilities:
      - plain CRUD over whole carts (delegated to the repository)
      - item mutations in two execution forms:
          * *_sync  : run on the calling thread (inline dispatcher)
          * *_async : run on a worker, caller still waits (offloaded dispatcher)
        Both forms share one implementation in CartMutationEngine.
    """

    def __init__(
        self,
        cart_repo: CartRepository,
        engine: CartMutationEngine,
        inline: Dispatcher,
        offloaded: Dispatcher,
    ):
        self.cart_repo = cart_repo
        self.engine = engine
        self.inline = inline
        self.offloaded = offloaded

    # ---- CRUD ----

    def create_cart(self, session: Session, payload: CartCreate) -> Cart:
        cart = Cart(
            user_id=payload.user_id,
            items=[it.model_dump(by_alias=True) for it in payload.items],
        )
        return self.cart_repo.create(session, cart)

    def get_cart(self, session: Session, cart_id: uuid.UUID) -> Cart | None:
        return self.cart_repo.get_by_id(session, cart_id)

    def update_cart(
        self,
        session: Session,
        cart_id: uuid.UUID,
        payload: CartUpdate,
    ) -> CartResult:
        """
        Replace owner and items wholesale. NotFound if the id is absent.
        """
        cart = self.cart_repo.get_by_id(session, cart_id)
        if cart is None:
            return NotFound(reason="Cart not found")

        cart.user_id = payload.user_id
        cart.items = [it.model_dump(by_alias=True) for it in payload.items]
        return Ok(cart=self.cart_repo.save(session, cart))

    def delete_cart(self, session: Session, cart_id: uuid.UUID) -> None:
        """Absent ids are not an error."""
        self.cart_repo.delete_by_id(session, cart_id)

    def get_cart_by_user_id(self, session: Session, user_id: str) -> Cart | None:
        return self.cart_repo.get_by_user_id(session, user_id)

    def list_carts(self, session: Session) -> list[Cart]:
        return self.cart_repo.list_all(session)

    def list_user_ids(self, session: Session) -> set[str]:
        return self.cart_repo.list_distinct_user_ids(session)

    # ---- item mutations ----

    def add_item_sync(
        self, session: Session, user_id: str, item: CartItem | None
    ) -> CartResult:
        return self.engine.add_item(self.inline, session, user_id, item)

    def add_item_async(
        self, session: Session, user_id: str, item: CartItem | None
    ) -> CartResult:
        return self.engine.add_item(self.offloaded, session, user_id, item)

    def remove_item_sync(
        self, session: Session, user_id: str, product_id: str | None
    ) -> CartResult:
        return self.engine.remove_item(self.inline, session, user_id, product_id)

    def remove_item_async(
        self, session: Session, user_id: str, product_id: str | None
    ) -> CartResult:
        return self.engine.remove_item(self.offloaded, session, user_id, product_id)

    def add_or_increase_item_sync(
        self, session: Session, user_id: str, item: CartItem | None
    ) -> CartResult:
        return self.engine.add_or_increase_item(self.inline, session, user_id, item)

    def add_or_increase_item_async(
        self, session: Session, user_id: str, item: CartItem | None
    ) -> CartResult:
        return self.engine.add_or_increase_item(
            self.offloaded, session, user_id, item
        )
