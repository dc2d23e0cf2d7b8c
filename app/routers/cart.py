# app/routers/cart.py
import uuid

from fastapi import APIRouter, Body, Depends, HTTPException, Response, status
from sqlmodel import Session

from app.core.config import get_settings
from app.core.dispatch import InlineDispatcher, OffloadedDispatcher
from app.core.locks import KeyedLocks
from app.database import get_session
from app.models.cart import Cart
from app.repositories.cart_repo import CartRepository
from app.schemas.cart import CartCreate, CartItem, CartRead, CartUpdate
from app.services.cart_mutations import CartMutationEngine
from app.services.cart_service import CartService
from app.services.results import CartResult, InvalidArgument, NotFound

settings = get_settings()

router = APIRouter(prefix="/carts", tags=["Carts"])

cart_repo = CartRepository()
offloaded_dispatcher = OffloadedDispatcher(settings.CART_WORKER_POOL_SIZE)
engine = CartMutationEngine(
    cart_repo,
    create_if_missing=settings.CART_CREATE_IF_MISSING,
    locks=KeyedLocks() if settings.CART_SERIALIZE_PER_USER else None,
)
service = CartService(cart_repo, engine, InlineDispatcher(), offloaded_dispatcher)


def get_cart_service() -> CartService:
    """Dependency hook so tests can swap the wired service."""
    return service


def _unwrap(result: CartResult) -> Cart:
    """
    Map a mutation result to the HTTP contract:
      - InvalidArgument => 400
      - NotFound        => 404
    """
    if isinstance(result, InvalidArgument):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=result.reason,
        )
    if isinstance(result, NotFound):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=result.reason,
        )
    return result.cart


# -------- CRUD --------


@router.post("", response_model=CartRead)
def create_cart(
    payload: CartCreate,
    session: Session = Depends(get_session),
    svc: CartService = Depends(get_cart_service),
):
    """
    Create a cart. The id is assigned by the store.
    """
    return svc.create_cart(session, payload)


@router.get("", response_model=list[CartRead])
def list_carts(
    session: Session = Depends(get_session),
    svc: CartService = Depends(get_cart_service),
):
    return svc.list_carts(session)


# Declared before /{cart_id} so the literal path wins.
@router.get("/getAllUsersIds", response_model=set[str])
def list_user_ids(
    session: Session = Depends(get_session),
    svc: CartService = Depends(get_cart_service),
):
    """
    Distinct user ids that own at least one cart.
    """
    return svc.list_user_ids(session)


@router.get("/user/{user_id}", response_model=CartRead)
def get_cart_by_user(
    user_id: str,
    session: Session = Depends(get_session),
    svc: CartService = Depends(get_cart_service),
):
    cart = svc.get_cart_by_user_id(session, user_id)
    if cart is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Cart not found for user: {user_id}",
        )
    return cart


@router.get("/{cart_id}", response_model=CartRead)
def get_cart(
    cart_id: uuid.UUID,
    session: Session = Depends(get_session),
    svc: CartService = Depends(get_cart_service),
):
    cart = svc.get_cart(session, cart_id)
    if cart is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Cart not found",
        )
    return cart


@router.put("/{cart_id}", response_model=CartRead)
def update_cart(
    cart_id: uuid.UUID,
    payload: CartUpdate,
    session: Session = Depends(get_session),
    svc: CartService = Depends(get_cart_service),
):
    """
    Replace owner and items of an existing cart.
    """
    return _unwrap(svc.update_cart(session, cart_id, payload))


@router.delete("/{cart_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_cart(
    cart_id: uuid.UUID,
    session: Session = Depends(get_session),
    svc: CartService = Depends(get_cart_service),
):
    """
    Delete a cart. Unknown ids still answer 204.
    """
    svc.delete_cart(session, cart_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# -------- Item mutations --------
# sync  => runs on the request thread
# async => runs on the cart worker pool; the request still waits for it


@router.post("/add-item/sync/{user_id}", response_model=CartRead)
def add_item_sync(
    user_id: str,
    item: CartItem | None = Body(default=None),
    session: Session = Depends(get_session),
    svc: CartService = Depends(get_cart_service),
):
    return _unwrap(svc.add_item_sync(session, user_id, item))


@router.post("/add-item/async/{user_id}", response_model=CartRead)
def add_item_async(
    user_id: str,
    item: CartItem | None = Body(default=None),
    session: Session = Depends(get_session),
    svc: CartService = Depends(get_cart_service),
):
    return _unwrap(svc.add_item_async(session, user_id, item))


@router.post("/remove-item/sync/{user_id}", response_model=CartRead)
def remove_item_sync(
    user_id: str,
    product_id: str | None = Body(default=None),
    session: Session = Depends(get_session),
    svc: CartService = Depends(get_cart_service),
):
    """
    Body is the product id as a JSON string, e.g. "SKU-1".
    """
    return _unwrap(svc.remove_item_sync(session, user_id, product_id))


@router.post("/remove-item/async/{user_id}", response_model=CartRead)
def remove_item_async(
    user_id: str,
    product_id: str | None = Body(default=None),
    session: Session = Depends(get_session),
    svc: CartService = Depends(get_cart_service),
):
    return _unwrap(svc.remove_item_async(session, user_id, product_id))


@router.post("/add-or-increase/sync/{user_id}", response_model=CartRead)
def add_or_increase_sync(
    user_id: str,
    item: CartItem | None = Body(default=None),
    session: Session = Depends(get_session),
    svc: CartService = Depends(get_cart_service),
):
    """
    Merge the quantity into an existing line (negative values decrease it).
    """
    return _unwrap(svc.add_or_increase_item_sync(session, user_id, item))


@router.post("/add-or-increase/async/{user_id}", response_model=CartRead)
def add_or_increase_async(
    user_id: str,
    item: CartItem | None = Body(default=None),
    session: Session = Depends(get_session),
    svc: CartService = Depends(get_cart_service),
):
    return _unwrap(svc.add_or_increase_item_async(session, user_id, item))
