"""Pytest configuration and fixtures"""
import os
from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine
from sqlmodel import Session

# Never touch a real database from tests
os.environ.setdefault("DATABASE_URL", "sqlite://")

from app.core.dispatch import InlineDispatcher, OffloadedDispatcher  # noqa: E402
from app.core.locks import KeyedLocks  # noqa: E402
from app.database import build_engine, create_db_and_tables, get_session  # noqa: E402
from app.main import app  # noqa: E402
from app.repositories.cart_repo import CartRepository  # noqa: E402
from app.routers.cart import get_cart_service  # noqa: E402
from app.schemas.cart import CartItem  # noqa: E402
from app.services.cart_mutations import CartMutationEngine  # noqa: E402
from app.services.cart_service import CartService  # noqa: E402


@pytest.fixture
def db_engine(tmp_path) -> Generator[Engine, None, None]:
    """File-backed SQLite so each thread can open its own connection."""
    engine = build_engine(f"sqlite:///{tmp_path / 'carts.db'}")
    create_db_and_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(db_engine) -> Generator[Session, None, None]:
    with Session(db_engine) as s:
        yield s


@pytest.fixture
def repo() -> CartRepository:
    return CartRepository()


@pytest.fixture
def inline() -> InlineDispatcher:
    return InlineDispatcher()


@pytest.fixture
def offloaded() -> Generator[OffloadedDispatcher, None, None]:
    dispatcher = OffloadedDispatcher(max_workers=4)
    yield dispatcher
    dispatcher.shutdown()


@pytest.fixture
def mutations(repo) -> CartMutationEngine:
    return CartMutationEngine(repo, create_if_missing=True)


@pytest.fixture
def strict_mutations(repo) -> CartMutationEngine:
    return CartMutationEngine(repo, create_if_missing=False)


@pytest.fixture
def locked_mutations(repo) -> CartMutationEngine:
    return CartMutationEngine(repo, create_if_missing=True, locks=KeyedLocks())


@pytest.fixture
def cart_service(repo, mutations, inline, offloaded) -> CartService:
    return CartService(repo, mutations, inline, offloaded)


@pytest.fixture
def client(db_engine, cart_service) -> Generator[TestClient, None, None]:
    """TestClient wired to the temp database and a fresh service."""

    def _session_override():
        with Session(db_engine) as s:
            yield s

    app.dependency_overrides[get_session] = _session_override
    app.dependency_overrides[get_cart_service] = lambda: cart_service
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_item():
    """Factory for cart items"""

    def _make(product_id="p1", quantity=1, price=10.0, name=None):
        return CartItem(
            product_id=product_id,
            product_name=name or f"Product {product_id}",
            quantity=quantity,
            price=price,
        )

    return _make
