import os

# konfiguracja przed importem storefront (settings czytane przy imporcie)
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CELERY_TASK_ALWAYS_EAGER"] = "1"
os.environ["CELERY_BROKER_URL"] = "memory://"
os.environ["CELERY_RESULT_BACKEND"] = "cache+memory://"

from decimal import Decimal

import fakeredis
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

import storefront.data.models  # noqa: F401
from storefront.api import create_app
from storefront.api.deps import get_lock_service
from storefront.data.database import Base, get_db
from storefront.domain.schemas import ColorIn, ProductIn, SizeStockIn
from storefront.services.catalog_service import CatalogService
from storefront.services.lock_service import LockService


@pytest.fixture
def engine(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'store.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def redis_client():
    return fakeredis.FakeRedis(decode_responses=True)


@pytest.fixture
def lock_service(redis_client):
    return LockService(client=redis_client)


@pytest.fixture
def make_product(db):
    def _make(
        name="Royal Oxford",
        price="1299.00",
        discount_price=None,
        sizes=((9, 3),),
        colors=(("Black", "#000000"),),
        category="formal",
        brand="Royal",
        featured=False,
    ):
        payload = ProductIn(
            name=name,
            description=f"{name} description",
            category=category,
            brand=brand,
            price=Decimal(price),
            discount_price=Decimal(discount_price) if discount_price is not None else None,
            featured=featured,
            sizes=[SizeStockIn(size=s, quantity=q) for s, q in sizes],
            colors=[
                ColorIn(name=c, code=code, images=[f"/img/{name.lower().replace(' ', '-')}-{c.lower()}.jpg"])
                for c, code in colors
            ],
        )
        return CatalogService(db).create_product(payload)

    return _make


@pytest.fixture
def client(session_factory, lock_service):
    app = create_app()

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_lock_service] = lambda: lock_service

    with TestClient(app) as c:
        yield c
