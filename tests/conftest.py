from __future__ import annotations

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import salesagent.models  # noqa: F401
from salesagent.ai.client import CompletionClient
from salesagent.ai.mock_provider import MockProvider
from salesagent.core.database import Base
from salesagent.models.page_rules import PageRules
from salesagent.models.product import Product
from tests.fixtures_data import CATALOG, HAPPY_PATH_RULES


@pytest.fixture()
def db_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def session_factory(db_engine):
    return sessionmaker(bind=db_engine, autocommit=False, autoflush=False)


@pytest.fixture()
def db_session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def seeded_page(db_session):
    """Page rules plus a small catalog; returns ``{name: product_id}``."""
    db_session.add(PageRules(**HAPPY_PATH_RULES))
    products = [Product(**data) for data in CATALOG]
    db_session.add_all(products)
    db_session.commit()
    return {product.name: product.id for product in products}


@pytest.fixture()
def mock_completion():
    return CompletionClient(
        MockProvider(),
        max_retries=1,
        sleep=lambda _seconds: None,
    )
