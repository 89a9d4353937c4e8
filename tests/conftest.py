from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

import app.persistence.pg as pg
from app.core.config import get_settings
from app.core.security import create_access_token, hash_password
from app.persistence.models import Base, ProductModel, UserModel


@pytest.fixture(scope="session")
def test_db_path(tmp_path_factory: pytest.TempPathFactory) -> Path:
    return tmp_path_factory.mktemp("db") / "test.sqlite"


@pytest.fixture(scope="session", autouse=True)
def configure_test_engine(test_db_path: Path):
    settings = get_settings()
    settings.bcrypt_rounds = 4

    engine = pg.create_engine_from_url(f"sqlite+pysqlite:///{test_db_path}")
    TestSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)

    pg.engine = engine
    pg.SessionLocal = TestSessionLocal

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def clean_tables(configure_test_engine):
    yield
    with pg.engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())


@pytest.fixture()
def client(configure_test_engine):
    from app.main import app

    with TestClient(app) as c:
        yield c


@pytest.fixture()
def session(configure_test_engine):
    with pg.session_scope() as s:
        yield s


@pytest.fixture()
def make_user():
    counter = {"n": 0}

    def _make(email: str | None = None, is_admin: bool = False, user_id: int | None = None) -> UserModel:
        counter["n"] += 1
        with pg.session_scope() as s:
            user = UserModel(
                email=email or f"user{counter['n']}@example.com",
                name=f"User {counter['n']}",
                password_hash=hash_password("correct-horse"),
                is_admin=is_admin,
            )
            if user_id is not None:
                user.id = user_id
            s.add(user)
            s.flush()
        return user

    return _make


@pytest.fixture()
def make_product():
    def _make(
        name: str = "Widget",
        price: int = 1000,
        product_id: int | None = None,
        description: str | None = None,
        stock: int = 10,
    ) -> ProductModel:
        with pg.session_scope() as s:
            product = ProductModel(
                name=name,
                description=description or f"{name} description",
                price=price,
                stock=stock,
            )
            if product_id is not None:
                product.id = product_id
            s.add(product)
            s.flush()
        return product

    return _make


@pytest.fixture()
def auth_headers():
    def _headers(user: UserModel) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user.id)}"}

    return _headers
