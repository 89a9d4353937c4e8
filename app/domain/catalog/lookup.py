from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Protocol

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.orders.errors import StoreError
from app.persistence.models import ProductModel


@dataclass(frozen=True)
class ProductRef:
    product_id: int
    price: int


class ProductLookup(Protocol):
    def resolve_products(self, ids: Iterable[int]) -> dict[int, ProductRef]:
        ...


class SqlProductLookup:
    def __init__(self, session: Session):
        self.session = session

    def resolve_products(self, ids: Iterable[int]) -> dict[int, ProductRef]:
        wanted = sorted(set(ids))
        if not wanted:
            return {}
        stmt = (
            select(ProductModel.id, ProductModel.price)
            .where(ProductModel.id.in_(wanted))
            .where(ProductModel.deleted_at.is_(None))
        )
        try:
            rows = self.session.execute(stmt).all()
        except SQLAlchemyError as exc:
            raise StoreError("failed to validate products", exc) from exc
        return {row.id: ProductRef(product_id=row.id, price=int(row.price)) for row in rows}
