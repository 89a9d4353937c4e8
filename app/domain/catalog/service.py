from __future__ import annotations

import logging
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.persistence.models import ProductModel

logger = logging.getLogger(__name__)


class ProductMissingError(LookupError):
    def __init__(self, product_id: int):
        self.product_id = product_id
        super().__init__("product not found")


class ProductCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1)
    price: int = Field(ge=0, description="minor currency units")
    stock: int = Field(ge=0)


class ProductUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = Field(default=None, min_length=1)
    price: int | None = Field(default=None, ge=0)
    stock: int | None = Field(default=None, ge=0)


class ProductOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str
    price: int
    stock: int
    created_at: datetime
    updated_at: datetime


class ProductService:
    def __init__(self, session: Session):
        self.session = session

    def _active(self, product_id: int) -> ProductModel:
        stmt = (
            select(ProductModel)
            .where(ProductModel.id == product_id)
            .where(ProductModel.deleted_at.is_(None))
        )
        product = self.session.scalar(stmt)
        if product is None:
            raise ProductMissingError(product_id)
        return product

    def create(self, request: ProductCreate) -> ProductModel:
        product = ProductModel(**request.model_dump())
        self.session.add(product)
        self.session.flush()
        logger.info("product created: product_id=%s name=%s", product.id, product.name)
        return product

    def get(self, product_id: int) -> ProductModel:
        return self._active(product_id)

    def list_all(self) -> list[ProductModel]:
        stmt = (
            select(ProductModel)
            .where(ProductModel.deleted_at.is_(None))
            .order_by(ProductModel.id.asc())
        )
        return list(self.session.scalars(stmt).all())

    def update(self, product_id: int, request: ProductUpdate) -> ProductModel:
        product = self._active(product_id)
        for key, value in request.model_dump(exclude_none=True).items():
            setattr(product, key, value)
        self.session.flush()
        return product

    def delete(self, product_id: int) -> None:
        # Soft delete: historic order lines still join against the row.
        product = self._active(product_id)
        product.deleted_at = datetime.now(timezone.utc)
        self.session.flush()
        logger.info("product deleted: product_id=%s", product_id)
