from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Path
from sqlalchemy.orm import Session

from app.api.utils import api_response
from app.core.security import Identity, get_identity, require_admin
from app.domain.catalog.service import (
    ProductCreate,
    ProductMissingError,
    ProductOut,
    ProductService,
    ProductUpdate,
)
from app.persistence.pg import get_session

router = APIRouter(tags=["products"])


@router.post("/products", status_code=201)
def create_product(
    request: ProductCreate,
    _: Identity = Depends(require_admin),
    session: Session = Depends(get_session),
):
    product = ProductService(session).create(request)
    return api_response(201, "Product created successfully", ProductOut.model_validate(product))


@router.get("/products")
def list_products(
    _: Identity = Depends(get_identity),
    session: Session = Depends(get_session),
):
    products = ProductService(session).list_all()
    return api_response(
        200,
        "Products retrieved successfully",
        [ProductOut.model_validate(item) for item in products],
    )


@router.get("/products/{product_id}")
def get_product(
    product_id: int = Path(gt=0),
    _: Identity = Depends(get_identity),
    session: Session = Depends(get_session),
):
    try:
        product = ProductService(session).get(product_id)
    except ProductMissingError as exc:
        raise HTTPException(status_code=404, detail="Product not found") from exc
    return api_response(200, "Product retrieved successfully", ProductOut.model_validate(product))


@router.put("/products/{product_id}")
def update_product(
    request: ProductUpdate,
    product_id: int = Path(gt=0),
    _: Identity = Depends(require_admin),
    session: Session = Depends(get_session),
):
    try:
        product = ProductService(session).update(product_id, request)
    except ProductMissingError as exc:
        raise HTTPException(status_code=404, detail="Product not found") from exc
    return api_response(200, "Product updated successfully", ProductOut.model_validate(product))


@router.delete("/products/{product_id}")
def delete_product(
    product_id: int = Path(gt=0),
    _: Identity = Depends(require_admin),
    session: Session = Depends(get_session),
):
    try:
        ProductService(session).delete(product_id)
    except ProductMissingError as exc:
        raise HTTPException(status_code=404, detail="Product not found") from exc
    return api_response(200, "Product deleted successfully")
