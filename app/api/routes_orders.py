from __future__ import annotations

from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session

from app.api.utils import api_response
from app.core.security import Identity, get_identity, require_admin
from app.domain.orders.projections import OrderSummaryProjector
from app.domain.orders.schemas import OrderOut, PlaceOrderRequest, UpdateOrderStatusRequest
from app.domain.orders.workflow import LineRequest, OrderWorkflow
from app.persistence.pg import get_session

router = APIRouter(tags=["orders"])


@router.post("/orders", status_code=201)
def place_order(
    request: PlaceOrderRequest,
    identity: Identity = Depends(get_identity),
    session: Session = Depends(get_session),
):
    lines = [LineRequest(product_id=item.product_id, quantity=item.quantity) for item in request.products]
    order = OrderWorkflow.from_session(session).place_order(identity, lines)
    return api_response(201, "Order placed successfully", OrderOut.model_validate(order))


@router.get("/orders")
def list_orders(
    identity: Identity = Depends(get_identity),
    session: Session = Depends(get_session),
):
    summaries = OrderSummaryProjector.from_session(session).list_orders(identity)
    return api_response(200, "Orders retrieved successfully", summaries)


@router.put("/orders/{order_id}/cancel")
def cancel_order(
    order_id: int = Path(gt=0),
    identity: Identity = Depends(get_identity),
    session: Session = Depends(get_session),
):
    OrderWorkflow.from_session(session).cancel_order(order_id, identity)
    return api_response(200, "Order canceled successfully")


@router.put("/orders/{order_id}/status")
def update_order_status(
    request: UpdateOrderStatusRequest,
    order_id: int = Path(gt=0),
    _: Identity = Depends(require_admin),
    session: Session = Depends(get_session),
):
    order = OrderWorkflow.from_session(session).update_status(order_id, request.status)
    return api_response(200, "Order status updated successfully", OrderOut.model_validate(order))
