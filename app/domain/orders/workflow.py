from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

from sqlalchemy.orm import Session

from app.core.security import Identity
from app.domain.catalog.lookup import ProductLookup, SqlProductLookup
from app.domain.orders.errors import (
    NotEligibleError,
    OrderNotFoundError,
    OrderValidationError,
    ProductNotFoundError,
    StoreError,
)
from app.domain.orders.status import OrderStatus
from app.domain.orders.store import OrderStore
from app.persistence.models import OrderModel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LineRequest:
    product_id: int
    quantity: int


def _validate_lines(lines: Iterable[LineRequest]) -> list[LineRequest]:
    items = list(lines)
    if not items:
        raise OrderValidationError("order must contain at least one product")
    for idx, item in enumerate(items):
        if int(item.product_id) <= 0:
            raise OrderValidationError(f"products[{idx}].product_id must be a positive integer")
        if int(item.quantity) < 1:
            raise OrderValidationError(f"products[{idx}].quantity must be at least 1")
    return items


class OrderWorkflow:
    """Order placement, owner cancellation and admin status changes.

    The admin capability for ``update_status`` is checked by the caller; this
    class never looks at ``Identity.is_admin``.
    """

    def __init__(self, store: OrderStore, products: ProductLookup):
        self.store = store
        self.products = products

    @classmethod
    def from_session(cls, session: Session) -> OrderWorkflow:
        return cls(store=OrderStore(session), products=SqlProductLookup(session))

    def place_order(self, identity: Identity, lines: Iterable[LineRequest]) -> OrderModel:
        items = _validate_lines(lines)

        wanted = {item.product_id for item in items}
        resolved = self.products.resolve_products(wanted)
        if len(resolved) != len(wanted):
            missing = wanted - set(resolved)
            logger.info("order rejected: user_id=%s missing_products=%s", identity.user_id, sorted(missing))
            raise ProductNotFoundError(missing)

        # Savepoint: a failure undoes the order and its lines only, not other
        # pending work in the caller's session.
        try:
            with self.store.session.begin_nested():
                order = self.store.create_order(identity.user_id)
                self.store.add_lines(order.id, [(item.product_id, item.quantity) for item in items])
        except StoreError:
            logger.exception("order placement failed: user_id=%s", identity.user_id)
            raise

        placed = self.store.get_order(order.id)
        if placed is None:
            raise StoreError("failed to retrieve order with products")

        logger.info(
            "order placed: order_id=%s user_id=%s lines=%s",
            placed.id,
            identity.user_id,
            len(placed.lines),
        )
        return placed

    def cancel_order(self, order_id: int, identity: Identity) -> None:
        if not self.store.cancel_pending(order_id, identity.user_id):
            logger.info("cancel refused: order_id=%s user_id=%s", order_id, identity.user_id)
            raise NotEligibleError()
        logger.info("order cancelled: order_id=%s user_id=%s", order_id, identity.user_id)

    def update_status(self, order_id: int, status: OrderStatus | str) -> OrderModel:
        try:
            new_status = OrderStatus.parse(status)
        except ValueError as exc:
            raise OrderValidationError(str(exc)) from exc

        # Any status may move to any other, cancelled included.
        if not self.store.set_status(order_id, new_status):
            raise OrderNotFoundError(order_id)

        order = self.store.get_order(order_id)
        if order is None:
            raise StoreError("failed to retrieve updated order with products")
        logger.info("order status updated: order_id=%s status=%s", order_id, new_status.value)
        return order
