from __future__ import annotations

from typing import Iterable

from sqlalchemy import Row, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from app.domain.orders.errors import StoreError
from app.domain.orders.status import OrderStatus
from app.persistence.models import OrderLineModel, OrderModel, ProductModel


class OrderStore:
    def __init__(self, session: Session):
        self.session = session

    def create_order(self, user_id: int) -> OrderModel:
        order = OrderModel(user_id=user_id, status=OrderStatus.PENDING.value)
        try:
            self.session.add(order)
            self.session.flush()
        except SQLAlchemyError as exc:
            raise StoreError("failed to create order", exc) from exc
        return order

    def add_lines(self, order_id: int, lines: Iterable[tuple[int, int]]) -> list[OrderLineModel]:
        rows = [
            OrderLineModel(order_id=order_id, product_id=product_id, quantity=quantity)
            for product_id, quantity in lines
        ]
        try:
            self.session.add_all(rows)
            self.session.flush()
        except SQLAlchemyError as exc:
            raise StoreError("failed to create order lines", exc) from exc
        return rows

    def get_order(self, order_id: int) -> OrderModel | None:
        stmt = (
            select(OrderModel)
            .options(selectinload(OrderModel.lines))
            .where(OrderModel.id == order_id)
            .where(OrderModel.deleted_at.is_(None))
            .execution_options(populate_existing=True)
        )
        try:
            return self.session.scalar(stmt)
        except SQLAlchemyError as exc:
            raise StoreError("failed to retrieve order", exc) from exc

    def cancel_pending(self, order_id: int, user_id: int) -> bool:
        # Ownership and status are part of the WHERE clause so that the check
        # and the write happen in one statement.
        stmt = (
            update(OrderModel)
            .where(OrderModel.id == order_id)
            .where(OrderModel.user_id == user_id)
            .where(OrderModel.status == OrderStatus.PENDING.value)
            .where(OrderModel.deleted_at.is_(None))
            .values(status=OrderStatus.CANCELLED.value)
            .execution_options(synchronize_session=False)
        )
        try:
            result = self.session.execute(stmt)
        except SQLAlchemyError as exc:
            raise StoreError("failed to cancel order", exc) from exc
        return result.rowcount == 1

    def set_status(self, order_id: int, status: OrderStatus) -> bool:
        stmt = (
            update(OrderModel)
            .where(OrderModel.id == order_id)
            .where(OrderModel.deleted_at.is_(None))
            .values(status=status.value)
            .execution_options(synchronize_session=False)
        )
        try:
            result = self.session.execute(stmt)
        except SQLAlchemyError as exc:
            raise StoreError("failed to update order status", exc) from exc
        return result.rowcount == 1

    def summary_rows(self, user_id: int) -> list[Row]:
        stmt = (
            select(
                OrderModel.id.label("id"),
                ProductModel.name.label("product_name"),
                ProductModel.description.label("description"),
                ProductModel.price.label("product_price"),
                OrderLineModel.quantity.label("quantity"),
                func.sum(OrderLineModel.quantity * ProductModel.price).label("total_price"),
            )
            .join(OrderLineModel, OrderLineModel.order_id == OrderModel.id)
            .join(ProductModel, ProductModel.id == OrderLineModel.product_id)
            .where(OrderModel.user_id == user_id)
            .where(OrderModel.deleted_at.is_(None))
            .group_by(
                OrderModel.id,
                ProductModel.name,
                ProductModel.description,
                ProductModel.price,
                OrderLineModel.quantity,
            )
            .order_by(OrderModel.id.asc(), func.min(OrderLineModel.id).asc())
        )
        try:
            return list(self.session.execute(stmt).all())
        except SQLAlchemyError as exc:
            raise StoreError("failed to retrieve orders", exc) from exc
