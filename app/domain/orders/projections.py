from __future__ import annotations

from sqlalchemy.orm import Session

from app.core.security import Identity
from app.domain.orders.errors import NoOrdersError
from app.domain.orders.schemas import OrderSummary
from app.domain.orders.store import OrderStore


class OrderSummaryProjector:
    def __init__(self, store: OrderStore):
        self.store = store

    @classmethod
    def from_session(cls, session: Session) -> OrderSummaryProjector:
        return cls(OrderStore(session))

    def list_orders(self, identity: Identity) -> list[OrderSummary]:
        rows = self.store.summary_rows(identity.user_id)
        if not rows:
            raise NoOrdersError(identity.user_id)
        return [
            OrderSummary(
                id=row.id,
                product_name=row.product_name,
                description=row.description,
                product_price=int(row.product_price),
                quantity=int(row.quantity),
                total_price=int(row.total_price),
            )
            for row in rows
        ]
