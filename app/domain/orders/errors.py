from __future__ import annotations


class OrderError(Exception):
    pass


class OrderValidationError(OrderError, ValueError):
    pass


class ProductNotFoundError(OrderError, LookupError):
    def __init__(self, missing: set[int] | None = None):
        self.missing = sorted(missing or ())
        detail = "one or more products do not exist"
        if self.missing:
            detail = f"{detail}: {', '.join(str(pid) for pid in self.missing)}"
        super().__init__(detail)


class OrderNotFoundError(OrderError, LookupError):
    def __init__(self, order_id: int):
        self.order_id = order_id
        super().__init__("order not found")


class NotEligibleError(OrderError):
    """Cancellation refused.

    Raised for missing, foreign and non-pending orders alike so callers cannot
    discover other users' orders.
    """

    def __init__(self):
        super().__init__("order is not eligible for cancellation")


class NoOrdersError(OrderError, LookupError):
    def __init__(self, user_id: int):
        self.user_id = user_id
        super().__init__("no orders found")


class StoreError(OrderError):
    def __init__(self, operation: str, cause: Exception | None = None):
        self.operation = operation
        message = operation if cause is None else f"{operation}: {cause}"
        super().__init__(message)
