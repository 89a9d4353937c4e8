from __future__ import annotations

import argparse
import json
import sys

from app.core.logging import configure_logging
from app.domain.orders.errors import OrderError
from app.domain.orders.schemas import OrderOut
from app.domain.orders.status import OrderStatus
from app.domain.orders.workflow import OrderWorkflow
from app.domain.users.errors import UserNotFoundError
from app.domain.users.service import UserService
from app.persistence.pg import init_db, session_scope


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Storefront operator CLI")
    top = parser.add_subparsers(dest="command", required=True)

    db = top.add_parser("db", help="Database operations")
    db_sub = db.add_subparsers(dest="db_command", required=True)
    db_sub.add_parser("init", help="Create all tables")

    user = top.add_parser("user", help="User operations")
    user_sub = user.add_subparsers(dest="user_command", required=True)
    promote = user_sub.add_parser("promote", help="Grant admin rights to a user")
    promote.add_argument("email")

    order = top.add_parser("order", help="Order operations")
    order_sub = order.add_subparsers(dest="order_command", required=True)
    status = order_sub.add_parser("status", help="Set an order's status")
    status.add_argument("order_id", type=int)
    status.add_argument("status", choices=OrderStatus.values())

    return parser


def _init_db(_: argparse.Namespace) -> int:
    init_db()
    print("database initialized")
    return 0


def _promote_user(args: argparse.Namespace) -> int:
    init_db()
    try:
        with session_scope() as session:
            user = UserService(session).promote(args.email)
            print(json.dumps({"id": user.id, "email": user.email, "is_admin": user.is_admin}))
    except UserNotFoundError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


def _set_order_status(args: argparse.Namespace) -> int:
    init_db()
    try:
        with session_scope() as session:
            order = OrderWorkflow.from_session(session).update_status(args.order_id, args.status)
            print(OrderOut.model_validate(order).model_dump_json(indent=2))
    except OrderError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


def main(argv: list[str] | None = None) -> int:
    configure_logging()
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command == "db" and args.db_command == "init":
        return _init_db(args)
    if args.command == "user" and args.user_command == "promote":
        return _promote_user(args)
    if args.command == "order" and args.order_command == "status":
        return _set_order_status(args)

    parser.error("unsupported command")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
