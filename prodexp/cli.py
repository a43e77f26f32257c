"""CLI entry point for prodexp."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from datetime import date

from dotenv import load_dotenv

from .analysis import ProductStatus
from .config import load_config
from .db import ProductStore
from .display import format_summary, render_analysis
from .service import InvalidProductError, ProductNotFoundError, ProductService
from .units import parse_quantity


def _iso_date(text: str) -> date:
    try:
        return date.fromisoformat(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid date (expected YYYY-MM-DD): {text}")


def _quantity(text: str) -> tuple[float, str]:
    try:
        return parse_quantity(text)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))


def _status(text: str) -> ProductStatus:
    try:
        return ProductStatus(text.upper())
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid status: {text}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="prodexp",
        description="Track food products, their consumption and expiration",
    )
    parser.add_argument(
        "--config", "-c", type=str, default=None,
        help="Path to a TOML configuration file",
    )
    parser.add_argument(
        "--db", type=str, default=None,
        help="Path to the product database (overrides config)",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable debug logging",
    )

    sub = parser.add_subparsers(dest="command")

    # add
    add_parser = sub.add_parser("add", help="Register a product")
    add_parser.add_argument("name", type=str)
    add_parser.add_argument("--user", "-u", required=True)
    add_parser.add_argument(
        "--bought", type=_quantity, required=True,
        help="Quantity bought, optionally with a unit (e.g. 500g, \"2 bottles\")",
    )
    add_parser.add_argument("--consumed", type=float, default=0.0)
    add_parser.add_argument("--unit", type=str, default=None, help="Overrides the unit in --bought")
    add_parser.add_argument("--purchased", type=_iso_date, default=None)
    add_parser.add_argument("--expires", type=_iso_date, default=None)
    add_parser.add_argument("--tag", action="append", dest="tags", default=[])
    add_parser.add_argument("--date", type=_iso_date, default=None, help="Override today")

    # list
    list_parser = sub.add_parser("list", help="List a user's products")
    list_parser.add_argument("--user", "-u", required=True)
    list_parser.add_argument("--status", type=_status, action="append", default=None)
    list_parser.add_argument("--json", action="store_true", help="Output as JSON")

    # consume
    consume_parser = sub.add_parser("consume", help="Record consumption")
    consume_parser.add_argument("product_id", type=int)
    consume_parser.add_argument("amount", type=float)
    consume_parser.add_argument(
        "--total", action="store_true",
        help="Treat AMOUNT as the cumulative consumed quantity",
    )
    consume_parser.add_argument("--date", type=_iso_date, default=None, help="Override today")

    # analyze
    analyze_parser = sub.add_parser("analyze", help="Analyze a product")
    analyze_parser.add_argument("product_id", type=int)
    analyze_parser.add_argument("--json", action="store_true", help="Output as JSON")
    analyze_parser.add_argument("--date", type=_iso_date, default=None, help="Override today")

    # recompute
    recompute_parser = sub.add_parser("recompute", help="Recompute stored statuses")
    recompute_parser.add_argument("--user", "-u", default=None)
    recompute_parser.add_argument("--date", type=_iso_date, default=None, help="Override today")

    # schedule
    sub.add_parser("schedule", help="Run the scheduled status recompute job")

    return parser


def main(argv: list[str] | None = None) -> None:
    load_dotenv()
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = load_config(args.config)
    if args.db:
        config.database.path = args.db

    if args.command == "schedule":
        asyncio.run(_cmd_schedule(config))
        return

    store = ProductStore(config.database.path)
    service = ProductService(store, config)
    try:
        match args.command:
            case "add":
                _cmd_add(service, args)
            case "list":
                _cmd_list(service, args)
            case "consume":
                _cmd_consume(service, args)
            case "analyze":
                _cmd_analyze(service, args)
            case "recompute":
                _cmd_recompute(service, config, args)
    except (InvalidProductError, ProductNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    finally:
        store.close()


def _today(args) -> date:
    return getattr(args, "date", None) or date.today()


def _cmd_add(service: ProductService, args) -> None:
    bought, unit = args.bought
    product = service.create_product(
        user_id=args.user,
        name=args.name,
        quantity_bought=bought,
        quantity_consumed=args.consumed,
        unit=args.unit or unit,
        purchase_date=args.purchased or _today(args),
        expiration_date=args.expires,
        tags=args.tags,
        now=_today(args),
    )
    print(f"Added product {product['id']}: {product['name']} [{product['status']}]")


def _cmd_list(service: ProductService, args) -> None:
    products = service.list_products(args.user, statuses=args.status)
    if args.json:
        print(json.dumps(products, ensure_ascii=False, indent=2))
        return
    if not products:
        print("No products found.")
        return
    for p in products:
        expires = p["expiration_date"] or "-"
        print(
            f"  {p['id']:>4}  {p['name']:<20} "
            f"{p['quantity_consumed']:g}/{p['quantity_bought']:g} {p['unit']:<6} "
            f"expires {expires}  [{p['status']}]"
        )


def _cmd_consume(service: ProductService, args) -> None:
    if args.total:
        product = service.set_consumed(args.product_id, args.amount, _today(args))
    else:
        product = service.record_consumption(args.product_id, args.amount, _today(args))
    facts = ProductStore.to_facts(product)
    _, analysis = service.analyze_product(args.product_id, _today(args))
    print(format_summary(facts, analysis))


def _cmd_analyze(service: ProductService, args) -> None:
    product, analysis = service.analyze_product(args.product_id, _today(args))
    if args.json:
        data = {"id": product["id"], "name": product["name"], **analysis.to_dict()}
        print(json.dumps(data, ensure_ascii=False, indent=2))
    else:
        print(render_analysis(product["name"], ProductStore.to_facts(product), analysis))


def _cmd_recompute(service: ProductService, config, args) -> None:
    if args.user:
        count = service.recompute_statuses_for_user(args.user, _today(args))
    else:
        count = service.recompute_all_statuses(
            _today(args), user_ids=config.scheduler.user_ids or None
        )
    print(f"Updated {count} product statuses.")


async def _cmd_schedule(config) -> None:
    from .scheduler import StatusRecomputeScheduler

    try:
        scheduler = StatusRecomputeScheduler(config)
    except ImportError as e:
        print(str(e), file=sys.stderr)
        sys.exit(1)

    scheduler.start()
    print(f"Scheduler running ({config.scheduler.recompute_schedule}). Press Ctrl+C to stop.")
    try:
        await asyncio.Event().wait()
    finally:
        scheduler.stop()


if __name__ == "__main__":
    main()
