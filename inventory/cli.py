"""Command-line interface for the inventory client."""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

# Add parent directory to path to allow imports when run as script
sys.path.insert(0, str(Path(__file__).parent.parent))

__all__ = ["main", "parse_args", "build_parser"]

from inventory.client import ApiClient, ApiError
from inventory.config import BASE_URL, OUTPUT_PATH
from inventory.controllers import NoticeBoard, ProductRow
from inventory.csv_utils import export_products_to_csv
from inventory.logging_config import setup_logging
from inventory.pipeline import refresh
from inventory.repository import NoticeRepository, ProductRepository
from inventory.screens import DEFAULT_FORM_SCREEN, DEFAULT_SCREEN, SCREEN_VARIANTS, Screen, get_variant
from inventory.url_validation import URLValidationError


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Document inventory items against the remote products API",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # List products of the assembly screen (quantity 2)
  python -m inventory.cli list --screen montagem

  # Add an electronics product with a photo
  python -m inventory.cli add --screen eletronica --name "Multimetro" --image foto.jpg

  # Edit only the description of a product
  python -m inventory.cli edit 65f1c0 --description "Bancada 3"

  # Export everything to CSV
  python -m inventory.cli export-csv data/produtos.csv

  # Post a general notice
  python -m inventory.cli notices add "Inventario na sexta"
        """,
    )
    parser.add_argument(
        "--api-url",
        default=BASE_URL,
        help=f"Base URL of the API (default: {BASE_URL}, env INVENTORY_API_URL)",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    parser.add_argument("--no-log-file", action="store_true", help="Don't write JSONL logs")

    sub = parser.add_subparsers(dest="command", required=True)

    screen_help = f"Screen variant (default: {DEFAULT_SCREEN}). Choices: {list(SCREEN_VARIANTS)}"
    form_screen_help = f"Screen variant (default: {DEFAULT_FORM_SCREEN}). Choices: {list(SCREEN_VARIANTS)}"

    list_p = sub.add_parser("list", help="List products as a screen shows them")
    list_p.add_argument("--screen", choices=list(SCREEN_VARIANTS), default=DEFAULT_SCREEN, help=screen_help)

    sub.add_parser("latest", help="Show the most recently added product")

    show_p = sub.add_parser("show", help="Show every field of one product")
    show_p.add_argument("id")

    add_p = sub.add_parser("add", help="Create a product")
    add_p.add_argument("--screen", choices=list(SCREEN_VARIANTS), default=DEFAULT_FORM_SCREEN, help=form_screen_help)
    add_p.add_argument("--name", default="")
    add_p.add_argument("--description", default="")
    add_p.add_argument("--quantity", default="", help="Ignored on screens with a fixed quantity")
    add_p.add_argument("--image", metavar="PATH", help="Local image file to upload")

    edit_p = sub.add_parser("edit", help="Overwrite a product; omitted fields keep their value")
    edit_p.add_argument("id")
    edit_p.add_argument("--screen", choices=list(SCREEN_VARIANTS), default=DEFAULT_FORM_SCREEN, help=form_screen_help)
    edit_p.add_argument("--name")
    edit_p.add_argument("--description")
    edit_p.add_argument("--quantity")
    edit_p.add_argument("--image", metavar="PATH", help="Replace the stored image")

    delete_p = sub.add_parser("delete", help="Delete a product (no confirmation)")
    delete_p.add_argument("id")

    export_p = sub.add_parser("export-csv", help="Export products to CSV")
    export_p.add_argument("path", nargs="?", default=OUTPUT_PATH)
    export_p.add_argument("--screen", choices=list(SCREEN_VARIANTS), default=DEFAULT_SCREEN, help=screen_help)

    notices_p = sub.add_parser("notices", help="General notices board")
    notices_sub = notices_p.add_subparsers(dest="notice_command", required=True)
    notices_sub.add_parser("list", help="List notices")
    n_add = notices_sub.add_parser("add", help="Post a notice")
    n_add.add_argument("text")
    n_edit = notices_sub.add_parser("edit", help="Replace a notice's text")
    n_edit.add_argument("id")
    n_edit.add_argument("text")
    n_delete = notices_sub.add_parser("delete", help="Delete a notice")
    n_delete.add_argument("id")

    return parser


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


def print_row(row: ProductRow) -> None:
    record = row.record
    quantity = "-" if record.quantity is None else record.quantity
    print(f"[{record.id}] {record.name}")
    print(f"    Quantidade: {quantity} ({row.category})")
    print(f"    Adicionado em: {row.date_text}")
    if record.description:
        print(f"    {record.description}")


def print_detail(row: ProductRow) -> None:
    record = row.record
    print(f"{'='*50}")
    print(f"ID:          {record.id}")
    print(f"Nome:        {record.name}")
    print(f"Descrição:   {record.description}")
    print(f"Quantidade:  {record.quantity if record.quantity is not None else '-'} ({row.category})")
    print(f"Imagem:      {record.image_url or '-'}")
    print(f"Adicionado:  {row.date_text}")
    print(f"{'='*50}")


def cmd_list(screen: Screen) -> int:
    if not screen.mount():
        print("Could not load products (see log).", file=sys.stderr)
        return 1
    rows = screen.rows()
    print(f"{screen.variant.title} - {len(rows)} produto(s)\n")
    for row in rows:
        print_row(row)
    return 0


def cmd_show(screen: Screen, record_id: str) -> int:
    if not screen.mount():
        print("Could not load products (see log).", file=sys.stderr)
        return 1
    record = screen.repository.get(record_id)
    if record is None:
        print(f"Product not found: {record_id}", file=sys.stderr)
        return 1
    screen.list.open(record)
    print_detail(ProductRow.from_record(screen.list.detail))
    screen.list.close()
    return 0


def cmd_add(screen: Screen, args: argparse.Namespace) -> int:
    form = screen.form
    form.draft.name = args.name
    form.draft.description = args.description
    form.draft.quantity = args.quantity
    form.set_image(args.image)
    result = form.submit()
    if not result.ok:
        print(f"Failed to create product: {result.error}", file=sys.stderr)
        return 1
    print(f"Created product {result.record.id if result.record else ''}".rstrip())
    return 0


def cmd_edit(screen: Screen, args: argparse.Namespace) -> int:
    if not screen.mount():
        print("Could not load products (see log).", file=sys.stderr)
        return 1
    record = screen.repository.get(args.id)
    if record is None:
        print(f"Product not found: {args.id}", file=sys.stderr)
        return 1

    screen.list.select(record)
    draft = screen.form.draft
    if args.name is not None:
        draft.name = args.name
    if args.description is not None:
        draft.description = args.description
    if args.quantity is not None:
        draft.quantity = args.quantity
    if args.image is not None:
        screen.form.set_image(args.image)

    result = screen.form.submit()
    if not result.ok:
        print(f"Failed to update product {args.id}: {result.error}", file=sys.stderr)
        return 1
    print(f"Updated product {args.id}")
    return 0


def cmd_delete(screen: Screen, record_id: str) -> int:
    result = screen.list.remove(record_id)
    if not result.ok:
        print(f"Failed to delete product {record_id} (see log).", file=sys.stderr)
        return 1
    print(f"Deleted product {record_id}")
    return 0


def cmd_notices(board: NoticeBoard, args: argparse.Namespace) -> int:
    if args.notice_command == "list":
        if not board.mount():
            print("Could not load notices (see log).", file=sys.stderr)
            return 1
        notices = board.notices()
        print(f"Avisos gerais - {len(notices)}\n")
        for notice in notices:
            print(f"[{notice.id}] {notice.notice}")
        return 0

    if args.notice_command == "delete":
        result = board.remove(args.id)
        if not result.ok:
            print(f"Failed to delete notice {args.id} (see log).", file=sys.stderr)
            return 1
        print(f"Deleted notice {args.id}")
        return 0

    if args.notice_command == "edit":
        board.form.selected_id = args.id
    board.form.draft.notice = args.text
    result = board.form.submit()
    if not result.ok:
        print(f"Failed to save notice: {result.error}", file=sys.stderr)
        return 1
    print("Notice saved")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for CLI."""
    args = parse_args(argv)

    setup_logging(
        level=logging.DEBUG if args.verbose else None,
        log_to_file=not args.no_log_file,
    )

    try:
        client = ApiClient(args.api_url)
    except URLValidationError as e:
        print(f"Invalid API URL: {e}", file=sys.stderr)
        return 2

    if args.command == "notices":
        return cmd_notices(NoticeBoard(NoticeRepository(client)), args)

    if args.command == "export-csv":
        variant = get_variant(args.screen)
        try:
            products = refresh(client, variant.policy)
        except ApiError as e:
            print(f"Could not load products: {e}", file=sys.stderr)
            return 1
        export_products_to_csv(products, args.path)
        return 0

    repository = ProductRepository(client)
    screen = Screen(get_variant(getattr(args, "screen", DEFAULT_SCREEN)), repository)

    if args.command == "list":
        return cmd_list(screen)
    if args.command == "latest":
        entry = Screen(get_variant("entrada"), repository)
        return cmd_list(entry)
    if args.command == "show":
        return cmd_show(screen, args.id)
    if args.command == "add":
        return cmd_add(screen, args)
    if args.command == "edit":
        return cmd_edit(screen, args)
    if args.command == "delete":
        return cmd_delete(screen, args.id)

    return 2


if __name__ == "__main__":
    sys.exit(main())
