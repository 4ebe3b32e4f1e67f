# ruff: noqa: T201

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from reconcile_edit.app import (
    add_property,
    default_property_source,
    handle_edit_request,
    init_database,
    show_record,
)
from reconcile_edit.config import configure_logging
from reconcile_edit.domain.model import Datatype, ItemId, PropertyId

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create or update records by reconciliation")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    init_db = subparsers.add_parser("init-db", help="Create the record store tables")
    init_db.add_argument(
        "--database-uri",
        type=str,
        help="SQLAlchemy database URI (defaults to DATABASE_URI or the data directory)",
    )

    prop = subparsers.add_parser("property", help="Property management commands")
    prop_sub = prop.add_subparsers(dest="property_command", required=True)
    prop_add = prop_sub.add_parser("add", help="Define a property in the local store")
    prop_add.add_argument("property_id", type=str, help="Property id, e.g. P23")
    prop_add.add_argument(
        "--datatype",
        type=str,
        required=True,
        choices=[str(datatype) for datatype in Datatype],
        help="Datatype of the property",
    )
    prop_add.add_argument(
        "--label",
        action="append",
        default=[],
        metavar="LANG=TEXT",
        help="Label in one language (repeatable)",
    )

    edit = subparsers.add_parser("edit", help="Run a reconciliation edit")
    edit.add_argument(
        "--entity",
        type=str,
        required=True,
        help="Entity payload: JSON text, a file path, or '-' for stdin",
    )
    edit.add_argument(
        "--reconcile",
        type=str,
        required=True,
        help="Reconciliation directive: JSON text or a file path",
    )

    show = subparsers.add_parser("show", help="Print the latest revision of an item")
    show.add_argument("item_id", type=str, help="Item id, e.g. Q42")

    return parser.parse_args(list(argv))


def _load_json(value: str) -> object:
    if value == "-":
        text = sys.stdin.read()
    elif value.lstrip().startswith(("{", "[")):
        text = value
    else:
        path = Path(value)
        if not path.is_file():
            raise ValueError(f"Not JSON and not a file: {value}")
        text = path.read_text(encoding="utf-8")
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {value[:40]!r}: {exc}") from exc


def _parse_labels(values: Sequence[str]) -> dict[str, str]:
    labels: dict[str, str] = {}
    for value in values:
        language, sep, text = value.partition("=")
        if not sep or not language.strip() or not text.strip():
            raise ValueError(f"Invalid label {value!r}, expected LANG=TEXT")
        labels[language.strip()] = text.strip()
    return labels


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
        configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)
        if parsed_args.command == "property":
            property_id = PropertyId(parsed_args.property_id)
            labels = _parse_labels(parsed_args.label)
        elif parsed_args.command == "show":
            item_id = ItemId(parsed_args.item_id)
        elif parsed_args.command == "edit":
            entity_payload = _load_json(parsed_args.entity)
            reconcile_payload = _load_json(parsed_args.reconcile)
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        if parsed_args.command == "init-db":
            init_database(database_uri=parsed_args.database_uri)
        elif parsed_args.command == "property" and parsed_args.property_command == "add":
            add_property(property_id, parsed_args.datatype, labels)
        elif parsed_args.command == "edit":
            response = handle_edit_request(
                entity_payload,
                reconcile_payload,
                property_source=default_property_source(),
            )
            print(json.dumps(response.to_payload()))
            if not response.success:
                sys.exit(1)
        elif parsed_args.command == "show":
            record = show_record(item_id)
            if record is None:
                log.error("No revision stored for %s", item_id)
                sys.exit(1)
            print(json.dumps(record, indent=2, ensure_ascii=False))
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except Exception:
        log.exception("Fatal error")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
