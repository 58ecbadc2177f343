from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import asdict
from datetime import datetime
from enum import Enum
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from rosterrecon.app import (
    clear_orphan_action,
    delete_orphan,
    ingest_orphan,
    list_orphans,
    resolve_orphan,
    set_orphan_action,
)
from rosterrecon.config import configure_logging
from rosterrecon.domain.errors import InvalidArgumentError, UpstreamError
from rosterrecon.domain.model import ActionType, OrphanReport, RosterEntryData

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reconcile orphaned roster records")
    subparsers = parser.add_subparsers(dest="command", required=True)

    listing = subparsers.add_parser("list", help="List orphaned records visible to a user")
    listing.add_argument("--user", required=True, help="EDIPI of the requesting user")
    listing.add_argument("--org", type=int, required=True, help="Organisation id")

    for action in ActionType:
        lock = subparsers.add_parser(action.value, help=f"Set a {action.value} on a record")
        lock.add_argument("composite_id", help="Composite id of the orphaned record")
        lock.add_argument("--user", required=True, help="EDIPI of the acting user")
        lock.add_argument(
            "--ttl-ms",
            type=int,
            help="Lifetime of the action in milliseconds (never expires when omitted)",
        )

    clear = subparsers.add_parser("clear", help="Clear an action previously set by a user")
    clear.add_argument("composite_id", help="Composite id of the orphaned record")
    clear.add_argument("--user", required=True, help="EDIPI of the acting user")
    clear.add_argument(
        "--action",
        required=True,
        choices=[action.value for action in ActionType],
        help="Type of action to clear",
    )

    resolve = subparsers.add_parser("resolve", help="Resolve a record into the roster")
    resolve.add_argument("composite_id", help="Composite id of the orphaned record")
    resolve.add_argument("--org", type=int, required=True, help="Organisation id")
    resolve.add_argument("--edipi", required=True, help="EDIPI of the individual")
    resolve.add_argument("--unit", type=int, help="Unit id holding the matching roster entry")
    resolve.add_argument("--first-name", help="First name for a new roster entry")
    resolve.add_argument("--last-name", help="Last name for a new roster entry")
    resolve.add_argument("--phone-number", help="Phone number for a new roster entry")
    resolve.add_argument("--role", help="Role of the acting user")

    delete = subparsers.add_parser("delete", help="Discard an orphaned record")
    delete.add_argument("composite_id", help="Composite id of the orphaned record")

    ingest = subparsers.add_parser("ingest", help="Record an unmatched ingestion report")
    ingest.add_argument("--document-id", required=True, help="Source document id")
    ingest.add_argument(
        "--timestamp",
        required=True,
        help="Report time as epoch milliseconds or an ISO-8601 timestamp",
    )
    ingest.add_argument("--edipi", required=True, help="EDIPI reported in the document")
    ingest.add_argument("--phone", help="Phone number reported in the document")
    ingest.add_argument("--unit", help="Unit text reported in the document")
    ingest.add_argument("--reporting-group", required=True, help="Reporting group of the org")

    return parser.parse_args(list(argv))


def _json_default(value: object) -> object:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    return str(value)


def _emit(payload: object) -> None:
    print(json.dumps(payload, default=_json_default, indent=2))  # noqa: T201


def _run(args: argparse.Namespace) -> None:
    command = args.command
    if command == "list":
        _emit([asdict(item) for item in list_orphans(user_edipi=args.user, org_id=args.org)])
    elif command in {action.value for action in ActionType}:
        action = set_orphan_action(
            args.composite_id,
            user_edipi=args.user,
            action_type=command,
            ttl_ms=args.ttl_ms,
        )
        _emit(_record_payload(action))
    elif command == "clear":
        clear_orphan_action(args.composite_id, user_edipi=args.user, action_type=args.action)
    elif command == "resolve":
        entry = RosterEntryData(
            edipi=args.edipi,
            unit_id=args.unit,
            first_name=args.first_name,
            last_name=args.last_name,
            phone_number=args.phone_number,
        )
        result = resolve_orphan(args.composite_id, org_id=args.org, entry=entry, role=args.role)
        _emit(
            {
                "recordsIngested": result.records_ingested,
                "lambdaInvocationCount": result.lambda_invocation_count,
                "items": [
                    {
                        "recordsIngested": item.records_ingested,
                        "lambdaInvocationCount": item.lambda_invocation_count,
                        "orphanedRecord": _record_payload(item.orphaned_record),
                    }
                    for item in result.items
                ],
            }
        )
    elif command == "delete":
        removed = delete_orphan(args.composite_id)
        log.info("Removed %d rows for %s", removed, args.composite_id)
    elif command == "ingest":
        record, created = ingest_orphan(
            OrphanReport(
                document_id=args.document_id,
                timestamp=args.timestamp,
                edipi=args.edipi,
                phone=args.phone,
                unit=args.unit,
                reporting_group=args.reporting_group,
            )
        )
        _emit({"created": created, "orphanedRecord": _record_payload(record)})
    else:
        raise InvalidArgumentError(f"Unsupported command: {command}")


def _record_payload(record: object) -> dict[str, object]:
    return {key: value for key, value in vars(record).items() if not key.startswith("_")}


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    configure_logging()
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)

    try:
        _run(parsed_args)
    except InvalidArgumentError:
        log.exception("Invalid request")
        sys.exit(2)
    except UpstreamError as exc:
        if exc.orphaned_record is not None:
            log.warning(
                "Record %s was resolved; reingestion must be retried",
                exc.orphaned_record.composite_id,
            )
        log.exception("Reingestion failed")
        sys.exit(1)
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
