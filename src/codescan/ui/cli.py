from __future__ import annotations

import argparse
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

import uvicorn
from dotenv import load_dotenv

from codescan.app import (
    build_api_app,
    describe_payload,
    fetch_scan_history,
    lookup_public_code,
    submit_scans,
)
from codescan.config import configure_logging
from codescan.domain.errors import InvalidPayloadError

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from codescan.domain.model import ScanRecord

log = logging.getLogger(__name__)

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8000


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Ingest and inspect code scans")
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the scan API server")
    serve.add_argument("--host", type=str, default=DEFAULT_HOST, help="Bind address")
    serve.add_argument(
        "--port",
        type=int,
        default=DEFAULT_PORT,
        help="Port to listen on (default: %(default)s)",
    )

    normalize = subparsers.add_parser("normalize", help="Show the code id carried by a payload")
    normalize.add_argument("payload", type=str, help="Raw scanned text")
    normalize.add_argument(
        "--base-url",
        type=str,
        help="Base URL used to print the code's URL form",
    )

    scan = subparsers.add_parser("scan", help="Submit scanned payloads to the scan API")
    scan.add_argument("payloads", nargs="+", help="Raw scanned text, in scan order")

    subparsers.add_parser("history", help="List your scans, newest first")

    lookup = subparsers.add_parser("lookup", help="Show the public fields of a code")
    lookup.add_argument("code_id", type=str, help="Code id to look up")

    return parser.parse_args(list(argv))


def _format_record(record: ScanRecord) -> str:
    line = f"{record.scanned_at.isoformat()}  {record.code_id}"
    if record.code is not None:
        line += f"  {record.code.system_acronym}/{record.code.size}/{record.code.year}"
    return line


def _serve(host: str, port: int) -> None:
    uvicorn.run(build_api_app(), host=host, port=port)


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    configure_logging()
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)

    if parsed_args.command == "normalize":
        try:
            code_id, url = describe_payload(parsed_args.payload, base_url=parsed_args.base_url)
        except InvalidPayloadError as exc:
            log.error("Rejected payload (%s): %s", exc.reason.value, exc)  # noqa: TRY400
            sys.exit(2)
        log.info("%s  %s", code_id, url)
        return

    try:
        if parsed_args.command == "serve":
            _serve(parsed_args.host, parsed_args.port)
        elif parsed_args.command == "scan":
            accepted = submit_scans(parsed_args.payloads)
            log.info("Submitted %s of %s scans", len(accepted), len(parsed_args.payloads))
        elif parsed_args.command == "history":
            for record in fetch_scan_history():
                log.info("%s", _format_record(record))
        elif parsed_args.command == "lookup":
            code = lookup_public_code(parsed_args.code_id)
            log.info(
                "%s  %s/%s/%s  created %s",
                code.id,
                code.system_acronym,
                code.size,
                code.year,
                code.created_at.isoformat(),
            )
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except Exception:
        log.exception("Fatal error during %s", parsed_args.command)
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
