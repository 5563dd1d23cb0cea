# ruff: noqa: T201

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from hashnames.app import find_owned_names, list_subdomains, resolve_domain
from hashnames.common.logging import configure_logging
from hashnames.domain.errors import NameNotFoundError
from hashnames.domain.hashing import split_domain

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from hashnames.domain.reconciliation import ReconciliationResult
    from hashnames.domain.resolver import Resolution

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Resolve names on the hashgraph name registry")
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log every contract call and page request",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    resolve = subparsers.add_parser("resolve", help="Resolve a domain to its registry records")
    resolve.add_argument("domain", type=str, help="Domain such as example.hbar")

    subdomains = subparsers.add_parser(
        "subdomains",
        help="List the names held by a domain's subdomain node",
    )
    subdomains.add_argument("domain", type=str, help="Second-level domain such as example.hbar")

    names = subparsers.add_parser("names", help="List the names an account owns")
    names.add_argument("account_id", type=str, help="Account id such as 0.0.1234")

    return parser.parse_args(list(argv))


def _validate_account_id(value: str) -> str:
    parts = value.strip().split(".")
    if len(parts) != 3 or not all(part.isdigit() for part in parts):  # noqa: PLR2004
        raise ValueError(f"Invalid account id: {value}")
    return value.strip()


def _print_resolution(resolution: Resolution) -> None:
    print(f"domain:         {resolution.name_hash.domain}")
    print(f"tld node:       {resolution.tld_node.id}")
    print(f"sld node:       {resolution.sld_node.id}")
    print(f"serial:         {resolution.sld.serial}")
    if resolution.sld.expiration is not None:
        print(f"expiration:     {resolution.sld.expiration}")
    if resolution.subdomain is not None:
        node = resolution.subdomain_node
        print(f"subdomain node: {node.id if node is not None else '-'}")
        for key, value in resolution.subdomain.fields.items():
            print(f"  {key}: {value.hex() if isinstance(value, bytes) else value}")


def _print_owned(result: ReconciliationResult) -> None:
    for match in result.matches:
        holding = match.holding
        label = match.domain or match.event.name_hash.sld_hash or match.event.name_hash.tld_hash
        print(f"{label}\t{holding.token_id}:{holding.serial}")
    if not result.complete:
        print(
            f"{len(result.unmatched)} of {len(result.holdings)} holdings "
            "have no registration event",
            file=sys.stderr,
        )


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args: argparse.Namespace
    try:
        parsed_args = _parse_args(args_list)
        if parsed_args.command in {"resolve", "subdomains"}:
            split_domain(parsed_args.domain)
        elif parsed_args.command == "names":
            parsed_args.account_id = _validate_account_id(parsed_args.account_id)
    except ValueError:
        configure_logging()
        log.exception("CLI validation error")
        sys.exit(2)

    configure_logging(verbose=parsed_args.verbose)

    try:
        if parsed_args.command == "resolve":
            _print_resolution(asyncio.run(resolve_domain(parsed_args.domain)))
        elif parsed_args.command == "subdomains":
            for name in asyncio.run(list_subdomains(parsed_args.domain)):
                print(name)
        elif parsed_args.command == "names":
            _print_owned(asyncio.run(find_owned_names(parsed_args.account_id)))
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301
    except NameNotFoundError as exc:
        log.error("Not found: %s", exc)  # noqa: TRY400
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
