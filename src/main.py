import logging
import os
import sys
from decimal import Decimal
from typing import Dict, List

from ledger_engine import LedgerEngine
from models import ClientAccount

REPORT_HEADER = "client,available,held,total,locked"


def configure_logging() -> None:
    level = os.environ.get("TOY_LEDGER_LOG_LEVEL", "WARNING").upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )


def format_decimal(value: Decimal) -> str:
    """Format decimal with one fractional digit."""
    return f"{value:.1f}"


def render_report(accounts: Dict[int, ClientAccount]) -> List[str]:
    lines = [REPORT_HEADER]
    for client_id in sorted(accounts.keys()):
        account = accounts[client_id]
        lines.append(
            f"{client_id},"
            f"{format_decimal(account.available)},"
            f"{format_decimal(account.held)},"
            f"{format_decimal(account.total)},"
            f"{str(account.locked).lower()}"
        )
    return lines


def main() -> int:
    configure_logging()

    if len(sys.argv) != 2:
        print("Usage: python main.py <input.csv>", file=sys.stderr)
        return 1

    filepath = sys.argv[1]
    engine = LedgerEngine()
    try:
        accounts = engine.process_file(filepath)
    except OSError as e:
        print(f"Cannot read {filepath}: {e}", file=sys.stderr)
        return 1

    for line in render_report(accounts):
        print(line)
    return 0


if __name__ == "__main__":
    sys.exit(main())
