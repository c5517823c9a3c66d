import csv
import logging
import sys
from decimal import Decimal, InvalidOperation
from typing import Dict, Iterable, Iterator, Optional

from models import ClientAccount, ProcessingStats, Transaction
from settlement import SettlementEngine
from state_manager import StateManager

logger = logging.getLogger(__name__)

MAX_CLIENT_ID = 2**16 - 1
MAX_TRANSACTION_ID = 2**32 - 1


class LedgerEngine:
    """
    Single-pass runner: reads records in input order and feeds them to the
    settlement engine. A rejected record never stops the stream.
    """

    def __init__(self, state: Optional[StateManager] = None):
        self._state = state if state is not None else StateManager()
        self._settlement = SettlementEngine(self._state)
        self._stats = ProcessingStats()

    @property
    def stats(self) -> ProcessingStats:
        return self._stats

    def process_file(self, filepath: str) -> Dict[int, ClientAccount]:
        """Process CSV file and return final account states."""
        logger.info(f"Processing {filepath}")
        with open(filepath, "r", newline="") as f:
            accounts = self.process_transactions(self._read_transactions(f))

        print(self._stats.summary(), file=sys.stderr)
        return accounts

    def process_transactions(self, transactions: Iterable[Transaction]) -> Dict[int, ClientAccount]:
        for transaction in transactions:
            result = self._settlement.process_transaction(transaction)
            self._stats.record(result)

        logger.info("Processing complete")
        return self._state.get_all_accounts()

    def _read_transactions(self, lines: Iterable[str]) -> Iterator[Transaction]:
        reader = csv.DictReader(lines, skipinitialspace=True)
        for row in reader:
            transaction = self._parse_csv_row(row)
            if transaction is None:
                self._stats.record_skipped_row()
                continue
            yield transaction

    def _parse_csv_row(self, row: Dict[str, Optional[str]]) -> Optional[Transaction]:
        """Parse CSV row into Transaction."""
        try:
            normalized = {k.strip(): (v or "").strip() for k, v in row.items() if k is not None}

            client_id = int(normalized["client"])
            transaction_id = int(normalized["tx"])
            if not 0 <= client_id <= MAX_CLIENT_ID:
                raise ValueError(f"client id {client_id} out of range")
            if not 0 <= transaction_id <= MAX_TRANSACTION_ID:
                raise ValueError(f"tx id {transaction_id} out of range")

            amount = None
            amount_str = normalized.get("amount", "")
            if amount_str:
                amount = Decimal(amount_str)
                if not amount.is_finite():
                    raise ValueError(f"amount {amount_str} is not finite")

            return Transaction(
                transaction_type=normalized["type"].lower(),
                client_id=client_id,
                transaction_id=transaction_id,
                amount=amount,
            )
        except (KeyError, ValueError, InvalidOperation) as e:
            logger.warning(f"Failed to parse row {row}: {e}")
            return None
