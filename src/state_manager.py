from typing import Dict, Optional

from models import ClientAccount, TransactionRecord


class StateManager:
    """
    Owns the account table and the transaction registry for one run.
    Transaction ids are global, so the registry spans all accounts.
    """

    def __init__(self):
        self._accounts: Dict[int, ClientAccount] = {}
        self._transactions: Dict[int, TransactionRecord] = {}

    @property
    def registry(self) -> Dict[int, TransactionRecord]:
        """Mutable registry handed to settle()."""
        return self._transactions

    def get_or_create_account(self, client_id: int) -> ClientAccount:
        """Get existing account or create new one with zero balances."""
        if client_id not in self._accounts:
            self._accounts[client_id] = ClientAccount(client_id=client_id)
        return self._accounts[client_id]

    def get_account(self, client_id: int) -> Optional[ClientAccount]:
        return self._accounts.get(client_id)

    def get_transaction(self, transaction_id: int) -> Optional[TransactionRecord]:
        """Retrieve stored record by ID."""
        return self._transactions.get(transaction_id)

    def get_all_accounts(self) -> Dict[int, ClientAccount]:
        """Return all accounts (for final output)."""
        return dict(self._accounts)
