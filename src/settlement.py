import logging
from decimal import Decimal
from typing import MutableMapping, Optional, Union

from models import (
    Chargeback,
    ClientAccount,
    Deposit,
    Dispute,
    ErrorKind,
    Resolve,
    SettlementResult,
    Transaction,
    TransactionRecord,
    TransactionType,
    Withdrawal,
)
from state_manager import StateManager

logger = logging.getLogger(__name__)


def settle(
    kind: Union[TransactionType, str],
    account: ClientAccount,
    transaction_id: int,
    amount: Optional[Decimal],
    registry: MutableMapping[int, TransactionRecord],
) -> SettlementResult:
    """
    Apply one record to an account and update the registry.

    Never raises for a rejected record: every outcome comes back as a
    SettlementResult. Dispute and settlement bookkeeping is written to the
    registry even when the account operation fails.
    """
    try:
        transaction_type = TransactionType(kind)
    except ValueError:
        return SettlementResult.failed(
            ErrorKind.UNKNOWN_TRANSACTION_KIND, account.client_id, transaction_id, f"kind {kind!r}"
        )

    match transaction_type:
        case TransactionType.DEPOSIT:
            deposit = Deposit(tx=transaction_id, amount=amount if amount is not None else Decimal("0"))
            result = account.deposit(deposit)
            registry[transaction_id] = TransactionRecord(transfer=deposit)
            return result
        case TransactionType.WITHDRAWAL:
            withdrawal = Withdrawal(tx=transaction_id, amount=amount if amount is not None else Decimal("0"))
            result = account.withdrawal(withdrawal)
            registry[transaction_id] = TransactionRecord(transfer=withdrawal)
            return result
        case TransactionType.DISPUTE:
            return _open_dispute(account, transaction_id, registry)
        case TransactionType.RESOLVE | TransactionType.CHARGEBACK:
            return _settle_dispute(transaction_type, account, transaction_id, registry)


def _open_dispute(
    account: ClientAccount,
    transaction_id: int,
    registry: MutableMapping[int, TransactionRecord],
) -> SettlementResult:
    record = registry.get(transaction_id)
    if record is None:
        return SettlementResult.failed(ErrorKind.TRANSACTION_NOT_FOUND, account.client_id, transaction_id)

    dispute = Dispute(transfer=record.transfer)
    result = account.dispute(dispute)
    record.dispute = dispute
    return result


def _settle_dispute(
    transaction_type: TransactionType,
    account: ClientAccount,
    transaction_id: int,
    registry: MutableMapping[int, TransactionRecord],
) -> SettlementResult:
    record = registry.get(transaction_id)
    if record is None:
        return SettlementResult.failed(ErrorKind.TRANSACTION_NOT_FOUND, account.client_id, transaction_id)
    if record.dispute is None:
        return SettlementResult.failed(ErrorKind.DISPUTE_NOT_FOUND, account.client_id, transaction_id)

    if transaction_type == TransactionType.RESOLVE:
        resolve = Resolve(dispute=record.dispute)
        result = account.resolve(resolve)
        record.settlement = resolve
    else:
        chargeback = Chargeback(dispute=record.dispute)
        result = account.chargeback(chargeback)
        record.settlement = chargeback
    return result


class SettlementEngine:
    """
    Applies input records against engine-owned state, one at a time.
    Rejections are logged and returned; they never stop processing.
    """

    def __init__(self, state: Optional[StateManager] = None):
        self._state = state if state is not None else StateManager()

    @property
    def state(self) -> StateManager:
        return self._state

    def process_transaction(self, transaction: Transaction) -> SettlementResult:
        account = self._state.get_or_create_account(transaction.client_id)
        result = settle(
            transaction.transaction_type,
            account,
            transaction.transaction_id,
            transaction.amount,
            self._state.registry,
        )

        if result.succeeded:
            logger.debug(result.message)
        else:
            logger.warning(f"Rejected {transaction}: {result.error}")
        return result
