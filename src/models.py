from collections import Counter
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Optional, Union


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"


class ErrorKind(Enum):
    ACCOUNT_LOCKED = "account_locked"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    INSUFFICIENT_HELD_FUNDS = "insufficient_held_funds"
    TRANSACTION_NOT_FOUND = "transaction_not_found"
    DISPUTE_NOT_FOUND = "dispute_not_found"
    UNKNOWN_TRANSACTION_KIND = "unknown_transaction_kind"


class TransactionState(Enum):
    CREATED = "created"
    DISPUTED = "disputed"
    RESOLVED = "resolved"
    CHARGED_BACK = "charged_back"


@dataclass(frozen=True)
class Deposit:
    tx: int
    amount: Decimal


@dataclass(frozen=True)
class Withdrawal:
    tx: int
    amount: Decimal


Transfer = Union[Deposit, Withdrawal]


@dataclass(frozen=True)
class Dispute:
    """Snapshot of the transfer being contested, taken when the dispute opens."""

    transfer: Transfer

    @property
    def amount(self) -> Decimal:
        return self.transfer.amount


@dataclass(frozen=True)
class Resolve:
    dispute: Dispute


@dataclass(frozen=True)
class Chargeback:
    dispute: Dispute


Settlement = Union[Resolve, Chargeback]


def transfer_kind(transfer: Transfer) -> TransactionType:
    match transfer:
        case Deposit():
            return TransactionType.DEPOSIT
        case Withdrawal():
            return TransactionType.WITHDRAWAL
    raise TypeError(f"Not a transfer: {transfer!r}")


@dataclass
class TransactionRecord:
    transfer: Transfer
    dispute: Optional[Dispute] = None
    settlement: Optional[Settlement] = None

    @property
    def state(self) -> TransactionState:
        match self.settlement:
            case Resolve():
                return TransactionState.RESOLVED
            case Chargeback():
                return TransactionState.CHARGED_BACK
        if self.dispute is not None:
            return TransactionState.DISPUTED
        return TransactionState.CREATED


@dataclass
class Transaction:
    """Typed input record. transaction_type is kept raw so unknown kinds reach the engine."""

    transaction_type: Union[TransactionType, str]
    client_id: int
    transaction_id: int
    amount: Optional[Decimal] = None

    @property
    def kind(self) -> str:
        if isinstance(self.transaction_type, TransactionType):
            return self.transaction_type.value
        return self.transaction_type

    def __repr__(self) -> str:
        return f"Transaction({self.kind}, client={self.client_id}, tx={self.transaction_id}, amount={self.amount})"


@dataclass(frozen=True)
class SettlementError:
    kind: ErrorKind
    client_id: Optional[int] = None
    transaction_id: Optional[int] = None
    detail: Optional[str] = None

    def __str__(self) -> str:
        match self.kind:
            case ErrorKind.ACCOUNT_LOCKED:
                text = f"Account {self.client_id} locked"
            case ErrorKind.INSUFFICIENT_FUNDS:
                text = f"Insufficient funds in account {self.client_id} for tx {self.transaction_id}"
            case ErrorKind.INSUFFICIENT_HELD_FUNDS:
                text = f"Not enough funds held in account {self.client_id} to settle tx {self.transaction_id}"
            case ErrorKind.TRANSACTION_NOT_FOUND:
                text = f"Transaction {self.transaction_id} not found"
            case ErrorKind.DISPUTE_NOT_FOUND:
                text = f"No dispute recorded for transaction {self.transaction_id}"
            case ErrorKind.UNKNOWN_TRANSACTION_KIND:
                text = f"Unknown transaction kind for tx {self.transaction_id}"
        if self.detail:
            return f"{text}: {self.detail}"
        return text


@dataclass(frozen=True)
class SettlementResult:
    message: str = ""
    error: Optional[SettlementError] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None

    @classmethod
    def ok(cls, message: str) -> "SettlementResult":
        return cls(message=message)

    @classmethod
    def failed(cls, kind: ErrorKind, client_id: Optional[int] = None,
               transaction_id: Optional[int] = None, detail: Optional[str] = None) -> "SettlementResult":
        return cls(error=SettlementError(kind, client_id, transaction_id, detail))


@dataclass
class ClientAccount:
    """
    Balances of one client.

    Every operation validates before mutating, so a failed result leaves the
    account untouched. Chargeback is the only operation allowed on a locked
    account.
    """

    client_id: int
    available: Decimal = Decimal("0")
    held: Decimal = Decimal("0")
    locked: bool = False

    @property
    def total(self) -> Decimal:
        return self.available + self.held

    def _locked_result(self, transaction_id: int) -> SettlementResult:
        return SettlementResult.failed(ErrorKind.ACCOUNT_LOCKED, self.client_id, transaction_id)

    def deposit(self, deposit: Deposit) -> SettlementResult:
        if self.locked:
            return self._locked_result(deposit.tx)
        self.available += deposit.amount
        return SettlementResult.ok(f"Deposit: {deposit.amount} to account {self.client_id}")

    def withdrawal(self, withdrawal: Withdrawal) -> SettlementResult:
        if self.locked:
            return self._locked_result(withdrawal.tx)
        # Strict: the full available balance cannot be withdrawn.
        if self.available > withdrawal.amount:
            self.available -= withdrawal.amount
            return SettlementResult.ok(f"Withdrawal: {withdrawal.amount} from account {self.client_id}")
        return SettlementResult.failed(
            ErrorKind.INSUFFICIENT_FUNDS, self.client_id, withdrawal.tx,
            f"requested {withdrawal.amount}, available {self.available}",
        )

    def dispute(self, dispute: Dispute) -> SettlementResult:
        if self.locked:
            return self._locked_result(dispute.transfer.tx)
        # available may go negative here
        self.held += dispute.amount
        self.available -= dispute.amount
        kind = transfer_kind(dispute.transfer).value
        return SettlementResult.ok(f"Dispute: {kind} {dispute.transfer.tx}")

    def resolve(self, resolve: Resolve) -> SettlementResult:
        dispute = resolve.dispute
        if self.locked:
            return self._locked_result(dispute.transfer.tx)
        if self.held >= dispute.amount:
            self.held -= dispute.amount
            self.available += dispute.amount
            kind = transfer_kind(dispute.transfer).value
            return SettlementResult.ok(f"Resolve: dispute {kind} {dispute.transfer.tx}")
        return SettlementResult.failed(
            ErrorKind.INSUFFICIENT_HELD_FUNDS, self.client_id, dispute.transfer.tx,
            f"held {self.held}, disputed {dispute.amount}",
        )

    def chargeback(self, chargeback: Chargeback) -> SettlementResult:
        dispute = chargeback.dispute
        if self.held < dispute.amount:
            return SettlementResult.failed(
                ErrorKind.INSUFFICIENT_HELD_FUNDS, self.client_id, dispute.transfer.tx,
                f"held {self.held}, disputed {dispute.amount}",
            )
        match dispute.transfer:
            case Withdrawal():
                # Credits the held balance before the decrement plus the disputed amount.
                self.available += self.held + dispute.amount
            case Deposit():
                pass
        self.held -= dispute.amount
        self.locked = True
        kind = transfer_kind(dispute.transfer).value
        return SettlementResult.ok(f"Chargeback: dispute {kind} {dispute.transfer.tx}")


@dataclass
class ProcessingStats:
    """Counters for the end-of-run summary."""

    processed: int = 0
    failed: int = 0
    skipped_rows: int = 0
    failures_by_kind: Counter = field(default_factory=Counter)

    def record(self, result: SettlementResult) -> None:
        if result.succeeded:
            self.processed += 1
        else:
            self.failed += 1
            self.failures_by_kind[result.error.kind] += 1

    def record_skipped_row(self) -> None:
        self.skipped_rows += 1

    def summary(self) -> str:
        text = f"Processed: {self.processed}, Failed: {self.failed}, Skipped rows: {self.skipped_rows}"
        if self.failures_by_kind:
            details = ", ".join(
                f"{kind.value}={count}" for kind, count in sorted(self.failures_by_kind.items(), key=lambda item: item[0].value)
            )
            text += f" ({details})"
        return text
