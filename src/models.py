from collections import Counter
from dataclasses import dataclass
from decimal import Context, Decimal, DivisionByZero, Inexact, InvalidOperation, Overflow, Rounded
from enum import Enum
from typing import Optional

# Amounts are limited to 28 integer and 28 fractional digits; balances are
# summed under 96 digits of precision so every addition stays exact.
MAX_INTEGER_DIGITS = 28
MAX_FRACTIONAL_DIGITS = 28
LEDGER_CONTEXT = Context(prec=96, traps=[InvalidOperation, DivisionByZero, Overflow, Inexact, Rounded])


def is_valid_amount(amount: Optional[Decimal]) -> bool:
    """Positive, finite and within the digits the ledger can add exactly."""
    if amount is None or not amount.is_finite() or amount <= 0:
        return False
    return amount.adjusted() < MAX_INTEGER_DIGITS and amount.as_tuple().exponent >= -MAX_FRACTIONAL_DIGITS


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"


class DisputeState(Enum):
    NORMAL = "normal"
    DISPUTED = "disputed"
    RESOLVED = "resolved"
    CHARGED_BACK = "charged_back"


class ProcessingResult(Enum):
    SUCCESS = "success"
    INVALID_AMOUNT = "invalid_amount"
    DUPLICATE_TRANSACTION = "duplicate_transaction"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    ACCOUNT_LOCKED = "account_locked"
    TRANSACTION_NOT_FOUND = "transaction_not_found"
    INVALID_DISPUTE_STATE = "invalid_dispute_state"

    @property
    def is_success(self) -> bool:
        return self is ProcessingResult.SUCCESS


@dataclass(frozen=True)
class Transaction:
    transaction_type: TransactionType
    client_id: int
    transaction_id: int
    amount: Optional[Decimal] = None

    def __repr__(self) -> str:
        return f"Transaction({self.transaction_type.value}, client={self.client_id}, tx={self.transaction_id}, amount={self.amount})"


@dataclass
class StoredTransaction:
    """A deposit or withdrawal kept around so it can be disputed later."""

    transaction_id: int
    client_id: int
    transaction_type: TransactionType
    amount: Decimal
    dispute_state: DisputeState = DisputeState.NORMAL

    @property
    def signed_amount(self) -> Decimal:
        """Positive for deposits, negative for withdrawals."""
        if self.transaction_type == TransactionType.WITHDRAWAL:
            return self.amount.copy_negate()
        return self.amount


@dataclass(frozen=True)
class AccountSnapshot:
    client_id: int
    available: Decimal
    held: Decimal
    total: Decimal
    locked: bool


@dataclass
class ClientAccount:
    client_id: int
    available: Decimal = Decimal("0")
    held: Decimal = Decimal("0")
    locked: bool = False

    @property
    def total(self) -> Decimal:
        return LEDGER_CONTEXT.add(self.available, self.held)

    def credit(self, amount: Decimal) -> None:
        self.available = LEDGER_CONTEXT.add(self.available, amount)

    def debit(self, amount: Decimal) -> None:
        self.available = LEDGER_CONTEXT.subtract(self.available, amount)

    def hold(self, amount: Decimal) -> None:
        self.available = LEDGER_CONTEXT.subtract(self.available, amount)
        self.held = LEDGER_CONTEXT.add(self.held, amount)

    def release_hold(self, amount: Decimal) -> None:
        self.held = LEDGER_CONTEXT.subtract(self.held, amount)
        self.available = LEDGER_CONTEXT.add(self.available, amount)

    def remove_held(self, amount: Decimal) -> None:
        self.held = LEDGER_CONTEXT.subtract(self.held, amount)

    def snapshot(self) -> AccountSnapshot:
        return AccountSnapshot(
            client_id=self.client_id,
            available=self.available,
            held=self.held,
            total=self.total,
            locked=self.locked,
        )


class ProcessingStats:
    """Counters for tracking processing statistics."""

    def __init__(self):
        self.processed = 0
        self.skipped_rows = 0
        self.failures: Counter = Counter()

    @property
    def failed(self) -> int:
        return sum(self.failures.values())

    def record_result(self, result: ProcessingResult):
        if result.is_success:
            self.processed += 1
        else:
            self.failures[result] += 1
