"""
In-memory account ledger.

Applies deposits, withdrawals, disputes, resolves and chargebacks one at a
time and reports the outcome of each as a ProcessingResult. A rejected
transaction leaves every account and stored transaction untouched.

Disputes work on the signed amount of the original transaction: positive for
a deposit, negative for a withdrawal. Disputing a withdrawal therefore moves
the amount out of held and into available, and a chargeback of that dispute
raises total by the withdrawn amount without touching available again.
Whether a disputed withdrawal should be settled this way is ambiguous; the
behaviour is kept as is for compatibility.
"""
import logging
from decimal import Decimal
from typing import Dict, Optional

from models import (
    Transaction,
    TransactionType,
    DisputeState,
    StoredTransaction,
    AccountSnapshot,
    ProcessingResult,
    is_valid_amount,
)
from state_manager import StateManager

logger = logging.getLogger(__name__)


class Ledger:
    """
    Sole mutator of account state.
    Not thread-safe: callers apply transactions one at a time, in receipt order.
    """

    def __init__(self, state: Optional[StateManager] = None):
        self._state = state if state is not None else StateManager()

    def process_transaction(self, transaction: Transaction) -> ProcessingResult:
        """
        Apply a single transaction record.

        Returns:
            SUCCESS if the transaction was applied, otherwise the reason it was rejected.
        """
        match transaction.transaction_type:
            case TransactionType.DEPOSIT:
                return self.deposit(transaction.client_id, transaction.transaction_id, transaction.amount)
            case TransactionType.WITHDRAWAL:
                return self.withdrawal(transaction.client_id, transaction.transaction_id, transaction.amount)
            case TransactionType.DISPUTE:
                return self.dispute(transaction.client_id, transaction.transaction_id)
            case TransactionType.RESOLVE:
                return self.resolve(transaction.client_id, transaction.transaction_id)
            case TransactionType.CHARGEBACK:
                return self.chargeback(transaction.client_id, transaction.transaction_id)

    def deposit(self, client_id: int, transaction_id: int, amount: Optional[Decimal]) -> ProcessingResult:
        result = self._check_new_transaction(client_id, transaction_id, amount)
        if not result.is_success:
            return result

        account = self._state.get_or_create_account(client_id)
        account.credit(amount)
        self._record(client_id, transaction_id, TransactionType.DEPOSIT, amount)
        return ProcessingResult.SUCCESS

    def withdrawal(self, client_id: int, transaction_id: int, amount: Optional[Decimal]) -> ProcessingResult:
        result = self._check_new_transaction(client_id, transaction_id, amount)
        if not result.is_success:
            return result

        account = self._state.get_account(client_id)
        available = account.available if account is not None else Decimal("0")
        if available < amount:
            logger.debug(f"Withdrawal tx {transaction_id}: {amount} exceeds available {available}")
            return ProcessingResult.INSUFFICIENT_FUNDS

        account = self._state.get_or_create_account(client_id)
        account.debit(amount)
        self._record(client_id, transaction_id, TransactionType.WITHDRAWAL, amount)
        return ProcessingResult.SUCCESS

    def dispute(self, client_id: int, transaction_id: int) -> ProcessingResult:
        original = self._find_disputable(client_id, transaction_id)
        if original is None:
            return ProcessingResult.TRANSACTION_NOT_FOUND

        if original.dispute_state != DisputeState.NORMAL:
            logger.debug(f"Dispute for tx {transaction_id}: transaction is {original.dispute_state.value}")
            return ProcessingResult.INVALID_DISPUTE_STATE

        self._state.get_account(client_id).hold(original.signed_amount)
        original.dispute_state = DisputeState.DISPUTED
        return ProcessingResult.SUCCESS

    def resolve(self, client_id: int, transaction_id: int) -> ProcessingResult:
        original = self._find_disputable(client_id, transaction_id)
        if original is None:
            return ProcessingResult.TRANSACTION_NOT_FOUND

        if original.dispute_state != DisputeState.DISPUTED:
            logger.debug(f"Resolve for tx {transaction_id}: transaction is {original.dispute_state.value}")
            return ProcessingResult.INVALID_DISPUTE_STATE

        self._state.get_account(client_id).release_hold(original.signed_amount)
        original.dispute_state = DisputeState.RESOLVED
        return ProcessingResult.SUCCESS

    def chargeback(self, client_id: int, transaction_id: int) -> ProcessingResult:
        original = self._find_disputable(client_id, transaction_id)
        if original is None:
            return ProcessingResult.TRANSACTION_NOT_FOUND

        if original.dispute_state != DisputeState.DISPUTED:
            logger.debug(f"Chargeback for tx {transaction_id}: transaction is {original.dispute_state.value}")
            return ProcessingResult.INVALID_DISPUTE_STATE

        account = self._state.get_account(client_id)
        account.remove_held(original.signed_amount)
        account.locked = True
        original.dispute_state = DisputeState.CHARGED_BACK
        return ProcessingResult.SUCCESS

    def snapshot(self) -> Dict[int, AccountSnapshot]:
        """Return the state of every account ever touched."""
        return self._state.get_all_accounts()

    def _check_new_transaction(self, client_id: int, transaction_id: int, amount: Optional[Decimal]) -> ProcessingResult:
        # Duplicate ids are reported before anything else, whatever the amount or client.
        if self._state.has_transaction(transaction_id):
            logger.debug(f"Tx {transaction_id}: id already used")
            return ProcessingResult.DUPLICATE_TRANSACTION

        if not is_valid_amount(amount):
            logger.debug(f"Tx {transaction_id}: invalid amount {amount}")
            return ProcessingResult.INVALID_AMOUNT

        account = self._state.get_account(client_id)
        if account is not None and account.locked:
            logger.debug(f"Tx {transaction_id}: account {client_id} is locked")
            return ProcessingResult.ACCOUNT_LOCKED

        return ProcessingResult.SUCCESS

    def _find_disputable(self, client_id: int, transaction_id: int) -> Optional[StoredTransaction]:
        original = self._state.get_transaction(transaction_id)

        if original is None:
            logger.debug(f"Tx {transaction_id}: not found")
            return None

        if original.client_id != client_id:
            logger.debug(f"Tx {transaction_id}: client mismatch (expected {original.client_id}, got {client_id})")
            return None

        return original

    def _record(self, client_id: int, transaction_id: int, transaction_type: TransactionType, amount: Decimal) -> None:
        self._state.store_transaction(
            StoredTransaction(
                transaction_id=transaction_id,
                client_id=client_id,
                transaction_type=transaction_type,
                amount=amount,
            )
        )
