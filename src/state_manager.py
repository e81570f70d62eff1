from typing import Dict, Optional

from models import StoredTransaction, ClientAccount, AccountSnapshot


class StateManager:
    """
    Owns client accounts and the transaction history used for dispute lookups.
    Only the Ledger mutates what it holds; there is no shared or module-level state.
    """

    def __init__(self):
        self._accounts: Dict[int, ClientAccount] = {}
        self._transactions: Dict[int, StoredTransaction] = {}

    def get_account(self, client_id: int) -> Optional[ClientAccount]:
        """Retrieve an existing account without creating it."""
        return self._accounts.get(client_id)

    def get_or_create_account(self, client_id: int) -> ClientAccount:
        """Get existing account or create new one."""
        if client_id not in self._accounts:
            self._accounts[client_id] = ClientAccount(client_id=client_id)
        return self._accounts[client_id]

    def store_transaction(self, transaction: StoredTransaction) -> None:
        """Store transaction for future dispute lookups."""
        self._transactions[transaction.transaction_id] = transaction

    def get_transaction(self, transaction_id: int) -> Optional[StoredTransaction]:
        """Retrieve stored transaction by ID."""
        return self._transactions.get(transaction_id)

    def has_transaction(self, transaction_id: int) -> bool:
        return transaction_id in self._transactions

    def get_all_accounts(self) -> Dict[int, AccountSnapshot]:
        """Return a frozen copy of every account (for final output)."""
        return {client_id: account.snapshot() for client_id, account in self._accounts.items()}
