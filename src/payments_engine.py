import logging
from typing import Dict, Iterable, Optional, TextIO

from models import Transaction, AccountSnapshot, ProcessingStats
from ledger import Ledger
from transaction_reader import CsvTransactionReader
from account_writer import CsvAccountWriter

logger = logging.getLogger(__name__)


class PaymentsEngine:
    """
    Feeds transactions to a Ledger one at a time, in receipt order.
    Rejected transactions are logged and counted, then processing moves on.
    Errors raised while reading input or writing output are not caught here.
    """

    def __init__(self, ledger: Optional[Ledger] = None):
        self._ledger = ledger if ledger is not None else Ledger()
        self._stats = ProcessingStats()

    @property
    def stats(self) -> ProcessingStats:
        return self._stats

    def process_file(self, filepath: str) -> Dict[int, AccountSnapshot]:
        """Process CSV file and return final account states."""
        with open(filepath, "r", newline="") as f:
            return self.process_stream(f)

    def process_stream(self, stream: TextIO) -> Dict[int, AccountSnapshot]:
        """Process CSV text stream and return final account states."""
        reader = CsvTransactionReader(stream)
        accounts = self.process_transactions(reader.read_transactions())
        self._stats.skipped_rows += reader.skipped_rows

        logger.info(
            f"Processed: {self._stats.processed}, "
            f"Failed: {self._stats.failed}, "
            f"Skipped rows: {self._stats.skipped_rows}"
        )
        return accounts

    def process_transactions(self, transactions: Iterable[Transaction]) -> Dict[int, AccountSnapshot]:
        for transaction in transactions:
            result = self._ledger.process_transaction(transaction)
            self._stats.record_result(result)
            if not result.is_success:
                logger.warning(f"Rejected {transaction}: {result.value}")

        return self._ledger.snapshot()

    def write_report(self, stream: TextIO) -> None:
        """Write the current account states as CSV."""
        CsvAccountWriter(stream).write_accounts(self._ledger.snapshot())
