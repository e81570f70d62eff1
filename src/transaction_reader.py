import csv
import logging
from decimal import Decimal, InvalidOperation
from typing import Dict, Iterator, Optional, TextIO

from models import Transaction, TransactionType

logger = logging.getLogger(__name__)

AMOUNT_REQUIRED = (TransactionType.DEPOSIT, TransactionType.WITHDRAWAL)


class CsvTransactionReader:
    """
    Reads transaction records from a CSV stream with a `type, client, tx, amount` header.
    Malformed rows are logged and skipped; I/O errors propagate to the caller.
    """

    def __init__(self, stream: TextIO):
        self._stream = stream
        self.skipped_rows = 0

    def read_transactions(self) -> Iterator[Transaction]:
        """Lazily yield transactions in file order."""
        reader = csv.DictReader(self._stream, skipinitialspace=True)
        for row in reader:
            transaction = parse_csv_row(row)
            if transaction is None:
                self.skipped_rows += 1
                continue
            yield transaction


def parse_csv_row(row: Dict[Optional[str], Optional[str]]) -> Optional[Transaction]:
    """Parse CSV row into Transaction, or None if the row is malformed."""
    try:
        normalized = {
            k.strip(): v.strip()
            for k, v in row.items()
            if isinstance(k, str) and isinstance(v, str)
        }

        transaction_type = TransactionType(normalized["type"].lower())
        client_id = int(normalized["client"])
        transaction_id = int(normalized["tx"])
        if client_id < 0 or transaction_id < 0:
            raise ValueError("identifiers must be non-negative")

        amount = None
        amount_str = normalized.get("amount", "")
        if amount_str:
            amount = Decimal(amount_str)
            if not amount.is_finite():
                raise ValueError(f"non-finite amount {amount_str}")
        elif transaction_type in AMOUNT_REQUIRED:
            raise ValueError(f"{transaction_type.value} requires an amount")

        return Transaction(
            transaction_type=transaction_type,
            client_id=client_id,
            transaction_id=transaction_id,
            amount=amount,
        )
    except (KeyError, ValueError, InvalidOperation) as e:
        logger.warning(f"Failed to parse row {row}: {e}")
        return None
