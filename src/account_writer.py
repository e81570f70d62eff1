import csv
from decimal import Context, Decimal, ROUND_HALF_EVEN
from typing import Mapping, TextIO

from models import AccountSnapshot, LEDGER_CONTEXT

PRECISION = Decimal("0.0001")
REPORT_CONTEXT = Context(prec=LEDGER_CONTEXT.prec, rounding=ROUND_HALF_EVEN)
HEADER = ["client", "available", "held", "total", "locked"]


def format_decimal(value: Decimal) -> str:
    """Format decimal with exactly four decimal places."""
    return f"{value.quantize(PRECISION, context=REPORT_CONTEXT):f}"


class CsvAccountWriter:
    """Writes an account snapshot as CSV, one row per client ordered by client id."""

    def __init__(self, stream: TextIO):
        self._stream = stream

    def write_accounts(self, accounts: Mapping[int, AccountSnapshot]) -> None:
        writer = csv.writer(self._stream, lineterminator="\n")
        writer.writerow(HEADER)
        for client_id in sorted(accounts.keys()):
            account = accounts[client_id]
            writer.writerow([
                client_id,
                format_decimal(account.available),
                format_decimal(account.held),
                format_decimal(account.total),
                str(account.locked).lower(),
            ])
