import sys
import os
from decimal import Decimal

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from models import ProcessingResult
from payments_engine import PaymentsEngine

NUM_CLIENTS = 500

# Final (available, held, total, locked) per scenario, keyed by client_id % 5:
#   0: plain deposits and a withdrawal
#   1: deposit disputed, resolved, then disputed again (rejected)
#   2: deposit charged back, then deposit and withdrawal on the locked account
#   3: withdrawal disputed and charged back
#   4: overdraft, dispute by the wrong client, reused transaction id
EXPECTED = {
    0: (Decimal("300"), Decimal("0"), Decimal("300"), False),
    1: (Decimal("300"), Decimal("0"), Decimal("300"), False),
    2: (Decimal("200"), Decimal("0"), Decimal("200"), True),
    3: (Decimal("300"), Decimal("0"), Decimal("300"), True),
    4: (Decimal("100.5"), Decimal("0"), Decimal("100.5"), False),
}


def tx(client_id: int, n: int) -> int:
    return client_id * 10 + n


def build_rows():
    clients = range(1, NUM_CLIENTS + 1)
    rows = ["type, client, tx, amount"]

    for c in clients:
        match c % 5:
            case 0:
                rows += [f"deposit, {c}, {tx(c, 1)}, 100", f"deposit, {c}, {tx(c, 2)}, 250", f"withdrawal, {c}, {tx(c, 3)}, 50"]
            case 1 | 2:
                rows += [f"deposit, {c}, {tx(c, 1)}, 100", f"deposit, {c}, {tx(c, 2)}, 200"]
            case 3:
                rows += [f"deposit, {c}, {tx(c, 1)}, 300", f"withdrawal, {c}, {tx(c, 2)}, 100"]
            case 4:
                rows += [f"deposit, {c}, {tx(c, 1)}, 100.5", f"withdrawal, {c}, {tx(c, 2)}, 500"]

    for c in clients:
        match c % 5:
            case 1:
                rows.append(f"dispute, {c}, {tx(c, 2)},")
            case 2:
                rows.append(f"dispute, {c}, {tx(c, 1)},")
            case 3:
                rows.append(f"dispute, {c}, {tx(c, 2)},")
            case 4:
                rows.append(f"dispute, {c + 1}, {tx(c, 1)},")

    for c in clients:
        match c % 5:
            case 1:
                rows += [f"resolve, {c}, {tx(c, 2)},", f"dispute, {c}, {tx(c, 2)},"]
            case 2:
                rows += [f"chargeback, {c}, {tx(c, 1)},", f"deposit, {c}, {tx(c, 3)}, 50", f"withdrawal, {c}, {tx(c, 4)}, 10"]
            case 3:
                rows.append(f"chargeback, {c}, {tx(c, 2)},")
            case 4:
                rows.append(f"deposit, {c}, {tx(c, 1)}, 999")

    return rows


class TestPaymentsEngineManyClients:
    def setup_method(self):
        self.engine = PaymentsEngine()

    def run(self, tmp_path):
        csv_file = tmp_path / "many_clients.csv"
        csv_file.write_text('\n'.join(build_rows()))
        return self.engine.process_file(str(csv_file))

    def test_final_balances_per_scenario(self, tmp_path):
        accounts = self.run(tmp_path)

        assert len(accounts) == NUM_CLIENTS
        for client_id, account in accounts.items():
            actual = (account.available, account.held, account.total, account.locked)
            assert actual == EXPECTED[client_id % 5], f"Client {client_id}"

    def test_total_is_available_plus_held_for_every_account(self, tmp_path):
        accounts = self.run(tmp_path)

        for client_id, account in accounts.items():
            assert account.total == account.available + account.held, f"Client {client_id}"

    def test_failures_counted_by_kind(self, tmp_path):
        self.run(tmp_path)

        per_group = NUM_CLIENTS // 5
        assert self.engine.stats.failures == {
            ProcessingResult.INVALID_DISPUTE_STATE: per_group,
            ProcessingResult.ACCOUNT_LOCKED: 2 * per_group,
            ProcessingResult.INSUFFICIENT_FUNDS: per_group,
            ProcessingResult.TRANSACTION_NOT_FOUND: per_group,
            ProcessingResult.DUPLICATE_TRANSACTION: per_group,
        }
        assert self.engine.stats.failed == 6 * per_group
        assert self.engine.stats.skipped_rows == 0

    def test_only_locked_scenarios_are_locked(self, tmp_path):
        accounts = self.run(tmp_path)

        locked = {client_id % 5 for client_id, account in accounts.items() if account.locked}
        assert locked == {2, 3}
