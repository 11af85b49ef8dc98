from typing import Dict, Optional

from models import Transaction, ClientAccount


class TransactionHistory:
    """
    Append-only index of accepted deposits and withdrawals by transaction id.
    The first record stored for an id wins; later ones are ignored.
    """

    def __init__(self):
        self._transactions: Dict[int, Transaction] = {}

    def record(self, transaction: Transaction) -> bool:
        """Store transaction unless its id is already known. Returns True if stored."""
        if transaction.transaction_id in self._transactions:
            return False
        self._transactions[transaction.transaction_id] = transaction
        return True

    def get(self, transaction_id: int) -> Optional[Transaction]:
        return self._transactions.get(transaction_id)

    def __contains__(self, transaction_id: int) -> bool:
        return transaction_id in self._transactions

    def __len__(self) -> int:
        return len(self._transactions)


class DisputeTracker:
    """Transaction ids currently under dispute, mapped to the dispute that opened them."""

    def __init__(self):
        self._open_disputes: Dict[int, Transaction] = {}

    def open(self, dispute: Transaction) -> None:
        self._open_disputes.setdefault(dispute.transaction_id, dispute)

    def is_open(self, transaction_id: int) -> bool:
        return transaction_id in self._open_disputes

    def close(self, transaction_id: int) -> None:
        self._open_disputes.pop(transaction_id, None)

    def __contains__(self, transaction_id: int) -> bool:
        return self.is_open(transaction_id)

    def __len__(self) -> int:
        return len(self._open_disputes)


class StateManager:
    """
    Owns all state for one run: client accounts, transaction history
    for dispute lookups, and the set of open disputes.
    """

    def __init__(self):
        self._accounts: Dict[int, ClientAccount] = {}
        self.history = TransactionHistory()
        self.disputes = DisputeTracker()

    def get_or_create_account(self, client_id: int) -> ClientAccount:
        """Get existing account or create new one."""
        if client_id not in self._accounts:
            self._accounts[client_id] = ClientAccount(client_id=client_id)
        return self._accounts[client_id]

    def get_account(self, client_id: int) -> Optional[ClientAccount]:
        return self._accounts.get(client_id)

    def get_all_accounts(self) -> Dict[int, ClientAccount]:
        """Return all accounts (for final output)."""
        return dict(self._accounts)
