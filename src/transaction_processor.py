import logging
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from models import (
    Transaction,
    TransactionType,
    ClientAccount,
    ProcessingResult,
    ProcessingStats,
    TransactionFailure,
)
from state_manager import StateManager

logger = logging.getLogger(__name__)


class TransactionProcessor:
    """
    Applies transactions to client accounts strictly in the order received.
    Business failures are returned as ProcessingResult values, logged and
    recorded; they never abort the run.
    """

    def __init__(self, state: Optional[StateManager] = None):
        self._state = state if state is not None else StateManager()
        self.stats = ProcessingStats()
        self.failures: List[TransactionFailure] = []

    @property
    def state(self) -> StateManager:
        return self._state

    def process_transactions(self, transactions: Iterable[Transaction]) -> Dict[int, ClientAccount]:
        """Apply every transaction in order and return the final accounts by client id."""
        for transaction in transactions:
            self.process_transaction(transaction)
        return self._state.get_all_accounts()

    def process_transaction(self, transaction: Transaction) -> ProcessingResult:
        """
        Process a single transaction against its client's account,
        creating the account on first sight of the client.

        Returns:
            SUCCESS: Applied
            INSUFFICIENT_FUNDS: Withdrawal larger than available funds
            UNKNOWN_TRANSACTION: Referenced tx id was never deposited or withdrawn
            NOT_DISPUTED: Resolve or chargeback for a tx id with no open dispute
        """
        account = self._state.get_or_create_account(transaction.client_id)
        result = self.apply(account, transaction)

        if result.is_failure:
            failure = TransactionFailure(transaction, result)
            self.failures.append(failure)
            self.stats.record_failure()
            logger.warning(f"Rejected {failure.describe()}")
        else:
            self.stats.record_success()
        return result

    def apply(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        match transaction.transaction_type:
            case TransactionType.DEPOSIT:
                result = self._handle_deposit(account, transaction)
            case TransactionType.WITHDRAWAL:
                result = self._handle_withdrawal(account, transaction)
            case TransactionType.DISPUTE:
                result = self._handle_dispute(account, transaction)
            case TransactionType.RESOLVE:
                result = self._handle_resolve(account, transaction)
            case TransactionType.CHARGEBACK:
                result = self._handle_chargeback(account, transaction)
            case _:
                raise ValueError(f"Unsupported transaction type: {transaction.transaction_type}")

        account.recompute_total()
        return result

    def _handle_deposit(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        account.credit(transaction.resolved_amount)
        if not self._state.history.record(transaction):
            logger.info(f"Deposit tx {transaction.transaction_id}: id already in history, keeping first record")
        return ProcessingResult.SUCCESS

    def _handle_withdrawal(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        amount = transaction.resolved_amount
        if account.available < amount:
            return ProcessingResult.INSUFFICIENT_FUNDS

        account.debit(amount)
        if not self._state.history.record(transaction):
            logger.info(f"Withdrawal tx {transaction.transaction_id}: id already in history, keeping first record")
        return ProcessingResult.SUCCESS

    def _handle_dispute(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        amount = self._historical_amount(transaction.transaction_id)
        if amount is None:
            return ProcessingResult.UNKNOWN_TRANSACTION

        # The referenced transaction is treated as a credit whatever its type.
        account.hold(amount)
        self._state.disputes.open(transaction)
        return ProcessingResult.SUCCESS

    def _handle_resolve(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        amount = self._historical_amount(transaction.transaction_id)
        if amount is None:
            return ProcessingResult.UNKNOWN_TRANSACTION

        if not self._state.disputes.is_open(transaction.transaction_id):
            return ProcessingResult.NOT_DISPUTED

        account.release_hold(amount)
        self._state.disputes.close(transaction.transaction_id)
        return ProcessingResult.SUCCESS

    def _handle_chargeback(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        amount = self._historical_amount(transaction.transaction_id)
        if amount is None:
            return ProcessingResult.UNKNOWN_TRANSACTION

        if not self._state.disputes.is_open(transaction.transaction_id):
            return ProcessingResult.NOT_DISPUTED

        account.remove_held(amount)
        account.lock()
        self._state.disputes.close(transaction.transaction_id)
        return ProcessingResult.SUCCESS

    def _historical_amount(self, transaction_id: int) -> Optional[Decimal]:
        original = self._state.history.get(transaction_id)
        if original is None:
            return None
        return original.resolved_amount
