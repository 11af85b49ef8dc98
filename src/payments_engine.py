import logging
from typing import Dict, List

from csv_io import read_transactions
from models import ClientAccount, ProcessingStats, TransactionFailure
from state_manager import StateManager
from transaction_processor import TransactionProcessor

logger = logging.getLogger(__name__)


class PaymentsEngine:
    """
    Reads a transaction log and replays it against client accounts.
    Ingestion completes before replay starts; replay is single-threaded
    and follows input order.
    """

    def __init__(self):
        self._state = StateManager()
        self._processor = TransactionProcessor(self._state)

    @property
    def failures(self) -> List[TransactionFailure]:
        return self._processor.failures

    @property
    def state(self) -> StateManager:
        return self._state

    @property
    def stats(self) -> ProcessingStats:
        return self._processor.stats

    def process_file(self, filepath: str) -> Dict[int, ClientAccount]:
        """Process CSV file and return final account states."""

        # Phase 1: Ingestion (fatal on any malformed record)
        logger.info(f"Reading transactions from {filepath}")
        transactions = read_transactions(filepath)

        # Phase 2: Replay
        logger.info("Starting replay phase")
        accounts = self._processor.process_transactions(transactions)

        stats = self._processor.stats
        logger.info(f"Processed: {stats.processed}, Failed: {stats.failed}, Accounts: {len(accounts)}")

        return accounts
