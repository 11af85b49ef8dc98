from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_EVEN, localcontext
from enum import Enum
from typing import Optional

FOUR_PLACES = Decimal("0.0001")


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"

    @property
    def is_monetary(self) -> bool:
        return self in (TransactionType.DEPOSIT, TransactionType.WITHDRAWAL)


class ProcessingResult(Enum):
    SUCCESS = "success"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    UNKNOWN_TRANSACTION = "unknown_transaction"
    NOT_DISPUTED = "not_disputed"

    @property
    def is_failure(self) -> bool:
        return self is not ProcessingResult.SUCCESS


@dataclass(frozen=True)
class Transaction:
    transaction_type: TransactionType
    client_id: int
    transaction_id: int
    amount: Optional[Decimal] = None

    @property
    def resolved_amount(self) -> Decimal:
        """Amount to apply; absent amounts read as zero."""
        return self.amount if self.amount is not None else Decimal("0")

    def __repr__(self) -> str:
        return f"Transaction({self.transaction_type.value}, client={self.client_id}, tx={self.transaction_id}, amount={self.amount})"


@dataclass
class ClientAccount:
    client_id: int
    available: Decimal = Decimal("0")
    held: Decimal = Decimal("0")
    total: Decimal = Decimal("0")
    locked: bool = False

    def recompute_total(self) -> None:
        self.total = self.available + self.held

    def credit(self, amount: Decimal) -> None:
        self.available += amount

    def debit(self, amount: Decimal) -> None:
        self.available -= amount

    def hold(self, amount: Decimal) -> None:
        self.available -= amount
        self.held += amount

    def release_hold(self, amount: Decimal) -> None:
        self.held -= amount
        self.available += amount

    def remove_held(self, amount: Decimal) -> None:
        self.held -= amount

    def lock(self) -> None:
        self.locked = True

    def to_csv_row(self) -> str:
        return (
            f"{self.client_id},"
            f"{format_amount(self.available)},"
            f"{format_amount(self.held)},"
            f"{format_amount(self.total)},"
            f"{str(self.locked).lower()}"
        )


@dataclass(frozen=True)
class TransactionFailure:
    """A transaction the processor rejected, kept for audit."""

    transaction: Transaction
    result: ProcessingResult

    def describe(self) -> str:
        return (
            f"{self.transaction.transaction_type.value} tx {self.transaction.transaction_id} "
            f"for client {self.transaction.client_id}: {self.result.value}"
        )


class ProcessingStats:
    """Counters for tracking processing statistics."""

    def __init__(self):
        self.processed = 0
        self.failed = 0

    def record_success(self):
        self.processed += 1

    def record_failure(self):
        self.failed += 1


def format_amount(value: Decimal) -> str:
    """Format decimal with exactly 4 decimal places."""
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, value.adjusted() + 6)
        return f"{value.quantize(FOUR_PLACES, rounding=ROUND_HALF_EVEN):f}"
