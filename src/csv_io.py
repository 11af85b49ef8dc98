import csv
import logging
import re
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, TextIO

from errors import InputFileError, TransactionParseError
from models import Transaction, TransactionType, ClientAccount

logger = logging.getLogger(__name__)

OUTPUT_HEADER = "client,available,held,total,locked"

MAX_CLIENT_ID = 2**16 - 1
MAX_TRANSACTION_ID = 2**32 - 1

# Amounts are rendered at 4 places within a 28 digit decimal context.
MAX_AMOUNT_INTEGER_DIGITS = 20

UNSIGNED_PATTERN = re.compile(r"[0-9]+")
AMOUNT_PATTERN = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)")


def read_transactions(filepath: str) -> List[Transaction]:
    """
    Read every transaction from a CSV file with a type,client,tx,amount header.
    The whole file is parsed before anything is returned, so a malformed
    record aborts the run before any transaction is applied.
    """
    try:
        with open(filepath, "r", newline="", encoding="utf-8-sig") as f:
            transactions = list(parse_csv(f))
    except (OSError, UnicodeDecodeError) as e:
        raise InputFileError(filepath, str(e)) from e

    logger.info(f"Read {len(transactions)} transactions from {filepath}")
    return transactions


def parse_csv(stream: TextIO) -> Iterable[Transaction]:
    reader = csv.DictReader(stream)
    try:
        for row in reader:
            if not any((v or "").strip() for k, v in row.items() if k is not None):
                continue
            yield parse_row(row, reader.line_num)
    except csv.Error as e:
        raise TransactionParseError(reader.line_num, str(e)) from e


def parse_row(row: Dict[Optional[str], Optional[str]], line_number: int) -> Transaction:
    """Parse CSV row into Transaction."""
    if None in row:
        raise TransactionParseError(line_number, f"unexpected extra fields {row[None]}")

    normalized = {k.strip(): (v or "").strip() for k, v in row.items()}

    try:
        transaction_type_str = normalized["type"].lower()
        client_field = normalized["client"]
        transaction_field = normalized["tx"]
    except KeyError as e:
        raise TransactionParseError(line_number, f"missing column {e}") from e

    try:
        transaction_type = TransactionType(transaction_type_str)
    except ValueError as e:
        raise TransactionParseError(line_number, f"unknown transaction type {transaction_type_str!r}") from e

    client_id = _parse_unsigned(client_field, "client", MAX_CLIENT_ID, line_number)
    transaction_id = _parse_unsigned(transaction_field, "tx", MAX_TRANSACTION_ID, line_number)

    amount = None
    amount_str = normalized.get("amount", "")
    if transaction_type.is_monetary:
        if not amount_str:
            raise TransactionParseError(line_number, f"{transaction_type.value} requires an amount")
        amount = _parse_amount(amount_str, line_number)
    elif amount_str:
        logger.debug(f"Line {line_number}: ignoring amount on {transaction_type.value}")

    return Transaction(
        transaction_type=transaction_type,
        client_id=client_id,
        transaction_id=transaction_id,
        amount=amount,
    )


def write_accounts(accounts: Dict[int, ClientAccount], stream: TextIO) -> None:
    """Write the header and one row per account, ordered by client id."""
    stream.write(OUTPUT_HEADER + "\n")
    for client_id in sorted(accounts.keys()):
        stream.write(accounts[client_id].to_csv_row() + "\n")


def _parse_unsigned(value: str, field: str, maximum: int, line_number: int) -> int:
    if not UNSIGNED_PATTERN.fullmatch(value):
        raise TransactionParseError(line_number, f"invalid {field} {value!r}")
    number = int(value)
    if number > maximum:
        raise TransactionParseError(line_number, f"{field} {number} out of range 0..{maximum}")
    return number


def _parse_amount(value: str, line_number: int) -> Decimal:
    if not AMOUNT_PATTERN.fullmatch(value):
        raise TransactionParseError(line_number, f"invalid amount {value!r}")
    amount = Decimal(value)
    if amount.adjusted() >= MAX_AMOUNT_INTEGER_DIGITS:
        raise TransactionParseError(line_number, f"amount {value} exceeds {MAX_AMOUNT_INTEGER_DIGITS} integer digits")
    return amount
