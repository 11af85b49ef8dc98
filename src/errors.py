class PaymentsEngineError(Exception):
    """Base class for errors that abort a run."""


class InputFileError(PaymentsEngineError):
    def __init__(self, filepath: str, reason: str):
        self.filepath = filepath
        self.reason = reason
        super().__init__(f"Cannot read input file {filepath}: {reason}")


class TransactionParseError(PaymentsEngineError):
    """Raised for a CSV record that cannot be turned into a Transaction."""

    def __init__(self, line_number: int, message: str):
        self.line_number = line_number
        self.message = message
        super().__init__(f"Line {line_number}: {message}")
