"""Ledger Domain Exceptions"""


class LedgerError(Exception):
    """Base class for ledger errors"""
    code = "LEDGER_ERROR"


class LedgerApiError(LedgerError):
    """The remote ledger API failed or returned an unusable response"""
    code = "LEDGER_API_ERROR"

    def __init__(self, message: str, action: str = None):
        super().__init__(message)
        self.action = action


class BillValidationError(LedgerError):
    """A bill draft cannot be saved as entered"""
    code = "BILL_INVALID"

