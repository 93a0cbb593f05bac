"""Error kinds raised by the credit engine core.

Every error is local and synchronous. It aborts the operation before any
state is written and is surfaced to the caller verbatim.
"""


class CreditEngineError(Exception):
    """Base class for all core failures."""

    code = "credit-engine-error"
    status_code = 400

    def __init__(self, detail: str = ""):
        self.detail = detail or self.code
        super().__init__(self.detail)


class Unauthorized(CreditEngineError):
    """Caller is not the operator for an operator-only operation."""

    code = "unauthorized"
    status_code = 403


class Paused(CreditEngineError):
    """System is paused and the caller is not the operator."""

    code = "paused"
    status_code = 503


class UnknownBorrower(CreditEngineError):
    """No profile exists for the given account."""

    code = "unknown-borrower"
    status_code = 404


class LoanAlreadyActive(CreditEngineError):
    """Borrower already has an outstanding loan."""

    code = "loan-already-active"
    status_code = 409


class LoanNotFound(CreditEngineError):
    """Referenced loan has no backing record."""

    code = "loan-not-found"
    status_code = 404


class LoanNotDefaulted(CreditEngineError):
    """Liquidation attempted before the due height has passed."""

    code = "loan-not-defaulted"
    status_code = 409


class LoanNotActive(CreditEngineError):
    """Status transition attempted on a loan that is already terminal."""

    code = "loan-not-active"
    status_code = 409


class ArithmeticOverflow(CreditEngineError):
    """An unsigned addition would exceed the storable range."""

    code = "arithmetic-overflow"
    status_code = 422
