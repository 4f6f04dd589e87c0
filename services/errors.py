"""
Error taxonomy shared by services and routes.

Each error carries the HTTP status the API answers with; routes turn
them into {"error": message} responses.
"""


class BudgetError(Exception):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidAllocationError(BudgetError):
    """Percentages do not add up to 100 within tolerance."""


class NotAuthenticatedError(BudgetError):
    status_code = 401


class PermissionDeniedError(BudgetError):
    status_code = 403


class NotFoundError(BudgetError):
    status_code = 404


class ConflictError(BudgetError):
    status_code = 409


class CommitInProgressError(BudgetError):
    """A save is already outstanding for this editing session."""

    status_code = 409
