"""Reconciliation error taxonomy."""


class ReconciliationError(Exception):
    """Base exception for reconciliation failures."""

    status_code = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class InvalidInput(ReconciliationError):
    """Malformed or missing input batch."""

    status_code = 400


class EmptyBatch(InvalidInput):
    """No valid transactions left after filtering."""

    pass


class MatchingFailure(ReconciliationError):
    """Unexpected error inside the scoring loop."""

    pass


class GenerationFailure(ReconciliationError):
    """Unexpected error while building output rows."""

    pass
