"""Exception classes for partial order ranking analysis."""


class RankingError(Exception):
    """Base exception for ranking analysis errors."""

    pass


class MalformedRelationError(RankingError):
    """Raised when a relation matrix is not a well-formed partial order."""

    pass


class DegenerateInputError(RankingError):
    """Raised when an order has too few elements for the requested quantity."""

    def __init__(self, message: str, min_required: int | None = None) -> None:
        self.min_required = min_required
        super().__init__(message)


class IntractableInputError(RankingError):
    """Raised when a computation exceeds its size limit or its budget.

    Counting and rank intervals remain available as fallbacks.
    """

    def __init__(self, message: str, limit: int | float | None = None) -> None:
        self.limit = limit
        super().__init__(message)


class InsufficientSamplesError(RankingError):
    """Raised when too few samples are requested for an estimate."""

    def __init__(self, message: str, min_required: int | None = None) -> None:
        self.min_required = min_required
        super().__init__(message)
