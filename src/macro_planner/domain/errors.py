"""Error taxonomy for budget, suggestion and swap operations."""


class MacroPlannerError(Exception):
    """Base class for domain errors."""


class MacroValidationError(MacroPlannerError):
    """User input is malformed (unknown slot/category, bad amount)."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field
        self.message = message


class InsufficientBudgetError(MacroPlannerError):
    """A swap source or a suggestion budget cannot cover the request."""

    def __init__(self, shortfall: dict[str, float], message: str) -> None:
        super().__init__(message)
        self.shortfall = shortfall
        self.message = message


class UpstreamAIError(MacroPlannerError):
    """The AI backend timed out, failed, or returned unusable output."""


class ConsistencyError(MacroPlannerError):
    """An invariant check failed; indicates a bug, never user error."""


class ConcurrencyConflict(MacroPlannerError):
    """A concurrent writer kept winning the plan version race."""

    def __init__(self, attempts: int) -> None:
        super().__init__(f"Concurrent update conflict after {attempts} attempts")
        self.attempts = attempts
