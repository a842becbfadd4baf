"""Custom exceptions for the hook dispatcher."""


class HooksError(Exception):
    """Base exception for hook dispatcher errors."""


class InvalidNameError(HooksError, TypeError):
    """Raised when a hook name is not a string."""

    def __init__(self, name: object) -> None:
        super().__init__(f"Hook name must be a str, got {type(name).__name__}: {name!r}")
        self.name = name


class RedirectCycleError(HooksError):
    """Raised when a redirection chain loops back on itself.

    Only raised when the dispatcher runs with cycle detection enabled.
    """

    def __init__(self, name: str, chain: list[str]) -> None:
        super().__init__(f"Redirect cycle for {name!r}: {' -> '.join(chain)}")
        self.name = name
        self.chain = chain
