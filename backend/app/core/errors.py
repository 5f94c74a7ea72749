from typing import Optional


class DomainError(ValueError):
    """Invalid list query in a domain sense (bad paging values, unusable filters, etc.)."""


class MalformedFilterInput(DomainError):
    """A filter/order entry is missing a key or has the wrong shape."""

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path or "searchParams"
        self.message = message
        super().__init__(f"{self.path}: {message}")


class TypeCoercionAmbiguous(DomainError):
    """Raised by strict boolean coercion for values with no obvious truth value."""
