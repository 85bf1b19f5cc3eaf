"""Exceptions raised by mock-extended."""


class MockExtendedError(Exception):
    """Base for all mock-extended errors."""


class UnsupportedMatcherError(MockExtendedError, TypeError):
    """A matcher from another library was passed to ``called_with()``."""

    def __init__(self, message: str, matcher: object = None):
        super().__init__(message)
        self.matcher = matcher


class LifecycleRestrictionError(MockExtendedError, RuntimeError):
    """A clear/reset operation was attempted on a deep mock node."""

    def __init__(self, message: str, operation: str = "reset"):
        super().__init__(message)
        self.operation = operation
