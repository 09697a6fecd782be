"""Exception types raised by the graph engine and its callers."""


class EngineError(Exception):
    """Base class for errors reported across the engine boundary."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidPayload(EngineError):
    """Request payload does not match the shape its operation expects."""


class UnknownOperation(EngineError):
    """Request names an operation type the engine does not handle."""

    def __init__(self, operation: object):
        super().__init__(f"Unknown operation type: {operation}")
        self.operation = operation


class EngineTimeout(EngineError):
    """No response arrived for a request within the caller's timeout."""


class ConfigError(Exception):
    """Configuration file is unreadable or malformed."""
