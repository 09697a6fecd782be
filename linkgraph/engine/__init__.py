"""Graph engine: request protocol, dispatcher and background worker."""

from .dispatcher import dispatch, list_handlers
from .protocol import OperationType, Request, Response, ResultType
from .worker import EngineClient, EngineWorker

__all__ = [
    "dispatch",
    "list_handlers",
    "OperationType",
    "Request",
    "Response",
    "ResultType",
    "EngineClient",
    "EngineWorker",
]
