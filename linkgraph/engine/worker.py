"""
Background execution of engine requests.

EngineWorker runs ``dispatch`` on its own thread and talks to the outside
only through two queues: requests in, responses out. EngineClient sits on the
caller side, assigns correlation ids, and resolves one Future per request as
responses arrive (in any order).

Timeouts belong to the caller: the engine has none of its own.
"""

from __future__ import annotations

import logging
import queue
import threading
import uuid
from concurrent.futures import Future
from concurrent.futures import TimeoutError as FutureTimeout
from typing import Any, Sequence

from ..errors import EngineError, EngineTimeout
from ..graph.analysis import NetworkAnalysis
from ..graph.communities import CommunityResult
from ..graph.layout import LayoutSettings
from ..models import Edge, Node
from .dispatcher import dispatch
from .protocol import OperationType, Request, Response

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0

# Shutdown marker passed through both queues
_STOP = object()


class EngineWorker:
    """Dispatch requests from ``inbox`` on a daemon thread, posting to ``outbox``."""

    def __init__(
        self,
        inbox: queue.Queue | None = None,
        outbox: queue.Queue | None = None,
        *,
        name: str = "linkgraph-engine",
    ):
        self.inbox: queue.Queue = inbox if inbox is not None else queue.Queue()
        self.outbox: queue.Queue = outbox if outbox is not None else queue.Queue()
        self._thread = threading.Thread(target=self._run, name=name, daemon=True)

    @property
    def is_alive(self) -> bool:
        return self._thread.is_alive()

    def start(self) -> None:
        self._thread.start()

    def post(self, message: Request | dict[str, Any]) -> None:
        """Queue a request; its Response will appear on ``outbox``."""
        self.inbox.put(message)

    def stop(self, timeout: float | None = None) -> None:
        """Ask the worker to finish pending requests and exit."""
        self.inbox.put(_STOP)
        if self._thread.is_alive():
            self._thread.join(timeout)

    def _run(self) -> None:
        while True:
            message = self.inbox.get()
            if message is _STOP:
                self.outbox.put(_STOP)
                break
            self.outbox.put(dispatch(message))

    def __enter__(self) -> EngineWorker:
        self.start()
        return self

    def __exit__(self, *exc) -> None:
        self.stop()


class EngineClient:
    """Caller-side handle on an EngineWorker.

    Usage:
        with EngineClient() as client:
            nodes = client.calculate_layout(nodes, edges, settings)
    """

    def __init__(self, worker: EngineWorker | None = None, *, timeout: float = DEFAULT_TIMEOUT):
        self.worker = worker or EngineWorker()
        self.timeout = timeout
        self._pending: dict[str, Future] = {}
        self._lock = threading.Lock()
        self._receiver = threading.Thread(target=self._receive, name="linkgraph-client", daemon=True)
        self._started = False
        self._closed = False

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def start(self) -> None:
        if self._closed:
            raise EngineError("Engine client is closed")
        if self._started:
            return
        self._started = True
        if not self.worker.is_alive:
            self.worker.start()
        self._receiver.start()

    def close(self) -> None:
        """Stop the worker and cancel anything still waiting for a reply."""
        if not self._started or self._closed:
            return
        self.worker.stop()
        self._receiver.join()
        with self._lock:
            pending = list(self._pending.values())
            self._pending.clear()
        for future in pending:
            future.cancel()
        self._closed = True

    def __enter__(self) -> EngineClient:
        self.start()
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    @property
    def pending_count(self) -> int:
        with self._lock:
            return len(self._pending)

    # -------------------------------------------------------------------------
    # Messaging
    # -------------------------------------------------------------------------

    def submit(
        self,
        operation: OperationType | str,
        payload: Any,
        *,
        correlation_id: str | None = None,
    ) -> tuple[str, Future]:
        """Post a request and return (correlation_id, future resolving to its Response)."""
        if self._closed:
            raise EngineError("Engine client is closed")
        if not self._started:
            raise EngineError("Engine client is not started")

        correlation_id = correlation_id or uuid.uuid4().hex
        future: Future = Future()
        with self._lock:
            if correlation_id in self._pending:
                raise EngineError(f"Correlation id already in flight: {correlation_id}")
            self._pending[correlation_id] = future

        op = operation.value if isinstance(operation, OperationType) else operation
        self.worker.post({"type": op, "payload": payload, "id": correlation_id})
        return correlation_id, future

    def call(self, operation: OperationType | str, payload: Any, *, timeout: float | None = None) -> dict[str, Any]:
        """Send a request and wait for its payload.

        Raises:
            EngineTimeout: no response within ``timeout`` seconds
            EngineError: the engine answered with an error response
        """
        correlation_id, future = self.submit(operation, payload)
        wait = self.timeout if timeout is None else timeout
        try:
            response: Response = future.result(timeout=wait)
        except FutureTimeout:
            with self._lock:
                self._pending.pop(correlation_id, None)
            raise EngineTimeout(f"No response for {correlation_id} within {wait}s") from None

        if response.is_error:
            raise EngineError(response.error or "Unknown engine error")
        return response.payload

    def _receive(self) -> None:
        while True:
            response = self.worker.outbox.get()
            if response is _STOP:
                break
            with self._lock:
                future = self._pending.pop(response.id, None)
            if future is None:
                logger.debug("Dropping response for unknown or expired id %s", response.id)
                continue
            if future.set_running_or_notify_cancel():
                future.set_result(response)

    # -------------------------------------------------------------------------
    # Typed operations
    # -------------------------------------------------------------------------

    def calculate_layout(
        self,
        nodes: Sequence[Node],
        edges: Sequence[Edge],
        settings: LayoutSettings,
        *,
        timeout: float | None = None,
    ) -> list[Node]:
        payload = {
            "nodes": [n.to_dict() for n in nodes],
            "edges": [e.to_dict() for e in edges],
            "settings": settings.to_dict(),
        }
        result = self.call(OperationType.CALCULATE_LAYOUT, payload, timeout=timeout)
        return [Node.from_dict(n) for n in result["nodes"]]

    def analyze_network(
        self, nodes: Sequence[Node], edges: Sequence[Edge], *, timeout: float | None = None
    ) -> NetworkAnalysis:
        result = self.call(OperationType.ANALYZE_NETWORK, _graph_payload(nodes, edges), timeout=timeout)
        return NetworkAnalysis.from_dict(result)

    def find_communities(
        self, nodes: Sequence[Node], edges: Sequence[Edge], *, timeout: float | None = None
    ) -> CommunityResult:
        result = self.call(OperationType.FIND_COMMUNITIES, _graph_payload(nodes, edges), timeout=timeout)
        return CommunityResult.from_dict(result)

    def calculate_centrality(
        self, nodes: Sequence[Node], edges: Sequence[Edge], *, timeout: float | None = None
    ) -> dict[str, float]:
        result = self.call(OperationType.CALCULATE_CENTRALITY, _graph_payload(nodes, edges), timeout=timeout)
        return dict(result["centrality"])


def _graph_payload(nodes: Sequence[Node], edges: Sequence[Edge]) -> dict[str, Any]:
    return {"nodes": [n.to_dict() for n in nodes], "edges": [e.to_dict() for e in edges]}
