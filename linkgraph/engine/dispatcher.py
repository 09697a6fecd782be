"""
Stateless request dispatcher for the graph engine.

Handlers register themselves by operation type. ``dispatch`` looks up the
handler, runs it on a freshly decoded copy of the payload, and wraps the
result in a Response carrying the request's correlation id.

Key invariants:
- Every request yields exactly one Response; nothing is raised to the caller
- Error responses echo the correlation id of the failing request
- Handlers never see the caller's objects, only decoded copies
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from ..errors import EngineError, InvalidPayload, UnknownOperation
from ..graph.analysis import analyze_network
from ..graph.builder import calculate_centrality
from ..graph.communities import detect_communities
from ..graph.layout import LayoutSettings, calculate_layout
from .protocol import (
    RESULT_FOR_OPERATION,
    OperationType,
    Request,
    Response,
    correlation_id_of,
    decode_graph,
    parse_operation,
)

logger = logging.getLogger(__name__)

Handler = Callable[[Any], dict[str, Any]]

# Global registry: operation type -> handler
_HANDLERS: dict[OperationType, Handler] = {}


def register_handler(operation: OperationType) -> Callable[[Handler], Handler]:
    """Register a handler function for an operation type."""

    def decorator(func: Handler) -> Handler:
        _HANDLERS[operation] = func
        return func

    return decorator


def get_handler(operation: OperationType) -> Handler | None:
    return _HANDLERS.get(operation)


def list_handlers() -> list[str]:
    return [op.value for op in _HANDLERS]


@register_handler(OperationType.CALCULATE_LAYOUT)
def _handle_layout(payload: Any) -> dict[str, Any]:
    nodes, edges = decode_graph(payload)
    if "settings" not in payload or payload["settings"] is None:
        raise InvalidPayload("layout request is missing 'settings'")
    settings = LayoutSettings.from_dict(payload["settings"])
    positioned = calculate_layout(nodes, edges, settings)
    return {"nodes": [n.to_dict() for n in positioned]}


@register_handler(OperationType.ANALYZE_NETWORK)
def _handle_analyze(payload: Any) -> dict[str, Any]:
    nodes, edges = decode_graph(payload)
    return analyze_network(nodes, edges).to_dict()


@register_handler(OperationType.FIND_COMMUNITIES)
def _handle_communities(payload: Any) -> dict[str, Any]:
    nodes, edges = decode_graph(payload)
    return detect_communities(nodes, edges).to_dict()


@register_handler(OperationType.CALCULATE_CENTRALITY)
def _handle_centrality(payload: Any) -> dict[str, Any]:
    nodes, edges = decode_graph(payload)
    centrality = calculate_centrality(nodes, edges)
    return {"centrality": {node_id: round(value, 3) for node_id, value in centrality.items()}}


def dispatch(message: Request | dict[str, Any]) -> Response:
    """Handle one request and return its response. Never raises."""
    correlation_id = correlation_id_of(message)

    try:
        request = message if isinstance(message, Request) else Request.from_dict(message)
        operation = parse_operation(request.type)
        handler = get_handler(operation) if operation is not None else None
        if handler is None:
            raise UnknownOperation(request.type)

        payload = handler(request.payload)
        return Response(type=RESULT_FOR_OPERATION[operation], payload=payload, id=correlation_id)
    except EngineError as e:
        logger.warning("Request %s rejected: %s", correlation_id, e.message)
        return Response.failure(correlation_id, e.message)
    except Exception as e:
        logger.exception("Request %s failed", correlation_id)
        return Response.failure(correlation_id, f"Internal engine error: {e}")
