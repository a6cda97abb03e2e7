from __future__ import annotations

from dataclasses import dataclass
from typing import Any

FROZEN_REASON_CODES: frozenset[str] = frozenset(
    {
        "invalid_node",
        "malformed_edge",
        "unknown_edge_endpoint",
        "invalid_weights",
        "malformed_network_asset",
    }
)


@dataclass
class RoutingDataError(ValueError):
    reason_code: str
    message: str
    details: dict[str, Any] | None = None

    def __str__(self) -> str:
        return self.message

    def as_detail(self) -> dict[str, Any]:
        return {
            "reason_code": normalize_reason_code(self.reason_code),
            "message": self.message,
            "details": dict(self.details or {}),
        }


class InvalidNodeError(RoutingDataError):
    """Start or end identifier is not a node of the graph."""


class MalformedEdgeError(RoutingDataError):
    """Edge attributes that would silently break the non-negative cost assumption."""


def normalize_reason_code(reason_code: str, *, default: str = "malformed_edge") -> str:
    code = str(reason_code or "").strip()
    if code in FROZEN_REASON_CODES:
        return code
    return default


def invalid_node(node_id: object, *, role: str) -> InvalidNodeError:
    return InvalidNodeError(
        reason_code="invalid_node",
        message=f"unknown {role} node: {node_id!r}",
        details={"node_id": str(node_id), "role": role},
    )
