"""
tenant_routing.models: Request value types for a single edge invocation.

Both types live for one viewer request only. Nothing here is persisted or
shared across invocations.

CloudFront viewer-request record shape (the fields the router touches):

    {
        "uri": "/post/1",
        "querystring": "page=2",
        "method": "GET",
        "headers": {"host": [{"key": "Host", "value": "blog.example.com"}], ...},
        ...
    }
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

# CloudFront lower-cases header names in the headers map
HOST_HEADER = "host"


@dataclass(frozen=True)
class IncomingRequest:
    """Viewer request as delivered by the edge runtime.

    Only ``host`` and ``uri`` take part in routing. ``payload`` carries the raw
    runtime record so the rewritten request can be handed back intact.
    """

    host: str | None
    uri: str
    payload: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_cloudfront(cls, record: Mapping[str, Any]) -> IncomingRequest:
        headers = record.get("headers") or {}
        values = headers.get(HOST_HEADER) or []
        host = values[0].get("value") if values else None
        return cls(host=host, uri=str(record.get("uri") or ""), payload=record)


@dataclass(frozen=True)
class RewrittenRequest(IncomingRequest):
    """The incoming request with ``uri`` replaced by the tenant origin path."""

    tenant_id: str = ""

    @property
    def is_apex(self) -> bool:
        return not self.tenant_id

    def to_cloudfront(self) -> dict[str, Any]:
        """Return a copy of the raw record with only ``uri`` replaced."""
        record = copy.deepcopy(dict(self.payload))
        record["uri"] = self.uri
        return record
