"""
tenant_routing.routing: Host-based path-prefix routing.

Maps a viewer request onto the tenant's subtree of the shared origin:

    blog.example.com  /post/1   ->  /blog/post/1
    a.b.example.com   /x        ->  /a.b/x
    example.com       /x        ->  /x            (apex: storage root)
    other.com         /x        ->  RoutingInvariantViolation

Security guarantees:
  - The base domain is stripped by explicit suffix comparison on a label
    boundary; ``evilexample.com`` never matches ``example.com``.
  - Tenant labels are restricted to DNS label characters, so a Host header
    cannot smuggle ``/``, ``..`` or escapes into the origin path.
  - A host outside the domain family raises; it is never passed through.

Normalization is syntactic only: separators are collapsed, nothing else.
"""

from __future__ import annotations

import re

from aws_lambda_powertools import Logger

from tenant_routing.exceptions import RoutingInvariantViolation
from tenant_routing.models import IncomingRequest, RewrittenRequest

logger = Logger(service="tenant-routing-lib")

_SEPARATOR = "/"
_SEPARATOR_RUN = re.compile(r"/{2,}")
_LABEL = re.compile(r"[a-z0-9_](?:[a-z0-9_-]{0,61}[a-z0-9_])?")


# ---------------------------------------------------------------------------
# Host canonicalization
# ---------------------------------------------------------------------------


def canonical_domain(name: str) -> str:
    """Lower-case a DNS name and drop surrounding dots (incl. the root dot)."""
    return name.strip().strip(".").lower()


def canonical_host(host: str) -> str:
    """Strip an optional ``:port`` and trailing root dot, then lower-case."""
    host = host.strip()
    name, sep, port = host.rpartition(":")
    if sep and port.isascii() and port.isdigit():
        host = name
    if host.endswith("."):
        host = host[:-1]
    return host.lower()


def is_valid_dns_name(name: str) -> bool:
    return bool(name) and all(_LABEL.fullmatch(label) for label in name.split("."))


# ---------------------------------------------------------------------------
# Tenant extraction
# ---------------------------------------------------------------------------


def extract_tenant_id(host: str | None, base_domain: str) -> str:
    """Return the tenant identifier for ``host``; empty for the apex domain.

    Raises RoutingInvariantViolation when the host is missing, outside the
    base domain family, or carries a malformed label.
    """
    domain = canonical_domain(base_domain)
    if not host or not host.strip():
        raise RoutingInvariantViolation(host=host, base_domain=domain, reason="missing host")

    name = canonical_host(host)
    if name == domain:
        return ""

    suffix = "." + domain
    if not name.endswith(suffix):
        raise RoutingInvariantViolation(
            host=host, base_domain=domain, reason="host is outside the base domain"
        )

    tenant_id = name[: -len(suffix)]
    if not is_valid_dns_name(tenant_id):
        raise RoutingInvariantViolation(
            host=host, base_domain=domain, reason="malformed tenant label"
        )
    return tenant_id


# ---------------------------------------------------------------------------
# Path composition and normalization
# ---------------------------------------------------------------------------


def normalize_path(path: str) -> str:
    """Collapse runs of ``/`` to one and guarantee a leading ``/``.

    Does not resolve dot segments or decode percent-escapes. Idempotent.
    """
    return _SEPARATOR_RUN.sub(_SEPARATOR, _SEPARATOR + path)


def compose_path(tenant_id: str, uri: str) -> str:
    """Prefix ``uri`` with the tenant segment; the query part is left verbatim."""
    path, sep, query = uri.partition("?")
    composed = normalize_path(_SEPARATOR + tenant_id + _SEPARATOR + path)
    return composed + sep + query


# ---------------------------------------------------------------------------
# Router
# ---------------------------------------------------------------------------


def route(request: IncomingRequest, base_domain: str) -> RewrittenRequest:
    """Rewrite ``request.uri`` into the tenant's origin path.

    Pure apart from debug logging; the same input always yields the same
    output and nothing but ``uri`` changes.
    """
    tenant_id = extract_tenant_id(request.host, base_domain)
    origin_path = compose_path(tenant_id, request.uri)
    logger.debug(
        "Routed request",
        tenant_id=tenant_id or "(apex)",
        uri=request.uri,
        origin_path=origin_path,
    )
    return RewrittenRequest(
        host=request.host,
        uri=origin_path,
        payload=request.payload,
        tenant_id=tenant_id,
    )
