"""
tenant_routing.exceptions: Routing and configuration failures.

A request whose Host does not belong to the served domain family must never
be rewritten into some tenant's subtree, so the router raises instead of
guessing.
"""


class RoutingInvariantViolation(Exception):
    """
    Raised when the inbound Host is not the base domain or one of its subdomains.

    Only hosts matching the served domain and its wildcard should ever reach the
    router (wildcard DNS + CDN aliases). Seeing this exception means the edge
    was wired to a host it does not serve, or the Host header was malformed.

    Attributes:
        host:        The Host header value as received (None when absent).
        base_domain: The configured base domain the host was checked against.
        reason:      Short machine-friendly description of what failed.
    """

    def __init__(self, *, host: str | None, base_domain: str, reason: str) -> None:
        self.host = host
        self.base_domain = base_domain
        self.reason = reason
        super().__init__(
            f"Host {host!r} cannot be routed under base domain {base_domain!r}: {reason}"
        )


class RouterConfigError(RuntimeError):
    """Raised when the base domain is missing or invalid at load time."""
