"""
tenant_routing: Host-based tenant routing for a shared static-site origin.

Maps {tenant}.{base_domain} requests onto /{tenant}/... paths in one shared
bucket. Used by the viewer_request Lambda@Edge function and the deployment
scripts.
"""

from tenant_routing.config import RouterConfig, load_config
from tenant_routing.exceptions import RouterConfigError, RoutingInvariantViolation
from tenant_routing.models import IncomingRequest, RewrittenRequest
from tenant_routing.routing import compose_path, extract_tenant_id, normalize_path, route

__all__ = [
    "IncomingRequest",
    "RewrittenRequest",
    "RouterConfig",
    "RouterConfigError",
    "RoutingInvariantViolation",
    "compose_path",
    "extract_tenant_id",
    "load_config",
    "normalize_path",
    "route",
]
