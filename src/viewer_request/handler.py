"""
viewer_request.handler: Lambda@Edge viewer-request tenant router.

Runs on every viewer request before CloudFront forwards it to the shared S3
origin. Rewrites the request URI to the tenant's prefix derived from the
Host header; every other request field passes through untouched.

A host outside the served domain family raises RoutingInvariantViolation.
The error is logged and re-raised so CloudFront fails the request instead
of serving another tenant's content.

Lambda@Edge has no environment variables, layers or X-Ray: the base domain
is read from router_config.json baked next to this file at package time and
powertools is vendored into the bundle (see scripts/package_router.py).
"""

from pathlib import Path
from typing import Any

from aws_lambda_powertools import Logger
from aws_lambda_powertools.utilities.typing import LambdaContext
from tenant_routing import (
    IncomingRequest,
    RouterConfig,
    RoutingInvariantViolation,
    load_config,
    route,
)
from tenant_routing.config import CONFIG_FILENAME

logger = Logger(service="tenant-router")

CONFIG_PATH = Path(__file__).with_name(CONFIG_FILENAME)

# Resolved once per container; read-only afterwards
_config: RouterConfig | None = None


def get_config() -> RouterConfig:
    """Lazy initialization of the router config."""
    global _config
    if _config is None:
        _config = load_config(CONFIG_PATH)
        logger.info("Router config loaded", base_domain=_config.base_domain)
    return _config


def _cloudfront_request(event: dict[str, Any]) -> dict[str, Any]:
    try:
        return event["Records"][0]["cf"]["request"]
    except (KeyError, IndexError, TypeError) as exc:
        raise ValueError("Event is not a CloudFront viewer-request event") from exc


@logger.inject_lambda_context(correlation_id_path="Records[0].cf.config.requestId")
def handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    """Lambda@Edge entry point."""
    config = get_config()
    request = IncomingRequest.from_cloudfront(_cloudfront_request(event))

    try:
        rewritten = route(request, config.base_domain)
    except RoutingInvariantViolation as exc:
        logger.error(
            "Refusing to route request",
            host=exc.host,
            base_domain=exc.base_domain,
            reason=exc.reason,
            uri=request.uri,
        )
        raise

    logger.info(
        "Request routed",
        tenant_id=rewritten.tenant_id or "(apex)",
        origin_path=rewritten.uri,
    )
    return rewritten.to_cloudfront()
