"""
route_preview.py: Show which origin path a host/URI pair is routed to.

Runs the same router as the Lambda@Edge function, locally, without a deploy.

Usage:
    uv run python scripts/route_preview.py --base-domain example.com \\
        blog.example.com /post/1 /

    blog.example.com /post/1 -> /blog/post/1
    blog.example.com / -> /blog/

The base domain falls back to TENANT_ROUTER_BASE_DOMAIN. Exit code 2 when
the host cannot be routed or the base domain is invalid.
"""

from __future__ import annotations

import argparse
import os
import sys

from tenant_routing import (
    IncomingRequest,
    RouterConfig,
    RouterConfigError,
    RoutingInvariantViolation,
    route,
)
from tenant_routing.config import BASE_DOMAIN_ENV


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Preview tenant routing for a host")
    parser.add_argument("--base-domain", default=os.environ.get(BASE_DOMAIN_ENV))
    parser.add_argument("host")
    parser.add_argument("uris", nargs="*", default=["/"])
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    if not args.base_domain:
        print(f"--base-domain or {BASE_DOMAIN_ENV} is required", file=sys.stderr)
        return 2

    try:
        config = RouterConfig.create(args.base_domain)
        for uri in args.uris:
            rewritten = route(IncomingRequest(host=args.host, uri=uri), config.base_domain)
            print(f"{args.host} {uri} -> {rewritten.uri}")
    except (RouterConfigError, RoutingInvariantViolation) as exc:
        print(str(exc), file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
