"""
tenant_routing.config: Deployment-time router configuration.

The router recognises exactly one option, the base domain whose wildcard
subdomains are routed. Resolution order:

  1. TENANT_ROUTER_BASE_DOMAIN environment variable (local dev, tests)
  2. JSON file {"base_domain": "..."} baked next to the handler by
     scripts/package_router.py (Lambda@Edge does not support env vars)

Nothing is resolved per request.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path

from tenant_routing.exceptions import RouterConfigError
from tenant_routing.routing import canonical_domain, is_valid_dns_name

BASE_DOMAIN_ENV = "TENANT_ROUTER_BASE_DOMAIN"
CONFIG_FILENAME = "router_config.json"


@dataclass(frozen=True)
class RouterConfig:
    base_domain: str

    @classmethod
    def create(cls, raw: str) -> RouterConfig:
        """Canonicalise and validate a base domain value."""
        if not isinstance(raw, str):
            raise RouterConfigError(f"base_domain must be a string, got {type(raw).__name__}")
        if any(ch in raw for ch in ("/", ":", "?", "#", "@")):
            raise RouterConfigError(f"base_domain must be a bare DNS name, got {raw!r}")
        domain = canonical_domain(raw)
        if not is_valid_dns_name(domain):
            raise RouterConfigError(f"base_domain is not a valid DNS name: {raw!r}")
        return cls(base_domain=domain)

    def to_json(self) -> str:
        return json.dumps({"base_domain": self.base_domain}, indent=2) + "\n"


def load_config(path: Path | None = None) -> RouterConfig:
    """Resolve the router config from the environment or the baked JSON file."""
    from_env = os.environ.get(BASE_DOMAIN_ENV, "").strip()
    if from_env:
        return RouterConfig.create(from_env)

    if path is None or not path.exists():
        raise RouterConfigError(
            f"{BASE_DOMAIN_ENV} not set and no {CONFIG_FILENAME} found at {path}"
        )

    try:
        data = json.loads(path.read_text())
    except json.JSONDecodeError as exc:
        raise RouterConfigError(f"Malformed router config at {path}") from exc
    if not isinstance(data, dict) or "base_domain" not in data:
        raise RouterConfigError(f"Router config at {path} must be an object with base_domain")
    return RouterConfig.create(data["base_domain"])
