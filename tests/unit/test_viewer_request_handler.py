from __future__ import annotations

import copy
import json
import os
import sys
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[2]))

from src.viewer_request import handler as viewer_request_handler
from tenant_routing import RouterConfig, RouterConfigError, RoutingInvariantViolation
from tenant_routing.config import BASE_DOMAIN_ENV


class MockContext:
    def __init__(self):
        self.function_name = "us-east-1.tenant-router"
        self.memory_limit_in_mb = 128
        self.invoked_function_arn = "arn:aws:lambda:us-east-1:123456789012:function:tenant-router:7"
        self.aws_request_id = "request-id"


@pytest.fixture
def lambda_context():
    return MockContext()


@pytest.fixture(autouse=True)
def reset_config():
    viewer_request_handler._config = None
    with patch.dict(os.environ, {BASE_DOMAIN_ENV: "example.com"}):
        yield
    viewer_request_handler._config = None


def _event(host: str | None = "blog.example.com", uri: str = "/post/1") -> dict[str, Any]:
    headers: dict[str, Any] = {
        "user-agent": [{"key": "User-Agent", "value": "curl/8.0"}],
        "accept": [{"key": "Accept", "value": "text/html"}],
    }
    if host is not None:
        headers["host"] = [{"key": "Host", "value": host}]
    return {
        "Records": [
            {
                "cf": {
                    "config": {
                        "distributionDomainName": "d111111abcdef8.cloudfront.net",
                        "distributionId": "EDFDVBD6EXAMPLE",
                        "eventType": "viewer-request",
                        "requestId": "4TyzHTaYWb1GX1qTfsHhEqV6HUDd_BzoBZnwfnvQc_1oF26ClkoUSEQ==",
                    },
                    "request": {
                        "clientIp": "203.0.113.178",
                        "method": "GET",
                        "querystring": "page=2",
                        "uri": uri,
                        "headers": headers,
                    },
                }
            }
        ]
    }


def test_handler_rewrites_tenant_uri(lambda_context):
    result = viewer_request_handler.handler(_event(), lambda_context)
    assert result["uri"] == "/blog/post/1"


def test_handler_passes_other_fields_through(lambda_context):
    event = _event()
    original = copy.deepcopy(event["Records"][0]["cf"]["request"])

    result = viewer_request_handler.handler(event, lambda_context)

    assert {k: v for k, v in result.items() if k != "uri"} == {
        k: v for k, v in original.items() if k != "uri"
    }


@pytest.mark.parametrize(
    ("host", "uri", "expected"),
    [
        ("example.com", "/", "/"),
        ("example.com", "/x", "/x"),
        ("blog.example.com", "/", "/blog/"),
        ("a.b.example.com", "/x", "/a.b/x"),
        ("Blog.Example.com", "/index.html", "/blog/index.html"),
    ],
)
def test_handler_scenarios(lambda_context, host, uri, expected):
    result = viewer_request_handler.handler(_event(host=host, uri=uri), lambda_context)
    assert result["uri"] == expected


def test_handler_foreign_host_raises(lambda_context):
    with pytest.raises(RoutingInvariantViolation):
        viewer_request_handler.handler(_event(host="other.com"), lambda_context)


def test_handler_missing_host_raises(lambda_context):
    with pytest.raises(RoutingInvariantViolation) as exc_info:
        viewer_request_handler.handler(_event(host=None), lambda_context)
    assert exc_info.value.reason == "missing host"


def test_handler_logs_violation(lambda_context):
    with patch.object(viewer_request_handler.logger, "error") as mock_error:
        with pytest.raises(RoutingInvariantViolation):
            viewer_request_handler.handler(_event(host="evilexample.com"), lambda_context)

    mock_error.assert_called_once()
    kwargs = mock_error.call_args.kwargs
    assert kwargs["host"] == "evilexample.com"
    assert kwargs["base_domain"] == "example.com"
    assert kwargs["reason"] == "host is outside the base domain"


def test_handler_rejects_non_cloudfront_event(lambda_context):
    with pytest.raises(ValueError, match="CloudFront"):
        viewer_request_handler.handler({"headers": {}}, lambda_context)


def test_get_config_is_cached():
    first = viewer_request_handler.get_config()
    with patch.dict(os.environ, {BASE_DOMAIN_ENV: "other.org"}):
        assert viewer_request_handler.get_config() is first
    assert first == RouterConfig(base_domain="example.com")


def test_get_config_reads_baked_file(tmp_path):
    config_path = tmp_path / "router_config.json"
    config_path.write_text(json.dumps({"base_domain": "sites.example.net"}))

    with (
        patch.dict(os.environ, {BASE_DOMAIN_ENV: ""}),
        patch.object(viewer_request_handler, "CONFIG_PATH", config_path),
    ):
        assert viewer_request_handler.get_config().base_domain == "sites.example.net"


def test_handler_fails_without_config(lambda_context, tmp_path):
    with (
        patch.dict(os.environ, {BASE_DOMAIN_ENV: ""}),
        patch.object(viewer_request_handler, "CONFIG_PATH", tmp_path / "absent.json"),
    ):
        with pytest.raises(RouterConfigError):
            viewer_request_handler.handler(_event(), lambda_context)
