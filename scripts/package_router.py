"""
package_router.py: Build and publish the tenant-router Lambda@Edge bundle.

Lambda@Edge supports neither environment variables nor layers, so the base
domain is baked into router_config.json and dependencies are vendored:

    bundle.zip
      handler.py              <- src/viewer_request/handler.py
      router_config.json      <- {"base_domain": "..."}
      tenant_routing/         <- src/tenant-routing-lib/src/tenant_routing/
      <deps-dir contents>     <- e.g. aws_lambda_powertools/

Dependencies are installed beforehand, for example:

    uv pip install aws-lambda-powertools --target=.build/router-deps

Usage:
    uv run python scripts/package_router.py --base-domain example.com
    uv run python scripts/package_router.py --base-domain example.com \\
        --deps-dir .build/router-deps \\
        --bucket platform-artifacts --function-name tenant-router

Lambda@Edge functions live in us-east-1 and CloudFront associations need a
numbered version, so publishing always creates a new version.
"""

from __future__ import annotations

import argparse
import io
import logging
import zipfile
from pathlib import Path
from typing import Any

import boto3
from tenant_routing.config import CONFIG_FILENAME, RouterConfig
from tenant_routing.exceptions import RouterConfigError

REPO_ROOT = Path(__file__).resolve().parents[1]

logger = logging.getLogger("package_router")
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)

HANDLER_SOURCE = REPO_ROOT / "src" / "viewer_request" / "handler.py"
LIBRARY_SOURCE = REPO_ROOT / "src" / "tenant-routing-lib" / "src" / "tenant_routing"
DEFAULT_OUTPUT = REPO_ROOT / ".build" / "tenant-router.zip"
DEFAULT_REGION = "us-east-1"

# Fixed mtime so identical inputs yield byte-identical bundles
_ZIP_DATE_TIME = (1980, 1, 1, 0, 0, 0)


def _write_entry(zf: zipfile.ZipFile, arcname: str, data: bytes) -> None:
    info = zipfile.ZipInfo(arcname, date_time=_ZIP_DATE_TIME)
    info.compress_type = zipfile.ZIP_DEFLATED
    info.external_attr = 0o644 << 16
    zf.writestr(info, data)


def _iter_tree(root: Path) -> list[Path]:
    return sorted(
        p for p in root.rglob("*") if p.is_file() and "__pycache__" not in p.parts
    )


def build_bundle(base_domain: str, output: Path, deps_dir: Path | None = None) -> Path:
    """Write the deployment zip to ``output`` and return its path.

    Raises RouterConfigError when ``base_domain`` is invalid; nothing is
    written in that case.
    """
    config = RouterConfig.create(base_domain)
    if deps_dir is not None and not deps_dir.is_dir():
        raise FileNotFoundError(f"Dependency directory not found: {deps_dir}")

    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        _write_entry(zf, "handler.py", HANDLER_SOURCE.read_bytes())
        _write_entry(zf, CONFIG_FILENAME, config.to_json().encode())
        for path in _iter_tree(LIBRARY_SOURCE):
            arcname = f"tenant_routing/{path.relative_to(LIBRARY_SOURCE).as_posix()}"
            _write_entry(zf, arcname, path.read_bytes())
        if deps_dir is not None:
            for path in _iter_tree(deps_dir):
                _write_entry(zf, path.relative_to(deps_dir).as_posix(), path.read_bytes())

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(buffer.getvalue())
    logger.info("Bundle written: %s (base_domain=%s)", output, config.base_domain)
    return output


def upload_artifact(s3_client: Any, *, bucket: str, key: str, data: bytes) -> str:
    """Store the bundle in the artifact bucket; returns the s3:// URI."""
    s3_client.put_object(Bucket=bucket, Key=key, Body=data)
    uri = f"s3://{bucket}/{key}"
    logger.info("Artifact uploaded: %s", uri)
    return uri


def publish_version(lambda_client: Any, *, function_name: str, data: bytes) -> str:
    """Update the function code and publish a numbered version.

    Returns the qualified version ARN that CloudFront associates with.
    """
    response = lambda_client.update_function_code(
        FunctionName=function_name,
        ZipFile=data,
        Publish=True,
    )
    version = response.get("Version")
    if not version or version == "$LATEST":
        raise RuntimeError(f"Lambda did not publish a numbered version for {function_name}")
    function_arn = str(response["FunctionArn"])
    if not function_arn.endswith(f":{version}"):
        function_arn = f"{function_arn}:{version}"
    logger.info("Published %s", function_arn)
    return function_arn


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Package the tenant-router Lambda@Edge bundle")
    parser.add_argument(
        "--base-domain", required=True, help="Root serving domain, e.g. example.com"
    )
    parser.add_argument("--output", type=Path, default=DEFAULT_OUTPUT)
    parser.add_argument("--deps-dir", type=Path, default=None)
    parser.add_argument("--bucket", default=None, help="Artifact bucket to upload the bundle to")
    parser.add_argument("--key", default="tenant-router/tenant-router.zip")
    parser.add_argument(
        "--function-name", default=None, help="Publish a new version of this function"
    )
    parser.add_argument("--region", default=DEFAULT_REGION)
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    try:
        bundle = build_bundle(args.base_domain, args.output, args.deps_dir)
    except (RouterConfigError, FileNotFoundError) as exc:
        logger.error("%s", exc)
        return 1

    data = bundle.read_bytes()
    if args.bucket:
        upload_artifact(
            boto3.client("s3", region_name=args.region),
            bucket=args.bucket,
            key=args.key,
            data=data,
        )
    if args.function_name:
        version_arn = publish_version(
            boto3.client("lambda", region_name=args.region),
            function_name=args.function_name,
            data=data,
        )
        print(version_arn)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
