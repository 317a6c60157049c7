"""Bucketforge CLI: run convergence passes from the command line.

Usage examples::

    bucketforge -i '{"type":"GCP","gcp":{"projectID":"p","region":"us-central1"}}' \\
        --status-file status.json converge
    bucketforge -i @infrastructure.json --status-file status.json exists my-bucket
    bucketforge --status-file status.json status
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, NoReturn

from pydantic import ValidationError


def _build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the ``bucketforge`` CLI.

    Returns:
        Configured :class:`~argparse.ArgumentParser`.
    """
    parser = argparse.ArgumentParser(
        prog="bucketforge",
        description="Converge a managed backup bucket",
    )
    parser.add_argument(
        "--infrastructure", "-i",
        help="Platform descriptor as a JSON string, or @path to a JSON file "
        "(required by converge and exists)",
    )
    parser.add_argument(
        "--status-file", "-f",
        required=True,
        help="JSON file holding the bucket status",
    )
    parser.add_argument(
        "--config", "-c",
        type=str,
        default="{}",
        help='JSON provider config string (e.g. \'{"region_name":"us-east-1"}\')',
    )
    parser.add_argument(
        "--owner",
        default="bucketforge",
        help="Name of the resource owning the bucket",
    )
    parser.add_argument("--prefix", help="Bucket name prefix")
    parser.add_argument("--timeout", type=float, help="Provider call timeout in seconds")

    sub = parser.add_subparsers(dest="command", required=True)
    converge = sub.add_parser("converge", help="Run passes until the bucket is converged")
    converge.add_argument("--max-passes", type=int, default=5)
    converge.add_argument("--max-attempts", type=int, default=3)
    exists = sub.add_parser("exists", help="Check whether a bucket exists")
    exists.add_argument("name")
    sub.add_parser("status", help="Print the stored bucket status")
    return parser


def _load_json(value: str) -> Any:
    if value.startswith("@"):
        return json.loads(Path(value[1:]).read_text())
    return json.loads(value)


def _fail(message: str) -> NoReturn:
    print(message, file=sys.stderr)
    sys.exit(1)


def main(argv: list[str] | None = None) -> None:
    """CLI entry point.

    Parses arguments, selects the platform's storage driver and runs the
    requested command.  Statuses are printed as JSON.

    Args:
        argv: Optional argument list (defaults to ``sys.argv``).
    """
    parser = _build_parser()
    ns = parser.parse_args(argv)

    try:
        config: dict[str, Any] = json.loads(ns.config)
    except json.JSONDecodeError as e:
        _fail(f"Invalid --config JSON: {e}")

    # Lazy-import to avoid loading all SDKs unconditionally
    from bucketforge.base.config import ConvergenceSettings
    from bucketforge.base.exceptions import BucketforgeError
    from bucketforge.base.logger import bf_logger
    from bucketforge.base.retry import run_until_converged
    from bucketforge.base.status import JsonFileStatusWriter, StorageRequest
    from bucketforge.factory import select_driver

    writer = JsonFileStatusWriter(ns.status_file)
    try:
        status = writer.load()
    except BucketforgeError as e:
        _fail(f"Error: {e}")

    if ns.command == "status":
        print(status.model_dump_json(by_alias=True, indent=2))
        return

    if ns.infrastructure is None:
        _fail(f"--infrastructure is required for {ns.command}")
    try:
        infrastructure = _load_json(ns.infrastructure)
    except (OSError, json.JSONDecodeError) as e:
        _fail(f"Invalid --infrastructure: {e}")

    overrides = {"bucket_prefix": ns.prefix, "call_timeout": ns.timeout}
    try:
        settings = ConvergenceSettings(**{k: v for k, v in overrides.items() if v is not None})
        driver = select_driver(infrastructure, writer, config, settings)
    except (ValueError, ValidationError) as e:
        _fail(f"Error: {e}")

    try:
        if ns.command == "exists":
            print(json.dumps(driver.storage_exists(ns.name)))
            return
        request = StorageRequest(name=ns.owner, status=status)
        run_until_converged(
            driver,
            request,
            bf_logger,
            max_passes=ns.max_passes,
            max_attempts=ns.max_attempts,
        )
    except (BucketforgeError, ValueError) as e:
        _fail(f"Operation failed: {e}")

    print(request.status.model_dump_json(by_alias=True, indent=2))


if __name__ == "__main__":
    main()
