#!/usr/bin/env python3
"""
Query New Relic for an application's requests per minute.

Runs the same lookups the external metrics service performs, outside the
cluster. Useful for checking an appName before wiring it into an HPA and for
comparing the application aggregate with the per-host average.
"""

import argparse
import asyncio
import json
import os
import sys
from typing import Optional

from shared.config import DEFAULT_NEWRELIC_API_URL
from shared.logging import configure_logging
from service_external_metrics.app.newrelic import HttpxFetchClient, NewRelicClient


async def query(
    *,
    api_key: str,
    app_name: str,
    across_hosts: bool,
    min_rpm: int,
    api_url: str,
    timeout: Optional[float],
) -> dict:
    """Run the lookup and return a summary."""
    client = NewRelicClient(
        api_key=api_key,
        min_rpm_for_consideration=min_rpm,
        fetch_client=HttpxFetchClient(timeout=timeout),
        base_uri=api_url,
    )

    if across_hosts:
        rpm = await client.get_rpm_average_across_hosts(app_name)
    else:
        rpm = await client.get_application_rpm(app_name)

    return {
        "app": app_name,
        "mode": "host_average" if across_hosts else "application",
        "min_rpm": min_rpm if across_hosts else None,
        "rpm": rpm,
    }


def _env_min_rpm() -> int:
    try:
        return int(os.getenv("MIN_RPM") or 0)
    except ValueError:
        return 0


def _parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Query New Relic for an application's RPM.")
    parser.add_argument("--app", required=True, help="New Relic application name")
    parser.add_argument("--across-hosts", action="store_true", help="Average calls_per_minute across hosts instead of the application aggregate")
    parser.add_argument("--min-rpm", type=int, default=_env_min_rpm(), help="Minimum host RPM to include in the average")
    parser.add_argument("--api-key", default=os.getenv("NEWRELIC_API_KEY"), help="New Relic API key (defaults to NEWRELIC_API_KEY)")
    parser.add_argument("--api-url", default=os.getenv("NEWRELIC_API_URL", DEFAULT_NEWRELIC_API_URL), help="New Relic API base URL")
    parser.add_argument("--timeout", type=float, default=None, help="Request timeout in seconds")
    parser.add_argument("--log-level", default="warning", help="Log level for diagnostics written to stderr")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = _parse_args(argv)
    configure_logging("query-rpm", args.log_level, stream=sys.stderr)

    if not args.api_key:
        print("[query-rpm] NEWRELIC_API_KEY env var or --api-key must be set", file=sys.stderr)
        return 2

    try:
        summary = asyncio.run(
            query(
                api_key=args.api_key,
                app_name=args.app,
                across_hosts=args.across_hosts,
                min_rpm=args.min_rpm,
                api_url=args.api_url,
                timeout=args.timeout,
            )
        )
    except KeyboardInterrupt:
        return 130
    except Exception as exc:
        print(f"[query-rpm] failed: {exc}", file=sys.stderr)
        return 1

    print(json.dumps(summary, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
