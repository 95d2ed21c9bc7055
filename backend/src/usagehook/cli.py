#!/usr/bin/env python3
"""
Command line entry point for usage hook debugging and batch runs.

Usage:
    # Run the light/medium/heavy debug cases
    usagehook suite

    # Send a single request
    usagehook single test_user medium

    # Print a generated event without sending it
    usagehook generate heavy

    # Send RUNS requests DELAY seconds apart (env RUNS / DELAY)
    usagehook batch --runs 10 --delay 1

    # Run a local sink and target it
    usagehook sink --port 9090
    usagehook --endpoint http://127.0.0.1:9090/api/usage/hook suite
"""
import argparse
import asyncio
import json
import sys

import structlog

from usagehook.config import settings
from usagehook.logging import setup_logging
from usagehook.runner import RunSummary, UsageRunner
from usagehook.services.dispatcher import UsageHookClient
from usagehook.services.generator import Scale, UsageEventGenerator

logger = structlog.get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="usagehook", description="Usage hook debugging tool")
    parser.add_argument("--endpoint", default=None, help="Usage hook URL (default: settings.usage_hook_url)")
    parser.add_argument("--log-level", default=None, help="Log level (default: settings.log_level)")

    sub = parser.add_subparsers(dest="command")

    suite = sub.add_parser("suite", help="Run the light/medium/heavy debug cases")
    suite.add_argument("--delay", type=float, default=None, help="Seconds to wait after each case")

    single = sub.add_parser("single", help="Send a single request")
    single.add_argument("username")
    single.add_argument("scale", help="light, medium or heavy")

    generate = sub.add_parser("generate", help="Print a generated event only")
    generate.add_argument("scale", nargs="?", default=Scale.MEDIUM.value)
    generate.add_argument("--username", default="test_user")

    batch = sub.add_parser("batch", help="Send a re-stamped template repeatedly")
    batch.add_argument("--runs", type=int, default=None, help="Number of requests (env RUNS)")
    batch.add_argument("--delay", type=float, default=None, help="Seconds between requests (env DELAY)")

    sink = sub.add_parser("sink", help="Run a local usage hook sink")
    sink.add_argument("--host", default="127.0.0.1")
    sink.add_argument("--port", type=int, default=9090)

    return parser


def print_summary(summary: RunSummary) -> None:
    print("=" * 50)
    print(f"Succeeded: {summary.successes}")
    print(f"Failed:    {summary.failures}")
    print(f"Success rate: {summary.success_rate:.1f}%")


async def run_command(args: argparse.Namespace, runner: UsageRunner) -> int:
    if args.command == "single":
        result = await runner.run_single(args.username, args.scale)
        if result.ok:
            print(json.dumps(result.body, indent=2, default=str))
            return 0
        print(f"API Error: {result.error}")
        return 1

    if args.command == "batch":
        summary = await runner.run_batch(runs=args.runs, delay_seconds=args.delay)
        print_summary(summary)
        return 0

    summary = await runner.run_suite(delay_seconds=getattr(args, "delay", None))
    print_summary(summary)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Parse arguments and run; any unexpected error ends with exit status 1."""
    args = build_parser().parse_args(argv)
    setup_logging(level=args.log_level)

    try:
        if args.command == "generate":
            event = UsageEventGenerator().generate(args.username, args.scale)
            print(json.dumps(event.model_dump(mode="json"), indent=2))
            return 0

        if args.command == "sink":
            from usagehook.sink import serve

            serve(host=args.host, port=args.port)
            return 0

        runner = UsageRunner(client=UsageHookClient(endpoint_url=args.endpoint or settings.usage_hook_url))
        return asyncio.run(run_command(args, runner))

    except KeyboardInterrupt:
        logger.warning("interrupted")
        return 130
    except Exception:
        logger.exception("unhandled_error", command=args.command)
        return 1


if __name__ == "__main__":
    sys.exit(main())
