"""CLI entry point for the Coinforge API server."""

import argparse
import os


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="coinforge-server",
        description="Coinforge API server: site generation jobs and deposit-funded credits",
    )
    parser.add_argument("--host", default=None, help="Bind host (default: COINFORGE_HOST or 0.0.0.0)")
    parser.add_argument("--port", type=int, default=None, help="Bind port (default: COINFORGE_PORT or 5000)")
    parser.add_argument(
        "--local",
        action="store_true",
        help="Local dev mode: SQLite file database, console logs, no Redis",
    )
    parser.add_argument(
        "--no-deposit-scan",
        action="store_true",
        help="Disable the periodic deposit scan; /scan-deposits still works",
    )
    parser.add_argument("--log-level", default=None, choices=["debug", "info", "warning", "error"])
    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)

    # Settings are read at import time, so the environment must be set first
    if args.local:
        os.environ["COINFORGE_LOCAL_MODE"] = "1"
    if args.no_deposit_scan:
        os.environ["COINFORGE_DEPOSIT_SCAN_ENABLED"] = "0"
    if args.log_level:
        os.environ["COINFORGE_LOG_LEVEL"] = args.log_level

    import uvicorn

    from coinforge.config import settings

    uvicorn.run(
        "coinforge.main:app",
        host=args.host or settings.host,
        port=args.port or settings.port,
        log_level=settings.log_level,
    )


if __name__ == "__main__":
    main()
