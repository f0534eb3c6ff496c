"""Command line entry point."""

from __future__ import annotations

import argparse
import contextlib
import logging
import os
import pprint
import subprocess
import sys
from collections.abc import Sequence
from pathlib import Path

from trunk.common import TrunkError, remove_dir_all
from trunk.layers import full, rtc_clean
from trunk.options import ConfigOptsClean

log = logging.getLogger(__name__)


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="trunk",
        description="Build, bundle & ship your Rust WASM application to the web.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=os.environ.get("TRUNK_CONFIG"),
        help="Path to the Trunk config file [default: Trunk.toml]",
    )
    parser.add_argument("-v", dest="verbose", action="store_true", help="Enable verbose logging.")
    commands = parser.add_subparsers(dest="command", required=True)

    clean = commands.add_parser("clean", help="Clean output artifacts.")
    clean.add_argument(
        "-d", "--dist", type=Path, help="The output dir for all final assets [default: dist]"
    )
    clean.add_argument(
        "--cargo", action="store_true", help="Optionally perform a cargo clean [default: false]"
    )

    config = commands.add_parser("config", help="Trunk config controls.")
    actions = config.add_subparsers(dest="action", required=True)
    actions.add_parser("show", help="Show Trunk's current config pre-CLI.")
    return parser


def _clean(args: argparse.Namespace) -> None:
    cfg = rtc_clean(ConfigOptsClean(dist=args.dist, cargo=args.cargo), args.config)
    with contextlib.suppress(TrunkError):
        remove_dir_all(cfg.dist)
    if cfg.cargo:
        log.debug("cleaning cargo dir")
        try:
            output = subprocess.run(["cargo", "clean"], capture_output=True, check=False)
        except OSError as exc:
            raise TrunkError("error spawning cargo clean call") from exc
        if output.returncode != 0:
            stderr = output.stderr or b""
            if isinstance(stderr, bytes):
                stderr = stderr.decode("utf-8", errors="replace")
            raise TrunkError(stderr)


def _config_show(args: argparse.Namespace) -> None:
    print(pprint.pformat(full(args.config)))


def _describe(exc: BaseException) -> str:
    lines = [f"Error: {exc}"]
    causes = []
    cause = exc.__cause__
    while cause is not None:
        causes.append(str(cause) or type(cause).__name__)
        cause = cause.__cause__
    if causes:
        lines.append("")
        lines.append("Caused by:")
        lines.extend(f"    {index}: {text}" for index, text in enumerate(causes))
    return "\n".join(lines)


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command line tool; return the process exit status."""
    args = _parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(message)s",
    )
    try:
        if args.command == "clean":
            _clean(args)
        else:
            _config_show(args)
    except TrunkError as exc:
        print(_describe(exc), file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())