"""Command-line entry point.

Exit status is 0 when the version may be used and 1 when it is blocked
(end-of-life, unsupported or vulnerable) or the check could not complete.
"""

import argparse
import logging
import subprocess
import sys
from pathlib import Path
from typing import Sequence

import yaml
from pydantic import ValidationError

from .api import check
from .config import load_settings
from .errors import NodeVulnError
from .report import render_verdict


def detect_node_version() -> str:
    """Return the output of ``node --version`` (e.g. ``v20.11.1``).

    Raises:
        FileNotFoundError: If ``node`` is not on ``PATH``.
        subprocess.CalledProcessError: If ``node`` exits non-zero.
    """
    result = subprocess.run(
        ["node", "--version"],
        capture_output=True,
        text=True,
        check=True,
        timeout=30,
    )
    return result.stdout.strip()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nodevuln",
        description="Check whether a Node.js version is end-of-life or affected by known vulnerabilities",
    )
    parser.add_argument(
        "version",
        nargs="?",
        default=None,
        help="Node.js version to check. Default: output of `node --version`",
    )
    parser.add_argument(
        "-r",
        "--refresh",
        action="store_true",
        help="Ignore the cached ETag and download the vulnerability index again",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to a nodevuln.yaml settings file",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log cache and download decisions",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the check and return the process exit status."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    version = args.version
    if version is None:
        try:
            version = detect_node_version()
        except (OSError, subprocess.SubprocessError) as e:
            print(f"Could not determine the Node.js version: {e}", file=sys.stderr)
            return 1

    try:
        settings = load_settings(args.config)
    except (OSError, ValidationError, yaml.YAMLError) as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 1

    try:
        verdict = check(version, settings=settings, refresh=args.refresh)
    except NodeVulnError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    text = render_verdict(version, verdict)
    if verdict.blocked:
        print(text, end="", file=sys.stderr)
        return 1
    print(text, end="")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
