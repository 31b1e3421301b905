from __future__ import annotations

import argparse
import json
import os
import subprocess
import sys

from envload.config import ConfigError, load_config
from envload.environ import merge
from envload.loader import load_file, load_stream, load_url
from envload.logging_config import setup_logging
from envload.parser import EnvloadError, ParseResult


def _load_source(source: str | None, url: str | None) -> ParseResult:
    if url:
        return load_url(url)
    if source is None or source == "-":
        return load_stream(sys.stdin)
    return load_file(source)


def main(argv: list[str] | None = None) -> int:
    """Entry point for the envload CLI.

    Commands:
    - show: prints the parsed mapping of a file, stdin or URL.
    - check: parses one or more files and reports the key count of each.
    - run: loads env files into the environment of a child command.

    Returns:
    - 0 on success (run returns the child's exit code)
    - 1 on failure (prints an ERROR message to stderr)
    """
    parser = argparse.ArgumentParser(prog="envload")
    sub = parser.add_subparsers(dest="command", required=True)

    show = sub.add_parser("show")
    show.add_argument(
        "source",
        nargs="?",
        default="-",
        help="Path to an env file, or - for stdin.",
    )
    show.add_argument(
        "--url",
        default=None,
        help="Fetch the env file from this URL instead.",
    )
    show.add_argument(
        "--json",
        action="store_true",
        help="Print the mapping as a JSON object.",
    )

    check = sub.add_parser("check")
    check.add_argument(
        "sources",
        nargs="*",
        help="Env files to check (defaults to ENVLOAD_FILES).",
    )

    run = sub.add_parser("run")
    run.add_argument(
        "--file",
        dest="files",
        action="append",
        default=None,
        help="Env file to load; may be repeated (defaults to ENVLOAD_FILES).",
    )
    run.add_argument(
        "--override",
        action="store_true",
        default=None,
        help="Overwrite variables already set in the environment.",
    )
    run.add_argument("cmd", nargs=argparse.REMAINDER, help="Command to run.")

    args = parser.parse_args(argv)

    try:
        cfg = load_config()
    except ConfigError as exc:
        sys.stderr.write(f"ERROR: {exc}\n")
        return 1
    setup_logging(cfg.log_level)

    if args.command == "show":
        res = _load_source(args.source, args.url)
        try:
            mapping = res.raise_for_error()
        except EnvloadError as exc:
            sys.stderr.write(f"ERROR: {exc}\n")
            return 1

        if args.json:
            sys.stdout.write(json.dumps(mapping, indent=2, ensure_ascii=False) + "\n")
            return 0
        for key, value in mapping.items():
            sys.stdout.write(f"{key}={value}\n")
        return 0

    if args.command == "check":
        explicit = bool(args.sources)
        sources = args.sources or list(cfg.files)
        failed = False
        for source in sources:
            if not explicit and not os.path.isfile(source):
                continue
            res = load_file(source)
            if res.error is not None:
                sys.stderr.write(f"ERROR: {source}: {res.error}\n")
                failed = True
                continue
            sys.stdout.write(f"OK {source} keys={len(res.mapping)}\n")
        return 1 if failed else 0

    if args.command == "run":
        cmd = list(args.cmd)
        if cmd and cmd[0] == "--":
            cmd = cmd[1:]
        if not cmd:
            sys.stderr.write("ERROR: No command given\n")
            return 1

        override = cfg.override if args.override is None else args.override
        env = dict(os.environ)
        explicit = args.files is not None
        for source in args.files or cfg.files:
            if not explicit and not os.path.isfile(source):
                continue
            res = load_file(source)
            try:
                mapping = res.raise_for_error()
            except EnvloadError as exc:
                sys.stderr.write(f"ERROR: {source}: {exc}\n")
                return 1
            merge(mapping, overwrite=override, environ=env)

        try:
            completed = subprocess.run(cmd, env=env)
        except OSError as exc:
            sys.stderr.write(f"ERROR: {exc}\n")
            return 1
        return completed.returncode

    sys.stderr.write("ERROR: Unknown command\n")
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
