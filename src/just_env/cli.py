"""Command line entry point for just-env."""

import argparse
import json
import logging
import re
import sys
from typing import Optional

from .env import parse
from .interpreter import ParseError
from .parser import is_valid_name

_SAFE_VALUE_RE = re.compile(r"[A-Za-z0-9_@%+=:,./-]*")


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the just-env CLI."""
    parser = argparse.ArgumentParser(
        prog='just-env',
        description='Evaluate shell-style variable assignments without a shell'
    )
    parser.add_argument(
        'files',
        nargs='*',
        metavar='FILE',
        help='Scripts to evaluate in order (default: stdin)'
    )
    parser.add_argument(
        '--set',
        action='append',
        default=[],
        metavar='KEY=VALUE',
        help='Initial variable (can be specified multiple times)'
    )
    parser.add_argument(
        '--json',
        action='store_true',
        help='Print the context as a JSON object'
    )
    parser.add_argument(
        '--debug',
        action='store_true',
        help='Enable debug logging'
    )
    return parser


def quote_value(value: str) -> str:
    """Single-quote a value for NAME=value output if it needs quoting."""
    if value and _SAFE_VALUE_RE.fullmatch(value):
        return value
    return "'" + value.replace("'", "'\\''") + "'"


def _read(path: str) -> str:
    if path == '-':
        return sys.stdin.read()
    with open(path, encoding='utf-8') as f:
        return f.read()


def main(argv: Optional[list[str]] = None) -> int:
    """Main CLI entry point."""
    args = create_parser().parse_args(argv)

    if args.debug:
        logging.basicConfig(level=logging.DEBUG, format='%(name)s: %(message)s')

    context: dict[str, str] = {}
    for item in args.set:
        name, sep, value = item.partition('=')
        if not sep or not is_valid_name(name):
            print(f"just-env: invalid --set value: {item}", file=sys.stderr)
            return 2
        context[name] = value

    for path in args.files or ['-']:
        try:
            script = _read(path)
        except OSError as e:
            print(f"just-env: {path}: {e.strerror}", file=sys.stderr)
            return 2
        try:
            parse(script, context)
        except ParseError as e:
            print(f"just-env: {path}: {e}", file=sys.stderr)
            return 1

    if args.json:
        print(json.dumps(context, indent=2, ensure_ascii=False))
    else:
        for name, value in context.items():
            print(f"{name}={quote_value(value)}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
