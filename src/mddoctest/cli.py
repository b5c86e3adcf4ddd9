"""
Command line interface.

Usage::

    mddoctest compile README.md -o test_readme.py
    mddoctest samples README.md
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from . import __version__
from .compiler import DocumentCompiler
from .config import create_file_options
from .errors import MdDoctestError


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mddoctest",
        description="Compile annotated Markdown code samples into pytest suites",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    commands = parser.add_subparsers(dest="command", required=True)

    compile_cmd = commands.add_parser("compile", help="Generate a test module")
    compile_cmd.add_argument("path", type=Path, help="Markdown document")
    compile_cmd.add_argument(
        "-o", "--output", type=Path, help="Output file (default: stdout)"
    )
    compile_cmd.add_argument("--name", help="Suite title (default: the file name)")
    compile_cmd.add_argument(
        "--language",
        action="append",
        default=[],
        metavar="TAG",
        help="Additional fence language tag to compile; repeatable",
    )
    compile_cmd.add_argument(
        "-v", "--verbose", action="store_true", help="Log compilation phases"
    )

    samples_cmd = commands.add_parser("samples", help="List recognized samples")
    samples_cmd.add_argument("path", type=Path, help="Markdown document")
    samples_cmd.add_argument(
        "--language",
        action="append",
        default=[],
        metavar="TAG",
        help="Additional fence language tag to recognize; repeatable",
    )
    return parser


def run_compile(args: argparse.Namespace) -> int:
    overrides = {"verbose": args.verbose}
    if args.name:
        overrides["name"] = args.name
    if args.output:
        overrides["output"] = str(args.output)
    options = create_file_options(args.path, extra_languages=args.language, **overrides)
    source = args.path.read_text(encoding="utf-8")
    code = DocumentCompiler(options).compile(source)

    if args.output:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(code, encoding="utf-8")
    else:
        sys.stdout.write(code)
    return 0


def run_samples(args: argparse.Namespace) -> int:
    options = create_file_options(args.path, extra_languages=args.language)
    source = args.path.read_text(encoding="utf-8")
    samples = DocumentCompiler(options).scan(source)
    for index, sample in enumerate(samples):
        line = sample.line if sample.line is not None else "?"
        print(f"{index}\t{line}\t{sample.language}\t{sample.case_title}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point of the ``mddoctest`` command."""
    args = build_parser().parse_args(argv)
    try:
        if args.command == "compile":
            return run_compile(args)
        return run_samples(args)
    except (MdDoctestError, OSError) as exc:
        print(f"mddoctest: {exc}", file=sys.stderr)
        return 1
