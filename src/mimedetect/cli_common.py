from __future__ import annotations

import argparse
import dataclasses
import os
import sys
import textwrap
from dataclasses import dataclass, field
from typing import Literal

from mimedetect.defaults import (
    CATALOG_ENV_VAR,
    DEFAULT_EXCLUSIONS,
    DEFAULT_HTTP_TIMEOUT,
    DEFAULT_INCLUDE_HIDDEN,
    DEFAULT_MAX_FILES,
    DEFAULT_NO_IGNORE,
    DEFAULT_TAG,
    DEFAULT_TAG_CHOICES,
    DEFAULT_VERBOSITY,
    MAX_HEADER_SIZE,
)


@dataclass(slots=True)
class Context:
    # Field list should match CLI options.
    paths: list[str] = field(default_factory=list)
    catalogs: list[str] = field(default_factory=list)
    export_catalog: str | None = None
    tag: Literal["text", "json"] = DEFAULT_TAG
    expect: str | None = None
    exclusions: list[str] = field(default_factory=list)
    no_ignore: bool = DEFAULT_NO_IGNORE
    include_hidden: bool = DEFAULT_INCLUDE_HIDDEN
    max_files: int | None = DEFAULT_MAX_FILES
    timeout: float | None = DEFAULT_HTTP_TIMEOUT
    verbose: int = DEFAULT_VERBOSITY

    def __post_init__(self):
        """Resolve final exclusion list: user exclusions are added on top of the defaults."""
        exclusions = list(DEFAULT_EXCLUSIONS)
        exclusions.extend(e for e in self.exclusions if e not in exclusions)
        self.exclusions = exclusions

    def replace(self, **kwargs) -> Context:
        """Creates a new copy of the context with the given kwargs updated."""
        return dataclasses.replace(self, **kwargs)

    @property
    def effective_catalogs(self) -> list[str]:
        """$MIMEDETECT_CATALOG entries first, then --catalog ones; later catalogs have lower priority."""
        from_env = [p for p in os.environ.get(CATALOG_ENV_VAR, "").split(os.pathsep) if p.strip()]
        return [*from_env, *self.catalogs]


def _positive_int(val: str) -> int:
    number = int(val)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {val!r}")
    return number


def _timeout(val: str) -> float | None:
    if val.strip().lower() in {"none", "0"}:
        return None
    number = float(val)
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be non-negative, got {val!r}")
    return number


def parse_common_args(argv: list[str] | None = None) -> Context:
    epilog = textwrap.dedent(
        f"""
        HOW IT WORKS
        The first {MAX_HEADER_SIZE} bytes of each input are compared against an ordered catalog of
        signatures; the first full match wins. Input without any zero byte is reported as plain text.
        ZIP archives are opened to tell docx, xlsx, odt and ods apart from plain zip.

        EXIT STATUS
        0 all inputs identified (and matched --expect, if given)
        1 some input fell outside --expect
        2 some input could not be read, or bad catalog/arguments
        """
    )

    parser = argparse.ArgumentParser(
        prog="mimedetect",
        description="Identifies file formats from their leading bytes, ignoring file extensions",
        add_help=True,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=epilog,
    )

    parser.add_argument(
        "paths",
        type=str,
        nargs="*",
        help="Files, directories, http(s) URLs, or '-' for stdin. If omitted, defaults to current directory.",
        default=[],
    )
    parser.add_argument(
        "-c",
        "--catalog",
        action="append",
        dest="catalogs",
        default=[],
        help=f"JSON catalog to append to the built-in one (repeatable). Also read from ${CATALOG_ENV_VAR}.",
    )
    parser.add_argument(
        "--export-catalog",
        type=str,
        default=None,
        metavar="FILE",
        help="Write the effective catalog as JSON to FILE and exit.",
    )
    parser.add_argument(
        "-t",
        "--tag",
        type=str,
        choices=DEFAULT_TAG_CHOICES,
        default=DEFAULT_TAG,
        help="Output format.",
    )
    parser.add_argument(
        "-x",
        "--expect",
        type=str,
        default=None,
        metavar="EXTS",
        help="Comma-separated allowed extensions (e.g. 'pdf,docx'). Exit with 1 if any input is something else.",
    )
    parser.add_argument(
        "-E",
        "--exclude",
        "--ignore",
        type=str,
        action="append",
        default=[],
        help="Exclude files or directories by gitignore-style glob (repeatable). By default, excludes "
        + ", ".join(DEFAULT_EXCLUSIONS)
        + ", and any files in .gitignore, .ignore, .git/info/exclude and ~/.config/git/ignore.",
    )
    parser.add_argument(
        "-I",
        "--no-ignore",
        "--no-gitignore",
        "-u",
        action="store_true",
        help="Disable gitignore file processing.",
        default=DEFAULT_NO_IGNORE,
    )
    parser.add_argument(
        "-H",
        "--hidden",
        action="store_true",
        dest="include_hidden",
        help="Include hidden files and directories (dotfiles and dot-directories).",
        default=DEFAULT_INCLUDE_HIDDEN,
    )
    parser.add_argument(
        "--max-files",
        type=_positive_int,
        dest="max_files",
        default=DEFAULT_MAX_FILES,
        help="Maximum number of inputs to identify across all paths.",
    )
    parser.add_argument(
        "--timeout",
        type=_timeout,
        default=DEFAULT_HTTP_TIMEOUT,
        help=f"Seconds to wait for http(s) inputs ('none' to wait forever). Default {DEFAULT_HTTP_TIMEOUT:g}.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=DEFAULT_VERBOSITY,
        help="Log more (repeatable): -v for info, -vv for debug.",
    )

    args = parser.parse_args(argv if argv is not None else sys.argv[1:])

    return Context(
        paths=list(args.paths or []),
        catalogs=list(args.catalogs or []),
        export_catalog=args.export_catalog,
        tag=args.tag,
        expect=args.expect,
        exclusions=list(args.exclude or []),
        no_ignore=bool(args.no_ignore),
        include_hidden=bool(args.include_hidden),
        max_files=args.max_files,
        timeout=args.timeout,
        verbose=int(args.verbose),
    )
