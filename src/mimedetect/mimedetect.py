from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Iterable

from . import cli_common, defaults, persistence
from .adapters.filesystem import FileSystemSource, FileSystemWalker
from .adapters.memory import StreamSource
from .adapters.website import HttpSource, is_http_url
from .catalog import SignatureCatalog
from .cli_common import Context
from .core import ByteSource, Matcher
from .errors import MimeDetectError
from .formatters import FORMATTERS, StdoutWriter, Writer
from .types import MatchKind, MatchResult, SignatureRecord

EXIT_OK = 0
EXIT_UNEXPECTED = 1
EXIT_ERROR = 2

STDIN_TOKEN = "-"


def configure_logging(verbosity: int) -> None:
    level = {0: logging.WARNING, 1: logging.INFO}.get(verbosity, logging.DEBUG)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s", stream=sys.stderr)


def build_catalog(ctx: Context) -> SignatureCatalog:
    catalog = SignatureCatalog.default()
    for path in ctx.effective_catalogs:
        catalog = persistence.load_catalog(path, base=catalog)
        logging.getLogger(__name__).info("Appended catalog %s (%d records total)", path, len(catalog))
    return catalog


def expected_records(catalog: SignatureCatalog, csv: str) -> list[SignatureRecord]:
    """Scanned records plus the container sub-types and plain text, filtered by extension."""
    searchable = catalog.extend((*defaults.ZIP_SUBTYPE_RECORDS, defaults.TXT))
    return searchable.by_extensions(csv)


def iter_sources(ctx: Context, walker: FileSystemWalker) -> Iterable[tuple[str, ByteSource | None, str | None]]:
    """
    Yields (display path, source, error) triples. Exactly one of source and error is None.
    Bad tokens are reported in place rather than aborting the run.
    """
    for token in ctx.paths or ["."]:
        if token == STDIN_TOKEN:
            yield token, StreamSource(sys.stdin.buffer), None
            continue
        if is_http_url(token):
            try:
                yield token, HttpSource(token, timeout=ctx.timeout), None
            except ValueError as e:
                yield token, None, str(e)
            continue
        try:
            for path in walker.walk(token):
                yield _display(path, walker.anchor), FileSystemSource(path), None
        except MimeDetectError as e:
            yield token, None, str(e)


def _display(path: Path, anchor: Path) -> str:
    try:
        return path.relative_to(anchor).as_posix()
    except ValueError:
        return str(path)


def main(*, argv: list[str] | None = None, writer: Writer | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    ctx: Context = cli_common.parse_common_args(argv)
    configure_logging(ctx.verbose)
    log = logging.getLogger(__name__)

    try:
        catalog = build_catalog(ctx)
    except MimeDetectError as e:
        log.error("%s", e)
        return EXIT_ERROR

    if ctx.export_catalog:
        persistence.save_catalog(catalog, ctx.export_catalog)
        log.info("Wrote %d signatures to %s", len(catalog), ctx.export_catalog)
        return EXIT_OK

    expected: list[SignatureRecord] | None = None
    if ctx.expect is not None:
        expected = expected_records(catalog, ctx.expect)
        if not expected:
            log.error("--expect %r names no extension known to the catalog", ctx.expect)
            return EXIT_ERROR

    formatter = FORMATTERS[ctx.tag]()
    out_writer = writer or StdoutWriter()
    matcher = Matcher(catalog)
    walker = FileSystemWalker(os.getcwd())
    walker.configure(ctx)

    errors = 0
    unexpected = 0
    count = 0
    for display, source, error in iter_sources(ctx, walker):
        if ctx.max_files is not None and count >= ctx.max_files:
            break
        count += 1
        if source is None:
            log.error("%s: %s", display, error)
            out_writer.write(formatter.error(display, error or "unreadable"))
            errors += 1
            continue
        try:
            result = matcher.identify(source.read_header(), source.open_container)
        except MimeDetectError as e:
            log.error("%s: %s", display, e)
            out_writer.write(formatter.error(display, str(e)))
            errors += 1
            continue
        out_writer.write(formatter.format(display, result))
        if expected is not None and not _is_expected(result, expected):
            unexpected += 1

    if errors:
        return EXIT_ERROR
    if unexpected:
        return EXIT_UNEXPECTED
    return EXIT_OK


def _is_expected(result: MatchResult, expected: list[SignatureRecord]) -> bool:
    if result.kind is MatchKind.NO_MATCH or result.record is None:
        return False
    return result.record in expected


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
