from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.table import Table

from .config import get_settings
from .document import StatementDocument
from .errors import InvalidInput, StatementParserError
from .logging_setup import configure_logging, get_logger
from .registry import build_default_registry
from .selector import ExtractorSelector

logger = get_logger(__name__)


def _print_extractors(console: Console, selector: ExtractorSelector) -> None:
    table = Table(title="Registered extractors (priority order)")
    table.add_column("id", no_wrap=True)
    table.add_column("institution")
    table.add_column("formats")
    table.add_column("description")
    for d in selector.available_extractors():
        table.add_row(d.id, d.institution, ", ".join(d.supported_formats), d.description)
    console.print(table)


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Bank statement parser (CSV / PDF)")
    parser.add_argument("file", nargs="?", help="Statement file (CSV or PDF)")
    parser.add_argument("--extractor", default="", help="Force an extractor id instead of auto-detection")
    parser.add_argument("--out", default="", help="Output JSON path (optional)")
    parser.add_argument("--validate", action="store_true", help="Print validation errors and warnings")
    parser.add_argument("--list-extractors", action="store_true", help="Show registered extractors and exit")
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING...")
    args = parser.parse_args(argv)

    settings = get_settings()
    configure_logging(args.log_level)
    console = Console(stderr=True)
    selector = ExtractorSelector(build_default_registry(settings))

    if args.list_extractors:
        _print_extractors(console, selector)
        return 0

    if not args.file:
        parser.error("the following arguments are required: file")

    path = Path(args.file)
    if not path.exists():
        raise SystemExit(f"File not found: {path}")

    console.print(f"Processing: {path}", style="bold")
    try:
        if path.stat().st_size > settings.max_file_size_bytes:
            raise InvalidInput(f"File too large. Maximum: {settings.max_file_size_mb} MB")
        document = StatementDocument.from_path(path)
        if args.extractor:
            batch = selector.parse_batch_with(document, args.extractor)
        else:
            batch = selector.parse_batch(document)
    except StatementParserError as exc:
        logger.debug("Parse failed", exc_info=True)
        console.print(str(exc), style="bold red")
        return 2

    payload = batch.to_payload()
    rendered = json.dumps(payload, ensure_ascii=False, indent=2)
    if args.out:
        out_path = Path(args.out)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(rendered, encoding="utf-8")
        console.print(f"OK -> {out_path}", style="bold green")
    else:
        print(rendered)

    console.print(
        f"Transactions: {len(batch.transactions)} (extractor {batch.extractor_id}, "
        f"skipped rows {len(batch.skipped)})",
        style="bold cyan",
    )

    if args.validate:
        result = selector.validate(batch)
        for issue in result.errors:
            console.print(f"ERROR row={issue.row} {issue.message}", style="red")
        for issue in result.warnings:
            console.print(f"WARNING row={issue.row} {issue.message}", style="yellow")
        if not result.is_valid:
            return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
