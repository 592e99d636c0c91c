#!/usr/bin/env python3
"""
Build a glossed reader from a sequence file.

Pipeline: load corpus -> verify -> resolve arrowed states -> paginate -> write.

Usage:
  glosser-build sequence.xml --format typst --output book.typ
  glosser-build sequence.xml --config profile.yaml --strict --summary summary.json

Exit codes: 0 ok, 1 verification failure (or skipped pages with --strict),
2 the corpus or build profile could not be loaded.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from glosser.assemble_book import AssemblyReport, RenderSink, assemble_document
from glosser.build_config import BuildConfig, BuildConfigError, load_config, merge_overrides
from glosser.corpus import CorpusLoadError, VerificationError
from glosser.load_corpus import load_sequence
from glosser.occurrences import gloss_totals, process_corpus
from glosser.render_html import HtmlSink
from glosser.render_typst import TypstSink


def warn(msg):
    """Print warning to stderr."""
    print(f"WARNING: {msg}", file=sys.stderr)


def error(msg):
    print(f"ERROR: {msg}", file=sys.stderr)


def make_sink(config: BuildConfig) -> RenderSink:
    match config.format:
        case "html":
            return HtmlSink()
        case "typst":
            return TypstSink(running_head=config.running_head)
        case _:
            raise BuildConfigError(f"unknown output format '{config.format}'")


def build_summary(report: AssemblyReport, totals: dict[str, int], output: Path) -> dict:
    return {
        "output": str(output),
        "pages": [
            {"page": p.page_number, "text": p.text_name, "start": p.start, "end": p.end}
            for p in report.pages
        ],
        "blank_pages": report.blank_pages,
        "skipped_pages": [
            {
                "text": s.text_name,
                "plan_index": s.plan_index,
                "requested_end": s.requested_end,
                "available": s.available,
            }
            for s in report.skipped_pages
        ],
        "index_entries": len(report.arrowed_index),
        "glosses_used": len(totals),
    }


def run(sequence: str | Path, config: BuildConfig, summary_path: str | Path | None = None) -> int:
    """Build one book. Returns the process exit code."""
    try:
        corpus = load_sequence(sequence)
    except CorpusLoadError as e:
        error(str(e))
        return 2
    print(f"Loaded '{corpus.title}': {len(corpus.texts)} texts, "
          f"{len(corpus.glosses)} glosses, {len(corpus.arrows)} arrowed words")

    try:
        occurrences = process_corpus(corpus)
    except VerificationError as e:
        error(f"Verification failed: {e}")
        return 1
    except CorpusLoadError as e:
        error(str(e))
        return 2
    print("  ✓ Corpus verified")

    sink = make_sink(config)
    report = assemble_document(corpus, occurrences, sink, config.assembly_options)
    print(f"  Assembled {len(report.pages)} pages ({len(report.blank_pages)} blank), "
          f"{len(report.arrowed_index)} index entries")

    output = config.output_path(sequence)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(report.document, encoding="utf-8")
    print(f"  Wrote {output}")

    if summary_path:
        summary = build_summary(report, gloss_totals(occurrences), output)
        with open(summary_path, "w", encoding="utf-8") as f:
            json.dump(summary, f, ensure_ascii=False, indent=2)
        print(f"  Summary: {summary_path}")

    if report.has_skipped_pages:
        if config.strict:
            error(f"{len(report.skipped_pages)} planned page(s) skipped (strict mode)")
            return 1
        warn(f"{len(report.skipped_pages)} planned page(s) skipped")
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(description="Build a glossed reader from a sequence file.")
    parser.add_argument("sequence", help="Path to the sequence XML file")
    parser.add_argument("--config", help="YAML build profile")
    parser.add_argument("--format", choices=["html", "typst"], default=None, help="Output format")
    parser.add_argument("--output", default=None, help="Output file (default: next to the sequence file)")
    parser.add_argument("--running-head", default=None, help="Typst even-page header")
    parser.add_argument("--unique-per-page", action=argparse.BooleanOptionalAction, default=None,
                        help="One gloss row per gloss per page")
    parser.add_argument("--hide-invisible", action=argparse.BooleanOptionalAction, default=None,
                        help="Drop rows for glosses arrowed earlier")
    parser.add_argument("--alphabetize", action=argparse.BooleanOptionalAction, default=None,
                        help="Sort gloss rows by sort key")
    parser.add_argument("--strict", action=argparse.BooleanOptionalAction, default=None,
                        help="Fail when planned pages had to be skipped")
    parser.add_argument("--summary", default=None, help="Write a JSON build summary here")
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config) if args.config else BuildConfig()
        config = merge_overrides(
            config,
            format=args.format,
            output=args.output,
            running_head=args.running_head,
            unique_per_page=args.unique_per_page,
            hide_invisible=args.hide_invisible,
            alphabetize=args.alphabetize,
            strict=args.strict,
        )
    except BuildConfigError as e:
        error(str(e))
        return 2

    return run(args.sequence, config, args.summary)


if __name__ == "__main__":
    sys.exit(main())
