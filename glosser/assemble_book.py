"""
Page assembly: split processed texts into printed pages, build each page's
gloss list and collect the back-of-book index of arrowed words.

Pagination rules:
  - A book whose start page is even gets a leading blank page.
  - Hidden texts (display=False) produce no pages.
  - A text's page plan lists occurrence counts; the last planned page takes the
    remainder of the text. An empty plan puts the whole text on one page.
  - A non-final planned page that needs more occurrences than remain is
    skipped: it uses no occurrences and no page number. The skip is reported
    on stderr and recorded in AssemblyReport.skipped_pages.
  - After a text, blank pages are added so that the next text starts on an
    odd (right-hand) page with at least one blank page in between.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import Protocol

from glosser.corpus import (
    ArrowedIndexEntry,
    ArrowedState,
    Corpus,
    GlossOccurrence,
    WordKind,
)
from glosser.greek_text import fold_sort_key, sanitize_greek


def warn(msg):
    """Print warning to stderr."""
    print(f"WARNING: {msg}", file=sys.stderr)


# ---------------------------------------------------------------------------
# Render sink interface
# ---------------------------------------------------------------------------

class RenderSink(Protocol):
    """One output format. Every method returns a markup fragment."""

    def document_start(self, title: str, start_page: int) -> str: ...

    def document_end(self) -> str: ...

    def page_start(self, title: str, page_number: int) -> str: ...

    def page_end(self) -> str: ...

    def running_text(self, occurrences: list[GlossOccurrence], appcrits: dict[str, str]) -> str: ...

    def gloss_list_start(self) -> str: ...

    def gloss_entry(self, occurrence: GlossOccurrence, lemma: str | None) -> str: ...

    def index(self, entries: list[ArrowedIndexEntry]) -> str: ...

    def blank_page(self) -> str: ...


# ---------------------------------------------------------------------------
# Options and report
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class AssemblyOptions:
    unique_per_page: bool = False   # one gloss row per gloss per page
    hide_invisible: bool = False    # drop rows for glosses already arrowed
    alphabetize: bool = False       # sort rows by sort key (gloss-absent rows last)


@dataclass(frozen=True)
class PageRecord:
    page_number: int
    text_index: int
    text_name: str
    start: int          # slice bounds into the text's occurrence list
    end: int


@dataclass(frozen=True)
class SkippedPage:
    text_index: int
    text_name: str
    plan_index: int     # position of the page in the text's page plan
    requested_end: int
    available: int


@dataclass
class AssemblyReport:
    document: str = ""
    pages: list[PageRecord] = field(default_factory=list)
    blank_pages: list[int] = field(default_factory=list)
    skipped_pages: list[SkippedPage] = field(default_factory=list)
    arrowed_index: list[ArrowedIndexEntry] = field(default_factory=list)

    @property
    def has_skipped_pages(self) -> bool:
        return bool(self.skipped_pages)


# ---------------------------------------------------------------------------
# Gloss list per page
# ---------------------------------------------------------------------------

def _row_sort_key(o: GlossOccurrence) -> tuple[bool, str]:
    if o.gloss is None:
        return True, ""
    return False, fold_sort_key(o.gloss.sort_key)


def filter_and_sort(
    occurrences: list[GlossOccurrence],
    page_number: int,
    options: AssemblyOptions,
) -> tuple[list[GlossOccurrence], list[ArrowedIndexEntry]]:
    """Build one page's gloss rows.

    Returns (rows, index_entries). Every ARROWED occurrence yields an index
    entry whatever the options. With unique_per_page, rows keep first-seen
    order per gloss, an ARROWED occurrence replaces an earlier row for the
    same gloss, and gloss-absent rows are dropped. With alphabetize,
    gloss-absent rows go last, in page order.
    """
    rows: list[GlossOccurrence] = []
    unique: dict[str, GlossOccurrence] = {}
    index_entries: list[ArrowedIndexEntry] = []

    for o in occurrences:
        if o.word.kind is not WordKind.WORD:
            continue
        if options.hide_invisible and o.state is ArrowedState.INVISIBLE:
            continue
        if o.gloss is None:
            if not options.hide_invisible:
                rows.append(o)
            continue

        if o.state is ArrowedState.ARROWED:
            index_entries.append(ArrowedIndexEntry(
                lemma=o.gloss.lemma,
                sort_key=o.gloss.sort_key,
                page_number=page_number,
            ))

        if options.unique_per_page:
            if o.state is ArrowedState.ARROWED or o.gloss.gloss_id not in unique:
                unique[o.gloss.gloss_id] = o
        else:
            rows.append(o)

    if options.unique_per_page:
        # one row per gloss; gloss-absent rows are not kept in this mode
        rows = list(unique.values())

    if options.alphabetize:
        rows = sorted(rows, key=_row_sort_key)

    return rows, index_entries


def render_gloss_rows(rows: list[GlossOccurrence], sink: RenderSink) -> str:
    parts = []
    for o in rows:
        lemma = sanitize_greek(o.gloss.lemma) if o.gloss is not None else None
        parts.append(sink.gloss_entry(o, lemma))
    return "".join(parts)


def make_page(
    occurrences: list[GlossOccurrence],
    appcrits: dict[str, str],
    sink: RenderSink,
    title: str,
    page_number: int,
    options: AssemblyOptions,
) -> tuple[str, list[ArrowedIndexEntry]]:
    """Render one page. Returns (markup, index entries found on the page)."""
    rows, index_entries = filter_and_sort(occurrences, page_number, options)
    page = (
        sink.page_start(title, page_number)
        + sink.running_text(occurrences, appcrits)
        + sink.gloss_list_start()
        + render_gloss_rows(rows, sink)
        + sink.page_end()
    )
    return page, index_entries


# ---------------------------------------------------------------------------
# Pagination
# ---------------------------------------------------------------------------

def plan_pages(page_plan: list[int], occurrence_count: int) -> tuple[list[tuple[int, int, int]], list[tuple[int, int]]]:
    """Turn a page plan into slice bounds.

    Returns (pages, skipped): pages as (plan_index, start, end), skipped as
    (plan_index, requested_end) for non-final pages that overflow the text.
    """
    if not page_plan:
        return [(0, 0, occurrence_count)], []

    pages = []
    skipped = []
    index = 0
    last = len(page_plan) - 1
    for i, size in enumerate(page_plan):
        if i == last:
            pages.append((i, index, occurrence_count))
            index = occurrence_count
        elif index + size > occurrence_count:
            skipped.append((i, index + size))
        else:
            pages.append((i, index, index + size))
            index += size
    return pages, skipped


def collect_appcrits(corpus: Corpus) -> dict[str, str]:
    appcrits: dict[str, str] = {}
    for text in corpus.texts:
        appcrits.update(text.appcrits)
    return appcrits


def assemble_document(
    corpus: Corpus,
    occurrences: list[list[GlossOccurrence]],
    sink: RenderSink,
    options: AssemblyOptions | None = None,
) -> AssemblyReport:
    """Paginate the processed corpus and render it through `sink`.

    `occurrences` must be index-aligned with corpus.texts (as returned by
    occurrences.process_corpus).
    """
    options = options or AssemblyOptions()
    if len(occurrences) != len(corpus.texts):
        raise ValueError(
            f"occurrence lists ({len(occurrences)}) do not match texts ({len(corpus.texts)})"
        )

    report = AssemblyReport()
    appcrits = collect_appcrits(corpus)
    index_entries: list[ArrowedIndexEntry] = []
    page_number = corpus.start_page

    parts = [sink.document_start(corpus.title, page_number)]
    if page_number % 2 == 0:
        parts.append(sink.blank_page())
        report.blank_pages.append(page_number)
        page_number += 1

    for text_index, text in enumerate(corpus.texts):
        if not text.display:
            continue

        text_occurrences = occurrences[text_index]
        pages, skipped = plan_pages(text.page_plan, len(text_occurrences))

        for plan_index, requested_end in skipped:
            warn(f"page {plan_index + 1} of text '{text.name}' needs occurrences up to "
                 f"{requested_end} but the text has {len(text_occurrences)}; page skipped")
            report.skipped_pages.append(SkippedPage(
                text_index=text_index,
                text_name=text.name,
                plan_index=plan_index,
                requested_end=requested_end,
                available=len(text_occurrences),
            ))

        for plan_index, start, end in pages:
            title = "" if plan_index == 0 else text.name
            page, found = make_page(
                text_occurrences[start:end], appcrits, sink, title, page_number, options,
            )
            parts.append(page)
            index_entries.extend(found)
            report.pages.append(PageRecord(
                page_number=page_number,
                text_index=text_index,
                text_name=text.name,
                start=start,
                end=end,
            ))
            page_number += 1

        # next text starts on an odd page, after at least one blank page
        if page_number % 2 == 1:
            parts.append(sink.blank_page())
            report.blank_pages.append(page_number)
            page_number += 1
        parts.append(sink.blank_page())
        report.blank_pages.append(page_number)
        page_number += 1

    if index_entries:
        index_entries = sorted(index_entries, key=lambda e: fold_sort_key(e.sort_key))
        parts.append(sink.index(index_entries))
    report.arrowed_index = index_entries

    parts.append(sink.document_end())
    report.document = "".join(parts)
    return report
