"""
Typst render sink: the print copy of the book.

Compile the output with `typst compile book.typ`. The preamble imports the
marge package for section sidenotes; fonts are expected on the font path.

Gloss tables only list rows the reader still needs: rows for glosses taught
earlier (INVISIBLE) and rows without a gloss print nothing. The arrowed row is
marked with a bold arrow.
"""

from __future__ import annotations

from glosser.corpus import ArrowedIndexEntry, ArrowedState, GlossOccurrence, WordKind
from glosser.text_layout import OPENING_BRACKETS, needs_space, parse_section, verse_number_label

# Applied in order: brackets are escaped before the HTML-ish tags are turned
# into Typst calls that use brackets of their own.
TYPST_REPLACEMENTS = [
    ("\\", "\\\\"),
    ("\"", "\\\""),
    ("$", "\\$"),
    ("#", "\\#"),
    ("]", "\\u{005D}"),
    ("[", "\\u{005B}"),
    ("*", "\\*"),
    ("_", "\\_"),
    ("`", "\\`"),
    ("@", "\\@"),
    ("<b>", "#strong["),
    ("</b>", "]"),
    ("<i>", "#emph["),
    ("</i>", "]"),
    ("<sup>", "#super["),
    ("</sup>", "]"),
    ("/", "\\/"),       # after the closing tags, which contain "/"
    (">", "\\>"),
    ("<", "\\<"),
    ("=", "\\u{003D}"),   # '=' at the start of a paragraph would open a heading
]

PREAMBLE = """#import "@preview/marge:0.1.0": sidenote
#let sidenote = sidenote.with(side: left, padding: 3em)

#set page(width: 8.5in, height: 11in, numbering: "1")
#counter(page).update(%START_PAGE%)

#let glosshang = par.with(hanging-indent: 2em, justify: false, leading: 0.7em)
#let glossdef = par.with(justify: false, leading: 0.7em)
#let glosstable = table.with(
    columns: (0.6cm, 8.0cm, 9.0cm),
    align: start + top,
    stroke: none,
    row-gutter: 0.07cm)
#let versetable = table.with(
    columns: (1.1cm, 9.0cm, 3.0cm),
    align: start + top,
    stroke: none,
    row-gutter: 0.07cm)
#let placegloss = place.with(bottom, dx: -0.8cm)
#let indextable = table.with(
    columns: (90%, 10%),
    align: (start + top, end + top),
    stroke: none,
    inset: 0%,
    column-gutter: 0cm,
    row-gutter: 0.225cm)

#set par(justify: true, leading: 0.9em, spacing: 2em)
#set text(font: "IFAO-Grec Unicode", size: 12pt)
"""

VERSE_TABLE_OPEN = "\n#versetable(\n"


def escape_typst(s: str) -> str:
    for old, new in TYPST_REPLACEMENTS:
        s = s.replace(old, new)
    return s


def typst_string(s: str) -> str:
    """Quote `s` as a Typst string literal."""
    return '"' + s.replace("\\", "\\\\").replace('"', '\\"') + '"'


def _verse_row(speaker: str | None, line: str, number: str) -> str:
    if not line:
        return ""
    return f"[{escape_typst(speaker or '')}],\n[{line}],\n[{escape_typst(verse_number_label(number))}],\n\n"


class TypstSink:
    def __init__(self, running_head: str | None = None):
        # header of even pages; defaults to the book title
        self.running_head = running_head
        self._book_title = ""

    def _header(self, odd_title: str) -> str:
        even_title = self.running_head if self.running_head is not None else self._book_title
        return (
            "\n#set page(header: context {\n"
            "  if calc.odd(counter(page).get().first()) {\n"
            f"    align(right, {typst_string(odd_title)})\n"
            "  } else {\n"
            f"    align(left, {typst_string(even_title)})\n"
            "  }\n"
            "})\n"
        )

    def document_start(self, title: str, start_page: int) -> str:
        self._book_title = title
        return PREAMBLE.replace("%START_PAGE%", str(start_page)) + self._header(title)

    def document_end(self) -> str:
        return "\n"

    def page_start(self, title: str, page_number: int) -> str:
        return f"\n// page {page_number}" + self._header(title)

    def page_end(self) -> str:
        return "\n)\n]\n\n#pagebreak()\n"

    def gloss_list_start(self) -> str:
        return "\n#placegloss()[\n#glosstable(\n"

    def blank_page(self) -> str:
        return "\n#pagebreak()\n"

    def running_text(self, occurrences: list[GlossOccurrence], appcrits: dict[str, str]) -> str:
        out: list[str] = []
        page_appcrits: list[str] = []
        after_opening = True
        in_verse = False
        verse_speaker: str | None = None
        verse_line = ""
        verse_number = ""

        for o in occurrences:
            w = o.word
            if w.word_id in appcrits:
                page_appcrits.append(appcrits[w.word_id])

            match w.kind:
                case WordKind.VERSE_LINE:
                    if in_verse:
                        out.append(_verse_row(verse_speaker, verse_line, verse_number))
                        verse_speaker = None
                        verse_line = ""
                    else:
                        out.append(VERSE_TABLE_OPEN)
                        in_verse = True
                    verse_number = w.text
                    after_opening = True
                case WordKind.WORD | WordKind.PUNCTUATION:
                    space = " " if needs_space(w.text, after_opening) else ""
                    token = space + escape_typst(w.text)
                    if in_verse:
                        verse_line += token
                    else:
                        out.append(token)
                    after_opening = w.text in OPENING_BRACKETS
                case WordKind.WORK_TITLE:
                    out.append(f"\n#align(center)[{escape_typst(w.text)}]\n\\\n\\\n")
                case WordKind.SECTION_TITLE:
                    out.append(f"\\ #align(center)[{escape_typst(w.text)}] \\ ")
                case WordKind.PARA_WITH_INDENT:
                    out.append("\n\n#h(2em)\n")
                case WordKind.PARA_NO_INDENT:
                    out.append("\n\n")
                case WordKind.SECTION:
                    section, subsection = parse_section(w.text)
                    if subsection is None or subsection == "1":
                        out.append(
                            "#sidenote(format: it => text(size: 1.2em, it.default))"
                            f"[#strong[{escape_typst(section)}]] "
                        )
                    else:
                        out.append(f"#sidenote[{escape_typst(subsection)}] ")
                    after_opening = True
                case WordKind.SPEAKER:
                    # a speaker line interrupts the verse table
                    if in_verse:
                        out.append(_verse_row(verse_speaker, verse_line, verse_number))
                        verse_speaker = None
                        verse_line = ""
                        out.append(")")
                    out.append(escape_typst(w.text))
                    if in_verse:
                        out.append(VERSE_TABLE_OPEN)
                case WordKind.INLINE_SPEAKER | WordKind.INLINE_VERSE_SPEAKER:
                    if in_verse:
                        verse_speaker = w.text
                    else:
                        out.append(f"\n\n#strong[{escape_typst(w.text)}] ")
                case WordKind.DESC | WordKind.PAGE_BREAK | WordKind.INVALID_TYPE | None:
                    pass

        if in_verse:
            out.append(_verse_row(verse_speaker, verse_line, verse_number))
            out.append("\n)\n")
        else:
            out.append("\n\n")

        if page_appcrits:
            out.append("\n\n")
            out.extend(f"{escape_typst(note)} \\\n" for note in page_appcrits)
        return "".join(out)

    def gloss_entry(self, occurrence: GlossOccurrence, lemma: str | None) -> str:
        if occurrence.gloss is None or lemma is None:
            return ""
        match occurrence.state:
            case ArrowedState.INVISIBLE:
                return ""
            case ArrowedState.ARROWED:
                marker = "#strong[→]"
            case ArrowedState.VISIBLE:
                marker = ""
        return (
            f"[{marker}],\n"
            f"[#glosshang[{escape_typst(lemma)}]],\n"
            f"[#glossdef[{escape_typst(occurrence.gloss.definition)}]],\n\n"
        )

    def index(self, entries: list[ArrowedIndexEntry]) -> str:
        rows = "".join(
            f"[{escape_typst(e.lemma)} #box(width: 1fr, repeat[.])],"
            f"[#box(width: 1fr, repeat[.]) {e.page_number}],\n"
            for e in entries
        )
        return self._header("INDEX OF ARROWED WORDS") + "#indextable(\n" + rows + ")\n"
