"""
HTML render sink: a single-file review copy of the book.

Pages are <div class='Page'> blocks holding the running text, the apparatus
notes for words on the page and the gloss list. Arrowed rows carry the
'arrowedHere' class, rows for glosses taught earlier 'alreadyArrowed'.
"""

from __future__ import annotations

from html import escape

from glosser.corpus import ArrowedIndexEntry, ArrowedState, GlossOccurrence, WordKind
from glosser.text_layout import OPENING_BRACKETS, needs_space, parse_section, verse_number_label

# inline tags allowed in corpus text
MARKUP_TAGS = ["b", "i", "sup"]

STYLE = """
    BODY { font-family: "IFAO-Grec Unicode", "New Athena Unicode", helvetica, arial;
           width: 800px; margin: 20px auto; line-height: 1.5; }
    .Page { border-top: 2px solid black; position: relative; }
    .PageTitle { margin-bottom: 20px; }
    .WorkTitle { margin-bottom: 20px; }
    .SectionTitle { text-align: center; margin: 10px 0px; }
    .Section { margin-top: 0px; position: absolute; left: -50px; }
    .SubSection { margin-top: 20px; position: absolute; left: -50px; }
    .VerseLine { display: flex; position: relative; left: 60px; }
    .VerseSpeaker { width: 60px; }
    .VerseText { width: 360px; }
    .AppCritDiv { margin: 20px 0px; }
    .gloss-table { border-top: 2px solid red; margin: 20px 0px; }
    .listposwrapper { display: none; }
    .arrowedHere .listheadword { font-weight: bold; }
    .alreadyArrowed { color: #888; }
    .InlineSpeaker { font-weight: bold; }
    .ParaIndented { text-indent: 50px; }
    .Index { border-top: 2px solid black; }
    .IndexEntry { display: flex; justify-content: space-between; }
    .BlankPage { border-top: 2px dashed #ccc; height: 20px; }
"""


def escape_html(s: str) -> str:
    """Escape `s`, keeping the corpus inline tags as real markup."""
    s = escape(s)
    for tag in MARKUP_TAGS:
        s = s.replace(f"&lt;{tag}&gt;", f"<{tag}>").replace(f"&lt;/{tag}&gt;", f"</{tag}>")
    return s


def _verse_line(speaker: str | None, line: str, number: str) -> str:
    return (
        "<div class='VerseLine'>"
        f"<div class='VerseSpeaker'>{escape_html(speaker or '')}</div>"
        f"<div class='VerseText'>{line}</div>"
        f"<div class='VerseLineNumber'>{escape(verse_number_label(number))}</div>"
        "</div>\n"
    )


class HtmlSink:
    def document_start(self, title: str, start_page: int) -> str:
        return (
            "<!DOCTYPE html>\n<html lang=\"en\">\n<head>\n"
            "<meta charset=\"UTF-8\">\n"
            f"<title>{escape(title)}</title>\n"
            f"<style>{STYLE}</style>\n"
            "</head>\n<body>\n"
            f"<h1 class='BookTitle' data-start-page='{start_page}'>{escape(title)}</h1>\n"
        )

    def document_end(self) -> str:
        return "\n</body></html>\n"

    def page_start(self, title: str, page_number: int) -> str:
        return (
            "\n<!--PAGE START-->\n<div class='Page'>\n"
            f"<div class='PageTitle'>{escape(title)} - Page {page_number}</div>\n"
        )

    def page_end(self) -> str:
        return "\n</div><!--Gloss table end-->\n</div><!--END PAGE-->\n"

    def gloss_list_start(self) -> str:
        return "<div class='gloss-table'>\n"

    def blank_page(self) -> str:
        return "\n<!--BLANK PAGE-->\n<div class='BlankPage'></div>\n"

    def running_text(self, occurrences: list[GlossOccurrence], appcrits: dict[str, str]) -> str:
        out: list[str] = []
        page_appcrits: list[str] = []
        after_opening = True
        in_verse = False
        verse_speaker: str | None = None
        verse_line = ""
        verse_number = ""
        para_open = False

        for o in occurrences:
            w = o.word
            if w.word_id in appcrits:
                page_appcrits.append(appcrits[w.word_id])

            match w.kind:
                case WordKind.VERSE_LINE:
                    if in_verse:
                        out.append(_verse_line(verse_speaker, verse_line, verse_number))
                        verse_speaker = None
                        verse_line = ""
                    in_verse = True
                    verse_number = w.text
                    after_opening = True
                case WordKind.WORD | WordKind.PUNCTUATION:
                    space = " " if needs_space(w.text, after_opening) else ""
                    span = f"<span id='word{escape(w.word_id)}' class='textword'>{space}{escape_html(w.text)}</span>"
                    if in_verse:
                        verse_line += span
                    else:
                        out.append(span)
                    after_opening = w.text in OPENING_BRACKETS
                case WordKind.WORK_TITLE:
                    out.append(f"<div class='WorkTitle'>{escape_html(w.text)}</div>\n")
                case WordKind.SECTION_TITLE:
                    out.append(f"<div class='SectionTitle'>{escape_html(w.text)}</div>\n")
                case WordKind.PARA_WITH_INDENT | WordKind.PARA_NO_INDENT:
                    if para_open:
                        out.append("\n</div>\n")
                    para_open = True
                    css = "ParaIndented" if w.kind is WordKind.PARA_WITH_INDENT else "ParaNotIndented"
                    out.append(f"\n<div class='{css}'>\n")
                case WordKind.SECTION:
                    section, subsection = parse_section(w.text)
                    if subsection is None or subsection == "1":
                        out.append(f"<div class='Section'>{escape(section)}</div>\n")
                    else:
                        out.append(f"<div class='SubSection'>{escape(subsection)}</div>\n")
                    after_opening = True
                case WordKind.SPEAKER:
                    out.append(f"<span class='Speaker'>{escape_html(w.text)}</span> ")
                case WordKind.INLINE_SPEAKER | WordKind.INLINE_VERSE_SPEAKER:
                    if in_verse:
                        verse_speaker = w.text
                    else:
                        out.append(f" <span class='InlineSpeaker'>{escape_html(w.text)}</span> ")
                case WordKind.DESC | WordKind.PAGE_BREAK | WordKind.INVALID_TYPE | None:
                    pass

        if in_verse:
            out.append(_verse_line(verse_speaker, verse_line, verse_number))
        if para_open:
            out.append("\n</div>\n")

        if page_appcrits:
            out.append("<div class='AppCritDiv'>\n")
            for note in page_appcrits:
                out.append(f"<div class='appcrit'>{escape_html(note)}</div>\n")
            out.append("</div>\n")
        return "".join(out)

    def gloss_entry(self, occurrence: GlossOccurrence, lemma: str | None) -> str:
        gloss = occurrence.gloss
        gloss_id = gloss.gloss_id if gloss else ""
        pos = gloss.pos if gloss else ""
        definition = gloss.definition if gloss else ""
        headword = lemma if lemma is not None else occurrence.word.text
        word_id = escape(occurrence.word.word_id)

        match occurrence.state:
            case ArrowedState.ARROWED:
                state_class = " arrowedHere"
            case ArrowedState.INVISIBLE:
                state_class = " alreadyArrowed"
            case ArrowedState.VISIBLE:
                state_class = ""

        counts = ""
        if gloss is not None:
            counts = f" <span class='listfrequency'>({occurrence.running_count or 0} of {occurrence.total_count or 0})</span>"

        return (
            f"<div id='word{word_id}' lemmaid='{escape(gloss_id)}' class='listword{state_class}'>"
            f"<span class='listheadword'>{escape_html(headword)}</span>. "
            f"<span class='listposwrapper'>(<span class='listpos'>{escape(pos)}</span>)</span> "
            f"<span class='listdef'>{escape_html(definition)}</span>"
            f"{counts}</div>\n"
        )

    def index(self, entries: list[ArrowedIndexEntry]) -> str:
        rows = "".join(
            f"<div class='IndexEntry'><span class='IndexLemma'>{escape_html(e.lemma)}</span>"
            f"<span class='IndexPage'>{e.page_number}</span></div>\n"
            for e in entries
        )
        return (
            "\n<!--INDEX-->\n<div class='Index'>\n"
            "<div class='PageTitle'>Index of arrowed words</div>\n"
            f"{rows}</div>\n"
        )
