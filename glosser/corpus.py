"""
Corpus records shared by every glosser tool.

A Corpus is produced once per run by the loader (load_corpus.py) and is never
mutated afterwards. The derived records at the bottom of this module
(GlossOccurrence, ArrowedIndexEntry) are created fresh by each
processing/assembly pass.

Error taxonomy lives here as well so that every tool raises and catches the
same classes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


# ---------------------------------------------------------------------------
# Word kinds
# ---------------------------------------------------------------------------

class WordKind(Enum):
    """Closed set of token kinds found in a text's word stream.

    Values are the numeric codes used in the corpus files.
    """

    WORD = 0
    PUNCTUATION = 1
    SPEAKER = 2
    SECTION = 4
    VERSE_LINE = 5            # verse line number marker
    PARA_WITH_INDENT = 6
    WORK_TITLE = 7
    SECTION_TITLE = 8
    INLINE_SPEAKER = 9
    PARA_NO_INDENT = 10
    PAGE_BREAK = 11           # unused: page breaks come from the page plan
    DESC = 12
    INVALID_TYPE = 13
    INLINE_VERSE_SPEAKER = 14

    @property
    def xml_name(self) -> str:
        return _KIND_XML_NAMES[self]

    @classmethod
    def parse(cls, raw: str) -> "WordKind":
        """Parse a kind from its file name ("VerseLine") or numeric code ("5")."""
        raw = raw.strip()
        if raw.isdigit():
            return cls(int(raw))
        for kind, name in _KIND_XML_NAMES.items():
            if name == raw:
                return kind
        raise ValueError(f"unknown word type '{raw}'")


_KIND_XML_NAMES = {
    WordKind.WORD: "Word",
    WordKind.PUNCTUATION: "Punctuation",
    WordKind.SPEAKER: "Speaker",
    WordKind.SECTION: "Section",
    WordKind.VERSE_LINE: "VerseLine",
    WordKind.PARA_WITH_INDENT: "ParaWithIndent",
    WordKind.WORK_TITLE: "WorkTitle",
    WordKind.SECTION_TITLE: "SectionTitle",
    WordKind.INLINE_SPEAKER: "InlineSpeaker",
    WordKind.PARA_NO_INDENT: "ParaNoIndent",
    WordKind.PAGE_BREAK: "PageBreak",
    WordKind.DESC: "Desc",
    WordKind.INVALID_TYPE: "InvalidType",
    WordKind.INLINE_VERSE_SPEAKER: "InlineVerseSpeaker",
}


class ArrowedState(Enum):
    VISIBLE = "visible"       # gloss not taught yet (or never arrowed)
    ARROWED = "arrowed"       # the one occurrence where the gloss is taught
    INVISIBLE = "invisible"   # gloss already taught earlier in the sequence


# ---------------------------------------------------------------------------
# Corpus records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Gloss:
    """One lemma/definition pair."""
    gloss_id: str
    lemma: str
    sort_key: str                 # unaccented form used for ordering
    definition: str
    pos: str = ""
    unit: int = 0
    note: str = ""
    updated: str = ""
    updated_user: str = ""
    status: int = 1               # 0 = retired
    parent_id: str | None = None  # declared, never checked

    @property
    def is_active(self) -> bool:
        return self.status != 0


@dataclass(frozen=True)
class Word:
    """One token of a text. kind=None means the kind was never set."""
    word_id: str
    text: str
    kind: WordKind | None
    gloss_id: str | None = None


@dataclass(frozen=True)
class ArrowAssignment:
    """The (word, gloss) pair where a gloss is taught."""
    word_id: str
    gloss_id: str


@dataclass
class Text:
    name: str
    words: list[Word] = field(default_factory=list)
    appcrits: dict[str, str] = field(default_factory=dict)  # word_id -> apparatus note
    display: bool = True
    page_plan: list[int] = field(default_factory=list)      # occurrences per page
    text_id: int = 0
    source_file: str = ""


@dataclass
class GlossSet:
    """A gloss file: the unit glosses are stored and edited in."""
    name: str
    glosses: list[Gloss] = field(default_factory=list)
    gloss_set_id: int = 0
    source_file: str = ""


@dataclass
class Corpus:
    title: str
    start_page: int
    texts: list[Text] = field(default_factory=list)
    gloss_sets: list[GlossSet] = field(default_factory=list)
    arrows: list[ArrowAssignment] = field(default_factory=list)
    sequence_id: int = 0

    @property
    def glosses(self) -> list[Gloss]:
        return [g for gs in self.gloss_sets for g in gs.glosses]

    def gloss_map(self) -> dict[str, Gloss]:
        return {g.gloss_id: g for g in self.glosses}

    def iter_words(self):
        """Yield (text, word) for every word in reading order."""
        for text in self.texts:
            for word in text.words:
                yield text, word


# ---------------------------------------------------------------------------
# Derived records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class GlossOccurrence:
    """One word's resolved gloss state for a single processing pass."""
    word: Word
    gloss: Gloss | None
    position: int                     # global zero-based position in the sequence
    state: ArrowedState = ArrowedState.VISIBLE
    running_count: int | None = None  # 1-based, None for unglossed words
    total_count: int | None = None


@dataclass(frozen=True)
class ArrowedIndexEntry:
    """One line of the back-of-book index of arrowed words."""
    lemma: str
    sort_key: str
    page_number: int


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class GlosserError(Exception):
    """Base class for every error raised by glosser tools."""


class CorpusLoadError(GlosserError):
    """A corpus file exists but could not be parsed."""


class CorpusNotFoundError(CorpusLoadError):
    """A sequence, gloss or text file (or its contents) is missing."""


class VerificationFailure(str, Enum):
    """Referential-integrity failures, reported one at a time."""

    ARROWED_WORD_TWICE = "ARROWED_WORD_TWICE"
    ARROWED_GLOSS_TWICE = "ARROWED_GLOSS_TWICE"
    DUPLICATE_WORD_ID = "DUPLICATE_WORD_ID"
    NON_WORD_GLOSSED = "NON_WORD_GLOSSED"
    GLOSS_REFERENCE_INVALID = "GLOSS_REFERENCE_INVALID"
    NON_WORD_ARROWED = "NON_WORD_ARROWED"
    ARROWED_GLOSS_MISMATCH = "ARROWED_GLOSS_MISMATCH"    # unset or different
    ARROWED_GLOSS_NOT_FOUND = "ARROWED_GLOSS_NOT_FOUND"
    ARROWED_GLOSS_INVALID = "ARROWED_GLOSS_INVALID"
    ARROWED_WORD_NOT_FOUND = "ARROWED_WORD_NOT_FOUND"
    # Declared for parent_id integrity; verify_corpus never raises it.
    GLOSS_PARENT_INVALID = "GLOSS_PARENT_INVALID"


class VerificationError(GlosserError):
    """The corpus violates an integrity invariant."""

    def __init__(self, kind: VerificationFailure, detail: str, ids: tuple[str, ...] = ()):
        super().__init__(f"[{kind.value}] {detail}")
        self.kind = kind
        self.detail = detail
        self.ids = ids
