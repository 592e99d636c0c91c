"""
Arrowed-state computation over the whole reading sequence.

Every word of every text (displayed or not) is visited once, in corpus order,
and given a global zero-based position. Per gloss we keep a GlossTally
{count, arrow_position}; the arrow position is only meaningful relative to
that single total order, so the walk cannot be split per text.

State of an occurrence, decided against the tally *before* it is updated:
  - the gloss was already arrowed at an earlier position  -> INVISIBLE
  - this word is the gloss's arrow target                 -> ARROWED
  - otherwise                                             -> VISIBLE

Total counts are only known after the walk, so a second pass fills them in.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from glosser.corpus import (
    ArrowedState,
    Corpus,
    CorpusNotFoundError,
    GlossOccurrence,
)
from glosser.verify_corpus import verify_corpus


@dataclass(frozen=True)
class GlossTally:
    count: int = 0
    arrow_position: int | None = None


def classify_occurrence(prior: GlossTally | None, position: int, arrow_here: bool) -> ArrowedState:
    """State of the occurrence at `position` given the gloss's tally so far."""
    if prior is not None and prior.arrow_position is not None and prior.arrow_position < position:
        return ArrowedState.INVISIBLE
    if arrow_here:
        return ArrowedState.ARROWED
    return ArrowedState.VISIBLE


def advance_tally(prior: GlossTally | None, position: int, arrow_here: bool) -> GlossTally:
    """Count one more occurrence; the arrow position is set once and kept."""
    prior = prior or GlossTally()
    arrow_position = prior.arrow_position
    if arrow_position is None and arrow_here:
        arrow_position = position
    return GlossTally(count=prior.count + 1, arrow_position=arrow_position)


def process_corpus(corpus: Corpus) -> list[list[GlossOccurrence]]:
    """Resolve every word of the corpus into a GlossOccurrence.

    Returns one list per text, index-aligned with corpus.texts. Raises the
    verifier's VerificationError untouched if the corpus is inconsistent.
    """
    if not corpus.texts or not corpus.glosses:
        raise CorpusNotFoundError("Gloss or texts not found")

    verify_corpus(corpus)

    glosses = corpus.gloss_map()
    arrowed = {a.word_id: a.gloss_id for a in corpus.arrows}

    tallies: dict[str, GlossTally] = {}
    per_text: list[list[GlossOccurrence]] = []
    position = 0

    for text in corpus.texts:
        text_occurrences = []
        for w in text.words:
            gloss = glosses.get(w.gloss_id) if w.gloss_id is not None else None
            if gloss is None:
                text_occurrences.append(GlossOccurrence(word=w, gloss=None, position=position))
                position += 1
                continue

            arrow_here = arrowed.get(w.word_id) == gloss.gloss_id
            prior = tallies.get(gloss.gloss_id)
            state = classify_occurrence(prior, position, arrow_here)
            tally = advance_tally(prior, position, arrow_here)
            tallies[gloss.gloss_id] = tally

            text_occurrences.append(GlossOccurrence(
                word=w,
                gloss=gloss,
                position=position,
                state=state,
                running_count=tally.count,
            ))
            position += 1
        per_text.append(text_occurrences)

    return [
        [
            replace(o, total_count=tallies[o.gloss.gloss_id].count) if o.gloss is not None else o
            for o in text_occurrences
        ]
        for text_occurrences in per_text
    ]


def gloss_totals(occurrences: list[list[GlossOccurrence]]) -> dict[str, int]:
    """Final occurrence count per gloss id."""
    totals: dict[str, int] = {}
    for text_occurrences in occurrences:
        for o in text_occurrences:
            if o.gloss is not None:
                totals[o.gloss.gloss_id] = o.total_count or 0
    return totals
