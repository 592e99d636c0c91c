#!/usr/bin/env python3
"""Referential-integrity check for a glossing corpus.

Checks, in this order (first failure wins):
  1. No word is the target of two arrow assignments
  2. No gloss is arrowed twice
  3. Word ids are unique across all texts
  4. Only WordKind.WORD words carry a gloss reference
  5. Every gloss reference resolves to a gloss with status != 0
  6. Arrowed words are WordKind.WORD
  7. Arrowed words carry a gloss reference ...
  8. ... equal to the assignment's gloss
  9. The assignment's gloss exists
 10. ... and has status != 0
 11. Every declared assignment was found in some text

Gloss parent_id integrity is declared (GLOSS_PARENT_INVALID) but not checked.

Usage:
  glosser-verify sequence.xml [--report verify_report.json]
"""

from __future__ import annotations

import argparse
import json
import sys

from glosser.corpus import (
    ArrowAssignment,
    Corpus,
    CorpusLoadError,
    Gloss,
    VerificationError,
    VerificationFailure,
    WordKind,
)
from glosser.load_corpus import load_sequence


def check_arrow_uniqueness(arrows: list[ArrowAssignment]) -> dict[str, str]:
    """Reject duplicate arrow word/gloss ids. Returns word_id -> gloss_id."""
    seen_words: set[str] = set()
    seen_glosses: set[str] = set()
    for a in arrows:
        if a.word_id in seen_words:
            raise VerificationError(
                VerificationFailure.ARROWED_WORD_TWICE,
                f"duplicate word_id in arrowed words {a.word_id}",
                (a.word_id,),
            )
        seen_words.add(a.word_id)
        if a.gloss_id in seen_glosses:
            raise VerificationError(
                VerificationFailure.ARROWED_GLOSS_TWICE,
                f"duplicate gloss_id in arrowed words {a.gloss_id}",
                (a.gloss_id,),
            )
        seen_glosses.add(a.gloss_id)
    return {a.word_id: a.gloss_id for a in arrows}


def _describe(gloss: Gloss | None, gloss_id: str) -> str:
    if gloss is None:
        return f"{gloss_id} (missing)"
    return f"{gloss_id} ({gloss.lemma}, status {gloss.status})"


def verify_corpus(corpus: Corpus) -> None:
    """Raise VerificationError on the first violated invariant."""
    glosses = corpus.gloss_map()
    arrowed = check_arrow_uniqueness(corpus.arrows)

    seen_words: set[str] = set()
    found_arrows = 0

    for text, w in corpus.iter_words():
        if w.word_id in seen_words:
            raise VerificationError(
                VerificationFailure.DUPLICATE_WORD_ID,
                f"duplicate word id found in text {text.name}, word {w.word_id}",
                (w.word_id,),
            )
        seen_words.add(w.word_id)

        if w.gloss_id is not None:
            if w.kind is not WordKind.WORD:
                raise VerificationError(
                    VerificationFailure.NON_WORD_GLOSSED,
                    f"non-word type is glossed: text: {text.name}, word: {w.word_id}",
                    (w.word_id,),
                )
            gloss = glosses.get(w.gloss_id)
            if gloss is None:
                raise VerificationError(
                    VerificationFailure.GLOSS_REFERENCE_INVALID,
                    f"gloss {w.gloss_id} set for word {w.word_id} does not exist in gloss",
                    (w.gloss_id, w.word_id),
                )
            if not gloss.is_active:
                raise VerificationError(
                    VerificationFailure.GLOSS_REFERENCE_INVALID,
                    f"gloss {w.gloss_id} set for word {w.word_id} has status == 0",
                    (w.gloss_id, w.word_id),
                )

        arrow_gloss_id = arrowed.get(w.word_id)
        if arrow_gloss_id is None:
            continue
        found_arrows += 1

        if w.kind is not WordKind.WORD:
            raise VerificationError(
                VerificationFailure.NON_WORD_ARROWED,
                f"non-word type is arrowed: {w.word_id}",
                (w.word_id,),
            )
        if w.gloss_id is None:
            raise VerificationError(
                VerificationFailure.ARROWED_GLOSS_MISMATCH,
                f"arrowed word has no gloss set: {w.word_id}",
                (w.word_id,),
            )
        if w.gloss_id != arrow_gloss_id:
            raise VerificationError(
                VerificationFailure.ARROWED_GLOSS_MISMATCH,
                f"arrow gloss doesn't match text's gloss for word {w.word_id} '{w.text}': "
                f"text has {_describe(glosses.get(w.gloss_id), w.gloss_id)}, "
                f"arrow has {_describe(glosses.get(arrow_gloss_id), arrow_gloss_id)}",
                (w.word_id, w.gloss_id, arrow_gloss_id),
            )
        arrow_gloss = glosses.get(arrow_gloss_id)
        if arrow_gloss is None:
            raise VerificationError(
                VerificationFailure.ARROWED_GLOSS_NOT_FOUND,
                f"arrowed gloss id does not exist in gloss: {arrow_gloss_id}",
                (arrow_gloss_id,),
            )
        if not arrow_gloss.is_active:
            raise VerificationError(
                VerificationFailure.ARROWED_GLOSS_INVALID,
                f"gloss with status 0 is arrowed: {arrow_gloss_id}",
                (arrow_gloss_id,),
            )

    if found_arrows != len(arrowed):
        missing = sorted(set(arrowed) - seen_words)
        raise VerificationError(
            VerificationFailure.ARROWED_WORD_NOT_FOUND,
            f"didn't find correct number of arrowed words; arrowed: {len(arrowed)}, "
            f"found in texts: {found_arrows}",
            tuple(missing),
        )


def main(argv=None):
    parser = argparse.ArgumentParser(description="Verify referential integrity of a glossing corpus.")
    parser.add_argument("sequence", help="Path to the sequence XML file")
    parser.add_argument("--report", help="Write verification report JSON to this path")
    args = parser.parse_args(argv)

    try:
        corpus = load_sequence(args.sequence)
    except CorpusLoadError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2

    word_count = sum(len(t.words) for t in corpus.texts)
    print(f"Verifying: {len(corpus.texts)} texts, {word_count} words, "
          f"{len(corpus.glosses)} glosses, {len(corpus.arrows)} arrowed words")

    failure = None
    try:
        verify_corpus(corpus)
    except VerificationError as e:
        failure = e

    if failure is None:
        print("✓ All checks passed")
    else:
        print(f"✗ {failure.kind.value}: {failure.detail}")

    if args.report:
        report = {
            "valid": failure is None,
            "failure": failure.kind.value if failure else None,
            "detail": failure.detail if failure else None,
            "ids": list(failure.ids) if failure else [],
            "text_count": len(corpus.texts),
            "word_count": word_count,
            "gloss_count": len(corpus.glosses),
            "arrow_count": len(corpus.arrows),
        }
        with open(args.report, "w", encoding="utf-8") as f:
            json.dump(report, f, ensure_ascii=False, indent=2)
        print(f"\nReport written to {args.report}")

    return 0 if failure is None else 1


if __name__ == "__main__":
    sys.exit(main())
