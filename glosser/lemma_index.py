#!/usr/bin/env python3
"""Ordered lemma index for "glosses near this key" lookups.

Active glosses (status != 0) are kept in ascending order of their case-folded
sort key; glosses sharing a key are ordered by gloss id and all kept.

Usage:
  glosser-lookup sequence.xml KEY [-n 5]
"""

from __future__ import annotations

import argparse
import bisect
import sys

from glosser.corpus import CorpusLoadError, Gloss
from glosser.greek_text import fold_sort_key
from glosser.load_corpus import load_sequence


class LemmaIndex:
    def __init__(self, glosses: list[Gloss]):
        active = [g for g in glosses if g.is_active]
        active.sort(key=lambda g: (fold_sort_key(g.sort_key), g.gloss_id))
        self._glosses = active
        self._keys = [fold_sort_key(g.sort_key) for g in active]

    def __len__(self) -> int:
        return len(self._glosses)

    def lookup(self, key: str, n: int) -> tuple[list[Gloss], str | None]:
        """Up to n-1 glosses before `key` plus up to n at or after it.

        Returns (glosses in ascending order, gloss id of the first entry at or
        after `key`, or None when `key` sorts after everything).
        """
        if n < 1:
            raise ValueError(f"n must be at least 1, got {n}")
        i = bisect.bisect_left(self._keys, fold_sort_key(key))
        before = self._glosses[max(0, i - (n - 1)):i]
        after = self._glosses[i:i + n]
        selected = after[0].gloss_id if after else None
        return before + after, selected


def main(argv=None):
    parser = argparse.ArgumentParser(description="Show glosses around a sort key.")
    parser.add_argument("sequence", help="Path to the sequence XML file")
    parser.add_argument("key", help="Sort key (or prefix) to look up")
    parser.add_argument("-n", type=int, default=5, help="Entries at or after the key (default: 5)")
    args = parser.parse_args(argv)

    try:
        corpus = load_sequence(args.sequence)
    except CorpusLoadError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2

    index = LemmaIndex(corpus.glosses)
    try:
        glosses, selected = index.lookup(args.key, args.n)
    except ValueError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2

    for g in glosses:
        marker = ">" if g.gloss_id == selected else " "
        print(f"{marker} {g.lemma}  ({g.pos})  {g.definition}  [{g.gloss_id}]")
    if selected is None:
        print(f"(no gloss at or after '{args.key}')")
    return 0


if __name__ == "__main__":
    sys.exit(main())
