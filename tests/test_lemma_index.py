#!/usr/bin/env python3
"""
Tests for the ordered lemma index (glosser/lemma_index.py)

Run: python -m pytest tests/test_lemma_index.py -q
"""

import pytest

from glosser.corpus import ArrowAssignment, Corpus, Gloss, GlossSet, Text, Word, WordKind
from glosser.lemma_index import LemmaIndex, main
from glosser.load_corpus import save_sequence


def _gloss(gloss_id: str, sort_key: str, status: int = 1) -> Gloss:
    return Gloss(gloss_id=gloss_id, lemma=sort_key, sort_key=sort_key, definition="d", status=status)


def _index() -> LemmaIndex:
    return LemmaIndex([
        _gloss("5", "epsilon"),
        _gloss("1", "alpha"),
        _gloss("3", "Gamma"),
        _gloss("2", "beta"),
        _gloss("4", "delta"),
        _gloss("9", "zeta", status=0),
    ])


def _keys(glosses):
    return [g.sort_key for g in glosses]


class TestLookup:
    def test_retired_glosses_excluded(self):
        assert len(_index()) == 5

    def test_window_around_existing_key(self):
        glosses, selected = _index().lookup("gamma", 2)
        # ascending case-folded order: alpha beta delta epsilon gamma
        assert _keys(glosses) == ["epsilon", "Gamma"]
        assert selected == "3"

    def test_window_in_the_middle(self):
        glosses, selected = _index().lookup("c", 2)
        assert _keys(glosses) == ["beta", "delta", "epsilon"]
        assert selected == "4"

    def test_start_of_index(self):
        glosses, selected = _index().lookup("a", 3)
        assert _keys(glosses) == ["alpha", "beta", "delta"]
        assert selected == "1"

    def test_past_the_end(self):
        glosses, selected = _index().lookup("omega", 2)
        assert _keys(glosses) == ["Gamma"]
        assert selected is None

    def test_case_insensitive_key(self):
        _, selected = _index().lookup("BETA", 1)
        assert selected == "2"

    def test_n_one_returns_single_entry(self):
        glosses, _ = _index().lookup("delta", 1)
        assert _keys(glosses) == ["delta"]

    def test_duplicate_keys_all_kept(self):
        index = LemmaIndex([_gloss("b", "same"), _gloss("a", "same")])
        glosses, selected = index.lookup("same", 5)
        assert [g.gloss_id for g in glosses] == ["a", "b"]
        assert selected == "a"

    def test_n_zero_rejected(self):
        with pytest.raises(ValueError):
            _index().lookup("a", 0)


class TestLookupCli:
    def test_prints_window_with_marker(self, tmp_path, capsys):
        corpus = Corpus(
            title="T",
            start_page=1,
            texts=[Text(name="t", words=[Word("w1", "x", WordKind.WORD, "1")])],
            gloss_sets=[GlossSet(name="g", glosses=[_gloss("1", "alpha"), _gloss("2", "beta")])],
            arrows=[ArrowAssignment("w1", "1")],
        )
        seq = save_sequence(corpus, tmp_path)
        assert main([str(seq), "beta", "-n", "2"]) == 0
        lines = capsys.readouterr().out.splitlines()
        assert lines[0].startswith("  alpha")
        assert lines[1].startswith("> beta")

    def test_bad_n_exit_two(self, tmp_path):
        corpus = Corpus(
            title="T",
            start_page=1,
            texts=[Text(name="t", words=[Word("w1", "x", WordKind.WORD)])],
            gloss_sets=[GlossSet(name="g", glosses=[_gloss("1", "alpha")])],
        )
        seq = save_sequence(corpus, tmp_path)
        assert main([str(seq), "alpha", "-n", "0"]) == 2
