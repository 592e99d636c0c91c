#!/usr/bin/env python3
"""
Tests for the XML corpus loader (glosser/load_corpus.py)

Run: python -m pytest tests/test_load_corpus.py -q
"""

from pathlib import Path

import pytest

from glosser.corpus import (
    ArrowAssignment,
    CorpusLoadError,
    CorpusNotFoundError,
    WordKind,
)
from glosser.load_corpus import load_sequence, parse_display, parse_page_plan, save_sequence


# ---------------------------------------------------------------------------
# Test data helpers
# ---------------------------------------------------------------------------

SEQUENCE_XML = """\
<?xml version="1.0" encoding="utf-8"?>
<sequence>
  <sequence_id>4</sequence_id>
  <name>Readings</name>
  <start_page>3</start_page>
  <gloss_names>glosses.xml</gloss_names>
  <texts>
    <text display="false">{first}</text>
    <text>second.xml</text>
  </texts>
  <arrowed_words>
    <arrow gloss_uuid="g1" word_uuid="w2"/>
  </arrowed_words>
</sequence>
"""

GLOSSES_XML = """\
<?xml version="1.0" encoding="utf-8"?>
<glosses gloss_id="2" gloss_name="Core">
  <gloss uuid="g1">
    <lemma>logos</lemma>
    <sort_alpha>logos</sort_alpha>
    <gloss>word, speech</gloss>
    <pos>noun</pos>
    <unit>3</unit>
    <note>common</note>
    <updated>2024-01-01</updated>
    <status>1</status>
    <updated_user>ed</updated_user>
  </gloss>
  <gloss uuid="g2" parent_uuid="g1">
    <lemma>legein</lemma>
    <sort_alpha>legein</sort_alpha>
    <gloss>to say</gloss>
    <status>0</status>
  </gloss>
</glosses>
"""

FIRST_XML = """\
<?xml version="1.0" encoding="utf-8"?>
<text text_id="11" text_name="First">
  <words>
    <word uuid="w1" type="WorkTitle">Title</word>
    <word uuid="w2" gloss_uuid="g1" type="0">logos</word>
    <word uuid="w3" type="Punctuation">.</word>
    <word uuid="w4">untyped</word>
  </words>
  <appcrits>
    <appcrit word_uuid="w2">logos] lógos MS</appcrit>
  </appcrits>
  <words_per_page>2, x,2</words_per_page>
</text>
"""

SECOND_XML = """\
<?xml version="1.0" encoding="utf-8"?>
<text text_id="12" text_name="Second">
  <words>
    <word uuid="w5" gloss_uuid="g1" type="Word">logon</word>
  </words>
</text>
"""


def _write_corpus(tmp_path, first_name="first.xml", first_xml=FIRST_XML, glosses_xml=GLOSSES_XML):
    (tmp_path / "glosses.xml").write_text(glosses_xml, encoding="utf-8")
    (tmp_path / "second.xml").write_text(SECOND_XML, encoding="utf-8")
    if first_xml is not None:
        (tmp_path / first_name).write_text(first_xml, encoding="utf-8")
    seq = tmp_path / "sequence.xml"
    seq.write_text(SEQUENCE_XML.format(first=first_name), encoding="utf-8")
    return seq


# ---------------------------------------------------------------------------
# Field parsing
# ---------------------------------------------------------------------------

class TestFieldParsing:
    def test_page_plan_ignores_non_numeric(self):
        assert parse_page_plan("120, 95,x,,110") == [120, 95, 110]

    def test_empty_page_plan(self):
        assert parse_page_plan("") == []

    def test_display_defaults_true(self):
        assert parse_display(None) is True
        assert parse_display("false") is False
        assert parse_display("true") is True


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------

class TestLoadSequence:
    def test_sequence_fields(self, tmp_path):
        corpus = load_sequence(_write_corpus(tmp_path))
        assert corpus.title == "Readings"
        assert corpus.start_page == 3
        assert corpus.sequence_id == 4
        assert corpus.arrows == [ArrowAssignment(word_id="w2", gloss_id="g1")]

    def test_texts_in_order_with_display_flag(self, tmp_path):
        corpus = load_sequence(_write_corpus(tmp_path))
        assert [(t.name, t.display, t.text_id) for t in corpus.texts] == [
            ("First", False, 11), ("Second", True, 12),
        ]

    def test_word_kinds_by_name_code_and_absent(self, tmp_path):
        words = load_sequence(_write_corpus(tmp_path)).texts[0].words
        assert [w.kind for w in words] == [
            WordKind.WORK_TITLE, WordKind.WORD, WordKind.PUNCTUATION, None,
        ]
        assert words[1].gloss_id == "g1"
        assert words[0].gloss_id is None

    def test_appcrits_and_page_plan(self, tmp_path):
        text = load_sequence(_write_corpus(tmp_path)).texts[0]
        assert text.appcrits == {"w2": "logos] lógos MS"}
        assert text.page_plan == [2, 2]

    def test_gloss_records(self, tmp_path):
        corpus = load_sequence(_write_corpus(tmp_path))
        gs = corpus.gloss_sets[0]
        assert (gs.name, gs.gloss_set_id, gs.source_file) == ("Core", 2, "glosses.xml")
        g1, g2 = corpus.glosses
        assert (g1.lemma, g1.definition, g1.pos, g1.unit, g1.note) == (
            "logos", "word, speech", "noun", 3, "common",
        )
        assert g1.updated_user == "ed"
        assert g2.parent_id == "g1"
        assert g2.status == 0
        assert not g2.is_active

    def test_paths_relative_to_sequence(self, tmp_path, monkeypatch):
        seq = _write_corpus(tmp_path)
        monkeypatch.chdir(tmp_path.parent)
        assert len(load_sequence(Path(tmp_path.name) / seq.name).texts) == 2


class TestLoadErrors:
    def test_missing_sequence(self, tmp_path):
        with pytest.raises(CorpusNotFoundError):
            load_sequence(tmp_path / "missing.xml")

    def test_missing_text_file(self, tmp_path):
        seq = _write_corpus(tmp_path, first_xml=None)
        with pytest.raises(CorpusNotFoundError, match="Text not found"):
            load_sequence(seq)

    def test_malformed_xml(self, tmp_path):
        seq = _write_corpus(tmp_path, first_xml="<text><words>")
        with pytest.raises(CorpusLoadError) as exc_info:
            load_sequence(seq)
        assert not isinstance(exc_info.value, CorpusNotFoundError)

    def test_unknown_word_type(self, tmp_path):
        bad = FIRST_XML.replace('type="Punctuation"', 'type="Footnote"')
        with pytest.raises(CorpusLoadError, match="unknown word type"):
            load_sequence(_write_corpus(tmp_path, first_xml=bad))

    def test_non_integer_unit(self, tmp_path):
        bad = GLOSSES_XML.replace("<unit>3</unit>", "<unit>three</unit>")
        with pytest.raises(CorpusLoadError, match="not an integer"):
            load_sequence(_write_corpus(tmp_path, glosses_xml=bad))

    def test_sequence_without_texts(self, tmp_path):
        (tmp_path / "glosses.xml").write_text(GLOSSES_XML, encoding="utf-8")
        seq = tmp_path / "sequence.xml"
        seq.write_text(
            "<sequence><name>x</name><start_page>1</start_page>"
            "<gloss_names>glosses.xml</gloss_names></sequence>",
            encoding="utf-8",
        )
        with pytest.raises(CorpusNotFoundError):
            load_sequence(seq)


# ---------------------------------------------------------------------------
# Saving
# ---------------------------------------------------------------------------

class TestSaveSequence:
    def test_round_trip(self, tmp_path):
        in_dir = tmp_path / "in"
        in_dir.mkdir()
        corpus = load_sequence(_write_corpus(in_dir))
        seq = save_sequence(corpus, tmp_path / "out")
        assert seq == tmp_path / "out" / "sequence.xml"
        assert load_sequence(seq) == corpus

    def test_unnamed_files_get_default_names(self, tmp_path):
        corpus = load_sequence(_write_corpus(tmp_path))
        for t in corpus.texts:
            t.source_file = ""
        for gs in corpus.gloss_sets:
            gs.source_file = ""
        save_sequence(corpus, tmp_path / "out")
        names = sorted(p.name for p in (tmp_path / "out").iterdir())
        assert names == ["glosses_1.xml", "sequence.xml", "text_1.xml", "text_2.xml"]
