#!/usr/bin/env python3
"""
Tests for the build CLI (glosser/build_book.py)

Run: python -m pytest tests/test_build_book.py -q
"""

import json

from glosser.build_book import main
from glosser.corpus import ArrowAssignment, Corpus, Gloss, GlossSet, Text, Word, WordKind
from glosser.load_corpus import save_sequence


# ---------------------------------------------------------------------------
# Test data helpers
# ---------------------------------------------------------------------------

def _make_corpus(page_plan=(), arrows=(("w1", "g1"),), gloss_ref="g1") -> Corpus:
    words = [
        Word("w0", "[section]1.1", WordKind.SECTION),
        Word("w1", "logos", WordKind.WORD, gloss_ref),
        Word("w2", "kai", WordKind.WORD, "g2"),
        Word("w3", ".", WordKind.PUNCTUATION),
        Word("w4", "logon", WordKind.WORD, "g1"),
    ]
    return Corpus(
        title="Reader",
        start_page=1,
        texts=[Text(name="First", words=words, page_plan=list(page_plan))],
        gloss_sets=[GlossSet(name="core", glosses=[
            Gloss("g1", "logos", "logos", "word"),
            Gloss("g2", "kai", "kai", "and"),
        ])],
        arrows=[ArrowAssignment(w, g) for w, g in arrows],
    )


def _save(tmp_path, **kwargs):
    return save_sequence(_make_corpus(**kwargs), tmp_path / "corpus")


# ---------------------------------------------------------------------------
# Builds
# ---------------------------------------------------------------------------

class TestBuild:
    def test_typst_build_writes_output(self, tmp_path, capsys):
        seq = _save(tmp_path)
        out = tmp_path / "book.typ"
        assert main([str(seq), "--output", str(out)]) == 0
        text = out.read_text(encoding="utf-8")
        assert "#glosstable(" in text
        assert "#strong[→]" in text
        assert "Corpus verified" in capsys.readouterr().out

    def test_html_build_default_output_path(self, tmp_path):
        seq = _save(tmp_path)
        assert main([str(seq), "--format", "html"]) == 0
        assert seq.with_suffix(".html").exists()

    def test_summary_written(self, tmp_path):
        seq = _save(tmp_path, page_plan=[2, 3])
        summary_path = tmp_path / "summary.json"
        assert main([str(seq), "--output", str(tmp_path / "b.typ"), "--summary", str(summary_path)]) == 0
        summary = json.loads(summary_path.read_text(encoding="utf-8"))
        assert [p["page"] for p in summary["pages"]] == [1, 2]
        assert summary["blank_pages"] == [3, 4]
        assert summary["skipped_pages"] == []
        assert summary["index_entries"] == 1
        assert summary["glosses_used"] == 2

    def test_profile_and_flag_override(self, tmp_path):
        seq = _save(tmp_path)
        profile = tmp_path / "profile.yaml"
        out = tmp_path / "from_profile.html"
        profile.write_text(f"format: html\noutput: {out.as_posix()}\nalphabetize: true\n", encoding="utf-8")
        assert main([str(seq), "--config", str(profile)]) == 0
        assert out.exists()

        flagged = tmp_path / "flagged.typ"
        assert main([str(seq), "--config", str(profile), "--format", "typst",
                     "--output", str(flagged)]) == 0
        assert "#glosstable(" in flagged.read_text(encoding="utf-8")


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

class TestExitCodes:
    def test_skipped_pages_warn_but_succeed(self, tmp_path, capsys):
        seq = _save(tmp_path, page_plan=[2, 10, 1])
        assert main([str(seq), "--output", str(tmp_path / "b.typ")]) == 0
        assert "WARNING:" in capsys.readouterr().err

    def test_skipped_pages_fail_in_strict_mode(self, tmp_path):
        seq = _save(tmp_path, page_plan=[2, 10, 1])
        assert main([str(seq), "--output", str(tmp_path / "b.typ"), "--strict"]) == 1

    def test_no_strict_flag_overrides_profile(self, tmp_path):
        seq = _save(tmp_path, page_plan=[2, 10, 1])
        profile = tmp_path / "profile.yaml"
        profile.write_text("strict: true\n", encoding="utf-8")
        out = str(tmp_path / "b.typ")
        assert main([str(seq), "--config", str(profile), "--output", out]) == 1
        assert main([str(seq), "--config", str(profile), "--output", out, "--no-strict"]) == 0

    def test_verification_failure(self, tmp_path, capsys):
        seq = _save(tmp_path, arrows=(("w1", "g2"),))
        assert main([str(seq), "--output", str(tmp_path / "b.typ")]) == 1
        assert "ARROWED_GLOSS_MISMATCH" in capsys.readouterr().err
        assert not (tmp_path / "b.typ").exists()

    def test_missing_sequence(self, tmp_path):
        assert main([str(tmp_path / "missing.xml")]) == 2

    def test_bad_profile(self, tmp_path):
        seq = _save(tmp_path)
        profile = tmp_path / "profile.yaml"
        profile.write_text("format: pdf\n", encoding="utf-8")
        assert main([str(seq), "--config", str(profile)]) == 2
