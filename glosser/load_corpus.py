"""
Load and save a glossing corpus stored as XML files.

A sequence file names the book, its start page, the gloss files, the texts
(in reading order, each with a display flag) and the arrowed words:

    <sequence>
      <sequence_id>1</sequence_id>
      <name>Readings</name>
      <start_page>3</start_page>
      <gloss_names>glosses.xml</gloss_names>
      <texts><text display="true">text1.xml</text></texts>
      <arrowed_words><arrow gloss_uuid="..." word_uuid="..."/></arrowed_words>
    </sequence>

Gloss files hold <gloss uuid=".." parent_uuid=".."> records (lemma, sort_alpha,
gloss, pos, unit, note, updated, status, updated_user); text files hold
<word uuid=".." gloss_uuid=".." type="Word">text</word> records, optional
<appcrit word_uuid=".."> notes and a comma-separated <words_per_page> plan.
File names are relative to the sequence file.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from pathlib import Path

from glosser.corpus import (
    ArrowAssignment,
    Corpus,
    CorpusLoadError,
    CorpusNotFoundError,
    Gloss,
    GlossSet,
    Text,
    Word,
    WordKind,
)


# ---------------------------------------------------------------------------
# Field helpers
# ---------------------------------------------------------------------------

def parse_page_plan(raw: str) -> list[int]:
    """'120, 95,110' -> [120, 95, 110]; pieces that are not integers are ignored."""
    plan = []
    for piece in raw.split(","):
        piece = piece.strip()
        if piece.isdigit():
            plan.append(int(piece))
    return plan


def format_page_plan(plan: list[int]) -> str:
    return ",".join(str(n) for n in plan)


def parse_display(raw: str | None) -> bool:
    if raw is None:
        return True
    return raw.strip().lower() not in ("false", "0", "no")


def _child_text(el: ET.Element, tag: str, default: str = "") -> str:
    child = el.find(tag)
    if child is None or child.text is None:
        return default
    return child.text


def _int(raw: str, what: str, source: str) -> int:
    try:
        return int(raw.strip())
    except ValueError as e:
        raise CorpusLoadError(f"{source}: {what} is not an integer: '{raw}'") from e


def _optional_id(raw: str | None) -> str | None:
    if raw is None or not raw.strip():
        return None
    return raw.strip()


def _read_xml(path: Path, what: str) -> ET.Element:
    try:
        return ET.parse(path).getroot()
    except (FileNotFoundError, IsADirectoryError) as e:
        raise CorpusNotFoundError(f"{what} not found: {path}") from e
    except ET.ParseError as e:
        raise CorpusLoadError(f"{what} is not valid XML: {path}: {e}") from e
    except OSError as e:
        raise CorpusNotFoundError(f"{what} could not be read: {path}: {e}") from e


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

def parse_gloss_set(root: ET.Element, source_file: str = "") -> GlossSet:
    glosses = []
    for el in root.iter("gloss"):
        gloss_id = _optional_id(el.get("uuid"))
        if gloss_id is None:
            # a <gloss> definition child, not a gloss record
            continue
        glosses.append(Gloss(
            gloss_id=gloss_id,
            parent_id=_optional_id(el.get("parent_uuid")),
            lemma=_child_text(el, "lemma"),
            sort_key=_child_text(el, "sort_alpha"),
            definition=_child_text(el, "gloss"),
            pos=_child_text(el, "pos"),
            unit=_int(_child_text(el, "unit", "0"), f"unit of gloss {gloss_id}", source_file),
            note=_child_text(el, "note"),
            updated=_child_text(el, "updated"),
            updated_user=_child_text(el, "updated_user"),
            status=_int(_child_text(el, "status", "1"), f"status of gloss {gloss_id}", source_file),
        ))
    return GlossSet(
        name=root.get("gloss_name", ""),
        glosses=glosses,
        gloss_set_id=_int(root.get("gloss_id", "0"), "gloss_id", source_file),
        source_file=source_file,
    )


def parse_word(el: ET.Element, source_file: str) -> Word:
    word_id = _optional_id(el.get("uuid"))
    if word_id is None:
        raise CorpusLoadError(f"{source_file}: word without uuid")
    raw_kind = el.get("type")
    try:
        kind = WordKind.parse(raw_kind) if raw_kind is not None else None
    except ValueError as e:
        raise CorpusLoadError(f"{source_file}: word {word_id}: {e}") from e
    return Word(
        word_id=word_id,
        text=el.text or "",
        kind=kind,
        gloss_id=_optional_id(el.get("gloss_uuid")),
    )


def parse_text(root: ET.Element, source_file: str = "", display: bool = True) -> Text:
    words_el = root.find("words")
    words = [parse_word(el, source_file) for el in words_el.iter("word")] if words_el is not None else []
    appcrits = {}
    for el in root.iter("appcrit"):
        word_id = _optional_id(el.get("word_uuid"))
        if word_id is not None:
            appcrits[word_id] = el.text or ""
    return Text(
        name=root.get("text_name", ""),
        words=words,
        appcrits=appcrits,
        display=display,
        page_plan=parse_page_plan(_child_text(root, "words_per_page")),
        text_id=_int(root.get("text_id", "0"), "text_id", source_file),
        source_file=source_file,
    )


def load_sequence(path: str | Path) -> Corpus:
    """Load a sequence file and every gloss and text file it names."""
    path = Path(path)
    root = _read_xml(path, "sequence")
    base = path.parent

    corpus = Corpus(
        title=_child_text(root, "name"),
        start_page=_int(_child_text(root, "start_page", "1"), "start_page", str(path)),
        sequence_id=_int(_child_text(root, "sequence_id", "0"), "sequence_id", str(path)),
    )

    for el in root.findall("gloss_names"):
        name = (el.text or "").strip()
        if not name:
            continue
        corpus.gloss_sets.append(parse_gloss_set(_read_xml(base / name, "Gloss"), name))

    texts_el = root.find("texts")
    for el in (texts_el.findall("text") if texts_el is not None else []):
        name = (el.text or "").strip()
        if not name:
            continue
        text_root = _read_xml(base / name, "Text")
        corpus.texts.append(parse_text(text_root, name, parse_display(el.get("display"))))

    arrows_el = root.find("arrowed_words")
    for el in (arrows_el.findall("arrow") if arrows_el is not None else []):
        word_id = _optional_id(el.get("word_uuid"))
        gloss_id = _optional_id(el.get("gloss_uuid"))
        if word_id is None or gloss_id is None:
            raise CorpusLoadError(f"{path}: arrow without word_uuid or gloss_uuid")
        corpus.arrows.append(ArrowAssignment(word_id=word_id, gloss_id=gloss_id))

    if not corpus.texts or not corpus.gloss_sets:
        raise CorpusNotFoundError(f"text or gloss not found in sequence {path}")
    return corpus


# ---------------------------------------------------------------------------
# Writing
# ---------------------------------------------------------------------------

def _sub(parent: ET.Element, tag: str, text: str) -> ET.Element:
    el = ET.SubElement(parent, tag)
    el.text = text
    return el


def gloss_set_to_xml(gloss_set: GlossSet) -> ET.Element:
    root = ET.Element("glosses", {
        "gloss_id": str(gloss_set.gloss_set_id),
        "gloss_name": gloss_set.name,
    })
    for g in gloss_set.glosses:
        attrs = {"uuid": g.gloss_id}
        if g.parent_id is not None:
            attrs["parent_uuid"] = g.parent_id
        el = ET.SubElement(root, "gloss", attrs)
        _sub(el, "lemma", g.lemma)
        _sub(el, "sort_alpha", g.sort_key)
        _sub(el, "gloss", g.definition)
        _sub(el, "pos", g.pos)
        _sub(el, "unit", str(g.unit))
        _sub(el, "note", g.note)
        _sub(el, "updated", g.updated)
        _sub(el, "status", str(g.status))
        _sub(el, "updated_user", g.updated_user)
    return root


def text_to_xml(text: Text) -> ET.Element:
    root = ET.Element("text", {"text_id": str(text.text_id), "text_name": text.name})
    words_el = ET.SubElement(root, "words")
    for w in text.words:
        attrs = {"uuid": w.word_id}
        if w.gloss_id is not None:
            attrs["gloss_uuid"] = w.gloss_id
        if w.kind is not None:
            attrs["type"] = w.kind.xml_name
        _sub(words_el, "word", w.text).attrib.update(attrs)
    if text.appcrits:
        appcrits_el = ET.SubElement(root, "appcrits")
        for word_id, entry in text.appcrits.items():
            _sub(appcrits_el, "appcrit", entry).set("word_uuid", word_id)
    _sub(root, "words_per_page", format_page_plan(text.page_plan))
    return root


def sequence_to_xml(corpus: Corpus, gloss_files: list[str], text_files: list[str]) -> ET.Element:
    root = ET.Element("sequence")
    _sub(root, "sequence_id", str(corpus.sequence_id))
    _sub(root, "name", corpus.title)
    _sub(root, "start_page", str(corpus.start_page))
    for name in gloss_files:
        _sub(root, "gloss_names", name)
    texts_el = ET.SubElement(root, "texts")
    for text, name in zip(corpus.texts, text_files):
        _sub(texts_el, "text", name).set("display", "true" if text.display else "false")
    arrows_el = ET.SubElement(root, "arrowed_words")
    for a in corpus.arrows:
        ET.SubElement(arrows_el, "arrow", {"gloss_uuid": a.gloss_id, "word_uuid": a.word_id})
    return root


def _write_xml(root: ET.Element, path: Path) -> None:
    tree = ET.ElementTree(root)
    ET.indent(tree)
    tree.write(path, encoding="utf-8", xml_declaration=True)


def save_sequence(corpus: Corpus, out_dir: str | Path, sequence_file: str = "sequence.xml") -> Path:
    """Write the corpus back as sequence, gloss and text files.

    Gloss sets and texts keep their source_file names; unnamed ones get
    glosses_N.xml / text_N.xml. Returns the sequence file path.
    """
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    gloss_files = []
    for i, gs in enumerate(corpus.gloss_sets, 1):
        name = gs.source_file or f"glosses_{i}.xml"
        _write_xml(gloss_set_to_xml(gs), out_dir / name)
        gloss_files.append(name)

    text_files = []
    for i, text in enumerate(corpus.texts, 1):
        name = text.source_file or f"text_{i}.xml"
        _write_xml(text_to_xml(text), out_dir / name)
        text_files.append(name)

    seq_path = out_dir / sequence_file
    _write_xml(sequence_to_xml(corpus, gloss_files, text_files), seq_path)
    return seq_path
