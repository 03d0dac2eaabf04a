# tests/test_converters.py
from __future__ import annotations

import base64
import json
import logging
from collections import Counter
from pathlib import Path

import jsonschema
import pytest

from conftest import REPO_ROOT, SAMPLE_CONTENT, fragment
from h5pbank.importers.common import replace_markers, split_marker
from h5pbank.importers.registry import (
    create_converter, discover_converters, library_prefix, read_questions,
)

SCHEMA_PATH = REPO_ROOT / "schemas" / "question-record.schema.json"
SCHEMA = jsonschema.Draft7Validator(json.loads(SCHEMA_PATH.read_text(encoding="utf-8")))

def convert(library: str, params, workdir: Path, title: str = "A question"):
    frag = fragment(library, params, title)
    conv = create_converter(frag)
    assert conv is not None, f"no converter for {library}"
    record = conv(frag, workdir)
    if record is not None:
        SCHEMA.validate(record)
    return record

def test_discovers_every_supported_library():
    assert sorted(discover_converters()) == [
        "H5P.Blanks", "H5P.DragQuestion", "H5P.DragText", "H5P.MultiChoice", "H5P.TrueFalse",
    ]

def test_library_prefix_drops_version():
    assert library_prefix("H5P.TrueFalse 1.6") == "H5P.TrueFalse"
    assert library_prefix("H5P.TrueFalse") == "H5P.TrueFalse"

def test_dispatch_is_case_sensitive():
    assert create_converter(fragment("H5P.Multichoice 1.16", {})) is None
    assert create_converter(fragment("H5P.MultiChoice 1.16", {})) is not None

@pytest.mark.parametrize("frag", [None, "text", {}, {"library": ""}, {"params": {}}])
def test_fragment_without_library_has_no_converter(frag):
    assert create_converter(frag) is None

def test_markers_become_positional_placeholders():
    text, bodies = replace_markers("a *one* b *two:tip* c")
    assert text == "a [[1]] b [[2]] c"
    assert bodies == ["one", "two:tip"]
    assert split_marker("two:tip") == ("two", "tip")
    assert split_marker(r"12\:30") == ("12:30", "")

def test_blanks(tmp_path: Path):
    rec = convert("H5P.Blanks 1.12", SAMPLE_CONTENT["H5P.Blanks"], tmp_path, "Colours")
    assert rec["type"] == "fillintheblank"
    assert rec["title"] == "Colours"
    assert "[[1]]" in rec["question_text"] and "[[2]]" in rec["question_text"]
    assert rec["question_text"].startswith("<p>Fill in the missing words</p>")
    assert [a["text"] for a in rec["answers"]] == ["blue", "green"]
    assert rec["answers"][0]["alternatives"] == ["blue", "azure"]
    assert rec["answers"][0]["feedback"] == "Look up"
    assert all(a["correct"] for a in rec["answers"])
    assert rec["case_sensitive"] is False

def test_blanks_without_markers_is_skipped(tmp_path: Path):
    assert convert("H5P.Blanks", {"text": "x", "questions": ["<p>nothing</p>"]}, tmp_path) is None

def test_multichoice(tmp_path: Path):
    rec = convert("H5P.MultiChoice 1.16", SAMPLE_CONTENT["H5P.MultiChoice"], tmp_path, "Primes")
    assert rec["type"] == "multichoice"
    assert rec["question_text"] == "<p>Which are primes?</p>"
    assert [a["correct"] for a in rec["answers"]] == [True, False, True]
    assert [a["feedback"] for a in rec["answers"]] == ["Yes", "No", ""]
    assert rec["single"] is False

def test_multichoice_overall_feedback_and_media(tmp_path: Path):
    (tmp_path / "content" / "images").mkdir(parents=True)
    (tmp_path / "content" / "images" / "pic.png").write_bytes(b"\x89PNG fake")
    params = dict(SAMPLE_CONTENT["H5P.MultiChoice"])
    params["overallFeedback"] = [
        {"from": 0, "to": 50, "feedback": "Keep trying"},
        {"from": 51, "to": 100, "feedback": "Well done"},
    ]
    params["media"] = {"type": {"library": "H5P.Image 1.1",
                                "params": {"file": {"path": "images/pic.png", "mime": "image/png"}}}}
    rec = convert("H5P.MultiChoice", params, tmp_path)
    assert rec["feedback"] == {"incorrect": "Keep trying", "correct": "Well done"}
    assert rec["media"][0]["name"] == "images/pic.png"
    assert rec["media"][0]["mime_type"] == "image/png"
    assert base64.b64decode(rec["media"][0]["content"]) == b"\x89PNG fake"

def test_multichoice_missing_media_is_omitted(tmp_path: Path, caplog):
    params = dict(SAMPLE_CONTENT["H5P.MultiChoice"])
    params["media"] = {"type": {"params": {"file": {"path": "images/gone.png"}}}}
    with caplog.at_level(logging.WARNING):
        rec = convert("H5P.MultiChoice", params, tmp_path)
    assert "media" not in rec
    assert "images/gone.png" in caplog.text

@pytest.mark.parametrize("correct,expected", [("true", True), ("false", False), (True, True), (False, False)])
def test_truefalse(tmp_path: Path, correct, expected: bool):
    params = dict(SAMPLE_CONTENT["H5P.TrueFalse"], correct=correct)
    rec = convert("H5P.TrueFalse 1.6", params, tmp_path)
    assert rec["type"] == "truefalse"
    assert rec["answer"] is expected
    assert [a["text"] for a in rec["answers"]] == ["True", "False"]
    assert [a["correct"] for a in rec["answers"]] == [expected, not expected]
    right = rec["answers"][0] if expected else rec["answers"][1]
    assert right["feedback"] == "Right"

def test_dragquestion(tmp_path: Path):
    rec = convert("H5P.DragQuestion 1.13", SAMPLE_CONTENT["H5P.DragQuestion"], tmp_path, "Sort")
    assert rec["type"] == "draganddrop"
    assert [a["text"] for a in rec["answers"]] == ["<p>Cat</p>", "<p>Rock</p>"]
    cat, rock = rec["answers"]
    assert cat["correct"] is True and cat["zones"] == [0] and cat["feedback"] == "Meow"
    assert rock["correct"] is False and "zones" not in rock
    assert cat["position"] == {"x": 5.0, "y": 10.0, "width": 10.0, "height": 5.0}
    assert [z["correct_elements"] for z in rec["drop_zones"]] == [[0], []]
    assert rec["drop_zones"][0]["label"] == "<div>Animals</div>"

def test_dragquestion_embeds_background_and_image_elements(tmp_path: Path):
    (tmp_path / "content" / "images").mkdir(parents=True)
    (tmp_path / "content" / "images" / "bg.jpg").write_bytes(b"bg")
    (tmp_path / "content" / "images" / "dog.png").write_bytes(b"dog")
    params = {
        "question": {
            "settings": {"background": {"path": "images/bg.jpg", "mime": "image/jpeg"}},
            "task": {
                "elements": [{"x": 0, "y": 0, "width": 5, "height": 5,
                              "type": {"library": "H5P.Image 1.1",
                                       "params": {"file": {"path": "images/dog.png"}, "alt": "Dog"}}}],
                "dropZones": [{"x": 1, "y": 1, "width": 1, "height": 1, "label": "Pets", "correctElements": ["0"]}],
            },
        },
    }
    rec = convert("H5P.DragQuestion", params, tmp_path)
    assert [m["name"] for m in rec["media"]] == ["images/bg.jpg", "images/dog.png"]
    assert rec["answers"][0]["text"] == "Dog"

def test_dragquestion_without_zones_is_skipped(tmp_path: Path):
    assert convert("H5P.DragQuestion", {"question": {"task": {"elements": []}}}, tmp_path) is None

def test_dragtext(tmp_path: Path):
    rec = convert("H5P.DragText 1.10", SAMPLE_CONTENT["H5P.DragText"], tmp_path, "Capitals")
    assert rec["type"] == "dragtext"
    assert rec["question_text"].startswith("<p>Drag the words into the correct boxes</p>")
    assert "capital of [[1]]." in rec["question_text"]
    assert "capital of [[2]]." in rec["question_text"]
    assert [(a["text"], a["feedback"]) for a in rec["answers"]] == [("France", ""), ("Germany", "Not Austria")]

def test_read_questions_counts_skips(tmp_path: Path, caplog):
    fragments = [
        fragment("H5P.TrueFalse 1.6", SAMPLE_CONTENT["H5P.TrueFalse"]),
        fragment("H5P.AdvancedText 1.1", {"text": "Just text"}),
        {"params": {}},
        fragment("H5P.Blanks", {"questions": ["no blanks here"]}),
        fragment("H5P.DragText 1.10", SAMPLE_CONTENT["H5P.DragText"]),
    ]
    stats = Counter()
    with caplog.at_level(logging.WARNING, logger="h5pbank.importers.registry"):
        questions = read_questions(fragments, tmp_path, stats)
    assert [q["type"] for q in questions] == ["truefalse", "dragtext"]
    assert stats == Counter({"converted": 2, "skipped": 2, "dropped": 1})
    assert "H5P.AdvancedText 1.1" in caplog.text
