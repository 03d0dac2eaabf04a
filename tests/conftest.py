# tests/conftest.py
from __future__ import annotations

import json
import sys
import zipfile
from pathlib import Path
from types import SimpleNamespace
from typing import Any, Dict, List, Optional, Tuple

import pytest

# Repo root on sys.path so "h5pbank.*" imports work when running pytest at repo root.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

SAMPLE_CONTENT: Dict[str, Dict[str, Any]] = {
    "H5P.Blanks": {
        "text": "<p>Fill in the missing words</p>",
        "questions": ["<p>The sky is *blue/azure:Look up*.</p>", "<p>Grass is *green*.</p>"],
        "behaviour": {"caseSensitive": False},
    },
    "H5P.DragQuestion": {
        "question": {
            "settings": {"size": {"width": 620, "height": 310}},
            "task": {
                "elements": [
                    {"x": 5, "y": 10, "width": 10, "height": 5, "dropZones": ["0"],
                     "type": {"library": "H5P.AdvancedText 1.1", "params": {"text": "<p>Cat</p>"}}},
                    {"x": 5, "y": 30, "width": 10, "height": 5, "dropZones": ["0", "1"],
                     "type": {"library": "H5P.AdvancedText 1.1", "params": {"text": "<p>Rock</p>"}}},
                ],
                "dropZones": [
                    {"x": 50, "y": 10, "width": 30, "height": 30, "label": "<div>Animals</div>",
                     "correctElements": ["0"], "tipsAndFeedback": {"feedbackOnCorrect": "Meow"}},
                    {"x": 50, "y": 50, "width": 30, "height": 30, "label": "<div>Plants</div>",
                     "correctElements": []},
                ],
            },
        },
    },
    "H5P.TrueFalse": {
        "question": "<p>Water boils at 100 degrees Celsius at sea level.</p>",
        "correct": "true",
        "behaviour": {"feedbackOnCorrect": "Right", "feedbackOnWrong": "Wrong"},
        "l10n": {"trueText": "True", "falseText": "False"},
    },
    "H5P.DragText": {
        "taskDescription": "<p>Drag the words into the correct boxes</p>",
        "textField": "Paris is the capital of *France*.\nBerlin is the capital of *Germany:Not Austria*.",
    },
    "H5P.MultiChoice": {
        "question": "<p>Which are primes?</p>",
        "answers": [
            {"text": "<div>2</div>", "correct": True, "tipsAndFeedback": {"chosenFeedback": "Yes"}},
            {"text": "<div>4</div>", "correct": False, "tipsAndFeedback": {"chosenFeedback": "No"}},
            {"text": "<div>5</div>", "correct": True},
        ],
    },
}

def fragment(library: str, params: Dict[str, Any], title: str = "A question") -> Dict[str, Any]:
    return {"library": library, "params": params, "metadata": {"title": title}}

def write_h5p(path: Path, manifest: Optional[Dict[str, Any]], content: Any = None,
              extra: Optional[Dict[str, bytes]] = None) -> Path:
    """Build an .h5p archive. content=None leaves out content/content.json."""
    with zipfile.ZipFile(path, "w") as zf:
        if manifest is not None:
            zf.writestr("h5p.json", json.dumps(manifest))
        if content is not None:
            zf.writestr("content/content.json", content if isinstance(content, str) else json.dumps(content))
        for name, data in (extra or {}).items():
            zf.writestr(name, data)
    return path

@pytest.fixture
def make_h5p(tmp_path: Path):
    counter = {"n": 0}
    def _make(main_library: Optional[str], content: Any = None, title: str = "Sample package",
              extra: Optional[Dict[str, bytes]] = None) -> Path:
        counter["n"] += 1
        manifest = None if main_library is None else {
            "title": title, "language": "en", "mainLibrary": main_library,
            "embedTypes": ["div"], "preloadedDependencies": [],
        }
        return write_h5p(tmp_path / f"package-{counter['n']}.h5p", manifest, content, extra)
    return _make

@pytest.fixture
def scratch_root(tmp_path: Path) -> Path:
    p = tmp_path / "scratch"
    p.mkdir()
    return p

@pytest.fixture
def opts(scratch_root: Path):
    return SimpleNamespace(
        scratch_root=scratch_root, default_points=1, topic="Imported", difficulty="easy",
        tags="", author="Test", license="CC-BY-4.0", shuffle_choices=None,
    )

class RecordingSink:
    def __init__(self):
        self.calls: List[Tuple[str, Dict[str, Any]]] = []
    def __call__(self, key: str, context: Dict[str, Any]) -> None:
        self.calls.append((key, context))

@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()

def leftover_scratch(scratch_root: Path) -> List[Path]:
    ns = scratch_root / "h5p_import"
    return list(ns.iterdir()) if ns.exists() else []
