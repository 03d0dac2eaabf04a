from __future__ import annotations
from pathlib import Path
from typing import Any, Dict, List, Optional
from h5pbank.importers.common import (
    fragment_params, fragment_title, make_record, replace_markers, split_marker,
)

LIBRARY = "H5P.Blanks"

def parse_blank(body: str) -> Dict[str, Any]:
    """'cat/kitten:A pet' -> first alternative is the answer text, tip is feedback."""
    answer, tip = split_marker(body)
    alternatives = [a.strip() for a in answer.split("/") if a.strip()]
    return {
        "text": alternatives[0] if alternatives else "",
        "correct": True,
        "feedback": tip,
        "alternatives": alternatives,
    }

def convert(fragment: Dict[str, Any], workdir: Path) -> Optional[Dict[str, Any]]:
    params = fragment_params(fragment)
    intro = params.get("text") or ""
    lines = [q for q in (params.get("questions") or []) if isinstance(q, str)]
    body, markers = replace_markers("\n".join(lines))
    if not markers:
        return None
    question_text = "\n".join(x for x in (intro, body) if x)
    answers: List[Dict[str, Any]] = [parse_blank(m) for m in markers]
    behaviour = params.get("behaviour") or {}
    return make_record(
        "fillintheblank",
        fragment_title(fragment, question_text),
        question_text,
        answers,
        case_sensitive=bool(behaviour.get("caseSensitive", True)),
    )
