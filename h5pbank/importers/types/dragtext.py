from __future__ import annotations
from pathlib import Path
from typing import Any, Dict, Optional
from h5pbank.importers.common import (
    fragment_params, fragment_title, make_record, replace_markers, split_marker,
)

LIBRARY = "H5P.DragText"

def convert(fragment: Dict[str, Any], workdir: Path) -> Optional[Dict[str, Any]]:
    params = fragment_params(fragment)
    description = params.get("taskDescription") or ""
    text, markers = replace_markers(params.get("textField") or "")
    if not markers:
        return None
    answers = []
    for body in markers:
        word, tip = split_marker(body)
        answers.append({"text": word, "correct": True, "feedback": tip})
    question_text = "\n".join(x for x in (description, text) if x)
    return make_record(
        "dragtext",
        fragment_title(fragment, description or text),
        question_text,
        answers,
    )
