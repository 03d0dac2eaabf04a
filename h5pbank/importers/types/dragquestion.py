"""
H5P.DragQuestion -> draganddrop.

Draggable elements become answers, in element order. An answer's ``zones``
lists the indices of the drop zones that accept it; it is ``correct`` when at
least one zone does. Geometry is kept as H5P stores it (percent of the
task area) so the host can lay the question out again.
"""
from __future__ import annotations
from pathlib import Path
from typing import Any, Dict, List, Optional
from h5pbank.importers.common import (
    embed_media, fragment_params, fragment_title, make_record, strip_html,
)

LIBRARY = "H5P.DragQuestion"

GEOMETRY = ("x", "y", "width", "height")

def _geometry(obj: Dict[str, Any]) -> Dict[str, float]:
    out = {}
    for k in GEOMETRY:
        try:
            out[k] = float(obj[k])
        except (KeyError, TypeError, ValueError):
            continue
    return out

def _int_list(values: Any) -> List[int]:
    out = []
    for v in values or []:
        try:
            out.append(int(v))
        except (TypeError, ValueError):
            continue
    return out

def element_answer(element: Dict[str, Any], workdir: Path, media: List[Dict[str, str]]) -> Dict[str, Any]:
    etype = element.get("type") or {}
    library = str(etype.get("library", ""))
    eparams = etype.get("params") or {}
    if library.startswith("H5P.Image"):
        file_ref = eparams.get("file") or {}
        path = file_ref.get("path", "") if isinstance(file_ref, dict) else ""
        embedded = embed_media(workdir, path)
        if embedded:
            media.append(embedded)
        text = eparams.get("alt") or path
    else:
        text = eparams.get("text", "")
    return {"text": text, "correct": False, "feedback": "", "position": _geometry(element)}

def convert(fragment: Dict[str, Any], workdir: Path) -> Optional[Dict[str, Any]]:
    params = fragment_params(fragment)
    question = params.get("question")
    if not isinstance(question, dict):
        return None
    task = question.get("task") or {}
    elements = [e for e in task.get("elements") or [] if isinstance(e, dict)]
    zones = [z for z in task.get("dropZones") or [] if isinstance(z, dict)]
    if not elements or not zones:
        return None

    media: List[Dict[str, str]] = []
    background = (question.get("settings") or {}).get("background")
    if isinstance(background, dict):
        bg = embed_media(workdir, background.get("path", ""))
        if bg:
            media.append(bg)

    answers = [element_answer(e, workdir, media) for e in elements]
    drop_zones = []
    for zidx, zone in enumerate(zones):
        correct = [i for i in _int_list(zone.get("correctElements")) if 0 <= i < len(answers)]
        tips = zone.get("tipsAndFeedback") or {}
        for i in correct:
            answers[i]["correct"] = True
            answers[i].setdefault("zones", []).append(zidx)
            if not answers[i]["feedback"]:
                answers[i]["feedback"] = tips.get("feedbackOnCorrect", "") or ""
        drop_zones.append({
            "label": zone.get("label", ""),
            "correct_elements": correct,
            **_geometry(zone),
        })

    title = fragment_title(fragment, " / ".join(strip_html(z["label"]) for z in drop_zones))
    return make_record(
        "draganddrop",
        title,
        title,
        answers,
        drop_zones=drop_zones,
        media=media,
    )
