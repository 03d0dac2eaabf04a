from __future__ import annotations
from pathlib import Path
from typing import Any, Dict, List, Optional
from h5pbank.importers.common import (
    fragment_params, fragment_title, make_record, question_media, to_bool,
)

LIBRARY = "H5P.MultiChoice"

def convert(fragment: Dict[str, Any], workdir: Path) -> Optional[Dict[str, Any]]:
    params = fragment_params(fragment)
    question = params.get("question") or ""
    answers: List[Dict[str, Any]] = []
    for ans in params.get("answers") or []:
        if not isinstance(ans, dict):
            continue
        tips = ans.get("tipsAndFeedback") or {}
        answers.append({
            "text": str(ans.get("text", "")),
            "correct": to_bool(ans.get("correct", False)),
            "feedback": tips.get("chosenFeedback", "") or "",
        })
    if not answers:
        return None

    n_correct = sum(1 for a in answers if a["correct"])
    feedback = {}
    for rng in params.get("overallFeedback") or []:
        if isinstance(rng, dict) and rng.get("feedback"):
            # Highest score range -> correct, lowest -> incorrect.
            if rng.get("to") == 100:
                feedback["correct"] = rng["feedback"]
            if rng.get("from") == 0:
                feedback["incorrect"] = rng["feedback"]

    media = question_media(params, workdir)

    return make_record(
        "multichoice",
        fragment_title(fragment, question),
        question,
        answers,
        single=n_correct == 1,
        feedback=feedback,
        media=[media] if media else None,
    )
