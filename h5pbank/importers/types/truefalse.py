from __future__ import annotations
from pathlib import Path
from typing import Any, Dict, Optional
from h5pbank.importers.common import (
    fragment_params, fragment_title, make_record, question_media, to_bool,
)

LIBRARY = "H5P.TrueFalse"

def convert(fragment: Dict[str, Any], workdir: Path) -> Optional[Dict[str, Any]]:
    params = fragment_params(fragment)
    question = params.get("question") or ""
    answer = to_bool(params.get("correct", "true"))
    l10n = params.get("l10n") or {}
    behaviour = params.get("behaviour") or {}
    on_correct = behaviour.get("feedbackOnCorrect", "") or ""
    on_wrong = behaviour.get("feedbackOnWrong", "") or ""

    answers = [
        {"text": l10n.get("trueText") or "True", "correct": answer,
         "feedback": on_correct if answer else on_wrong},
        {"text": l10n.get("falseText") or "False", "correct": not answer,
         "feedback": on_wrong if answer else on_correct},
    ]

    media = question_media(params, workdir)

    return make_record(
        "truefalse",
        fragment_title(fragment, question),
        question,
        answers,
        answer=answer,
        feedback={k: v for k, v in (("correct", on_correct), ("incorrect", on_wrong)) if v},
        media=[media] if media else None,
    )
