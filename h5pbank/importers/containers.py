"""
Expand a package's content document into per-question fragments.

A fragment is a dict shaped like an H5P sub-content entry:
  {"library": "H5P.TrueFalse 1.6", "params": {...}, "metadata": {"title": "..."}}

Only one level of nesting is expanded; children of a container are assumed
to be question fragments already.
"""
from __future__ import annotations
import logging
from typing import Any, Dict, List, Optional

from h5pbank.importers.errors import ErrorKind, ErrorSink, fail

logger = logging.getLogger(__name__)

# Matched exactly against mainLibrary. "H5P.Multichoice" keeps the casing
# the importer has always accepted; the converter table only knows
# "H5P.MultiChoice", so such packages produce no records.
SINGLE_FRAGMENT_LIBRARIES = (
    "H5P.Blanks",
    "H5P.DragQuestion",
    "H5P.Multichoice",
    "H5P.TrueFalse",
    "H5P.DragText",
)

def _field(content: Dict[str, Any], key: str, library: str, sink: Optional[ErrorSink]) -> List[Any]:
    value = content.get(key)
    if not isinstance(value, list):
        raise fail(ErrorKind.MALFORMED_CONTENT, sink, detail=f"{library} content has no '{key}' list")
    return value

def unwrap_column(content: Dict[str, Any], sink: Optional[ErrorSink] = None) -> List[Any]:
    items = _field(content, "content", "H5P.Column", sink)
    out = []
    for it in items:
        if not isinstance(it, dict):
            raise fail(ErrorKind.MALFORMED_CONTENT, sink, detail="H5P.Column entry is not an object")
        out.append(it.get("content"))
    return out

def unwrap_question_set(content: Dict[str, Any], sink: Optional[ErrorSink] = None) -> List[Any]:
    return list(_field(content, "questions", "H5P.QuestionSet", sink))

def unwrap_single_choice_set(content: Dict[str, Any], sink: Optional[ErrorSink] = None) -> List[Dict[str, Any]]:
    """
    Each choice becomes an H5P.MultiChoice fragment. The source data does not
    flag correctness: the first answer listed is the correct one.
    """
    choices = _field(content, "choices", "H5P.SingleChoiceSet", sink)
    l10n = content.get("l10n") or {}
    correct_text = l10n.get("correctText", "")
    incorrect_text = l10n.get("incorrectText", "")
    fragments: List[Dict[str, Any]] = []
    for choice in choices:
        if not isinstance(choice, dict):
            raise fail(ErrorKind.MALFORMED_CONTENT, sink, detail="H5P.SingleChoiceSet choice is not an object")
        answers = []
        for idx, answer in enumerate(choice.get("answers") or []):
            answers.append({
                "text": answer,
                "correct": idx == 0,
                "tipsAndFeedback": {
                    "chosenFeedback": correct_text if idx == 0 else incorrect_text,
                },
            })
        question = choice.get("question", "")
        fragments.append({
            "params": {"question": question, "answers": answers},
            "metadata": {"title": question},
            "library": "H5P.MultiChoice",
        })
    return fragments

CONTAINER_UNWRAPPERS = {
    "H5P.Column": unwrap_column,
    "H5P.QuestionSet": unwrap_question_set,
    "H5P.SingleChoiceSet": unwrap_single_choice_set,
}

def unwrap_content(manifest: Dict[str, Any], content: Dict[str, Any],
                   error_sink: Optional[ErrorSink] = None) -> List[Any]:
    """Dispatch on manifest['mainLibrary'] (exact, unversioned match)."""
    library = manifest.get("mainLibrary")
    if not isinstance(library, str):
        raise fail(ErrorKind.MALFORMED_CONTENT, error_sink, detail="h5p.json mainLibrary is not a string")
    unwrap = CONTAINER_UNWRAPPERS.get(library)
    if unwrap is not None:
        fragments = unwrap(content, error_sink)
        logger.info("%s expanded into %d fragment(s)", library, len(fragments))
        return fragments
    if library in SINGLE_FRAGMENT_LIBRARIES:
        return [{
            "params": content,
            "metadata": {"title": manifest.get("title", "")},
            "library": library,
        }]
    raise fail(ErrorKind.UNSUPPORTED_CONTENT_TYPE, error_sink, library=library)
