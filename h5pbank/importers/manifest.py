from __future__ import annotations
import json
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from h5pbank.importers.errors import ErrorKind, ErrorSink, fail
from h5pbank.importers.staging import read_file

MANIFEST_PATH = "h5p.json"
CONTENT_PATH = "content/content.json"

def load_json_object(workdir: Path, relpath: str, error_sink: Optional[ErrorSink] = None) -> Dict[str, Any]:
    text = read_file(workdir, relpath)
    if text is None:
        raise fail(ErrorKind.MALFORMED_CONTENT, error_sink, detail=f"{relpath} not found")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise fail(ErrorKind.MALFORMED_CONTENT, error_sink, detail=f"{relpath}: {e}") from e
    if not isinstance(data, dict):
        raise fail(ErrorKind.MALFORMED_CONTENT, error_sink, detail=f"{relpath} is not a JSON object")
    return data

def read_manifest(workdir: Path, error_sink: Optional[ErrorSink] = None) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    """Decode h5p.json and content/content.json from an extracted package."""
    manifest = load_json_object(workdir, MANIFEST_PATH, error_sink)
    content = load_json_object(workdir, CONTENT_PATH, error_sink)
    return manifest, content
