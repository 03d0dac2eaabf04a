from __future__ import annotations
from collections import Counter
import logging
import mimetypes
from pathlib import Path
from typing import Any, Dict, List, Optional

from h5pbank.importers.common import coerce_list_tags
from h5pbank.importers.containers import unwrap_content
from h5pbank.importers.errors import ErrorSink
from h5pbank.importers.manifest import read_manifest
from h5pbank.importers.registry import read_questions
from h5pbank.importers.staging import staged_archive

logger = logging.getLogger(__name__)

FORMAT_NAME = "h5p"
FILE_EXTENSION = ".h5p"
PROVIDES_IMPORT = True
PROVIDES_EXPORT = False

def mime_type() -> str:
    # Older mime tables have no entry for .h5p; it is a zip underneath.
    mime, _ = mimetypes.guess_type("package" + FILE_EXTENSION)
    return mime or "application/zip"

MIME_TYPE = mime_type()

def read_data(path: Path, opts=None, error_sink: Optional[ErrorSink] = None) -> List[Any]:
    """Return the question fragments of a package without converting them."""
    scratch_root = getattr(opts, "scratch_root", None)
    with staged_archive(path, scratch_root, error_sink) as workdir:
        manifest, content = read_manifest(workdir, error_sink)
        return unwrap_content(manifest, content, error_sink)

def import_package(path: Path, opts=None, error_sink: Optional[ErrorSink] = None,
                   stats: Optional[Counter] = None) -> List[Dict[str, Any]]:
    """
    Import one .h5p package into generic question records.

    Raises H5PImportError on any fatal failure; the error sink has been
    called once and the scratch directory removed by then.
    """
    if stats is None:
        stats = Counter()
    scratch_root = getattr(opts, "scratch_root", None)
    with staged_archive(path, scratch_root, error_sink) as workdir:
        manifest, content = read_manifest(workdir, error_sink)
        fragments = unwrap_content(manifest, content, error_sink)
        stats["fragments"] += len(fragments)
        questions = read_questions(fragments, workdir, stats)
    logger.info("%s: %d fragment(s), %d question(s), %d skipped, %d dropped",
                Path(path).name, stats["fragments"], stats["converted"],
                stats["skipped"], stats["dropped"])
    return questions

def import_items(path: Path, opts) -> List[Dict[str, Any]]:
    """Bank importer entry point: records plus bank defaults taken from opts."""
    items = import_package(path, opts)
    source = Path(path).name
    points = getattr(opts, "default_points", None)
    for it in items:
        it.update({
            "id": "",
            "version": 1,
            "points": 1 if points is None else int(points),
            "topic": getattr(opts, "topic", None) or "Imported",
            "difficulty": getattr(opts, "difficulty", None) or "easy",
            "tags": coerce_list_tags(getattr(opts, "tags", None)),
            "source": source,
            "author": getattr(opts, "author", None) or "Unknown",
            "license": getattr(opts, "license", None) or "CC-BY-4.0",
        })
        shuffle = getattr(opts, "shuffle_choices", None)
        if it["type"] == "multichoice" and shuffle is not None:
            it["shuffle_choices"] = bool(shuffle)
    return items
