from __future__ import annotations
from collections import Counter
from importlib import import_module
import functools
import logging
import pkgutil
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

Converter = Callable[[Dict[str, Any], Path], Optional[Dict[str, Any]]]

@functools.lru_cache(maxsize=1)
def discover_converters() -> Dict[str, Converter]:
    """
    Auto-import all modules in h5pbank.importers.types and return
    a map: library prefix -> convert(fragment: dict, workdir: Path) -> dict | None
    """
    import h5pbank.importers.types as pkg
    converter_map: Dict[str, Converter] = {}
    for m in pkgutil.iter_modules(pkg.__path__, pkg.__name__ + "."):
        mod = import_module(m.name)
        lib = getattr(mod, "LIBRARY", None)
        func = getattr(mod, "convert", None)
        if isinstance(lib, str) and callable(func):
            converter_map[lib] = func
    return converter_map

def library_prefix(library: str) -> str:
    """'H5P.TrueFalse 1.6' -> 'H5P.TrueFalse'"""
    return library.split(" ", 1)[0]

def create_converter(fragment: Any) -> Optional[Converter]:
    if not isinstance(fragment, dict) or not fragment.get("library"):
        return None
    return discover_converters().get(library_prefix(str(fragment["library"])))

def read_questions(fragments: List[Any], workdir: Path, stats: Optional[Counter] = None) -> List[Dict[str, Any]]:
    """Convert fragments in order. Unconvertible fragments are counted and skipped."""
    if stats is None:
        stats = Counter()
    questions: List[Dict[str, Any]] = []
    for idx, fragment in enumerate(fragments):
        if not isinstance(fragment, dict) or not fragment.get("library"):
            stats["dropped"] += 1
            logger.debug("Fragment %d has no library, dropped", idx)
            continue
        convert = create_converter(fragment)
        if convert is None:
            stats["skipped"] += 1
            logger.warning("Skipping fragment %d: unsupported library %s", idx, fragment["library"])
            continue
        qo = convert(fragment, workdir)
        if not qo:
            stats["skipped"] += 1
            logger.warning("Skipping fragment %d: %s produced no question", idx, fragment["library"])
            continue
        stats["converted"] += 1
        questions.append(qo)
    return questions
