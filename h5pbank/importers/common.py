from __future__ import annotations
import base64
import logging
import mimetypes
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple
import yaml

from h5pbank.importers.staging import read_bytes

logger = logging.getLogger(__name__)

# ---------- YAML block-scalar helper ----------
class LiteralStr(str): pass
def _repr_literal(dumper, data):
    return dumper.represent_scalar("tag:yaml.org,2002:str", data, style="|")
yaml.add_representer(LiteralStr, _repr_literal)
yaml.add_representer(LiteralStr, _repr_literal, Dumper=yaml.SafeDumper)

def blockify(s: Optional[str]) -> Optional[LiteralStr]:
    if s is None:
        return None
    s = str(s)
    if "\n" in s:
        return LiteralStr(s.rstrip("\n"))
    return s

# ---------- Common utils ----------
def slugify(s: str, maxlen: int = 50) -> str:
    s = re.sub(r"\s+", "-", s.strip().lower())
    s = re.sub(r"[^a-z0-9\-]+", "", s)
    return s[:maxlen] or "item"

def ensure_dir(p: Path):
    p.mkdir(parents=True, exist_ok=True)

def coerce_list_tags(s: Optional[str]) -> List[str]:
    if not s:
        return []
    if isinstance(s, list):
        return [slugify(str(x)) for x in s]
    return [slugify(x) for x in re.split(r"[,\s]+", str(s)) if x.strip()]

def to_bool(s: Any) -> bool:
    if isinstance(s, bool):
        return s
    return str(s).strip().lower() in {"1", "true", "t", "yes", "y"}

def strip_html(s: str) -> str:
    text = re.sub(r"<[^>]+>", "", s or "")
    text = text.replace("&nbsp;", " ")
    return re.sub(r"\s+", " ", text).strip()

# ---------- H5P fragment helpers ----------
def fragment_params(fragment: Dict[str, Any]) -> Dict[str, Any]:
    params = fragment.get("params")
    return params if isinstance(params, dict) else {}

def fragment_title(fragment: Dict[str, Any], fallback: str = "") -> str:
    meta = fragment.get("metadata")
    title = meta.get("title") if isinstance(meta, dict) else None
    return str(title) if title else strip_html(fallback)[:255]

BLANK_MARKER = re.compile(r"\*([^*\n]+)\*")
TIP_SEP = re.compile(r"(?<!\\):")

def split_marker(body: str) -> Tuple[str, str]:
    """'answer:tip' -> ('answer', 'tip'). A backslash escapes the colon."""
    parts = TIP_SEP.split(body, maxsplit=1)
    answer = parts[0].replace("\\:", ":").strip()
    tip = parts[1].strip() if len(parts) > 1 else ""
    return answer, tip

def replace_markers(text: str) -> Tuple[str, List[str]]:
    """
    Replace each *marker* with a 1-based [[n]] placeholder.
    Returns the rewritten text and the marker bodies in order.
    """
    bodies: List[str] = []
    def _sub(m: re.Match) -> str:
        bodies.append(m.group(1))
        return f"[[{len(bodies)}]]"
    return BLANK_MARKER.sub(_sub, text or ""), bodies

def embed_media(workdir: Path, relpath: str) -> Optional[Dict[str, str]]:
    """Read a file referenced from content.json (relative to content/) and embed it."""
    if not relpath or re.match(r"^[a-z][a-z0-9+.-]*://", relpath, re.IGNORECASE):
        return None
    data = read_bytes(workdir, f"content/{relpath}")
    if data is None:
        logger.warning("Media file not found in package: %s", relpath)
        return None
    mime, _ = mimetypes.guess_type(relpath)
    return {
        "name": relpath,
        "mime_type": mime or "application/octet-stream",
        "encoding": "base64",
        "content": base64.b64encode(data).decode("ascii"),
    }

def question_media(params: Dict[str, Any], workdir: Path) -> Optional[Dict[str, str]]:
    """The optional image attached to a question via params.media.type.params.file."""
    media = params.get("media")
    media_type = media.get("type") if isinstance(media, dict) else None
    if not isinstance(media_type, dict):
        return None
    file_ref = (media_type.get("params") or {}).get("file")
    if not isinstance(file_ref, dict):
        return None
    return embed_media(workdir, file_ref.get("path", ""))

def make_record(qtype: str, title: str, question_text: str, answers: List[Dict[str, Any]], **extra) -> Dict[str, Any]:
    item: Dict[str, Any] = {
        "type": qtype,
        "title": title,
        "question_text": question_text,
        "answers": answers,
    }
    for k, v in extra.items():
        if v is not None and v != [] and v != {}:
            item[k] = v
    return item

# ---------- Bank writer ----------
def write_item_yaml(item: Dict[str, Any], outdir: Path, index: int) -> Path:
    base = slugify(item.get("topic", "")) or slugify(item.get("id", "item"))
    fname = f"q-{base}-{index:03d}.yaml"
    p = outdir / fname
    if item.get("question_text") is not None:
        item["question_text"] = blockify(item["question_text"])
    fb = item.get("feedback")
    if isinstance(fb, dict):
        for fk in ["correct", "incorrect"]:
            if fk in fb and fb[fk] is not None:
                fb[fk] = blockify(fb[fk])
    with p.open("w", encoding="utf-8") as f:
        yaml.safe_dump(item, f, sort_keys=False, allow_unicode=True)
    return p

def assign_ids(items: List[Dict[str, Any]], id_prefix: str, start_index: int = 1) -> None:
    i = start_index
    for it in items:
        if not it.get("id"):
            it["id"] = f"{id_prefix}.{i:03d}"
            i += 1
        if "points" not in it or it["points"] is None:
            it["points"] = 1
        if "difficulty" not in it or not it["difficulty"]:
            it["difficulty"] = "easy"
        if "tags" not in it:
            it["tags"] = []
        if it.get("type") == "multichoice" and "shuffle_choices" not in it:
            it["shuffle_choices"] = True
