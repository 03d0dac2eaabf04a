#!/usr/bin/env python3
r"""
Validate imported YAML question items against JSON Schema and lint their
answer structure.

Lint rules (default: error):
  - fillintheblank / dragtext: [[n]] placeholders run 1..N and N == len(answers)
  - multichoice: at least one correct answer; `single` agrees with the count
  - truefalse: exactly two answers, `answer` agrees with the flagged one
  - draganddrop: every answer zone index refers to an existing drop zone
  - media: content must be valid base64

Usage:
  python -m h5pbank.validate_items [FILES or GLOBS...]
Options:
  --schema PATH             Path to schema JSON (default: schemas/question-record.schema.json)
  --lint-level {off,warn,error}   Lint severity (default: error)

Examples:
  python -m h5pbank.validate_items qbank/**/*.yaml
  python -m h5pbank.validate_items --lint-level warn qbank/imported/*.yaml
"""

from __future__ import annotations
import argparse
import base64
import binascii
import json
import re
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml
from jsonschema import Draft7Validator


SCHEMA_PATH = Path("schemas/question-record.schema.json")

# ---------------- Schema loading ----------------

def load_schema(path: Path) -> dict:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        sys.stderr.write(f"Schema not found: {path}\n")
        sys.exit(2)
    except json.JSONDecodeError as e:
        sys.stderr.write(f"Schema JSON is invalid: {path}\n{e}\n")
        sys.exit(2)

# ---------------- YAML loading ----------------

def load_yaml(path: Path):
    text = path.read_text(encoding="utf-8")
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ValueError(f"YAML parse error: {e}") from e
    if isinstance(data, list):
        raise ValueError("Top-level YAML must be a single object, not a list.")
    return data

# ---------------- Structure lint ----------------

RE_PLACEHOLDER = re.compile(r"\[\[(\d+)\]\]")

def check_placeholders(item: Dict[str, Any]) -> List[Tuple[str, str]]:
    found = [int(n) for n in RE_PLACEHOLDER.findall(item.get("question_text") or "")]
    answers = item.get("answers") or []
    problems = []
    if found != list(range(1, len(found) + 1)):
        problems.append(("question_text", f"placeholders out of order: {found}"))
    if len(found) != len(answers):
        problems.append(("answers", f"{len(found)} placeholder(s) but {len(answers)} answer(s)"))
    return problems

def check_multichoice(item: Dict[str, Any]) -> List[Tuple[str, str]]:
    n = sum(1 for a in item.get("answers") or [] if a.get("correct") is True)
    problems = []
    if n == 0:
        problems.append(("answers", "no correct answer"))
    if "single" in item and item["single"] != (n == 1):
        problems.append(("single", f"single={item['single']} but {n} correct answer(s)"))
    return problems

def check_truefalse(item: Dict[str, Any]) -> List[Tuple[str, str]]:
    answers = item.get("answers") or []
    if len(answers) != 2:
        return [("answers", f"expected 2 answers, found {len(answers)}")]
    if "answer" in item and answers[0].get("correct") is not item["answer"]:
        return [("answer", "does not match the correct flag of the first answer")]
    return []

def check_draganddrop(item: Dict[str, Any]) -> List[Tuple[str, str]]:
    n_zones = len(item.get("drop_zones") or [])
    problems = []
    for i, a in enumerate(item.get("answers") or []):
        for z in a.get("zones") or []:
            if not 0 <= z < n_zones:
                problems.append((f"answers[{i}].zones", f"zone {z} does not exist"))
    return problems

def check_media(item: Dict[str, Any]) -> List[Tuple[str, str]]:
    problems = []
    for i, m in enumerate(item.get("media") or []):
        try:
            base64.b64decode(m.get("content", ""), validate=True)
        except (binascii.Error, ValueError):
            problems.append((f"media[{i}].content", "not valid base64"))
    return problems

TYPE_CHECKS = {
    "fillintheblank": check_placeholders,
    "dragtext": check_placeholders,
    "multichoice": check_multichoice,
    "truefalse": check_truefalse,
    "draganddrop": check_draganddrop,
}

def lint_item(item: Dict[str, Any]) -> List[Tuple[str, str]]:
    """Return list of (path, message) lint violations."""
    problems: List[Tuple[str, str]] = []
    check = TYPE_CHECKS.get(item.get("type"))
    if check:
        problems.extend(check(item))
    problems.extend(check_media(item))
    return problems

# ---------------- Validation orchestration ----------------

def validate_file(path: Path, validator: Draft7Validator, lint_level: str) -> int:
    try:
        data = load_yaml(path)
    except (OSError, ValueError) as e:
        print(f"{path}: FAIL")
        print(f"  - (root): {e}")
        return 1

    errors = sorted(validator.iter_errors(data), key=lambda e: (list(map(str, e.path)), e.message))
    if errors:
        print(f"{path}: FAIL")
        for err in errors:
            loc = ".".join(str(p) for p in err.path) or "(root)"
            print(f"  - {loc}: {err.message}")
        return 1

    lint_issues = lint_item(data)
    if lint_issues:
        level = lint_level.lower()
        if level == "off":
            print(f"{path}: OK  (lint skipped)")
            return 0
        elif level == "warn":
            print(f"{path}: OK  (with {len(lint_issues)} lint warning{'s' if len(lint_issues)!=1 else ''})")
            for loc, msg in lint_issues:
                print(f"  ! {loc}: {msg}")
            return 0
        else:
            print(f"{path}: FAIL")
            for loc, msg in lint_issues:
                print(f"  - {loc}: {msg}")
            return 1

    print(f"{path}: OK")
    return 0

def expand_globs(patterns: List[str]) -> List[Path]:
    files: List[Path] = []
    for pat in patterns:
        if any(ch in pat for ch in "*?[]"):
            files.extend(Path().glob(pat))
        else:
            files.append(Path(pat))
    # Deduplicate and keep only files ending with .yml/.yaml
    uniq: List[Path] = []
    seen = set()
    for p in files:
        if p.is_dir():
            continue
        if p.suffix.lower() not in {".yaml", ".yml"}:
            continue
        rp = p.resolve()
        if rp not in seen:
            seen.add(rp)
            uniq.append(p)
    return uniq

def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(argument_default=None)
    parser.add_argument("paths", nargs="*", help="YAML files or globs to validate")
    parser.add_argument("--schema", default=str(SCHEMA_PATH), help=f"Path to schema JSON (default: {SCHEMA_PATH})")
    parser.add_argument("--lint-level", choices=["off", "warn", "error"], default="error", help="Lint severity")
    args = parser.parse_args(argv)

    schema = load_schema(Path(args.schema))
    validator = Draft7Validator(schema)

    patterns = args.paths or ["qbank/**/*.yaml"]
    files = expand_globs(patterns)
    if not files:
        print("No YAML files found to validate.")
        return 1

    failures = 0
    for f in files:
        failures += validate_file(f, validator, args.lint_level)

    return 1 if failures else 0

if __name__ == "__main__":
    sys.exit(main())
