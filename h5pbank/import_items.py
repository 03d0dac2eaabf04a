#!/usr/bin/env python3
"""
Import the questions of an H5P package into 1-item-per-file YAML for the bank.

Usage:
  python -m h5pbank.import_items --input quiz.h5p \
      --outdir qbank/example-topic --id-prefix example.topic

Supported package types: H5P.Column, H5P.QuestionSet, H5P.SingleChoiceSet,
H5P.Blanks, H5P.DragQuestion, H5P.TrueFalse, H5P.DragText.
"""
from __future__ import annotations
import argparse
import logging
from pathlib import Path
from typing import Optional, List
from h5pbank.importers.h5p import import_items
from h5pbank.importers.common import assign_ids, ensure_dir, write_item_yaml
from h5pbank.importers.errors import H5PImportError
import yaml

def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(argument_default=None)
    ap.add_argument("--input", required=True, help="Input .h5p package path")
    ap.add_argument("--outdir", default="qbank/imported", help="Output directory for YAML items")
    ap.add_argument("--id-prefix", default="imported.item", help="ID prefix for generated IDs")
    ap.add_argument("--start-index", type=int, default=1, help="Starting index for generated IDs")
    ap.add_argument("--default-points", type=int, default=1)
    ap.add_argument("--topic", default="Imported")
    ap.add_argument("--difficulty", default="easy")
    ap.add_argument("--tags", default="", help="Comma-separated default tags")
    ap.add_argument("--author", default="Unknown")
    ap.add_argument("--license", default="CC-BY-4.0")
    ap.add_argument("--shuffle-choices", type=int, choices=[0,1], default=None, help="Set shuffle_choices for multichoice")
    ap.add_argument("--scratch-root", default=None, help="Directory for temporary extraction (default: system temp)")
    ap.add_argument("--dry-run", action="store_true")
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = ap.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    in_path = Path(args.input)
    try:
        items = import_items(in_path, args)
    except H5PImportError as e:
        raise SystemExit(f"Import failed ({e.kind.name}): {e}")

    if not items:
        print("No items parsed.")
        return 1

    assign_ids(items, args.id_prefix, args.start_index)

    outdir = Path(args.outdir)
    if not args.dry_run:
        ensure_dir(outdir)
    wrote = 0
    for idx, it in enumerate(items, args.start_index):
        if args.dry_run:
            print(yaml.safe_dump(it, sort_keys=False, allow_unicode=True))
        else:
            p = write_item_yaml(it, outdir, idx)
            wrote += 1
            print(f"Wrote {p}")

    print(f"Imported {wrote} item(s) to {outdir}")
    return 0

if __name__ == "__main__":
    raise SystemExit(main())
