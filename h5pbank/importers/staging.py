from __future__ import annotations
import contextlib
import logging
import os
import shutil
import tempfile
import zipfile
from pathlib import Path
from typing import Iterator, Optional, Union

from h5pbank.importers.errors import ErrorKind, ErrorSink, fail

logger = logging.getLogger(__name__)

SCRATCH_NAMESPACE = "h5p_import"
ARCHIVE_NAME = "content.zip"
EXTRACT_DIR = "package"

def is_safe_member_name(member: str) -> bool:
    """Reject absolute paths, drive letters, parent references and NUL bytes."""
    if not member:
        return False
    if member.startswith("/") or member.startswith("\\"):
        return False
    if len(member) >= 2 and member[1] == ":":
        return False
    if ".." in member.replace("\\", "/").split("/"):
        return False
    return "\0" not in member

def make_scratch_dir(scratch_root: Optional[Union[str, Path]] = None) -> Path:
    base = Path(scratch_root) if scratch_root else Path(tempfile.gettempdir())
    ns = base / SCRATCH_NAMESPACE
    ns.mkdir(parents=True, exist_ok=True)
    return Path(tempfile.mkdtemp(prefix="import-", dir=ns))

def extract_archive(archive: Path, dest: Path) -> bool:
    """Unzip archive into dest. Returns False on a corrupt archive or unsafe member."""
    try:
        with zipfile.ZipFile(archive, "r") as zf:
            names = zf.namelist()
            unsafe = [n for n in names if not is_safe_member_name(n)]
            if unsafe:
                logger.warning("Refusing archive with unsafe member names: %s", ", ".join(unsafe[:5]))
                return False
            zf.extractall(dest)
    except (zipfile.BadZipFile, zipfile.LargeZipFile, OSError, RuntimeError, NotImplementedError) as e:
        # RuntimeError: encrypted member; NotImplementedError: unsupported compression.
        logger.debug("Extraction of %s failed: %s", archive, e)
        return False
    return True

@contextlib.contextmanager
def staged_archive(source: Union[str, Path],
                   scratch_root: Optional[Union[str, Path]] = None,
                   error_sink: Optional[ErrorSink] = None) -> Iterator[Path]:
    """
    Copy source to a fresh scratch directory, unzip it into a subdirectory
    next to the copy and yield that subdirectory. The scratch directory is
    removed on every exit path.
    """
    src = Path(source)
    if not (src.is_file() and os.access(src, os.R_OK)):
        raise fail(ErrorKind.UNREADABLE_INPUT, error_sink, path=str(src))

    workdir = make_scratch_dir(scratch_root)
    logger.debug("Staging %s in %s", src, workdir)
    try:
        archive = workdir / ARCHIVE_NAME
        try:
            shutil.copyfile(src, archive)
        except OSError as e:
            logger.debug("Copy failed: %s", e)
            raise fail(ErrorKind.COPY_FAILED, error_sink, path=str(src)) from e
        extracted = workdir / EXTRACT_DIR
        extracted.mkdir()
        if not extract_archive(archive, extracted):
            raise fail(ErrorKind.EXTRACT_FAILED, error_sink, path=str(src))
        yield extracted
    finally:
        shutil.rmtree(workdir, ignore_errors=True)
        logger.debug("Removed scratch directory %s", workdir)

def read_file(workdir: Path, relpath: str) -> Optional[str]:
    """Text of a file inside the scratch directory, or None if missing or unreadable."""
    full = workdir / relpath
    if not full.is_file():
        return None
    try:
        return full.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError):
        return None

def read_bytes(workdir: Path, relpath: str) -> Optional[bytes]:
    if not relpath or not is_safe_member_name(relpath):
        return None
    full = workdir / relpath
    if not full.is_file():
        return None
    try:
        return full.read_bytes()
    except OSError:
        return None
