from __future__ import annotations

from pathlib import Path
from typing import BinaryIO

from equityreview.core.errors import UploadTooLargeError

DEFAULT_SUBDIRS = [
    "uploads",
    "results",
    "audit",
]

CHUNK_SIZE = 1024 * 1024


def ensure_data_root(root: Path) -> Path:
    """Ensure the data folders exist and return the root path."""

    for sub in DEFAULT_SUBDIRS:
        (root / sub).mkdir(parents=True, exist_ok=True)
    return root


def save_upload(root: Path, upload_id: str, filename: str, source: BinaryIO, max_bytes: int) -> Path:
    """Persist an uploaded workbook under ``uploads/``, enforcing the size cap."""

    safe_name = Path(filename).name
    target = ensure_data_root(root) / "uploads" / f"{upload_id}-{safe_name}"
    written = 0
    with target.open("wb") as buffer:
        while chunk := source.read(CHUNK_SIZE):
            written += len(chunk)
            if written > max_bytes:
                break
            buffer.write(chunk)
    if written > max_bytes:
        target.unlink(missing_ok=True)
        raise UploadTooLargeError(f"upload exceeds the {max_bytes // (1024 * 1024)} MB limit")
    return target
