"""
Upload handling for media columns.

This module is called from feature services:
- validate each uploaded file against its slot (content type, count, size)
- normalize images by re-encoding them in their own format with Pillow
- validate PDFs with pypdf
- write files to `UPLOADS_DIR/<folder>/` and return the stored filenames
- remove files left behind by a failed write or replaced by a new upload

Stored values are bare filenames; `core.media` turns them into URLs.
"""

from __future__ import annotations

import io
import logging
import time
import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, AsyncIterator, Mapping, Sequence

from fastapi import HTTPException, UploadFile
from fastapi.concurrency import run_in_threadpool
from PIL import Image, UnidentifiedImageError
from pypdf import PdfReader
from pypdf.errors import PyPdfError

from . import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UploadSlot:
    name: str
    max_count: int = 1
    kind: str = "image"  # image | pdf
    default_format: str = "png"
    # Animated backgrounds are stored byte-for-byte.
    keep_gif: bool = False

    @property
    def is_list(self) -> bool:
        return self.max_count > 1


async def read_upload_bytes(file: UploadFile, max_bytes: int) -> bytes:
    """
    Read the upload into memory, enforcing a maximum size.
    """
    chunk_size = 1024 * 1024  # 1 MiB
    buf = bytearray()

    while True:
        chunk = await file.read(chunk_size)
        if not chunk:
            break
        buf.extend(chunk)
        if len(buf) > max_bytes:
            raise HTTPException(
                status_code=413,
                detail=f"File too large. Max is {max_bytes} bytes.",
            )

    return bytes(buf)


def build_filename(prefix: str, label: str, ext: str) -> str:
    millis = int(time.time() * 1000)
    return f"{prefix}-{uuid.uuid4()}-{millis}-{label}.{ext}"


def normalize_image(data: bytes, default_format: str = "png") -> tuple[bytes, str]:
    """
    Re-encode image bytes in their detected format.

    Returns (encoded_bytes, format) where format is lower-case
    ("jpeg", "png", "gif", "webp", ...).
    """
    try:
        with Image.open(io.BytesIO(data)) as img:
            fmt = (img.format or default_format).upper()
            save_kwargs = {"save_all": True} if getattr(img, "is_animated", False) else {}
            out = io.BytesIO()
            img.save(out, format=fmt, **save_kwargs)
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as exc:
        raise HTTPException(status_code=422, detail="Could not read image.") from exc
    except KeyError as exc:
        # Pillow opens some formats (XPM, PSD, CUR, ...) it has no encoder for.
        raise HTTPException(status_code=422, detail="Unsupported image format.") from exc
    return out.getvalue(), fmt.lower()


def image_format(data: bytes) -> str | None:
    try:
        with Image.open(io.BytesIO(data)) as img:
            return (img.format or "").lower() or None
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError):
        return None


def validate_pdf(data: bytes) -> None:
    try:
        reader = PdfReader(io.BytesIO(data))
        page_count = len(reader.pages)
    except (PyPdfError, ValueError, OSError) as exc:
        raise HTTPException(
            status_code=422,
            detail="Could not read PDF (file may be corrupted or unsupported).",
        ) from exc
    if page_count == 0:
        raise HTTPException(status_code=422, detail="PDF has no pages.")


def _write_file(folder: str, filename: str, data: bytes) -> Path:
    directory = settings.uploads_dir() / folder
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / filename
    path.write_bytes(data)
    return path


def _check_content_type(file: UploadFile, slot: UploadSlot) -> None:
    content_type = (file.content_type or "").lower()
    if slot.kind == "pdf":
        if content_type != "application/pdf":
            raise HTTPException(status_code=400, detail="Not a PDF! Please upload only PDF files.")
        return
    if not content_type.startswith("image/"):
        raise HTTPException(status_code=400, detail="Not an image! Please upload only images.")


async def save_file(
    file: UploadFile,
    slot: UploadSlot,
    *,
    folder: str,
    prefix: str,
    label: str | None = None,
) -> str:
    _check_content_type(file, slot)
    data = await read_upload_bytes(file, settings.max_upload_bytes())
    if not data:
        raise HTTPException(status_code=400, detail=f"Empty upload for '{slot.name}'.")

    label = label or slot.name
    if slot.kind == "pdf":
        await run_in_threadpool(validate_pdf, data)
        filename = build_filename(prefix, label, "pdf")
        payload = data
    elif slot.keep_gif and await run_in_threadpool(image_format, data) == "gif":
        filename = build_filename(prefix, label, "gif")
        payload = data
    else:
        payload, fmt = await run_in_threadpool(normalize_image, data, slot.default_format)
        filename = build_filename(prefix, label, fmt)

    path = await run_in_threadpool(_write_file, folder, filename, payload)
    logger.info("upload_saved slot=%s path=%s bytes=%s", slot.name, path, len(payload))
    return filename


async def store_uploads(
    files: Mapping[str, Sequence[UploadFile]],
    slots: Sequence[UploadSlot],
    *,
    folder: str,
    prefix: str,
) -> dict[str, str | list[str]]:
    """
    Save every uploaded file and return column values to merge into a write.

    Single-file slots map to a filename; multi-file slots map to a list.
    """
    by_name = {slot.name: slot for slot in slots}
    unexpected = sorted(set(files) - set(by_name))
    if unexpected:
        raise HTTPException(status_code=400, detail=f"Unexpected file field(s): {', '.join(unexpected)}")

    for name, uploads in files.items():
        slot = by_name[name]
        if len(uploads) > slot.max_count:
            raise HTTPException(
                status_code=400,
                detail=f"Too many files for '{name}'. Max is {slot.max_count}.",
            )

    values: dict[str, str | list[str]] = {}
    saved: list[str] = []
    try:
        for name, uploads in files.items():
            slot = by_name[name]
            if not uploads:
                continue
            if slot.is_list:
                names = []
                for i, upload in enumerate(uploads, start=1):
                    names.append(await save_file(upload, slot, folder=folder, prefix=prefix, label=f"image-{i}"))
                    saved.append(names[-1])
                values[name] = names
            else:
                values[name] = await save_file(uploads[0], slot, folder=folder, prefix=prefix)
                saved.append(values[name])
    except Exception:
        await run_in_threadpool(remove_files, folder, {"saved": saved})
        raise
    return values


def remove_files(folder: str, values: Mapping[str, str | Sequence[str] | None]) -> None:
    """
    Delete stored upload files named by column values.

    Only bare filenames are touched; hosted URLs and anything that looks like
    a path are skipped.
    """
    directory = settings.uploads_dir() / folder
    for value in values.values():
        names = [value] if isinstance(value, str) or value is None else value
        for name in names:
            if not name or name.startswith(".") or Path(name).name != name:
                continue
            try:
                (directory / name).unlink(missing_ok=True)
            except OSError:
                logger.warning("upload_remove_failed folder=%s name=%s", folder, name, exc_info=True)
                continue
            logger.info("upload_removed folder=%s name=%s", folder, name)


@asynccontextmanager
async def stored_uploads(
    files: Mapping[str, Sequence[UploadFile]],
    slots: Sequence[UploadSlot],
    *,
    folder: str,
    prefix: str,
    replacing: Mapping[str, Any] | None = None,
) -> AsyncIterator[dict[str, str | list[str]]]:
    """
    Store uploads for one write and tie the files to its outcome.

    If the block raises, the new files are deleted. If it completes and
    `replacing` (the row before the write) is given, the files the new
    uploads replace are deleted.
    """
    values = await store_uploads(files, slots, folder=folder, prefix=prefix)
    try:
        yield values
    except Exception:
        await run_in_threadpool(remove_files, folder, values)
        raise
    if replacing and values:
        await run_in_threadpool(remove_files, folder, {name: replacing.get(name) for name in values})
