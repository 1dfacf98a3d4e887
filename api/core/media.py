"""
Response-side media URLs.

Rows store bare upload filenames. Before a row leaves the API, its media
columns are rewritten to absolute URLs under `MEDIA_BASE_URL/<folder>/`.
"""

from __future__ import annotations

from typing import Any, Iterable

from . import settings


def is_full_url(value: str) -> bool:
    return value.startswith("http://") or value.startswith("https://")


def absolute_url(value: str | None, folder: str) -> str | None:
    if not value or is_full_url(value):
        return value
    return f"{settings.media_base_url()}/{folder}/{value}"


def with_media_urls(
    row: dict[str, Any],
    folder: str,
    *,
    fields: Iterable[str] = (),
    list_fields: Iterable[str] = (),
) -> dict[str, Any]:
    """
    Return a copy of `row` with the given columns turned into absolute URLs.

    Columns missing from the row (e.g. projected away) are left alone.
    """
    out = dict(row)
    for name in fields:
        if name in out:
            out[name] = absolute_url(out[name], folder)
    for name in list_fields:
        if name in out and out[name] is not None:
            out[name] = [absolute_url(item, folder) for item in out[name]]
    return out
