# aviasafe/services/attachment_policy.py
"""File-type allow-list and size limit for occurrence attachments."""
from __future__ import annotations

import math
import re
from typing import Optional, Tuple

ALLOWED_FILE_TYPES: Tuple[str, ...] = (
    # Images
    "image/jpeg",
    "image/png",
    "image/gif",
    "image/webp",
    "image/svg+xml",
    # Documents
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",  # .docx
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",  # .xlsx
    "application/vnd.ms-powerpoint",
    "application/vnd.openxmlformats-officedocument.presentationml.presentation",  # .pptx
    # Text
    "text/plain",
    "text/csv",
    "text/html",
    # Archives
    "application/zip",
    "application/x-rar-compressed",
)

# 10 MiB
MAX_FILE_SIZE = 10 * 1024 * 1024

_SIZE_UNITS = ("Bytes", "KB", "MB", "GB", "TB")


def is_allowed_type(mime: Optional[str]) -> bool:
    return bool(mime) and mime in ALLOWED_FILE_TYPES


def is_allowed_size(size: int) -> bool:
    return size <= MAX_FILE_SIZE


def format_size(size: int) -> str:
    """
    Human readable size using 1024-based units, two decimals at most:
    0 -> "0 Bytes", 1536 -> "1.5 KB", 10485760 -> "10 MB".
    """
    if size == 0:
        return "0 Bytes"
    i = int(math.floor(math.log(size, 1024)))
    i = max(0, min(i, len(_SIZE_UNITS) - 1))
    # guard against float error at exact powers (log(1024**2, 1024) == 1.9999...)
    if i + 1 < len(_SIZE_UNITS) and size >= 1024 ** (i + 1):
        i += 1
    value = round(size / 1024 ** i, 2)
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{text} {_SIZE_UNITS[i]}"


def file_extension(file_name: str) -> str:
    if "." not in file_name:
        return ""
    return file_name.rsplit(".", 1)[-1].lower()


def file_icon_type(mime: str) -> str:
    if mime.startswith("image/"):
        return "image"
    if mime == "application/pdf":
        return "pdf"
    if "spreadsheet" in mime or "excel" in mime:
        return "spreadsheet"
    if "presentation" in mime or "powerpoint" in mime:
        return "presentation"
    if "document" in mime or "word" in mime:
        return "document"
    if "zip" in mime or "compressed" in mime:
        return "archive"
    if mime.startswith("text/"):
        return "text"
    return "file"


_UNSAFE = re.compile(r"[^A-Za-z0-9._-]+")


def storage_file_name(file_name: str, timestamp_ms: int) -> str:
    """
    Collision-free object name: "<timestamp>-<stem>.<ext>".
    Path separators and other unsafe characters in the stem are replaced.
    """
    base = file_name.replace("\\", "/").rsplit("/", 1)[-1]
    ext = file_extension(base)
    stem = base[: -(len(ext) + 1)] if ext else base
    stem = _UNSAFE.sub("_", stem).strip("._") or "file"
    if ext:
        return f"{timestamp_ms}-{stem}.{ext}"
    return f"{timestamp_ms}-{stem}"
