"""Mapping of file extensions to inventory MIME types."""
from __future__ import annotations

import logging
import os
from types import MappingProxyType

from .errors import InventoryArgumentError

logger = logging.getLogger(__name__)

GZIP_SUFFIX = "+gzip"

DEFAULT_MIME_TYPES = MappingProxyType({
    ".txt": "text/x-intersphinx",
    ".inv": "application/x-intersphinx",
    ".toml": "application/toml",
    ".txt.gz": "text/x-intersphinx+gzip",
    ".toml.gz": "application/toml+gzip",
})

# Registry used by `auto_mime`; extend with `register_extension`
MIME_TYPES: dict[str, str] = dict(DEFAULT_MIME_TYPES)


def register_extension(ext: str, mime: str) -> None:
    """Associate a (possibly compound) file extension like ``".json.gz"`` with ``mime``."""
    if not ext.startswith("."):
        raise InventoryArgumentError(f"Extension {ext!r} must start with '.'")
    MIME_TYPES[ext] = mime


def reset_extensions() -> None:
    """Restore the default extension registry."""
    MIME_TYPES.clear()
    MIME_TYPES.update(DEFAULT_MIME_TYPES)


def split_full_ext(path: str) -> tuple[str, str]:
    """Split off all extensions of ``path``, e.g. ``".toml.gz"``, not just the last one."""
    root, ext = os.path.splitext(path)
    full_ext = ext
    while ext:
        root, ext = os.path.splitext(root)
        full_ext = ext + full_ext
    return root, full_ext


def auto_mime(source: str) -> str:
    """Determine the MIME type of a file path or URL from its extension.

    The longest compound extension is tried first, so ``"objects.txt.gz"``
    maps to ``".txt.gz"`` rather than ``".gz"``.

    Raises:
        InventoryArgumentError: If no known extension matches.
    """
    _, full_ext = split_full_ext(str(source))
    # ".v1.2.toml" -> try ".v1.2.toml", ".2.toml", ".toml"
    parts = full_ext.split(".")[1:]
    for i in range(len(parts)):
        ext = "." + ".".join(parts[i:])
        if ext in MIME_TYPES:
            return MIME_TYPES[ext]
    msg = f"Cannot determine MIME type for {str(source)!r}"
    logger.error("%s (known extensions: %s)", msg, ", ".join(sorted(MIME_TYPES)))
    raise InventoryArgumentError(msg)


def split_gzip(mime: str) -> tuple[str, bool]:
    """Split the ``+gzip`` suffix off ``mime``, returning ``(inner_mime, compressed)``."""
    if mime.endswith(GZIP_SUFFIX):
        return mime[: -len(GZIP_SUFFIX)], True
    return mime, False
