"""
Registry of inventory file formats.

Each format is identified by a MIME type and provides a ``parse`` function
(``bytes -> (project, version, items)``) and a ``render`` function
(``inventory -> bytes``). Any MIME type ending in ``+gzip`` is handled here by
gzip-(de)compressing the data around the codec for the inner MIME type.
"""
from __future__ import annotations

import gzip
import io
import logging
import zlib
from collections.abc import Callable
from typing import TYPE_CHECKING, NamedTuple

from ..errors import InventoryArgumentError, InventoryFormatError
from ..item import InventoryItem
from ..mimetypes import split_gzip

if TYPE_CHECKING:
    from ..inventory import Inventory

logger = logging.getLogger(__name__)

ParseResult = tuple[str, str, list[InventoryItem]]


class Format(NamedTuple):
    parse: Callable[[bytes], ParseResult]
    render: Callable[["Inventory"], bytes]


FORMATS: dict[str, Format] = {}


def register_format(
    mime: str,
    parse: Callable[[bytes], ParseResult],
    render: Callable[["Inventory"], bytes],
) -> None:
    """Register the codec for ``mime``.

    The codec works on uncompressed data; ``mime + "+gzip"`` is supported
    automatically.
    """
    _, compressed = split_gzip(mime)
    if compressed:
        raise InventoryArgumentError(f"Cannot register a '+gzip' MIME type: {mime!r}")
    FORMATS[mime] = Format(parse, render)


def unknown_mime_msg(mime: str) -> str:
    return (
        f"Reading and writing an inventory file with MIME type {mime!r} "
        "requires the following:\n\n"
        "* `doc_inventories.MIME_TYPES` should contain a mapping from the "
        "appropriate file extension to the MIME type "
        "(see `register_extension`).\n"
        "* A `parse` function returning a string `project`, a string `version`, "
        "and a list `items` of `InventoryItem` instances, and a `render` "
        "function returning the bytes for an `Inventory`, registered with "
        "`register_format`.\n\n"
        "Any MIME type ending with '+gzip' automatically delegates to the "
        "format for the MIME type without the '+gzip' suffix."
    )


def get_format(mime: str) -> Format:
    try:
        return FORMATS[mime]
    except KeyError:
        logger.error(unknown_mime_msg(mime))
        raise InventoryArgumentError(f"Invalid mime format {mime}.") from None


def read_inventory(data: bytes, mime: str) -> ParseResult:
    """Parse ``data`` in the format given by ``mime``.

    Raises:
        InventoryArgumentError: If there is no format for ``mime``.
        InventoryFormatError: If ``data`` is malformed.
    """
    inner_mime, compressed = split_gzip(mime)
    fmt = get_format(inner_mime)
    if compressed:
        try:
            with gzip.GzipFile(fileobj=io.BytesIO(data)) as stream:
                data = stream.read()
        except (OSError, EOFError, zlib.error) as e:
            raise InventoryFormatError(f"Invalid gzip data: {e}") from e
    return fmt.parse(data)


def write_inventory(inventory: Inventory, mime: str) -> bytes:
    """Render ``inventory`` in the format given by ``mime``."""
    inner_mime, compressed = split_gzip(mime)
    data = get_format(inner_mime).render(inventory)
    if compressed:
        buffer = io.BytesIO()
        with gzip.GzipFile(fileobj=buffer, mode="wb") as stream:
            stream.write(data)
        data = buffer.getvalue()
    return data


def _register_builtin_formats() -> None:
    from . import sphinx, toml

    register_format("text/x-intersphinx", sphinx.parse_text, sphinx.render_text)
    register_format("application/x-intersphinx", sphinx.parse_zlib, sphinx.render_zlib)
    register_format("application/toml", toml.parse, toml.render)


_register_builtin_formats()
