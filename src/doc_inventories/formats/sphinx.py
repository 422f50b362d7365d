"""
Sphinx inventory format (``objects.inv``), version 2.

The file starts with four plain-text header lines::

    # Sphinx inventory version 2
    # Project: <project>
    # Version: <version>
    # The remainder of this file is compressed using zlib.

followed by one line per item::

    <name> <domain>:<role> <priority> <uri> <dispname>

The body is zlib-compressed for ``application/x-intersphinx`` and plain text
for ``text/x-intersphinx``.
"""
from __future__ import annotations

import io
import logging
import re
import zlib
from typing import TYPE_CHECKING

from ..errors import InventoryArgumentError, InventoryFormatError
from ..item import InventoryItem
from ..item import dispname as item_dispname

if TYPE_CHECKING:
    from ..inventory import Inventory

logger = logging.getLogger(__name__)

HEADER_LINE = "# Sphinx inventory version 2"
PROJECT_PREFIX = "# Project: "
VERSION_PREFIX = "# Version: "
EMPTY_LINE = "# This file is empty"
ZLIB_LINE = "# The remainder of this file is compressed using zlib."
ZLIB_TEXT_LINE = "# The remainder of this file would be compressed using zlib."

RX_PROJECT = re.compile(r"^# Project: (?P<project>.*)$")
RX_VERSION = re.compile(r"^# Version: (?P<version>.*)$")
RX_DATA = re.compile(
    r"""
    ^
    (?P<name>.+?)         # name
    \s+
    (?P<domain>[^\s:]+)   # domain
    :
    (?P<role>\S+)         # role
    \s+
    (?P<priority>-?\d+)   # priority
    \s+?
    (?P<uri>\S*)          # uri
    \s+
    (?P<dispname>.+)      # display name
    $
    """,
    re.VERBOSE,
)


def parse_text(data: bytes) -> tuple[str, str, list[InventoryItem]]:
    """Parse an inventory with an uncompressed body (``text/x-intersphinx``)."""
    return _parse(data, compressed=False)


def parse_zlib(data: bytes) -> tuple[str, str, list[InventoryItem]]:
    """Parse an inventory with a zlib-compressed body (``application/x-intersphinx``)."""
    return _parse(data, compressed=True)


def _decode(data: bytes) -> str:
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise InventoryFormatError(f"Invalid UTF-8 data: {e}") from e


def _split_lines(text: str) -> list[str]:
    lines = [line.removesuffix("\r") for line in text.split("\n")]
    if lines and lines[-1] == "":
        lines.pop()
    return lines


def _parse(data: bytes, compressed: bool) -> tuple[str, str, list[InventoryItem]]:
    stream = io.BytesIO(data)
    header = [
        stream.readline().decode("utf-8", errors="replace").rstrip("\r\n") for _ in range(4)
    ]
    header_line, project_line, version_line, compression_line = header

    if header_line != HEADER_LINE:
        logger.error(
            'Invalid Sphinx header line. Must be "%s": %r', HEADER_LINE, header_line
        )
        raise InventoryFormatError(
            f'Invalid Sphinx header line. Must be "{HEADER_LINE}". '
            "Only v2 objects.inv files currently supported"
        )

    m = RX_PROJECT.match(project_line)
    if m is None:
        raise InventoryFormatError(f"Invalid project name line: {project_line!r}")
    project = m["project"]

    m = RX_VERSION.match(version_line)
    if m is None:
        raise InventoryFormatError(f"Invalid project version line: {version_line!r}")
    version = m["version"]

    if EMPTY_LINE in compression_line:
        return project, version, []
    if "zlib" not in compression_line:
        raise InventoryFormatError(f"Invalid compression line {compression_line!r}")

    body = stream.read()
    if compressed:
        try:
            decompressor = zlib.decompressobj()
            body = decompressor.decompress(body) + decompressor.flush()
        except zlib.error as e:
            raise InventoryFormatError(f"Invalid compressed data: {e}") from e
        if not decompressor.eof:
            raise InventoryFormatError("Invalid compressed data: incomplete zlib stream")

    return project, version, parse_records(_split_lines(_decode(body)))


def parse_records(lines: list[str]) -> list[InventoryItem]:
    """Parse the body lines of an inventory into items.

    A line that does not match the record pattern continues the display name
    of the previous item (display names may span several lines).
    """
    items: list[InventoryItem] = []
    for line in lines:
        m = RX_DATA.match(line)
        try:
            if m is None:
                if not items:
                    raise InventoryFormatError(f"Unexpected line: {line!r}")
                previous = items.pop()
                item = InventoryItem(
                    name=previous.name,
                    domain=previous.domain,
                    role=previous.role,
                    priority=previous.priority,
                    uri=previous.uri,
                    dispname=item_dispname(previous) + "\n" + line,
                )
            else:
                item = InventoryItem(
                    name=m["name"],
                    domain=m["domain"],
                    role=m["role"],
                    priority=int(m["priority"]),
                    uri=m["uri"],
                    dispname=m["dispname"],
                )
        except InventoryArgumentError as e:
            raise InventoryFormatError(f"Unexpected line: {line!r}") from e
        items.append(item)
    return items


def _header(inventory: Inventory, compression_line: str) -> str:
    lines = [
        HEADER_LINE,
        PROJECT_PREFIX + inventory.project,
        VERSION_PREFIX + inventory.version,
        compression_line if len(inventory) > 0 else EMPTY_LINE,
    ]
    return "".join(line + "\n" for line in lines)


def _record(item: InventoryItem) -> str:
    return f"{item.name} {item.domain}:{item.role} {item.priority} {item.uri} {item.dispname}\n"


def render_text(inventory: Inventory) -> bytes:
    """Write ``inventory`` with an uncompressed body."""
    text = _header(inventory, ZLIB_TEXT_LINE) + "".join(_record(item) for item in inventory)
    return text.encode("utf-8")


def render_zlib(inventory: Inventory) -> bytes:
    """Write ``inventory`` with a zlib-compressed body (``objects.inv``)."""
    header = _header(inventory, ZLIB_LINE).encode("utf-8")
    if len(inventory) == 0:
        return header
    compressor = zlib.compressobj(9)
    body = b"".join(compressor.compress(_record(item).encode("utf-8")) for item in inventory)
    return header + body + compressor.flush()
