"""Modifying the ``project`` and ``version`` metadata of inventories and inventory files."""
from __future__ import annotations

import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Any

from . import formats
from .errors import InventoryArgumentError, InventoryFormatError
from .formats.sphinx import HEADER_LINE, PROJECT_PREFIX, VERSION_PREFIX
from .inventory import Inventory
from .mimetypes import auto_mime

logger = logging.getLogger(__name__)

ALLOWED_KEYS = ("project", "version")
SPHINX_MIME_TYPES = ("application/x-intersphinx", "text/x-intersphinx")


def _validate(metadata: dict[str, Any]) -> dict[str, str]:
    invalid = set(metadata) - set(ALLOWED_KEYS)
    if invalid:
        raise InventoryArgumentError(
            f"Invalid keyword arguments {sorted(invalid)}. "
            f"Accepted keyword arguments are {ALLOWED_KEYS}."
        )
    result = {}
    for key, value in metadata.items():
        if value is None:
            continue
        value = str(value)
        if "\n" in value or "\r" in value:
            raise InventoryArgumentError(f"`{key}` must not contain line breaks: {value!r}")
        result[key] = value
    return result


def set_metadata(inventory: Inventory, **metadata) -> Inventory:
    """Return a copy of ``inventory`` with modified ``project`` and/or ``version``.

    Raises:
        InventoryArgumentError: For keywords other than ``project`` and
            ``version``, or values containing line breaks.
    """
    return inventory.set_metadata(**_validate(metadata))


def set_file_metadata(filename: str | Path, mime: str | None = None, **metadata) -> None:
    """Modify ``project`` and/or ``version`` in an inventory file, in place.

    For the Sphinx formats, only the header lines are rewritten, so the
    order of the items in the file stays unchanged and the compressed body
    is copied as is. Other formats are loaded, modified, and written again.
    """
    metadata = _validate(metadata)
    if mime is None:
        mime = auto_mime(str(filename))
    if mime in SPHINX_MIME_TYPES:
        _patch_sphinx_header(Path(filename), metadata)
    else:
        inventory = Inventory.load(filename, mime=mime, root_url="")
        inventory = inventory.set_metadata(**metadata)
        Path(filename).write_bytes(formats.write_inventory(inventory, mime))


def _patch_sphinx_header(path: Path, metadata: dict[str, str]) -> None:
    replacements = {}
    if "project" in metadata:
        replacements[PROJECT_PREFIX] = PROJECT_PREFIX + metadata["project"]
    if "version" in metadata:
        replacements[VERSION_PREFIX] = VERSION_PREFIX + metadata["version"]

    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as target, open(path, "rb") as source:
            for i in range(4):
                line = source.readline()
                text = line.decode("utf-8", errors="replace").rstrip("\r\n")
                if i == 0 and text != HEADER_LINE:
                    raise InventoryFormatError(
                        f'Invalid Sphinx header line. Must be "{HEADER_LINE}": {text!r}'
                    )
                for prefix, replacement in replacements.items():
                    if text.startswith(prefix):
                        line = (replacement + "\n").encode("utf-8")
                target.write(line)
            shutil.copyfileobj(source, target)
        shutil.copymode(path, tmp_name)
        os.replace(tmp_name, path)
    except BaseException:
        os.unlink(tmp_name)
        raise
    logger.info("Updated metadata of %s: %s", path, metadata)
