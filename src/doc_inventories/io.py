"""Loading, saving and converting inventory files."""
from __future__ import annotations

import logging
from pathlib import Path

from . import formats
from .inventory import Inventory
from .metadata import set_metadata
from .mimetypes import auto_mime
from .sources import DEFAULT_RETRIES, DEFAULT_TIMEOUT, DEFAULT_WAIT_TIME

logger = logging.getLogger(__name__)

load = Inventory.load


def save(filename: str | Path, inventory: Inventory, mime: str | None = None) -> None:
    """Write ``inventory`` to ``filename``.

    The format is given by ``mime``, or derived from the extension of
    ``filename`` via :func:`~doc_inventories.mimetypes.auto_mime`.
    """
    if mime is None:
        mime = auto_mime(str(filename))
    data = formats.write_inventory(inventory, mime)
    Path(filename).write_bytes(data)
    logger.info("Wrote %d items to %s (%s)", len(inventory), filename, mime)


def convert(
    file_in: str | Path,
    file_out: str | Path,
    timeout: float = DEFAULT_TIMEOUT,
    retries: int = DEFAULT_RETRIES,
    wait_time: float = DEFAULT_WAIT_TIME,
    **metadata,
) -> Inventory:
    """Convert an inventory file to the format of ``file_out``.

    Both files must have a known extension. ``project`` and ``version`` may
    be given to override the metadata written to ``file_out``. ``timeout``,
    ``retries`` and ``wait_time`` apply when ``file_in`` is a URL.

    Example:
        >>> convert("objects.inv", "inventory.toml")  # doctest: +SKIP
    """
    inventory = Inventory.load(
        file_in, root_url="", timeout=timeout, retries=retries, wait_time=wait_time
    )
    inventory = set_metadata(inventory, **metadata)
    save(file_out, inventory)
    return inventory
