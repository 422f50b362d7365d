"""
doc-inventories - Catalogs of linkable items in project documentation

Features:
- Read and write Sphinx inventory files (objects.inv) and a TOML format
- Load inventories from local files or URLs
- Look up items by name or Sphinx-style spec, ranked by priority
- Free-text search across all items
- Convert between formats and edit project/version metadata
"""

from ._version import __version__
from .errors import InventoryArgumentError, InventoryError, InventoryFormatError
from .formats import register_format
from .inventory import Inventory, find_in_inventory
from .io import convert, load, save
from .item import InventoryItem, dispname, show_full, slugify, spec, split_key, uri
from .metadata import set_file_metadata, set_metadata
from .mimetypes import MIME_TYPES, auto_mime, register_extension
from .sources import root_url, split_url

__all__ = [
    "__version__",
    "Inventory",
    "InventoryItem",
    "InventoryError",
    "InventoryFormatError",
    "InventoryArgumentError",
    "load",
    "save",
    "convert",
    "set_metadata",
    "set_file_metadata",
    "find_in_inventory",
    "uri",
    "dispname",
    "spec",
    "show_full",
    "slugify",
    "split_key",
    "split_url",
    "root_url",
    "auto_mime",
    "MIME_TYPES",
    "register_extension",
    "register_format",
]
