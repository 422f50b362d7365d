"""Exceptions raised by doc-inventories."""
from __future__ import annotations


class InventoryError(Exception):
    """Base class for all inventory errors."""


class InventoryFormatError(InventoryError):
    """The content of an inventory file is malformed.

    Raised for invalid header lines, records that cannot be parsed,
    undecodable compressed data and illegal keys in structured files.
    """


class InventoryArgumentError(InventoryError, ValueError):
    """An invalid argument was passed to one of the inventory functions.

    This covers invalid item fields, unknown MIME types or file extensions,
    malformed lookup keys and invalid metadata arguments.
    """
