"""
The Inventory: a catalog of the linkable items in a project documentation.

An inventory is either loaded from a file or URL (``Inventory.load``), in
which case its items are sorted by name for efficient lookup, or built
manually (``Inventory(project=...)``) and filled with ``push``/``append``.
"""
from __future__ import annotations

import logging
import re
from bisect import bisect_right
from collections.abc import Callable, Iterable, Iterator
from pathlib import Path

from . import formats
from .errors import InventoryArgumentError, InventoryFormatError
from .item import InventoryItem, split_key
from .item import uri as item_uri
from .mimetypes import auto_mime
from .search import lookup, search
from .sources import (
    DEFAULT_RETRIES,
    DEFAULT_TIMEOUT,
    DEFAULT_WAIT_TIME,
    read_source,
)
from .sources import root_url as source_root_url

logger = logging.getLogger(__name__)

# Number of items above which `str(inventory)` abbreviates the item list
SHOW_LIMIT = 15

Report = Callable[[int, str], None]


def _name_key(item: InventoryItem) -> str:
    return item.name


def _log_report(level: int, message: str) -> None:
    logger.log(level, message)


class Inventory:
    """A collection of :class:`~doc_inventories.InventoryItem` objects.

    Attributes:
        project: The name of the project.
        version: The version of the project (e.g. ``"1.0.0"``).
        root_url: The URL to which the ``uri`` of every item is relative.
            If not empty, should end with a slash.
        source: The URL or filename the inventory was loaded from, or a
            description of how it was derived.
        sorted: Whether the items are sorted by name, which enables binary
            search. True for loaded inventories, False for manually built
            ones.

    Items are accessed by iteration, by index (``inventory[0]``), or by key
    (``inventory["name"]`` or ``inventory[":domain:role:`name`"]``), which
    delegates to :meth:`find` with ``quiet=True``. Calling the inventory,
    ``inventory(pattern)``, is a shortcut for :meth:`search`.
    """

    def __init__(
        self,
        project: str,
        version: str = "",
        root_url: str = "",
        items: Iterable[InventoryItem] | None = None,
    ):
        self.project = str(project)
        self.version = str(version)
        self.root_url = root_url
        self.source = ""
        self._items: list[InventoryItem] = []
        self._sorted = False
        if items is not None:
            self.push(*items)

    @classmethod
    def _derived(
        cls,
        project: str,
        version: str,
        items: list[InventoryItem],
        root_url: str,
        source: str,
        sorted: bool,
    ) -> Inventory:
        inventory = cls(project=project, version=version, root_url=root_url)
        inventory._items = list(items)
        inventory.source = source
        inventory._sorted = sorted
        return inventory

    @classmethod
    def load(
        cls,
        source: str | Path,
        mime: str | None = None,
        root_url: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        retries: int = DEFAULT_RETRIES,
        wait_time: float = DEFAULT_WAIT_TIME,
    ) -> Inventory:
        """Load an inventory from a local file or an ``http(s)://`` URL.

        Args:
            source: File path or URL.
            mime: The MIME type of the data. Determined from the file
                extension of ``source`` if not given.
            root_url: Root URL for the item uris. Derived from ``source`` if
                it is a URL; for a local file, defaults to an empty string
                (with a warning).
            timeout: Seconds to wait for each network request.
            retries: Number of attempts to download a URL.
            wait_time: Additional seconds to wait before each retry.

        Raises:
            InventoryFormatError: If the data is malformed.
            InventoryArgumentError: If the MIME type cannot be determined or
                is not supported.
            requests.RequestException: If the URL cannot be downloaded.
            FileNotFoundError: If a local file does not exist.
        """
        source = str(source)
        if mime is None:
            mime = auto_mime(source)
        if root_url is None:
            root_url = source_root_url(source)
        data = read_source(source, timeout=timeout, retries=retries, wait_time=wait_time)
        try:
            project, version, items = formats.read_inventory(data, mime)
        except InventoryFormatError as e:
            logger.error("Could not load Inventory from %s: %s", source, e)
            raise
        except Exception as e:
            logger.error("Could not load Inventory from %s: %s", source, e)
            raise InventoryArgumentError("Invalid source/mime for loading Inventory.") from e
        items = sorted(items, key=_name_key)
        return cls._derived(project, version, items, root_url, source, sorted=True)

    @property
    def sorted(self) -> bool:
        return self._sorted

    @property
    def items(self) -> list[InventoryItem]:
        """A copy of the list of items."""
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[InventoryItem]:
        return iter(self._items)

    def __getitem__(self, key):
        if isinstance(key, (int, slice)):
            return self._items[key]
        try:
            domain, role, name = split_key(key)
        except InventoryArgumentError:
            logger.error("Invalid key for inventory: %r", key)
            return None
        return self.find(name, domain=domain, role=role, quiet=True)

    def __call__(self, pattern: str | re.Pattern, include_hidden: bool = True) -> list[InventoryItem]:
        return self.search(pattern, include_hidden=include_hidden)

    def __eq__(self, other):
        # `source` only records provenance and does not take part
        if not isinstance(other, Inventory):
            return NotImplemented
        return (
            self.project == other.project
            and self.version == other.version
            and self.root_url == other.root_url
            and self._sorted == other._sorted
            and self._items == other._items
        )

    __hash__ = None

    def __repr__(self) -> str:
        if self.source:
            result = f"Inventory({self.source!r}"
            if self.root_url != source_root_url(self.source, warn=False):
                result += f", root_url={self.root_url!r}"
            return result + ")"
        return (
            f"Inventory(project={self.project!r}, version={self.version!r}, "
            f"root_url={self.root_url!r}, items={self._items!r})"
        )

    def _show(self, limit: bool) -> str:
        lines = [
            "Inventory(",
            f" project={self.project!r},",
            f" version={self.version!r},",
            f" root_url={self.root_url!r},",
        ]
        n = len(self._items)
        if n == 0:
            lines.append(" items=[]")
        else:
            lines.append(" items=[")
            if limit and n >= SHOW_LIMIT:
                shown = self._items[:5] + [None] + self._items[-6:]
            else:
                shown = self._items
            for item in shown:
                if item is None:
                    lines.append(f"  ⋮ ({n} elements in total)")
                else:
                    lines.append(f"  {item!r},")
            lines.append(" ]")
        lines.append(")")
        return "\n".join(lines)

    def __str__(self) -> str:
        return self._show(limit=True)

    def show_full(self) -> str:
        """Return a description of the inventory that lists every item."""
        return self._show(limit=False)

    def find(
        self,
        name: str,
        domain: str = "",
        role: str = "",
        quiet: bool = False,
        include_hidden: bool = True,
        report: Report | None = None,
    ) -> InventoryItem | None:
        """Find the top-priority item with the given ``name``.

        Args:
            name: The name of the item. Must match exactly.
            domain: If not empty, restrict the search to this domain.
            role: If not empty, restrict the search to this role.
            quiet: If False, report a warning when several items match (the
                top-priority one is returned) and an error when none does.
            include_hidden: Whether to consider items with a negative
                priority. Hidden items rank by ``abs(priority)``, so
                priorities ``-1`` and ``1`` are equivalent.
            report: Callable receiving ``(level, message)`` for diagnostics.
                Defaults to the module logger.

        Returns:
            The matching item, or None.
        """
        result = lookup(
            self._items,
            name,
            domain=domain,
            role=role,
            include_hidden=include_hidden,
            sorted=self._sorted,
        )
        if not quiet:
            report = report or _log_report
            query = f"name={name!r}, domain={domain!r}, role={role!r}"
            if result.ambiguous:
                report(
                    logging.WARNING,
                    f"Ambiguous search in inventory={self!r}: {query}, "
                    f"candidates={result.candidates!r}",
                )
            elif not result.found:
                report(logging.ERROR, f"Cannot find item in inventory={self!r}: {query}")
        return result.item

    def search(self, pattern: str | re.Pattern, include_hidden: bool = True) -> list[InventoryItem]:
        """Return all items that contain ``pattern``, ordered by ``abs(priority)``.

        ``pattern`` is a string or compiled regex, matched against the spec
        string ``:domain:role:`name``` of each item and against a full
        representation including the expanded uri and display name. With
        ``include_hidden=False``, items with negative priority are omitted.
        """
        return search(self._items, pattern, include_hidden=include_hidden)

    def uri(self, key: str) -> str:
        """Return the full uri for the item found by ``key``, including the root url."""
        item = self[key]
        if item is None:
            raise KeyError(f"No item {key!r} in {self!r}")
        return item_uri(item, root_url=self.root_url)

    def push(self, *items: InventoryItem) -> None:
        """Add items to the inventory.

        In a sorted inventory, every item is inserted at its position by
        name, after any existing items of the same name.
        """
        for item in items:
            if not isinstance(item, InventoryItem):
                raise TypeError(f"Expected InventoryItem, got {type(item).__name__}")
        if self._sorted:
            for item in items:
                self._items.insert(bisect_right(self._items, item.name, key=_name_key), item)
        else:
            self._items.extend(items)

    def append(self, *collections: Iterable[InventoryItem]) -> None:
        """Add the items of each of the given collections to the inventory."""
        for collection in collections:
            self.push(*collection)

    def sort(self) -> Inventory:
        """Return a sorted version of the inventory (the inventory itself, if already sorted)."""
        if self._sorted:
            return self
        items = sorted(self._items, key=_name_key)
        return self._derived(
            self.project, self.version, items, self.root_url, self.source, sorted=True
        )

    def filter(self, predicate: Callable[[InventoryItem], bool]) -> Inventory:
        """Return a new inventory with the items for which ``predicate`` is true."""
        items = [item for item in self._items if predicate(item)]
        return self._derived(
            self.project,
            self.version,
            items,
            self.root_url,
            f"filter({self.source})",
            sorted=self._sorted,
        )

    def set_metadata(self, project: str | None = None, version: str | None = None) -> Inventory:
        """Return a copy of the inventory with a new ``project`` and/or ``version``."""
        return self._derived(
            self.project if project is None else str(project),
            self.version if version is None else str(version),
            self._items,
            self.root_url,
            self.source,
            sorted=self._sorted,
        )


def find_in_inventory(inventory: Inventory, name: str, **kwargs) -> InventoryItem | None:
    """Find an item in ``inventory``; see :meth:`Inventory.find`."""
    return inventory.find(name, **kwargs)
