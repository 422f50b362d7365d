"""
TOML inventory format (``application/toml``).

Example::

    # DocInventory version 1
    project = "Project"
    version = "1.0"

    [[py.function]]
    name = "pkg.func"
    uri = "api/#$"

    [[std.label]]
    name = "section"
    uri = "intro/#$"
    dispname = "Section"

Every top-level table is a domain, every sub-table a role, and each role
holds a list of items. ``priority`` and ``dispname`` are optional and omitted
on output when they have their default value.
"""
from __future__ import annotations

import logging
import re
import tomllib
from typing import TYPE_CHECKING, Any

import tomli_w

from ..errors import InventoryFormatError
from ..item import SAME_AS_NAME, InventoryItem, default_priority

if TYPE_CHECKING:
    from ..inventory import Inventory

logger = logging.getLogger(__name__)

FORMAT_VERSION = 1
RX_FORMAT_HEADER = re.compile(r"^# DocInventory version (?P<version>\d+)$")

# Top-level keys that older files may contain; they are ignored with a warning
LEGACY_KEYS = frozenset({"format"})


def parse(data: bytes) -> tuple[str, str, list[InventoryItem]]:
    """Parse a TOML inventory.

    Raises:
        InventoryFormatError: If the data is not a valid TOML inventory.
    """
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise InventoryFormatError("Invalid TOML inventory.") from e
    first_line = text.split("\n", 1)[0].rstrip("\r")
    m = RX_FORMAT_HEADER.match(first_line)
    if m is None:
        logger.warning("Invalid format header: %s", first_line)
    elif int(m["version"]) > FORMAT_VERSION:
        logger.warning("Invalid version %s in format header: %s", m["version"], first_line)
    # Everything is read as version 1
    try:
        return _parse_v1(tomllib.loads(text))
    except InventoryFormatError:
        raise
    except Exception as e:
        logger.error("Invalid TOML inventory: %s", e)
        raise InventoryFormatError("Invalid TOML inventory.") from e


def _parse_v1(data: dict[str, Any]) -> tuple[str, str, list[InventoryItem]]:
    if "project" not in data:
        raise InventoryFormatError("Invalid TOML inventory: missing mandatory key 'project'")
    project = str(data.pop("project"))
    version = str(data.pop("version", ""))
    items = []
    for domain, domain_data in data.items():
        if isinstance(domain_data, dict):
            for role, role_data in domain_data.items():
                for item_data in role_data:
                    items.append(
                        InventoryItem(
                            name=item_data["name"],
                            domain=domain,
                            role=role,
                            priority=item_data.get("priority", default_priority(domain)),
                            uri=item_data["uri"],
                            dispname=item_data.get("dispname", SAME_AS_NAME),
                        )
                    )
        elif domain in LEGACY_KEYS:
            logger.warning("Unexpected key: %s", domain)
        else:
            raise InventoryFormatError(f"Unexpected key: {domain}")
    return project, version, items


def _item_data(item: InventoryItem) -> dict[str, Any]:
    item_data: dict[str, Any] = {"name": item.name, "uri": item.uri}
    if not item.has_default_dispname:
        item_data["dispname"] = item.dispname
    if not item.has_default_priority:
        item_data["priority"] = item.priority
    return dict(sorted(item_data.items()))


def render(inventory: Inventory) -> bytes:
    """Write ``inventory`` as a TOML document with sorted keys."""
    domains: dict[str, dict[str, list]] = {}
    for item in inventory:
        roles = domains.setdefault(item.domain, {})
        roles.setdefault(item.role, []).append(_item_data(item))

    toml_dict: dict[str, Any] = {"project": inventory.project}
    if inventory.version:
        toml_dict["version"] = inventory.version
    for domain, roles in domains.items():
        toml_dict[domain] = dict(sorted(roles.items()))
    toml_dict = dict(sorted(toml_dict.items()))

    header = f"# DocInventory version {FORMAT_VERSION}\n"
    return (header + tomli_w.dumps(toml_dict)).encode("utf-8")
