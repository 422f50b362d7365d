"""
Inventory items: the linkable objects inside a project documentation.

An item is identified by its ``name`` within a ``domain`` and ``role``,
following the Sphinx conventions. Items can be written compactly with the
Sphinx cross-referencing syntax, e.g. ``:py:function:`pkg.func```.
"""
from __future__ import annotations

import operator
import re
import unicodedata
from dataclasses import dataclass

from .errors import InventoryArgumentError

# Domain for code objects when a spec string only gives a role
DEFAULT_DOMAIN = "py"

# Trailing character in a stored uri that stands for the item name
PLACEHOLDER = "$"

# Stored dispname meaning "same as name"
SAME_AS_NAME = "-"

_RX_WHITESPACE = re.compile(r"\s")
_RX_DOMAIN_INVALID = re.compile(r"[\s:]")
_RX_ABSOLUTE_URI = re.compile(r"^https?://")

# [:[domain:]role:]name
_RX_KEY = re.compile(r"^(:((?P<domain>\w+):)?((?P<role>\w+):)?)?(?P<name>.+)$")


def default_priority(domain: str) -> int:
    """Return the priority an item in ``domain`` has unless given explicitly."""
    return -1 if domain == "std" else 1


@dataclass(frozen=True, kw_only=True, repr=False)
class InventoryItem:
    """A linkable item inside an :class:`~doc_inventories.Inventory`.

    Attributes:
        name: The object name for referencing. For code objects, the fully
            qualified name; for sections, usually a slug of the title.
        domain: A Sphinx domain, e.g. ``"py"`` for Python objects or
            ``"std"`` for text objects such as sections.
        role: A domain-specific role, e.g. ``"function"`` or ``"label"``.
        priority: Flag for placement in search results. ``1`` is the default
            for code objects, ``0`` marks important objects, ``2`` or higher
            unimportant ones, and negative values hide an object (``-1`` is
            the default for the ``"std"`` domain).
        uri: Location of the documentation relative to the inventory root
            url. A trailing ``$`` is a placeholder for ``name``.
        dispname: Plain-text display name, or ``"-"`` if identical to
            ``name``.

    All attributes are validated and normalized on construction; invalid
    values raise :class:`~doc_inventories.errors.InventoryArgumentError`.
    """

    name: str
    domain: str = DEFAULT_DOMAIN
    role: str
    priority: int = 1
    uri: str
    dispname: str = SAME_AS_NAME

    def __post_init__(self):
        name, domain, role, uri, dispname = (
            self.name.strip(), self.domain, self.role, self.uri, self.dispname.strip()
        )
        if not name:
            raise InventoryArgumentError("`name` must have non-zero length.")
        if name.startswith("#"):
            raise InventoryArgumentError("`name` must not start with `#`.")
        if not domain:
            raise InventoryArgumentError("`domain` must have non-zero length.")
        if _RX_DOMAIN_INVALID.search(domain):
            raise InventoryArgumentError("`domain` must not contain whitespace or colon.")
        if not role:
            raise InventoryArgumentError("`role` must have non-zero length.")
        if _RX_WHITESPACE.search(role):
            raise InventoryArgumentError("`role` must not contain whitespace.")
        if _RX_WHITESPACE.search(uri):
            raise InventoryArgumentError("`uri` must not contain whitespace.")
        if _RX_ABSOLUTE_URI.match(uri):
            raise InventoryArgumentError("`uri` must be relative.")
        try:
            priority = operator.index(self.priority)
        except TypeError as e:
            raise InventoryArgumentError(
                f"`priority` must be an integer, not {self.priority!r}."
            ) from e
        uri = uri.lstrip("/")
        if uri.endswith(name):
            uri = uri[: len(uri) - len(name)] + PLACEHOLDER
        if not dispname:
            raise InventoryArgumentError("`dispname` must have non-zero length.")
        if dispname == name:
            dispname = SAME_AS_NAME
        object.__setattr__(self, "name", name)
        object.__setattr__(self, "priority", priority)
        object.__setattr__(self, "uri", uri)
        object.__setattr__(self, "dispname", dispname)

    @classmethod
    def from_spec(
        cls,
        spec: str,
        uri: str,
        dispname: str | None = None,
        priority: int | None = None,
    ) -> InventoryItem:
        """Create an item from a ``spec => uri`` pair.

        ``spec`` is either ``":domain:role:`name`"``, ``":role:`name`"`` or
        a section title. For ``":role:`name`"``, the domain is ``"std"`` for
        the roles ``label`` and ``doc`` and :data:`DEFAULT_DOMAIN` otherwise.
        A section title is slugified into the name of a ``:std:label:``
        item that keeps the title as its display name.

        Example:
            >>> InventoryItem.from_spec("Main index", "#main-index").name
            'main-index'
        """
        domain, role, name = split_key(spec)
        if dispname is None:
            dispname = name
        if not domain:
            if not role:
                if spec.endswith("`"):
                    raise InventoryArgumentError(f"No role in {spec!r}")
                domain = "std"
                role = "label"
                name = slugify(name)
            elif role in ("label", "doc"):
                domain = "std"
            else:
                domain = DEFAULT_DOMAIN
        if priority is None:
            priority = default_priority(domain)
        return cls(
            name=name, domain=domain, role=role, priority=priority, uri=uri, dispname=dispname
        )

    @property
    def has_default_priority(self) -> bool:
        return self.priority == default_priority(self.domain)

    @property
    def has_default_dispname(self) -> bool:
        return self.dispname == SAME_AS_NAME

    def __repr__(self) -> str:
        parts = [repr(spec(self)), repr(self.uri)]
        if not self.has_default_priority:
            parts.append(f"priority={self.priority!r}")
        if not self.has_default_dispname:
            parts.append(f"dispname={self.dispname!r}")
        return f"InventoryItem({', '.join(parts)})"


def split_key(key: str) -> tuple[str, str, str]:
    """Split a lookup key into ``(domain, role, name)``.

    The key has the form ``[:[domain:]role:]name``, where ``name`` may be
    enclosed in backticks. A single token before the name (``":func:f"``)
    is taken as the role, with an empty domain. Missing parts are returned
    as empty strings.

    Raises:
        InventoryArgumentError: If the key cannot be parsed.
    """
    m = _RX_KEY.match(key)
    if m is None:
        raise InventoryArgumentError(f"Invalid inventory key: {key!r}")
    name = m["name"]
    if len(name) > 1 and name.startswith("`") and name.endswith("`"):
        name = name[1:-1]
    if m["role"] is None:
        # ":func:f" matches `func` as the domain group
        role = m["domain"] or ""
        domain = ""
    else:
        role = m["role"]
        domain = m["domain"] or ""
    return domain, role, name


def slugify(s: str) -> str:
    """Convert a section title into an anchor slug.

    Whitespace becomes ``-``, ``&`` becomes ``-and-``, and any character
    that is not a letter, punctuation, a digit or ``-`` is dropped.
    """
    s = re.sub(r"\s+", "-", s)
    s = s.replace("&", "-and-")
    s = "".join(c for c in s if c == "-" or _is_slug_char(c))
    s = re.sub(r"--+", "-", s)
    return s.strip("-")


def _is_slug_char(c: str) -> bool:
    category = unicodedata.category(c)
    return category[0] in ("L", "P") or category == "Nd"


def uri(item: InventoryItem, root_url: str = "") -> str:
    """Return the full uri of ``item``, with the ``$`` placeholder expanded."""
    _uri = item.uri
    if _uri.endswith(PLACEHOLDER):
        _uri = _uri[:-1] + item.name
    return root_url + _uri


def dispname(item: InventoryItem) -> str:
    """Return the display name of ``item``, with ``"-"`` expanded to the name."""
    return item.name if item.dispname == SAME_AS_NAME else item.dispname


def spec(item: InventoryItem) -> str:
    """Return the specification string ``:domain:role:`name``` of ``item``."""
    return f":{item.domain}:{item.role}:`{item.name}`"


def show_full(item: InventoryItem) -> str:
    """Return a representation of ``item`` listing all expanded attributes."""
    return (
        "InventoryItem("
        f"name={item.name!r}, "
        f"domain={item.domain!r}, "
        f"role={item.role!r}, "
        f"priority={item.priority!r}, "
        f"uri={uri(item)!r}, "
        f"dispname={dispname(item)!r})"
    )
