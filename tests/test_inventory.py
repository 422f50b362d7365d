"""Tests for inventory module."""
import logging
import re

import pytest

from doc_inventories import Inventory, InventoryItem, find_in_inventory, save, spec, uri


def _wikipedia_inventory():
    inventory = Inventory(project="WP", root_url="https://en.wikipedia.org/wiki/")
    inventory.push(
        InventoryItem.from_spec("Sphinx", "Sphinx_(documentation_generator)"),
        InventoryItem.from_spec("reStructuredText", "ReStructuredText"),
    )
    return inventory


def _search_inventory():
    inventory = Inventory(project="Search", version="1.0")
    inventory.push(
        InventoryItem.from_spec(":foo:a:`A`", "#$", priority=-1),
        InventoryItem.from_spec(":foo:b:`A`", "#$", priority=0),
        InventoryItem.from_spec(":foo:c:`A`", "#$", priority=1),
        InventoryItem.from_spec(":foo:a:`B`", "#$", priority=1),
        InventoryItem.from_spec(":foo:a:`C`", "#$", priority=1),
        InventoryItem.from_spec(":bar:a:`A`", "#$", priority=2),
        InventoryItem.from_spec(":bar:b:`A`", "#$", priority=0),
        InventoryItem.from_spec(":bar:c:`A`", "#$", priority=-1),
    )
    return inventory


class TestBuildManually:
    """Tests for building an inventory with push and append."""

    def test_wikipedia_example(self):
        """Test the end-to-end example of an inventory of Wikipedia pages."""
        inventory = _wikipedia_inventory()
        assert not inventory.sorted
        assert inventory.source == ""
        assert len(inventory) == 2
        for item in inventory:
            assert item.domain == "std"
            assert item.role == "label"
            assert item.priority == -1
        assert uri(inventory[0], root_url=inventory.root_url) == (
            "https://en.wikipedia.org/wiki/Sphinx_(documentation_generator)"
        )
        assert inventory.uri("Sphinx") == (
            "https://en.wikipedia.org/wiki/Sphinx_(documentation_generator)"
        )

    def test_repr(self):
        """Test the representation of a manually built inventory."""
        inventory = _wikipedia_inventory()
        assert repr(inventory) == (
            "Inventory(project='WP', version='', root_url='https://en.wikipedia.org/wiki/', "
            "items=[InventoryItem(':std:label:`Sphinx`', 'Sphinx_(documentation_generator)'), "
            "InventoryItem(':std:label:`reStructuredText`', 'ReStructuredText')])"
        )
        assert str(inventory) == (
            "Inventory(\n"
            " project='WP',\n"
            " version='',\n"
            " root_url='https://en.wikipedia.org/wiki/',\n"
            " items=[\n"
            "  InventoryItem(':std:label:`Sphinx`', 'Sphinx_(documentation_generator)'),\n"
            "  InventoryItem(':std:label:`reStructuredText`', 'ReStructuredText'),\n"
            " ]\n"
            ")"
        )

    def test_append_and_roundtrip(self, tmp_path):
        """Test appending collections, saving and reloading."""
        inventory = _wikipedia_inventory()
        inventory.append(
            [
                InventoryItem.from_spec(
                    "Lightweight markup languages", "Category:Lightweight_markup_languages"
                ),
                InventoryItem.from_spec("Markup languages", "Category:Markup_languages"),
            ],
            [
                InventoryItem.from_spec("Julia", "Julia_(programming_language)"),
                InventoryItem.from_spec("Python", "Python_(programming_language)"),
            ],
        )
        assert not inventory.sorted
        assert inventory[0].name == "Sphinx"
        assert inventory[-1].name == "Python"
        assert len(inventory(re.compile(r"uri=.*\(.*\)"))) == 3

        filename = tmp_path / "objects.inv"
        save(filename, inventory)
        loaded = Inventory.load(filename, root_url="https://en.wikipedia.org/wiki/")
        assert loaded.sorted
        assert loaded.project == "WP"
        assert loaded.version == ""
        assert loaded.source.endswith("objects.inv")
        assert len(loaded) == 6
        assert loaded[0].name == "Julia"
        assert spec(loaded[0]) == ":std:label:`Julia`"
        assert loaded.uri("Julia") == "https://en.wikipedia.org/wiki/Julia_(programming_language)"
        assert len(loaded(re.compile(r"uri=.*\(.*\)"))) == 3

    def test_items_argument(self):
        """Test creating an inventory from a list of items."""
        items = [
            InventoryItem.from_spec("b", "#$"),
            InventoryItem.from_spec("a", "#$"),
        ]
        inventory = Inventory(project="Items", version=1, items=items)
        assert inventory.version == "1"
        assert [item.name for item in inventory] == ["b", "a"]
        assert not inventory.sorted

    def test_push_rejects_non_items(self):
        """Test that push only accepts InventoryItem instances."""
        inventory = Inventory(project="X")
        with pytest.raises(TypeError):
            inventory.push("not an item")

    def test_items_is_a_copy(self):
        """Test that modifying the items list does not modify the inventory."""
        inventory = _wikipedia_inventory()
        items = inventory.items
        items.clear()
        assert len(inventory) == 2


class TestSort:
    """Tests for sorting and sorted insertion."""

    def test_sort(self):
        """Test that sort returns a new sorted inventory."""
        inventory = _wikipedia_inventory()
        inventory.push(InventoryItem.from_spec("Julia", "Julia_(programming_language)"))
        sorted_inventory = inventory.sort()
        assert sorted_inventory.sorted
        assert not inventory.sorted
        assert [item.name for item in sorted_inventory] == ["Julia", "Sphinx", "reStructuredText"]
        assert [item.name for item in inventory] == ["Sphinx", "reStructuredText", "Julia"]

    def test_sort_idempotent(self):
        """Test that sorting a sorted inventory returns an equal value."""
        sorted_inventory = _wikipedia_inventory().sort()
        assert sorted_inventory.sort() is sorted_inventory
        assert sorted_inventory.sort() == sorted_inventory

    def test_push_into_sorted(self):
        """Test that push keeps a sorted inventory sorted."""
        inventory = _search_inventory().sort()
        inventory.push(
            InventoryItem.from_spec(":foo:x:`B`", "#$"),
            InventoryItem.from_spec(":foo:y:`AA`", "#$"),
            InventoryItem.from_spec(":foo:z:`0`", "#$"),
        )
        names = [item.name for item in inventory]
        assert names == sorted(names)
        assert inventory[0].name == "0"
        assert inventory.sorted

    def test_push_into_sorted_is_stable(self):
        """Test that items with equal names keep the order in which they were pushed."""
        inventory = _search_inventory().sort()
        first = InventoryItem.from_spec(":new:first:`B`", "#$")
        second = InventoryItem.from_spec(":new:second:`B`", "#$")
        inventory.push(first, second)
        run = [item for item in inventory if item.name == "B"]
        assert run == [InventoryItem.from_spec(":foo:a:`B`", "#$"), first, second]

    def test_append_into_sorted(self):
        """Test that append keeps a sorted inventory sorted."""
        inventory = Inventory(project="X").sort()
        inventory.append(
            [InventoryItem.from_spec("c", "#$"), InventoryItem.from_spec("a", "#$")],
            [InventoryItem.from_spec("b", "#$")],
        )
        assert [item.name for item in inventory] == ["a", "b", "c"]


class TestFilter:
    """Tests for Inventory.filter."""

    def test_filter(self):
        """Test that filter returns a new inventory with matching items."""
        inventory = _search_inventory()
        filtered = inventory.filter(lambda item: item.domain == "bar")
        assert len(filtered) == 3
        assert len(inventory) == 8
        assert not filtered.sorted
        assert filtered.source == "filter()"

    def test_filter_preserves_sorted(self):
        """Test that filtering a sorted inventory yields a sorted inventory."""
        inventory = _search_inventory().sort()
        filtered = inventory.filter(lambda item: item.priority >= 0)
        assert filtered.sorted
        assert filtered.find("A", quiet=True).priority == 0

    def test_filter_idempotent(self):
        """Test that filtering twice with the same predicate equals filtering once."""
        inventory = _search_inventory().sort()

        def predicate(item):
            return item.role == "a"

        once = inventory.filter(predicate)
        twice = once.filter(predicate)
        assert once == twice

    def test_filter_is_independent_copy(self):
        """Test that pushing to a filtered inventory does not affect the original."""
        inventory = _search_inventory()
        filtered = inventory.filter(lambda item: True)
        filtered.push(InventoryItem.from_spec(":foo:a:`Z`", "#$"))
        assert len(filtered) == 9
        assert len(inventory) == 8


class TestSetMetadata:
    """Tests for Inventory.set_metadata."""

    def test_set_metadata(self):
        """Test changing project and version."""
        inventory = _search_inventory()
        new = inventory.set_metadata(project="New", version=2)
        assert new.project == "New"
        assert new.version == "2"
        assert inventory.project == "Search"
        assert new.items == inventory.items

    def test_set_metadata_keeps_unset_fields(self):
        """Test that omitted fields are unchanged."""
        inventory = _search_inventory()
        new = inventory.set_metadata(version="2.0")
        assert new.project == "Search"
        assert new.version == "2.0"


class TestSearch:
    """Tests for free-text search."""

    def test_search_string(self):
        """Test searching for a substring of the spec."""
        inventory = _search_inventory()
        found = inventory("`A`")
        assert len(found) == 6
        assert found[0].priority == 0
        assert found[-1].priority == 2

    def test_search_exclude_hidden(self):
        """Test that include_hidden=False omits negative priorities."""
        inventory = _search_inventory()
        found = inventory.search("`A`", include_hidden=False)
        assert len(found) == 4
        assert found[0].priority == 0
        assert found[-1].priority == 2

    def test_search_domain(self):
        """Test searching for part of a spec."""
        inventory = _search_inventory()
        found = inventory(":foo:")
        assert len(found) == 5
        assert found[0].priority == 0
        assert any(item.priority == -1 for item in found[1:])

    def test_search_ranking(self):
        """Test that search results are ordered by abs(priority)."""
        inventory = _search_inventory()
        for pattern in ("`A`", ":foo:", "#", re.compile(r"name='[AB]'")):
            ranks = [abs(item.priority) for item in inventory(pattern)]
            assert ranks == sorted(ranks)

    def test_search_regex_full_repr(self):
        """Test that regexes match against the expanded uri."""
        inventory = _search_inventory()
        found = inventory.search(re.compile(r"uri='#C'"))
        assert [spec(item) for item in found] == [":foo:a:`C`"]


class TestFind:
    """Tests for exact lookup."""

    def test_find_ambiguous(self, caplog):
        """Test that an ambiguous lookup returns the top priority and warns."""
        inventory = _search_inventory()
        with caplog.at_level(logging.WARNING):
            item = find_in_inventory(inventory, "A")
        assert item.priority == 0
        assert item == inventory["A"]
        assert "Ambiguous search" in caplog.text

    def test_find_quiet(self, caplog):
        """Test that quiet=True suppresses diagnostics."""
        inventory = _search_inventory()
        with caplog.at_level(logging.WARNING):
            inventory.find("A", quiet=True)
            inventory.find("D", quiet=True)
        assert "Ambiguous search" not in caplog.text
        assert "Cannot find item" not in caplog.text

    def test_find_missing(self, caplog):
        """Test that a miss returns None and logs an error."""
        inventory = _search_inventory()
        assert inventory["D"] is None
        with caplog.at_level(logging.WARNING):
            assert inventory.find("D") is None
        assert "Cannot find item" in caplog.text

    def test_find_domain_role(self):
        """Test restricting a lookup by domain and role."""
        inventory = _search_inventory()
        assert inventory.find("A", domain="foo", quiet=True) == inventory[":foo:b:`A`"]
        assert inventory.find("A", domain="foo", role="c", quiet=True) == inventory[":foo:c:`A`"]
        assert inventory.find(
            "A", domain="foo", role="a", include_hidden=False, quiet=True
        ) is None

    @pytest.mark.parametrize("make_sorted", [False, True])
    def test_priority_selection(self, make_sorted):
        """Test selection among items sharing one name with priorities -1, 0, 1, 2."""
        inventory = Inventory(project="P")
        inventory.push(
            InventoryItem.from_spec(":py:a:`x`", "#$", priority=-1),
            InventoryItem.from_spec(":py:b:`x`", "#$", priority=0),
            InventoryItem.from_spec(":py:c:`x`", "#$", priority=1),
            InventoryItem.from_spec(":py:d:`x`", "#$", priority=2),
            InventoryItem.from_spec(":py:e:`y`", "#$", priority=0),
        )
        if make_sorted:
            inventory = inventory.sort()
        assert inventory.find("x", quiet=True).role == "b"
        assert inventory.find("x", role="a", quiet=True).priority == -1
        assert inventory.find("x", role="a", include_hidden=False, quiet=True) is None
        hidden_excluded = inventory.find("x", domain="py", include_hidden=False, quiet=True)
        assert hidden_excluded.priority == 0

    def test_equal_rank_keeps_encounter_order(self):
        """Test that ties in abs(priority) go to the first item."""
        inventory = _search_inventory()
        assert inventory.find("A", role="c", quiet=True) == inventory[":foo:c:`A`"]
        assert inventory.find("A", role="a", quiet=True) == InventoryItem.from_spec(
            ":foo:a:`A`", "#$", priority=-1
        )

    def test_report_sink(self):
        """Test that diagnostics can be sent to a custom callable."""
        inventory = _search_inventory()
        messages = []
        inventory.find("A", report=lambda level, msg: messages.append((level, msg)))
        inventory.find("D", report=lambda level, msg: messages.append((level, msg)))
        assert [level for level, _ in messages] == [logging.WARNING, logging.ERROR]
        assert "Ambiguous search" in messages[0][1]
        assert "Cannot find item" in messages[1][1]

    def test_getitem_invalid_key(self, caplog):
        """Test that an invalid key returns None and logs an error."""
        inventory = _search_inventory()
        with caplog.at_level(logging.ERROR):
            assert inventory[""] is None
        assert "Invalid key" in caplog.text

    def test_getitem_slice(self):
        """Test integer and slice indexing."""
        inventory = _search_inventory()
        assert inventory[1] == InventoryItem.from_spec(":foo:b:`A`", "#$", priority=0)
        assert len(inventory[2:4]) == 2

    def test_uri_missing_key(self):
        """Test that uri() raises KeyError for a missing item."""
        inventory = _search_inventory()
        with pytest.raises(KeyError):
            inventory.uri("D")


class TestShow:
    """Tests for the text representation of large inventories."""

    def test_abbreviated(self):
        """Test that str() abbreviates long item lists and show_full does not."""
        inventory = Inventory(project="Long")
        inventory.push(*(InventoryItem.from_spec(f":py:function:`f{i:02d}`", "#$") for i in range(20)))
        text = str(inventory)
        assert "⋮ (20 elements in total)" in text
        assert "f10" not in text
        full = inventory.show_full()
        assert "⋮" not in full
        assert all(f"f{i:02d}" in full for i in range(20))

    def test_empty(self):
        """Test the representation of an empty inventory."""
        assert " items=[]" in str(Inventory(project="Empty"))
