"""
Unit tests for placing new nodes with IntervalTreeManager
"""

import pytest

from nestedtree.core.errors import DetachedReferenceError, InvalidOperationError
from nestedtree.core.models import TreeStatistics
from nestedtree.tree.manager import IntervalTreeManager
from nestedtree.tree.node import TreeItem
from nestedtree.tree.storage import MemoryTreeStore
from nestedtree.tests.test_helpers import (
    CATALOG_DEPTH_FIRST_ORDER,
    assert_catalog,
    assert_node,
    build_catalog,
    make_items,
    snapshot,
)


class TestAddChild:
    """Test suite for add_child"""

    def test_first_root_starts_at_one(self, config):
        manager = IntervalTreeManager(MemoryTreeStore(), config)
        electronics = manager.add_child(TreeItem("Electronics"))
        assert (electronics.left, electronics.right) == (1, 2)

    def test_roots_are_appended_in_order(self, config):
        manager = IntervalTreeManager(MemoryTreeStore(), config)
        electronics = manager.add_child(TreeItem("Electronics"))
        clothing = manager.add_child(TreeItem("Clothing"))
        assert (electronics.left, electronics.right) == (1, 2)
        assert (clothing.left, clothing.right) == (3, 4)

    def test_child_opens_gap_on_the_cheaper_side(self, config):
        """Only Electronics' left lies below the gap, so the tree grows backward"""
        store = MemoryTreeStore()
        manager = IntervalTreeManager(store, config)
        electronics = manager.add_child(TreeItem("Electronics"))
        clothing = manager.add_child(TreeItem("Clothing"))
        smartphones = manager.add_child(TreeItem("SmartPhones"), electronics)

        assert snapshot(store.all_nodes()) == {
            "Electronics": (-1, 2),
            "SmartPhones": (0, 1),
            "Clothing": (3, 4),
        }
        assert manager.children(electronics) == [smartphones]

    def test_child_pushes_forward_when_configured(self, forward_config):
        store = MemoryTreeStore()
        manager = IntervalTreeManager(store, forward_config)
        electronics = manager.add_child(TreeItem("Electronics"))
        manager.add_child(TreeItem("Clothing"))
        manager.add_child(TreeItem("SmartPhones"), electronics)

        assert snapshot(store.all_nodes()) == {
            "Electronics": (1, 4),
            "SmartPhones": (2, 3),
            "Clothing": (5, 6),
        }

    def test_new_child_becomes_last_child(self, config):
        manager = IntervalTreeManager(MemoryTreeStore(), config)
        electronics = manager.add_child(TreeItem("Electronics"))
        smartphones = manager.add_child(TreeItem("SmartPhones"), electronics)
        laptops = manager.add_child(TreeItem("Laptops"), electronics)
        computers = manager.add_child(TreeItem("Computers"), electronics)

        assert manager.children(electronics) == [smartphones, laptops, computers]

    @pytest.mark.parametrize("config_fixture", ["config", "forward_config"])
    def test_catalog_shape(self, config_fixture, request):
        """The catalog comes out with the same shape whichever side is pushed"""
        manager = IntervalTreeManager(MemoryTreeStore(), request.getfixturevalue(config_fixture))
        items = build_catalog(manager, make_items())
        assert_catalog(items)

    def test_forward_catalog_numbers(self, forward_config):
        store = MemoryTreeStore()
        manager = IntervalTreeManager(store, forward_config)
        build_catalog(manager, make_items())

        assert snapshot(store.all_nodes()) == {
            "Electronics": (1, 26),
            "SmartPhones": (2, 11),
            "Android": (3, 4),
            "iPhones": (5, 10),
            "iPhone SE": (6, 7),
            "iPhone Pro": (8, 9),
            "Laptops": (12, 17),
            "Windows": (13, 14),
            "MacBooks": (15, 16),
            "Computers": (18, 25),
            "Desktops": (19, 24),
            "HP": (20, 21),
            "Dell": (22, 23),
            "Clothing": (27, 28),
        }

    def test_catalog_with_commits_in_between(self, config):
        """Committing moves nodes to the durable tier without changing the numbering rules"""
        store = MemoryTreeStore()
        manager = IntervalTreeManager(store, config)
        items = make_items()

        for index, (name, parent) in enumerate(CATALOG_DEPTH_FIRST_ORDER):
            manager.add_child(items[name], items[parent] if parent else None)
            if index % 3 == 0:
                store.commit()

        assert_catalog(items)

    def test_added_nodes_stay_staged_until_commit(self, config):
        store = MemoryTreeStore()
        manager = IntervalTreeManager(store, config)
        electronics = manager.add_child(TreeItem("Electronics"))
        laptops = manager.add_child(TreeItem("Laptops"), electronics)

        assert store.staged == [electronics, laptops]
        store.commit()
        assert store.staged == []
        assert store.is_attached(laptops)

    def test_add_under_preexisting_nodes(self, forward_config):
        """Nodes loaded as durable are renumbered alongside new ones"""
        electronics = TreeItem("Electronics", 1, 4)
        smartphones = TreeItem("SmartPhones", 2, 3)
        manager = IntervalTreeManager(MemoryTreeStore([electronics, smartphones]), forward_config)

        android = manager.add_child(TreeItem("Android"), smartphones)

        assert (android.left, android.right) == (3, 4)
        assert (smartphones.left, smartphones.right) == (2, 5)
        assert (electronics.left, electronics.right) == (1, 6)

    def test_detached_parent_is_rejected(self, config):
        store = MemoryTreeStore()
        manager = IntervalTreeManager(store, config)
        manager.add_child(TreeItem("Electronics"))
        before = snapshot(store.all_nodes())

        with pytest.raises(DetachedReferenceError, match="parent node has not been added yet"):
            manager.add_child(TreeItem("Laptops"), TreeItem("Ghost", 1, 2))

        assert snapshot(store.all_nodes()) == before
        assert manager.get_statistics().rejected_operations == 1

    def test_entity_added_twice_is_rejected(self, config):
        manager = IntervalTreeManager(MemoryTreeStore(), config)
        electronics = manager.add_child(TreeItem("Electronics"))
        laptops = manager.add_child(TreeItem("Laptops"), electronics)

        with pytest.raises(InvalidOperationError):
            manager.add_child(laptops, electronics)

        assert manager.children(electronics) == [laptops]

    def test_statistics_count_added_nodes(self, config):
        manager = IntervalTreeManager(MemoryTreeStore(), config)
        build_catalog(manager, make_items())
        stats = manager.get_statistics()
        assert stats.nodes_added == 14
        assert stats.subtrees_moved == 0

    def test_statistics_snapshot_is_a_copy(self, config):
        manager = IntervalTreeManager(MemoryTreeStore(), config)
        stats = manager.get_statistics()
        manager.add_child(TreeItem("Electronics"))
        assert stats.nodes_added == 0
        assert manager.get_statistics().nodes_added == 1

    def test_reset_statistics(self, config):
        """Resetting returns the old counters and starts again from zero"""
        manager = IntervalTreeManager(MemoryTreeStore(), config)
        electronics = manager.add_child(TreeItem("Electronics"))
        manager.add_child(TreeItem("Laptops"), electronics)
        with pytest.raises(InvalidOperationError):
            manager.add_child(electronics)

        previous = manager.reset_statistics()

        assert previous.nodes_added == 2
        assert previous.rejected_operations == 1
        assert manager.get_statistics() == TreeStatistics()

        manager.add_child(TreeItem("Clothing"))
        assert manager.get_statistics().nodes_added == 1


class TestInsertBefore:
    """Test suite for insert_before"""

    @pytest.fixture
    def pair(self):
        return TreeItem("Electronics"), TreeItem("SmartPhones")

    def test_insert_pushes_forward_when_configured(self, pair, forward_config):
        electronics, smartphones = pair
        manager = IntervalTreeManager(MemoryTreeStore(), forward_config)
        manager.add_child(electronics)
        manager.add_child(smartphones, electronics)
        assert (electronics.left, electronics.right) == (1, 4)
        assert (smartphones.left, smartphones.right) == (2, 3)

        laptops = manager.insert_before(TreeItem("Laptops"), smartphones)

        assert (laptops.left, laptops.right) == (2, 3)
        assert (smartphones.left, smartphones.right) == (4, 5)
        assert (electronics.left, electronics.right) == (1, 6)

    def test_insert_opens_gap_on_the_cheaper_side(self, pair, config):
        electronics, smartphones = pair
        manager = IntervalTreeManager(MemoryTreeStore(), config)
        manager.add_child(electronics)
        manager.add_child(smartphones, electronics)
        assert (electronics.left, electronics.right) == (1, 4)

        laptops = manager.insert_before(TreeItem("Laptops"), smartphones)

        assert (electronics.left, electronics.right) == (-1, 4)
        assert (laptops.left, laptops.right) == (0, 1)
        assert (smartphones.left, smartphones.right) == (2, 3)

    @pytest.mark.parametrize("config_fixture", ["config", "forward_config"])
    def test_insert_between_siblings(self, config_fixture, request):
        manager = IntervalTreeManager(MemoryTreeStore(), request.getfixturevalue(config_fixture))
        items = build_catalog(manager, make_items())
        items["Tablets"] = manager.insert_before(TreeItem("Tablets"), items["Laptops"])
        items["Feature Phones"] = manager.insert_before(TreeItem("Feature Phones"), items["Android"])

        assert_node(items, "Electronics", "SmartPhones", "Tablets", "Laptops", "Computers")
        assert_node(items, "SmartPhones", "Feature Phones", "Android", "iPhones")
        assert_node(items, "iPhones", "iPhone SE", "iPhone Pro")
        assert manager.parent(items["Tablets"]) is items["Electronics"]
        manager.check_integrity()

    def test_insert_before_a_root(self, config):
        manager = IntervalTreeManager(MemoryTreeStore(), config)
        electronics = manager.add_child(TreeItem("Electronics"))
        clothing = manager.add_child(TreeItem("Clothing"))

        books = manager.insert_before(TreeItem("Books"), clothing)

        assert manager.roots() == [electronics, books, clothing]
        assert manager.parent(books) is None

    def test_detached_sibling_is_rejected(self, config):
        manager = IntervalTreeManager(MemoryTreeStore(), config)
        manager.add_child(TreeItem("Electronics"))

        with pytest.raises(DetachedReferenceError, match="sibling node has not been added yet"):
            manager.insert_before(TreeItem("Laptops"), TreeItem("Ghost"))

    def test_missing_sibling_is_rejected(self, config):
        manager = IntervalTreeManager(MemoryTreeStore(), config)
        with pytest.raises(DetachedReferenceError):
            manager.insert_before(TreeItem("Laptops"), None)

    def test_entity_inserted_twice_is_rejected(self, pair, config):
        electronics, smartphones = pair
        manager = IntervalTreeManager(MemoryTreeStore(), config)
        manager.add_child(electronics)
        manager.add_child(smartphones, electronics)

        with pytest.raises(InvalidOperationError):
            manager.insert_before(electronics, smartphones)
