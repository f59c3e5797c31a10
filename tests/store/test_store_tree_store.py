import unittest
from datetime import datetime, timezone

from filedesk.errors import InvalidArgumentError
from filedesk.models import Document, Folder
from filedesk.store import TreeStore


def _chain(depth: int) -> list[Folder]:
    """f0 > f1 > ... > f{depth-1}, f0 at the root."""
    folders = [Folder(id="f0", name="f0")]
    for i in range(1, depth):
        folders.append(Folder(id=f"f{i}", name=f"f{i}", parent=f"f{i - 1}"))
    return folders


class TestTreeStore(unittest.TestCase):
    def _make_store(self) -> TreeStore:
        #   A
        #   +-- B
        #   |   +-- c.txt
        #   +-- d.txt
        #   E
        return TreeStore.from_items(
            [
                Folder(id="A", name="A"),
                Folder(id="B", name="B", parent="A"),
                Document(id="c", name="c.txt", folder="B"),
                Document(id="d", name="d.txt", folder="A"),
                Folder(id="E", name="E"),
            ]
        )

    def test_children_and_counts(self) -> None:
        store = self._make_store()
        self.assertEqual(store.root_ids, ("A", "E"))
        self.assertEqual([i.id for i in store.get_children("A")], ["B", "d"])
        self.assertEqual(store.get_folder("A").items, 2)
        self.assertEqual(store.get_folder("B").items, 1)
        self.assertEqual(store.get_folder("E").items, 0)

    def test_root_folder_id_maps_to_root_children(self) -> None:
        store = self._make_store()
        self.assertEqual([i.id for i in store.get_children("root")], ["A", "E"])
        self.assertEqual([i.id for i in store.get_children(None)], ["A", "E"])

        root = store.get_root_folder()
        self.assertEqual(root.id, "root")
        self.assertEqual(root.name, "Files")
        self.assertEqual(root.items, 2)

    def test_items_may_arrive_in_any_order(self) -> None:
        store = TreeStore.from_items(
            [
                Document(id="c", name="c.txt", folder="B"),
                Folder(id="B", name="B", parent="A"),
                Folder(id="A", name="A"),
            ]
        )
        self.assertEqual(store.root_ids, ("A",))
        self.assertEqual(store.get_folder("B").items, 1)
        self.assertEqual([i.id for i in store.get_path("c")], ["A", "B", "c"])

    def test_move_updates_both_parents(self) -> None:
        store = self._make_store()
        self.assertTrue(store.move_item("d", "E"))

        self.assertEqual(store.get("d").folder, "E")
        self.assertEqual(store.get_folder("A").items, 1)
        self.assertEqual(store.get_folder("E").items, 1)
        self.assertEqual([i.id for i in store.get_children("E")], ["d"])

    def test_move_to_root(self) -> None:
        store = self._make_store()
        self.assertTrue(store.move_item("B", "root"))
        self.assertIsNone(store.get("B").parent)
        self.assertEqual(store.root_ids, ("A", "E", "B"))
        self.assertEqual(store.get_folder("A").items, 1)

    def test_move_rejects_cycle_at_depth(self) -> None:
        store = TreeStore.from_items(_chain(6))
        before = store.snapshot

        self.assertFalse(store.move_item("f0", "f5"))
        self.assertFalse(store.move_item("f1", "f4"))
        self.assertFalse(store.move_item("f2", "f2"))
        self.assertIs(store.snapshot, before)

        self.assertTrue(store.move_item("f5", "f0"))
        self.assertEqual(store.get("f5").parent, "f0")

    def test_move_rejects_missing_or_document_target(self) -> None:
        store = self._make_store()
        self.assertFalse(store.move_item("d", "nope"))
        self.assertFalse(store.move_item("B", "c"))
        self.assertFalse(store.move_item("nope", "A"))
        self.assertFalse(store.can_move("B", "c"))
        self.assertTrue(store.can_move("B", "E"))

    def test_remove_cascades(self) -> None:
        store = self._make_store()
        store.remove_item("A")

        for item_id in ("A", "B", "c", "d"):
            self.assertFalse(store.has(item_id))
        self.assertEqual(store.root_ids, ("E",))
        self.assertEqual(store.get_children("A"), [])

    def test_remove_recounts_parent(self) -> None:
        store = self._make_store()
        store.remove_item("B")
        self.assertFalse(store.has("c"))
        self.assertEqual(store.get_folder("A").items, 1)

    def test_unknown_ids_are_noops(self) -> None:
        store = self._make_store()
        before = store.snapshot
        store.remove_item("nope")
        self.assertIsNone(store.update_item("nope", name="x"))
        self.assertIs(store.snapshot, before)
        self.assertEqual(store.get_path("nope"), [])

    def test_update_rejects_structural_fields(self) -> None:
        store = self._make_store()
        with self.assertRaises(InvalidArgumentError):
            store.update_item("B", parent="E")
        with self.assertRaises(InvalidArgumentError):
            store.update_item("B", no_such_field=1)

        updated = store.update_item("B", name="Renamed", is_pinned=True)
        self.assertEqual(updated.name, "Renamed")
        self.assertTrue(store.get("B").is_pinned)

    def test_update_rejects_derived_fields(self) -> None:
        store = self._make_store()
        before = store.snapshot
        with self.assertRaises(InvalidArgumentError) as ctx:
            store.update_item("B", items=42)
        self.assertEqual(ctx.exception.details["fields"], ["items"])
        with self.assertRaises(InvalidArgumentError):
            store.update_item("c", has_deleted_ancestor=True)

        self.assertIs(store.snapshot, before)
        self.assertEqual(store.get_folder("B").items, 1)
        self.assertFalse(store.get("c").has_deleted_ancestor)

    def test_add_item_refuses_overwrite_that_closes_a_cycle(self) -> None:
        store = TreeStore.from_items([Folder(id="A", name="A"), Folder(id="B", name="B", parent="A")])
        before = store.snapshot

        store.add_item(Folder(id="A", name="A", parent="B"))

        self.assertIs(store.snapshot, before)
        self.assertIsNone(store.get("A").parent)
        self.assertFalse(store.is_descendant("A", "B"))
        self.assertEqual(store.root_ids, ("A",))

    def test_add_item_overwrite_may_reparent(self) -> None:
        store = self._make_store()
        store.add_item(Folder(id="B", name="B", parent="E"))

        self.assertEqual(store.get("B").parent, "E")
        self.assertEqual([i.id for i in store.get_children("A")], ["d"])
        self.assertEqual(store.get_folder("A").items, 1)
        self.assertEqual(store.get_folder("E").items, 1)

    def test_load_items_drops_folders_that_close_a_cycle(self) -> None:
        store = TreeStore.from_items(
            [
                Folder(id="A", name="A", parent="B"),
                Folder(id="B", name="B", parent="A"),
            ]
        )
        self.assertTrue(store.has("A"))
        self.assertFalse(store.has("B"))
        self.assertFalse(store.is_descendant("A", "A"))

    def test_soft_delete_flags_descendants_and_recounts(self) -> None:
        store = self._make_store()
        at = datetime(2025, 1, 1, tzinfo=timezone.utc)
        store.trash_item("B", at=at)

        self.assertEqual(store.get("B").deleted_at, at)
        self.assertTrue(store.get("c").has_deleted_ancestor)
        self.assertFalse(store.get("d").has_deleted_ancestor)
        self.assertEqual(store.get_folder("A").items, 1)
        self.assertEqual([i.id for i in store.get_children("A")], ["d"])
        self.assertEqual(
            [i.id for i in store.get_children("A", include_deleted=True)], ["B", "d"]
        )
        self.assertEqual([i.id for i in store.list_trash()], ["B"])

        store.restore_item("B")
        self.assertFalse(store.get("c").has_deleted_ancestor)
        self.assertEqual(store.get_folder("A").items, 2)

    def test_moving_under_deleted_folder_sets_flag(self) -> None:
        store = self._make_store()
        store.trash_item("E")
        store.move_item("d", "E")
        self.assertTrue(store.get("d").has_deleted_ancestor)

    def test_descendants(self) -> None:
        store = self._make_store()
        self.assertEqual(set(store.get_descendant_ids("A")), {"B", "c", "d"})
        self.assertTrue(store.is_descendant("c", "A"))
        self.assertFalse(store.is_descendant("A", "c"))

    def test_snapshots_are_immutable_and_shared(self) -> None:
        store = self._make_store()
        before = store.snapshot
        store.move_item("d", "E")
        after = store.snapshot

        self.assertIsNot(before, after)
        self.assertEqual(before.get("d").folder, "A")
        self.assertIs(before.get("c"), after.get("c"))
        with self.assertRaises(TypeError):
            after.items["x"] = Folder(id="x", name="x")  # type: ignore[index]

    def test_subscribe_and_unsubscribe(self) -> None:
        store = self._make_store()
        seen = []
        unsubscribe = store.subscribe(seen.append)

        store.move_item("d", "E")
        self.assertEqual(len(seen), 1)
        self.assertIs(seen[0], store.snapshot)

        unsubscribe()
        store.move_item("d", "A")
        self.assertEqual(len(seen), 1)

    def test_load_contents_replaces_items(self) -> None:
        store = self._make_store()
        store.load_contents(
            {
                "data": {
                    "folderContents": {
                        "folders": [{"_id": "x", "name": "X", "items": 1}],
                        "files": [{"_id": "y", "name": "y.txt", "folder": "x"}],
                    }
                }
            }
        )
        self.assertFalse(store.has("A"))
        self.assertEqual(store.root_ids, ("x",))
        self.assertEqual(store.get_folder("x").items, 1)


if __name__ == "__main__":
    unittest.main()
