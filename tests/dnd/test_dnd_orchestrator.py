import asyncio
import unittest
from typing import Any, Optional

from filedesk.dnd import (
    BREADCRUMB_CONTENT_ID,
    BREADCRUMB_TRIGGER_ID,
    Collision,
    DialogDuplicateResolver,
    DragOrchestrator,
    DragPhase,
    Droppable,
    DuplicateResolution,
    MoveBatchRunner,
    Point,
    Rect,
    breadcrumb_dropdown_id,
)
from filedesk.errors import ConflictError, InvalidStateError, NotFoundError
from filedesk.events import ClickEvent, EventSource, PointerEvent
from filedesk.models import Document, Folder
from filedesk.selection import SelectionEngine
from filedesk.store import TreeStore


def _conflict() -> ConflictError:
    return ConflictError("An item with this name already exists", details={"field": "name", "status_code": 409})


class FakeMoveApi:
    """Records calls; per-item queues of exceptions to raise (None = succeed)."""

    def __init__(self, failures: Optional[dict[str, list[Optional[Exception]]]] = None) -> None:
        self.failures = failures or {}
        self.calls: list[tuple[str, str, Optional[str], Optional[str]]] = []

    async def move_folder(self, folder_id: str, *, parent, name, duplicate_action=None) -> Any:
        return self._record("folder", folder_id, parent, duplicate_action)

    async def move_file(self, file_id: str, *, folder, name, duplicate_action=None) -> Any:
        return self._record("file", file_id, folder, duplicate_action)

    def calls_for(self, item_id: str) -> list[tuple[str, str, Optional[str], Optional[str]]]:
        return [c for c in self.calls if c[1] == item_id]

    def _record(self, kind: str, item_id: str, parent: Optional[str], action: Optional[str]) -> Any:
        self.calls.append((kind, item_id, parent, action))
        queue = self.failures.get(item_id)
        if queue:
            exc = queue.pop(0)
            if exc is not None:
                raise exc
        return {"success": True}


class FakeResolver:
    def __init__(self, *answers: DuplicateResolution) -> None:
        self.answers = list(answers)
        self.asked: list[tuple[str, str]] = []

    async def resolve_duplicate(self, name: str, kind: str) -> DuplicateResolution:
        self.asked.append((name, kind))
        return self.answers.pop(0)


class FakeNotifier:
    def __init__(self) -> None:
        self.successes: list[str] = []
        self.errors: list[str] = []

    def success(self, message: str) -> None:
        self.successes.append(message)

    def error(self, message: str) -> None:
        self.errors.append(message)


class _Base(unittest.IsolatedAsyncioTestCase):
    def _setup(self, api: FakeMoveApi, resolver: Optional[FakeResolver] = None) -> None:
        #   T/            (drop target)
        #   P/
        #     Q/
        #     inner.txt
        #   a.txt  b/  c.txt
        self.store = TreeStore.from_items(
            [
                Folder(id="T", name="Target"),
                Folder(id="P", name="P"),
                Folder(id="Q", name="Q", parent="P"),
                Document(id="inner", name="inner.txt", folder="P"),
                Document(id="a", name="a.txt"),
                Folder(id="b", name="b"),
                Document(id="c", name="c.txt"),
            ]
        )
        self.selection = SelectionEngine(schedule=lambda cb: cb())
        self.selection.set_visible_items(self.store.get_children(None))
        self.api = api
        self.resolver = resolver or FakeResolver()
        self.notifier = FakeNotifier()
        self.mover = MoveBatchRunner(
            api, self.store, resolver=self.resolver, notifier=self.notifier
        )
        self.orchestrator = DragOrchestrator(self.store, self.selection, self.mover)

    def _select(self, *ids: str) -> None:
        self.selection.select(ids[0])
        for item_id in ids[1:]:
            self.selection.select(item_id, ClickEvent(ctrl=True))


class TestDropBatch(_Base):
    async def test_conflict_keep_both_retries_only_that_item(self) -> None:
        api = FakeMoveApi({"b": [_conflict(), None]})
        self._setup(api, FakeResolver(DuplicateResolution.accept("keepBoth")))
        self._select("a", "b", "c")

        self.assertTrue(self.orchestrator.drag_start("a"))
        self.assertEqual(self.orchestrator.state.dragged_ids, ("a", "b", "c"))

        result = await self.orchestrator.drag_end(Collision(id="T"))

        self.assertEqual(len(api.calls_for("a")), 1)
        self.assertEqual(len(api.calls_for("b")), 2)
        self.assertEqual(len(api.calls_for("c")), 1)
        self.assertEqual([c[1] for c in api.calls], ["a", "b", "b", "c"])
        self.assertEqual(api.calls_for("b")[0], ("folder", "b", "T", None))
        self.assertEqual(api.calls_for("b")[1], ("folder", "b", "T", "keepBoth"))
        self.assertEqual(self.resolver.asked, [("b", "folder")])

        self.assertEqual(result.status, "success")
        self.assertEqual(result.moved_ids, ["a", "b", "c"])
        self.assertEqual(result.outcomes[1].duplicate_action, "keepBoth")
        self.assertEqual(result.outcomes[1].attempts, 2)
        for item_id in ("a", "b", "c"):
            self.assertEqual(self.store.get_path(item_id)[0].id, "T")
        self.assertEqual(self.store.get_folder("T").items, 3)

        self.assertEqual(len(self.notifier.successes), 1)
        self.assertEqual(self.notifier.errors, [])
        self.assertEqual(self.orchestrator.state.phase, DragPhase.IDLE)
        self.assertEqual(self.selection.selected_ids, frozenset())

    async def test_other_error_aborts_remaining_items(self) -> None:
        api = FakeMoveApi({"b": [NotFoundError("Folder not found", details={"status_code": 404})]})
        self._setup(api)
        self._select("a", "b", "c")
        self.orchestrator.drag_start("b")

        result = await self.orchestrator.drag_end(Collision(id="T"))

        self.assertEqual([c[1] for c in api.calls], ["a", "b"])
        self.assertEqual(result.status, "partial")
        self.assertEqual(result.stopped_item_id, "b")
        self.assertEqual(
            [o.status for o in result.outcomes], ["moved", "failed", "not_attempted"]
        )
        self.assertEqual(result.outcomes[1].error_type, "NotFoundError")
        self.assertEqual(self.store.get("a").folder, "T")
        self.assertIsNone(self.store.get("b").parent)
        self.assertIsNone(self.store.get("c").folder)

        self.assertEqual(len(self.notifier.errors), 1)
        self.assertEqual(len(self.notifier.successes), 1)
        self.assertEqual(self.orchestrator.state.phase, DragPhase.IDLE)
        self.assertEqual(self.selection.selected_ids, frozenset())

    async def test_unexpected_api_exception_aborts_with_one_error(self) -> None:
        api = FakeMoveApi({"b": [RuntimeError("socket closed")]})
        self._setup(api)
        self._select("a", "b", "c")
        self.orchestrator.drag_start("a")

        result = await self.orchestrator.drag_end(Collision(id="T"))

        self.assertEqual([c[1] for c in api.calls], ["a", "b"])
        self.assertEqual(result.status, "partial")
        self.assertEqual(result.stopped_item_id, "b")
        self.assertEqual(
            [o.status for o in result.outcomes], ["moved", "failed", "not_attempted"]
        )
        self.assertEqual(result.outcomes[1].error_type, "ApiError")
        self.assertEqual(result.outcomes[1].error_message, "socket closed")
        self.assertEqual(result.outcomes[1].error_details, {"error_type": "RuntimeError"})
        self.assertEqual(self.notifier.errors, ['Failed to move "b": socket closed'])
        self.assertEqual(self.orchestrator.state.phase, DragPhase.IDLE)

    async def test_task_cancellation_propagates(self) -> None:
        api = FakeMoveApi({"a": [asyncio.CancelledError()]})
        self._setup(api)
        self.orchestrator.drag_start("a")

        with self.assertRaises(asyncio.CancelledError):
            await self.orchestrator.drag_end(Collision(id="T"))
        self.assertEqual(self.notifier.errors, [])
        self.assertEqual(self.orchestrator.state.phase, DragPhase.IDLE)

    async def test_first_item_failure_is_failed_status(self) -> None:
        api = FakeMoveApi({"a": [NotFoundError("gone")]})
        self._setup(api)
        self._select("a", "c")
        self.orchestrator.drag_start("a")

        result = await self.orchestrator.drag_end(Collision(id="T"))
        self.assertEqual(result.status, "failed")
        self.assertEqual(self.notifier.successes, [])
        self.assertEqual(len(self.notifier.errors), 1)

    async def test_cancelled_resolution_skips_only_that_item(self) -> None:
        api = FakeMoveApi({"a": [_conflict()]})
        self._setup(api, FakeResolver(DuplicateResolution.cancel()))
        self._select("a", "c")
        self.orchestrator.drag_start("c")

        result = await self.orchestrator.drag_end(Collision(id="T"))

        self.assertEqual([o.status for o in result.outcomes], ["skipped", "moved"])
        self.assertEqual(len(api.calls_for("a")), 1)
        self.assertIsNone(self.store.get("a").folder)
        self.assertEqual(self.store.get("c").folder, "T")
        self.assertEqual(result.status, "success")

    async def test_conflict_on_retry_aborts(self) -> None:
        api = FakeMoveApi({"a": [_conflict(), _conflict()]})
        self._setup(api, FakeResolver(DuplicateResolution.accept("replace")))
        self._select("a", "c")
        self.orchestrator.drag_start("a")

        result = await self.orchestrator.drag_end(Collision(id="T"))

        self.assertEqual(len(api.calls_for("a")), 2)
        self.assertEqual(api.calls_for("c"), [])
        self.assertEqual(result.status, "failed")
        self.assertEqual(result.outcomes[0].duplicate_action, "replace")

    async def test_structurally_invalid_item_is_skipped_without_call(self) -> None:
        api = FakeMoveApi()
        self._setup(api)
        self.orchestrator.drag_start("P")

        result = await self.orchestrator.drag_end(Collision(id="Q"))

        self.assertEqual(api.calls, [])
        self.assertEqual([o.status for o in result.outcomes], ["skipped"])
        self.assertEqual(self.notifier.successes, [])
        self.assertIsNone(self.store.get("P").parent)

    async def test_single_item_drag_ignores_unrelated_selection(self) -> None:
        api = FakeMoveApi()
        self._setup(api)
        self._select("a", "c")
        self.orchestrator.drag_start("b")
        self.assertEqual(self.orchestrator.state.dragged_ids, ("b",))
        await self.orchestrator.drag_end(Collision(id="T"))
        self.assertEqual([c[1] for c in api.calls], ["b"])


class TestTargetResolution(_Base):
    async def test_self_drop_aborts_without_calls(self) -> None:
        api = FakeMoveApi()
        self._setup(api)
        self.orchestrator.drag_start("T")
        self.assertIsNone(self.orchestrator.drag_over(Collision(id="T")))

        result = await self.orchestrator.drag_end(Collision(id="T"))
        self.assertEqual(result.status, "aborted")
        self.assertEqual(api.calls, [])
        self.assertEqual(self.orchestrator.state.phase, DragPhase.IDLE)

    async def test_document_and_content_targets_abort(self) -> None:
        api = FakeMoveApi()
        self._setup(api)
        self.orchestrator.drag_start("a")
        self.assertIsNone(self.orchestrator.drag_over(Collision(id="c")))
        self.assertIsNone(self.orchestrator.drag_over(Collision(id=BREADCRUMB_CONTENT_ID)))

        result = await self.orchestrator.drag_end(Collision(id=BREADCRUMB_CONTENT_ID))
        self.assertEqual(result.status, "aborted")
        self.assertEqual(api.calls, [])

    async def test_unresolvable_breadcrumb_aborts(self) -> None:
        api = FakeMoveApi()
        self._setup(api)
        self.orchestrator.drag_start("a")
        result = await self.orchestrator.drag_end(Collision(id=breadcrumb_dropdown_id("nope")))
        self.assertEqual(result.status, "aborted")
        self.assertEqual(api.calls, [])

    async def test_trigger_drops_into_root(self) -> None:
        api = FakeMoveApi()
        self._setup(api)
        self.orchestrator.drag_start("inner")
        self.assertEqual(
            self.orchestrator.drag_over(Collision(id=BREADCRUMB_TRIGGER_ID)), "root"
        )

        result = await self.orchestrator.drag_end()

        self.assertEqual(api.calls, [("file", "inner", None, None)])
        self.assertEqual(result.status, "success")
        self.assertIsNone(self.store.get("inner").folder)
        self.assertIn("inner", self.store.root_ids)
        self.assertEqual(self.store.get_folder("P").items, 1)

    async def test_breadcrumb_item_resolves_through_store(self) -> None:
        api = FakeMoveApi()
        self._setup(api)
        self.orchestrator.drag_start("a")
        result = await self.orchestrator.drag_end(Collision(id=breadcrumb_dropdown_id("P")))
        self.assertEqual(api.calls, [("file", "a", "P", None)])
        self.assertEqual(self.store.get("a").folder, "P")
        self.assertEqual(result.target_id, "P")

    async def test_breadcrumb_payload_folder_outside_store(self) -> None:
        api = FakeMoveApi()
        self._setup(api)
        outside = Folder(id="X", name="Elsewhere")
        self.orchestrator.drag_start("a")

        result = await self.orchestrator.drag_end(
            Collision(id=breadcrumb_dropdown_id("X"), data={"type": "folder", "item": outside})
        )

        self.assertEqual(api.calls, [("file", "a", "X", None)])
        self.assertEqual(result.status, "success")
        self.assertFalse(self.store.has("a"))
        self.assertEqual(self.notifier.successes, ['Moved 1 item to "X"'])


class TestDragLifecycle(_Base):
    async def test_cancel_resets_without_calls(self) -> None:
        api = FakeMoveApi()
        self._setup(api)
        self._select("a", "c")
        self.orchestrator.drag_start("a")
        self.orchestrator.drag_cancel()

        self.assertEqual(self.orchestrator.state.phase, DragPhase.IDLE)
        self.assertEqual(self.orchestrator.state.dragged_items, ())
        self.assertEqual(self.selection.selected_ids, frozenset())
        self.assertEqual(api.calls, [])

    async def test_second_drag_start_is_rejected(self) -> None:
        self._setup(FakeMoveApi())
        self.orchestrator.drag_start("a")
        with self.assertRaises(InvalidStateError):
            self.orchestrator.drag_start("c")

    async def test_unknown_item_stays_idle(self) -> None:
        self._setup(FakeMoveApi())
        self.assertFalse(self.orchestrator.drag_start("nope"))
        self.assertFalse(self.orchestrator.is_dragging)

    async def test_drag_end_without_drag_raises(self) -> None:
        self._setup(FakeMoveApi())
        with self.assertRaises(InvalidStateError):
            await self.orchestrator.drag_end(Collision(id="T"))

    async def test_outside_container_tracking(self) -> None:
        self._setup(FakeMoveApi())
        orchestrator = DragOrchestrator(
            self.store,
            self.selection,
            self.mover,
            container_rect=lambda: Rect(0, 0, 50, 50),
        )
        orchestrator.drag_start("a", Point(10, 10))
        self.assertFalse(orchestrator.state.is_outside_container)
        orchestrator.drag_move(Point(100, 100))
        self.assertTrue(orchestrator.state.is_outside_container)
        orchestrator.drag_move(Point(20, 20))
        self.assertFalse(orchestrator.state.is_outside_container)

    async def test_missing_container_counts_as_outside(self) -> None:
        self._setup(FakeMoveApi())
        self.orchestrator.drag_start("a", Point(10, 10))
        self.assertTrue(self.orchestrator.state.is_outside_container)

    async def test_pointer_events_drive_a_drop(self) -> None:
        api = FakeMoveApi()
        self._setup(api)
        self.orchestrator.droppables.register(Droppable.fixed("T", Rect(100, 100, 200, 200)))
        source = EventSource()
        states = []
        self.orchestrator.subscribe(states.append)
        self.orchestrator.attach(source)
        self.assertEqual(source.listener_count("pointermove"), 0)

        self.orchestrator.pointer_down("a", PointerEvent(0, 0, time_ms=0.0))
        self.assertEqual(source.listener_count("pointermove"), 1)

        source.dispatch("pointermove", PointerEvent(2, 2, time_ms=200.0))
        self.assertTrue(self.orchestrator.is_dragging)
        source.dispatch("pointermove", PointerEvent(150, 150, time_ms=220.0))
        self.assertEqual(self.orchestrator.state.over_target_id, "T")

        result = await self.orchestrator.pointer_up(PointerEvent(150, 150, time_ms=230.0))

        self.assertIsNotNone(result)
        self.assertEqual(result.moved_ids, ["a"])
        self.assertEqual(api.calls, [("file", "a", "T", None)])
        self.assertEqual(source.listener_count("pointermove"), 0)
        self.assertEqual(states[-1].phase, DragPhase.IDLE)

        self.orchestrator.detach()

    async def test_quick_release_is_a_click(self) -> None:
        api = FakeMoveApi()
        self._setup(api)
        source = EventSource()
        self.orchestrator.attach(source)

        self.orchestrator.pointer_down("a", PointerEvent(0, 0, time_ms=0.0))
        self.assertIsNone(await self.orchestrator.pointer_up(PointerEvent(0, 0, time_ms=50.0)))
        self.assertFalse(self.orchestrator.is_dragging)
        self.assertEqual(source.listener_count("pointermove"), 0)

    async def test_scroll_gesture_never_starts_a_drag(self) -> None:
        self._setup(FakeMoveApi())
        self.orchestrator.pointer_down("a", PointerEvent(0, 0, time_ms=0.0, pointer_type="touch"))
        self.orchestrator.pointer_move(PointerEvent(0, 40, time_ms=100.0, pointer_type="touch"))
        self.assertFalse(self.orchestrator.poll(1000.0))
        self.assertFalse(self.orchestrator.is_dragging)

    async def test_poll_activates_held_press(self) -> None:
        self._setup(FakeMoveApi())
        self.orchestrator.pointer_down("a", PointerEvent(5, 5, time_ms=0.0))
        self.assertFalse(self.orchestrator.poll(100.0))
        self.assertTrue(self.orchestrator.poll(150.0))
        self.assertTrue(self.orchestrator.is_dragging)
        self.assertEqual(self.orchestrator.state.pointer_position, Point(5, 5))


class FakeDialogs:
    def __init__(self) -> None:
        self.opened: list[tuple[str, str]] = []
        self.closed = 0
        self.on_resolve = None
        self.on_cancel = None

    def open_duplicate_dialog(self, name, kind, on_resolve, on_cancel=None) -> None:
        self.opened.append((name, kind))
        self.on_resolve = on_resolve
        self.on_cancel = on_cancel

    def close_duplicate_dialog(self) -> None:
        self.closed += 1


class TestDialogDuplicateResolver(unittest.IsolatedAsyncioTestCase):
    async def test_resolve_through_dialog_callback(self) -> None:
        dialogs = FakeDialogs()
        resolver = DialogDuplicateResolver(dialogs)

        task = asyncio.create_task(resolver.resolve_duplicate("a.txt", "file"))
        await asyncio.sleep(0)
        self.assertEqual(dialogs.opened, [("a.txt", "file")])
        self.assertFalse(task.done())

        dialogs.on_resolve("keepBoth")
        resolution = await task
        self.assertEqual(resolution.action, "keepBoth")
        self.assertFalse(resolution.cancelled)
        self.assertEqual(dialogs.closed, 1)

    async def test_cancel_through_dialog_callback(self) -> None:
        dialogs = FakeDialogs()
        resolver = DialogDuplicateResolver(dialogs)

        task = asyncio.create_task(resolver.resolve_duplicate("b", "folder"))
        await asyncio.sleep(0)
        dialogs.on_cancel()
        resolution = await task
        self.assertTrue(resolution.cancelled)
        self.assertEqual(dialogs.closed, 1)

    async def test_unknown_action_rejected(self) -> None:
        with self.assertRaises(ValueError):
            DuplicateResolution.accept("overwrite")  # type: ignore[arg-type]

    async def test_unknown_dialog_answer_resolves_as_cancelled(self) -> None:
        dialogs = FakeDialogs()
        resolver = DialogDuplicateResolver(dialogs)

        task = asyncio.create_task(resolver.resolve_duplicate("a.txt", "file"))
        await asyncio.sleep(0)
        dialogs.on_resolve("overwrite")
        resolution = await asyncio.wait_for(task, timeout=1)

        self.assertTrue(resolution.cancelled)
        self.assertEqual(dialogs.closed, 1)


class AnsweringDialogs(FakeDialogs):
    """Dialog that answers with a fixed action as soon as it opens."""

    def __init__(self, answer: str) -> None:
        super().__init__()
        self.answer = answer

    def open_duplicate_dialog(self, name, kind, on_resolve, on_cancel=None) -> None:
        super().open_duplicate_dialog(name, kind, on_resolve, on_cancel)
        on_resolve(self.answer)


class TestDialogDrivenDrop(_Base):
    async def test_bad_dialog_answer_skips_item_and_drop_finishes(self) -> None:
        api = FakeMoveApi({"a": [_conflict()]})
        dialogs = AnsweringDialogs("overwrite")
        self._setup(api, DialogDuplicateResolver(dialogs))
        self._select("a", "c")
        self.orchestrator.drag_start("a")

        result = await asyncio.wait_for(self.orchestrator.drag_end(Collision(id="T")), timeout=1)

        self.assertEqual(dialogs.opened, [("a.txt", "file")])
        self.assertEqual(dialogs.closed, 1)
        self.assertEqual([o.status for o in result.outcomes], ["skipped", "moved"])
        self.assertEqual(len(api.calls_for("a")), 1)
        self.assertIsNone(self.store.get("a").folder)
        self.assertEqual(self.store.get("c").folder, "T")
        self.assertEqual(self.orchestrator.state.phase, DragPhase.IDLE)

    async def test_dialog_answer_retries_with_action(self) -> None:
        api = FakeMoveApi({"a": [_conflict(), None]})
        self._setup(api, DialogDuplicateResolver(AnsweringDialogs("replace")))
        self.orchestrator.drag_start("a")

        result = await self.orchestrator.drag_end(Collision(id="T"))

        self.assertEqual(api.calls_for("a")[1], ("file", "a", "T", "replace"))
        self.assertEqual(result.status, "success")


if __name__ == "__main__":
    unittest.main()
