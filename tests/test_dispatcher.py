import unittest

from s3prompt.dispatcher import TRANSITIONS, DispatcherState, InputDispatcher
from s3prompt.menu import GO_UP_ENTRY, SELECT_FOLDER_ENTRY, SEPARATOR, MenuEntry


def _menu():
    return [
        MenuEntry(value="a", kind="file", label="a"),
        MenuEntry(value="b/", kind="folder", label="b/"),
        SEPARATOR,
        GO_UP_ENTRY,
        SELECT_FOLDER_ENTRY,
        SEPARATOR,
    ]


class TestInputDispatcher(unittest.TestCase):
    def test_starts_loading(self) -> None:
        dispatcher = InputDispatcher()
        self.assertIs(dispatcher.state, DispatcherState.LOADING)
        self.assertTrue(dispatcher.is_loading)
        self.assertIsNone(dispatcher.current_entry())

    def test_loaded_becomes_ready(self) -> None:
        dispatcher = InputDispatcher()
        self.assertTrue(dispatcher.loaded(_menu()))
        self.assertIs(dispatcher.state, DispatcherState.READY)
        self.assertEqual(dispatcher.cursor, 0)
        self.assertEqual(dispatcher.current_entry().value, "a")

    def test_cursor_ignored_while_loading(self) -> None:
        dispatcher = InputDispatcher()
        dispatcher.menu = _menu()
        self.assertFalse(dispatcher.move(1))
        self.assertEqual(dispatcher.cursor, 0)

    def test_cursor_wraps_and_skips_separators(self) -> None:
        dispatcher = InputDispatcher()
        dispatcher.loaded(_menu())
        dispatcher.move(-1)
        self.assertEqual(dispatcher.cursor, 3)
        self.assertIs(dispatcher.current_entry(), SELECT_FOLDER_ENTRY)
        self.assertEqual(dispatcher.menu_index(), 4)
        dispatcher.move(1)
        self.assertEqual(dispatcher.cursor, 0)
        self.assertEqual(dispatcher.menu_index(), 0)
        dispatcher.move(1)
        dispatcher.move(1)
        self.assertIs(dispatcher.current_entry(), GO_UP_ENTRY)
        self.assertEqual(dispatcher.menu_index(), 3)

    def test_cursor_always_on_selectable_entry(self) -> None:
        dispatcher = InputDispatcher()
        menu = _menu()
        dispatcher.loaded(menu)
        moves = [1, 1, -1, 1, 1, 1, 1, -1, -1, -1, -1, -1, -1, 1] * 3
        for delta in moves:
            dispatcher.move(delta)
            self.assertGreaterEqual(dispatcher.cursor, 0)
            self.assertLess(dispatcher.cursor, dispatcher.selectable_count)
            self.assertFalse(menu[dispatcher.menu_index()].is_separator)

    def test_move_with_nothing_selectable(self) -> None:
        dispatcher = InputDispatcher()
        dispatcher.loaded([SEPARATOR, SEPARATOR])
        self.assertFalse(dispatcher.move(1))
        self.assertIsNone(dispatcher.current_entry())
        self.assertIs(dispatcher.state, DispatcherState.READY)

    def test_navigate_returns_to_loading_then_resets_cursor(self) -> None:
        dispatcher = InputDispatcher()
        dispatcher.loaded(_menu())
        dispatcher.move(1)
        self.assertTrue(dispatcher.navigate())
        self.assertIs(dispatcher.state, DispatcherState.LOADING)
        self.assertEqual(dispatcher.cursor, 1)
        dispatcher.loaded(_menu())
        self.assertEqual(dispatcher.cursor, 0)

    def test_navigate_ignored_while_loading(self) -> None:
        dispatcher = InputDispatcher()
        self.assertFalse(dispatcher.navigate())
        self.assertFalse(dispatcher.answer())

    def test_terminal_states_ignore_everything(self) -> None:
        for finish in ("answer", "fail"):
            dispatcher = InputDispatcher()
            dispatcher.loaded(_menu())
            self.assertTrue(getattr(dispatcher, finish)())
            self.assertTrue(dispatcher.is_finished)
            state = dispatcher.state
            self.assertFalse(dispatcher.move(1))
            self.assertFalse(dispatcher.key())
            self.assertFalse(dispatcher.navigate())
            self.assertFalse(dispatcher.loaded(_menu()))
            self.assertFalse(dispatcher.fail())
            self.assertIs(dispatcher.state, state)

    def test_fail_while_loading(self) -> None:
        dispatcher = InputDispatcher()
        self.assertTrue(dispatcher.fail())
        self.assertIs(dispatcher.state, DispatcherState.FAILED)

    def test_other_key_keeps_state(self) -> None:
        dispatcher = InputDispatcher()
        self.assertTrue(dispatcher.key())
        self.assertIs(dispatcher.state, DispatcherState.LOADING)
        dispatcher.loaded(_menu())
        self.assertTrue(dispatcher.key())
        self.assertIs(dispatcher.state, DispatcherState.READY)

    def test_no_transitions_leave_terminal_states(self) -> None:
        for (source, _event), _target in TRANSITIONS.items():
            self.assertNotIn(
                source, {DispatcherState.ANSWERED, DispatcherState.FAILED}
            )


if __name__ == "__main__":
    unittest.main()
