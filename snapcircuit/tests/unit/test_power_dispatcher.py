"""Tests for PowerDispatcher and ListenerToken."""

import logging
from unittest.mock import MagicMock

import pytest
from snapcircuit.controllers.power_dispatcher import CircuitReentryError, PowerDispatcher
from snapcircuit.tests.conftest import PowerLog


class TestDispatch:
    def test_change_delivered_once(self):
        dispatcher = PowerDispatcher()
        log = PowerLog()
        dispatcher.register("L1", log)
        dispatcher.dispatch({"L1": True})
        dispatcher.dispatch({"L1": True})
        assert log.values == [True]

    def test_initial_false_not_delivered(self):
        dispatcher = PowerDispatcher()
        log = PowerLog()
        dispatcher.register("L1", log)
        dispatcher.dispatch({"L1": False})
        assert log.calls == 0

    def test_on_then_off(self):
        dispatcher = PowerDispatcher()
        log = PowerLog()
        dispatcher.register("L1", log)
        dispatcher.dispatch({"L1": True})
        dispatcher.dispatch({"L1": False})
        assert log.values == [True, False]

    def test_missing_from_map_treated_as_unpowered(self):
        dispatcher = PowerDispatcher()
        log = PowerLog()
        dispatcher.register("L1", log)
        dispatcher.dispatch({"L1": True})
        changed = dispatcher.dispatch({})
        assert log.values == [True, False]
        assert changed == ["L1"]

    def test_absent_listener_skipped_but_memo_updated(self):
        dispatcher = PowerDispatcher()
        assert dispatcher.dispatch({"L1": True}) == ["L1"]
        assert dispatcher.last_delivered("L1") is True
        log = PowerLog()
        dispatcher.register("L1", log)
        dispatcher.dispatch({"L1": True})
        assert log.calls == 0

    def test_only_changed_ids_notified(self):
        dispatcher = PowerDispatcher()
        a, b = PowerLog(), PowerLog()
        dispatcher.register("A", a)
        dispatcher.register("B", b)
        dispatcher.dispatch({"A": True, "B": False})
        assert a.values == [True]
        assert b.values == []

    def test_listener_error_logged_and_others_still_notified(self, caplog):
        dispatcher = PowerDispatcher()
        failing = MagicMock(side_effect=RuntimeError("boom"))
        log = PowerLog()
        dispatcher.register("A", failing)
        dispatcher.register("B", log)
        with caplog.at_level(logging.ERROR):
            dispatcher.dispatch({"A": True, "B": True})
        failing.assert_called_once_with(True)
        assert log.values == [True]
        assert "boom" in caplog.text

    def test_reentry_error_raised_after_remaining_listeners(self):
        dispatcher = PowerDispatcher()
        later = PowerLog()
        dispatcher.register("A", MagicMock(side_effect=CircuitReentryError("A re-entered")))
        dispatcher.register("B", later)
        with pytest.raises(CircuitReentryError, match="A re-entered"):
            dispatcher.dispatch({"A": True, "B": True})
        assert later.values == [True]
        assert dispatcher.last_delivered("A") is True
        assert dispatcher.last_delivered("B") is True


class TestListenerSlots:
    def test_register_replaces_previous(self):
        dispatcher = PowerDispatcher()
        first, second = PowerLog(), PowerLog()
        dispatcher.register("L1", first)
        dispatcher.register("L1", second)
        dispatcher.dispatch({"L1": True})
        assert first.calls == 0
        assert second.values == [True]
        assert len(dispatcher) == 1

    def test_unregister(self):
        dispatcher = PowerDispatcher()
        log = PowerLog()
        dispatcher.register("L1", log)
        assert dispatcher.unregister("L1") is True
        assert dispatcher.unregister("L1") is False
        dispatcher.dispatch({"L1": True})
        assert log.calls == 0

    def test_token_dispose_removes_own_registration(self):
        dispatcher = PowerDispatcher()
        token = dispatcher.register("L1", PowerLog())
        assert token.active
        assert token.dispose() is True
        assert dispatcher.listener_for("L1") is None
        assert token.dispose() is False

    def test_stale_token_does_not_remove_replacement(self):
        dispatcher = PowerDispatcher()
        old = dispatcher.register("L1", PowerLog())
        replacement = PowerLog()
        dispatcher.register("L1", replacement)
        assert not old.active
        assert old.dispose() is False
        assert dispatcher.listener_for("L1") is replacement

    def test_token_as_context_manager(self):
        dispatcher = PowerDispatcher()
        log = PowerLog()
        with dispatcher.register("L1", log):
            dispatcher.dispatch({"L1": True})
        dispatcher.dispatch({"L1": False})
        assert log.values == [True]

    def test_forget_drops_slot_and_memo(self):
        dispatcher = PowerDispatcher()
        dispatcher.register("L1", PowerLog())
        dispatcher.dispatch({"L1": True})
        dispatcher.forget("L1")
        assert dispatcher.listener_for("L1") is None
        assert dispatcher.last_delivered("L1") is False

    def test_reset_keeps_listeners_by_default(self):
        dispatcher = PowerDispatcher()
        log = PowerLog()
        dispatcher.register("L1", log)
        dispatcher.dispatch({"L1": True})
        dispatcher.reset()
        assert dispatcher.last_delivered("L1") is False
        assert dispatcher.listener_for("L1") is log
        dispatcher.reset(clear_listeners=True)
        assert len(dispatcher) == 0
