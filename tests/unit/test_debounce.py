"""Unit tests for the per-key debouncer."""

import threading
import time

from form_engine.state.debounce import Debouncer


class TestInlineMode:
    """A zero delay runs callbacks synchronously."""

    def test_runs_immediately(self):
        calls = []
        Debouncer(0).schedule("a", lambda: calls.append("a"))
        assert calls == ["a"]


class TestDeferredMode:
    """Cancel-and-reschedule semantics with real timers."""

    def test_last_call_wins(self):
        debouncer = Debouncer(0.05)
        calls = []
        done = threading.Event()

        def record(value):
            calls.append(value)
            done.set()

        debouncer.schedule("field", lambda: record(1))
        debouncer.schedule("field", lambda: record(2))
        assert debouncer.pending_keys == ["field"]
        assert done.wait(2)
        time.sleep(0.1)
        assert calls == [2]
        assert debouncer.pending_keys == []

    def test_keys_are_independent(self):
        debouncer = Debouncer(60)
        debouncer.schedule("a", lambda: None)
        debouncer.schedule("b", lambda: None)
        assert sorted(debouncer.pending_keys) == ["a", "b"]
        debouncer.cancel_all()

    def test_cancel(self):
        debouncer = Debouncer(60)
        calls = []
        debouncer.schedule("a", lambda: calls.append(1))
        assert debouncer.cancel("a") is True
        assert debouncer.cancel("a") is False
        assert debouncer.flush() == 0
        assert calls == []

    def test_flush_runs_pending_now(self):
        debouncer = Debouncer(60)
        calls = []
        debouncer.schedule("a", lambda: calls.append("a"))
        debouncer.schedule("b", lambda: calls.append("b"))
        assert debouncer.flush() == 2
        assert calls == ["a", "b"]
        assert debouncer.pending_keys == []

    def test_failing_callback_is_logged(self, caplog):
        debouncer = Debouncer(0.01)
        done = threading.Event()

        def boom():
            done.set()
            raise RuntimeError("boom")

        debouncer.schedule("a", boom)
        assert done.wait(2)
        time.sleep(0.1)
        assert "Debounced callback for 'a' failed" in caplog.text
