import datetime as dt
import io
import tempfile
import unittest
from pathlib import Path

from durations import DurationParseError
from lifecycle import CountdownWaiter, SleepWaiter, TimerLifecycle, resolve_snooze_duration
from registry import RegistryStore

_T0 = dt.datetime(2024, 5, 1, 12, 0, 0, tzinfo=dt.timezone.utc)


class _FakeClock:
    def __init__(self, start: dt.datetime = _T0):
        self.now = start

    def __call__(self) -> dt.datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += dt.timedelta(seconds=seconds)


class _ClockWaiter:
    """Advances the fake clock instead of sleeping."""

    def __init__(self, clock: _FakeClock):
        self._clock = clock
        self.waits: list[float] = []

    def wait(self, seconds: float) -> None:
        self.waits.append(seconds)
        self._clock.advance(seconds)


class _ScriptedNotifier:
    def __init__(self, *answers):
        self._answers = list(answers)
        self.messages: list[str] = []

    def prompt(self, message: str) -> str:
        self.messages.append(message)
        answer = self._answers.pop(0)
        if isinstance(answer, Exception):
            raise answer
        return answer


class TimerLifecycleStateFlowTests(unittest.TestCase):
    def setUp(self) -> None:
        self._temp_dir = tempfile.TemporaryDirectory()
        self.store = RegistryStore(Path(self._temp_dir.name) / "timers.db")
        self.clock = _FakeClock()
        self.waiter = _ClockWaiter(self.clock)

    def tearDown(self) -> None:
        self.store.close()
        self._temp_dir.cleanup()

    def _lifecycle(self, notifier, **kwargs) -> TimerLifecycle:
        return TimerLifecycle(
            store=self.store,
            notifier=notifier,
            waiter=self.waiter,
            pid=4242,
            clock=self.clock,
            **kwargs,
        )

    def test_stop_after_first_expiry_leaves_no_record(self) -> None:
        notifier = _ScriptedNotifier("stop")
        lifecycle = self._lifecycle(notifier)

        snapshot = lifecycle.run("2s", "test")

        self.assertEqual("stopped", snapshot.phase)
        self.assertEqual(["test"], notifier.messages)
        self.assertEqual([2.0], self.waiter.waits)
        self.assertEqual([], self.store.list_active())
        history = self.store.list_history(20)
        self.assertEqual(1, len(history))
        self.assertEqual("2s", history[0].duration_spec)
        self.assertEqual("test", history[0].message)
        self.assertFalse(history[0].foreground)

    def test_start_registers_record_with_own_pid(self) -> None:
        lifecycle = self._lifecycle(_ScriptedNotifier())

        result = lifecycle.start("10s", "tea")

        self.assertTrue(result.accepted)
        self.assertEqual("started", result.reason)
        self.assertEqual("running", result.snapshot.phase)
        record = self.store.require(result.snapshot.record_id)
        self.assertEqual(4242, record.pid)
        self.assertEqual(_T0, record.started_at)
        self.assertEqual(10.0, lifecycle.remaining_seconds())

    def test_start_twice_is_rejected(self) -> None:
        lifecycle = self._lifecycle(_ScriptedNotifier())
        lifecycle.start("10s", "tea")

        result = lifecycle.start("10s", "again")

        self.assertFalse(result.accepted)
        self.assertEqual("already_started", result.reason)
        self.assertEqual(1, len(self.store.list_active()))

    def test_invalid_duration_registers_nothing(self) -> None:
        lifecycle = self._lifecycle(_ScriptedNotifier())

        with self.assertRaises(ValueError):
            lifecycle.start("10", "no unit")

        self.assertEqual("idle", lifecycle.snapshot().phase)
        self.assertEqual([], self.store.list_active())
        self.assertEqual([], self.store.list_history(20))

    def test_out_of_range_duration_fails_before_registering(self) -> None:
        lifecycle = self._lifecycle(_ScriptedNotifier("stop"))

        with self.assertRaises(DurationParseError):
            lifecycle.run("8000y", "huge")

        self.assertEqual("idle", lifecycle.snapshot().phase)
        self.assertEqual([], self.store.list_active())
        self.assertEqual([], self.store.list_history(20))
        self.assertEqual([], self.waiter.waits)

    def test_snooze_replaces_record_with_default_span_and_prefix(self) -> None:
        lifecycle = self._lifecycle(_ScriptedNotifier())
        first = lifecycle.start("10s", "tea").snapshot.record_id
        lifecycle.wait()

        result = lifecycle.apply("snooze")

        self.assertTrue(result.accepted)
        self.assertEqual("snoozed", result.reason)
        self.assertIsNone(self.store.get(first))
        active = self.store.list_active()
        self.assertEqual(1, len(active))
        self.assertGreater(active[0].id, first)
        self.assertEqual("5m", active[0].duration_spec)
        self.assertEqual("(Snoozed) tea", active[0].message)
        self.assertEqual(self.clock.now, active[0].started_at)

    def test_configured_snooze_span_is_used(self) -> None:
        lifecycle = self._lifecycle(_ScriptedNotifier(), snooze_duration="30s")
        lifecycle.start("10s", "tea")
        lifecycle.wait()

        lifecycle.apply("snooze")

        self.assertEqual("30s", self.store.list_active()[0].duration_spec)

    def test_restart_after_snoozes_uses_original_duration(self) -> None:
        notifier = _ScriptedNotifier("snooze", "snooze", "restart", "stop")
        lifecycle = self._lifecycle(notifier, foreground=True)

        lifecycle.run("10s", "tea")

        self.assertEqual(
            ["tea", "(Snoozed) tea", "(Snoozed) tea", "(Restarted) tea"],
            notifier.messages,
        )
        self.assertEqual([10.0, 300.0, 300.0, 10.0], self.waiter.waits)
        self.assertEqual([], self.store.list_active())
        history = list(reversed(self.store.list_history(20)))
        self.assertEqual(["10s", "5m", "5m", "10s"], [e.duration_spec for e in history])
        self.assertTrue(all(entry.foreground for entry in history))

    def test_notifier_failure_means_stop(self) -> None:
        notifier = _ScriptedNotifier(RuntimeError("display gone"))
        lifecycle = self._lifecycle(notifier)

        snapshot = lifecycle.run("2s", "test")

        self.assertEqual("stopped", snapshot.phase)
        self.assertEqual([], self.store.list_active())

    def test_unknown_notifier_answer_means_stop(self) -> None:
        lifecycle = self._lifecycle(_ScriptedNotifier("maybe"))
        lifecycle.start("2s", "test")
        lifecycle.wait()

        self.assertEqual("stop", lifecycle.expire())

    def test_actions_rejected_before_expiry(self) -> None:
        lifecycle = self._lifecycle(_ScriptedNotifier())
        lifecycle.start("10s", "tea")

        result = lifecycle.apply("snooze")

        self.assertFalse(result.accepted)
        self.assertEqual("not_expired", result.reason)
        self.assertEqual(1, len(self.store.list_active()))

    def test_unknown_action_is_rejected(self) -> None:
        lifecycle = self._lifecycle(_ScriptedNotifier())
        lifecycle.start("10s", "tea")
        lifecycle.wait()

        result = lifecycle.apply("pause")

        self.assertFalse(result.accepted)
        self.assertEqual("unsupported_action", result.reason)

    def test_wait_only_covers_time_left(self) -> None:
        lifecycle = self._lifecycle(_ScriptedNotifier())
        lifecycle.start("10s", "tea")
        self.clock.advance(4)

        lifecycle.wait()

        self.assertEqual([6.0], self.waiter.waits)
        self.assertEqual("expired", lifecycle.snapshot().phase)


class SnoozeResolutionTests(unittest.TestCase):
    def test_falls_back_to_five_minutes(self) -> None:
        self.assertEqual("5m", resolve_snooze_duration(None))
        self.assertEqual("5m", resolve_snooze_duration(""))
        self.assertEqual("5m", resolve_snooze_duration("later"))
        self.assertEqual("5m", resolve_snooze_duration("8000y"))
        self.assertEqual("90s", resolve_snooze_duration(" 90s "))


class WaiterTests(unittest.TestCase):
    def test_sleep_waiter_sleeps_once(self) -> None:
        sleeps: list[float] = []
        SleepWaiter(sleep=sleeps.append).wait(12.5)
        SleepWaiter(sleep=sleeps.append).wait(-1)
        self.assertEqual([12.5], sleeps)

    def test_countdown_waiter_redraws_every_second(self) -> None:
        stream = io.StringIO()
        sleeps: list[float] = []

        CountdownWaiter(stream=stream, sleep=sleeps.append).wait(2.5)

        self.assertEqual([1.0, 1.0, 0.5], sleeps)
        output = stream.getvalue()
        self.assertIn("\rTime remaining: 00:00:03", output)
        self.assertIn("\rTime remaining: 00:00:01", output)
        self.assertTrue(output.endswith("\rTime remaining: 00:00:00\n"))


if __name__ == "__main__":
    unittest.main()
