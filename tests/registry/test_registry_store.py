import datetime as dt
import tempfile
import threading
import unittest
from pathlib import Path

from registry import RecordNotFound, RegistryStore, StoreUnavailable

_T0 = dt.datetime(2024, 5, 1, 12, 0, 0, tzinfo=dt.timezone.utc)


class RegistryStoreTests(unittest.TestCase):
    def setUp(self) -> None:
        self._temp_dir = tempfile.TemporaryDirectory()
        self.db_path = Path(self._temp_dir.name) / "timers.db"
        self.store = RegistryStore(self.db_path)

    def tearDown(self) -> None:
        self.store.close()
        self._temp_dir.cleanup()

    def test_insert_assigns_strictly_increasing_ids(self) -> None:
        first = self.store.insert("10s", "tea", 100)
        second = self.store.insert("5m", "call", 101)
        self.store.remove(second)
        third = self.store.insert("1h", "walk", 102)

        self.assertLess(first, second)
        self.assertLess(second, third)

    def test_inserted_record_round_trips(self) -> None:
        record_id = self.store.insert("2s", "test", 4242, started_at=_T0)

        record = self.store.require(record_id)

        self.assertEqual(4242, record.pid)
        self.assertEqual("2s", record.duration_spec)
        self.assertEqual("test", record.message)
        self.assertEqual(_T0, record.started_at)
        self.assertEqual(_T0 + dt.timedelta(seconds=2), record.deadline())
        self.assertEqual(1.5, record.remaining_seconds(_T0 + dt.timedelta(seconds=0.5)))

    def test_remove_is_idempotent(self) -> None:
        record_id = self.store.insert("10s", "tea", 100)

        self.assertTrue(self.store.remove(record_id))
        self.assertFalse(self.store.remove(record_id))
        self.assertFalse(self.store.remove(9999))
        self.assertIsNone(self.store.get(record_id))

    def test_require_raises_for_missing_record(self) -> None:
        with self.assertRaises(RecordNotFound) as context:
            self.store.require(7)
        self.assertEqual(7, context.exception.record_id)
        self.assertEqual("Timer 7 not found", str(context.exception))

    def test_list_active_is_ordered_by_id(self) -> None:
        ids = [self.store.insert("1m", f"timer {index}", 200 + index) for index in range(3)]

        self.assertEqual(ids, [record.id for record in self.store.list_active()])

    def test_history_is_newest_first_and_limited(self) -> None:
        for index in range(4):
            self.store.append_history(
                f"{index + 1}m",
                f"entry {index}",
                foreground=index % 2 == 0,
                timestamp=_T0 + dt.timedelta(minutes=index),
            )

        entries = self.store.list_history(3)

        self.assertEqual(["entry 3", "entry 2", "entry 1"], [e.message for e in entries])
        self.assertFalse(entries[0].foreground)
        self.assertTrue(entries[1].foreground)
        self.assertEqual(_T0 + dt.timedelta(minutes=3), entries[0].timestamp)
        self.assertEqual([], self.store.list_history(0))

    def test_history_survives_record_removal(self) -> None:
        record_id = self.store.insert("1m", "tea", 100)
        self.store.append_history("1m", "tea", foreground=False)
        self.store.remove(record_id)

        self.assertEqual(["tea"], [e.message for e in self.store.list_history(20)])

    def test_second_store_on_same_file_sees_committed_rows(self) -> None:
        record_id = self.store.insert("1m", "shared", 100)

        with RegistryStore(self.db_path) as other:
            self.assertEqual("shared", other.require(record_id).message)
            other.remove(record_id)

        self.assertIsNone(self.store.get(record_id))

    def test_concurrent_stores_interleave_inserts_and_removals(self) -> None:
        self.store.list_active()
        workers, operations = 4, 25
        inserted: dict[int, list[int]] = {}
        survivors: list[int] = []
        errors: list[BaseException] = []
        lock = threading.Lock()
        start = threading.Barrier(workers)

        def work(worker: int) -> None:
            store = RegistryStore(self.db_path, busy_timeout_seconds=30.0)
            ids: list[int] = []
            try:
                start.wait()
                for index in range(operations):
                    record_id = store.insert("1m", f"worker {worker} #{index}", 1000 + worker)
                    ids.append(record_id)
                    if index % 2:
                        self.assertTrue(store.remove(record_id))
                    else:
                        with lock:
                            survivors.append(record_id)
            except BaseException as error:
                with lock:
                    errors.append(error)
            finally:
                store.close()
                with lock:
                    inserted[worker] = ids

        threads = [threading.Thread(target=work, args=(worker,)) for worker in range(workers)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual([], errors)
        all_ids = [record_id for ids in inserted.values() for record_id in ids]
        self.assertEqual(workers * operations, len(all_ids))
        self.assertEqual(len(all_ids), len(set(all_ids)))
        for ids in inserted.values():
            self.assertEqual(sorted(ids), ids)
            self.assertEqual(len(ids), len(set(ids)))
        self.assertEqual(sorted(survivors), [record.id for record in self.store.list_active()])
        self.assertGreater(self.store.insert("1m", "after", 1), max(all_ids))

    def test_unusable_location_raises_store_unavailable(self) -> None:
        blocker = Path(self._temp_dir.name) / "not-a-dir"
        blocker.write_text("", encoding="utf-8")
        store = RegistryStore(blocker / "timers.db")

        with self.assertRaises(StoreUnavailable):
            store.list_active()


if __name__ == "__main__":
    unittest.main()
