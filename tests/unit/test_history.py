import threading

from doc_batch.conversion.history import HISTORY_CAPACITY, HistoryLog
from doc_batch.conversion.models import HistoryEntry


def _entry(i: int) -> HistoryEntry:
    return HistoryEntry(download_id=f"id{i}", display_name=f"f{i}.txt", item_count=1, target_format="txt")


class TestHistoryLog:
    def test_recent_is_newest_first(self) -> None:
        log = HistoryLog()
        for i in range(3):
            log.record(_entry(i))

        assert [e.download_id for e in log.recent()] == ["id2", "id1", "id0"]

    def test_capacity_evicts_oldest_first(self) -> None:
        log = HistoryLog()
        for i in range(HISTORY_CAPACITY + 5):
            log.record(_entry(i))

        recent = log.recent()
        assert len(recent) == HISTORY_CAPACITY
        assert recent[0].download_id == f"id{HISTORY_CAPACITY + 4}"
        assert recent[-1].download_id == "id5"

    def test_recent_is_a_snapshot(self) -> None:
        log = HistoryLog(capacity=2)
        log.record(_entry(0))
        snapshot = log.recent()
        log.record(_entry(1))

        assert len(snapshot) == 1

    def test_concurrent_appends(self) -> None:
        log = HistoryLog(capacity=1000)

        def worker(start: int) -> None:
            for i in range(start, start + 100):
                log.record(_entry(i))

        threads = [threading.Thread(target=worker, args=(n * 100,)) for n in range(5)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(log) == 500

    def test_public_view_has_summary_fields_only(self) -> None:
        public = _entry(7).to_public()

        assert set(public) == {"id", "name", "count", "target", "time"}
        assert public["id"] == "id7"
        assert isinstance(public["time"], int)
