import logging

import pytest

from doc_batch.logger import Log


@pytest.fixture()
def records(caplog: pytest.LogCaptureFixture) -> pytest.LogCaptureFixture:
    caplog.set_level(logging.DEBUG, logger="doc_batch")
    return caplog


class TestLog:
    def test_context_is_appended_as_pairs(self, records: pytest.LogCaptureFixture) -> None:
        Log.info("Batch finished", converted=2, failed=1)

        assert records.messages == ["Batch finished [converted=2 failed=1]"]

    def test_plain_message_without_context(self, records: pytest.LogCaptureFixture) -> None:
        Log.warning("Sweep skipped")

        assert records.records[0].levelno == logging.WARNING
        assert records.messages == ["Sweep skipped"]

    def test_reserved_record_names_are_safe_as_context(self, records: pytest.LogCaptureFixture) -> None:
        Log.debug("Staged", filename="a.txt", name="upload")

        assert records.messages == ["Staged [filename=a.txt name=upload]"]

    def test_error_attaches_traceback_on_request(self, records: pytest.LogCaptureFixture) -> None:
        try:
            raise RuntimeError("disk full")
        except RuntimeError:
            Log.error("Batch conversion failed", exc_info=True, target="docx")

        record = records.records[0]
        assert record.getMessage() == "Batch conversion failed [target=docx]"
        assert record.exc_info is not None
        assert record.exc_info[0] is RuntimeError

    def test_error_without_traceback_by_default(self, records: pytest.LogCaptureFixture) -> None:
        Log.error("Batch conversion failed")

        assert not records.records[0].exc_info
