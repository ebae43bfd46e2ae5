from pathlib import Path

import pytest

from doc_batch.config import Settings


class TestSettingsDefaults:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for name in ("PORT", "MAX_FILES", "MAX_SIZE_MB", "CLEAN_TTL_MIN", "CLEAN_INTERVAL_MIN", "LOG_LEVEL", "RELOAD"):
            monkeypatch.delenv(name, raising=False)

        settings = Settings.from_env()

        assert settings.port == 3000
        assert settings.max_files == 10
        assert settings.max_size_bytes == 25 * 1024 * 1024
        assert settings.ttl_seconds == 30 * 60
        assert settings.sweep_interval_seconds == 10 * 60
        assert settings.log_level == "info"
        assert settings.reload is False


class TestSettingsFromEnv:
    def test_reads_environment(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setenv("PORT", "8081")
        monkeypatch.setenv("MAX_FILES", "3")
        monkeypatch.setenv("MAX_SIZE_MB", "2")
        monkeypatch.setenv("CLEAN_TTL_MIN", "5")
        monkeypatch.setenv("LOG_LEVEL", "debug")
        monkeypatch.setenv("RELOAD", "yes")
        monkeypatch.setenv("DATA_DIR", str(tmp_path))

        settings = Settings.from_env()

        assert settings.port == 8081
        assert settings.max_files == 3
        assert settings.max_size_bytes == 2 * 1024 * 1024
        assert settings.ttl_seconds == 300
        assert settings.log_level == "debug"
        assert settings.reload is True
        assert settings.upload_dir == tmp_path.resolve() / "uploads"
        assert settings.output_dir == tmp_path.resolve() / "converted"
