"""Tests for configuration loading and saving."""

from pathlib import Path

from llmdump.config import AppConfig, CleanupMode, ExportMode, mask_secret


class TestAppConfig:
    def test_defaults_when_missing(self, tmp_path):
        config = AppConfig.load(tmp_path / "missing.toml")
        assert config.crawl.limit == 50
        assert config.export.mode == ExportMode.SINGLE
        assert config.export.cleanup == CleanupMode.AI
        assert config.storage.history_dir == Path(".data") / "history"

    def test_save_and_load(self, tmp_path):
        path = tmp_path / "nested" / "config.toml"
        config = AppConfig()
        config.crawl.api_key = 'fc-"quoted"'
        config.oracle.model = "gpt-4o"
        config.export.mode = ExportMode.MULTIPLE
        config.verbose = True

        config.save(path)
        loaded = AppConfig.load(path)

        assert loaded.crawl.api_key == 'fc-"quoted"'
        assert loaded.oracle.model == "gpt-4o"
        assert loaded.export.mode == ExportMode.MULTIPLE
        assert loaded.verbose is True

    def test_only_non_defaults_written(self):
        config = AppConfig()
        config.oracle.api_key = "sk-test"
        toml = config.to_toml()
        assert "[oracle]" in toml
        assert 'api_key = "sk-test"' in toml
        assert "[crawl]" not in toml

    def test_reads_hand_written_file(self, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text(
            '[crawl]\nlimit = 200\n\n[storage]\ndata_dir = "/srv/llmdump"\n\n[export]\ncleanup = "local"\n',
            encoding="utf-8",
        )
        config = AppConfig.load(path)
        assert config.crawl.limit == 200
        assert config.storage.data_dir == Path("/srv/llmdump")
        assert config.export.cleanup == CleanupMode.LOCAL


class TestMaskSecret:
    def test_unset(self):
        assert mask_secret(None) == "Not set"
        assert mask_secret("") == "Not set"

    def test_keeps_last_four(self):
        assert mask_secret("sk-abcdef1234") == "•••••1234"
