"""Tests for shared.config.bot."""

import json
from pathlib import Path

from shared.config.bot import BotSettings, load_bot_settings, load_config_file
from shared.storage.paths import PACKAGED_LOCALES_DIR


class TestBotSettings:
    def test_paths_derive_from_data_dir(self, tmp_path):
        settings = BotSettings(data_dir=tmp_path)
        assert settings.roster_path == tmp_path / "teams.json"
        assert settings.archive_path.parent == tmp_path
        assert settings.message_log_path.parent == tmp_path
        assert settings.locales_dir == PACKAGED_LOCALES_DIR

    def test_explicit_paths_win(self, tmp_path):
        settings = BotSettings(data_dir=tmp_path, roster_path=str(tmp_path / "other.json"))
        assert settings.roster_path == tmp_path / "other.json"


class TestLoadBotSettings:
    def test_file_values(self, tmp_path):
        settings = load_bot_settings(
            {"language": "it", "guild_id": "123", "data_dir": str(tmp_path)},
            env={},
        )
        assert settings.language == "it"
        assert settings.guild_id == 123
        assert settings.data_dir == tmp_path
        assert settings.token is None

    def test_environment_overrides_file(self, tmp_path):
        settings = load_bot_settings(
            {"language": "it", "data_dir": "ignored"},
            env={
                "DISCORD_BOT_TOKEN": "  secret  ",
                "MATCHDAY_LANGUAGE": "en",
                "MATCHDAY_DATA_DIR": str(tmp_path),
                "MATCHDAY_GUILD_ID": "",
            },
        )
        assert settings.token == "secret"
        assert settings.language == "en"
        assert settings.data_dir == tmp_path

    def test_invalid_values_fall_back(self):
        settings = load_bot_settings(
            {"guild_id": "not-a-number", "language": 7, "data_dir": ""},
            env={},
        )
        assert settings.guild_id is None
        assert settings.language == "en"
        assert isinstance(settings.data_dir, Path)


class TestLoadConfigFile:
    def test_missing_file(self, tmp_path):
        assert load_config_file(tmp_path / "bot.json") == {}

    def test_broken_json(self, tmp_path):
        path = tmp_path / "bot.json"
        path.write_text("{nope", encoding="utf-8")
        assert load_config_file(path) == {}

    def test_root_must_be_object(self, tmp_path):
        path = tmp_path / "bot.json"
        path.write_text(json.dumps(["en"]), encoding="utf-8")
        assert load_config_file(path) == {}

    def test_reads_object(self, tmp_path):
        path = tmp_path / "bot.json"
        path.write_text(json.dumps({"language": "en"}), encoding="utf-8")
        assert load_config_file(path) == {"language": "en"}
