"""Tests for scripts.validate_config."""

import json

from scripts.validate_config import main, validate_bot_config, validate_roster


def _write(path, payload):
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


class TestValidateRoster:
    def test_valid_roster(self, tmp_path):
        path = _write(tmp_path / "teams.json", [
            {"name": "Reds", "sport": "Soccer", "players": ["A"], "enableScorers": True},
            {"name": "Owls", "sport": "Basketball", "players": None},
        ])
        assert validate_roster(path)

    def test_schema_errors_are_reported(self, tmp_path, capsys):
        path = _write(tmp_path / "teams.json", [
            {"name": "Reds"},
            {"name": "Blues", "sport": "Soccer", "enableScorers": "yes"},
        ])
        assert not validate_roster(path)

        err = capsys.readouterr().err
        assert "teams.json: '0'" in err
        assert "teams.json: '1/enableScorers'" in err

    def test_duplicate_names(self, tmp_path, capsys):
        path = _write(tmp_path / "teams.json", [
            {"name": "Reds", "sport": "Soccer"},
            {"name": "Reds", "sport": "Padel"},
        ])
        assert not validate_roster(path)
        assert "duplicate team name 'Reds'" in capsys.readouterr().err

    def test_missing_roster(self, tmp_path):
        assert not validate_roster(tmp_path / "teams.json")


class TestValidateBotConfig:
    def test_missing_file_is_fine(self, tmp_path):
        assert validate_bot_config(tmp_path / "bot.json")

    def test_bad_language(self, tmp_path):
        path = _write(tmp_path / "bot.json", {"language": "en us"})
        assert not validate_bot_config(path)


def test_main_exit_codes(tmp_path, capsys):
    config = _write(tmp_path / "bot.json", {"language": "en"})
    roster = _write(tmp_path / "teams.json", [{"name": "Reds", "sport": "Soccer"}])

    assert main(["--config", str(config), "--roster", str(roster)]) == 0
    assert "passed" in capsys.readouterr().out

    _write(roster, [{"name": "Reds"}])
    assert main(["--config", str(config), "--roster", str(roster)]) == 1
