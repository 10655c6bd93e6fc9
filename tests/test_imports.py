"""Every entry module must import on its own, in a fresh interpreter."""

import os
import subprocess
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]


@pytest.mark.parametrize(
    "module",
    [
        "core.roster",
        "core.match",
        "core.match.league",
        "core.match.machine",
        "core.dispatcher",
        "core.discord_app",
        "scripts.validate_config",
    ],
)
def test_module_imports_standalone(module, tmp_path):
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(ROOT), env.get("PYTHONPATH")]))
    env["MATCHDAY_LOG_DIR"] = str(tmp_path)

    result = subprocess.run(
        [sys.executable, "-c", f"import {module}"],
        cwd=ROOT,
        env=env,
        capture_output=True,
        text=True,
        timeout=60,
    )

    assert result.returncode == 0, result.stderr


def test_validate_config_runs_as_script(tmp_path):
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(ROOT), env.get("PYTHONPATH")]))
    env["MATCHDAY_LOG_DIR"] = str(tmp_path)

    result = subprocess.run(
        [sys.executable, "-m", "scripts.validate_config", "--roster", str(ROOT / "data" / "teams.json")],
        cwd=ROOT,
        env=env,
        capture_output=True,
        text=True,
        timeout=60,
    )

    assert result.returncode == 0, result.stderr
    assert "passed" in result.stdout
