"""Run the test suite in an isolated config dir, installing pytest if missing."""

from __future__ import annotations

import importlib.util
import os
import subprocess
import sys
import tempfile
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
CONFIG_DIR_ENV = "REPOBEE_DESK_CONFIG_DIR"


def _ensure_pytest() -> None:
    if importlib.util.find_spec("pytest") is not None:
        return
    print("pytest not found; installing the test extra...", file=sys.stderr)
    subprocess.run([sys.executable, "-m", "pip", "install", "-e", ".[test]"], cwd=ROOT, check=True)


def main() -> int:
    try:
        _ensure_pytest()
    except subprocess.CalledProcessError as exc:
        raise SystemExit(f"Failed to install test dependencies: {exc}") from exc

    with tempfile.TemporaryDirectory(prefix="repobee-desk-tests-") as config_dir:
        env = os.environ.copy()
        # Never touch the developer's real settings, even from tests that forget the fixture.
        env[CONFIG_DIR_ENV] = config_dir
        env.setdefault("QT_QPA_PLATFORM", "offscreen")
        result = subprocess.run([sys.executable, "-m", "pytest", *sys.argv[1:]], cwd=ROOT, env=env)
    return result.returncode


if __name__ == "__main__":
    raise SystemExit(main())
