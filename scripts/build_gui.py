"""Bundle the RepoBee Desk GUI into a standalone executable with PyInstaller."""

from __future__ import annotations

import argparse
import os
import subprocess
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = PROJECT_ROOT / "src"
APP_NAME = "repobee-desk-gui"

LAUNCHER = """\
from repobee_desk.gui.app import main

raise SystemExit(main())
"""


def write_launcher(build_dir: Path) -> Path:
    """PyInstaller needs a top-level script; ``gui/app.py`` uses relative imports."""

    launcher = build_dir / "launch_repobee_desk.py"
    launcher.write_text(LAUNCHER, encoding="utf-8")
    return launcher


def run_pyinstaller(output_dir: Path, *, clean: bool = False, onefile: bool = False) -> None:
    build_dir = output_dir / "build"
    spec_dir = output_dir / "spec"
    build_dir.mkdir(parents=True, exist_ok=True)
    spec_dir.mkdir(parents=True, exist_ok=True)

    cmd = [
        "pyinstaller",
        "--name",
        APP_NAME,
        "--noconfirm",
        "--windowed",
        "--paths",
        str(SRC_DIR),
        "--distpath",
        str(output_dir),
        "--workpath",
        str(build_dir),
        "--specpath",
        str(spec_dir),
        "--collect-submodules",
        "repobee_desk",
        str(write_launcher(build_dir)),
    ]
    if clean:
        cmd.insert(1, "--clean")
    if onefile:
        cmd.insert(1, "--onefile")
    subprocess.check_call(cmd, env=os.environ.copy(), cwd=PROJECT_ROOT)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--clean", action="store_true", help="Remove PyInstaller cache before building.")
    parser.add_argument("--onefile", action="store_true", help="Produce a single executable file.")
    parser.add_argument("--dist", type=Path, help="Distribution directory. Defaults to ./dist.")
    args = parser.parse_args(argv)

    run_pyinstaller((args.dist or PROJECT_ROOT / "dist").resolve(), clean=args.clean, onefile=args.onefile)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
