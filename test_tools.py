import subprocess
from pathlib import Path
from typing import List

ROOT = Path(__file__).parent


def _sources() -> List[str]:
    """The package, its tests and setup.py. Nothing else at the root is ours to check."""
    paths = sorted(ROOT.glob("pyhttpfs/*.py")) + sorted(ROOT.glob("test_*.py"))
    return [str(p) for p in paths] + [str(ROOT / "setup.py")]


def test_black() -> None:
    subprocess.check_call(["black", "--check"] + _sources())


def test_flake8() -> None:
    subprocess.check_call(["flake8"] + _sources(), cwd=ROOT)


def test_isort() -> None:
    subprocess.check_call(["isort", "--check-only", "--diff"] + _sources(), cwd=ROOT)


def test_mypy() -> None:
    subprocess.check_call(["mypy"] + _sources(), cwd=ROOT)


def test_pyupgrade() -> None:
    subprocess.check_call(["pyupgrade", "--py38-plus"] + _sources())
