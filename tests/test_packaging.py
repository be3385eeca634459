"""Checks on the declared extras in pyproject.toml."""

import tomllib
from pathlib import Path

_PYPROJECT = Path(__file__).parent.parent / "pyproject.toml"


def _extras() -> dict[str, list[str]]:
    with _PYPROJECT.open("rb") as f:
        return tomllib.load(f)["project"]["optional-dependencies"]


def _names(requirements: list[str]) -> set[str]:
    return {r.split(">")[0].split("=")[0].split("[")[0].strip() for r in requirements}


def test_scripts_extra_provides_dotenv() -> None:
    assert "python-dotenv" in _names(_extras()["scripts"])


def test_test_extra_covers_test_imports() -> None:
    assert {"pytest", "pytest-asyncio", "pytest-mock", "fastapi", "python-dotenv"} <= _names(
        _extras()["test"]
    )
