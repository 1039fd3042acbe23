"""Tests enforcing the dependency policy for the distribution."""

from __future__ import annotations

import re
from pathlib import Path

import tomllib

PYPROJECT = Path(__file__).resolve().parent.parent / "pyproject.toml"


def _project() -> dict[str, object]:
    return tomllib.loads(PYPROJECT.read_text(encoding="utf-8"))["project"]


def _names(requirements: list[str]) -> set[str]:
    return {
        re.split(r"[=<>!~\[]", item, maxsplit=1)[0].lower() for item in requirements
    }


def test_all_dependencies_are_pinned() -> None:
    """Project dependencies must be pinned to exact versions."""

    project = _project()
    for requirement in project["dependencies"]:
        assert "==" in requirement, f"Core dependency not pinned: {requirement}"

    for group, requirements in project.get("optional-dependencies", {}).items():
        for requirement in requirements:
            assert "==" in requirement, (
                f"Optional dependency '{group}' not pinned: {requirement}"
            )


def test_runtime_stack_is_declared() -> None:
    """Every third-party library imported by the package must be declared."""

    project = _project()
    assert _names(project["dependencies"]) == {
        "anthropic",
        "httpx",
        "pydantic",
        "pydantic-settings",
        "pyyaml",
    }
    assert _names(project["optional-dependencies"]["test"]) == {
        "hypothesis",
        "pytest",
    }


def test_console_script_entry_point() -> None:
    assert _project()["scripts"] == {"ewaste-impact": "ewaste_impact.cli:main"}
