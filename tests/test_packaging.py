"""Checks on the project metadata in pyproject.toml."""

import re
from pathlib import Path

PYPROJECT = Path(__file__).resolve().parents[1] / "pyproject.toml"


def test_readme_if_declared_points_at_a_project_readme():
    text = PYPROJECT.read_text(encoding="utf-8")
    match = re.search(r'^readme\s*=\s*"([^"]+)"', text, re.MULTILINE)
    if match is None:
        return
    readme = match.group(1)
    assert readme.upper().startswith("README")
    assert (PYPROJECT.parent / readme).is_file()


def test_declares_runtime_dependencies():
    text = PYPROJECT.read_text(encoding="utf-8")
    for name in ("fastapi", "uvicorn", "pydantic", "openai", "python-dotenv", "prometheus-client"):
        assert f'"{name}' in text
