from __future__ import annotations

import importlib.util
from pathlib import Path
from types import ModuleType

ROOT = Path(__file__).resolve().parents[1]


def _load_checker_module() -> ModuleType:
    module_path = ROOT / "tools" / "check_imports.py"
    spec = importlib.util.spec_from_file_location("check_imports_tool", module_path)
    assert spec is not None
    loader = spec.loader
    assert loader is not None
    module = importlib.util.module_from_spec(spec)
    loader.exec_module(module)
    return module


def _write(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def test_check_file_allows_core_importing_domain(tmp_path: Path) -> None:
    checker = _load_checker_module()
    source_root = tmp_path / "src" / "twine_reader"
    core_file = source_root / "core" / "story_parser.py"
    _write(core_file, "from twine_reader.domain.models import Story\n")
    assert checker.check_file(core_file, source_root) == []


def test_check_file_rejects_core_importing_adapters(tmp_path: Path) -> None:
    checker = _load_checker_module()
    source_root = tmp_path / "src" / "twine_reader"
    core_file = source_root / "core" / "story_parser.py"
    _write(core_file, "from twine_reader.adapters import sqlite_progress_store\n")
    violations = checker.check_file(core_file, source_root)
    assert len(violations) == 1
    assert "core must not import twine_reader.adapters" in violations[0]


def test_check_file_rejects_relative_application_import_of_api(tmp_path: Path) -> None:
    checker = _load_checker_module()
    source_root = tmp_path / "src" / "twine_reader"
    controller = source_root / "application" / "session_controller.py"
    _write(controller, "from ..api import app\n")
    violations = checker.check_file(controller, source_root)
    assert violations == [f"{controller}: application must not import twine_reader.api"]


def test_check_file_rejects_domain_importing_core(tmp_path: Path) -> None:
    checker = _load_checker_module()
    source_root = tmp_path / "src" / "twine_reader"
    models = source_root / "domain" / "models.py"
    _write(models, "import twine_reader.core.errors\n")
    assert len(checker.check_file(models, source_root)) == 1


def test_check_file_rejects_layer_imported_from_package_root(tmp_path: Path) -> None:
    checker = _load_checker_module()
    source_root = tmp_path / "src" / "twine_reader"
    models = source_root / "domain" / "models.py"
    _write(models, "from twine_reader import core, domain\n")
    assert checker.check_file(models, source_root) == [
        f"{models}: domain must not import twine_reader.core"
    ]


def test_repository_respects_layer_boundaries() -> None:
    checker = _load_checker_module()
    assert checker.check_import_boundaries() == []
