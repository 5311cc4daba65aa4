"""Validate Python layer import boundaries for twine_reader."""

from __future__ import annotations

import ast
from collections.abc import Iterator
from importlib.util import resolve_name
from pathlib import Path

PACKAGE = "twine_reader"
PROJECT_ROOT = Path(__file__).resolve().parents[1]
DEFAULT_SOURCE_ROOT = PROJECT_ROOT / "src" / PACKAGE
# Inner layers may not reach outward; api and cli are free to import anything.
RULES: dict[str, frozenset[str]] = {
    "domain": frozenset({"api", "adapters", "application", "cli", "core"}),
    "core": frozenset({"api", "adapters", "application", "cli"}),
    "application": frozenset({"api", "adapters", "cli"}),
}


def _package_of(path: Path, source_root: Path) -> str:
    relative = path.relative_to(source_root).with_suffix("")
    return ".".join([PACKAGE, *relative.parts[:-1]])


def _imported_modules(tree: ast.AST, package: str) -> Iterator[str]:
    """Yield every absolute module a file imports, including ``from pkg import sub``."""
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            yield from (alias.name for alias in node.names)
        elif isinstance(node, ast.ImportFrom):
            relative = "." * node.level + (node.module or "")
            try:
                base = resolve_name(relative, package) if node.level else relative
            except ImportError:
                continue
            yield base
            yield from (f"{base}.{alias.name}" for alias in node.names)


def _layer_of(module_name: str) -> str | None:
    parts = module_name.split(".")
    if len(parts) < 2 or parts[0] != PACKAGE:
        return None
    return parts[1]


def check_file(path: Path, source_root: Path = DEFAULT_SOURCE_ROOT) -> list[str]:
    relative = path.relative_to(source_root)
    layer = relative.parts[0] if len(relative.parts) > 1 else None
    banned = RULES.get(layer or "", frozenset())
    if not banned:
        return []

    tree = ast.parse(path.read_text(encoding="utf-8"), filename=str(path))
    package = _package_of(path, source_root)
    imported = {_layer_of(name) for name in _imported_modules(tree, package)}
    return [
        f"{path}: {layer} must not import {PACKAGE}.{target}"
        for target in sorted(banned.intersection(imported))
    ]


def check_import_boundaries(source_root: Path = DEFAULT_SOURCE_ROOT) -> list[str]:
    violations: list[str] = []
    for path in sorted(source_root.rglob("*.py")):
        violations.extend(check_file(path, source_root))
    return violations


def main() -> None:
    violations = check_import_boundaries()
    if violations:
        raise SystemExit("\n".join(violations))
    print("import boundary checks passed")


if __name__ == "__main__":
    main()
