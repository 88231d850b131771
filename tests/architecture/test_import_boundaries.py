"""
Import-boundary enforcement for the costs packages.

1. Engine purity       -- costs_engines/** may not import the ORM, DB drivers,
                          kernel models/selectors, modules, config or API.
2. Engine no-impure    -- costs_engines/** may not read the wall clock or the
                          environment.
3. Kernel independence -- costs_kernel/** may not import outer layers at
                          module level.
4. API is the top      -- nothing below costs_api imports it.

All scanning is done via AST; these tests are read-only.
"""

import ast
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[2]


def _python_files(package: str) -> list[Path]:
    return sorted((REPO_ROOT / package).rglob("*.py"))


def _imports(filepath: Path, top_level_only: bool = False) -> list[tuple[int, str]]:
    tree = ast.parse(filepath.read_text(), filename=str(filepath))
    nodes = tree.body if top_level_only else ast.walk(tree)
    results: list[tuple[int, str]] = []
    for node in nodes:
        if isinstance(node, ast.Import):
            results.extend((node.lineno, alias.name) for alias in node.names)
        elif isinstance(node, ast.ImportFrom) and node.module:
            results.append((node.lineno, node.module))
    return results


def _matches_any(module: str, prefixes: tuple[str, ...]) -> bool:
    return any(module == p or module.startswith(f"{p}.") for p in prefixes)


def _violations(package: str, forbidden: tuple[str, ...], top_level_only: bool = False) -> list[str]:
    found = []
    for filepath in _python_files(package):
        for lineno, module in _imports(filepath, top_level_only):
            if _matches_any(module, forbidden):
                found.append(f"  {filepath.relative_to(REPO_ROOT)}:{lineno} imports '{module}'")
    return found


class TestEnginePurity:
    FORBIDDEN_PREFIXES = (
        "sqlalchemy",
        "psycopg2",
        "sqlite3",
        "costs_kernel.models",
        "costs_kernel.selectors",
        "costs_kernel.db.engine",
        "costs_kernel.db.base",
        "costs_modules",
        "costs_config",
        "costs_api",
    )

    def test_engine_files_have_no_forbidden_imports(self):
        violations = _violations("costs_engines", self.FORBIDDEN_PREFIXES)
        assert not violations, (
            "Engine purity violation -- costs_engines/** must stay free of I/O "
            "layers:\n" + "\n".join(violations)
        )

    def test_no_impure_calls_in_engines(self):
        forbidden = {"datetime.now", "datetime.utcnow", "date.today", "time.time", "os.environ", "os.getenv"}
        found = []
        for filepath in _python_files("costs_engines"):
            tree = ast.parse(filepath.read_text(), filename=str(filepath))
            for node in ast.walk(tree):
                if isinstance(node, ast.Attribute) and isinstance(node.value, ast.Name):
                    qualname = f"{node.value.id}.{node.attr}"
                    if qualname in forbidden:
                        found.append(f"  {filepath.name}:{node.lineno} uses '{qualname}'")
        assert not found, "Engines must take time from a Clock:\n" + "\n".join(found)


class TestKernelIndependence:
    def test_kernel_does_not_import_outer_layers(self):
        # create_tables() imports the ORM registry lazily; module-level only
        violations = _violations(
            "costs_kernel",
            ("costs_engines", "costs_modules", "costs_config", "costs_api"),
            top_level_only=True,
        )
        assert not violations, "\n".join(violations)


class TestApiIsTopLayer:
    def test_nothing_imports_api(self):
        violations = []
        for package in ("costs_kernel", "costs_engines", "costs_modules", "costs_config"):
            violations.extend(_violations(package, ("costs_api",)))
        assert not violations, "\n".join(violations)
