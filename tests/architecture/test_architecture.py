# tests/architecture/test_architecture.py
# Architecture tests enforcing layering rules.
# - routers must not contain SQL or import database drivers
# - services reach the database only through repositories
# - nothing below the HTTP layer imports the routers

import ast
import pathlib
import re
import pytest  # type: ignore[import-not-found]

REPO_ROOT = pathlib.Path(__file__).resolve().parents[2]
PACKAGE = REPO_ROOT / "memelinks"

DB_LIBS = {"sqlalchemy", "asyncpg", "aiosqlite", "sqlite3"}


def _iter_py_files(root: pathlib.Path):
    for path in root.rglob("*.py"):
        if "__pycache__" in path.parts:
            continue
        yield path


def _collect_imports(py_path: pathlib.Path) -> set[str]:
    """Return set of imported module names (full dotted paths) from file."""
    tree = ast.parse(py_path.read_text(encoding="utf-8"), filename=str(py_path))
    imports: set[str] = set()
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                imports.add(alias.name)
        elif isinstance(node, ast.ImportFrom):
            if node.module:
                imports.add(node.module)
    return imports


def _top_levels(imports: set[str]) -> set[str]:
    return {name.split(".")[0] for name in imports}


def _file_contains_sql(py_path: pathlib.Path) -> bool:
    """Heuristic to detect raw SQL or direct DB access."""
    text = py_path.read_text(encoding="utf-8")
    # Upper-case keywords only; "from x import y" is not SQL
    sql_patterns = [
        r"\bSELECT\b",
        r"\bINSERT\b",
        r"\bUPDATE\b",
        r"\bDELETE\b",
        r"\bJOIN\b",
    ]
    if any(re.search(p, text) for p in sql_patterns):
        return True
    return bool(DB_LIBS & _top_levels(_collect_imports(py_path)))


# ---------- Tests ----------

@pytest.mark.architecture
def test_routers_do_not_contain_sql():
    offenders = [f for f in _iter_py_files(PACKAGE / "routers") if _file_contains_sql(f)]
    assert not offenders, "Routers must not contain SQL; offending files:\n" + "\n".join(map(str, offenders))


@pytest.mark.architecture
def test_services_do_not_touch_the_database_directly():
    for f in _iter_py_files(PACKAGE / "services"):
        imports = _collect_imports(f)
        assert not (DB_LIBS & _top_levels(imports)), f"service imports a database library: {f}"
        assert "memelinks.db.base" not in imports, f"service should go through a repository: {f}"


@pytest.mark.architecture
def test_lower_layers_do_not_import_routers():
    for sub in ("services", "repositories", "models", "db", "utils", "jobs"):
        for f in _iter_py_files(PACKAGE / sub):
            imports = _collect_imports(f)
            assert not any(m.startswith("memelinks.routers") for m in imports), (
                f"{sub} must not depend on the HTTP layer: {f}"
            )
