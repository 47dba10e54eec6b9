import ast
from pathlib import Path

DOMAIN = Path(__file__).resolve().parent.parent / "domain"


def _imported_modules(path: Path):
    tree = ast.parse(path.read_text())
    for node in ast.walk(tree):
        if isinstance(node, ast.ImportFrom) and node.module:
            yield node.module
        elif isinstance(node, ast.Import):
            yield from (alias.name for alias in node.names)


def test_domain_depends_only_on_ports():
    offenders = [
        f"{path.relative_to(DOMAIN.parent)}: {module}"
        for path in sorted(DOMAIN.rglob("*.py"))
        for module in _imported_modules(path)
        if module.split(".")[0] in ("infra", "api", "app")
    ]
    assert offenders == []
