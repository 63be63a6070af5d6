"""
Kernel Boundary & Invariants Contract.

1. inventory_kernel/** may NOT import inventory_config.  Configuration
   flows into the kernel only through inventory_config.bridges.

2. The layers inside the kernel point one way: domain/ is pure (no db,
   models, selectors or services); models/ and db/ do not reach up into
   selectors/ or services/.

3. The ledger invariants declaration is complete.

These tests read source code via AST -- they cannot break anything.
"""

import ast
from pathlib import Path

from inventory_kernel.invariants import (
    ALL_LEDGER_INVARIANTS,
    FORBIDDEN_KERNEL_IMPORTS,
    LedgerInvariant,
)

REPO_ROOT = Path(__file__).resolve().parents[2]
KERNEL_ROOT = REPO_ROOT / "inventory_kernel"


def _python_files(root: Path) -> list[Path]:
    return sorted(root.rglob("*.py"))


def _extract_imports(filepath: Path) -> list[tuple[int, str]]:
    """(line_number, module) for every import in a file."""
    tree = ast.parse(filepath.read_text(), filename=str(filepath))
    results: list[tuple[int, str]] = []
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                results.append((node.lineno, alias.name))
        elif isinstance(node, ast.ImportFrom) and node.module:
            results.append((node.lineno, node.module))
    return results


def _violations(root: Path, forbidden: tuple[str, ...]) -> list[str]:
    found = []
    for filepath in _python_files(root):
        for lineno, module in _extract_imports(filepath):
            for prefix in forbidden:
                if module == prefix or module.startswith(f"{prefix}."):
                    found.append(f"  {filepath.relative_to(REPO_ROOT)}:{lineno} imports '{module}'")
    return found


class TestKernelNoUpwardDependencies:

    def test_kernel_does_not_import_config(self):
        violations = _violations(KERNEL_ROOT, FORBIDDEN_KERNEL_IMPORTS)
        assert not violations, (
            "Kernel boundary violation -- inventory_kernel/** must not import "
            "inventory_config:\n" + "\n".join(violations)
        )


class TestKernelLayering:

    def test_domain_is_pure(self):
        violations = _violations(
            KERNEL_ROOT / "domain",
            (
                "sqlalchemy",
                "inventory_kernel.db",
                "inventory_kernel.models",
                "inventory_kernel.selectors",
                "inventory_kernel.services",
            ),
        )
        assert not violations, "domain/ must stay ORM-free:\n" + "\n".join(violations)

    def test_models_and_db_do_not_reach_up(self):
        forbidden = ("inventory_kernel.selectors", "inventory_kernel.services")
        violations = _violations(KERNEL_ROOT / "models", forbidden)
        violations += _violations(KERNEL_ROOT / "db", forbidden)
        assert not violations, "\n".join(violations)

    def test_selectors_do_not_import_services(self):
        violations = _violations(KERNEL_ROOT / "selectors", ("inventory_kernel.services",))
        assert not violations, "\n".join(violations)


class TestInvariantsDeclaration:

    def test_all_invariants_declared(self):
        assert ALL_LEDGER_INVARIANTS == frozenset(LedgerInvariant)
        assert {i.value for i in LedgerInvariant} == {
            "non_negative_quantity",
            "paired_movement",
            "non_negative_threshold",
            "append_only_history",
            "replay_equals_store",
        }

    def test_every_invariant_documented(self):
        source = (KERNEL_ROOT / "invariants.py").read_text()
        tree = ast.parse(source)
        enum_body = next(
            node.body
            for node in ast.walk(tree)
            if isinstance(node, ast.ClassDef) and node.name == "LedgerInvariant"
        )
        documented = {
            stmt.targets[0].id
            for stmt, following in zip(enum_body, enum_body[1:])
            if isinstance(stmt, ast.Assign)
            and isinstance(following, ast.Expr)
            and isinstance(following.value, ast.Constant)
        }
        assert documented == {i.name for i in LedgerInvariant}
