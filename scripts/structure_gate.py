#!/usr/bin/env python3
"""Size and complexity gate for the linebased package.

    python scripts/structure_gate.py            check linebased/ and this script
    python scripts/structure_gate.py FILE...    check the given files
"""

from __future__ import annotations

import ast
import sys
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class Limits:
    max_file_loc: int
    max_func_loc: int
    max_cc: int


REPO_ROOT = Path(__file__).resolve().parents[1]
PACKAGE_DIR = REPO_ROOT / "linebased"

# The tokenizer and the engine are the core; keep them small.
STRICT_FILES: dict[str, Limits] = {
    "linebased/decoder.py": Limits(max_file_loc=200, max_func_loc=60, max_cc=15),
    "linebased/expander.py": Limits(max_file_loc=340, max_func_loc=70, max_cc=15),
}

DEFAULT_LIMITS = Limits(max_file_loc=300, max_func_loc=80, max_cc=20)

SKIP_DIRS = {".git", ".venv", ".pytest_cache", "__pycache__", "build", "dist"}

# Node types that add one decision point each.
_BRANCH_NODES = (ast.If, ast.For, ast.AsyncFor, ast.While, ast.With, ast.AsyncWith, ast.IfExp)


def _iter_python_files(root: Path) -> list[Path]:
    return [p for p in sorted(root.rglob("*.py")) if not any(part in SKIP_DIRS for part in p.parts)]


def _rel(path: Path) -> str:
    try:
        return path.resolve().relative_to(REPO_ROOT).as_posix()
    except ValueError:
        return path.as_posix()


def _limits_for(rel: str) -> Limits:
    return STRICT_FILES.get(rel, DEFAULT_LIMITS)


def cyclomatic(node: ast.AST) -> int:
    cc = 1
    for child in ast.walk(node):
        if isinstance(child, _BRANCH_NODES):
            cc += 1
        elif isinstance(child, ast.Try):
            cc += len(child.handlers)
        elif isinstance(child, ast.BoolOp):
            # a and b and c => 2 decision points
            cc += max(0, len(child.values) - 1)
        elif isinstance(child, ast.comprehension):
            cc += 1 + len(child.ifs)
        elif isinstance(child, ast.Match):
            cc += len(child.cases)
    return cc


def _loc_for(node: ast.AST) -> int:
    lineno = getattr(node, "lineno", None)
    end_lineno = getattr(node, "end_lineno", None)
    if isinstance(lineno, int) and isinstance(end_lineno, int) and end_lineno >= lineno:
        return end_lineno - lineno + 1
    return 0


def check_file(path: Path, limits: Limits | None = None) -> list[str]:
    """Return the gate violations for one file."""
    rel = _rel(path)
    limits = limits or _limits_for(rel)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        return [f"{rel}: failed to read ({e})"]

    errors: list[str] = []
    loc = len(text.splitlines())
    if loc > limits.max_file_loc:
        errors.append(f"{rel}: file too large (loc={loc}, max={limits.max_file_loc})")

    try:
        tree = ast.parse(text, filename=rel)
    except SyntaxError as e:
        return [*errors, f"{rel}: syntax error ({e})"]

    for node in ast.walk(tree):
        if not isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
            continue
        fn = f"{rel}:{node.lineno} {node.name}"
        fn_loc = _loc_for(node)
        if fn_loc > limits.max_func_loc:
            errors.append(f"{fn}: function too large (loc={fn_loc}, max={limits.max_func_loc})")
        cc = cyclomatic(node)
        if cc > limits.max_cc:
            errors.append(f"{fn}: cyclomatic too high (cc={cc}, max={limits.max_cc})")
    return errors


def main(argv: list[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    if args:
        files = [Path(a) for a in args]
    else:
        files = _iter_python_files(PACKAGE_DIR) + [REPO_ROOT / "scripts" / "structure_gate.py"]

    errors: list[str] = []
    for path in dict.fromkeys(files):
        errors += check_file(path)

    if errors:
        print("== structure gate errors ==", file=sys.stderr)
        for e in errors:
            print(f"- {e}", file=sys.stderr)
        print(f"\nFAIL: structure gate ({len(errors)} error(s)).", file=sys.stderr)
        return 2

    print("OK: structure gate")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
