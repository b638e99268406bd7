from __future__ import annotations

import importlib.util
import sys
from pathlib import Path

GATE_PATH = Path(__file__).resolve().parents[1] / "scripts" / "structure_gate.py"


def _load_gate():
    spec = importlib.util.spec_from_file_location("structure_gate", GATE_PATH)
    assert spec is not None and spec.loader is not None
    module = importlib.util.module_from_spec(spec)
    sys.modules[spec.name] = module
    spec.loader.exec_module(module)
    return module


def test_structure_gate_passes_on_package() -> None:
    gate = _load_gate()

    assert gate.main([]) == 0


def test_structure_gate_flags_large_and_complex_functions(tmp_path: Path) -> None:
    gate = _load_gate()

    branches = "\n".join(f"    if x == {i}:\n        return {i}" for i in range(6))
    src = f"def busy(x):\n{branches}\n    return -1\n"
    path = tmp_path / "busy.py"
    path.write_text(src, encoding="utf-8")

    limits = gate.Limits(max_file_loc=10, max_func_loc=8, max_cc=5)
    errors = gate.check_file(path, limits)

    assert any("file too large" in e for e in errors)
    assert any("function too large" in e for e in errors)
    assert any("cyclomatic too high (cc=7" in e for e in errors)


def test_structure_gate_reports_syntax_errors(tmp_path: Path) -> None:
    gate = _load_gate()

    path = tmp_path / "broken.py"
    path.write_text("def (:\n", encoding="utf-8")

    errors = gate.check_file(path)
    assert len(errors) == 1
    assert "syntax error" in errors[0]
