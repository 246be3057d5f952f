import importlib.util
from pathlib import Path

SCRIPT = Path(__file__).resolve().parent.parent / "scripts" / "check_core_imports.py"


def _load_guard():
    spec = importlib.util.spec_from_file_location("check_core_imports", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    assert spec.loader is not None
    spec.loader.exec_module(module)
    return module


def test_core_does_not_import_transports():
    assert _load_guard().main() == 0, "core import guard failed"


def test_guard_flags_transport_imports(tmp_path):
    guard = _load_guard()
    bad = tmp_path / "bad.py"
    bad.write_text(
        "from mcp.server.fastmcp import FastMCP\n"
        "import testomatio_mcp.transports.stdio\n"
        "from . import client\n"
    )

    errors = guard.scan_file(bad)

    assert len(errors) == 2
    assert guard.is_forbidden("mcp")
    assert not guard.is_forbidden("mcpx")
