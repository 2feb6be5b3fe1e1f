"""Structural import tests -- layering between translator, claude_cli and gateway."""
import ast
import pathlib

import pytest

ROOT = pathlib.Path(__file__).resolve().parent.parent


def _imported_modules(path):
    tree = ast.parse(path.read_text(encoding="utf-8"))
    names = set()
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            names.update(alias.name.split(".")[0] for alias in node.names)
        elif isinstance(node, ast.ImportFrom) and node.module:
            names.add(node.module.split(".")[0])
    return names


@pytest.mark.parametrize("path", sorted((ROOT / "translator").glob("*.py")), ids=lambda p: p.name)
def test_translator_has_no_http_dependencies(path):
    """translator/ must stay usable without the web stack."""
    forbidden = {"gateway", "fastapi", "starlette", "uvicorn"}
    assert not (_imported_modules(path) & forbidden)


def test_claude_cli_does_not_import_translator():
    """The runner only knows about prompts and flags, not request translation."""
    for path in (ROOT / "claude_cli").glob("*.py"):
        assert "translator" not in _imported_modules(path), path.name


def test_proxy_constants_import_safe():
    """proxy_constants.py has no third-party or package imports."""
    assert _imported_modules(ROOT / "proxy_constants.py") <= {"os", "pathlib"}


def test_pipeline_reexports_empty_conversation_error():
    from translator.pipeline import EmptyConversationError
    from translator.prompt_assembler import EmptyConversationError as original

    assert EmptyConversationError is original


def test_runner_exports():
    import claude_cli

    assert callable(claude_cli.ClaudeCLIRunner)
    assert issubclass(claude_cli.AgentInvocationError, RuntimeError)
