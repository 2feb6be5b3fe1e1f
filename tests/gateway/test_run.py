"""Tests for gateway/run.py — CLI entry point wiring."""

import json
import logging
from unittest.mock import patch

import pytest

from gateway import run
from gateway.config import ProxyConfig


@pytest.fixture()
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def test_client_config_snippet():
    snippet = json.loads(run.client_config_snippet(ProxyConfig(host="0.0.0.0", port=9000)))
    provider = snippet["models"]["providers"]["claude-code"]
    assert provider["baseUrl"] == "http://0.0.0.0:9000/v1"
    assert provider["models"][0]["id"] == "claude-code"


def test_setup_logging_writes_proxy_log(tmp_path, restore_root_logger):
    run.setup_logging(ProxyConfig(log_dir=str(tmp_path / "logs")))
    logging.getLogger("gateway.test").warning("hello from the proxy")
    for handler in logging.getLogger().handlers:
        handler.flush()
    assert "hello from the proxy" in (tmp_path / "logs" / "proxy.log").read_text()


@patch("gateway.run.uvicorn.run")
@patch("gateway.run.create_app")
@patch("gateway.run.load_config")
def test_main_applies_overrides(mock_load, mock_create, mock_uvicorn, tmp_path, restore_root_logger, capsys):
    mock_load.return_value = ProxyConfig(log_dir=str(tmp_path))

    run.main(host="0.0.0.0", port="9001", model="opus")

    config = mock_create.call_args.args[0]
    assert (config.host, config.port, config.default_model) == ("0.0.0.0", 9001, "opus")
    _, kwargs = mock_uvicorn.call_args
    assert kwargs["host"] == "0.0.0.0"
    assert kwargs["port"] == 9001
    assert kwargs["timeout_keep_alive"] == 600
    assert "running at http://0.0.0.0:9001" in capsys.readouterr().out
