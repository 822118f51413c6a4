from __future__ import annotations

import logging
import warnings
from logging.handlers import RotatingFileHandler
from typing import TYPE_CHECKING

import pytest

from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

NAMESPACE: str = "TransGatewayTest"


@pytest.fixture(autouse=True)
def fresh_logger_utils(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    monkeypatch.setattr(LoggerUtils, "_configured", False)
    monkeypatch.setattr(LoggerUtils, "_instance", None)
    monkeypatch.setattr(LoggerUtils, "_LOGGER_NAMESPACE", NAMESPACE)
    monkeypatch.setattr(warnings, "showwarning", warnings.showwarning)
    yield
    namespace_logger: logging.Logger = logging.getLogger(NAMESPACE)
    for handler in list(namespace_logger.handlers):
        handler.close()
        namespace_logger.removeHandler(handler)


def test_singleton_configures_once() -> None:
    first = LoggerUtils(use_null_console=True)
    second = LoggerUtils(use_null_console=True)

    assert first is second
    assert len(logging.getLogger(NAMESPACE).handlers) == 1


def test_get_logger_uses_namespace() -> None:
    assert LoggerUtils.get_logger("core.trans.manager").name == f"{NAMESPACE}.core.trans.manager"
    assert LoggerUtils.get_logger().name == NAMESPACE


def test_file_handler_is_attached(tmp_path: Path) -> None:
    log_file: Path = tmp_path / "gateway.log"

    LoggerUtils(log_file, use_null_console=True)
    LoggerUtils.get_logger("test").info("written to file")

    handlers = logging.getLogger(NAMESPACE).handlers
    assert any(isinstance(handler, RotatingFileHandler) for handler in handlers)
    assert "written to file" in log_file.read_text(encoding="utf-8")


def test_set_level_and_unknown_level() -> None:
    logger_utils = LoggerUtils(use_null_console=True)

    logger_utils.set_level("DEBUG")
    assert logger_utils.get_level().name == "DEBUG"

    logger_utils.set_level("LOUD")  # type: ignore[arg-type]
    assert logger_utils.get_level().value == logging.INFO


def test_initialize_after_configuration_is_rejected() -> None:
    LoggerUtils(use_null_console=True)

    with pytest.raises(RuntimeError):
        LoggerUtils.initialize("Other")
