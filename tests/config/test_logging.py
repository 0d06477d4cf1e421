"""Tests for structlog configuration."""

from __future__ import annotations

import json
import logging
from collections.abc import Generator

import pytest
import structlog

from subrules.config.logging import LOGGER_NAME, bind_subscriber, configure_logging


@pytest.fixture(autouse=True)
def _restore_logging() -> Generator[None]:
    """Restore root logger state after each test."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    pkg = logging.getLogger(LOGGER_NAME)
    pkg_level = pkg.level
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)
    pkg.setLevel(pkg_level)


class TestConfigureLogging:
    def test_verbose_enables_debug(self) -> None:
        configure_logging(verbose=True, log_json=False)
        assert logging.getLogger("subrules").level == logging.DEBUG
        assert logging.getLogger().level == logging.WARNING

    def test_non_verbose_sets_warning(self) -> None:
        configure_logging(verbose=False, log_json=False)
        assert logging.getLogger("subrules").level == logging.WARNING

    def test_json_mode_output(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging(verbose=True, log_json=True)
        log = structlog.get_logger("subrules.test")
        log.warning("json test", answer=42)
        parsed = json.loads(capfd.readouterr().err.strip())
        assert parsed["event"] == "json test"
        assert parsed["answer"] == 42
        assert parsed["level"] == "warning"
        assert parsed["logger"] == "subrules.test"
        assert "timestamp" in parsed

    def test_stdlib_module_logger_gets_structured_fields(
        self, capfd: pytest.CaptureFixture[str]
    ) -> None:
        configure_logging(verbose=True, log_json=True)

        logging.getLogger("subrules.services.reconciler").info("Adding rule %s", "1_v_1_0_0")

        parsed = json.loads(capfd.readouterr().err.strip())
        assert parsed["event"] == "Adding rule 1_v_1_0_0"
        assert parsed["level"] == "info"
        assert parsed["logger"] == "subrules.services.reconciler"

    def test_info_hidden_without_verbose(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging(verbose=False, log_json=True)
        logging.getLogger("subrules.services.reconciler").info("Adding rule x")
        assert capfd.readouterr().err == ""

    def test_third_party_debug_is_suppressed(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging(verbose=True, log_json=True)
        logging.getLogger("anyio").debug("loop noise")
        assert capfd.readouterr().err == ""

    def test_idempotent_calls(self) -> None:
        """Multiple configure_logging calls don't stack handlers."""
        configure_logging(verbose=True, log_json=False)
        configure_logging(verbose=True, log_json=True)
        assert len(logging.getLogger().handlers) == 1


class TestBindSubscriber:
    def test_context_reaches_every_line(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging(verbose=True, log_json=True)
        bind_subscriber("OrdersSubscriber", "Sales.Orders.Handler")

        logging.getLogger("subrules.services.generator").debug("generated")

        parsed = json.loads(capfd.readouterr().err.strip())
        assert parsed["subscriber"] == "OrdersSubscriber"
        assert parsed["handler"] == "Sales.Orders.Handler"

    def test_rebinding_drops_previous_handler(self) -> None:
        bind_subscriber("A", "Handler.One")
        bind_subscriber("B")
        assert structlog.contextvars.get_contextvars() == {"subscriber": "B"}
