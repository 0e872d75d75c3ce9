"""Tests for the console loggers."""

import pytest
import jax.numpy as jnp
from chip8vm.logging import ConsoleLogger, EmulatorLogger


def make_logger(cls=EmulatorLogger, level="DEBUG"):
    return cls(name="test", log_level=level, use_colors=False, show_timestamps=False)


class TestConsoleLogger:
    """Level filtering and line prefixes."""

    def test_filters_below_level(self, capsys):
        logger = make_logger(ConsoleLogger, "WARNING")

        logger.info("hidden")
        logger.warning("shown")

        out = capsys.readouterr().out
        assert "hidden" not in out
        assert out == "[WARNING][test] shown\n"

    def test_set_level(self, capsys):
        logger = make_logger(ConsoleLogger, "ERROR")
        logger.set_level("debug")

        logger.debug("trace")

        assert "[  DEBUG][test] trace" in capsys.readouterr().out

    def test_unknown_level_rejected(self):
        with pytest.raises(ValueError):
            make_logger(ConsoleLogger, "LOUD")

    def test_multiline_message_prefixes_every_line(self, capsys):
        make_logger(ConsoleLogger).info("first\nsecond")

        assert capsys.readouterr().out.splitlines() == [
            "[   INFO][test] first",
            "[   INFO][test] second",
        ]


class TestEmulatorLogger:
    """Traces, display dumps and session banners."""

    def test_instruction_trace(self, capsys):
        logger = make_logger()

        logger.log_instruction(0x200, 0xD015)

        assert capsys.readouterr().out == "[  DEBUG][test] 0200: D015  DRW V0, V1, #5\n"
        assert logger.instructions_traced == 1

    def test_display_dump_rows(self, capsys):
        display = jnp.zeros((4, 2), dtype=jnp.uint8).at[0, 0].set(1).at[3, 1].set(1)

        make_logger().log_display(display)

        lines = [line.split("] ", 1)[1] for line in capsys.readouterr().out.splitlines()]
        assert lines == ["Display 4x2:", "#...", "...#"]

    def test_session_banners(self, capsys):
        logger = make_logger()

        logger.log_session_start({"rom": "pong.ch8"})
        logger.log_session_end({"cycles": 10, "ratio": 0.5})

        out = capsys.readouterr().out
        assert "  rom: pong.ch8" in out
        assert "  cycles: 10" in out
        assert "  ratio: 0.5000" in out
        assert out.count("=" * 60) == 4
