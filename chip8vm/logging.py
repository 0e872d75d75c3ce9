"""Console logging utilities for chip8vm hosts.

A small level-filtered console logger, an emulator-specific subclass for
session banners, instruction traces, faults and framebuffer dumps, and a
tqdm progress bar for long headless runs.
"""

import sys
import time
from typing import Any, Dict, Iterable, Optional

import numpy as np
from tqdm import tqdm

from chip8vm.disassemble import disassemble


LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

# ANSI colors, applied to the level tag only.
COLORS = {
    "DEBUG": "\033[36m",
    "INFO": "\033[32m",
    "WARNING": "\033[33m",
    "ERROR": "\033[31m",
}
RESET = "\033[0m"

RULE = "=" * 60


class ConsoleLogger:
    """Console logger with level filtering; multi-line messages keep the prefix on every line."""

    def __init__(
        self,
        name: str = "chip8vm",
        log_level: str = "INFO",
        use_colors: bool = True,
        show_timestamps: bool = True,
    ):
        self.name = name
        self.set_level(log_level)
        self.use_colors = use_colors and getattr(sys.stdout, "isatty", lambda: False)()
        self.show_timestamps = show_timestamps
        self.start_time = time.time()

    def set_level(self, log_level: str):
        level = log_level.upper()
        if level not in LEVELS:
            raise ValueError(f"log level must be one of {', '.join(LEVELS)}, got {log_level!r}")
        self.log_level = level

    def is_enabled_for(self, level: str) -> bool:
        return LEVELS.index(level.upper()) >= LEVELS.index(self.log_level)

    def _prefix(self, level: str) -> str:
        tag = f"[{level:>7s}]"
        if self.use_colors:
            tag = f"{COLORS[level]}{tag}{RESET}"
        if self.show_timestamps:
            tag = f"[{time.time() - self.start_time:8.2f}s]{tag}"
        return f"{tag}[{self.name}]"

    def log(self, level: str, message: Any):
        level = level.upper()
        if not self.is_enabled_for(level):
            return
        prefix = self._prefix(level)
        for line in str(message).splitlines() or [""]:
            print(f"{prefix} {line}", flush=True)

    def section(self, level: str, title: str, lines: Iterable[str]):
        """Log ``lines`` between two rules, under a title."""
        self.log(level, "\n".join([RULE, title, *lines, RULE]))

    def debug(self, message: Any):
        self.log("DEBUG", message)

    def info(self, message: Any):
        self.log("INFO", message)

    def warning(self, message: Any):
        self.log("WARNING", message)

    def error(self, message: Any):
        self.log("ERROR", message)


def _format_value(value: Any) -> str:
    return f"{value:.4f}" if isinstance(value, float) else str(value)


class EmulatorLogger(ConsoleLogger):
    """Logger for emulation sessions: configuration, traces, faults and display dumps."""

    def __init__(self, name: str = "chip8vm", **kwargs):
        super().__init__(name, **kwargs)
        self.instructions_traced = 0

    def log_session_start(self, config: Dict[str, Any]):
        self.section(
            "INFO",
            "Starting emulation with configuration:",
            (f"  {key}: {value}" for key, value in config.items()),
        )

    def log_instruction(self, pc: int, opcode: int):
        """DEBUG trace line for the instruction about to run."""
        self.instructions_traced += 1
        self.debug(f"{pc:04X}: {opcode:04X}  {disassemble(opcode)}")

    def log_fault(self, error: Exception):
        self.error(f"Machine fault: {error}")

    def log_key_wait(self, register: int, pc: int):
        self.warning(f"Waiting for key into V{register:X} (pc=0x{pc:03X})")

    def log_display(self, display, on: str = "#", off: str = "."):
        """Dump a ``[x, y]`` framebuffer as text, one line per row."""
        rows = np.where(np.asarray(display).T != 0, on, off)
        width, height = rows.shape[1], rows.shape[0]
        self.info("\n".join([f"Display {width}x{height}:", *("".join(row) for row in rows)]))

    def log_session_end(self, stats: Dict[str, Any]):
        elapsed = time.time() - self.start_time
        self.section(
            "INFO",
            f"Emulation finished in {elapsed:.2f}s",
            (f"  {key}: {_format_value(value)}" for key, value in stats.items()),
        )


def build_progress_bar(total: int, desc: Optional[str] = None, **kwargs) -> tqdm:
    """Progress bar over emulated cycles."""
    if desc is None:
        desc = f"Emulating ({total:,} cycles)"
    kwargs.pop("total", None)
    kwargs.pop("unit", None)
    return tqdm(total=total, desc=desc, unit="cycle", **kwargs)
