"""
Logging helper module for terminal-first logging.
All output goes to stdout with formatted prefixes, and also to a log file.
"""

import os
import threading
from datetime import datetime
from pathlib import Path

# Get project root directory
_project_root = Path(__file__).parent.parent

_log_file = None
_log_file_path = None
# Subjects are queried from worker threads; keep each line whole
_log_lock = threading.Lock()


def _log_dir() -> Path:
    """Directory for log files; AICALENDAR_LOG_DIR overrides <project>/logs."""
    override = os.getenv("AICALENDAR_LOG_DIR")
    return Path(override) if override else _project_root / "logs"


def _open_log_file():
    """Create the timestamped log file on first use."""
    global _log_file, _log_file_path
    if _log_file is None:
        log_dir = _log_dir()
        log_dir.mkdir(parents=True, exist_ok=True)
        _log_file_path = log_dir / f"aicalendar_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log"
        _log_file = open(_log_file_path, 'a', encoding='utf-8')
    return _log_file


def _log(message: str):
    """Write message to both stdout and log file."""
    with _log_lock:
        print(message)
        log_file = _open_log_file()
        log_file.write(message + "\n")
        log_file.flush()


class Log:
    """Simple logging class that outputs to stdout and log file with formatted prefixes."""

    @staticmethod
    def section(title: str):
        """Print a section header: blank line + '===== TITLE ====='"""
        _log("")
        _log(f"===== {title} =====")

    @staticmethod
    def info(message: str):
        """Print an info message: '[INFO] message'"""
        _log(f"[INFO] {message}")

    @staticmethod
    def warn(message: str):
        """Print a warning message: '[WARN] message'"""
        _log(f"[WARN] {message}")

    @staticmethod
    def error(message: str):
        """Print an error message: '[ERROR] message'"""
        _log(f"[ERROR] {message}")

    @staticmethod
    def kv(pairs: dict):
        """
        Print key-value pairs: '[KV] key=value | key2=value2'

        Args:
            pairs: Dictionary of key-value pairs to print
        """
        kv_string = " | ".join([f"{k}={v}" for k, v in pairs.items()])
        _log(f"[KV] {kv_string}")

    @staticmethod
    def get_log_path() -> str:
        """Get the path to the current log file."""
        _open_log_file()
        return str(_log_file_path)
