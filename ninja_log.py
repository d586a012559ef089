# Filename: ninja_log.py
import os
import sys
import traceback
from datetime import datetime

MAX_LOG_BYTES = 5 * 1024 * 1024

LOG_FILE_NINJA = os.path.join(os.getcwd(), "debug_ninja_log.txt")


def configure(log_file):
    """Point the fatal-error log somewhere else; an empty value turns file logging off."""
    global LOG_FILE_NINJA
    if not log_file:
        LOG_FILE_NINJA = None
    else:
        LOG_FILE_NINJA = os.path.abspath(log_file)


def log_ninja_error(msg, echo=False, log_file=None):
    """Append msg (and the active traceback) to log_file, or to the configured log."""
    timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    full_msg = f"[{timestamp}] [DEBUG_NINJA] {msg}\n"
    if sys.exc_info()[0] is not None:
        full_msg += traceback.format_exc()
    if echo:
        print(f"debug-ninja: {msg}", file=sys.stderr, flush=True)
    target = log_file or LOG_FILE_NINJA
    if target is None:
        return
    try:
        if os.path.exists(target) and os.path.getsize(target) > MAX_LOG_BYTES:
            with open(target, "w", encoding="utf-8") as f:
                f.write(f"[{timestamp}] Log truncated.\n")
    except OSError:
        pass
    try:
        with open(target, "a", encoding="utf-8") as f:
            f.write(full_msg)
    except OSError as log_e:
        print(f"CRIT_LOGGING_FAILURE_IN_DEBUG_NINJA: {log_e}", file=sys.stderr, flush=True)
