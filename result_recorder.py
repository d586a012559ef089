# Filename: result_recorder.py
"""
Provenance records for probes.

Each executed probe leaves `<subtree>/.info/<label>` with two lines: the
invocation as it was run and its exit status. A missing record means the
probe never ran (tool or source absent). A successful file copy has its
record discarded since the copied file already says everything.
"""
import os
from pathlib import Path


def record(info_dir: str | os.PathLike, label: str, invocation: str, exit_status: int) -> Path:
    record_path = Path(info_dir) / label
    with open(record_path, "w", encoding="utf-8") as f:
        f.write(f"{invocation}\n{exit_status}\n")
    return record_path


def discard(info_dir: str | os.PathLike, label: str):
    record_path = Path(info_dir) / label
    if record_path.exists():
        record_path.unlink()
