# Filename: probe_runner.py
import os
import shlex
import shutil
import subprocess
import sys
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

import psutil

import resource_monitor
import result_recorder
from ninja_log import log_ninja_error
from staging_tree import COMMANDS_DIR, FILES_DIR, StagingTree

# Recorded exit statuses for failures that never produced a process status.
COPY_FAILED_STATUS = 1
TIMEOUT_STATUS = 124
LAUNCH_FAILED_STATUS = 126


class ProbeKind(Enum):
    COMMAND = "command"
    FILE_COPY = "file-copy"
    TREE_COPY = "tree-copy"
    METRICS = "metrics"


@dataclass(frozen=True)
class ProbeSpec:
    label: str
    kind: ProbeKind
    # argv tuple for commands, source path for copies
    invocation: tuple | str
    destination: str = COMMANDS_DIR


@dataclass(frozen=True)
class ProbeResult:
    label: str
    invocation: str
    exit_status: int

    @property
    def success(self) -> bool:
        return self.exit_status == 0


def command(label: str, *argv: str) -> ProbeSpec:
    return ProbeSpec(label, ProbeKind.COMMAND, tuple(argv))


def file_copy(source: str, area: str = FILES_DIR) -> ProbeSpec:
    """Copy of an absolute path into `area`, mirroring the source's directories."""
    destination = os.path.join(area, os.path.dirname(source).lstrip(os.sep))
    return ProbeSpec(f"cp_{os.path.basename(source)}", ProbeKind.FILE_COPY, source, destination)


class CommandLookup:
    """Resolves a command name against PATH (or an explicit search path)."""

    def __init__(self, search_path: str | None = None):
        self.search_path = search_path

    def resolve(self, name: str) -> str | None:
        return shutil.which(name, path=self.search_path)


def _conf_files_only(directory, names):
    ignored = []
    for name in names:
        path = Path(directory, name)
        if path.is_dir():
            if not any(p.is_file() for p in path.rglob("*.conf")):
                ignored.append(name)
        elif not name.endswith(".conf"):
            ignored.append(name)
    return ignored


class ProbeRunner:
    """
    Runs single probes into a StagingTree.

    A probe whose command cannot be found is skipped without a trace. Every
    probe that does execute gets a provenance record and one progress
    character on stderr: `.` for exit status 0, `E` for anything else.
    Probe failures are never raised to the caller.
    """

    def __init__(self, tree: StagingTree, lookup: CommandLookup | None = None, progress_stream=None,
                 timeout: float | None = None, sample_count: int = 5, sample_interval: float = 1):
        self.tree = tree
        self.lookup = lookup or CommandLookup()
        self.progress_stream = progress_stream
        self.timeout = timeout
        self.sample_count = sample_count
        self.sample_interval = sample_interval

    def run(self, spec: ProbeSpec) -> ProbeResult | None:
        if spec.kind is ProbeKind.COMMAND:
            return self.run_command(spec)
        if spec.kind is ProbeKind.FILE_COPY:
            return self.copy_file(spec)
        if spec.kind is ProbeKind.TREE_COPY:
            return self.copy_tree(spec)
        if spec.kind is ProbeKind.METRICS:
            return self.sample_metrics(spec)
        raise ValueError(f"Unknown probe kind: {spec.kind}")

    def run_command(self, spec: ProbeSpec) -> ProbeResult | None:
        executable = self.lookup.resolve(spec.invocation[0])
        if executable is None:
            return None
        dest_dir = self.tree.ensure_dir(spec.destination)
        argv = [executable, *spec.invocation[1:]]
        invocation = shlex.join(spec.invocation)
        try:
            # Output accumulates: several probes may share one label.
            with open(dest_dir / spec.label, "ab") as out_f:
                proc = subprocess.run(argv, stdin=subprocess.DEVNULL, stdout=out_f,
                                      stderr=subprocess.STDOUT, timeout=self.timeout, check=False)
            exit_status = proc.returncode
        except subprocess.TimeoutExpired:
            self._log(f"Probe {spec.label} timed out after {self.timeout}s: {invocation}")
            exit_status = TIMEOUT_STATUS
        except OSError as e:
            self._log(f"Probe {spec.label} could not be started ({invocation}): {e}")
            exit_status = LAUNCH_FAILED_STATUS
        return self._finish(spec, invocation, exit_status)

    def copy_file(self, spec: ProbeSpec) -> ProbeResult:
        source = Path(spec.invocation)
        dest_dir = self.tree.ensure_dir(spec.destination)
        target = dest_dir / source.name
        invocation = f"cp {source} {spec.destination}"
        try:
            shutil.copyfile(source, target)
            exit_status = 0
        except OSError as e:
            self._log(f"Copy {spec.label} failed ({invocation}): {e}")
            target.unlink(missing_ok=True)
            exit_status = COPY_FAILED_STATUS
        return self._finish(spec, invocation, exit_status)

    def copy_tree(self, spec: ProbeSpec) -> ProbeResult:
        """Mirror a directory, keeping relative paths but only `*.conf` files."""
        source = Path(spec.invocation)
        dest_dir = self.tree.ensure_dir(spec.destination)
        target = dest_dir / source.name
        invocation = f"cp -r {source} {spec.destination}"
        try:
            shutil.copytree(source, target, ignore=_conf_files_only, dirs_exist_ok=True)
            exit_status = 0
        except OSError as e:
            self._log(f"Copy {spec.label} failed ({invocation}): {e}")
            shutil.rmtree(target, ignore_errors=True)
            exit_status = COPY_FAILED_STATUS
        return self._finish(spec, invocation, exit_status)

    def sample_metrics(self, spec: ProbeSpec) -> ProbeResult:
        dest_dir = self.tree.ensure_dir(spec.destination)
        invocation = f"psutil sample x{self.sample_count} every {self.sample_interval}s"
        try:
            resource_monitor.collect_samples(
                dest_dir / spec.label, self.sample_count, self.sample_interval)
            exit_status = 0
        except (OSError, psutil.Error) as e:
            self._log(f"Probe {spec.label} failed: {e}")
            exit_status = 1
        return self._finish(spec, invocation, exit_status)

    def _log(self, msg):
        # Collection failures are logged inside the staging tree and ship with the archive.
        log_ninja_error(msg, log_file=self.tree.collection_log)

    def _finish(self, spec: ProbeSpec, invocation: str, exit_status: int) -> ProbeResult:
        result = ProbeResult(spec.label, invocation, exit_status)
        result_recorder.record(self.tree.info_dir(spec.destination), spec.label, invocation, exit_status)
        stream = self.progress_stream or sys.stderr
        stream.write("." if result.success else "E")
        stream.flush()
        return result
