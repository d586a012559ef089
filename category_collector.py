# Filename: category_collector.py
from dataclasses import replace
from enum import Enum
from pathlib import Path

import result_recorder
from probe_runner import ProbeKind, ProbeResult, ProbeRunner, ProbeSpec, command, file_copy
from staging_tree import CONFIG_DIR


class Category(Enum):
    SYSCMDS = "syscmds"
    LOGS = "logs"
    CFGS = "cfgs"
    EXTRA = "extra"


CATEGORY_ORDER = (Category.SYSCMDS, Category.LOGS, Category.CFGS, Category.EXTRA)
DEFAULT_CATEGORIES = frozenset({Category.SYSCMDS, Category.LOGS, Category.CFGS})

# --- Probe lists ---
SYSTEM_COMMANDS = (
    command("date", "date"),
    command("uptime", "uptime"),
    command("w", "w"),
    command("last", "last"),
    command("hostname", "hostname"),
    command("uname", "uname", "-a"),
    command("lsb_release", "lsb_release", "-a"),
    command("ps", "ps", "aux"),
    command("free", "free", "-m"),
    command("df", "df", "-h"),
    command("df_i", "df", "-i"),
    command("mount", "mount"),
    command("dmesg", "dmesg"),
    command("rpm", "rpm", "-qa"),
    command("dpkg", "dpkg", "-l"),
    command("pkg_info", "pkg_info"),
    command("sestatus", "sestatus", "-v"),
    command("ifconfig", "ifconfig", "-a"),
    command("ip_addr", "ip", "addr"),
    command("ip_route", "ip", "route"),
    command("netstat_i", "netstat", "-i"),
    command("netstat_an", "netstat", "-an"),
    command("netstat_rn", "netstat", "-rn"),
    command("pfctl_rules", "pfctl", "-s", "rules"),
    command("pfctl_nat", "pfctl", "-s", "nat"),
    command("java_version", "java", "-version"),
    command("zfs_list", "zfs", "list"),
    command("zpool_list", "zpool", "list"),
)

PSEUDO_FILES = tuple(file_copy(path) for path in (
    "/proc/cpuinfo",
    "/proc/meminfo",
    "/proc/mounts",
    "/proc/swaps",
    "/proc/version",
    "/proc/loadavg",
    "/proc/partitions",
    "/proc/diskstats",
    "/sys/kernel/mm/transparent_hugepage/enabled",
    "/sys/kernel/mm/transparent_hugepage/defrag",
))

LOG_FILES = tuple(file_copy(path) for path in (
    "/var/log/syslog",
    "/var/log/messages",
    "/var/log/kern.log",
    "/var/log/daemon.log",
    "/var/log/debug",
    "/var/log/user.log",
    "/var/log/dmesg",
    "/var/log/boot.log",
))

CONFIG_FILES = tuple(file_copy(path) for path in (
    "/etc/hosts",
    "/etc/resolv.conf",
    "/etc/nsswitch.conf",
    "/etc/fstab",
    "/etc/os-release",
    "/etc/sysctl.conf",
    "/etc/ntp.conf",
    "/etc/chrony.conf",
    "/etc/security/limits.conf",
))

LIMITS_D = "/etc/security/limits.d"
LIMITS_D_SPEC = ProbeSpec("cp_limits.d", ProbeKind.TREE_COPY, LIMITS_D, f"{CONFIG_DIR}/etc/security")

EXTRA_COMMANDS = (
    command("sysctl", "sysctl", "-a"),
    command("lsmod", "lsmod"),
    command("lspci", "lspci"),
    command("lscpu", "lscpu"),
    command("lsblk", "lsblk"),
    command("ss", "ss", "-tanp"),
    command("lsof", "lsof", "-n", "-P"),
    command("top", "top", "-b", "-n", "1"),
    command("numactl", "numactl", "--hardware"),
    command("journalctl_kernel", "journalctl", "-k", "-b", "--no-pager"),
    ProbeSpec("resource_metrics", ProbeKind.METRICS, ("psutil",)),
)

# label, kernel module that must already be loaded, real invocation
IPTABLES_PROBES = (
    ("iptables_rules", "iptable_filter", ("iptables", "-n", "-L")),
    ("iptables_nat", "nf_conntrack", ("iptables", "-t", "nat", "-n", "-L")),
)


class CategoryCollector:
    """
    Walks the fixed probe list of each selected category through a ProbeRunner.

    All host paths are looked up under `fs_root` so a run can be pointed at a
    copy of a filesystem instead of the live one.
    """

    def __init__(self, runner: ProbeRunner, fs_root: str = "/", sample_interval=1, sample_count=5):
        self.runner = runner
        self.fs_root = Path(fs_root)
        self.sample_interval = sample_interval
        self.sample_count = sample_count
        self._collectors = {
            Category.SYSCMDS: self.collect_syscmds,
            Category.LOGS: self.collect_logs,
            Category.CFGS: self.collect_cfgs,
            Category.EXTRA: self.collect_extra,
        }

    def host_path(self, path: str) -> Path:
        return self.fs_root / path.lstrip("/")

    def collect(self, categories):
        for category in CATEGORY_ORDER:
            if category in categories:
                self._collectors[category]()

    def collect_syscmds(self):
        for spec in SYSTEM_COMMANDS:
            self.runner.run(spec)
        self.runner.run(command("vmstat", "vmstat", str(self.sample_interval), str(self.sample_count)))
        self.runner.run(self.swap_probe())
        for spec in self.iptables_probes():
            self.runner.run(spec)
        self.runner.run(self.iostat_probe())
        for spec in PSEUDO_FILES:
            self.copy_if_present(spec)

    def collect_logs(self):
        for spec in LOG_FILES:
            self.copy_if_present(spec)

    def collect_cfgs(self):
        for spec in CONFIG_FILES:
            self.copy_if_present(spec)
        self.collect_limits_d()

    def collect_extra(self):
        for spec in EXTRA_COMMANDS:
            self.runner.run(spec)

    # --- Policies ---

    def swap_probe(self) -> ProbeSpec:
        if self.runner.lookup.resolve("swapctl") is not None:
            return command("swap", "swapctl", "-l")
        return command("swap", "swapon", "-s")

    def loaded_kernel_modules(self) -> set:
        try:
            text = self.host_path("/proc/modules").read_text(encoding="utf-8", errors="replace")
        except OSError:
            return set()
        return {line.split()[0] for line in text.splitlines() if line.strip()}

    def iptables_probes(self) -> list:
        # Running iptables loads its kernel modules as a side effect; never trigger that.
        modules = self.loaded_kernel_modules()
        probes = []
        for label, module, argv in IPTABLES_PROBES:
            if module in modules:
                probes.append(command(label, *argv))
            else:
                probes.append(command(
                    label, "echo", f"{module} kernel module not loaded, skipping iptables to avoid autoloading it"))
        return probes

    def iostat_probe(self) -> ProbeSpec:
        interval, count = str(self.sample_interval), str(self.sample_count)
        if self.host_path("/proc/diskstats").exists():
            return command("iostat_linux", "iostat", "-mx", interval, count)
        if self.host_path("/proc").exists():
            return command("iostat_smartos", "iostat", "-xnz", interval, count)
        return command("iostat_bsd", "iostat", "-dIw", interval, "-c", count)

    def copy_if_present(self, spec: ProbeSpec) -> ProbeResult | None:
        source = self.host_path(spec.invocation)
        if not source.is_file():
            return None
        return self._run_copy(replace(spec, invocation=str(source)))

    def collect_limits_d(self) -> ProbeResult | None:
        source = self.host_path(LIMITS_D)
        if not source.is_dir() or not any(p.is_file() for p in source.rglob("*.conf")):
            return None
        return self._run_copy(replace(LIMITS_D_SPEC, invocation=str(source)))

    def _run_copy(self, spec: ProbeSpec) -> ProbeResult | None:
        result = self.runner.run(spec)
        if result is not None and result.success:
            result_recorder.discard(self.runner.tree.info_dir(spec.destination), spec.label)
        return result
