# Filename: resource_monitor.py
import json
import os
import time

import psutil


def collect_metrics(output_file: str | os.PathLike) -> dict:
    """Take one resource sample and append it to output_file as a JSON line."""
    memory = psutil.virtual_memory()
    swap = psutil.swap_memory()
    net = psutil.net_io_counters()
    metrics = {
        "timestamp": time.time(),
        "boot_time": psutil.boot_time(),
        "cpu_count": psutil.cpu_count(),
        "cpu_percent": psutil.cpu_percent(interval=None),
        "load_average": list(psutil.getloadavg()),
        "memory_total": memory.total,
        "memory_available": memory.available,
        "memory_percent": memory.percent,
        "swap_total": swap.total,
        "swap_percent": swap.percent,
        "disk_percent": psutil.disk_usage("/").percent,
        "net_bytes_sent": net.bytes_sent if net else None,
        "net_bytes_recv": net.bytes_recv if net else None,
        "process_count": len(psutil.pids()),
    }
    with open(output_file, "a", encoding="utf-8") as f:
        f.write(json.dumps(metrics) + "\n")
    return metrics


def collect_samples(output_file: str | os.PathLike, count: int, interval: float = 1) -> list[dict]:
    """Append `count` samples to output_file, `interval` seconds apart; the first is immediate."""
    # cpu_percent(interval=None) measures since the previous call; prime it.
    psutil.cpu_percent(interval=None)
    samples = []
    for i in range(count):
        if i:
            time.sleep(max(0, interval))
        samples.append(collect_metrics(output_file))
    return samples
