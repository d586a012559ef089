import importlib.util
import sys
from pathlib import Path

import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]

# Dependencies first: each module's own imports resolve from sys.modules.
MODULES = (
    "ninja_errors",
    "ninja_log",
    "config_handler",
    "result_recorder",
    "resource_monitor",
    "staging_tree",
    "probe_runner",
    "category_collector",
    "archiver",
    "debug_ninja",
)


def load_module(name):
    if name in sys.modules:
        return sys.modules[name]
    spec = importlib.util.spec_from_file_location(name, ROOT_DIR / f"{name}.py")
    module = importlib.util.module_from_spec(spec)
    sys.modules[name] = module
    spec.loader.exec_module(module)
    return module


for _name in MODULES:
    load_module(_name)

ninja_log = sys.modules["ninja_log"]


@pytest.fixture(autouse=True)
def isolated_error_log(tmp_path):
    ninja_log.configure(tmp_path / "debug_ninja_log.txt")
    yield tmp_path / "debug_ninja_log.txt"
    ninja_log.configure(None)
