from __future__ import annotations

import ctypes
import os
import shutil
from pathlib import Path
from typing import Iterable, List

REQUIRED_TOOLS = ("robocopy", "dism", "diskpart", "msiexec", "powershell")


def is_elevated() -> bool:
    if os.name != "nt":
        return os.geteuid() == 0
    return bool(ctypes.windll.shell32.IsUserAnAdmin())


def missing_tools(tools: Iterable[str] = REQUIRED_TOOLS) -> List[str]:
    return [t for t in tools if shutil.which(t) is None]


def free_gib(path: str | Path) -> float:
    p = Path(path)
    p.mkdir(parents=True, exist_ok=True)
    return shutil.disk_usage(p).free / (1024 ** 3)
