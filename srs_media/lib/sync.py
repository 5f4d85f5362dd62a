from __future__ import annotations

import logging
import tempfile
from pathlib import Path
from typing import Callable, Sequence

from .command import CmdResult, fmt_argv, run_cmd

logger = logging.getLogger(__name__)

# Bulk copy exit codes: bits 0-2 are informational (copied, extras, mismatches),
# 8 and above mean at least one failure.
COPY_FAILURE_THRESHOLD = 8

Runner = Callable[[Sequence[str]], CmdResult]
Acceptance = Callable[[int], bool]


class CopyError(RuntimeError):
    pass


def copy_succeeded(code: int) -> bool:
    return 0 <= code < COPY_FAILURE_THRESHOLD


class TreeSync:
    """Mirror directory trees with the host's bulk copy command."""

    def __init__(
        self,
        *,
        command: str = "robocopy",
        runner: Runner | None = None,
        dry_run: bool = False,
    ) -> None:
        self.command = command
        self.dry_run = dry_run
        self._runner = runner

    def _run(self, argv: Sequence[str]) -> CmdResult:
        if self._runner is not None:
            return self._runner(argv)
        return run_cmd(argv, check=False, dry_run=self.dry_run)

    def sync(
        self,
        src: str | Path,
        dst: str | Path,
        flags: Sequence[str] = (),
        *,
        accept: Acceptance = copy_succeeded,
    ) -> int:
        """Make ``dst`` an exact copy of ``src``; returns the copy exit code."""

        argv = [self.command, str(src), str(dst), "/mir", "/r:0", *flags]
        code = self._run(argv).returncode
        if not accept(code):
            raise CopyError(
                f"Copy from {src} to {dst} failed with exit code {code} "
                f"(flags: {fmt_argv(flags) or '<none>'})"
            )
        logger.debug("Copy %s -> %s finished with code %d", src, dst, code)
        return code

    def sync_subtree(
        self,
        src: str | Path,
        dst: str | Path,
        name: str,
        flags: Sequence[str] = (),
        *,
        accept: Acceptance = copy_succeeded,
    ) -> int:
        return self.sync(Path(src) / name, Path(dst) / name, flags, accept=accept)

    def sync_all_subdirectories(
        self,
        src: str | Path,
        dst: str | Path,
        flags: Sequence[str] = (),
        *,
        accept: Acceptance = copy_succeeded,
    ) -> list[str]:
        """Mirror each immediate subdirectory of ``src`` into ``dst``.

        Loose files at the top of ``src`` are not copied, and subdirectories
        of ``dst`` without a counterpart in ``src`` are left alone, so this can
        merge a payload onto media that already holds other content.
        """

        s = Path(src)
        if not s.is_dir():
            raise FileNotFoundError(str(s))
        copied: list[str] = []
        for child in sorted(s.iterdir(), key=lambda c: c.name.lower()):
            if child.is_dir():
                self.sync(child, Path(dst) / child.name, flags, accept=accept)
                copied.append(child.name)
        return copied

    def remove_tree(self, path: str | Path) -> None:
        """Delete a directory tree regardless of how deep its paths go.

        Plain recursive delete trips over the host's path-length limit, so
        the tree is first emptied by mirroring an empty directory onto it and
        then the empty root is removed directly.
        """

        target = Path(path)
        if not target.exists():
            return
        with tempfile.TemporaryDirectory(prefix="srs-empty-") as empty:
            self.sync(empty, target, ["/njh", "/njs", "/nfl", "/ndl"])
        if self.dry_run:
            logger.info("Would remove %s", target)
            return
        target.rmdir()
        logger.info("Removed %s", target)
