from __future__ import annotations

import logging
from pathlib import Path

from .command import run_cmd

logger = logging.getLogger(__name__)


def _powershell(script: str, *, env: dict[str, str], dry_run: bool = False) -> str:
    r = run_cmd(
        ["powershell", "-NoProfile", "-NonInteractive", "-Command", script],
        env=env,
        dry_run=dry_run,
    )
    return (r.stdout or "").strip()


def mount_iso(iso_path: str | Path, *, dry_run: bool = False) -> str:
    """Mount an ISO and return the root of its volume (e.g. 'F:\\')."""

    letter = _powershell(
        "(Mount-DiskImage -ImagePath $env:SRS_ISO -PassThru | Get-Volume).DriveLetter",
        env={"SRS_ISO": str(Path(iso_path).resolve())},
        dry_run=dry_run,
    )
    if dry_run:
        letter = letter or "Z"
    if len(letter) != 1:
        raise RuntimeError(f"Could not determine drive letter of mounted ISO {iso_path}: {letter!r}")
    logger.info("Mounted %s at %s:", iso_path, letter)
    return f"{letter}:\\"


def dismount_iso(iso_path: str | Path, *, dry_run: bool = False) -> None:
    _powershell(
        "Dismount-DiskImage -ImagePath $env:SRS_ISO | Out-Null",
        env={"SRS_ISO": str(Path(iso_path).resolve())},
        dry_run=dry_run,
    )


def export_image(src_wim: str | Path, index: int, dst_wim: str | Path, *, dry_run: bool = False) -> None:
    run_cmd(
        [
            "dism",
            "/Export-Image",
            f"/SourceImageFile:{src_wim}",
            f"/SourceIndex:{index}",
            f"/DestinationImageFile:{dst_wim}",
            "/Compress:max",
            "/CheckIntegrity",
        ],
        dry_run=dry_run,
    )


def mount_image(wim: str | Path, mount_dir: str | Path, *, index: int = 1, dry_run: bool = False) -> None:
    Path(mount_dir).mkdir(parents=True, exist_ok=True)
    run_cmd(
        ["dism", "/Mount-Image", f"/ImageFile:{wim}", f"/Index:{index}", f"/MountDir:{mount_dir}"],
        dry_run=dry_run,
    )


def add_package(mount_dir: str | Path, package: str | Path, *, dry_run: bool = False) -> None:
    run_cmd(
        ["dism", f"/Image:{mount_dir}", "/Add-Package", f"/PackagePath:{package}"],
        dry_run=dry_run,
    )


def unmount_image(mount_dir: str | Path, *, commit: bool, dry_run: bool = False) -> None:
    run_cmd(
        ["dism", "/Unmount-Image", f"/MountDir:{mount_dir}", "/Commit" if commit else "/Discard"],
        dry_run=dry_run,
    )


def split_image(wim: str | Path, swm: str | Path, *, size_mib: int, dry_run: bool = False) -> None:
    run_cmd(
        ["dism", "/Split-Image", f"/ImageFile:{wim}", f"/SWMFile:{swm}", f"/FileSize:{size_mib}"],
        dry_run=dry_run,
    )


def extract_msi(msi: str | Path, target_dir: str | Path, *, dry_run: bool = False) -> None:
    """Administrative install: unpack an MSI's payload without installing it."""

    Path(target_dir).mkdir(parents=True, exist_ok=True)
    run_cmd(
        ["msiexec", "/a", str(Path(msi).resolve()), "/qn", f"TARGETDIR={Path(target_dir).resolve()}"],
        dry_run=dry_run,
    )
