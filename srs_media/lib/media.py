from __future__ import annotations

import logging
import string
from dataclasses import dataclass

from .command import run_cmd

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MediaPlan:
    disk_number: int
    drive_letter: str
    label: str = "SRSV2"
    legacy_boot: bool = False


def diskpart_script(plan: MediaPlan) -> str:
    """Build the diskpart script that wipes the disk into one FAT32 volume.

    Legacy BIOS firmware boots from an active MBR partition; UEFI firmware
    finds the bootloader on any FAT32 volume, so the partition style follows
    the requested boot mode.
    """

    letter = plan.drive_letter.rstrip(":").upper()
    if len(letter) != 1 or letter not in string.ascii_uppercase:
        raise ValueError(f"Invalid drive letter: {plan.drive_letter!r}")

    lines = [
        f"select disk {int(plan.disk_number)}",
        "clean",
        "convert mbr" if plan.legacy_boot else "convert gpt",
        "create partition primary",
        f"format fs=fat32 quick label={plan.label}",
    ]
    if plan.legacy_boot:
        lines.append("active")
    lines += [f"assign letter={letter}", "exit"]
    return "\n".join(lines) + "\n"


def format_media(plan: MediaPlan, *, dry_run: bool = False) -> str:
    """Partition and format the target disk; returns the media root (e.g. 'E:\\')."""

    logger.info(
        "Formatting disk %d as %s: (legacy_boot=%s)", plan.disk_number, plan.drive_letter, plan.legacy_boot
    )
    run_cmd(["diskpart"], input_text=diskpart_script(plan), dry_run=dry_run)
    return f"{plan.drive_letter.rstrip(':').upper()}:\\"


def free_drive_letter(used: set[str]) -> str:
    for letter in reversed(string.ascii_uppercase[3:]):
        if letter not in {u.upper() for u in used}:
            return letter
    raise RuntimeError("No free drive letter available for the media")
