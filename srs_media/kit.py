from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from .menu import MenuItem, parse_menu_items


class KitError(ValueError):
    pass


@dataclass(frozen=True)
class OsConfig:
    major: str
    version_label: str
    iso_size: int
    iso_sha256: str
    iso_source: str = ""
    answer_file: str = "AutoUnattend.xml"
    required_updates: Dict[str, str] = field(default_factory=dict)
    language_packs: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class KitMetadata:
    raw: Dict[str, Any]

    @property
    def root_menu(self) -> str:
        root = self.raw.get("RootMenu")
        if not root:
            raise KitError("Kit metadata has no RootMenu")
        return str(root)

    @property
    def menu_items(self) -> Dict[str, MenuItem]:
        items = self.raw.get("MenuItems")
        if not isinstance(items, dict):
            raise KitError("Kit metadata MenuItems must be a mapping")
        return parse_menu_items(items)

    @property
    def os_versions(self) -> list[str]:
        return sorted(str(k) for k in (self.raw.get("OsVersions") or {}))

    def os_config(self, major: str) -> OsConfig:
        block = (self.raw.get("OsVersions") or {}).get(str(major))
        if not isinstance(block, dict):
            raise KitError(f"Kit has no configuration for OS version {major!r} (known: {self.os_versions})")

        iso = block.get("Iso") or {}
        try:
            size = int(iso["Size"])
            sha256 = str(iso["Sha256"])
        except (KeyError, TypeError, ValueError) as e:
            raise KitError(f"OS version {major!r} needs Iso.Size and Iso.Sha256") from e

        return OsConfig(
            major=str(major),
            version_label=str(block.get("VersionLabel") or major),
            iso_size=size,
            iso_sha256=sha256,
            iso_source=str(iso.get("Source") or ""),
            answer_file=str(block.get("AnswerFile") or "AutoUnattend.xml"),
            required_updates=dict(block.get("RequiredUpdates") or {}),
            language_packs=dict(block.get("LanguagePacks") or {}),
        )


def _detect_format(path: Path) -> str:
    ext = path.suffix.lower().lstrip(".")
    if ext in {"yaml", "yml"}:
        return "yaml"
    return "json"


def load_kit_metadata(path: str | Path) -> KitMetadata:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(str(p))

    data: Optional[Any]
    if _detect_format(p) == "yaml":
        try:
            import yaml  # type: ignore
        except Exception as e:  # pragma: no cover
            raise RuntimeError("PyYAML is required to read YAML kit metadata") from e
        data = yaml.safe_load(p.read_text(encoding="utf-8"))
    else:
        # Kit metadata is often written with a BOM.
        data = json.loads(p.read_text(encoding="utf-8-sig"))

    if not isinstance(data, dict):
        raise KitError(f"Kit metadata must contain an object: {p}")
    return KitMetadata(raw=data)
