from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

DEFAULT_CONFIG_PATH = "srs_media.yaml"


@dataclass(frozen=True)
class MediaConfig:
    raw: Dict[str, Any]

    def _section(self, name: str) -> Dict[str, Any]:
        return self.raw.get(name) or {}

    def with_overrides(self, **overrides: Any) -> "MediaConfig":
        """Return a copy with top-level keys replaced by non-None overrides."""
        raw = dict(self.raw)
        raw.update({k: v for k, v in overrides.items() if v is not None})
        return MediaConfig(raw=raw)

    @property
    def cache_dir(self) -> str:
        return str(self._section("paths").get("cache_dir") or "cache")

    @property
    def work_dir(self) -> str:
        return str(self._section("paths").get("work_dir") or "work")

    @property
    def kit_url(self) -> str:
        url = self._section("kit").get("url")
        if not url:
            raise ValueError("kit.url (or kit.dir) is required")
        return str(url)

    @property
    def kit_dir(self) -> Optional[str]:
        """A pre-extracted kit; when set the kit is not downloaded."""
        return self._section("kit").get("dir") or None

    @property
    def kit_metadata(self) -> str:
        return str(self._section("kit").get("metadata") or "Metadata/SrsKit.json")

    @property
    def kit_media_dir(self) -> str:
        return str(self._section("kit").get("media_dir") or "Media")

    @property
    def self_update_url(self) -> Optional[str]:
        return self._section("self_update").get("url") or None

    @property
    def min_free_gib(self) -> int:
        return int(self._section("checks").get("min_free_gib") or 20)

    @property
    def copy_command(self) -> str:
        return str(self._section("tools").get("copy") or "robocopy")

    @property
    def timeout_s(self) -> float:
        return float(self._section("network").get("timeout_s") or 60)

    @property
    def image_index(self) -> int:
        return int(self._section("image").get("index") or 1)

    @property
    def split_threshold_mib(self) -> int:
        # FAT32 cannot hold files of 4 GiB or more.
        return int(self._section("image").get("split_threshold_mib") or 4000)

    @property
    def media_label(self) -> str:
        return str(self._section("media").get("label") or "SRSV2")

    # Per-run options, normally supplied on the command line.

    @property
    def os_major(self) -> Optional[str]:
        v = self.raw.get("os_major")
        return str(v) if v is not None else None

    @property
    def iso_path(self) -> Optional[str]:
        return self.raw.get("iso_path") or None

    @property
    def disk_number(self) -> Optional[int]:
        v = self.raw.get("disk_number")
        return int(v) if v is not None else None

    @property
    def product_key(self) -> Optional[str]:
        return self.raw.get("product_key") or None

    @property
    def language(self) -> Optional[str]:
        return self.raw.get("language") or None

    @property
    def legacy_boot(self) -> bool:
        return bool(self.raw.get("legacy_boot", False))

    @property
    def shutdown(self) -> bool:
        return bool(self.raw.get("shutdown", True))

    @property
    def skip_updates(self) -> bool:
        return bool(self.raw.get("skip_updates", False))

    @property
    def keep_work(self) -> bool:
        return bool(self.raw.get("keep_work", False))

    @property
    def dry_run(self) -> bool:
        return bool(self.raw.get("dry_run", False))


def load_media_config(path: str, *, required: bool = False) -> MediaConfig:
    p = Path(path)
    if not p.exists():
        if required:
            raise FileNotFoundError(path)
        return MediaConfig(raw={})

    if p.suffix.lower() not in {".yaml", ".yml"}:
        raise ValueError("media config must be YAML")

    try:
        import yaml  # type: ignore
    except Exception as e:
        raise RuntimeError("PyYAML is required to read the media config") from e

    raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    if not isinstance(raw, dict):
        raise ValueError("media config must contain a mapping/object")

    return MediaConfig(raw=raw)
