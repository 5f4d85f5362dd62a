from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import requests

from .config import MediaConfig
from .kit import KitMetadata, OsConfig
from .lib.download import fetch_asset
from .lib.prompt import Prompter
from .lib.sync import TreeSync
from .lib.verify import SignatureCheck, verify_signature

logger = logging.getLogger(__name__)


@dataclass
class MediaCtx:
    """State shared by the steps of one media build."""

    cfg: MediaConfig
    prompter: Prompter
    session: requests.Session
    tree_sync: TreeSync
    signature_check: Optional[SignatureCheck] = None

    current_step: Optional[str] = None
    kit: Optional[KitMetadata] = None
    kit_dir: Optional[Path] = None
    variables: Dict[str, Any] = field(default_factory=dict)
    artifacts: List[Path] = field(default_factory=list)
    os_config: Optional[OsConfig] = None
    legacy_boot: bool = False
    packages: List[Path] = field(default_factory=list)
    iso_path: Optional[Path] = None
    iso_root: Optional[str] = None
    media_root: Optional[str] = None

    @property
    def dry_run(self) -> bool:
        return self.cfg.dry_run

    @property
    def cache_dir(self) -> Path:
        return Path(self.cfg.cache_dir)

    @property
    def work_dir(self) -> Path:
        return Path(self.cfg.work_dir)

    @property
    def staging_dir(self) -> Path:
        return self.work_dir / "staging"

    @property
    def mount_dir(self) -> Path:
        return self.work_dir / "mount"

    def require(self, name: str) -> Any:
        value = getattr(self, name)
        if value is None:
            raise RuntimeError(f"{name} is not available; step {self.current_step} ran out of order")
        return value

    def fetch_verified(self, url: str, label: str, *, output_name: Optional[str] = None) -> Path:
        """Download into the cache and require a valid publisher signature.

        The signature is checked on cache hits too, so a file cached by a dry
        run is still verified before a real run uses it.
        """

        path = fetch_asset(
            url,
            label,
            cache_dir=self.cache_dir,
            output_name=output_name,
            session=self.session,
            timeout_s=self.cfg.timeout_s,
        )
        if self.dry_run and self.signature_check is None:
            logger.info("Would verify signature of %s", path)
            return path
        verify_signature(path, status_fn=self.signature_check)
        return path
