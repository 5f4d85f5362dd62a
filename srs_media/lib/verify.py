from __future__ import annotations

import hashlib
import logging
from pathlib import Path
from typing import Callable, Optional

from .command import run_cmd

logger = logging.getLogger(__name__)

VALID_STATUS = "Valid"
HASH_BLOCK_SIZE = 4 * 1024 * 1024

SignatureCheck = Callable[[Path], str]


class IntegrityError(RuntimeError):
    pass


def authenticode_status(path: Path) -> str:
    """Return the host's Authenticode verdict for ``path`` (e.g. 'Valid')."""

    r = run_cmd(
        [
            "powershell",
            "-NoProfile",
            "-NonInteractive",
            "-Command",
            "(Get-AuthenticodeSignature -LiteralPath $env:SRS_VERIFY_PATH).Status.ToString()",
        ],
        env={"SRS_VERIFY_PATH": str(path)},
    )
    return (r.stdout or "").strip()


def verify_signature(path: str | Path, *, status_fn: Optional[SignatureCheck] = None) -> None:
    """Require a valid publisher signature on a downloaded file.

    Anything other than a valid signature deletes the file before raising so
    untrusted content never stays in the cache.
    """

    p = Path(path)
    check = status_fn or authenticode_status
    status = check(p)
    if status != VALID_STATUS:
        logger.error("Signature check failed for %s (status=%s); deleting it", p, status)
        p.unlink(missing_ok=True)
        raise IntegrityError(f"Signature of {p} is not valid (status={status})")
    logger.info("Signature valid: %s", p.name)


def sha256_file(path: str | Path) -> str:
    h = hashlib.sha256()
    with Path(path).open("rb") as f:
        for block in iter(lambda: f.read(HASH_BLOCK_SIZE), b""):
            h.update(block)
    return h.hexdigest()


def matches_identity(
    path: str | Path,
    *,
    expected_size: int,
    expected_sha256: str,
    source_hint: str = "",
) -> bool:
    """Check a user-supplied file against its published size and hash.

    The file belongs to the operator, so a mismatch is reported and False is
    returned; the file is never deleted.
    """

    p = Path(path)
    if not p.is_file():
        logger.error("%s does not exist or is not a file", p)
        return False

    size = p.stat().st_size
    if size != expected_size:
        logger.error("%s is %d bytes, expected %d", p, size, expected_size)
        _hint(source_hint)
        return False

    logger.info("Hashing %s", p)
    digest = sha256_file(p)
    if digest.lower() != expected_sha256.lower():
        logger.error("%s has SHA-256 %s, expected %s", p, digest, expected_sha256)
        _hint(source_hint)
        return False

    logger.info("%s matches the expected media", p.name)
    return True


def _hint(source_hint: str) -> None:
    if source_hint:
        logger.error("Obtain the exact media from: %s", source_hint)
