"""SRS installation media creator.

Core design goals:
- Fail fast, recover by re-running
- Cached, atomically written downloads
- Every downloaded payload signature-checked
- Idempotent tree copies onto the media
- Centralized logging
"""

__version__ = "2.4.0"

__all__ = ["__version__"]
