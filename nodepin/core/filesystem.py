"""
Local file system access for project configuration files.

Reads run in a worker thread so the event loop stays free while the disk is
busy.
"""

import asyncio
import logging
from pathlib import Path
from typing import Optional

from .interfaces import FileReader

logger = logging.getLogger(__name__)


class LocalFileReader(FileReader):
    """FileReader for the local disk, decoding files as UTF-8."""

    async def read_file(self, path: Path) -> Optional[str]:
        return await asyncio.to_thread(_read_text, path)

    def file_exists(self, path: Path) -> bool:
        return path.exists()


def _read_text(path: Path) -> Optional[str]:
    try:
        # utf-8-sig drops a leading BOM
        return path.read_text(encoding="utf-8-sig")
    except FileNotFoundError:
        logger.debug(f"File not found: {path}")
        return None


__all__ = ["LocalFileReader"]
