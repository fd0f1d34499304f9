"""Channels used to move exported progress between devices."""
import asyncio
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Union

from envocab.exceptions import TransferError

logger = logging.getLogger(__name__)


class TransferChannel(ABC):
    """One-shot text transfer, the equivalent of a clipboard."""

    @abstractmethod
    async def read_text(self) -> str:
        """Read the transferred text.

        Raises:
            TransferError: if the channel cannot be read.
        """

    @abstractmethod
    async def write_text(self, text: str) -> None:
        """Write text for transfer.

        Raises:
            TransferError: if the channel cannot be written.
        """


class FileTransfer(TransferChannel):
    """Transfer channel backed by a single file."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    async def read_text(self) -> str:
        try:
            return await asyncio.to_thread(self.path.read_text, encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise TransferError(f"Cannot read {self.path}: {e}") from e

    async def write_text(self, text: str) -> None:
        try:
            await asyncio.to_thread(self._write, text)
        except OSError as e:
            raise TransferError(f"Cannot write {self.path}: {e}") from e
        logger.info(f"Wrote {len(text)} characters to {self.path}")

    def _write(self, text: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(text, encoding="utf-8")
