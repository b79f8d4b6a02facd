"""JSON file storage for ledger documents."""

import logging
import os
from pathlib import Path

import pydantic

from .exceptions import PersistenceError
from .models import LedgerDocument

logger = logging.getLogger(__name__)


class LedgerStore:
    """Reads and writes a ledger document as a JSON file."""

    def __init__(self, path: Path):
        """Initialize the store for a file path."""
        self.path = path

    def exists(self) -> bool:
        """Check whether a ledger file has been written."""
        return self.path.exists()

    def load(self) -> LedgerDocument:
        """
        Load the ledger document.

        Returns:
            The parsed document

        Raises:
            PersistenceError: If the file cannot be read or is malformed
            UnknownStrategyError: If an expense carries an unknown strategy tag
        """
        try:
            raw = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise PersistenceError(
                str(self.path), f"Failed to open file for reading: {self.path} ({e})"
            ) from e

        try:
            document = LedgerDocument.model_validate_json(raw)
        except pydantic.ValidationError as e:
            raise PersistenceError(
                str(self.path), f"Invalid ledger file {self.path}:\n{e}"
            ) from e

        logger.debug(f"Loaded ledger document from {self.path}")
        return document

    def save(self, document: LedgerDocument) -> None:
        """
        Write the ledger document, replacing any previous file.

        The document is written to a temporary sibling first so an
        interrupted save never leaves a truncated ledger behind.

        Raises:
            PersistenceError: If the file cannot be written
        """
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(document.model_dump_json(indent=2), encoding="utf-8")
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise PersistenceError(
                str(self.path), f"Failed to open file for writing: {self.path} ({e})"
            ) from e

        logger.debug(f"Saved ledger document to {self.path}")
