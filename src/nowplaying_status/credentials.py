"""File-backed credential store with an in-memory mirror."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

from pydantic import ValidationError

from nowplaying_status.models.auth import Credential

logger = logging.getLogger(__name__)


class CredentialStore:
    """Holds one OAuth credential, persisted as JSON at ``path``.

    The file is read once on construction; afterwards ``get()`` serves the
    in-memory copy and ``save()`` writes through to disk.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._credential: Credential | None = self.load()

    @property
    def path(self) -> Path:
        return self._path

    # ── persistence ───────────────────────────────────────────────────

    def load(self) -> Credential | None:
        """Read the credential file. Missing or unparseable files yield None."""
        if not self._path.exists():
            logger.debug("No credential file at %s", self._path)
            return None
        try:
            return Credential.model_validate_json(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError, ValidationError) as e:
            logger.warning("Ignoring unreadable credential file %s: %s", self._path, e)
            return None

    def save(self, credential: Credential) -> None:
        """Atomically replace the credential file, then update the mirror.

        Raises:
            OSError: The file could not be written; the previous file is untouched.
        """
        payload = credential.model_dump_json(indent=2)
        self._path.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self._path.name}.", suffix=".tmp", dir=self._path.parent
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp_name, self._path)
        except OSError:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise

        self._credential = credential

    # ── in-memory access ──────────────────────────────────────────────

    def get(self) -> Credential | None:
        """Return the current credential without touching the disk."""
        return self._credential

    def remember(self, credential: Credential) -> None:
        """Update the in-memory credential only."""
        self._credential = credential
