"""
Git change recorder.

Commits a freshly saved mapping file so every publish leaves an auditable
entry. Runs git via subprocess against the repository containing the file.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from tokensync.core.ports.remote import ChangeRecordError

logger = logging.getLogger(__name__)

DEFAULT_COMMIT_MESSAGE = "Update Figma mappings for file {file_key}"


class GitChangeRecorder:
    def __init__(
        self,
        repo_dir: str | Path | None = None,
        message_template: str = DEFAULT_COMMIT_MESSAGE,
    ) -> None:
        self.repo_dir = Path(repo_dir) if repo_dir else None
        self.message_template = message_template

    def _git(self, cwd: Path, *args: str) -> subprocess.CompletedProcess[str]:
        try:
            return subprocess.run(
                ["git", *args],
                cwd=str(cwd),
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as e:
            raise ChangeRecordError(f"git could not be started: {e}") from e

    def record(self, path: Path, file_key: str) -> bool:
        """Stage and commit `path`; False when the file was unchanged."""
        cwd = self.repo_dir or path.parent
        try:
            message = self.message_template.format(file_key=file_key)
        except (KeyError, IndexError, ValueError) as e:
            raise ChangeRecordError(
                f"Invalid commit message template {self.message_template!r}: {e!r}"
            ) from e

        added = self._git(cwd, "add", "--", str(path))
        if added.returncode != 0:
            raise ChangeRecordError(f"git add failed: {added.stderr.strip()}")

        staged = self._git(cwd, "diff", "--cached", "--quiet", "--", str(path))
        if staged.returncode == 0:
            logger.info("Mapping for %s unchanged; nothing to commit", file_key)
            return False

        committed = self._git(cwd, "commit", "-m", message, "--", str(path))
        if committed.returncode != 0:
            raise ChangeRecordError(f"git commit failed: {committed.stderr.strip()}")

        logger.info("Committed mapping for %s", file_key)
        return True
