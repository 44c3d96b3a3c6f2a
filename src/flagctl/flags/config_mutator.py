from __future__ import annotations

import logging
import os
import re
import tempfile
from pathlib import Path

from flagctl.models.outcome import MutationStatus
from flagctl.models.request import Operation

logger = logging.getLogger(__name__)

DEFAULT_HEADER = "# Feature flags for this environment"


def _declares(flag_name: str) -> re.Pattern[str]:
    return re.compile(rf"^{re.escape(flag_name)}\s*:")


def _read(path: Path) -> str:
    with open(path, encoding="utf-8", newline="") as f:
        return f.read()


def _strip_terminator(line: str) -> str:
    return line.rstrip("\r\n")


def _write_atomic(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(content)
        if path.exists():
            os.chmod(tmp_path, path.stat().st_mode & 0o777)
        else:
            os.chmod(tmp_path, 0o644)
        os.replace(tmp_path, path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise


class ConfigMutator:
    """Insert or remove a top-level ``FLAG: true`` line in one values file.

    Steady-state cases (flag already there on add, already gone on remove)
    come back as skip statuses, never as exceptions. Unrelated lines are
    kept byte-for-byte.
    """

    def __init__(self, header_comment: str = DEFAULT_HEADER) -> None:
        self._header = header_comment

    def apply(self, config_file_path: Path, flag_name: str, operation: Operation) -> MutationStatus:
        if operation == Operation.ADD:
            return self.add(config_file_path, flag_name)
        return self.remove(config_file_path, flag_name)

    def add(self, path: Path, flag_name: str) -> MutationStatus:
        content = _read(path) if path.exists() else ""
        pattern = _declares(flag_name)

        if any(pattern.match(line) for line in content.splitlines()):
            logger.info("Skipping %s: %s already present", path, flag_name)
            return MutationStatus.SKIPPED_ALREADY_PRESENT

        line = f"{flag_name}: true"
        if not content.strip():
            _write_atomic(path, f"{self._header}\n{line}\n")
            logger.info("Created %s with %s", path, flag_name)
            return MutationStatus.CREATED

        if content.endswith("\n"):
            _write_atomic(path, f"{content}{line}\n")
        else:
            # Unterminated files stay unterminated.
            _write_atomic(path, f"{content}\n{line}")
        logger.info("Added %s to %s", flag_name, path)
        return MutationStatus.APPLIED

    def remove(self, path: Path, flag_name: str) -> MutationStatus:
        if not path.exists():
            logger.info("Skipping %s: file does not exist", path)
            return MutationStatus.SKIPPED_MISSING_FILE

        content = _read(path)
        pattern = _declares(flag_name)
        lines = content.splitlines(keepends=True)
        kept = [line for line in lines if not pattern.match(line)]
        if len(kept) == len(lines):
            logger.info("Skipping %s: %s not present", path, flag_name)
            return MutationStatus.SKIPPED_NOT_PRESENT

        if kept and pattern.match(lines[-1]) and not lines[-1].endswith(("\n", "\r")):
            kept[-1] = _strip_terminator(kept[-1])
        _write_atomic(path, "".join(kept))
        logger.info("Removed %s from %s", flag_name, path)
        return MutationStatus.APPLIED
