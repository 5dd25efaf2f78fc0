from __future__ import annotations

import errno
import logging
import os
import re
import tempfile
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

from . import DOCUMENT_PREFIX
from .errors import PersistError

logger = logging.getLogger(__name__)

FALLBACK_NAME = "TurnIn"
ARTIFACT_SUFFIX = ".pdf"
PARTIAL_SUFFIX = ".part"

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9]")
_ARTIFACT_NAME = re.compile(
    rf"^{re.escape(DOCUMENT_PREFIX)}_(?P<name>[A-Za-z0-9]*)_(?P<ms>\d+)"
    rf"{re.escape(ARTIFACT_SUFFIX)}$"
)
_NO_LINK_ERRNOS = frozenset({errno.EPERM, errno.ENOTSUP, errno.EOPNOTSUPP})


def _links_unsupported(exc: OSError) -> bool:
    return isinstance(exc, PermissionError) or exc.errno in _NO_LINK_ERRNOS


def sanitize_name(value: object) -> str:
    if value is None:
        return ""
    return _UNSAFE_CHARS.sub("", str(value))


def build_file_name(name: object, timestamp_ms: int) -> str:
    segment = sanitize_name(name) or FALLBACK_NAME
    return f"{DOCUMENT_PREFIX}_{segment}_{timestamp_ms}{ARTIFACT_SUFFIX}"


def public_url(base_url: str, content_path: str, file_name: str) -> str:
    return f"{base_url.rstrip('/')}/{content_path.strip('/')}/{file_name}"


@dataclass(frozen=True)
class ArtifactInfo:
    file_name: str
    display_name: str
    generated_at: datetime | None
    size: int

    def as_dict(self) -> dict[str, object]:
        return {
            "fileName": self.file_name,
            "displayName": self.display_name,
            "generatedAt": self.generated_at.isoformat() if self.generated_at else None,
            "size": self.size,
        }


def parse_file_name(file_name: str) -> tuple[str, datetime | None]:
    """Recover the display name and generation time encoded in a file name."""

    match = _ARTIFACT_NAME.match(file_name)
    if not match:
        return file_name, None
    name = match.group("name") or FALLBACK_NAME
    try:
        generated_at = datetime.fromtimestamp(int(match.group("ms")) / 1000, tz=UTC)
    except (OverflowError, OSError, ValueError):
        generated_at = None
    return name, generated_at


class ArtifactStore:
    """Flat-file content store for rendered documents."""

    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory)

    def resolve(self, file_name: str) -> Path | None:
        if not file_name or file_name != Path(file_name).name:
            return None
        if not file_name.endswith(ARTIFACT_SUFFIX):
            return None
        path = self.directory / file_name
        return path if path.is_file() else None

    def save(self, data: bytes, *, name: object, timestamp_ms: int) -> str:
        """Persist ``data`` under a fresh file name and return that name.

        The payload is fully written and fsynced under a temporary name before
        it is linked into place, so a reader (or the retention sweep) never
        sees a partial document. An existing name is never overwritten; the
        timestamp moves forward one millisecond until a free name is found.
        On filesystems without hard links the document is written directly
        into an exclusively created file instead.
        """

        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.directory, prefix=".", suffix=PARTIAL_SUFFIX
            )
        except OSError as exc:
            raise PersistError(f"Could not create file in {self.directory}: {exc}") from exc

        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(data)
                handle.flush()
                os.fsync(handle.fileno())
            try:
                return self._link_into_place(tmp_path, name, timestamp_ms)
            except OSError as exc:
                if not _links_unsupported(exc):
                    raise
                logger.warning(
                    "Hard links unavailable in %s (%s); writing in place", self.directory, exc
                )
            return self._create_exclusive(data, name, timestamp_ms)
        except OSError as exc:
            raise PersistError(f"Could not write document: {exc}") from exc
        finally:
            try:
                tmp_path.unlink()
            except FileNotFoundError:
                pass

    def _link_into_place(self, tmp_path: Path, name: object, timestamp_ms: int) -> str:
        ms = timestamp_ms
        while True:
            file_name = build_file_name(name, ms)
            try:
                os.link(tmp_path, self.directory / file_name)
            except FileExistsError:
                ms += 1
                continue
            return file_name

    def _create_exclusive(self, data: bytes, name: object, timestamp_ms: int) -> str:
        ms = timestamp_ms
        while True:
            file_name = build_file_name(name, ms)
            path = self.directory / file_name
            try:
                fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o644)
            except FileExistsError:
                ms += 1
                continue
            try:
                with os.fdopen(fd, "wb") as handle:
                    handle.write(data)
                    handle.flush()
                    os.fsync(handle.fileno())
            except OSError:
                path.unlink(missing_ok=True)
                raise
            return file_name

    def list_artifacts(self) -> list[ArtifactInfo]:
        artifacts: list[ArtifactInfo] = []
        if not self.directory.is_dir():
            return artifacts
        for path in self.directory.glob(f"*{ARTIFACT_SUFFIX}"):
            try:
                size = path.stat().st_size
            except FileNotFoundError:
                continue
            display_name, generated_at = parse_file_name(path.name)
            artifacts.append(
                ArtifactInfo(
                    file_name=path.name,
                    display_name=display_name,
                    generated_at=generated_at,
                    size=size,
                )
            )
        artifacts.sort(
            key=lambda item: (item.generated_at is not None, item.generated_at, item.file_name),
            reverse=True,
        )
        return artifacts
