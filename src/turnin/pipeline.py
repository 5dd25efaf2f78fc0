from __future__ import annotations

import logging
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, Protocol

from fastapi.concurrency import run_in_threadpool

from .envelope import unwrap
from .normalizer import CanonicalRecord, normalize
from .notifier import Attachment, Notification, compose_notification, resolve_recipient
from .renderer import DocumentRenderer
from .settings import Settings
from .storage import ArtifactStore, public_url

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    def send(self, notification: Notification) -> None: ...


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


@dataclass(frozen=True)
class HandleResult:
    artifact_url: str
    file_name: str
    status: str = "success"
    notified: bool = False


class WebhookHandler:
    """Turns one webhook delivery into a stored (and optionally emailed) PDF."""

    def __init__(
        self,
        settings: Settings,
        *,
        store: ArtifactStore,
        renderer: DocumentRenderer,
        notifier: Notifier | None = None,
        clock_ms: Callable[[], int] = _now_ms,
    ) -> None:
        self.settings = settings
        self.store = store
        self.renderer = renderer
        self.notifier = notifier
        self._clock_ms = clock_ms

    def _name_segment(self, record: CanonicalRecord) -> str:
        if not record.is_resolved("Homeowner Name"):
            return ""
        return str(record.get("Homeowner Name"))

    async def handle(self, payload: Mapping[str, Any] | None) -> HandleResult:
        submission = unwrap(payload, strict=self.settings.strict_envelope)
        record = normalize(submission.fields)
        logger.info(
            "Processing submission for: %s",
            record.get("Homeowner Name") or "Unknown",
            extra={"envelope": submission.kind.value},
        )

        pdf = await self.renderer.render(record)
        file_name = await run_in_threadpool(
            self.store.save,
            pdf,
            name=self._name_segment(record),
            timestamp_ms=self._clock_ms(),
        )
        url = public_url(self.settings.base_url, self.settings.content_path, file_name)
        logger.info("PDF generated and saved at: %s", url, extra={"artifact": file_name})

        notified = await self._notify(record, url, file_name, pdf)
        return HandleResult(artifact_url=url, file_name=file_name, notified=notified)

    async def _notify(
        self, record: CanonicalRecord, url: str, file_name: str, pdf: bytes
    ) -> bool:
        if not self.settings.enable_email or self.notifier is None:
            return False
        recipient = resolve_recipient(record, self.settings.notification_email)
        if not recipient:
            logger.info("Email enabled but no recipient resolved; skipping notification")
            return False
        notification = compose_notification(
            record,
            recipient=recipient,
            pdf_url=url,
            attachment=Attachment(file_name=file_name, content=pdf),
        )
        try:
            await run_in_threadpool(self.notifier.send, notification)
        except Exception as exc:  # noqa: BLE001
            logger.error("Email notification failed: %s", exc, extra={"artifact": file_name})
            return False
        logger.info("Email notification sent", extra={"recipient": recipient})
        return True
