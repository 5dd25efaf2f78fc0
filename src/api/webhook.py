from __future__ import annotations

import json
import logging
from typing import Any

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import FileResponse, JSONResponse

from ..turnin.errors import MalformedEnvelopeError, TurnInError
from ..turnin.pipeline import WebhookHandler
from ..turnin.storage import ArtifactStore, public_url

logger = logging.getLogger(__name__)

router = APIRouter(tags=["turnin"])


def _failure(status_code: int, message: str, error: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message, "error": error},
    )


async def _read_payload(request: Request, *, strict: bool) -> Any:
    content_type = request.headers.get("content-type", "")
    if content_type.startswith(("multipart/form-data", "application/x-www-form-urlencoded")):
        form = await request.form()
        payload: dict[str, Any] = {}
        for key in form.keys():
            values = [v for v in form.getlist(key) if isinstance(v, str)]
            if values:
                payload[key] = values[0] if len(values) == 1 else values
        return payload
    body = await request.body()
    if not body.strip():
        return {}
    try:
        return json.loads(body)
    except ValueError as exc:
        if strict:
            raise MalformedEnvelopeError("Request body is not valid JSON") from exc
        logger.warning("Request body is not valid JSON; treating it as an empty submission")
        return {}


@router.post("/webhook")
async def webhook(request: Request) -> JSONResponse:
    logger.info("Received webhook data")
    handler: WebhookHandler = request.app.state.handler
    try:
        payload = await _read_payload(request, strict=handler.settings.strict_envelope)
        result = await handler.handle(payload)
    except TurnInError as exc:
        logger.error("Error processing webhook: %s", exc)
        return _failure(exc.status_code, exc.public_message, str(exc))
    except Exception as exc:  # noqa: BLE001
        logger.exception("Error processing webhook")
        return _failure(500, "Error generating PDF", str(exc))
    return JSONResponse(
        content={
            "success": True,
            "message": "PDF generated successfully",
            "pdfUrl": result.artifact_url,
            "fileName": result.file_name,
            "notified": result.notified,
        }
    )


def _store(request: Request) -> ArtifactStore:
    return request.app.state.store


@router.get("/files")
async def list_files(request: Request) -> dict[str, object]:
    settings = request.app.state.settings
    files = []
    for info in _store(request).list_artifacts():
        entry = info.as_dict()
        entry["url"] = public_url(settings.base_url, settings.content_path, info.file_name)
        files.append(entry)
    return {"files": files, "count": len(files)}


async def serve_file(request: Request, filename: str) -> FileResponse:
    path = _store(request).resolve(filename)
    if path is None:
        raise HTTPException(status_code=404, detail="File not found")
    return FileResponse(
        path,
        media_type="application/pdf",
        filename=filename,
        content_disposition_type="inline",
    )

