from __future__ import annotations

from typing import Any

import structlog
from fastapi import Request
from starlette.datastructures import UploadFile

from app.core.errors import ValidationError
from app.core.result import Err, Result
from app.core.storage import FileStorage

logger = structlog.get_logger()


async def read_payload(
    request: Request,
    *,
    file_field: str | None = None,
    folder: str = "misc",
) -> dict[str, Any]:
    """Read a JSON or multipart/urlencoded body into a plain dict.

    An uploaded file under ``file_field`` is stored and replaced by its URI;
    any other uploaded file is ignored. Stored URIs are remembered on the
    request so ``settle_uploads`` can remove them if the operation fails.
    """
    content_type = request.headers.get("content-type", "")

    if content_type.startswith("application/json"):
        try:
            body = await request.json()
        except ValueError:
            raise ValidationError("Malformed JSON body")
        if not isinstance(body, dict):
            raise ValidationError("Request body must be an object")
        return body

    storage: FileStorage = request.app.state.storage
    form = await request.form()
    data: dict[str, Any] = {}
    stored: list[str] = []
    for key, value in form.multi_items():
        if isinstance(value, UploadFile):
            if key == file_field and value.filename:
                data[key] = await storage.save(value, folder)
                stored.append(data[key])
            continue
        data[key] = value

    request.state.stored_uploads = stored
    return data


async def settle_uploads(request: Request, result: Result) -> Result:
    """Drop the files stored for this request when the operation did not succeed."""
    if isinstance(result, Err):
        storage: FileStorage = request.app.state.storage
        for uri in getattr(request.state, "stored_uploads", ()):
            await storage.delete(uri)
            logger.info("upload_discarded", uri=uri, path=request.url.path)
        request.state.stored_uploads = []
    return result
