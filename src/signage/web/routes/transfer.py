"""Backup and restore routes (whole database or a single slideshow)."""

import logging
import re
import time
from datetime import date
from typing import Any

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from ...core.errors import ValidationError
from ...schemas import APIResponse, ImageListOut, ImportAllRequest, ListImportRequest, ListImportResponse
from ...store import transfer
from ..auth import require_admin
from ..deps import get_session

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["transfer"], dependencies=[Depends(require_admin)])


def slugify(name: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "_", name.lower()).strip("_")
    return slug or "slideshow"


def _attachment(model: BaseModel, filename: str) -> JSONResponse:
    return JSONResponse(
        content=model.model_dump(mode="json", by_alias=True),
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/export/all")
def export_all(session: Session = Depends(get_session)) -> JSONResponse:
    filename = f"digital_signage_backup_{int(time.time() * 1000)}.json"
    return _attachment(transfer.export_all(session), filename)


@router.post("/import/all")
def import_all(
    payload: Any = Body(...),
    session: Session = Depends(get_session),
) -> APIResponse:
    """Replace all data with a backup file."""
    try:
        request = ImportAllRequest.model_validate(payload)
    except PydanticValidationError as e:
        logger.warning("Rejected import: %s", e.errors()[:3])
        raise ValidationError("Invalid JSON structure.") from e

    counts = transfer.import_all(session, request)
    return APIResponse(success=True, message=transfer.import_summary(counts), data=counts)


@router.get("/export/list/{list_id}")
def export_list(list_id: str, session: Session = Depends(get_session)) -> JSONResponse:
    export = transfer.export_list(session, list_id)
    filename = f"slideshow_{slugify(export.name)}_{date.today().isoformat()}.json"
    return _attachment(export, filename)


@router.post("/import/list/{list_id}")
def import_list(
    list_id: str,
    payload: Any = Body(...),
    session: Session = Depends(get_session),
) -> ListImportResponse:
    """Overwrite one slideshow from an exported file, matching images by URL."""
    try:
        request = ListImportRequest.model_validate(payload)
    except PydanticValidationError as e:
        raise ValidationError("Invalid JSON structure.") from e

    image_list = transfer.import_list(session, list_id, request)
    return ListImportResponse(
        msg=f"Slideshow '{image_list.name}' imported successfully.",
        image_list=ImageListOut.model_validate(image_list),
    )
