"""Admin API routes: login and CRUD over images, image lists and the global config.

Everything except ``/login`` requires a bearer token.
"""

import logging

from fastapi import APIRouter, Depends, File, Request, UploadFile, status
from sqlalchemy.orm import Session

from ...core.config import Config
from ...core.errors import AuthenticationError, ValidationError
from ...schemas import (
    AdminDataResponse,
    APIResponse,
    GlobalConfigOut,
    GlobalConfigUpdate,
    ImageCreate,
    ImageListCreate,
    ImageListOut,
    ImageListUpdate,
    ImageOut,
    ImageUpdate,
    LoginRequest,
    TokenResponse,
    UploadResponse,
)
from ...store import global_config, image_lists, images, uploads
from ..auth import RateLimiter, check_password, create_token, require_admin
from ..deps import client_ip, get_app_config, get_login_limiter, get_session

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["admin"])
protected = APIRouter(dependencies=[Depends(require_admin)])


@router.post("/login")
def login(
    request: Request,
    body: LoginRequest,
    config: Config = Depends(get_app_config),
    limiter: RateLimiter = Depends(get_login_limiter),
) -> TokenResponse:
    """Exchange the admin password for a token."""
    ip = client_ip(request)
    limiter.check(ip)

    expected = config.auth.admin_password.get_secret_value()
    if not expected:
        raise ValidationError("Admin password not configured")

    if not check_password(body.password.get_secret_value(), expected):
        logger.warning("Failed login attempt from %s", ip)
        raise AuthenticationError("Invalid password")

    logger.info("Admin logged in from %s", ip)
    token = create_token(config.auth.jwt_secret.get_secret_value(), config.auth.token_lifetime)
    return TokenResponse(token=token)


@protected.get("/data")
def admin_data(session: Session = Depends(get_session)) -> AdminDataResponse:
    """Everything the admin UI shows."""
    config = global_config.get_global_config(session)
    return AdminDataResponse(
        global_config=GlobalConfigOut.model_validate(config) if config else None,
        image_lists=[ImageListOut.model_validate(lst) for lst in image_lists.list_image_lists(session)],
        images=[ImageOut.model_validate(image) for image in images.list_images(session)],
    )


@protected.put("/global-config")
def update_global_config(
    body: GlobalConfigUpdate,
    session: Session = Depends(get_session),
) -> GlobalConfigOut:
    config = global_config.update_global_config(session, body.changes())
    return GlobalConfigOut.model_validate(config)


# =============================================================================
# Images
# =============================================================================


@protected.post("/images", status_code=status.HTTP_201_CREATED)
def create_image(body: ImageCreate, session: Session = Depends(get_session)) -> ImageOut:
    image = images.create_image(session, body.url, body.credit, body.duration, body.order)
    return ImageOut.model_validate(image)


@protected.post("/images/upload", status_code=status.HTTP_201_CREATED)
def upload_image(
    imageFile: UploadFile | None = File(None),  # noqa: N803 - multipart field name
    config: Config = Depends(get_app_config),
) -> UploadResponse:
    """Store an uploaded file; the client then creates an image with the returned URL."""
    if imageFile is None or not imageFile.filename:
        raise ValidationError("No file uploaded.")

    url = uploads.save_upload(imageFile.file, imageFile.filename, config.storage.upload_dir)
    return UploadResponse(url=url)


@protected.put("/images/{image_id}")
def update_image(
    image_id: str,
    body: ImageUpdate,
    session: Session = Depends(get_session),
) -> ImageOut:
    changes = body.model_dump(include=body.model_fields_set)
    return ImageOut.model_validate(images.update_image(session, image_id, changes))


@protected.delete("/images/{image_id}")
def delete_image(
    image_id: str,
    session: Session = Depends(get_session),
    config: Config = Depends(get_app_config),
) -> APIResponse:
    """Delete an image everywhere, including its uploaded file."""
    image = images.delete_image(session, image_id)
    uploads.remove_upload(image.url, config.storage.upload_dir)
    return APIResponse(success=True, message="Image deleted successfully.")


# =============================================================================
# Image lists
# =============================================================================


@protected.post("/image-lists", status_code=status.HTTP_201_CREATED)
def create_image_list(body: ImageListCreate, session: Session = Depends(get_session)) -> ImageListOut:
    return ImageListOut.model_validate(image_lists.create_image_list(session, body.name))


@protected.put("/image-lists/{list_id}")
def update_image_list(
    list_id: str,
    body: ImageListUpdate,
    session: Session = Depends(get_session),
) -> ImageListOut:
    """Replace the list's image sequence (and optionally its default duration)."""
    if "default_duration" in body.model_fields_set:
        image_list = image_lists.replace_images(session, list_id, body.images, body.default_duration)
    else:
        image_list = image_lists.replace_images(session, list_id, body.images)
    return ImageListOut.model_validate(image_list)


@protected.delete("/image-lists/{list_id}")
def delete_image_list(list_id: str, session: Session = Depends(get_session)) -> APIResponse:
    image_lists.delete_image_list(session, list_id)
    return APIResponse(success=True, message="Image list deleted successfully.")


router.include_router(protected)
