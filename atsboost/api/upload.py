import logging
from typing import Any

from fastapi import APIRouter, Depends, File, Form, UploadFile, status

from atsboost.api.deps import get_current_user, get_optional_user
from atsboost.config.settings import settings
from atsboost.libs.database import get_database
from atsboost.libs.document_parser import get_document_parser
from atsboost.libs.exceptions import FileUploadException, NotFoundException
from atsboost.schemas import CVSummary, User

logger = logging.getLogger(__name__)

router = APIRouter(tags=["cvs"])


@router.post("/upload", status_code=status.HTTP_201_CREATED)
def upload_cv(
    file: UploadFile | None = File(None),
    title: str | None = Form(None),
    description: str | None = Form(None),
    target_position: str | None = Form(None),
    target_industry: str | None = Form(None),
    job_description: str | None = Form(None),
    user: User | None = Depends(get_optional_user),
) -> dict[str, Any]:
    """Upload a CV file (PDF, DOCX or text); guests may upload without signing in."""
    if file is None or not file.filename:
        raise FileUploadException("No file uploaded")

    parser = get_document_parser()
    file_type = parser.detect_file_type(file.filename, file.content_type)
    content = file.file.read()
    if not content:
        raise FileUploadException("Uploaded file is empty")
    if len(content) > settings.max_upload_size:
        limit_mb = settings.max_upload_size // (1024 * 1024)
        raise FileUploadException(f"File too large. Maximum size is {limit_mb}MB.")

    text = parser.parse(content, file_type)
    cv = get_database().create_cv(
        file_name=file.filename,
        file_type=file.content_type or file_type,
        file_size=len(content),
        content=text,
        user_id=user.id if user else None,
        title=title,
        description=description,
        target_position=target_position,
        target_industry=target_industry,
        job_description=job_description,
    )
    logger.info("CV %s uploaded (%s, %s bytes, guest=%s)", cv.id, file_type, len(content), cv.is_guest)
    return {
        "success": True,
        "message": "CV uploaded successfully",
        "cv": CVSummary.from_cv(cv).model_dump(mode="json"),
    }


@router.get("/latest-cv")
def latest_cv(user: User = Depends(get_current_user)) -> CVSummary:
    cv = get_database().get_latest_cv_by_user(user.id)
    if cv is None:
        raise NotFoundException("No CV found for this user", error="CV not found")
    return CVSummary.from_cv(cv)


@router.get("/cvs")
def list_cvs(user: User = Depends(get_current_user)) -> list[CVSummary]:
    return [CVSummary.from_cv(cv) for cv in get_database().get_cvs_by_user(user.id)]
