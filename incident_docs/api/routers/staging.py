"""
Staging API endpoints.

Routes:
- POST /staging/{session_id}/uploads - Stage a file for a form session
- GET /staging/{session_id}/uploads - List a session's pending uploads
- DELETE /staging/uploads/{upload_id} - Discard a pending upload
- POST /staging/{session_id}/finalize - Turn pending uploads into documents

Dependencies: incident_docs.core.document_processing, python-multipart
System role: Staging HTTP API
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile

from incident_docs.api.deps import get_staging_workflow
from incident_docs.core.document_processing import StagingWorkflow
from incident_docs.core.document_processing.models import FinalizeResult, StagedUpload
from incident_docs.core.exceptions import StagingError, StorageError, ValidationError
from incident_docs.models.staging import FinalizeRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/staging", tags=["staging"])


@router.post("/{session_id}/uploads", response_model=StagedUpload, status_code=201)
async def stage_upload(
    session_id: str,
    field_name: str = Form(...),
    file: UploadFile = File(...),
    staging: StagingWorkflow = Depends(get_staging_workflow),
) -> StagedUpload:
    """
    Stage one file under the form session.

    Args:
        session_id: Form session id
        field_name: Form field the file belongs to
        file: Uploaded file
        staging: Injected StagingWorkflow

    Returns:
        StagedUpload: The staged upload, claimable until expires_at

    Raises:
        HTTPException(422): Empty or oversized file
        HTTPException(502): Object storage upload failed
    """
    data = await file.read()
    try:
        return await staging.stage_upload(
            session_id=session_id,
            field_name=field_name,
            data=data,
            content_type=file.content_type or "application/octet-stream",
            file_name=file.filename,
        )
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.message)
    except StorageError as e:
        logger.error(
            "Staged upload failed",
            extra={"session_id": session_id, "field_name": field_name, "error": e.message},
        )
        raise HTTPException(status_code=502, detail="Failed to store upload")


@router.get("/{session_id}/uploads", response_model=list[StagedUpload])
async def list_staged_uploads(
    session_id: str,
    staging: StagingWorkflow = Depends(get_staging_workflow),
) -> list[StagedUpload]:
    """Unclaimed, unexpired uploads of a session."""
    return await staging.list_staged(session_id)


@router.delete("/uploads/{upload_id}", status_code=204)
async def discard_upload(
    upload_id: UUID,
    staging: StagingWorkflow = Depends(get_staging_workflow),
) -> None:
    """
    Raises:
        HTTPException(409): Upload unknown or already claimed
    """
    try:
        await staging.discard(upload_id)
    except StagingError as e:
        raise HTTPException(status_code=409, detail=e.message)


@router.post("/{session_id}/finalize", response_model=FinalizeResult)
async def finalize_session(
    session_id: str,
    request: FinalizeRequest,
    staging: StagingWorkflow = Depends(get_staging_workflow),
) -> FinalizeResult:
    """
    Claim and store every pending upload of a session.

    Failed uploads are released and reported per field; the route itself
    answers 200.
    """
    return await staging.finalize(
        session_id=session_id,
        owner_id=request.owner_id,
        associated_id=request.associated_id,
        category=request.category,
        associated_with=request.associated_with,
    )
