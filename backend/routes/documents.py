"""Document History Routes

Endpoints:
- GET /api/documents - List the user's documents (newest first)
- GET /api/documents/analytics - Per-day counts for the last 30 days
- GET /api/documents/{document_id} - Get one document
- DELETE /api/documents/{document_id} - Delete one document
- GET /api/documents/{document_id}/download - Download as txt, pdf or docx
"""

from fastapi import APIRouter, HTTPException, Depends, Query
from fastapi.responses import Response
from typing import List
import logging

from middleware import require_auth
from models import (
    DeleteResult,
    DocumentAnalyticsDay,
    ExportFormat,
    GeneratedDocument,
    User,
)
from services.document_export import export_document
from services.document_store import document_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/documents", tags=["documents"])


@router.get("", response_model=List[GeneratedDocument])
async def list_documents(user: User = Depends(require_auth)):
    try:
        return await document_store.list_documents_for_user(user.user_id)
    except Exception as e:
        logger.error(f"Failed to list documents for {user.user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to load documents")


@router.get("/analytics", response_model=List[DocumentAnalyticsDay])
async def get_analytics(user: User = Depends(require_auth)):
    try:
        return await document_store.get_user_analytics(user.user_id)
    except Exception as e:
        logger.error(f"Failed to build analytics for {user.user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to load analytics")


async def _owned_document(user: User, document_id: str) -> GeneratedDocument:
    try:
        return await document_store.get_document(user.user_id, document_id)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))


@router.get("/{document_id}", response_model=GeneratedDocument)
async def get_document(document_id: str, user: User = Depends(require_auth)):
    return await _owned_document(user, document_id)


@router.delete("/{document_id}", response_model=DeleteResult)
async def delete_document(document_id: str, user: User = Depends(require_auth)):
    try:
        return await document_store.delete_document(user.user_id, document_id)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to delete document {document_id}: {e}")
        raise HTTPException(status_code=500, detail="Could not delete the document.")


@router.get("/{document_id}/download")
async def download_document(
    document_id: str,
    format: ExportFormat = Query(ExportFormat.TXT),
    user: User = Depends(require_auth),
):
    """Download a document. Formats: txt (default), pdf, docx."""
    document = await _owned_document(user, document_id)
    try:
        body, content_type, filename = export_document(document, format)
    except Exception as e:
        logger.error(f"Export of {document_id} as {format.value} failed: {e}")
        raise HTTPException(status_code=500, detail="Failed to export document")

    return Response(
        content=body,
        media_type=content_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
