"""Smart Docs Routes - NVIS and Bill of Sale generation (premium)."""

from fastapi import APIRouter, HTTPException, Depends
import logging

from middleware import require_premium
from models import GenerateDocumentationResponse, SMART_DOCS_OPTIONS, SmartDocsRequest, User
from services.llm_flows import GenerationError
from services.smart_docs_service import smart_docs_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/smart-docs", tags=["smart-docs"])

SMART_DOCS_PREMIUM_DETAIL = "Smart Docs is a premium feature. Please upgrade your plan to generate documents."


@router.get("/options")
async def get_options():
    return {"document_types": SMART_DOCS_OPTIONS}


@router.post("/generate", response_model=GenerateDocumentationResponse)
async def generate_documentation(
    data: SmartDocsRequest,
    user: User = Depends(require_premium(SMART_DOCS_PREMIUM_DETAIL)),
):
    try:
        return await smart_docs_service.generate_documentation(user.user_id, data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except GenerationError as e:
        raise HTTPException(status_code=502, detail=str(e))
    except Exception as e:
        logger.error(f"Smart Docs generation failed for user {user.user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to generate document")
