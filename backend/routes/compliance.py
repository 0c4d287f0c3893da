"""Compliance Check Routes."""

from fastapi import APIRouter, HTTPException, Depends
import logging

from middleware import require_auth
from models import (
    CheckComplianceOutput,
    COMPLIANCE_CHECK_DOC_TYPES,
    ComplianceCheckRequest,
    User,
)
from services.compliance_check_service import compliance_check_service
from services.llm_flows import GenerationError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/compliance", tags=["compliance"])


@router.get("/document-types")
async def get_document_types():
    return {"document_types": COMPLIANCE_CHECK_DOC_TYPES}


@router.post("/check", response_model=CheckComplianceOutput)
async def check_compliance(
    data: ComplianceCheckRequest,
    user: User = Depends(require_auth),
):
    try:
        return await compliance_check_service.check(data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except GenerationError as e:
        raise HTTPException(status_code=502, detail=str(e))
    except Exception as e:
        logger.error(f"Compliance check failed for user {user.user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to run compliance check")
