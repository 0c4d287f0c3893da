"""Label Forge Routes (premium)

- POST /api/labels/generate - extract label fields for a validated VIN
- POST /api/labels/save - store a finished label in document history
"""

from fastapi import APIRouter, HTTPException, Depends
import logging

from middleware import require_premium
from models import LabelForgeRequest, SaveLabelRequest, User, VinLabelData
from services.label_forge_service import label_forge_service
from services.llm_flows import GenerationError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/labels", tags=["labels"])

LABEL_PREMIUM_DETAIL = "This is a premium feature. Please upgrade your plan to generate VIN labels."


@router.post("/generate", response_model=VinLabelData)
async def generate_label(
    data: LabelForgeRequest,
    user: User = Depends(require_premium(LABEL_PREMIUM_DETAIL)),
):
    try:
        return await label_forge_service.create_label(data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except GenerationError as e:
        raise HTTPException(status_code=502, detail=str(e))
    except Exception as e:
        logger.error(f"Label generation failed for user {user.user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to generate label")


@router.post("/save")
async def save_label(
    data: SaveLabelRequest,
    user: User = Depends(require_premium(LABEL_PREMIUM_DETAIL)),
):
    try:
        document_id = await label_forge_service.save_label(user.user_id, data)
        return {"success": True, "document_id": document_id}
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Saving label failed for user {user.user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to save label")
