"""VIN Routes

- POST /api/vin/decode - AI decode (authenticated)
- POST /api/vin/validate - check digit and model year (public)
"""

from dataclasses import asdict
from fastapi import APIRouter, HTTPException, Depends
import logging

from middleware import require_auth
from models import DecodeVinRequest, DecodeVinResponse, User, ValidateVinRequest
from services.llm_flows import GenerationError
from services.vin_decoder_service import vin_decoder_service
from utils.vin import VIN_LENGTH, decode_model_year, normalize_vin, split_vin, validate_vin

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/vin", tags=["vin"])


@router.post("/decode", response_model=DecodeVinResponse)
async def decode_vin(data: DecodeVinRequest, user: User = Depends(require_auth)):
    try:
        return await vin_decoder_service.decode(data.vin)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except GenerationError as e:
        raise HTTPException(status_code=502, detail=str(e))
    except Exception as e:
        logger.error(f"VIN decode failed for user {user.user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to decode VIN")


@router.post("/validate")
async def validate(data: ValidateVinRequest):
    vin = normalize_vin(data.vin)
    return {
        "vin": vin,
        "is_valid": validate_vin(vin),
        "model_year": decode_model_year(vin),
        "sections": asdict(split_vin(vin)) if len(vin) == VIN_LENGTH else None,
    }
