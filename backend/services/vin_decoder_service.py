"""VIN Decoder - AI breakdown of a trailer VIN plus deterministic checks."""

import logging

from models import DecodeVinOutput, DecodeVinResponse
from services.llm_flows import run_flow
from services.prompt_registry import DECODE_VIN_PROMPT
from utils.vin import decode_model_year, normalize_vin, validate_vin

logger = logging.getLogger(__name__)


class VinDecoderService:

    async def decode(self, vin: str) -> DecodeVinResponse:
        vin = normalize_vin(vin)
        if len(vin) != 17:
            raise ValueError("VIN must be exactly 17 characters long.")

        output = await run_flow(
            DECODE_VIN_PROMPT,
            DecodeVinOutput,
            error_message="AI failed to decode VIN.",
            vin=vin,
        )

        is_valid = validate_vin(vin)
        if not is_valid:
            logger.info(f"Decoded VIN {vin} has an invalid check digit")

        return DecodeVinResponse(
            **output.model_dump(),
            is_check_digit_valid=is_valid,
            decoded_model_year=decode_model_year(vin),
        )


vin_decoder_service = VinDecoderService()
