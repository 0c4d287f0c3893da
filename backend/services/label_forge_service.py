"""
Label Forge - VIN label content extraction.

The VIN check digit is verified locally before the model is consulted; an
invalid VIN never reaches the AI.
"""

import json
import logging
from typing import Any, Dict

from pydantic import BaseModel

from models import (
    HistoryDocumentType,
    LabelForgeRequest,
    SaveLabelRequest,
    VinLabelData,
)
from services.document_store import document_store
from services.llm_flows import GenerationError, run_flow
from services.prompt_registry import LABEL_TEMPLATE_INSTRUCTIONS, VIN_LABEL_PROMPT
from utils.vin import normalize_vin, validate_vin

logger = logging.getLogger(__name__)

INVALID_VIN_MESSAGE = "Invalid VIN. The provided VIN failed validation. Please check the number and try again."
DEFAULT_REGULATORY_STANDARDS = "Default US/Canadian standards"


class _LabelPromptOutput(BaseModel):
    label_data: Dict[str, Any]
    placement_rationale: str


class LabelForgeService:

    async def create_label(self, request: LabelForgeRequest) -> VinLabelData:
        vin = normalize_vin(request.vin_data)
        if not validate_vin(vin):
            logger.info(f"Label request rejected, invalid VIN {vin}")
            raise ValueError(INVALID_VIN_MESSAGE)

        output = await run_flow(
            VIN_LABEL_PROMPT,
            _LabelPromptOutput,
            error_message="AI failed to generate label data.",
            template=request.template.value,
            vin_data=vin,
            trailer_specs=request.trailer_specs,
            regulatory_standards=request.regulatory_standards or DEFAULT_REGULATORY_STANDARDS,
            label_dimensions=request.label_dimensions,
            template_instructions=LABEL_TEMPLATE_INSTRUCTIONS[request.template],
        )

        if not output.label_data:
            raise GenerationError("AI failed to generate label data.")

        return VinLabelData(
            is_vin_valid=True,
            label_data={key: str(value) for key, value in output.label_data.items()},
            placement_rationale=output.placement_rationale,
        )

    async def save_label(self, user_id: str, request: SaveLabelRequest) -> str:
        """Store a finished label in the user's history."""
        if not request.label_data:
            raise ValueError("Label data is required.")

        return await document_store.add_generated_document(
            user_id=user_id,
            document_type=HistoryDocumentType.VIN_LABEL.value,
            vin=normalize_vin(request.vin),
            content=json.dumps(request.label_data, indent=2),
            image_data_uri=request.image_data_uri,
        )


label_forge_service = LabelForgeService()
