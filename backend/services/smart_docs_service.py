"""
Smart Docs - NVIS certificates and Bills of Sale.

The prompt receives a baseline vehicle specification for the VIN and the
user's free-text details (which take precedence). The structured data the
model returns must match the requested document's field set exactly;
anything else is rejected rather than shown to the user.
"""

import json
import logging

from pydantic import ValidationError

from models import (
    BillOfSaleData,
    DocumentType,
    GenerateDocumentationOutput,
    GenerateDocumentationResponse,
    NvisData,
    SmartDocsRequest,
    VehicleInfo,
)
from services.document_store import document_store
from services.llm_flows import GenerationError, run_flow
from services.prompt_registry import (
    GENERATE_DOCUMENT_PROMPT,
    formatting_rules_for,
    structured_fields_for,
)
from utils.vin import decode_model_year, normalize_vin

logger = logging.getLogger(__name__)

DEFAULT_TONE = "Formal"

_STRUCTURED_MODELS = {
    DocumentType.NVIS: NvisData,
    DocumentType.BILL_OF_SALE: BillOfSaleData,
}


def get_vehicle_info_by_vin(vin: str) -> VehicleInfo:
    """Baseline specifications for a VIN. Only the year is VIN-derived."""
    logger.info(f"Looking up VIN specifications for: {vin}")
    return VehicleInfo(
        make="NorthStar Trailers",
        model="Gooseneck Pro",
        year=decode_model_year(vin),
        body_type="Gooseneck Trailer",
        gvwr="15000 LBS",
        number_of_axles="2",
        tire_size="ST235/85R16G",
    )


def validate_structured_data(document_type: DocumentType, structured_data: dict) -> dict:
    """Strictly validate the model's structured data for the document type."""
    model = _STRUCTURED_MODELS[document_type]
    try:
        return model.model_validate(structured_data).model_dump(exclude_none=True)
    except ValidationError as e:
        logger.error(f"Structured data for {document_type.value} failed validation: {e}")
        raise GenerationError(
            f"AI returned structured data that does not match the {document_type.value} format."
        ) from e


class SmartDocsService:

    async def generate_documentation(
        self,
        user_id: str,
        request: SmartDocsRequest,
    ) -> GenerateDocumentationResponse:
        vin = normalize_vin(request.vin)
        document_type = request.document_type
        vehicle_info = get_vehicle_info_by_vin(vin)

        output = await run_flow(
            GENERATE_DOCUMENT_PROMPT,
            GenerateDocumentationOutput,
            error_message="AI failed to generate documentation.",
            document_type=document_type.value,
            vin=vin,
            tone=request.tone or DEFAULT_TONE,
            vehicle_info=json.dumps(vehicle_info.model_dump(), indent=2),
            trailer_specs=request.trailer_specs,
            structured_fields=json.dumps(structured_fields_for(document_type), indent=2),
            formatting_rules=formatting_rules_for(document_type),
        )

        if not output.document_text.strip() or not output.structured_data:
            raise GenerationError("AI failed to generate documentation.")

        structured_data = validate_structured_data(document_type, output.structured_data)

        document_id = await document_store.add_generated_document(
            user_id=user_id,
            document_type=document_type.value,
            vin=vin,
            content=output.document_text,
        )

        return GenerateDocumentationResponse(
            structured_data=structured_data,
            document_text=output.document_text,
            document_id=document_id,
        )


smart_docs_service = SmartDocsService()
