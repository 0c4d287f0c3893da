"""
Prompt Registry - authoritative prompts for every AI flow.

Each flow (VIN decode, Smart Docs, Label Forge, Compliance Check) has one
PromptDefinition. User templates are rendered with str.format; anything
that varies by document type or label template is selected in code and
passed in as a pre-rendered block.
"""
from typing import Dict, Any, List
from dataclasses import dataclass, field
import logging

from models import DocumentType, LabelTemplate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PromptDefinition:
    """Definition of a generation prompt."""
    prompt_id: str
    name: str
    system_prompt: str
    user_prompt_template: str
    output_schema: Dict[str, Any]
    temperature: float = 0.2
    required_fields: List[str] = field(default_factory=list)

    def render(self, **values: Any) -> str:
        missing = [f for f in self.required_fields if values.get(f) in (None, "")]
        if missing:
            raise ValueError(f"Missing prompt inputs for {self.prompt_id}: {', '.join(missing)}")
        return self.user_prompt_template.format(**values)


# ============================================================================
# VIN DECODER
# ============================================================================

_VIN_PART_SCHEMA = {
    "value": "string - the substring of the VIN for this part",
    "description": "string - brief explanation of what this part represents",
}

DECODE_VIN_PROMPT = PromptDefinition(
    prompt_id="DECODE_VIN",
    name="Trailer VIN Decoder",
    system_prompt="""You are an expert VIN (Vehicle Identification Number) decoder for trailers.
Your task is to decode the provided 17-digit VIN based on the structural rules you are given.
Do not invent or hallucinate information. Your analysis must be based solely on positional information.""",
    user_prompt_template="""VIN to decode: {vin}

Here is the VIN structure:
- Digits 1-3 (WMI - World Manufacturer Identifier): Identifies the manufacturer.
- Digits 4-8 (Vehicle Descriptors):
  - Digit 4: Trailer Type.
  - Digit 5: Body Type.
  - Digits 6-7: Body Length.
  - Digit 8: Number of Axles.
- Digit 9 (Check Digit): A calculated digit for validation. Your description should state that it's a calculated value.
- Digit 10 (Model Year): Represents the model year.
- Digit 11 (Plant): The manufacturing plant code.
- Digits 12-17 (Sequential Production Number):
  - For manufacturers producing > 999 units/year, digits 12-17 are a 6-digit sequential number.
  - For manufacturers producing <= 999 units/year, digits 12-14 are a WMI extension, and digits 15-17 are a 3-digit sequential number (001-999). Briefly mention this rule in the sequential_number description.

Break down the VIN '{vin}' into the specified parts. For each part, provide the corresponding substring as 'value' and an explanation as 'description'.
For 'vehicle_descriptors', also provide the decoded trailer_type, body_type, body_length and number_of_axles.
The full_vin output field must be the original VIN '{vin}'.
""",
    output_schema={
        "wmi": _VIN_PART_SCHEMA,
        "vehicle_descriptors": {
            **_VIN_PART_SCHEMA,
            "trailer_type": "string - decoded from digit 4",
            "body_type": "string - decoded from digit 5",
            "body_length": "string - decoded from digits 6-7",
            "number_of_axles": "string - decoded from digit 8",
        },
        "check_digit": _VIN_PART_SCHEMA,
        "model_year": _VIN_PART_SCHEMA,
        "plant": _VIN_PART_SCHEMA,
        "sequential_number": _VIN_PART_SCHEMA,
        "full_vin": "string - the full VIN that was decoded",
    },
    required_fields=["vin"],
)


# ============================================================================
# SMART DOCS (NVIS / BILL OF SALE)
# ============================================================================

NVIS_FIELDS = {
    "manufacturer_name": "[Manufacturer Name]",
    "manufacturer_address": "[Manufacturer Address]",
    "make": "[Make]",
    "model": "[Model]",
    "year": "[YYYY]",
    "body_type": "[Body Type]",
    "gvwr": "[GVWR Value]",
    "gawr": "[GAWR Value]",
    "number_of_axles": "[Number of Axles]",
    "tire_size": "[Tire Size]",
    "rim_size": "[Rim Size]",
    "dimensions": "[Overall Dimensions LWH]",
    "date_of_manufacture": "[MM/YYYY]",
}

BILL_OF_SALE_FIELDS = {
    "seller_name": "[Seller Name]",
    "seller_address": "[Seller Address]",
    "buyer_name": "[Buyer Name]",
    "buyer_address": "[Buyer Address]",
    "sale_date": "[Date of Sale]",
    "sale_price": "[Sale Price]",
    "make": "[Make]",
    "model": "[Model]",
    "year": "[YYYY]",
    "body_type": "[Body Type]",
    "color": "optional",
}

NVIS_FORMATTING = """NVIS Certificate Formatting:
- Title: NEW VEHICLE INFORMATION STATEMENT (NVIS)
- Sections: MANUFACTURER, VEHICLE DETAILS, SPECIFICATIONS, CERTIFICATION, SIGNATURES.
- Key fields to include: Manufacturer Name/Address, VIN, Make, Model, Year, Body Type, GVWR, GAWR, Axles, Tire/Rim Size, Date of Manufacture, Dimensions.
- Include a standard certification statement about conforming to applicable U.S. and Canadian safety standards.
- Include signature lines for Seller/Dealer and Purchaser."""

BILL_OF_SALE_FORMATTING = """Bill of Sale Formatting:
- Title: BILL OF SALE
- Sections: SELLER INFORMATION, BUYER INFORMATION, VEHICLE/TRAILER INFORMATION, SALE INFORMATION, TERMS & CONDITIONS, SIGNATURES.
- Key fields to include: Seller/Buyer Name/Address, VIN, Make, Model, Year, Body Type, Color (if available), Sale Date, Sale Price.
- Include a standard 'as-is' condition clause.
- Include an optional Odometer Reading field with a placeholder.
- Include signature lines for Seller, Buyer, and a Witness."""


def structured_fields_for(document_type: DocumentType) -> Dict[str, str]:
    if document_type == DocumentType.NVIS:
        return NVIS_FIELDS
    return BILL_OF_SALE_FIELDS


def formatting_rules_for(document_type: DocumentType) -> str:
    if document_type == DocumentType.NVIS:
        return NVIS_FORMATTING
    return BILL_OF_SALE_FORMATTING


GENERATE_DOCUMENT_PROMPT = PromptDefinition(
    prompt_id="GENERATE_DOCUMENT",
    name="Smart Docs Generator",
    system_prompt="""You are an AI agent specializing in vehicle documentation. Your goal is to generate a complete and accurate document (either NVIS or Bill of Sale), even if some information sources are unavailable.

Your process:
1. Use the Vehicle Lookup data as base specifications for the VIN, when it is provided.
2. Analyze the user's Provided Details. They contain supplemental information (e.g. buyer/seller info) and may contain vehicle specifications that OVERRIDE the lookup data. If no lookup data is available, the details are your only source.
3. Populate ALL fields of the structured_data object. If any information is still missing, use the bracketed placeholder given for that field. Do not omit any required field.
4. Using the synthesized data, write the final, professionally formatted document in 'document_text' in the requested tone.""",
    user_prompt_template="""User Inputs:
- Document Type Requested: {document_type}
- VIN: {vin}
- Document Tone: {tone}
- Vehicle Lookup:
{vehicle_info}
- Provided Details:
\"\"\"
{trailer_specs}
\"\"\"

structured_data fields (placeholder to use when missing):
{structured_fields}

{formatting_rules}
""",
    output_schema={
        "structured_data": "object - the fields listed above, with placeholders for missing information",
        "document_text": "string - the final formatted document text",
    },
    required_fields=["document_type", "vin", "trailer_specs"],
)


# ============================================================================
# LABEL FORGE
# ============================================================================

STANDARD_LABEL_INSTRUCTIONS = """Template Style: Standard US
Extract data for the following keys: "MANUFACTURER", "DATE OF MANUF.", "GVWR", "GAWR", "TIRE", "RIM", "PSI", "VIN", "TYPE", and "COMPLIANCE_STATEMENT". For the compliance statement, use the provided regulatory standard or a default US/FMVSS statement."""

BILINGUAL_LABEL_INSTRUCTIONS = """Template Style: Bilingual Canadian (English/French)
Extract data for the following keys: "MANUFACTURED BY / FABRIQUE PAR", "DATE", "GVWR / PNBV", "GAWR (EACH AXLE) / PNBE (CHAQUE ESSIEU)", "TIRES / PNEU", "RIMS / JANTE", "COLD INFL. PRESS. / PRESS. DE GONFL. A FROID", "SINGLE_OR_DUAL", "V.I.N. / N.I.V.", "TYPE / TYPE", and "COMPLIANCE_STATEMENT".
- For "GVWR / PNBV" and "GAWR (EACH AXLE) / PNBE (CHAQUE ESSIEU)", extract ONLY the numeric value in kilograms (e.g. "7000").
- For "COLD INFL. PRESS. / PRESS. DE GONFL. A FROID", extract ONLY the numeric value in KPA (e.g. "690").
- For "SINGLE_OR_DUAL", analyze the tire specifications and return only "single" or "dual".
- For the compliance statement, use the provided standard or a default US/Canadian statement."""

# RV labels share the bilingual field set
LABEL_TEMPLATE_INSTRUCTIONS = {
    LabelTemplate.STANDARD: STANDARD_LABEL_INSTRUCTIONS,
    LabelTemplate.BILINGUAL_CANADIAN: BILINGUAL_LABEL_INSTRUCTIONS,
    LabelTemplate.BILINGUAL_RV_CANADIAN: BILINGUAL_LABEL_INSTRUCTIONS,
}

VIN_LABEL_PROMPT = PromptDefinition(
    prompt_id="VIN_LABEL_DESIGN",
    name="VIN Label Data Extraction",
    system_prompt="""You are an expert system for designing compliant VIN (Vehicle Identification Number) labels.
The VIN provided has already been validated and is correct. Your task is to extract structured data for the label from the user's input.
- The keys of label_data MUST be the official field names for the chosen template.
- If any required information is not available, use the placeholder '[PLACEHOLDER]'.
- Do not invent or hallucinate information.
- The VIN field must always be populated with the provided VIN.
In 'placement_rationale', explain your extraction choices: what you found and which placeholders you used.""",
    user_prompt_template="""Template Selected: {template}

User Inputs:
- VIN: {vin_data}
- Trailer Specifications: {trailer_specs}
- Regulatory Standards (if any): {regulatory_standards}
- Label Dimensions: {label_dimensions}

{template_instructions}
""",
    output_schema={
        "label_data": "object - label field name -> extracted string value",
        "placement_rationale": "string - rationale for the extraction choices",
    },
    required_fields=["template", "vin_data", "trailer_specs"],
)


# ============================================================================
# COMPLIANCE CHECK
# ============================================================================

COMPLIANCE_CHECK_PROMPT = PromptDefinition(
    prompt_id="COMPLIANCE_CHECK",
    name="Document Compliance Check",
    system_prompt="""You are an AI compliance expert specializing in transportation and vehicle regulations.
Analyze the provided document content against the specified regulations for the given country of operation.
Be precise and refer to general regulatory principles if specific clauses are not known.
If the document content is insufficient for a full check, state that in the report.""",
    user_prompt_template="""Document Type: {document_type}
Country of Operation: {country_of_operation}
Target Regulations: {target_regulations}

Document Content to Analyze:
```
{document_content}
```

Provide:
1. A 'compliance_status' (e.g. "Compliant", "Potential Issues Found", "Non-Compliant").
2. A detailed 'compliance_report' that includes:
   - An overall assessment summary.
   - Any identified compliance issues or areas of concern, each with why it matters for {target_regulations}.
   - Specific recommendations for addressing each issue.
   - If compliant, the key compliant aspects.
""",
    output_schema={
        "compliance_status": "string - concise status",
        "compliance_report": "string - detailed findings, issues and recommendations",
    },
    required_fields=["document_type", "document_content", "target_regulations", "country_of_operation"],
)


PROMPT_REGISTRY: Dict[str, PromptDefinition] = {
    p.prompt_id: p
    for p in (DECODE_VIN_PROMPT, GENERATE_DOCUMENT_PROMPT, VIN_LABEL_PROMPT, COMPLIANCE_CHECK_PROMPT)
}


def get_prompt(prompt_id: str) -> PromptDefinition:
    prompt = PROMPT_REGISTRY.get(prompt_id)
    if prompt is None:
        raise KeyError(f"Unknown prompt: {prompt_id}")
    return prompt
