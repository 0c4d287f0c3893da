"""
AI flow plumbing: JSON parsing of model output, prompt rendering and the
mapping of unusable output to GenerationError.
"""
from unittest.mock import AsyncMock, patch

import pytest

from models import CheckComplianceOutput, ComplianceCheckRequest, DecodeVinOutput
from services.compliance_check_service import compliance_check_service
from services.llm_flows import GenerationError, build_system_prompt, run_flow, run_prompt
from services.prompt_registry import COMPLIANCE_CHECK_PROMPT, DECODE_VIN_PROMPT, get_prompt
from utils.llm_chat import parse_json_response


class TestParseJsonResponse:

    def test_plain_json(self):
        assert parse_json_response('{"a": 1}') == {"a": 1}

    def test_fenced_json(self):
        assert parse_json_response('```json\n{"a": 1}\n```') == {"a": 1}

    def test_not_json(self):
        with pytest.raises(ValueError, match="LLM output not valid JSON"):
            parse_json_response("Sure! Here is your document.")

    def test_json_array_is_rejected(self):
        with pytest.raises(ValueError):
            parse_json_response("[1, 2]")


class TestPrompts:

    def test_system_prompt_carries_output_schema(self):
        system_prompt = build_system_prompt(DECODE_VIN_PROMPT)
        assert "OUTPUT FORMAT" in system_prompt
        assert '"vehicle_descriptors"' in system_prompt

    def test_render_requires_inputs(self):
        with pytest.raises(ValueError, match="vin"):
            DECODE_VIN_PROMPT.render(vin="")

    def test_unknown_prompt(self):
        with pytest.raises(KeyError):
            get_prompt("NOPE")


@pytest.mark.asyncio
async def test_empty_model_output_is_generation_error():
    with patch("utils.llm_chat.chat_json", new_callable=AsyncMock, return_value={}):
        with pytest.raises(GenerationError):
            await run_prompt(DECODE_VIN_PROMPT, vin="1M8GDM9AXKP042788")


@pytest.mark.asyncio
async def test_schema_mismatch_is_generation_error():
    with patch("utils.llm_chat.chat_json", new_callable=AsyncMock, return_value={"full_vin": "X"}):
        with pytest.raises(GenerationError, match="AI failed to decode VIN."):
            await run_flow(DECODE_VIN_PROMPT, DecodeVinOutput, error_message="AI failed to decode VIN.", vin="1M8GDM9AXKP042788")


@pytest.mark.asyncio
async def test_compliance_check_round_trip():
    request = ComplianceCheckRequest(
        document_type="VIN Label",
        document_content="MANUFACTURER: NorthStar Trailers\nGVWR: 7000 KG",
        target_regulations="CMVSS 115",
        country_of_operation="Canada",
    )
    output = {"compliance_status": "Potential Issues Found", "compliance_report": "Missing French text."}
    with patch("utils.llm_chat.chat_json", new_callable=AsyncMock, return_value=output) as chat_json:
        result = await compliance_check_service.check(request)

    assert result == CheckComplianceOutput(**output)
    assert chat_json.call_args.kwargs["temperature"] == COMPLIANCE_CHECK_PROMPT.temperature
    assert "CMVSS 115" in chat_json.call_args.args[1]


@pytest.mark.asyncio
async def test_compliance_check_blank_report_is_generation_error():
    request = ComplianceCheckRequest(
        document_type="Bill of Sale",
        document_content="Seller: Acme. Buyer: Jane.",
        target_regulations="FMVSS",
        country_of_operation="USA",
    )
    output = {"compliance_status": "Compliant", "compliance_report": ""}
    with patch("utils.llm_chat.chat_json", new_callable=AsyncMock, return_value=output):
        with pytest.raises(GenerationError):
            await compliance_check_service.check(request)


def test_compliance_route_requires_content(client, make_user):
    _, headers = make_user()
    response = client.post(
        "/api/compliance/check",
        json={"document_type": "NVIS", "document_content": "short", "target_regulations": "FMVSS", "country_of_operation": "USA"},
        headers=headers,
    )
    assert response.status_code == 422
