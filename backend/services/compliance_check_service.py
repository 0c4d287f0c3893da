"""Compliance Check - AI review of document content against regulations."""

import logging

from models import CheckComplianceOutput, ComplianceCheckRequest
from services.llm_flows import GenerationError, run_flow
from services.prompt_registry import COMPLIANCE_CHECK_PROMPT

logger = logging.getLogger(__name__)


class ComplianceCheckService:

    async def check(self, request: ComplianceCheckRequest) -> CheckComplianceOutput:
        output = await run_flow(
            COMPLIANCE_CHECK_PROMPT,
            CheckComplianceOutput,
            error_message="AI failed to generate a compliance report.",
            **request.model_dump(),
        )
        if not output.compliance_status.strip() or not output.compliance_report.strip():
            raise GenerationError("AI failed to generate a compliance report.")

        logger.info(
            f"Compliance check for {request.document_type} ({request.country_of_operation}): "
            f"{output.compliance_status}"
        )
        return output


compliance_check_service = ComplianceCheckService()
