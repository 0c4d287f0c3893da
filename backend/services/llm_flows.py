"""
Shared execution path for the AI flows.

Builds the full system prompt (instructions + JSON output schema), calls the
model through utils.llm_chat and validates the returned object against the
flow's pydantic output model.
"""
from typing import Any, Dict, Optional, Type, TypeVar
import json
import logging

from pydantic import BaseModel, ValidationError

from services.prompt_registry import PromptDefinition
from utils import llm_chat

logger = logging.getLogger(__name__)

OutputModel = TypeVar("OutputModel", bound=BaseModel)


class GenerationError(Exception):
    """The model returned no usable output for a flow."""


def build_system_prompt(prompt_def: PromptDefinition) -> str:
    output_schema_str = json.dumps(prompt_def.output_schema, indent=2)
    return f"""{prompt_def.system_prompt}

OUTPUT FORMAT:
You MUST return your response as valid JSON matching this exact schema:

```json
{output_schema_str}
```

Return ONLY the JSON object, no additional text or markdown formatting.
"""


async def run_prompt(prompt_def: PromptDefinition, **values: Any) -> Dict[str, Any]:
    """Render and execute a prompt, returning the parsed JSON object.

    Raises:
        ValueError: missing prompt inputs.
        GenerationError: the model failed or returned non-JSON / empty output.
    """
    user_prompt = prompt_def.render(**values)

    try:
        output = await llm_chat.chat_json(
            build_system_prompt(prompt_def),
            user_prompt,
            temperature=prompt_def.temperature,
        )
    except ValueError as e:
        logger.error(f"{prompt_def.prompt_id}: {e}")
        raise GenerationError(f"{prompt_def.name} returned no usable output") from e

    if not output:
        logger.error(f"{prompt_def.prompt_id}: empty structured output")
        raise GenerationError(f"{prompt_def.name} returned no usable output")

    return output


async def run_flow(
    prompt_def: PromptDefinition,
    output_model: Type[OutputModel],
    error_message: Optional[str] = None,
    **values: Any,
) -> OutputModel:
    """Execute a prompt and validate its output against `output_model`."""
    output = await run_prompt(prompt_def, **values)
    try:
        return output_model.model_validate(output)
    except ValidationError as e:
        logger.error(f"{prompt_def.prompt_id}: output failed validation: {e}")
        raise GenerationError(error_message or f"{prompt_def.name} returned malformed output") from e
