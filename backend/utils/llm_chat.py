"""
Platform-agnostic LLM chat using Google Generative AI (Gemini).
Uses LLM_API_KEY from environment (Gemini API key from Google AI Studio).
"""
import asyncio
import json
import logging
import os
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

DEFAULT_MODEL = os.environ.get("LLM_MODEL", "gemini-2.0-flash")

DEFAULT_SAFETY_SETTINGS: List[Dict[str, str]] = [
    {"category": "HARM_CATEGORY_HATE_SPEECH", "threshold": "BLOCK_ONLY_HIGH"},
    {"category": "HARM_CATEGORY_DANGEROUS_CONTENT", "threshold": "BLOCK_MEDIUM_AND_ABOVE"},
    {"category": "HARM_CATEGORY_HARASSMENT", "threshold": "BLOCK_ONLY_HIGH"},
    {"category": "HARM_CATEGORY_SEXUALLY_EXPLICIT", "threshold": "BLOCK_ONLY_HIGH"},
]


def _get_api_key() -> Optional[str]:
    return os.environ.get("LLM_API_KEY")


def _sync_chat(
    system_prompt: str,
    user_text: str,
    model: str = DEFAULT_MODEL,
    json_output: bool = False,
    temperature: Optional[float] = None,
) -> str:
    """Synchronous chat completion using Google Generative AI."""
    import google.generativeai as genai
    api_key = _get_api_key()
    if not api_key:
        raise ValueError("LLM_API_KEY not found in environment")
    genai.configure(api_key=api_key)
    model_name = model if model and "gemini" in model else DEFAULT_MODEL

    generation_config: Dict[str, Any] = {}
    if json_output:
        generation_config["response_mime_type"] = "application/json"
    if temperature is not None:
        generation_config["temperature"] = temperature

    gemini = genai.GenerativeModel(
        model_name,
        system_instruction=system_prompt,
        safety_settings=DEFAULT_SAFETY_SETTINGS,
        generation_config=generation_config or None,
    )
    response = gemini.generate_content(user_text)
    if not response or not response.text:
        raise ValueError("Empty response from LLM")
    return response.text


def parse_json_response(response_text: str) -> Dict[str, Any]:
    """Parse a model response as a JSON object, tolerating ```json fences."""
    text = (response_text or "").strip()
    if text.startswith("```json"):
        text = text[7:]
    if text.startswith("```"):
        text = text[3:]
    if text.endswith("```"):
        text = text[:-3]
    text = text.strip()

    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse LLM response as JSON: {e}")
        logger.error(f"Response text: {text[:500]}...")
        raise ValueError("LLM output not valid JSON") from e

    if not isinstance(parsed, dict):
        raise ValueError("LLM output not valid JSON")
    return parsed


async def chat_json(
    system_prompt: str,
    user_text: str,
    model: str = DEFAULT_MODEL,
    temperature: Optional[float] = None,
) -> Dict[str, Any]:
    """Async chat completion that must return a JSON object."""
    loop = asyncio.get_running_loop()
    response_text = await loop.run_in_executor(
        None,
        lambda: _sync_chat(system_prompt, user_text, model, json_output=True, temperature=temperature),
    )
    return parse_json_response(response_text)
