import logging
from typing import Any, Dict, List, Optional

import httpx

from tastebox.app.core.config import get_settings
from tastebox.app.core.errors import LLMError

logger = logging.getLogger(__name__)


def build_messages(system_prompt: str, user_prompt: str) -> List[Dict[str, str]]:
    return [
        {"role": "system", "content": system_prompt},
        {"role": "user", "content": user_prompt},
    ]


def _extract_content(data: Any) -> Optional[str]:
    """Pull the assistant text out of an OpenAI-style chat completion body."""
    if not isinstance(data, dict):
        return None
    choices = data.get("choices")
    if choices and isinstance(choices, list):
        choice = choices[0]
        if isinstance(choice, dict):
            message = choice.get("message") or {}
            content = message.get("content")
            if isinstance(content, str):
                return content
    return None


async def chat_completion(
    system_prompt: str,
    user_prompt: str,
    *,
    temperature: float = 0.2,
    max_tokens: int = 2000,
    json_mode: bool = True,
) -> str:
    """Send one system+user exchange to the chat-completions endpoint.

    Returns the raw assistant text, unparsed. Any transport failure, provider
    error or empty completion raises ``LLMError``.
    """
    settings = get_settings()
    if not settings.llm_api_key:
        raise LLMError("OPENAI_API_KEY is not configured")

    payload: Dict[str, Any] = {
        "model": settings.llm_model_name,
        "temperature": temperature,
        "max_tokens": max_tokens,
        "messages": build_messages(system_prompt, user_prompt),
    }
    if json_mode:
        payload["response_format"] = {"type": "json_object"}

    headers = {
        "Content-Type": "application/json",
        "Authorization": f"Bearer {settings.llm_api_key}",
    }
    timeout = httpx.Timeout(settings.llm_timeout_seconds, connect=10.0)
    url = f"{settings.llm_base_url.rstrip('/')}/chat/completions"

    try:
        async with httpx.AsyncClient(timeout=timeout) as client:
            response = await client.post(url, json=payload, headers=headers)
        response.raise_for_status()
        data = response.json()
    except httpx.TimeoutException as exc:
        raise LLMError("Timed out waiting for the language model") from exc
    except httpx.HTTPStatusError as exc:
        logger.error(
            "LLM provider returned status %s: %s",
            exc.response.status_code,
            exc.response.text[:500],
        )
        raise LLMError(f"Language model request failed with status {exc.response.status_code}") from exc
    except httpx.HTTPError as exc:
        raise LLMError(f"Language model request failed: {exc}") from exc
    except ValueError as exc:
        raise LLMError("Language model returned a non-JSON body") from exc

    if isinstance(data, dict) and data.get("error"):
        error_info = data["error"]
        message = error_info.get("message", "Unknown error") if isinstance(error_info, dict) else str(error_info)
        logger.error("LLM provider returned error: %s", message[:500])
        raise LLMError(f"Language model error: {message}")

    content = _extract_content(data)
    if not content or not content.strip():
        raise LLMError("No response from the language model")

    logger.debug("LLM raw content (truncated): %s", content[:1000])
    return content

