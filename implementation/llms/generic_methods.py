import logging
from typing import Optional

from openai import AsyncOpenAI, OpenAIError

from implementation.classes.enums import DecodingParams
from implementation.classes.errors import ConfigurationError, UpstreamError
from implementation.prompts.system_prompts import JSON_ONLY_SYSTEM_PROMPT

logger = logging.getLogger(__name__)

DEFAULT_OPENAI_MODEL = "gpt-4o-mini"
EMPTY_COMPLETION_FALLBACK = "{}"


# ===============================
#           Clients
# ===============================

def create_openai_client(api_key: Optional[str]) -> AsyncOpenAI:
    """
    Build the process-wide async OpenAI client.

    SDK-level retries are disabled: a failed completion surfaces to the caller
    immediately.
    """
    if not api_key:
        raise ConfigurationError("OPENAI_API_KEY missing")
    return AsyncOpenAI(api_key=api_key, max_retries=0)


# ===============================
#     Base Generation Methods
# ===============================

async def complete(
    prompt: str,
    params: DecodingParams,
    *,
    client: AsyncOpenAI,
    model: str = DEFAULT_OPENAI_MODEL,
    system_prompt: str = JSON_ONLY_SYSTEM_PROMPT,
) -> str:
    """
    Run one single-turn chat completion and return the raw text.

    An empty or missing completion returns "{}" so JSON extraction always
    receives parseable input.

    Raises:
        UpstreamError: if the provider call fails or times out.
    """
    try:
        response = await client.chat.completions.create(
            model=model,
            temperature=params.temperature,
            max_tokens=params.max_tokens,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": prompt},
            ],
        )
    except OpenAIError as e:
        raise UpstreamError(f"OpenAI failed to generate response: {e}") from e

    content = None
    if response.choices:
        content = response.choices[0].message.content

    text = (content or "").strip()
    if not text:
        logger.warning("OpenAI returned an empty completion (model=%s); using %r", model, EMPTY_COMPLETION_FALLBACK)
        return EMPTY_COMPLETION_FALLBACK
    return text
