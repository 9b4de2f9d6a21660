"""Generation backend client — drafts prose for ai-generated sections.

The session layer hands over ``{instructions, rendered_prompt}``; this module
posts them to the OpenAI chat completions API and returns plain prose.
  - Model, temperature, timeout, and token limits are read from env.
  - Plain-text output (no JSON mode).
  - 1 retry on failure (HTTP error, timeout, or empty text), then return None.
  - Consistent logging. Prompt text is never printed, only its length.
"""

from __future__ import annotations

import os
import time
from typing import Any, Dict, List, Optional

import httpx

from ..agents.template_engine.timing import async_timer
from ..schemas.template_schema import TemplateCategory

# ---------------------------------------------------------------------------
# Constants: read from environment with safe defaults
# ---------------------------------------------------------------------------
_OPENAI_API_URL = "https://api.openai.com/v1/chat/completions"

CRIMINAL_SYSTEM_PROMPT = (
    "You are an expert legal document drafter for criminal defense matters.\n"
    "Generate professional, persuasive content for court filings.\n"
    "Use formal legal writing style. Cite relevant authorities when appropriate.\n"
    "Be concise but thorough. Focus on facts and applicable law.\n"
    "Do not include any preamble or explanation - return only the requested content."
)

IMMIGRATION_SYSTEM_PROMPT = (
    "You are an expert legal document drafter for immigration defense matters before "
    "EOIR immigration courts.\n"
    "Generate professional content for immigration court filings.\n"
    "Use formal legal writing style consistent with the EOIR Immigration Court Practice Manual.\n"
    'Always use "Respondent" (never "Defendant"), "DHS" (never "Plaintiff"), "A-Number" '
    '(never "Case Number"), "Immigration Judge" (never "the Court"), and '
    '"Notice to Appear / NTA" (never "Complaint").\n'
    "Cite INA sections, 8 CFR regulations, and EOIR rules as appropriate.\n"
    "Be concise but thorough. Focus on facts and applicable immigration law.\n"
    "Do not include any preamble or explanation - return only the requested content."
)


def _env_float(key: str, default: float) -> float:
    try:
        return float(os.getenv(key, str(default)))
    except ValueError:
        return default


def _env_int(key: str, default: int) -> int:
    try:
        return int(os.getenv(key, str(default)))
    except ValueError:
        return default


def get_openai_key() -> str:
    """Read OPENAI_API_KEY from the environment. Raises EnvironmentError if missing."""
    key = os.getenv("OPENAI_API_KEY", "").strip()
    if not key:
        print("⚠️  [GENERATION] API key missing (OPENAI_API_KEY)")
        raise EnvironmentError("OPENAI_API_KEY environment variable not set")
    return key


def get_openai_model() -> str:
    """Read OPENAI_MODEL from the environment (default: gpt-4.1)."""
    return os.getenv("OPENAI_MODEL", "gpt-4.1").strip()


def _get_temperature() -> float:
    return _env_float("OPENAI_TEMPERATURE", 0.3)


def _get_timeout() -> float:
    return _env_float("OPENAI_REQUEST_TIMEOUT", 60.0)


def _get_max_tokens() -> int:
    return _env_int("OPENAI_MAX_COMPLETION_TOKENS", 2000)


def system_prompt_for(category: TemplateCategory) -> str:
    if category == TemplateCategory.IMMIGRATION:
        return IMMIGRATION_SYSTEM_PROMPT
    return CRIMINAL_SYSTEM_PROMPT


def build_messages(
    *,
    instructions: str,
    rendered_prompt: str,
    category: TemplateCategory,
) -> List[Dict[str, str]]:
    """System message = drafting persona + section instructions; user message = prompt."""
    system = system_prompt_for(category)
    if instructions.strip():
        system = f"{system}\n\nSection instructions:\n{instructions.strip()}"
    return [
        {"role": "system", "content": system},
        {"role": "user", "content": rendered_prompt},
    ]


def build_payload(
    *,
    model: str,
    messages: List[Dict[str, str]],
    max_completion_tokens: int,
    temperature: float,
) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "model": model,
        "messages": messages,
        "max_tokens": max_completion_tokens,
        "temperature": temperature,
    }
    print(f"🧠 [GENERATION] Model: {model}")
    print(f"🧠 [GENERATION] Tokens requested: {max_completion_tokens}")
    return payload


async def generate_section_content(
    *,
    instructions: str,
    rendered_prompt: str,
    category: TemplateCategory = TemplateCategory.CRIMINAL,
    section_id: str = "",
    api_key: Optional[str] = None,
    model: Optional[str] = None,
) -> Optional[str]:
    """Draft prose for one ai-generated section.

    Parameters
    ----------
    instructions : str
        The section's free-text drafting instructions.
    rendered_prompt : str
        The fully interpolated prompt template.
    category : TemplateCategory
        Selects the criminal or immigration drafting persona.
    api_key, model : str, optional
        Overrides for the environment configuration.

    Returns
    -------
    str or None
        Trimmed prose, or None if all attempts failed or returned nothing.
        Retrying is safe: the same session state renders the same prompt.
    """
    if api_key is None:
        api_key = get_openai_key()
    if model is None:
        model = get_openai_model()

    timeout = _get_timeout()
    max_retries = 1  # 1 retry only (2 attempts total)

    headers = {
        "Authorization": f"Bearer {api_key}",
        "Content-Type": "application/json",
    }
    payload = build_payload(
        model=model,
        messages=build_messages(
            instructions=instructions,
            rendered_prompt=rendered_prompt,
            category=category,
        ),
        max_completion_tokens=_get_max_tokens(),
        temperature=_get_temperature(),
    )
    print(f"🧠 [GENERATION] Section {section_id or '?'}: prompt length {len(rendered_prompt)} chars")

    async with async_timer("generation", f"section {section_id or '?'}"):
        for attempt in range(max_retries + 1):
            t0 = time.time()
            try:
                print(f"🧠 [GENERATION] Calling {model} (attempt {attempt + 1}/{max_retries + 1})")
                async with httpx.AsyncClient(timeout=timeout) as client:
                    response = await client.post(_OPENAI_API_URL, headers=headers, json=payload)
                duration = time.time() - t0
                print(f"📦 [GENERATION] HTTP {response.status_code} ({duration:.1f}s)")

                if response.status_code != 200:
                    print(f"⚠️  [GENERATION] Error response: {response.text[:400]}")
                    if attempt < max_retries:
                        print("🔄 [GENERATION] Retrying...")
                        continue
                    return None

                data = response.json()
                usage = data.get("usage")
                if usage:
                    print(
                        f"🧠 [GENERATION] Tokens used: prompt={usage.get('prompt_tokens', '?')}, "
                        f"completion={usage.get('completion_tokens', '?')}, "
                        f"total={usage.get('total_tokens', '?')}"
                    )

                text = (data["choices"][0]["message"]["content"] or "").strip()
                if not text:
                    print(f"⚠️  [GENERATION] Empty response (attempt {attempt + 1})")
                    if attempt < max_retries:
                        continue
                    return None

                print(f"🧠 [GENERATION] Success — {len(text)} chars")
                return text

            except httpx.TimeoutException:
                duration = time.time() - t0
                print(f"❌ [GENERATION] Timeout ({duration:.1f}s)")
                if attempt < max_retries:
                    continue
                return None

            except (httpx.HTTPError, KeyError, IndexError, ValueError) as exc:
                print(f"❌ [GENERATION] Request failed: {exc}")
                if attempt < max_retries:
                    continue
                return None

    return None
