"""
Stylist service for Clotheme
Wraps the OpenAI chat-completion API. The stylist prompt asks the model for strict JSON
describing an outfit; model output is parsed in two stages (strict, then the first {...} block).
"""
import os
import re
import json
import logging
from typing import Any, Optional

import openai
from openai import OpenAI

from .schemas import StylistResult

logger = logging.getLogger(__name__)

STYLIST_SYSTEM_PROMPT = """
You are Clotheme.ai, an AI stylist.
Respond ONLY in this exact JSON format:

{
  "character": "...",
  "pieces": [
    { "name": "...", "keywords": ["...", "..."] }
  ],
  "vibe": "..."
}

Rules:
- NO prices
- NO brand names
- NO retailer names
- NO markdown
- Output ONLY JSON, no extra text
"""

MATCH_ENGINE_PROMPT = "You are a fashion matching engine."

INVALID_JSON_ERROR = "Invalid JSON from AI"

# Greedy: from the first '{' to the last '}' across newlines
JSON_BLOCK_PATTERN = re.compile(r"\{[\s\S]*\}")


class StylistServiceError(Exception):
    """Raised when the upstream completion call fails."""


def extract_json(text: Optional[str]) -> Optional[Any]:
    """Strict parse first, then the first {...} block. Returns None when both fail."""
    if not text:
        return None
    try:
        return json.loads(text)
    except ValueError:
        pass

    match = JSON_BLOCK_PATTERN.search(text)
    if match:
        try:
            return json.loads(match.group(0))
        except ValueError:
            logger.debug(f"Extracted block is not valid JSON: '{match.group(0)[:200]}'")
    return None


def parse_stylist_output(text: Optional[str]) -> StylistResult:
    parsed = extract_json(text)
    if not isinstance(parsed, dict) or not parsed.get("pieces"):
        logger.warning(f"Stylist output could not be used: '{(text or '')[:200]}'")
        return StylistResult(ok=False, error=INVALID_JSON_ERROR)
    return StylistResult(ok=True, data=parsed)


class StylistService:
    def __init__(self, api_key: Optional[str] = None,
                 api_key_env_var: str = "OPENAI_API_KEY",
                 stylist_model: str = "gpt-4o",
                 match_model: str = "gpt-4o-mini",
                 temperature: float = 0.2,
                 timeout: float = 60.0,
                 client: Optional[OpenAI] = None,
                 service_name: str = "OpenAI-Stylist"):
        self.service_name = service_name
        self.api_key = api_key or os.getenv(api_key_env_var)
        if not self.api_key and client is None:
            logger.error(f"{self.service_name}: {api_key_env_var} not found in environment variables.")
            raise EnvironmentError(f"{self.service_name}: {api_key_env_var} not set. Please set it in your .env file.")

        self.stylist_model = stylist_model
        self.match_model = match_model
        self.temperature = temperature
        # No retries around the upstream call
        self.client = client or OpenAI(api_key=self.api_key, timeout=timeout, max_retries=0)
        logger.info(
            f"{self.service_name} initialized: StylistModel='{self.stylist_model}', "
            f"MatchModel='{self.match_model}', Timeout={timeout}s"
        )

    def _complete(self, **kwargs) -> str:
        try:
            completion = self.client.chat.completions.create(**kwargs)
        except openai.OpenAIError as e:
            logger.error(f"{self.service_name} completion failed: {e} - Model: {kwargs.get('model')}")
            raise StylistServiceError(str(e)) from e

        if not completion.choices:
            return ""
        return completion.choices[0].message.content or ""

    def style(self, user_message: str) -> StylistResult:
        """Asks the stylist model for an outfit breakdown and parses its JSON reply."""
        text = self._complete(
            model=self.stylist_model,
            temperature=self.temperature,
            response_format={"type": "json_object"},
            messages=[
                {"role": "system", "content": STYLIST_SYSTEM_PROMPT},
                {"role": "user", "content": user_message},
            ],
        )
        logger.debug(f"{self.service_name}: raw stylist output: '{text[:200]}'")
        return parse_stylist_output(text)

    def ping_match_engine(self, user_message: str) -> str:
        """Advisory completion made by /api/match; the reply does not influence matching."""
        return self._complete(
            model=self.match_model,
            messages=[
                {"role": "system", "content": MATCH_ENGINE_PROMPT},
                {"role": "user", "content": user_message},
            ],
        )
