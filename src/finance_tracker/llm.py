"""Statement parsing via an LLM.

Defines the StatementParser protocol for extracting transaction drafts
from pasted statement text, plus two implementations:
- AnthropicAdapter: sends the text to the Anthropic Messages API via httpx.
- NullAdapter: no-op adapter that always returns an empty list.

Drafts are plain dicts, not Transaction objects: the ledger converts them
with :func:`finance_tracker.ledger.draft_to_transaction` and does not rely
on the model's output being well-formed.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Protocol

import httpx

logger = logging.getLogger(__name__)

ANTHROPIC_API_URL = "https://api.anthropic.com/v1/messages"
ANTHROPIC_API_VERSION = "2023-06-01"


class StatementParser(Protocol):
    """Protocol for turning statement text into transaction drafts.

    On any failure, implementations must return an empty list rather than
    raising.
    """

    def parse_statement(
        self,
        text: str,
        categories: list[str],
        year: int,
    ) -> list[dict]:
        """Extract transaction drafts from *text*.

        Args:
            text: Raw statement text as pasted by the user.
            categories: Allowed expense category labels.
            year: Year to assume for dates that omit it.

        Returns:
            List of dicts with keys description, amount, date (YYYY-MM-DD),
            category and type. Empty list on any failure.
        """
        ...


def _build_prompt(text: str, categories: list[str], year: int) -> str:
    """Construct the extraction prompt for one statement."""
    category_text = ", ".join(categories)
    return (
        "Analyze the following credit card statement text and extract its transactions.\n"
        "\n"
        "## Rules\n"
        "1. Extract the description, the amount (as a positive number) and the date.\n"
        f"2. Categorize each transaction into exactly one of: {category_text}. "
        "If unsure, use 'Other'.\n"
        f"3. Convert dates to YYYY-MM-DD. Assume the year is {year} if it is not given.\n"
        "4. Ignore header lines, payment confirmations and balance totals.\n"
        "\n"
        "## Statement\n"
        f"{text}\n"
        "\n"
        "## Response Format\n"
        "Return a JSON array. Each element:\n"
        '{"description": "...", "amount": 0.0, "date": "YYYY-MM-DD", '
        '"category": "...", "type": "CARD_EXPENSE"}'
    )


def _parse_response(text: str) -> list[dict]:
    """Extract and validate the JSON array of drafts from the model output.

    The model may wrap the JSON in markdown code fences or surround it with
    prose, so the first '[' and last ']' delimit the array. Elements
    missing description, amount or date are skipped.
    """
    start = text.find("[")
    end = text.rfind("]")
    if start == -1 or end == -1 or end <= start:
        logger.warning("LLM response does not contain a JSON array")
        return []

    try:
        result = json.loads(text[start : end + 1])
    except json.JSONDecodeError as exc:
        logger.warning("Failed to parse JSON from LLM response: %s", exc)
        return []

    if not isinstance(result, list):
        logger.warning("LLM response JSON is not a list")
        return []

    drafts: list[dict] = []
    for item in result:
        if not isinstance(item, dict):
            logger.warning("Skipping non-dict item in LLM response: %s", item)
            continue
        if not all(key in item for key in ("description", "amount", "date")):
            logger.warning("Skipping item missing required keys: %s", item)
            continue
        drafts.append(
            {
                "description": str(item["description"]),
                "amount": item["amount"],
                "date": str(item["date"]),
                "category": str(item.get("category") or "Other"),
                "type": str(item.get("type") or "CARD_EXPENSE"),
            }
        )
    return drafts


class AnthropicAdapter:
    """Statement parser that calls the Anthropic Messages API via httpx.

    Reads the API key from the environment variable named in config
    (``api_key_env``). On any failure (missing API key, network error,
    HTTP error, unparseable response) returns an empty list.

    Args:
        model: The Anthropic model identifier.
        api_key_env: Name of the environment variable containing the API key.
        max_tokens: Maximum tokens in the response. Default: 4096.
        timeout: HTTP request timeout in seconds. Default: 60.
    """

    def __init__(
        self,
        model: str,
        api_key_env: str,
        max_tokens: int = 4096,
        timeout: float = 60.0,
    ) -> None:
        self.model = model
        self.api_key_env = api_key_env
        self.max_tokens = max_tokens
        self.timeout = timeout

    def parse_statement(
        self,
        text: str,
        categories: list[str],
        year: int,
    ) -> list[dict]:
        if not text.strip():
            return []

        api_key = os.environ.get(self.api_key_env, "")
        if not api_key:
            logger.warning(
                "LLM API key not found in environment variable '%s'",
                self.api_key_env,
            )
            return []

        request_body = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "messages": [
                {
                    "role": "user",
                    "content": _build_prompt(text, categories, year),
                }
            ],
        }
        headers = {
            "x-api-key": api_key,
            "anthropic-version": ANTHROPIC_API_VERSION,
            "content-type": "application/json",
        }

        try:
            response = httpx.post(
                ANTHROPIC_API_URL,
                json=request_body,
                headers=headers,
                timeout=self.timeout,
            )
            response.raise_for_status()
        except httpx.TimeoutException:
            logger.warning("LLM request timed out")
            return []
        except httpx.HTTPStatusError as exc:
            logger.warning(
                "LLM API returned HTTP %d: %s",
                exc.response.status_code,
                exc.response.text[:200],
            )
            return []
        except httpx.HTTPError as exc:
            logger.warning("LLM request failed: %s", exc)
            return []

        try:
            body = response.json()
            response_text = "\n".join(
                block["text"] for block in body.get("content", []) if block.get("type") == "text"
            )
        except (json.JSONDecodeError, KeyError, TypeError, AttributeError) as exc:
            logger.warning("Failed to extract text from LLM response: %s", exc)
            return []

        if not response_text:
            logger.warning("LLM response contained no text content")
            return []

        return _parse_response(response_text)


class NullAdapter:
    """No-op statement parser used when the LLM provider is ``"none"``."""

    def parse_statement(
        self,
        text: str,
        categories: list[str],
        year: int,
    ) -> list[dict]:
        return []
