# services/assessment/extraction.py
"""
Question import: scrape a page (or take pasted text), ask an LLM gateway to
pull three-option questions out of it, and keep only well-formed items.
"""

from __future__ import annotations

import json
import logging
import os
import time
from typing import Any, Dict, List, Optional

import httpx

from bank import Level, Question, parse_level

logger = logging.getLogger(__name__)

DEFAULT_SCRAPE_URL = "https://api.firecrawl.dev/v1/scrape"
DEFAULT_AI_URL = "https://ai.gateway.lovable.dev/v1/chat/completions"
DEFAULT_AI_MODEL = "google/gemini-3-flash-preview"

CONTENT_LIMIT = 15000
NO_EXPLANATION = "No explanation provided."

SYSTEM_PROMPT = """You are an expert at extracting quiz/assessment questions from educational content.
Extract questions with EXACTLY 3 answer options each. Determine the correct answer and provide an explanation.
Assign difficulty levels based on complexity: basic, intermediate, advanced, or upper-advanced.

IMPORTANT: Return ONLY valid JSON, no markdown formatting, no code blocks.

Return a JSON object with this exact structure:
{
  "questions": [
    {
      "question": "The question text with a blank shown as ___",
      "options": ["option1", "option2", "option3"],
      "correctAnswer": 0,
      "explanation": "Brief explanation why this is correct",
      "level": "basic"
    }
  ]
}

Notes:
- correctAnswer is the index (0, 1, or 2) of the correct option
- Extract as many valid questions as possible from the content
- If content has questions with more than 3 options, pick the 3 most relevant (including the correct answer)
- If content has questions with fewer than 3 options, generate plausible distractors
- Ensure questions are clear and self-contained"""


class ExtractionError(Exception):
    def __init__(self, message: str, status_code: int = 500) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def strip_code_fences(text: str) -> str:
    s = text.strip()
    if s.startswith("```json"):
        s = s[7:]
    elif s.startswith("```"):
        s = s[3:]
    if s.endswith("```"):
        s = s[:-3]
    return s.strip()


def parse_ai_content(text: str) -> List[Any]:
    try:
        data = json.loads(strip_code_fences(text))
    except json.JSONDecodeError as e:
        logger.error("failed to parse AI response: %s; raw=%r", e, text[:500])
        raise ExtractionError("Failed to parse extracted questions") from e
    if not isinstance(data, dict):
        raise ExtractionError("Failed to parse extracted questions")
    items = data.get("questions")
    return items if isinstance(items, list) else []


def _is_valid_item(item: Any) -> bool:
    if not isinstance(item, dict):
        return False
    answer = item.get("correctAnswer")
    options = item.get("options")
    return (
        isinstance(item.get("question"), str)
        and bool(item["question"].strip())
        and isinstance(options, list)
        and len(options) == 3
        and all(isinstance(o, str) for o in options)
        and isinstance(answer, int)
        and not isinstance(answer, bool)
        and 0 <= answer <= 2
    )


def normalize_extracted(items: List[Any], stamp_ms: Optional[int] = None) -> List[Question]:
    """
    Drop malformed items and turn the rest into Questions.

    Ids are ``imported_<epoch ms>_<n>``; unknown levels become intermediate.
    """
    if stamp_ms is None:
        stamp_ms = int(time.time() * 1000)

    valid = [it for it in items if _is_valid_item(it)]
    return [
        Question(
            id=f"imported_{stamp_ms}_{idx}",
            question=it["question"],
            options=tuple(it["options"]),
            correct_answer=it["correctAnswer"],
            explanation=it.get("explanation") or NO_EXPLANATION,
            level=parse_level(it.get("level"), Level.INTERMEDIATE),
        )
        for idx, it in enumerate(valid)
    ]


class QuestionExtractor:
    def __init__(
        self,
        *,
        scrape_api_key: Optional[str] = None,
        ai_api_key: Optional[str] = None,
        scrape_url: Optional[str] = None,
        ai_url: Optional[str] = None,
        model: Optional[str] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.scrape_api_key = scrape_api_key or os.getenv("FIRECRAWL_API_KEY") or None
        self.ai_api_key = ai_api_key or os.getenv("AI_GATEWAY_API_KEY") or None
        self.scrape_url = scrape_url or os.getenv("FIRECRAWL_API_URL", DEFAULT_SCRAPE_URL)
        self.ai_url = ai_url or os.getenv("AI_GATEWAY_URL", DEFAULT_AI_URL)
        self.model = model or os.getenv("AI_MODEL", DEFAULT_AI_MODEL)
        self._client = httpx.Client(timeout=30, transport=transport)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "QuestionExtractor":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def scrape(self, url: str) -> Optional[str]:
        if not self.scrape_api_key:
            logger.error("FIRECRAWL_API_KEY not configured")
            raise ExtractionError("Scraping service not configured", 500)

        logger.info("scraping %s", url)
        try:
            r = self._client.post(
                self.scrape_url,
                headers={"Authorization": f"Bearer {self.scrape_api_key}"},
                json={"url": url, "formats": ["markdown"], "onlyMainContent": True},
            )
        except httpx.RequestError as e:
            raise ExtractionError(f"Failed to scrape URL: {e}", 400) from e

        try:
            data: Dict[str, Any] = r.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}
        if r.is_error:
            logger.error("scrape failed (%s): %s", r.status_code, data or r.text[:200])
            raise ExtractionError(data.get("error") or "Failed to scrape URL", 400)

        content = (data.get("data") or {}).get("markdown") or data.get("markdown")
        logger.info("scraped content length: %s", len(content) if content else 0)
        return content

    def ask_model(self, content: str) -> str:
        if not self.ai_api_key:
            logger.error("AI_GATEWAY_API_KEY not configured")
            raise ExtractionError("AI service not configured", 500)

        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {
                    "role": "user",
                    "content": "Extract all quiz/assessment questions from this content:\n\n"
                    + content[:CONTENT_LIMIT],
                },
            ],
            "temperature": 0.3,
        }
        try:
            r = self._client.post(
                self.ai_url,
                headers={"Authorization": f"Bearer {self.ai_api_key}"},
                json=payload,
            )
            r.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error("AI gateway error (%s): %s", e.response.status_code, e.response.text[:500])
            raise ExtractionError("Failed to extract questions from content") from e
        except httpx.RequestError as e:
            logger.error("AI gateway unreachable: %s", e)
            raise ExtractionError("Failed to extract questions from content") from e

        try:
            text = r.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError):
            text = None
        if not text:
            raise ExtractionError("No response from AI")
        logger.debug("AI response: %s", text[:500])
        return text

    def extract(self, url: Optional[str] = None, text_content: Optional[str] = None) -> List[Question]:
        content = text_content
        if url and not text_content:
            content = self.scrape(url)
        if not content:
            raise ExtractionError("No content provided or extracted", 400)

        items = parse_ai_content(self.ask_model(content))
        questions = normalize_extracted(items)
        logger.info("extracted %d valid questions (%d raw)", len(questions), len(items))
        return questions
