import json
import logging
import time
from typing import Callable, List, Optional

from google import genai
from google.genai import errors, types
from pydantic import ValidationError

from truthguard.core.config import (
    GEMINI_API_KEY,
    GEMINI_MODEL,
    MAX_RETRIES,
    RATE_LIMIT_BACKOFF_SECONDS,
)
from truthguard.models.claim import Claim, Scope, Verdict, VerdictLabel

logger = logging.getLogger(__name__)

RATE_LIMIT_STATUS = "RESOURCE_EXHAUSTED"

SYSTEM_PROMPTS = {
    Scope.LOCAL: "You are a Nepali News Verification AI. Output JSON only.",
    Scope.GLOBAL: "You are an International News Verification AI. Output JSON only.",
}

CHAT_SYSTEM_PROMPT = (
    "You are TruthGuard, a news verification assistant. "
    'Answer as JSON: {"reply": "<your answer>"}.'
)

VERDICT_INSTRUCTIONS = """
Judge the claim using the trusted-source context. If the context says
API_KEY_MISSING, NO_MATCHING_SOURCES or SEARCH_FAILED, no trusted coverage was
available: lean towards "Unverified" unless the claim is plainly false or satire.

Respond with exactly this JSON object:
{{
  "verdict": "<one of: {labels}>",
  "truth_score": <integer 0-100, how likely the claim is true>,
  "propaganda_score": <integer 0-100, how manipulative the framing is>,
  "category": "<short topic tag, e.g. Politics, Social, Economy, World News>",
  "explanation": "<one or two sentences>",
  "image_keywords": "<three or four words for an illustrative image>"
}}
"""


def build_verdict_messages(claim: Claim, evidence: str, scope: Scope) -> List[dict]:
    """Chat messages asking the model to adjudicate one claim."""
    labels = ", ".join(label.value for label in VerdictLabel)
    return [
        {"role": "system", "content": SYSTEM_PROMPTS[scope]},
        {
            "role": "user",
            "content": f'ANALYZE CLAIM: "{claim.title}"\nCONTEXT: "{evidence}"\n'
                       + VERDICT_INSTRUCTIONS.format(labels=labels),
        },
    ]


def build_chat_messages(message: str) -> List[dict]:
    return [
        {"role": "system", "content": CHAT_SYSTEM_PROMPT},
        {"role": "user", "content": message},
    ]


class VerdictGenerator:
    """
    Asks Gemini for a JSON verdict.

    Rate-limit errors are retried after a constant backoff, at most
    max_retries times. Malformed output and every other error give None
    straight away; callers skip the claim.
    """

    def __init__(
        self,
        client=None,
        model: str = GEMINI_MODEL,
        backoff_seconds: float = RATE_LIMIT_BACKOFF_SECONDS,
        max_retries: int = MAX_RETRIES,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if client is None and GEMINI_API_KEY:
            client = genai.Client(api_key=GEMINI_API_KEY)
        if client is None:
            logger.warning("[Verdict] GEMINI_API_KEY not set. Verdict generation is disabled.")
        self.client = client
        self.model = model
        self.backoff_seconds = backoff_seconds
        self.max_retries = max_retries
        self.sleep = sleep

    def generate(self, messages: List[dict], max_retries: Optional[int] = None) -> Optional[Verdict]:
        """
        Produce a validated verdict.

        Args:
            messages (List[dict]): Chat messages with "role" and "content"
            max_retries (int): Retry credit for rate-limit errors

        Returns:
            Verdict or None if the model failed or returned an invalid payload
        """
        payload = self.generate_raw(messages, max_retries)
        if payload is None:
            return None

        try:
            return Verdict.model_validate(payload)
        except ValidationError as e:
            logger.error(f"[Verdict] Model output failed validation: {e.error_count()} errors")
            return None

    def generate_raw(self, messages: List[dict], max_retries: Optional[int] = None) -> Optional[dict]:
        """Run the completion with retries and return the parsed JSON object."""
        if self.client is None:
            return None

        retries_left = self.max_retries if max_retries is None else max_retries
        system_instruction, contents = self._to_gemini(messages)
        config = types.GenerateContentConfig(
            system_instruction=system_instruction,
            temperature=0.1,
            response_mime_type="application/json",
        )

        attempt = 0
        while True:
            attempt += 1
            try:
                response = self.client.models.generate_content(
                    model=self.model,
                    contents=contents,
                    config=config,
                )
                break
            except errors.APIError as e:
                if self._is_rate_limited(e) and retries_left > 0:
                    retries_left -= 1
                    logger.warning(
                        f"[Verdict] Rate limit hit (attempt {attempt}). "
                        f"Pausing {self.backoff_seconds}s, {retries_left} retries left..."
                    )
                    self.sleep(self.backoff_seconds)
                    continue
                logger.error(f"[Verdict] AI error after {attempt} attempts: {e}")
                return None
            except Exception as e:
                logger.error(f"[Verdict] AI transport error: {e}")
                return None

        try:
            payload = json.loads(response.text)
        except (json.JSONDecodeError, TypeError) as e:
            logger.error(f"[Verdict] Model returned malformed JSON: {e}")
            return None

        if not isinstance(payload, dict):
            logger.error("[Verdict] Model returned JSON that is not an object")
            return None
        return payload

    @staticmethod
    def _is_rate_limited(error: errors.APIError) -> bool:
        return error.code == 429 or getattr(error, "status", None) == RATE_LIMIT_STATUS

    @staticmethod
    def _to_gemini(messages: List[dict]):
        """Split chat messages into a system instruction and Gemini contents."""
        system_parts = []
        contents = []
        for message in messages:
            role = message.get("role", "user")
            text = message.get("content", "")
            if role == "system":
                system_parts.append(text)
                continue
            contents.append(types.Content(
                role="model" if role == "assistant" else "user",
                parts=[types.Part(text=text)],
            ))
        return "\n".join(system_parts) or None, contents
