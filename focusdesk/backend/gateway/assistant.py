"""
Business Assistant Gateway.

Builds the prompt for a focus, calls an OpenAI-compatible chat completion
endpoint and parses the answer into a reply plus suggested tasks.

The model is asked to answer strictly as JSON:

    {"reply": str,
     "tasks": [{"title": str, "description"?: str,
                "priority"?: "low|medium|high|urgent", "due_at"?: ISO|null}],
     "followup_questions"?: [str]}

Models do not always comply, so parsing is best-effort: plain parse,
then parse with Markdown code fences stripped, then the raw text is used
as the reply.

Outbound calls go through: circuit breaker → retry → semaphore → timeout.
"""

import asyncio
import json
import re
from dataclasses import dataclass, field
from datetime import datetime
from functools import lru_cache
from typing import Any

import aiobreaker
import openai
from openai import AsyncOpenAI
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from focusdesk.backend.core.concurrency import get_semaphore
from focusdesk.backend.core.config import get_app_config, get_settings
from focusdesk.backend.core.config_schema import AssistantSchema
from focusdesk.backend.core.logging import get_logger
from focusdesk.backend.core.resilience import create_circuit_breaker, log_retry
from focusdesk.backend.models.enums import TaskPriority

logger = get_logger(__name__)

NOT_CONNECTED_REPLY = (
    "The assistant is not connected yet.\n"
    "Add OPENAI_API_KEY to config/.env and restart the API.\n\n"
    "Meanwhile, describe the problem and I will tell you which data is needed "
    "for the analysis: niche, product, current numbers and the goal."
)
UNPARSABLE_REPLY = "Could not parse the assistant's answer."
PROVIDER_ERROR_PREFIX = "Could not get an answer from the assistant."

ALLOWED_PRIORITIES = frozenset(p.value for p in TaskPriority)

# Leading ```json / ``` and trailing ``` around a model answer
_FENCE_START = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
_FENCE_END = re.compile(r"```$")

# Errors worth retrying; anything else fails fast
RETRYABLE_ERRORS = (
    openai.APIConnectionError,
    openai.APITimeoutError,
    TimeoutError,
)


@dataclass
class FocusContext:
    """What the assistant is told about the project."""

    title: str
    description: str | None = None
    stage: str | None = None
    deadline_at: datetime | None = None
    role: str = "member"


@dataclass
class AssistantReply:
    """Parsed assistant answer."""

    reply: str
    tasks: list[dict[str, Any]] = field(default_factory=list)
    followup_questions: list[str] = field(default_factory=list)

    def to_meta(self) -> dict[str, Any]:
        return {
            "kind": "ai_response",
            "suggested_tasks": self.tasks,
            "followup_questions": self.followup_questions,
        }


# =============================================================================
# Prompt building
# =============================================================================


def build_system_prompt(language: str) -> str:
    return (
        "You are a business assistant. You help an entrepreneur solve business "
        "problems: launch, sales, marketing, processes, finance.\n"
        f"Answer in {language}.\n"
        "Always give a concrete action plan. If there is little data, ask 3-5 "
        "clarifying questions.\n"
        "Answer format: strictly JSON without Markdown.\n"
        'JSON schema: {"reply": string, "tasks": [{"title": string, '
        '"description"?: string, "priority"?: "low|medium|high|urgent", '
        '"due_at"?: ISOString|null}], "followup_questions"?: string[]}.'
    )


def build_context_preamble(context: FocusContext) -> str:
    deadline = context.deadline_at.date().isoformat() if context.deadline_at else "not set"
    return (
        "Project context (use only this, do not invent):\n"
        f"Title: {context.title}\n"
        f"Description: {context.description or ''}\n"
        f"Stage: {context.stage or ''}\n"
        f"Project deadline: {deadline}\n"
        f"User role: {context.role}"
    )


def build_messages(
    context: FocusContext,
    history: list[tuple[str, str]],
    language: str,
) -> list[dict[str, str]]:
    """
    System prompt, then the context preamble as a user message, then
    the thread history (role, content) in chronological order.
    """
    messages = [
        {"role": "system", "content": build_system_prompt(language)},
        {"role": "user", "content": build_context_preamble(context)},
    ]
    messages.extend({"role": role, "content": content} for role, content in history)
    return messages


# =============================================================================
# Parsing
# =============================================================================


def strip_code_fence(text: str) -> str:
    cleaned = _FENCE_START.sub("", text.strip())
    return _FENCE_END.sub("", cleaned).strip()


def safe_json_parse(text: str) -> Any | None:
    """Parse JSON, retrying once with code fences stripped."""
    try:
        return json.loads(text)
    except ValueError:
        pass
    try:
        return json.loads(strip_code_fence(text))
    except ValueError:
        return None


def _normalize_due_at(value: Any) -> str | None:
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return datetime.fromisoformat(value.strip().replace("Z", "+00:00")).isoformat()
    except ValueError:
        return None


def sanitize_tasks(raw: Any) -> list[dict[str, Any]]:
    """
    Keep only usable suggested tasks.

    Entries without a non-empty string title are dropped, unknown
    priorities are removed and unparsable due dates become null.
    """
    if not isinstance(raw, list):
        return []

    tasks = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        title = item.get("title")
        if not isinstance(title, str) or not title.strip():
            continue

        task: dict[str, Any] = {"title": title.strip()[:255]}
        description = item.get("description")
        if isinstance(description, str) and description.strip():
            task["description"] = description.strip()
        priority = item.get("priority")
        if priority in ALLOWED_PRIORITIES:
            task["priority"] = priority
        task["due_at"] = _normalize_due_at(item.get("due_at"))
        tasks.append(task)
    return tasks


def parse_assistant_content(content: str) -> AssistantReply:
    """Turn raw model output into an AssistantReply, never failing."""
    parsed = safe_json_parse(content) if content else None
    if not isinstance(parsed, dict) or not isinstance(parsed.get("reply"), str):
        return AssistantReply(reply=content or UNPARSABLE_REPLY)

    questions = parsed.get("followup_questions")
    if not isinstance(questions, list) or not all(isinstance(q, str) for q in questions):
        questions = []

    return AssistantReply(
        reply=parsed["reply"],
        tasks=sanitize_tasks(parsed.get("tasks")),
        followup_questions=questions,
    )


# =============================================================================
# Gateway
# =============================================================================


class BusinessAssistantGateway:
    """Chat-completion client for the business assistant."""

    def __init__(
        self,
        api_key: str,
        config: AssistantSchema,
        client: AsyncOpenAI | None = None,
    ) -> None:
        self.config = config
        self.enabled = bool(api_key)
        self._client = client
        if self._client is None and self.enabled:
            self._client = AsyncOpenAI(
                api_key=api_key,
                base_url=config.base_url,
                timeout=config.request_timeout_seconds,
                max_retries=0,
            )
        self._breaker = create_circuit_breaker(
            "llm",
            fail_max=config.circuit_breaker.fail_max,
            timeout_duration=config.circuit_breaker.timeout_duration,
        )

    async def complete(
        self,
        context: FocusContext,
        history: list[tuple[str, str]],
    ) -> AssistantReply:
        """
        Ask the assistant about a focus.

        Provider failures become a reply text; this method does not raise
        for them.
        """
        if not self.enabled:
            return AssistantReply(reply=NOT_CONNECTED_REPLY)

        messages = build_messages(
            context,
            history[-self.config.history_limit:],
            self.config.language,
        )

        try:
            content = await self._breaker.call_async(self._request_with_retry, messages)
        except aiobreaker.CircuitBreakerError as e:
            logger.warning("Assistant circuit open", extra={"error": str(e)})
            return AssistantReply(reply=f"{PROVIDER_ERROR_PREFIX} The service is temporarily unavailable.")
        except openai.APIError as e:
            logger.error(
                "Assistant provider error",
                extra={"error_type": type(e).__name__, "error": e.message},
            )
            return AssistantReply(reply=f"{PROVIDER_ERROR_PREFIX} {e.message}")
        except TimeoutError:
            logger.error("Assistant request timed out")
            return AssistantReply(reply=f"{PROVIDER_ERROR_PREFIX} Request timed out.")

        return parse_assistant_content(content)

    async def _request_with_retry(self, messages: list[dict[str, str]]) -> str:
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.config.retry.max_attempts),
            wait=wait_exponential(multiplier=1, min=1, max=self.config.retry.backoff_max),
            retry=retry_if_exception_type(RETRYABLE_ERRORS),
            before_sleep=log_retry,
            reraise=True,
        ):
            with attempt:
                return await self._request(messages)
        raise RuntimeError("unreachable")

    async def _request(self, messages: list[dict[str, str]]) -> str:
        async with get_semaphore("llm"):
            async with asyncio.timeout(self.config.request_timeout_seconds):
                response = await self._client.chat.completions.create(
                    model=self.config.model,
                    temperature=self.config.temperature,
                    messages=messages,
                )
        if not response.choices:
            return ""
        return response.choices[0].message.content or ""


@lru_cache
def get_assistant_gateway() -> BusinessAssistantGateway:
    """Process-wide gateway. Overridden in tests via dependency_overrides."""
    return BusinessAssistantGateway(
        api_key=get_settings().openai_api_key,
        config=get_app_config().assistant,
    )
