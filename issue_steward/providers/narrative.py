"""Narrative generator backed by an OpenAI-compatible chat completions API.

The generator asks the model for a JSON object with two keys,
``reminder`` (a status summary) and ``action_suggestions`` (proposed next
steps), and validates the answer against ``Narrative``. Anything short of
a valid answer is a failed generation: it is logged and reported as None.
"""

import json

import httpx
import structlog
from pydantic import ValidationError

from issue_steward.exceptions import GenerationError
from issue_steward.models.narrative import ChatCompletion, Narrative, RepoSnapshot
from issue_steward.providers.base import NarrativeProvider
from issue_steward.utils.retry import RetryPolicy

log = structlog.get_logger(__name__)

SYSTEM_PROMPT = (
    "You are an assistant that reviews the state of a GitHub repository and gives the team "
    "insight that helps it keep moving. Always answer with the JSON object you are asked for."
)

USER_PROMPT_TEMPLATE = """You are an experienced project manager with a reflective, gentle voice.
Below is an overview of the open issues and pull requests of the repository being tracked:

```json
{snapshot}
```

Using this information, write two things for the team:

1. reminder: summarise the current situation (where work is active, what is stalled, \
what progress deserves attention). Offer insight and encouragement, not a list of facts.
2. action_suggestions: concrete next actions and points to consider. Give the reasoning, \
the background and any knowledge that supports each one (hints for resolving specific \
issues, angles for pull request review, task management techniques).

Respond with exactly this JSON object. Keys in English, values in Japanese:
{{"reminder": "...", "action_suggestions": "..."}}
"""


class OpenAINarrativeProvider(NarrativeProvider):
    """Narrative generator for OpenAI and OpenAI-compatible servers."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.openai.com/v1",
        model: str = "gpt-4o",
        temperature: float = 0.2,
        max_tokens: int = 1500,
        timeout: float = 120.0,
        retry: RetryPolicy | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        """Initialize the generator.

        Args:
            api_key: Bearer token for the completions endpoint
            base_url: API base URL (e.g. https://api.openai.com/v1)
            model: Model identifier
            temperature: Sampling temperature
            max_tokens: Response token budget
            timeout: Request timeout in seconds
            retry: Policy applied to the HTTP call
            client: Pre-built HTTP client (mainly for tests)
        """
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.retry = retry or RetryPolicy(max_attempts=3, delay=2.0)
        self.client = client or httpx.AsyncClient(
            timeout=timeout,
            headers={"Content-Type": "application/json", "Authorization": f"Bearer {api_key}"},
        )

    async def aclose(self) -> None:
        await self.client.aclose()

    def build_messages(self, snapshot: RepoSnapshot) -> list[dict[str, str]]:
        return [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": USER_PROMPT_TEMPLATE.format(snapshot=snapshot.to_prompt_json())},
        ]

    async def _complete(self, snapshot: RepoSnapshot) -> dict:
        response = await self.client.post(
            f"{self.base_url}/chat/completions",
            json={
                "model": self.model,
                "messages": self.build_messages(snapshot),
                "temperature": self.temperature,
                "max_tokens": self.max_tokens,
                "response_format": {"type": "json_object"},
            },
        )
        response.raise_for_status()
        return response.json()

    async def generate(self, snapshot: RepoSnapshot) -> Narrative | None:
        """Generate a narrative for ``snapshot``; None on any failure."""
        log.info(
            "generating_narrative",
            model=self.model,
            temperature=self.temperature,
            issues=len(snapshot.issues),
            pulls=len(snapshot.pulls),
        )

        try:
            result = await self.retry.run(lambda: self._complete(snapshot), "chat_completion")
            return self.parse_result(result)
        except httpx.HTTPStatusError as e:
            log.error(
                "narrative_request_failed",
                model=self.model,
                status_code=e.response.status_code,
                error=str(e),
            )
        except (httpx.HTTPError, ValueError) as e:
            log.error("narrative_request_failed", model=self.model, error=str(e))
        except GenerationError as e:
            log.error("narrative_rejected", model=self.model, operation=e.operation, error=e.message)
        return None

    def parse_result(self, result: object) -> Narrative:
        """Validate a chat completion response into a Narrative.

        Raises:
            GenerationError: If the response or the model's answer is not
                the expected shape.
        """
        try:
            content = ChatCompletion.model_validate(result).content
        except ValidationError as e:
            raise GenerationError(f"Unexpected completion response: {e}", operation="chat_completion") from e

        if not content:
            raise GenerationError("Completion returned no content", operation="chat_completion")

        log.debug("narrative_raw_response", content=content)

        try:
            payload = json.loads(content)
        except json.JSONDecodeError as e:
            raise GenerationError(f"Answer is not valid JSON: {e}", operation="parse_answer") from e

        if not isinstance(payload, dict):
            raise GenerationError("Answer is not a JSON object", operation="parse_answer")

        try:
            narrative = Narrative.model_validate(payload)
        except ValidationError as e:
            raise GenerationError(
                f"Answer is missing required fields (keys: {sorted(payload)})", operation="parse_answer"
            ) from e

        log.info("narrative_generated", summary_length=len(narrative.summary), actions_length=len(narrative.actions))
        return narrative
