"""Generator payload models.

``RepoSnapshot`` is what the narrative generator is asked about;
``Narrative`` is what it must answer with. Both are Pydantic models so that
the generator's JSON output is validated on ingestion rather than trusted.

The generator's JSON keys (``reminder``, ``action_suggestions``) are part
of the prompt contract and are mapped to ``summary`` and ``actions`` here.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


class IssueSummary(BaseModel):
    """Trimmed-down issue record sent to the generator."""

    number: int
    title: str
    state: str
    created_at: datetime | None = Field(default=None, serialization_alias="createdAt")
    updated_at: datetime | None = Field(default=None, serialization_alias="updatedAt")
    labels: list[str] = Field(default_factory=list)


class PullRequestSummary(IssueSummary):
    """Trimmed-down pull request record sent to the generator."""

    draft: bool = False


class RepoSnapshot(BaseModel):
    """Open issues and pull requests at collection time."""

    issues: list[IssueSummary] = Field(default_factory=list)
    pulls: list[PullRequestSummary] = Field(default_factory=list)

    def to_prompt_json(self) -> str:
        """Serialize for embedding in a prompt."""
        return self.model_dump_json(by_alias=True, indent=2)


class Narrative(BaseModel):
    """Status summary and action proposals produced by the generator."""

    model_config = ConfigDict(populate_by_name=True)

    summary: str = Field(..., alias="reminder", description="Natural-language status summary")
    actions: str = Field(..., alias="action_suggestions", description="Proposed next actions")

    @field_validator("summary", "actions")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be empty")
        return value


class CompletionMessage(BaseModel):
    content: str | None = None


class CompletionChoice(BaseModel):
    message: CompletionMessage


class ChatCompletion(BaseModel):
    """The part of a chat completion response the generator reads."""

    choices: list[CompletionChoice] = Field(default_factory=list)

    @property
    def content(self) -> str | None:
        return self.choices[0].message.content if self.choices else None
