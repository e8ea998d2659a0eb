"""Data models for automation jobs and their per-step outcomes."""

from __future__ import annotations

import uuid
from enum import Enum
from typing import Any, List, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

StepStatus = Literal["succeeded", "failed"]
RunStatus = Literal["success", "error"]


class ActionKind(str, Enum):
    """Closed set of actions understood by the dispatcher."""

    CLICK = "click"
    FILL = "fill"
    WAIT = "wait"
    VALIDATE = "validate"
    ASSERT_URL = "assert-url"
    SELECT = "select"
    SCROLL = "scroll"

    @classmethod
    def parse(cls, raw: str) -> Optional["ActionKind"]:
        """Return the matching member or None for unrecognized names."""

        try:
            return cls(raw)
        except ValueError:
            return None

    @property
    def requires_locator(self) -> bool:
        return self is not ActionKind.ASSERT_URL


def new_session_id() -> str:
    """Return a globally unique session identifier."""

    return str(uuid.uuid4())


class Step(BaseModel):
    """One declarative browser action.

    ``locator`` is an XPath expression; the legacy ``xpath`` key is accepted
    on input. ``action`` stays a plain string so unknown actions surface as
    failed outcomes instead of request validation errors.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    action: str
    locator: str = Field(default="", validation_alias=AliasChoices("locator", "xpath"))
    value: Optional[str] = None

    @field_validator("locator", mode="before")
    @classmethod
    def _coerce_locator(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("value", mode="before")
    @classmethod
    def _coerce_value(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        return str(value)

    @property
    def kind(self) -> Optional[ActionKind]:
        return ActionKind.parse(self.action)


class RunRequest(BaseModel):
    """Inbound job payload. Presence of url and steps is checked by the orchestrator."""

    url: Optional[str] = None
    steps: Optional[List[Step]] = None
    headless: bool = True


class AutomationSession(BaseModel):
    """A single run: one browser, one artifact directory."""

    session_id: str = Field(default_factory=new_session_id)
    url: str
    steps: List[Step] = Field(default_factory=list)
    headless: bool = True


class StepOutcome(BaseModel):
    """Result recorded for exactly one input step."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    index: int
    action: str
    locator: str
    value: Optional[str] = None
    status: StepStatus
    error_message: Optional[str] = None
    artifact_ref: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status == "succeeded"


class RunResult(BaseModel):
    """Aggregate outcome of one automation run."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    status: RunStatus
    message: str
    session_id: Optional[str] = None
    report_ref: Optional[str] = None
    step_outcomes: List[StepOutcome] = Field(default_factory=list)

    @property
    def failed_steps(self) -> int:
        return sum(1 for outcome in self.step_outcomes if not outcome.succeeded)
