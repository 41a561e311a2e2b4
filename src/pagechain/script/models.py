"""Chain script models: a JSON description of a builder chain.

A chain script lists steps that map one-to-one onto ``Page`` methods, so a
chain can be kept in a file and replayed from the CLI::

    {
      "name": "example-title",
      "steps": [
        {"action": "goto", "url": "https://example.com"},
        {"action": "wait_for_element", "selector": "h1", "timeout_ms": 5000},
        {"action": "evaluate_with_return", "name": "heading",
         "script": "(sel) => document.querySelector(sel).textContent",
         "function": true, "args": ["h1"]},
        {"action": "save_screenshot", "path": "example.png"}
      ]
    }
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, model_validator


class ChainStepType(str, Enum):
    """Builder methods a chain step can invoke."""

    GOTO = "goto"
    CLOSE_PAGE = "close_page"
    BACK = "back"
    FORWARD = "forward"
    REFRESH = "refresh"
    WITH_USER_AGENT = "with_user_agent"
    WITH_AUTH = "with_auth"
    SAVE_SCREENSHOT = "save_screenshot"
    SAVE_PDF = "save_pdf"
    WAIT_FOR_NAVIGATION = "wait_for_navigation"
    WAIT_FOR_ELEMENT = "wait_for_element"
    WAIT_FOR_EVALUATION = "wait_for_evaluation"
    EVALUATE = "evaluate"
    EVALUATE_WITH_RETURN = "evaluate_with_return"


# Fields that must be non-empty for each step type.
_REQUIRED_FIELDS: dict[ChainStepType, tuple[str, ...]] = {
    ChainStepType.GOTO: ("url",),
    ChainStepType.WITH_USER_AGENT: ("user_agent",),
    ChainStepType.WITH_AUTH: ("username",),
    ChainStepType.SAVE_SCREENSHOT: ("path",),
    ChainStepType.SAVE_PDF: ("path",),
    ChainStepType.WAIT_FOR_ELEMENT: ("selector",),
    ChainStepType.WAIT_FOR_EVALUATION: ("script",),
    ChainStepType.EVALUATE: ("script",),
    ChainStepType.EVALUATE_WITH_RETURN: ("script",),
}


class ChainStep(BaseModel):
    """Single step of a chain script."""

    action: ChainStepType
    name: str = ""
    url: str = ""
    selector: str = ""
    path: str = ""
    script: str = ""
    function: bool = Field(
        default=False,
        description="Treat ``script`` as function source and call it with ``args``.",
    )
    args: list[Any] = Field(default_factory=list)
    timeout_ms: float | None = Field(
        default=None,
        ge=0,
        description="Per-step timeout; omitted means the session default.",
    )
    options: dict[str, Any] = Field(default_factory=dict)
    user_agent: str = ""
    username: str = ""
    password: str = ""

    @model_validator(mode="after")
    def _check_required(self) -> "ChainStep":
        missing = [f for f in _REQUIRED_FIELDS.get(self.action, ()) if not getattr(self, f)]
        if missing:
            raise ValueError(f"{self.action.value} step requires: {', '.join(missing)}")
        if self.args and not self.function:
            raise ValueError("args are only used when function is true")
        return self


class ChainScript(BaseModel):
    """A named, ordered list of chain steps."""

    name: str = Field(..., min_length=1)
    description: str = ""
    steps: list[ChainStep] = Field(default_factory=list)
