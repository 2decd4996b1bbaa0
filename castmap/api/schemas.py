from typing import Any, Literal

from pydantic import BaseModel

from castmap.prompts.base import InverseRolePrompt
from castmap.relationships.reciprocal import ReciprocalResolution


class ReciprocalRequest(BaseModel):
    source_id: str
    target_id: str
    role: str
    inverse_role: str | None = None  # answer to a previous `needs_input` response


class ReciprocalResponse(BaseModel):
    status: Literal["resolved", "needs_input", "cancelled"]
    resolution: ReciprocalResolution | None = None
    question: str | None = None
    suggestions: list[str] = []


class RequestPrompt:
    """Prompt answering from the request body instead of asking interactively.

    When the request carries no inverse role the question is captured, so the
    client can be asked to answer it in a follow-up request.
    """

    def __init__(self, inverse_role: str | None):
        self.inverse_role = inverse_role
        self.request: InverseRolePrompt | None = None

    def ask(self, request: InverseRolePrompt) -> str | None:
        self.request = request
        return self.inverse_role


class CharacterMapResponse(BaseModel):
    format: Literal["model", "cytoscape"]
    data: dict[str, Any] | list[dict[str, Any]]
