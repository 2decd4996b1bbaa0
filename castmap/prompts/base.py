from typing import Iterable, Protocol

from pydantic import BaseModel


def rank_suggestions(
    seeds: list[str], known_roles: Iterable[str], query: str = "", limit: int = 5
) -> list[str]:
    """Order suggestions for a partially typed inverse role.

    Seeds always come first. They are followed by at most `limit` other project
    labels containing the query, case-insensitively, sorted alphabetically.
    """
    suggestions = list(seeds)
    seen = {seed.lower() for seed in seeds}
    needle = query.strip().lower()

    candidates: dict[str, str] = {}
    for label in known_roles:
        if label.lower() not in seen and needle in label.lower():
            candidates.setdefault(label.lower(), label)

    ranked = sorted(candidates.values(), key=lambda label: (label.lower(), label))
    return suggestions + ranked[:limit]


class InverseRolePrompt(BaseModel):
    """Question put to the user when the inverse of a role cannot be inferred."""

    source_name: str
    target_name: str
    role: str
    seeds: list[str] = []  # known inverses of the role, shown first
    known_roles: list[str] = []
    limit: int = 5

    def question(self) -> str:
        return (
            f'You defined {self.target_name} as "{self.role}" of {self.source_name}. '
            f"How is {self.source_name} related to {self.target_name}?"
        )

    def suggest(self, query: str = "") -> list[str]:
        """Suggestions for what the user has typed so far."""
        return rank_suggestions(self.seeds, self.known_roles, query, self.limit)


class RolePrompt(Protocol):
    def ask(self, request: InverseRolePrompt) -> str | None:
        """Return the chosen or typed inverse role, or None when cancelled."""
        ...
