"""Tests for resolving the reverse side of a new relationship."""

import time
from concurrent.futures import ThreadPoolExecutor

import pytest

from castmap.inverse_pairs.local import LocalInversePairStore
from castmap.prompts.base import InverseRolePrompt
from castmap.relationships.reciprocal import (
    ReciprocalResolutionError,
    ReciprocalResolver,
    UnknownCharacterError,
)
from tests.fakes import FakeCharacterStore, FakePrompt


def test_asks_user_and_writes_inverse(
    resolver: ReciprocalResolver,
    fake_character_store: FakeCharacterStore,
    fake_prompt: FakePrompt,
) -> None:
    resolution = resolver.resolve("Anna Smith", "Ben Smith", "Parent")

    assert resolution is not None
    assert resolution.inverse_role == "Child"
    assert resolution.method == "user"
    assert resolution.document_updated
    assert "- **Child**: [[Anna Smith]]" in fake_character_store.documents["Ben Smith"]

    request = fake_prompt.requests[0]
    assert request.source_name == "Anna Smith"
    assert request.target_name == "Ben Smith"
    assert request.seeds == ["child"]
    assert "Rival" in request.known_roles


def test_learns_user_answer(
    fake_character_store: FakeCharacterStore, inverse_store: LocalInversePairStore
) -> None:
    resolver = ReciprocalResolver(
        character_store=fake_character_store,
        inverse_store=inverse_store,
        prompt=FakePrompt(answers=["Nemesis"]),
    )

    resolution = resolver.resolve("Cara Jones", "Ben Smith", "Rival")

    assert resolution is not None and resolution.learned_pair
    assert inverse_store.snapshot().are_inverse("rival", "nemesis")
    ben = fake_character_store.get_record("Ben Smith")
    assert ben.relationships["Nemesis"] == ["[[Cara Jones]]"]


def test_infers_inverse_from_target_sheet(
    resolver: ReciprocalResolver,
    fake_character_store: FakeCharacterStore,
    inverse_store: LocalInversePairStore,
    fake_prompt: FakePrompt,
) -> None:
    fake_character_store.documents["Ben Smith"] += "- **Ward**: [[Anna Smith]]\n"

    resolution = resolver.resolve("Anna Smith", "Ben Smith", "Guardian")

    assert resolution is not None
    assert resolution.method == "sibling"
    assert resolution.inverse_role == "Ward"
    assert not resolution.document_updated
    assert fake_prompt.requests == []
    assert fake_character_store.writes == []
    assert inverse_store.snapshot().are_inverse("guardian", "ward")


def test_sibling_inference_can_skip_learning(
    fake_character_store: FakeCharacterStore, inverse_store: LocalInversePairStore
) -> None:
    fake_character_store.documents["Ben Smith"] += "- **Ward**: [[Anna Smith]]\n"
    resolver = ReciprocalResolver(
        character_store=fake_character_store,
        inverse_store=inverse_store,
        learn_sibling_pairs=False,
    )

    resolution = resolver.resolve("Anna Smith", "Ben Smith", "Guardian")

    assert resolution is not None and not resolution.learned_pair
    assert "guardian" not in inverse_store.snapshot()


def test_cancelled_prompt_changes_nothing(
    fake_character_store: FakeCharacterStore, inverse_store: LocalInversePairStore
) -> None:
    before = dict(fake_character_store.documents)
    resolver = ReciprocalResolver(
        character_store=fake_character_store,
        inverse_store=inverse_store,
        prompt=FakePrompt(answers=[None]),
    )

    assert resolver.resolve("Cara Jones", "Ben Smith", "Mentor") is None
    assert fake_character_store.documents == before
    assert "mentor" not in inverse_store.snapshot()


def test_write_failure_raises_with_notice(
    sheets: dict[str, str], inverse_store: LocalInversePairStore
) -> None:
    resolver = ReciprocalResolver(
        character_store=FakeCharacterStore(sheets, fail_writes=True),
        inverse_store=inverse_store,
        prompt=FakePrompt(answers=["Student"]),
    )

    with pytest.raises(ReciprocalResolutionError) as exc_info:
        resolver.resolve("Anna Smith", "Ben Smith", "Mentor")

    assert "Ben Smith" in exc_info.value.notice
    assert "mentor" not in inverse_store.snapshot()


def test_unknown_character_raises(resolver: ReciprocalResolver) -> None:
    with pytest.raises(UnknownCharacterError):
        resolver.resolve("Anna Smith", "Nobody", "Parent")


def test_blank_role_raises(resolver: ReciprocalResolver) -> None:
    with pytest.raises(ValueError):
        resolver.resolve("Anna Smith", "Ben Smith", "  ")


def test_missing_prompt_raises(
    fake_character_store: FakeCharacterStore, inverse_store: LocalInversePairStore
) -> None:
    resolver = ReciprocalResolver(
        character_store=fake_character_store, inverse_store=inverse_store
    )

    with pytest.raises(ValueError):
        resolver.resolve("Anna Smith", "Ben Smith", "Parent")


def test_call_prompt_overrides_default(
    resolver: ReciprocalResolver, fake_prompt: FakePrompt
) -> None:
    override = FakePrompt(answers=["Daughter"])

    resolution = resolver.resolve("Anna Smith", "Ben Smith", "Parent", prompt=override)

    assert resolution is not None and resolution.inverse_role == "Daughter"
    assert fake_prompt.requests == []
    assert len(override.requests) == 1


class SlowCharacterStore(FakeCharacterStore):
    """Fake store whose writes take long enough for unlocked writers to interleave."""

    def write_document(self, character_id: str, content: str) -> None:
        time.sleep(0.05)
        super().write_document(character_id, content)


class AnswerByRole:
    def __init__(self, answers: dict[str, str]) -> None:
        self.answers = answers

    def ask(self, request: InverseRolePrompt) -> str | None:
        return self.answers.get(request.role)


def test_sibling_inference_leaves_sheet_with_display_name_link_untouched(
    inverse_store: LocalInversePairStore,
) -> None:
    store = FakeCharacterStore(
        {
            "anna": "# Anna Smith\n\n## Relationships\n- **Parent**: [[Ben Smith]]\n",
            "ben": "# Ben Smith\n\n## Relationships\n- **Child**: [[Anna Smith]]\n",
        }
    )
    before = store.documents["ben"]
    resolver = ReciprocalResolver(character_store=store, inverse_store=inverse_store)

    resolution = resolver.resolve("anna", "ben", "Parent")

    assert resolution is not None
    assert resolution.method == "sibling"
    assert resolution.inverse_role == "Child"
    assert not resolution.document_updated
    assert store.documents["ben"] == before
    assert store.writes == []


def test_concurrent_resolutions_on_one_target_keep_both_lines(
    sheets: dict[str, str], inverse_store: LocalInversePairStore
) -> None:
    store = SlowCharacterStore(sheets)
    resolver = ReciprocalResolver(
        character_store=store,
        inverse_store=inverse_store,
        prompt=AnswerByRole({"Mentor": "Student", "Rival": "Nemesis"}),
    )

    with ThreadPoolExecutor(max_workers=2) as executor:
        futures = [
            executor.submit(resolver.resolve, "Anna Smith", "Ben Smith", "Mentor"),
            executor.submit(resolver.resolve, "Cara Jones", "Ben Smith", "Rival"),
        ]
        resolutions = [future.result() for future in futures]

    assert all(r is not None and r.document_updated for r in resolutions)
    ben = store.get_record("Ben Smith")
    assert ben.relationships["Student"] == ["[[Anna Smith]]"]
    assert ben.relationships["Nemesis"] == ["[[Cara Jones]]"]
    assert store.writes == ["Ben Smith", "Ben Smith"]
    snapshot = inverse_store.snapshot()
    assert snapshot.are_inverse("mentor", "student")
    assert snapshot.are_inverse("rival", "nemesis")
