import base64
import os
import tempfile
from pathlib import Path
from typing import Generator

os.environ.setdefault("AUTH_USERNAME", "admin")
os.environ.setdefault("AUTH_PASSWORD", "password")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from castmap.api import create_app  # noqa: E402
from castmap.domain.character import CharacterRecord  # noqa: E402
from castmap.graph.orchestrator import CharacterMapOrchestrator  # noqa: E402
from castmap.inverse_pairs.local import LocalInversePairStore  # noqa: E402
from castmap.relationships.reciprocal import ReciprocalResolver  # noqa: E402
from tests.fakes import FakeCharacterStore, FakePrompt  # noqa: E402

ANNA_SHEET = """# Anna Smith

## General Information
- **Surname**: Smith
- **Role**: Main

## Relationships
- **Parent**: [[Ben Smith]]
"""

BEN_SHEET = """# Ben Smith

## General Information
- **Surname**: Smith
- **Role**: Side

## Relationships
"""

CARA_SHEET = """# Cara Jones

## General Information
- **Surname**: Jones

## Relationships
- **Rival**: [[Dana Jones]]
"""

DANA_SHEET = """# Dana Jones

## General Information
- **Surname**: Jones

## Relationships
- **Rival**: [[Cara Jones]]
"""


@pytest.fixture
def family_records() -> list[CharacterRecord]:
    """Two explicit families with reciprocal mentions."""
    return [
        CharacterRecord(
            id="Anna Smith", surname="Smith", relationships={"Parent": ["[[Ben Smith]]"]}
        ),
        CharacterRecord(
            id="Ben Smith", surname="Smith", relationships={"Child": ["[[Anna Smith]]"]}
        ),
        CharacterRecord(
            id="Cara Jones", surname="Jones", relationships={"Rival": ["[[Dana Jones]]"]}
        ),
        CharacterRecord(
            id="Dana Jones", surname="Jones", relationships={"Rival": ["[[Cara Jones]]"]}
        ),
    ]


@pytest.fixture
def sheets() -> dict[str, str]:
    return {
        "Anna Smith": ANNA_SHEET,
        "Ben Smith": BEN_SHEET,
        "Cara Jones": CARA_SHEET,
        "Dana Jones": DANA_SHEET,
    }


@pytest.fixture
def fake_character_store(sheets: dict[str, str]) -> FakeCharacterStore:
    return FakeCharacterStore(sheets)


@pytest.fixture
def inverse_store() -> LocalInversePairStore:
    return LocalInversePairStore.from_data({"parent": ["child"]})


@pytest.fixture
def fake_prompt() -> FakePrompt:
    return FakePrompt(answers=["Child"])


@pytest.fixture
def resolver(
    fake_character_store: FakeCharacterStore,
    inverse_store: LocalInversePairStore,
    fake_prompt: FakePrompt,
) -> ReciprocalResolver:
    return ReciprocalResolver(
        character_store=fake_character_store,
        inverse_store=inverse_store,
        prompt=fake_prompt,
    )


@pytest.fixture(autouse=True)
def mock_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    """Override settings for testing."""
    monkeypatch.setattr("castmap.config.settings.auth_username", "admin")
    monkeypatch.setattr("castmap.config.settings.auth_password", "password")


@pytest.fixture
def test_client(
    fake_character_store: FakeCharacterStore,
    inverse_store: LocalInversePairStore,
) -> TestClient:
    """Create test client with fake implementations."""
    orchestrator = CharacterMapOrchestrator(
        character_store=fake_character_store, inverse_store=inverse_store
    )
    resolver = ReciprocalResolver(
        character_store=fake_character_store, inverse_store=inverse_store
    )
    app = create_app(
        character_store=fake_character_store,
        inverse_store=inverse_store,
        orchestrator=orchestrator,
        resolver=resolver,
    )
    credentials = base64.b64encode(b"admin:password").decode()
    return TestClient(app, headers={"Authorization": f"Basic {credentials}"})


@pytest.fixture
def temp_characters_base() -> Generator[Path, None, None]:
    """Create a temporary directory used when testing the local stores."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def characters_directory(temp_characters_base: Path, sheets: dict[str, str]) -> Path:
    """Create a characters folder holding the sample sheets."""
    characters_dir = temp_characters_base / "characters"
    (characters_dir / "Jones").mkdir(parents=True)
    for name, content in sheets.items():
        folder = characters_dir / "Jones" if name.endswith("Jones") else characters_dir
        (folder / f"{name}.md").write_text(content, encoding="utf-8")
    return characters_dir
