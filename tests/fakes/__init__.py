from tests.fakes.fake_character_store import FakeCharacterStore
from tests.fakes.fake_prompt import FakePrompt

__all__ = ["FakeCharacterStore", "FakePrompt"]
