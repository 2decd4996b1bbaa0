from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Basic auth settings
    auth_username: str
    auth_password: str

    # Storage settings
    characters_dir: Path = Path("data/characters")
    inverse_pairs_path: str = "data/inverse_pairs.json"
    relationship_section: str = "Relationships"

    # Relationship settings
    suggestion_limit: int = 5
    extra_family_roles: list[str] = []  # localized family terms, e.g. ["mutter", "vater"]
    learn_sibling_pairs: bool = True
    infer_inverse_pairs: bool = True

    log_level: str = "INFO"  # Can be DEBUG, INFO, WARNING, ERROR, CRITICAL


settings = Settings()  # type: ignore
