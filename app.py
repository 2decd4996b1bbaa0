import sys

from loguru import logger

from castmap.api import create_app
from castmap.character_store.local import LocalCharacterStore
from castmap.config import settings
from castmap.graph.builder import CharacterMapBuilder
from castmap.graph.orchestrator import CharacterMapOrchestrator
from castmap.inverse_pairs.local import LocalInversePairStore
from castmap.relationships.reciprocal import ReciprocalResolver

logger.configure(handlers=[{"sink": sys.stderr, "level": settings.log_level}])

logger.info(f"Serving character map for {settings.characters_dir}")
character_store = LocalCharacterStore(settings.characters_dir)
inverse_store = LocalInversePairStore(settings.inverse_pairs_path)
orchestrator = CharacterMapOrchestrator(
    character_store=character_store,
    inverse_store=inverse_store,
    builder=CharacterMapBuilder(
        extra_family_roles=settings.extra_family_roles,
        infer_inverse_pairs=settings.infer_inverse_pairs,
    ),
)
resolver = ReciprocalResolver(
    character_store=character_store,
    inverse_store=inverse_store,
    relationship_section=settings.relationship_section,
    suggestion_limit=settings.suggestion_limit,
    learn_sibling_pairs=settings.learn_sibling_pairs,
)
app = create_app(
    character_store=character_store,
    inverse_store=inverse_store,
    orchestrator=orchestrator,
    resolver=resolver,
    suggestion_limit=settings.suggestion_limit,
)
