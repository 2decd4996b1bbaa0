from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from castmap.api.endpoints import get_endpoints_router
from castmap.character_store.base import CharacterStore
from castmap.graph.orchestrator import CharacterMapOrchestrator
from castmap.inverse_pairs.base import InversePairStore
from castmap.relationships.reciprocal import ReciprocalResolver


def create_app(
    *,
    character_store: CharacterStore,
    inverse_store: InversePairStore,
    orchestrator: CharacterMapOrchestrator,
    resolver: ReciprocalResolver,
    suggestion_limit: int = 5,
) -> FastAPI:
    """Create FastAPI app."""
    app = FastAPI()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(
        router=get_endpoints_router(
            character_store=character_store,
            inverse_store=inverse_store,
            orchestrator=orchestrator,
            resolver=resolver,
            suggestion_limit=suggestion_limit,
        )
    )

    return app
