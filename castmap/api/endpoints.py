from typing import Literal

from fastapi import APIRouter, Depends, HTTPException
from loguru import logger

from castmap.api.auth import verify_credentials
from castmap.api.schemas import (
    CharacterMapResponse,
    ReciprocalRequest,
    ReciprocalResponse,
    RequestPrompt,
)
from castmap.character_store.base import CharacterStore
from castmap.graph.export import to_cytoscape_elements
from castmap.graph.orchestrator import CharacterMapOrchestrator
from castmap.inverse_pairs.base import InversePairStore
from castmap.prompts.base import rank_suggestions
from castmap.relationships.reciprocal import (
    ReciprocalResolutionError,
    ReciprocalResolver,
    UnknownCharacterError,
)
from castmap.relationships.suggestions import known_role_labels, seed_inverses


def _create_character_map_endpoint(orchestrator: CharacterMapOrchestrator):
    """Create the character map endpoint handler."""

    def get_character_map(
        format: Literal["model", "cytoscape"] = "model",
        _: str = Depends(verify_credentials),
    ) -> CharacterMapResponse:
        try:
            character_map = orchestrator.rebuild()
            if format == "cytoscape":
                return CharacterMapResponse(
                    format=format, data=to_cytoscape_elements(character_map)
                )
            return CharacterMapResponse(format=format, data=character_map.model_dump())
        except Exception as e:
            logger.error(f"Error building character map: {str(e)}")
            raise HTTPException(status_code=500, detail="Failed to build character map") from e

    return get_character_map


def _create_suggestions_endpoint(
    character_store: CharacterStore, inverse_store: InversePairStore, limit: int
):
    """Create the inverse role suggestions endpoint handler."""

    def get_suggestions(
        role: str,
        query: str = "",
        _: str = Depends(verify_credentials),
    ) -> list[str]:
        try:
            known_roles = known_role_labels(character_store.get_records())
        except OSError as e:
            logger.error(f"Error reading character sheets: {str(e)}")
            raise HTTPException(status_code=500, detail="Internal server error") from e
        seeds = seed_inverses(role, inverse_store.snapshot(), known_roles)
        return rank_suggestions(seeds, known_roles, query, limit)

    return get_suggestions


def _create_reciprocal_endpoint(resolver: ReciprocalResolver):
    """Create the reciprocal relationship endpoint handler."""

    def resolve_reciprocal(
        body: ReciprocalRequest,
        _: str = Depends(verify_credentials),
    ) -> ReciprocalResponse:
        prompt = RequestPrompt(body.inverse_role)
        try:
            resolution = resolver.resolve(
                body.source_id, body.target_id, body.role, prompt=prompt
            )
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e
        except UnknownCharacterError as e:
            logger.warning(e.notice)
            raise HTTPException(status_code=404, detail=e.notice) from e
        except ReciprocalResolutionError as e:
            logger.error(f"Error resolving reciprocal relationship: {e.notice}")
            raise HTTPException(status_code=409, detail=e.notice) from e

        if resolution is not None:
            return ReciprocalResponse(status="resolved", resolution=resolution)
        if prompt.request is not None and body.inverse_role is None:
            return ReciprocalResponse(
                status="needs_input",
                question=prompt.request.question(),
                suggestions=prompt.request.suggest(),
            )
        return ReciprocalResponse(status="cancelled")

    return resolve_reciprocal


def get_endpoints_router(
    *,
    character_store: CharacterStore,
    inverse_store: InversePairStore,
    orchestrator: CharacterMapOrchestrator,
    resolver: ReciprocalResolver,
    suggestion_limit: int = 5,
) -> APIRouter:
    router = APIRouter()

    @router.get("/health")
    async def health_check():
        return {"status": "healthy"}

    @router.get("/api/relationships/inverse-pairs")
    def get_inverse_pairs(_: str = Depends(verify_credentials)) -> dict[str, list[str]]:
        return inverse_store.snapshot().to_dict()

    router.get("/api/character-map")(_create_character_map_endpoint(orchestrator))
    router.get("/api/relationships/suggestions")(
        _create_suggestions_endpoint(character_store, inverse_store, suggestion_limit)
    )
    router.post("/api/relationships/reciprocal")(_create_reciprocal_endpoint(resolver))

    return router
