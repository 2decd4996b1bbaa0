"""Resolution of the reverse side of a newly linked relationship."""

import threading
from typing import Literal

from loguru import logger
from pydantic import BaseModel

from castmap.character_store.base import CharacterNotFoundError, CharacterStore
from castmap.domain.character import CharacterRecord
from castmap.inverse_pairs.base import InversePairStore
from castmap.parsing.sheet_writer import add_relationship_line
from castmap.prompts.base import InverseRolePrompt, RolePrompt
from castmap.relationships.name_resolver import NameResolver
from castmap.relationships.suggestions import known_role_labels, seed_inverses


class ReciprocalResolutionError(Exception):
    """Raised when the reverse relationship cannot be written.

    Attributes:
        notice: Message suitable for showing to the user
    """

    def __init__(self, notice: str) -> None:
        super().__init__(notice)
        self.notice = notice


class UnknownCharacterError(ReciprocalResolutionError):
    """Raised when the source or target character is not tracked."""


class ReciprocalResolution(BaseModel):
    """Outcome of a completed reciprocal resolution."""

    source_id: str
    target_id: str
    role: str
    inverse_role: str
    method: Literal["sibling", "user"]
    document_updated: bool
    learned_pair: bool


class ReciprocalResolver:
    """Keeps both sides of a relationship and the inverse-pair dictionary consistent.

    Triggered after character A's sheet gained a link to B under role R. The
    resolver finds the role B uses for A, writes `- **R2**: [[A]]` into B's sheet
    and learns (R, R2) as an inverse pair.
    """

    def __init__(
        self,
        *,
        character_store: CharacterStore,
        inverse_store: InversePairStore,
        prompt: RolePrompt | None = None,
        relationship_section: str = "Relationships",
        suggestion_limit: int = 5,
        learn_sibling_pairs: bool = True,
    ):
        """Initialize the resolver with its collaborators.

        Args:
            character_store: Store used to read records and update the target's sheet
            inverse_store: Store holding the learned inverse-pair dictionary
            prompt: Default collaborator asking the user for the inverse role
            relationship_section: Heading of the sheet section holding relationships
            suggestion_limit: Maximum number of non-seeded suggestions
            learn_sibling_pairs: Whether roles found by sibling inference are learned too
        """
        self.character_store = character_store
        self.inverse_store = inverse_store
        self.prompt = prompt
        self.relationship_section = relationship_section
        self.suggestion_limit = suggestion_limit
        self.learn_sibling_pairs = learn_sibling_pairs

        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def resolve(
        self, source_id: str, target_id: str, role: str, *, prompt: RolePrompt | None = None
    ) -> ReciprocalResolution | None:
        """Resolve and write the inverse of `source --role--> target`.

        Args:
            source_id: Id of the character whose sheet gained the link
            target_id: Id of the linked character
            role: Role label of the new link
            prompt: Collaborator for this call, overriding the default one

        Returns:
            The resolution, or None when the user cancelled the prompt

        Raises:
            ValueError: If the role is blank, or a prompt is needed and none is set
            ReciprocalResolutionError: If a character cannot be located or the target
                sheet cannot be read or written
        """
        role = role.strip()
        if not role:
            raise ValueError("Relationship role must not be blank")

        with self._lock_for(target_id):
            records = self._get_records()
            source = self._find(records, source_id)
            target = self._find(records, target_id)

            method: Literal["sibling", "user"] = "sibling"
            inverse_role = self.infer_from_siblings(target, source.id, NameResolver(records))
            if inverse_role is None:
                inverse_role = self._ask_user(records, source, target, role, prompt or self.prompt)
                if inverse_role is None:
                    logger.info(f"Inverse of '{role}' for {target.id} -> {source.id} cancelled")
                    return None
                method = "user"
            else:
                logger.info(f"Inferred '{inverse_role}' as inverse of '{role}' from {target.id}")

            # The target already links back, so only a user-chosen role is written
            updated = False
            if method == "user":
                updated = self._write_inverse(target.id, inverse_role, source.file_id, records)

        learned = method == "user" or self.learn_sibling_pairs
        if learned:
            self.inverse_store.learn(role, inverse_role)

        return ReciprocalResolution(
            source_id=source.id,
            target_id=target.id,
            role=role,
            inverse_role=inverse_role,
            method=method,
            document_updated=updated,
            learned_pair=learned,
        )

    @staticmethod
    def infer_from_siblings(
        target: CharacterRecord, source_id: str, name_resolver: NameResolver
    ) -> str | None:
        """Find a role in the target's bag that already points back at the source.

        The first matching role in the target's document order wins.
        """
        for role, raw_refs in target.relationships.items():
            if not role.strip():
                continue
            if source_id in name_resolver.resolve_references(raw_refs):
                return role.strip()
        return None

    def _ask_user(
        self,
        records: list[CharacterRecord],
        source: CharacterRecord,
        target: CharacterRecord,
        role: str,
        prompt: RolePrompt | None,
    ) -> str | None:
        if prompt is None:
            raise ValueError("No prompt available to ask for the inverse role")
        known_roles = known_role_labels(records)
        request = InverseRolePrompt(
            source_name=source.display_name,
            target_name=target.display_name,
            role=role,
            seeds=seed_inverses(role, self.inverse_store.snapshot(), known_roles),
            known_roles=known_roles,
            limit=self.suggestion_limit,
        )
        answer = prompt.ask(request)
        if answer is None or not answer.strip():
            return None
        return answer.strip()

    def _write_inverse(
        self,
        target_id: str,
        inverse_role: str,
        source_name: str,
        records: list[CharacterRecord],
    ) -> bool:
        try:
            content = self.character_store.read_document(target_id)
            updated = add_relationship_line(
                content,
                role=inverse_role,
                name=source_name,
                section=self.relationship_section,
                name_resolver=NameResolver(records),
            )
            if updated == content:
                return False
            self.character_store.write_document(target_id, updated)
        except (CharacterNotFoundError, OSError, UnicodeDecodeError) as e:
            logger.error(f"Failed to update relationships of {target_id}: {e}")
            raise ReciprocalResolutionError(
                f"Could not update relationships of {target_id}."
            ) from e

        logger.info(f"Added '{inverse_role}: [[{source_name}]]' to {target_id}")
        return True

    def _get_records(self) -> list[CharacterRecord]:
        try:
            return self.character_store.get_records()
        except OSError as e:
            logger.error(f"Failed to read character sheets: {e}")
            raise ReciprocalResolutionError("Could not read character sheets.") from e

    @staticmethod
    def _find(records: list[CharacterRecord], character_id: str) -> CharacterRecord:
        for record in records:
            if record.id == character_id:
                return record
        raise UnknownCharacterError(f"Could not find character {character_id}.")

    def _lock_for(self, target_id: str) -> threading.Lock:
        with self._locks_guard:
            return self._locks.setdefault(target_id, threading.Lock())
