"""CLI for linking one character to another and resolving the reverse relationship"""

import argparse
import sys
from pathlib import Path

from loguru import logger

from castmap.character_store.base import CharacterNotFoundError
from castmap.character_store.local import LocalCharacterStore
from castmap.config import settings
from castmap.inverse_pairs.local import LocalInversePairStore
from castmap.parsing.sheet_writer import add_relationship_line
from castmap.prompts.console import ConsolePrompt
from castmap.relationships.name_resolver import NameResolver
from castmap.relationships.reciprocal import ReciprocalResolutionError, ReciprocalResolver


def main(
    in_folder: str,
    inverse_pairs_path: str,
    source_id: str,
    target_id: str,
    role: str,
) -> int:
    character_store = LocalCharacterStore(Path(in_folder))
    inverse_store = LocalInversePairStore(filepath=inverse_pairs_path)

    try:
        target = character_store.get_record(target_id)
        content = character_store.read_document(source_id)
    except (CharacterNotFoundError, UnicodeDecodeError) as e:
        logger.error(str(e))
        return 1

    updated = add_relationship_line(
        content,
        role=role,
        name=target.file_id,
        section=settings.relationship_section,
        name_resolver=NameResolver(character_store.get_records()),
    )
    if updated != content:
        character_store.write_document(source_id, updated)

    resolver = ReciprocalResolver(
        character_store=character_store,
        inverse_store=inverse_store,
        prompt=ConsolePrompt(),
        relationship_section=settings.relationship_section,
        suggestion_limit=settings.suggestion_limit,
        learn_sibling_pairs=settings.learn_sibling_pairs,
    )
    try:
        resolution = resolver.resolve(source_id, target_id, role)
    except ReciprocalResolutionError as e:
        print(e.notice)
        return 1

    if resolution is None:
        print("No reverse relationship written.")
    else:
        print(f"{resolution.target_id}: {resolution.inverse_role} -> {resolution.source_id}")
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    parser.add_argument("source", type=str, help="Id of the character gaining the link")
    parser.add_argument("target", type=str, help="Id of the linked character")
    parser.add_argument("role", type=str, help="Role of the target for the source")
    parser.add_argument(
        "--in-folder",
        type=str,
        required=False,
        help="Folder containing character sheets",
        default=str(settings.characters_dir),
    )
    parser.add_argument(
        "--inverse-pairs",
        type=str,
        required=False,
        help="Learned inverse-pair dictionary file",
        default=settings.inverse_pairs_path,
    )

    args = parser.parse_args()

    sys.exit(
        main(
            in_folder=args.in_folder,
            inverse_pairs_path=args.inverse_pairs,
            source_id=args.source,
            target_id=args.target,
            role=args.role,
        )
    )
