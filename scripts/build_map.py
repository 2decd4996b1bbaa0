"""CLI for building the character map from a folder of character sheets and saving it as JSON"""

import argparse
import json
from pathlib import Path

from castmap.character_store.local import LocalCharacterStore
from castmap.config import settings
from castmap.graph.builder import CharacterMapBuilder
from castmap.graph.export import to_cytoscape_elements
from castmap.graph.orchestrator import CharacterMapOrchestrator
from castmap.inverse_pairs.local import LocalInversePairStore


def main(
    in_folder: str,
    inverse_pairs_path: str,
    outfile: str,
    cytoscape: bool,
) -> None:
    # Setup stores and services
    character_store = LocalCharacterStore(Path(in_folder))
    inverse_store = LocalInversePairStore(filepath=inverse_pairs_path)

    orchestrator = CharacterMapOrchestrator(
        character_store=character_store,
        inverse_store=inverse_store,
        builder=CharacterMapBuilder(
            extra_family_roles=settings.extra_family_roles,
            infer_inverse_pairs=settings.infer_inverse_pairs,
        ),
    )
    character_map = orchestrator.rebuild()

    data = to_cytoscape_elements(character_map) if cytoscape else character_map.model_dump()
    output = Path(outfile)
    output.parent.mkdir(parents=True, exist_ok=True)
    with open(output, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
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
    parser.add_argument(
        "--outfile", type=str, required=True, help="Output JSON file for the character map"
    )
    parser.add_argument(
        "--cytoscape",
        action="store_true",
        help="Write Cytoscape elements instead of the plain map model",
    )

    args = parser.parse_args()

    main(
        in_folder=args.in_folder,
        inverse_pairs_path=args.inverse_pairs,
        outfile=args.outfile,
        cytoscape=args.cytoscape,
    )
