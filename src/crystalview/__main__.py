"""Command-line interface: print the renderable JSON for a structure file."""
import argparse
import logging
import sys
from typing import List, Optional

from crystalview.errors import CrystalViewError
from crystalview.inout import load_atom_config, parse_crystal, structure_to_json
from crystalview.logging_config import setup_logging

logger = logging.getLogger("crystalview.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="crystalview",
        description="Parse a CIF or pw.x output file into lattice vertices and atoms.",
    )
    parser.add_argument("path", help="CIF (.cif) or pw.x output (.out, .pwo, .log) file")
    parser.add_argument(
        "--atom-config",
        default=None,
        help="JSON mapping of atom label to radius and color",
    )
    parser.add_argument(
        "--combinatorial",
        action="store_true",
        help="also add edge and corner images of boundary atoms",
    )
    parser.add_argument("--indent", type=int, default=None, help="JSON indent")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(getattr(logging, args.log_level))
    try:
        atom_config = load_atom_config(args.atom_config)
        structures = parse_crystal(
            args.path, atom_config, combinatorial=args.combinatorial
        )
    except (CrystalViewError, ValueError) as e:
        logger.error("%s", e)
        return 1
    print(structure_to_json(structures, indent=args.indent))
    return 0


if __name__ == "__main__":
    sys.exit(main())
