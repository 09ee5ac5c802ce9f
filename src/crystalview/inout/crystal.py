"""Unified structure file loading and renderer export.

Extended Summary
----------------
`parse_crystal` picks the parser from the file suffix so callers can
open CIF and pw.x output alike. `structure_to_dict` and
`structure_to_json` produce the plain ``{lattice_vertices, atoms}``
document the renderer consumes.

Routine Listings
----------------
CIF_SUFFIXES : tuple
    Suffixes routed to the CIF parser
ESPRESSO_SUFFIXES : tuple
    Suffixes routed to the pw.x output parser
parse_crystal : function
    Parse a CIF or pw.x output file into a list of structures
structure_to_dict : function
    Convert a CrystalStructure into JSON-ready Python objects
structure_to_json : function
    Serialise one or more structures to a JSON string
"""

import json
import logging
from pathlib import Path

from beartype.typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from crystalview._typing_utils import beartype
from crystalview.types import AtomStyle, CrystalStructure

from .atom_config import load_atom_config
from .cif import parse_cif
from .espresso import parse_espresso_output

logger = logging.getLogger(__name__)

CIF_SUFFIXES: Tuple[str, ...] = (".cif",)
ESPRESSO_SUFFIXES: Tuple[str, ...] = (".out", ".pwo", ".log")


@beartype
def parse_crystal(
    file_path: Union[str, Path],
    atom_config: Optional[Mapping[str, AtomStyle]] = None,
    combinatorial: bool = False,
) -> List[CrystalStructure]:
    """
    Description
    -----------
    Parse a structure file, choosing the parser from its suffix.

    Parameters
    ----------
    - `file_path` (Union[str, Path]):
        A ``.cif`` file or a pw.x output (``.out``, ``.pwo``, ``.log``).
    - `atom_config` (Optional[Mapping[str, AtomStyle]]):
        Label -> style mapping. If None, the default mapping is loaded once
        for this call.
    - `combinatorial` (bool):
        Also add edge and corner images during boundary replication.
        Default: False.

    Returns
    -------
    - `structures` (List[CrystalStructure]):
        One structure for a CIF file, zero or more for pw.x output.

    Raises
    ------
    - ValueError:
        If the suffix is not recognised.
    - CrystalViewError:
        Any error raised by the selected parser.
    """
    file_path = Path(file_path)
    suffix = file_path.suffix.lower()
    if suffix not in CIF_SUFFIXES + ESPRESSO_SUFFIXES:
        raise ValueError(
            f"Unsupported file type {suffix!r}: expected one of "
            f"{CIF_SUFFIXES + ESPRESSO_SUFFIXES}"
        )
    if atom_config is None:
        atom_config = load_atom_config()
    if suffix in CIF_SUFFIXES:
        logger.debug("Parsing %s as CIF", file_path)
        return [parse_cif(file_path, atom_config, combinatorial=combinatorial)]
    logger.debug("Parsing %s as pw.x output", file_path)
    return parse_espresso_output(file_path, atom_config, combinatorial=combinatorial)


@beartype
def structure_to_dict(structure: CrystalStructure) -> Dict[str, Any]:
    """
    Convert a structure into plain Python objects.

    The result has ``lattice_vertices`` as eight ``[x, y, z]`` lists and
    ``atoms`` as a list of ``{label, x, y, z, radius, color}`` dicts.
    """
    vertices = structure.lattice_vertices.tolist()
    positions = structure.atoms.positions.tolist()
    radii = structure.atoms.radii.tolist()
    atoms = [
        {
            "label": label,
            "x": position[0],
            "y": position[1],
            "z": position[2],
            "radius": radius,
            "color": color,
        }
        for label, position, radius, color in zip(
            structure.atoms.labels, positions, radii, structure.atoms.colors
        )
    ]
    return {"lattice_vertices": vertices, "atoms": atoms}


@beartype
def structure_to_json(
    structures: Union[CrystalStructure, Sequence[CrystalStructure]],
    indent: Optional[int] = None,
) -> str:
    """
    Serialise a structure, or a list of them, to a JSON string.

    A single structure becomes a JSON object; a sequence becomes a JSON
    array of objects.
    """
    if isinstance(structures, CrystalStructure):
        return json.dumps(structure_to_dict(structures), indent=indent)
    return json.dumps([structure_to_dict(s) for s in structures], indent=indent)
