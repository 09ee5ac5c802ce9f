"""Quantum ESPRESSO ``pw.x`` output parsing.

Extended Summary
----------------
A relaxation run prints a ``CELL_PARAMETERS`` block and an
``ATOMIC_POSITIONS`` block for every ionic step. Each pair becomes one
CrystalStructure, so a single output file can yield a whole trajectory
of renderable frames.

Routine Listings
----------------
parse_espresso_text : function
    Parse pw.x output text into a list of CrystalStructure frames
parse_espresso_output : function
    Parse a pw.x output file into a list of CrystalStructure frames

Notes
-----
Cell vectors are the printed rows multiplied by ``alat``, so lengths are in
Bohr. Atomic positions in ``alat``, ``bohr`` or ``angstrom`` units are
converted to fractional coordinates with the current cell before boundary
replication; ``crystal`` positions are already fractional.
"""

import logging
import re
from pathlib import Path

import jax.numpy as jnp
from beartype.typing import List, Mapping, NamedTuple, Optional, Tuple, Union
from jaxtyping import Array, Float

from crystalview._typing_utils import beartype
from crystalview.config import BOHR_TO_ANGSTROM, GEOMETRY_TOLERANCE
from crystalview.errors import AtomRowParseError, GeometryError, TagParseError
from crystalview.types import AtomStyle, CrystalStructure
from crystalview.ucell import cartesian_to_fractional

from .assembler import assemble_structure, read_source_text
from .atom_config import load_atom_config

logger = logging.getLogger(__name__)

CELL_HEADER = re.compile(r"CELL_PARAMETERS\s*\(\s*alat\s*=\s*([^)]*)\)")
POSITIONS_HEADER = re.compile(r"ATOMIC_POSITIONS\s*\(\s*([A-Za-z_]+)\s*\)")
END_MARKER = "End final coordinates"
SUPPORTED_UNITS: Tuple[str, ...] = ("crystal", "alat", "bohr", "angstrom")

_COORDINATE_FIELDS: Tuple[str, ...] = ("x", "y", "z")


class _Cell(NamedTuple):
    vectors: Float[Array, "3 3"]
    alat: float


class _PositionBlock(NamedTuple):
    units: str
    labels: List[str]
    positions: List[Tuple[float, float, float]]
    header_line: int


def _parse_float(token: str) -> Optional[float]:
    try:
        return float(token)
    except ValueError:
        return None


def _read_cell_block(lines: List[str], header_index: int, alat: float) -> _Cell:
    rows: List[List[float]] = []
    for offset in range(1, 4):
        index = header_index + offset
        if index >= len(lines):
            raise TagParseError(
                "CELL_PARAMETERS",
                f"expected 3 rows of cell vectors, found {len(rows)}",
                header_index + 1,
            )
        tokens = lines[index].split()
        values = [_parse_float(t) for t in tokens[:3]]
        if len(values) < 3 or any(v is None for v in values):
            raise TagParseError(
                "CELL_PARAMETERS",
                f"row {lines[index].strip()!r} is not three numbers",
                index + 1,
            )
        rows.append(values)
    vectors = jnp.asarray(rows, dtype=jnp.float64) * alat
    if abs(float(jnp.linalg.det(vectors))) < GEOMETRY_TOLERANCE:
        raise GeometryError(
            f"cell vectors at line {header_index + 1} enclose zero volume"
        )
    return _Cell(vectors=vectors, alat=alat)


def _read_position_block(
    lines: List[str], header_index: int, units: str
) -> Tuple[_PositionBlock, int]:
    labels: List[str] = []
    positions: List[Tuple[float, float, float]] = []
    index = header_index + 1
    while index < len(lines):
        line = lines[index].strip()
        if not line or END_MARKER in line:
            break
        tokens = line.split()
        if len(tokens) < 4:
            raise AtomRowParseError(
                _COORDINATE_FIELDS[len(tokens) - 1],
                f"expected 'label x y z', row has only {len(tokens)} tokens",
                index + 1,
            )
        coordinates: List[float] = []
        for field, token in zip(_COORDINATE_FIELDS, tokens[1:4]):
            value = _parse_float(token)
            if value is None:
                raise AtomRowParseError(
                    field, f"coordinate {token!r} is not a number", index + 1, token
                )
            coordinates.append(value)
        labels.append(tokens[0])
        positions.append((coordinates[0], coordinates[1], coordinates[2]))
        index += 1
    block = _PositionBlock(
        units=units, labels=labels, positions=positions, header_line=header_index + 1
    )
    return block, index


def _to_fractional(block: _PositionBlock, cell: _Cell) -> Float[Array, "N 3"]:
    positions = jnp.asarray(block.positions, dtype=jnp.float64).reshape(
        len(block.positions), 3
    )
    if block.units == "crystal":
        return positions
    if block.units == "alat":
        cart = positions * cell.alat
    elif block.units == "bohr":
        cart = positions
    elif block.units == "angstrom":
        cart = positions / BOHR_TO_ANGSTROM
    else:
        raise AtomRowParseError(
            "units",
            f"unsupported ATOMIC_POSITIONS units, expected one of {SUPPORTED_UNITS}",
            block.header_line,
            block.units,
        )
    return cartesian_to_fractional(cart, cell.vectors)


@beartype
def parse_espresso_text(
    output_text: str,
    atom_config: Mapping[str, AtomStyle],
    combinatorial: bool = False,
) -> List[CrystalStructure]:
    """
    Description
    -----------
    Parse pw.x output text into one CrystalStructure per cell/positions
    pair.

    Parameters
    ----------
    - `output_text` (str):
        Raw pw.x output.
    - `atom_config` (Mapping[str, AtomStyle]):
        Label -> style mapping used for radius and colour.
    - `combinatorial` (bool):
        Also add edge and corner images during boundary replication.
        Default: False.

    Returns
    -------
    - `structures` (List[CrystalStructure]):
        Zero or more frames in file order.

    Raises
    ------
    - TagParseError:
        If a CELL_PARAMETERS header has a non-numeric alat or its three
        rows are missing or malformed.
    - AtomRowParseError:
        If a position row is too short, a coordinate is not a number, or
        the position units are not supported.
    - GeometryError:
        If a cell encloses zero volume.

    Flow
    ----
    - Scan lines for CELL_PARAMETERS headers and read the next three rows
    - Scan lines for ATOMIC_POSITIONS headers and read rows until a blank
      line, the end marker or end of text
    - Pair each position block with the most recent unconsumed cell
    - Assemble each pair with the shared pipeline
    """
    lines = output_text.splitlines()
    structures: List[CrystalStructure] = []
    pending_cell: Optional[_Cell] = None
    index = 0
    while index < len(lines):
        line = lines[index]
        cell_match = CELL_HEADER.search(line)
        if cell_match:
            alat = _parse_float(cell_match.group(1).strip())
            if alat is None:
                raise TagParseError(
                    "CELL_PARAMETERS",
                    f"alat {cell_match.group(1).strip()!r} is not a number",
                    index + 1,
                )
            pending_cell = _read_cell_block(lines, index, alat)
            index += 4
            continue
        positions_match = POSITIONS_HEADER.search(line)
        if positions_match:
            block, index = _read_position_block(
                lines, index, positions_match.group(1).lower()
            )
            if pending_cell is None:
                logger.debug(
                    "Skipping ATOMIC_POSITIONS at line %d: no preceding cell",
                    block.header_line,
                )
                continue
            structures.append(
                assemble_structure(
                    pending_cell.vectors,
                    block.labels,
                    _to_fractional(block, pending_cell),
                    atom_config,
                    combinatorial=combinatorial,
                )
            )
            pending_cell = None
            continue
        index += 1
    logger.debug("Found %d cell/positions pairs", len(structures))
    return structures


@beartype
def parse_espresso_output(
    output_path: Union[str, Path],
    atom_config: Optional[Mapping[str, AtomStyle]] = None,
    combinatorial: bool = False,
) -> List[CrystalStructure]:
    """
    Description
    -----------
    Parse a pw.x output file into CrystalStructure frames.

    Parameters
    ----------
    - `output_path` (Union[str, Path]):
        Path to the output file.
    - `atom_config` (Optional[Mapping[str, AtomStyle]]):
        Label -> style mapping. If None, the default mapping is loaded for
        this call.
    - `combinatorial` (bool):
        Also add edge and corner images during boundary replication.
        Default: False.

    Returns
    -------
    - `structures` (List[CrystalStructure]):
        Zero or more frames in file order.

    Raises
    ------
    - MetadataError:
        If the default mapping cannot be loaded.
    - SourceReadError:
        If the file cannot be read.
    - TagParseError, AtomRowParseError, GeometryError:
        As for `parse_espresso_text`.
    """
    if atom_config is None:
        atom_config = load_atom_config()
    output_text = read_source_text(output_path)
    structures = parse_espresso_text(
        output_text, atom_config, combinatorial=combinatorial
    )
    logger.info("Parsed %s: %d structures", output_path, len(structures))
    return structures
