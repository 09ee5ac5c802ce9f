"""CIF parsing into renderable crystal structures.

Extended Summary
----------------
Reads the subset of CIF needed to draw a unit cell: the six scalar cell
tags and atom-site rows of the common ``Label Site ... x y z`` shape.
Loop headers, quoted values and symmetry operators are not interpreted.

Routine Listings
----------------
CELL_TAGS : tuple
    The six recognised lattice tags in parameter order
AtomRow : class
    A recognised atom-site row: label, fractional position, line number
parse_cif_float : function
    Parse a CIF numeric token, accepting a trailing uncertainty
extract_cell_params : function
    Read the six lattice tags from CIF text
is_atom_row : function
    Heuristic recognition of atom-site rows
parse_atom_rows : function
    Tokenize every atom-site row into an AtomRow
parse_cif_text : function
    Parse CIF text into a CrystalStructure
parse_cif : function
    Parse a CIF file into a CrystalStructure
"""

import logging
import math
import re
from pathlib import Path

import jax.numpy as jnp
from beartype.typing import Dict, List, Mapping, NamedTuple, Optional, Tuple, Union

from crystalview._typing_utils import beartype
from crystalview.errors import AtomRowParseError, TagParseError
from crystalview.types import AtomStyle, CrystalStructure, LatticeParameters
from crystalview.ucell import cell_vectors_from_parameters

from .assembler import assemble_structure, read_source_text
from .atom_config import load_atom_config

logger = logging.getLogger(__name__)

CELL_TAGS: Tuple[Tuple[str, str], ...] = (
    ("_cell_length_a", "a"),
    ("_cell_length_b", "b"),
    ("_cell_length_c", "c"),
    ("_cell_angle_alpha", "alpha"),
    ("_cell_angle_beta", "beta"),
    ("_cell_angle_gamma", "gamma"),
)

# Column positions within an atom-site row
LABEL_COLUMN = 0
COORDINATE_COLUMNS: Tuple[Tuple[str, int], ...] = (("x", 3), ("y", 4), ("z", 5))

_SPECIES_TOKEN = re.compile(r"[A-Za-z]+")
_SITE_TOKEN = re.compile(r"[A-Za-z]+\d")
# Standard uncertainty suffix, e.g. 5.4307(2)
_UNCERTAINTY = re.compile(r"\(\d+\)$")


class AtomRow(NamedTuple):
    """A recognised atom-site row."""

    label: str
    position: Tuple[float, float, float]
    line_number: int


def parse_cif_float(token: str) -> Optional[float]:
    """
    Parse a CIF number, or return None if `token` is not one.

    A trailing standard uncertainty such as ``(3)`` is dropped.
    Non-finite values are rejected.
    """
    try:
        value = float(_UNCERTAINTY.sub("", token))
    except ValueError:
        return None
    if not math.isfinite(value):
        return None
    return value


@beartype
def extract_cell_params(cif_text: str) -> LatticeParameters:
    """
    Description
    -----------
    Read the six lattice tags from CIF text.

    Parameters
    ----------
    - `cif_text` (str):
        Raw CIF contents.

    Returns
    -------
    - `params` (LatticeParameters):
        Cell lengths and angles. Tags that never appear are 0.0.

    Raises
    ------
    - TagParseError:
        If a tag line has no second token or that token is not a number.

    Notes
    -----
    Tags are matched by line prefix and the value is the second
    whitespace-delimited token. A repeated tag overwrites the earlier one.
    """
    values: Dict[str, float] = {field: 0.0 for _, field in CELL_TAGS}
    seen = 0
    for line_number, line in enumerate(cif_text.splitlines(), start=1):
        for tag, field in CELL_TAGS:
            if not line.startswith(tag):
                continue
            tokens = line.split()
            if len(tokens) < 2:
                raise TagParseError(tag, "value is missing", line_number)
            value = parse_cif_float(tokens[1])
            if value is None:
                raise TagParseError(
                    tag, f"value {tokens[1]!r} is not a number", line_number
                )
            values[field] = value
            seen += 1
            break
    logger.debug("Read %d cell tags", seen)
    return LatticeParameters(**values)


def is_atom_row(line: str) -> bool:
    """
    True for rows shaped like ``Si Si1 ...``: an alphabetic species
    token followed by a site label of letters then a digit.
    """
    tokens = line.split(maxsplit=2)
    if len(tokens) < 2:
        return False
    return bool(
        _SPECIES_TOKEN.fullmatch(tokens[0]) and _SITE_TOKEN.match(tokens[1])
    )


def _tokenize_atom_row(line: str, line_number: int) -> AtomRow:
    tokens = line.split()
    coordinates: List[float] = []
    for field, column in COORDINATE_COLUMNS:
        if column >= len(tokens):
            raise AtomRowParseError(
                field,
                f"expected a coordinate in column {column}, "
                f"row has only {len(tokens)} tokens",
                line_number,
            )
        value = parse_cif_float(tokens[column])
        if value is None:
            raise AtomRowParseError(
                field,
                f"coordinate {tokens[column]!r} is not a number",
                line_number,
                tokens[column],
            )
        coordinates.append(value)
    return AtomRow(
        label=tokens[LABEL_COLUMN],
        position=(coordinates[0], coordinates[1], coordinates[2]),
        line_number=line_number,
    )


@beartype
def parse_atom_rows(cif_text: str) -> List[AtomRow]:
    """
    Description
    -----------
    Tokenize every atom-site row in CIF text.

    Parameters
    ----------
    - `cif_text` (str):
        Raw CIF contents.

    Returns
    -------
    - `rows` (List[AtomRow]):
        One entry per recognised row, in source order. The label is
        column 0 and the fractional x, y, z are columns 3, 4 and 5.

    Raises
    ------
    - AtomRowParseError:
        If a recognised row is too short or a coordinate is not a number.
        Rows that are not recognised are skipped silently.
    """
    rows = [
        _tokenize_atom_row(line, line_number)
        for line_number, line in enumerate(cif_text.splitlines(), start=1)
        if is_atom_row(line)
    ]
    logger.debug("Read %d atom rows", len(rows))
    return rows


@beartype
def parse_cif_text(
    cif_text: str,
    atom_config: Mapping[str, AtomStyle],
    combinatorial: bool = False,
) -> CrystalStructure:
    """
    Description
    -----------
    Parse CIF text into a recentred CrystalStructure.

    Parameters
    ----------
    - `cif_text` (str):
        Raw CIF contents.
    - `atom_config` (Mapping[str, AtomStyle]):
        Label -> style mapping used for radius and colour.
    - `combinatorial` (bool):
        Also add edge and corner images during boundary replication.
        Default: False.

    Returns
    -------
    - `structure` (CrystalStructure):
        Lattice vertices and atoms centred on the cell centroid.

    Raises
    ------
    - TagParseError, AtomRowParseError:
        On malformed tag or atom rows.
    - GeometryError:
        If the cell angles do not define a basis.
    """
    params = extract_cell_params(cif_text)
    rows = parse_atom_rows(cif_text)
    cell_vectors = cell_vectors_from_parameters(params)
    frac_positions = jnp.asarray(
        [row.position for row in rows], dtype=jnp.float64
    ).reshape(len(rows), 3)
    return assemble_structure(
        cell_vectors,
        [row.label for row in rows],
        frac_positions,
        atom_config,
        combinatorial=combinatorial,
    )


@beartype
def parse_cif(
    cif_path: Union[str, Path],
    atom_config: Optional[Mapping[str, AtomStyle]] = None,
    combinatorial: bool = False,
) -> CrystalStructure:
    """
    Description
    -----------
    Parse a CIF file into a recentred CrystalStructure.

    Parameters
    ----------
    - `cif_path` (Union[str, Path]):
        Path to the CIF file.
    - `atom_config` (Optional[Mapping[str, AtomStyle]]):
        Label -> style mapping. If None, the default mapping is loaded for
        this call.
    - `combinatorial` (bool):
        Also add edge and corner images during boundary replication.
        Default: False.

    Returns
    -------
    - `structure` (CrystalStructure):
        Lattice vertices and atoms centred on the cell centroid.

    Raises
    ------
    - MetadataError:
        If the default mapping cannot be loaded. Raised before the file
        is read.
    - SourceReadError:
        If the file cannot be read.
    - TagParseError, AtomRowParseError, GeometryError:
        As for `parse_cif_text`.
    """
    if atom_config is None:
        atom_config = load_atom_config()
    cif_text = read_source_text(cif_path)
    structure = parse_cif_text(cif_text, atom_config, combinatorial=combinatorial)
    logger.info("Parsed %s: %d atoms", cif_path, structure.n_atoms)
    return structure
