"""Assemble parsed cell and atom data into a renderable structure.

Extended Summary
----------------
Both file parsers reduce their input to cell vectors plus labelled
fractional positions. This module runs the shared pipeline from there:
resolve atom styles, add boundary images, move to Cartesian space, build
the cell corners and recentre everything on the cell centroid.

Routine Listings
----------------
read_source_text : function
    Read a structure file as text, wrapping OS errors
assemble_structure : function
    Turn cell vectors and fractional atoms into a CrystalStructure

Notes
-----
The pipeline is all-or-nothing. Every stage returns new values and any
exception propagates unchanged, so no partially built structure escapes.
"""

import logging
from pathlib import Path

import jax.numpy as jnp
from beartype.typing import Mapping, Sequence, Tuple, Union
from jaxtyping import Array, Float

from crystalview._typing_utils import beartype, jaxtyped
from crystalview.errors import SourceReadError
from crystalview.types import (
    AtomSites,
    AtomStyle,
    CrystalStructure,
    create_atom_sites,
    create_crystal_structure,
)
from crystalview.ucell import (
    center_on_lattice,
    fractional_to_cartesian,
    lattice_vertices,
    replicate_boundary_atoms,
)

from .atom_config import resolve_atom_style

logger = logging.getLogger(__name__)


@beartype
def read_source_text(path: Union[str, Path]) -> str:
    """
    Description
    -----------
    Read a structure file as UTF-8 text.

    Parameters
    ----------
    - `path` (Union[str, Path]):
        File to read.

    Returns
    -------
    - `text` (str):
        File contents.

    Raises
    ------
    - SourceReadError:
        If the file is missing, unreadable or not valid UTF-8.
    """
    source_path = Path(path)
    if not source_path.is_file():
        raise SourceReadError(source_path, "file not found")
    try:
        return source_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise SourceReadError(source_path, str(e)) from e


@jaxtyped(typechecker=beartype)
def assemble_structure(
    cell_vectors: Float[Array, "3 3"],
    labels: Sequence[str],
    frac_positions: Float[Array, "N 3"],
    atom_config: Mapping[str, AtomStyle],
    combinatorial: bool = False,
) -> CrystalStructure:
    """
    Description
    -----------
    Build a recentred CrystalStructure from cell vectors and fractional
    atoms.

    Parameters
    ----------
    - `cell_vectors` (Float[Array, "3 3"]):
        Cell vectors as rows.
    - `labels` (Sequence[str]):
        One label per atom, in source order.
    - `frac_positions` (Float[Array, "N 3"]):
        Fractional coordinates, one row per label.
    - `atom_config` (Mapping[str, AtomStyle]):
        Read-only label -> style mapping.
    - `combinatorial` (bool):
        Forwarded to `replicate_boundary_atoms`. Default: False.

    Returns
    -------
    - `structure` (CrystalStructure):
        Cell corners and Cartesian atoms with the corner centroid at the
        origin.

    Flow
    ----
    - Resolve each label to an AtomStyle
    - Replicate boundary atoms in fractional space
    - Transform every atom to Cartesian coordinates
    - Compute the eight cell corners
    - Subtract the corner centroid from atoms and corners
    """
    styles: Tuple[AtomStyle, ...] = tuple(
        resolve_atom_style(label, atom_config) for label in labels
    )
    fractional_sites: AtomSites = create_atom_sites(
        positions=frac_positions,
        radii=jnp.asarray([s.radius for s in styles], dtype=jnp.float64).reshape(
            len(styles)
        ),
        labels=labels,
        colors=[s.color for s in styles],
    )
    replicated: AtomSites = replicate_boundary_atoms(
        fractional_sites, combinatorial=combinatorial
    )
    cart_positions: Float[Array, "M 3"] = fractional_to_cartesian(
        replicated.positions, cell_vectors
    )
    vertices: Float[Array, "8 3"] = lattice_vertices(cell_vectors)
    centered_vertices, centered_positions = center_on_lattice(
        vertices, cart_positions
    )
    structure = create_crystal_structure(
        lattice_vertices=centered_vertices,
        atoms=replicated._replace(positions=centered_positions),
    )
    logger.info(
        "Assembled structure with %d atoms (%d before boundary replication)",
        structure.n_atoms,
        fractional_sites.n_atoms,
    )
    return structure
