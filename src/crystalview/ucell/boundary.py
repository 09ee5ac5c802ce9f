"""Periodic images of atoms sitting on unit cell faces.

Extended Summary
----------------
An atom at fractional x = 0 is shared with the neighbouring cell at x = 1.
Rendering a single cell leaves a gap on the far face unless that periodic
image is drawn too. This module adds such images in fractional space,
before the Cartesian transform.

Routine Listings
----------------
boundary_shifts : function
    Per-axis +1/-1/0 shift for atoms near the cell faces
replicate_boundary_atoms : function
    Append periodic images of boundary atoms to an AtomSites collection

Notes
-----
By default only single-axis images are produced, so an atom at a cell
corner yields the original plus three images rather than the eight a full
periodic tiling would give. Pass ``combinatorial=True`` for the edge and
corner diagonal images as well.
"""

import logging

import jax.numpy as jnp
from beartype.typing import Tuple
from jaxtyping import Array, Bool, Float, Int

from crystalview._typing_utils import beartype, jaxtyped
from crystalview.config import BOUNDARY_TOLERANCE
from crystalview.types import AtomSites, scalar_float

logger = logging.getLogger(__name__)

# Which axes of the per-atom shift an image applies, in emission order.
FACE_MASKS: Tuple[Tuple[bool, bool, bool], ...] = (
    (True, False, False),
    (False, True, False),
    (False, False, True),
)
EDGE_AND_CORNER_MASKS: Tuple[Tuple[bool, bool, bool], ...] = (
    (True, True, False),
    (True, False, True),
    (False, True, True),
    (True, True, True),
)


@jaxtyped(typechecker=beartype)
def boundary_shifts(
    frac_positions: Float[Array, "N 3"],
    tolerance: scalar_float = BOUNDARY_TOLERANCE,
) -> Float[Array, "N 3"]:
    """
    Description
    -----------
    Shift that moves each coordinate onto the opposite cell face.

    Parameters
    ----------
    - `frac_positions` (Float[Array, "N 3"]):
        Fractional coordinates.
    - `tolerance` (scalar_float):
        Distance from 0 or 1 that still counts as on the face.
        Default: 0.01.

    Returns
    -------
    - `shifts` (Float[Array, "N 3"]):
        +1 where a coordinate is within `tolerance` of 0, otherwise -1
        where it is within `tolerance` of 1, otherwise 0. Axes are
        independent.
    """
    near_zero: Bool[Array, "N 3"] = jnp.abs(frac_positions) < tolerance
    near_one: Bool[Array, "N 3"] = jnp.abs(frac_positions - 1.0) < tolerance
    return jnp.where(near_zero, 1.0, jnp.where(near_one, -1.0, 0.0))


@beartype
def replicate_boundary_atoms(
    sites: AtomSites,
    tolerance: scalar_float = BOUNDARY_TOLERANCE,
    combinatorial: bool = False,
) -> AtomSites:
    """
    Description
    -----------
    Duplicate atoms on unit cell faces onto the opposite face.

    Parameters
    ----------
    - `sites` (AtomSites):
        Atoms with fractional positions.
    - `tolerance` (scalar_float):
        Face tolerance on each axis. Default: 0.01.
    - `combinatorial` (bool):
        If False, each qualifying axis contributes one image shifted along
        that axis only. If True, every combination of qualifying axes
        contributes an image, completing edges and corners. Default: False.

    Returns
    -------
    - `replicated` (AtomSites):
        The original atoms, each exactly once and in input order, followed
        by the images. Images are grouped by source atom in input order and
        within an atom ordered x, y, z, then xy, xz, yz, xyz. Images keep
        the label, radius and colour of their source atom.

    Flow
    ----
    - Compute the per-axis shift of every atom
    - Build one candidate image per atom and axis mask
    - Keep candidates whose masked axes all have a non-zero shift
    - Gather positions and metadata for the kept candidates
    """
    masks = FACE_MASKS + EDGE_AND_CORNER_MASKS if combinatorial else FACE_MASKS
    n_atoms = sites.n_atoms
    n_masks = len(masks)
    mask_array: Bool[Array, "M 3"] = jnp.asarray(masks, dtype=bool)
    shifts: Float[Array, "N 3"] = boundary_shifts(sites.positions, tolerance)
    candidate_offsets: Float[Array, "N M 3"] = jnp.where(
        mask_array[None, :, :], shifts[:, None, :], 0.0
    )
    # An image exists only if every axis it moves along is on a face.
    on_face: Bool[Array, "N 3"] = shifts != 0.0
    keep: Bool[Array, "N M"] = jnp.all(
        jnp.logical_or(~mask_array[None, :, :], on_face[:, None, :]), axis=-1
    )
    candidates: Float[Array, "N M 3"] = (
        sites.positions[:, None, :] + candidate_offsets
    )
    flat_keep: Bool[Array, " K"] = keep.reshape(n_atoms * n_masks)
    source_index: Int[Array, " I"] = jnp.repeat(
        jnp.arange(n_atoms), n_masks
    )[flat_keep]
    image_positions: Float[Array, "I 3"] = candidates.reshape(
        n_atoms * n_masks, 3
    )[flat_keep]
    image_sources = [int(i) for i in source_index]
    logger.debug(
        "Replicated %d boundary images from %d atoms (combinatorial=%s)",
        len(image_sources),
        n_atoms,
        combinatorial,
    )
    return AtomSites(
        positions=jnp.concatenate([sites.positions, image_positions], axis=0),
        radii=jnp.concatenate([sites.radii, sites.radii[source_index]]),
        labels=sites.labels + tuple(sites.labels[i] for i in image_sources),
        colors=sites.colors + tuple(sites.colors[i] for i in image_sources),
    )
