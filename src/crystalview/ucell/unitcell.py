"""Functions for unit cell geometry.

Extended Summary
----------------
This module turns lattice parameters into Cartesian cell vectors, maps
fractional coordinates into Cartesian space and back, and builds the eight
corners of the unit cell parallelepiped used for rendering.

Routine Listings
----------------
check_cell_geometry : function
    Reject lattice angles that do not define a basis
build_cell_vectors : function
    Construct unit cell vectors from lengths and angles
cell_vectors_from_parameters : function
    Construct unit cell vectors from a LatticeParameters tuple
fractional_to_cartesian : function
    Map fractional coordinates onto the cell basis
cartesian_to_fractional : function
    Express Cartesian coordinates in the cell basis
lattice_vertices : function
    The eight cell corners in fixed traversal order
lattice_center : function
    Arithmetic mean of the cell corners
center_on_lattice : function
    Translate vertices and positions so the cell centroid is the origin
compute_lengths_angles : function
    Compute unit cell lengths and angles from lattice vectors

Notes
-----
`build_cell_vectors` validates its inputs with Python control flow and is
therefore called on concrete values. The remaining array functions are
JAX-compatible and can be jit compiled.
"""

import logging
import math

import jax.numpy as jnp
from beartype.typing import Tuple
from jaxtyping import Array, Float

from crystalview._typing_utils import beartype, jaxtyped
from crystalview.config import GEOMETRY_TOLERANCE
from crystalview.errors import GeometryError
from crystalview.types import LatticeParameters, scalar_float

logger = logging.getLogger(__name__)

# Zero/one multipliers of (a, b, c) for each corner:
# origin, a, a+b, b, c, a+c, a+b+c, b+c
VERTEX_COEFFICIENTS: Tuple[Tuple[float, float, float], ...] = (
    (0.0, 0.0, 0.0),
    (1.0, 0.0, 0.0),
    (1.0, 1.0, 0.0),
    (0.0, 1.0, 0.0),
    (0.0, 0.0, 1.0),
    (1.0, 0.0, 1.0),
    (1.0, 1.0, 1.0),
    (0.0, 1.0, 1.0),
)


def check_cell_geometry(
    a: scalar_float,
    b: scalar_float,
    c: scalar_float,
    alpha: scalar_float,
    beta: scalar_float,
    gamma: scalar_float,
) -> None:
    """
    Description
    -----------
    Raise if the lattice parameters cannot produce a real basis.

    Parameters
    ----------
    - `a`, `b`, `c` (scalar_float):
        Cell lengths.
    - `alpha`, `beta`, `gamma` (scalar_float):
        Cell angles in degrees.

    Raises
    ------
    - GeometryError:
        If sin(gamma) vanishes (gamma at 0 or 180 degrees, which includes
        an absent gamma tag), if any parameter is non-finite, or if the
        angles leave no real z component for the third vector.
    """
    values = [float(v) for v in (a, b, c, alpha, beta, gamma)]
    if not all(math.isfinite(v) for v in values):
        raise GeometryError(f"lattice parameters must be finite, got {values}")
    a, b, c, alpha, beta, gamma = values
    sin_gamma = math.sin(math.radians(gamma))
    if abs(sin_gamma) < GEOMETRY_TOLERANCE:
        raise GeometryError(
            f"gamma = {gamma} degrees makes sin(gamma) zero; "
            "the b and c basis vectors are undefined"
        )
    cos_alpha = math.cos(math.radians(alpha))
    cos_beta = math.cos(math.radians(beta))
    cos_gamma = math.cos(math.radians(gamma))
    c_x = c * cos_beta
    c_y = c * (cos_alpha - cos_beta * cos_gamma) / sin_gamma
    c_z_sq = c**2 - c_x**2 - c_y**2
    if c_z_sq < -GEOMETRY_TOLERANCE * max(c**2, 1.0):
        raise GeometryError(
            f"angles alpha={alpha}, beta={beta}, gamma={gamma} "
            "do not describe a real unit cell"
        )


def _cell_vectors(
    a: scalar_float,
    b: scalar_float,
    c: scalar_float,
    alpha: scalar_float,
    beta: scalar_float,
    gamma: scalar_float,
) -> Float[Array, "3 3"]:
    alpha_rad: Float[Array, " "] = jnp.radians(alpha)
    beta_rad: Float[Array, " "] = jnp.radians(beta)
    gamma_rad: Float[Array, " "] = jnp.radians(gamma)
    a_vec: Float[Array, " 3"] = jnp.array([a, 0.0, 0.0], dtype=jnp.float64)
    b_x: Float[Array, " "] = b * jnp.cos(gamma_rad)
    b_y: Float[Array, " "] = b * jnp.sin(gamma_rad)
    b_vec: Float[Array, " 3"] = jnp.array([b_x, b_y, 0.0], dtype=jnp.float64)
    c_x: Float[Array, " "] = c * jnp.cos(beta_rad)
    c_y: Float[Array, " "] = c * (
        (jnp.cos(alpha_rad) - jnp.cos(beta_rad) * jnp.cos(gamma_rad))
        / jnp.sin(gamma_rad)
    )
    c_z_sq: Float[Array, " "] = (c**2) - (c_x**2) - (c_y**2)
    c_z: Float[Array, " "] = jnp.sqrt(jnp.maximum(c_z_sq, 0.0))
    c_vec: Float[Array, " 3"] = jnp.array([c_x, c_y, c_z], dtype=jnp.float64)
    return jnp.stack([a_vec, b_vec, c_vec], axis=0)


@jaxtyped(typechecker=beartype)
def build_cell_vectors(
    a: scalar_float,
    b: scalar_float,
    c: scalar_float,
    alpha: scalar_float,
    beta: scalar_float,
    gamma: scalar_float,
) -> Float[Array, "3 3"]:
    r"""Construct unit cell vectors from lengths and angles.

    Parameters
    ----------
    a, b, c : scalar_float
        Direct cell lengths.
    alpha, beta, gamma : scalar_float
        Direct cell angles in degrees.

    Returns
    -------
    Float[Array, "3 3"]
        Unit cell vectors as rows of a 3x3 matrix.

    Raises
    ------
    GeometryError
        If the angles do not define a basis, see `check_cell_geometry`.

    Algorithm
    ---------
    - Validate the parameters
    - Convert angles to radians
    - Build first vector along x-axis
    - Build second vector in x-y plane
    - Build third vector using all angles
    - Return 3x3 matrix of vectors

    Examples
    --------
    >>> import crystalview as cv
    >>> vectors = cv.ucell.build_cell_vectors(
    ...     a=3.0, b=3.0, c=3.0,
    ...     alpha=90.0, beta=90.0, gamma=90.0
    ... )
    """
    check_cell_geometry(a, b, c, alpha, beta, gamma)
    logger.debug(
        "Building cell vectors for a=%s b=%s c=%s alpha=%s beta=%s gamma=%s",
        a, b, c, alpha, beta, gamma,
    )
    return _cell_vectors(a, b, c, alpha, beta, gamma)


def cell_vectors_from_parameters(params: LatticeParameters) -> Float[Array, "3 3"]:
    """Build cell vectors from a :class:`LatticeParameters` tuple."""
    return build_cell_vectors(
        float(params.a),
        float(params.b),
        float(params.c),
        float(params.alpha),
        float(params.beta),
        float(params.gamma),
    )


@jaxtyped(typechecker=beartype)
def fractional_to_cartesian(
    frac_positions: Float[Array, "N 3"],
    cell_vectors: Float[Array, "3 3"],
) -> Float[Array, "N 3"]:
    """
    Description
    -----------
    Map fractional coordinates into Cartesian space.

    Each row becomes ``fx * a_vec + fy * b_vec + fz * c_vec``, i.e. the row
    vector times the matrix whose rows are the cell vectors.

    Parameters
    ----------
    - `frac_positions` (Float[Array, "N 3"]):
        Fractional coordinates.
    - `cell_vectors` (Float[Array, "3 3"]):
        Cell vectors as rows.

    Returns
    -------
    - `cart_positions` (Float[Array, "N 3"]):
        Cartesian coordinates in the unit of the cell vectors.
    """
    return frac_positions @ cell_vectors


@jaxtyped(typechecker=beartype)
def cartesian_to_fractional(
    cart_positions: Float[Array, "N 3"],
    cell_vectors: Float[Array, "3 3"],
) -> Float[Array, "N 3"]:
    """
    Description
    -----------
    Express Cartesian coordinates in the cell basis. Inverse of
    `fractional_to_cartesian`.

    Parameters
    ----------
    - `cart_positions` (Float[Array, "N 3"]):
        Cartesian coordinates.
    - `cell_vectors` (Float[Array, "3 3"]):
        Cell vectors as rows. Must be non-singular.

    Returns
    -------
    - `frac_positions` (Float[Array, "N 3"]):
        Fractional coordinates.
    """
    return jnp.linalg.solve(cell_vectors.T, cart_positions.T).T


@jaxtyped(typechecker=beartype)
def lattice_vertices(cell_vectors: Float[Array, "3 3"]) -> Float[Array, "8 3"]:
    """
    Description
    -----------
    The eight corners of the unit cell parallelepiped.

    Parameters
    ----------
    - `cell_vectors` (Float[Array, "3 3"]):
        Cell vectors as rows.

    Returns
    -------
    - `vertices` (Float[Array, "8 3"]):
        Corners in the order origin, a, a+b, b, c, a+c, a+b+c, b+c.
    """
    coefficients: Float[Array, "8 3"] = jnp.asarray(
        VERTEX_COEFFICIENTS, dtype=cell_vectors.dtype
    )
    return coefficients @ cell_vectors


@jaxtyped(typechecker=beartype)
def lattice_center(vertices: Float[Array, "8 3"]) -> Float[Array, " 3"]:
    """Arithmetic mean of the cell corners (not of the atoms)."""
    return jnp.mean(vertices, axis=0)


@jaxtyped(typechecker=beartype)
def center_on_lattice(
    vertices: Float[Array, "8 3"],
    positions: Float[Array, "N 3"],
) -> Tuple[Float[Array, "8 3"], Float[Array, "N 3"]]:
    """
    Description
    -----------
    Translate the cell corners and the atoms by the same offset so the
    centroid of the corners lands on the origin.

    Parameters
    ----------
    - `vertices` (Float[Array, "8 3"]):
        Cartesian cell corners.
    - `positions` (Float[Array, "N 3"]):
        Cartesian atom positions.

    Returns
    -------
    - `centered_vertices` (Float[Array, "8 3"]):
        Corners with zero centroid.
    - `centered_positions` (Float[Array, "N 3"]):
        Atoms shifted by the same offset.
    """
    center: Float[Array, " 3"] = lattice_center(vertices)
    return vertices - center, positions - center


@jaxtyped(typechecker=beartype)
def compute_lengths_angles(
    cell_vectors: Float[Array, "3 3"],
) -> Tuple[Float[Array, " 3"], Float[Array, " 3"]]:
    """
    Description
    -----------
    Compute unit cell lengths and angles from lattice vectors.

    Parameters
    ----------
    - `cell_vectors` (Float[Array, "3 3"]):
        Cell vectors as rows.

    Returns
    -------
    - `lengths` (Float[Array, " 3"]):
        [|a|, |b|, |c|]
    - `angles` (Float[Array, " 3"]):
        [alpha, beta, gamma] in degrees, where alpha is the angle between
        b and c, beta between a and c and gamma between a and b.
    """
    a_vec, b_vec, c_vec = cell_vectors[0], cell_vectors[1], cell_vectors[2]
    lengths: Float[Array, " 3"] = jnp.linalg.norm(cell_vectors, axis=1)

    def angle_between(u: Float[Array, " 3"], v: Float[Array, " 3"]) -> Float[Array, " "]:
        cos_angle = jnp.dot(u, v) / (jnp.linalg.norm(u) * jnp.linalg.norm(v))
        return jnp.degrees(jnp.arccos(jnp.clip(cos_angle, -1.0, 1.0)))

    angles: Float[Array, " 3"] = jnp.stack(
        [
            angle_between(b_vec, c_vec),
            angle_between(a_vec, c_vec),
            angle_between(a_vec, b_vec),
        ]
    )
    return lengths, angles
