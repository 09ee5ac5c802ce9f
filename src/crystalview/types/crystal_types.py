"""
Module: types.crystal_types
---------------------------
Data structures and factory functions for crystal structure representation.

Classes
-------
- `LatticeParameters`:
    The six scalar unit cell parameters (a, b, c, alpha, beta, gamma)
- `AtomStyle`:
    Rendering radius and colour for one atom label
- `Atom`:
    A single labelled atom with its position, radius and colour
- `AtomSites`:
    JAX-compatible ordered collection of atoms in array form
- `CrystalStructure`:
    JAX-compatible renderable structure: 8 lattice vertices plus atoms

FactoryFunctions
-----------------
- `create_lattice_parameters`:
    Factory function to create LatticeParameters with range validation
- `create_atom_sites`:
    Factory function to create AtomSites instances with data validation
- `create_crystal_structure`:
    Factory function to create CrystalStructure instances with data validation
"""

import re

import jax.numpy as jnp
from beartype.typing import List, NamedTuple, Sequence, Tuple
from jax.tree_util import register_pytree_node_class
from jaxtyping import Array, Float

from crystalview._typing_utils import beartype, jaxtyped

from .custom_types import non_jax_number, scalar_float

_HEX_COLOR = re.compile(r"^#(?:[0-9A-Fa-f]{3}|[0-9A-Fa-f]{6})$")


def is_hex_color(color: str) -> bool:
    """Return True for ``#RGB`` or ``#RRGGBB`` colour strings."""
    return bool(_HEX_COLOR.match(color))


@register_pytree_node_class
class LatticeParameters(NamedTuple):
    """
    Description
    -----------
    Unit cell parameters as read from a structure file.

    Attributes
    ----------
    - `a`, `b`, `c` (scalar_float):
        Cell lengths, all in the same unit (usually Ångstroms).
    - `alpha`, `beta`, `gamma` (scalar_float):
        Cell angles in degrees.
        - α is the angle between b and c
        - β is the angle between a and c
        - γ is the angle between a and b

    Notes
    -----
    Parameters read from text are not range checked here: a tag that never
    appears is 0.0, and the geometry engine rejects the resulting cell.
    """

    a: scalar_float
    b: scalar_float
    c: scalar_float
    alpha: scalar_float
    beta: scalar_float
    gamma: scalar_float

    def tree_flatten(self):
        return (
            (self.a, self.b, self.c, self.alpha, self.beta, self.gamma),
            None,
        )

    @classmethod
    def tree_unflatten(cls, aux_data, children):
        return cls(*children)


class AtomStyle(NamedTuple):
    """Rendering radius and hex colour for one atom label."""

    radius: float
    color: str


class Atom(NamedTuple):
    """
    Description
    -----------
    One labelled atom. Whether `position` is fractional or Cartesian
    depends on the pipeline stage that produced it.

    Attributes
    ----------
    - `label` (str):
        Species or site identifier, e.g. ``"O"``.
    - `position` (Float[Array, " 3"]):
        Position as [x, y, z].
    - `radius` (float):
        Rendering radius.
    - `color` (str):
        Hex RGB colour string.
    """

    label: str
    position: Float[Array, " 3"]
    radius: float
    color: str


@register_pytree_node_class
class AtomSites(NamedTuple):
    """
    Description
    -----------
    An ordered sequence of atoms stored column-wise.

    Attributes
    ----------
    - `positions` (Float[Array, "N 3"]):
        Positions, fractional before the Cartesian transform and
        Cartesian afterwards.
    - `radii` (Float[Array, " N"]):
        Rendering radius of each atom.
    - `labels` (Tuple[str, ...]):
        Species or site label of each atom.
    - `colors` (Tuple[str, ...]):
        Hex RGB colour of each atom.

    Notes
    -----
    Positions and radii are the PyTree children. Labels and colours are
    static auxiliary data, so they survive jit and tree_map untouched.
    """

    positions: Float[Array, "N 3"]
    radii: Float[Array, " N"]
    labels: Tuple[str, ...]
    colors: Tuple[str, ...]

    def tree_flatten(self):
        return (
            (self.positions, self.radii),
            (self.labels, self.colors),
        )

    @classmethod
    def tree_unflatten(cls, aux_data, children):
        positions, radii = children
        labels, colors = aux_data
        return cls(positions=positions, radii=radii, labels=labels, colors=colors)

    @property
    def n_atoms(self) -> int:
        return len(self.labels)

    def atoms(self) -> List[Atom]:
        """Return the sites as a list of :class:`Atom` records."""
        return [
            Atom(
                label=self.labels[i],
                position=self.positions[i],
                radius=float(self.radii[i]),
                color=self.colors[i],
            )
            for i in range(self.n_atoms)
        ]


@register_pytree_node_class
class CrystalStructure(NamedTuple):
    """
    Description
    -----------
    A renderable crystal structure: the unit cell parallelepiped and the
    atoms inside it, recentred so the cell centroid is the origin.

    Attributes
    ----------
    - `lattice_vertices` (Float[Array, "8 3"]):
        Cartesian cell corners in the fixed order
        origin, a, a+b, b, c, a+c, a+b+c, b+c.
    - `atoms` (AtomSites):
        Cartesian atoms after boundary replication and recentring.

    Notes
    -----
    This class is registered as a PyTree node. The nested `AtomSites`
    contributes its own children and auxiliary data.
    """

    lattice_vertices: Float[Array, "8 3"]
    atoms: AtomSites

    def tree_flatten(self):
        return ((self.lattice_vertices, self.atoms), None)

    @classmethod
    def tree_unflatten(cls, aux_data, children):
        return cls(*children)

    @property
    def n_atoms(self) -> int:
        return self.atoms.n_atoms


@beartype
def create_lattice_parameters(
    a: non_jax_number,
    b: non_jax_number,
    c: non_jax_number,
    alpha: non_jax_number,
    beta: non_jax_number,
    gamma: non_jax_number,
) -> LatticeParameters:
    """
    Description
    -----------
    Factory function for LatticeParameters with range validation.

    Parameters
    ----------
    - `a`, `b`, `c` (non_jax_number):
        Cell lengths, must be positive.
    - `alpha`, `beta`, `gamma` (non_jax_number):
        Cell angles in degrees, must lie in the open interval (0, 180).

    Returns
    -------
    - `params` (LatticeParameters):
        Parameters stored as Python floats.

    Raises
    ------
    - ValueError:
        If a length is not positive or an angle is out of range.
    """
    lengths = (float(a), float(b), float(c))
    angles = (float(alpha), float(beta), float(gamma))
    for name, value in zip(("a", "b", "c"), lengths):
        if not value > 0.0:
            raise ValueError(f"cell length {name} must be positive, got {value}")
    for name, value in zip(("alpha", "beta", "gamma"), angles):
        if not 0.0 < value < 180.0:
            raise ValueError(
                f"cell angle {name} must lie in (0, 180) degrees, got {value}"
            )
    return LatticeParameters(*lengths, *angles)


@jaxtyped(typechecker=beartype)
def create_atom_sites(
    positions: Float[Array, "N 3"],
    radii: Float[Array, " N"],
    labels: Sequence[str],
    colors: Sequence[str],
) -> AtomSites:
    """
    Description
    -----------
    Factory function to create an AtomSites instance with data validation.

    Parameters
    ----------
    - `positions` (Float[Array, "N 3"]):
        Atom positions.
    - `radii` (Float[Array, " N"]):
        Atom radii, must be positive.
    - `labels` (Sequence[str]):
        One label per atom.
    - `colors` (Sequence[str]):
        One hex colour per atom.

    Returns
    -------
    - `sites` (AtomSites):
        Validated sites with float64 arrays and tuple metadata.

    Raises
    ------
    - ValueError:
        If lengths disagree, values are non-finite, a radius is not positive
        or a colour is not a hex string.

    Flow
    ----
    - Convert arrays to float64
    - Check label and colour counts against the number of positions
    - Check positions and radii are finite and radii positive
    - Check colours are hex strings
    """
    positions = jnp.asarray(positions, dtype=jnp.float64)
    radii = jnp.asarray(radii, dtype=jnp.float64)
    labels = tuple(labels)
    colors = tuple(colors)
    n_atoms = positions.shape[0]

    def check_counts():
        if len(labels) != n_atoms:
            raise ValueError(
                f"expected {n_atoms} labels, got {len(labels)}"
            )
        if len(colors) != n_atoms:
            raise ValueError(
                f"expected {n_atoms} colors, got {len(colors)}"
            )

    def check_values():
        if not jnp.all(jnp.isfinite(positions)):
            raise ValueError("positions contain non-finite values")
        if not jnp.all(jnp.isfinite(radii)):
            raise ValueError("radii contain non-finite values")
        if not jnp.all(radii > 0):
            raise ValueError("radii must be positive")

    def check_colors():
        for color in colors:
            if not is_hex_color(color):
                raise ValueError(f"color {color!r} is not a hex RGB string")

    check_counts()
    check_values()
    check_colors()
    return AtomSites(
        positions=positions,
        radii=radii,
        labels=labels,
        colors=colors,
    )


@jaxtyped(typechecker=beartype)
def create_crystal_structure(
    lattice_vertices: Float[Array, "8 3"],
    atoms: AtomSites,
) -> CrystalStructure:
    """
    Description
    -----------
    Factory function to create a CrystalStructure instance with data
    validation.

    Parameters
    ----------
    - `lattice_vertices` (Float[Array, "8 3"]):
        The eight Cartesian cell corners in fixed order.
    - `atoms` (AtomSites):
        Cartesian atoms.

    Returns
    -------
    - `structure` (CrystalStructure):
        Validated structure.

    Raises
    ------
    - ValueError:
        If the vertices contain non-finite values.
    """
    lattice_vertices = jnp.asarray(lattice_vertices, dtype=jnp.float64)
    if not jnp.all(jnp.isfinite(lattice_vertices)):
        raise ValueError("lattice_vertices contain non-finite values")
    return CrystalStructure(lattice_vertices=lattice_vertices, atoms=atoms)
