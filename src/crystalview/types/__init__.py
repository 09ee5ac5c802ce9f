"""Custom types and data structures for crystal structure parsing.

Extended Summary
----------------
This module defines JAX-compatible data structures for representing a
renderable crystal structure: lattice parameters, atom sites and the final
recentred structure. Array-holding types are PyTrees that support JAX
transformations.

Routine Listings
----------------
LatticeParameters : class
    The six unit cell parameters
AtomStyle : class
    Rendering radius and colour for an atom label
Atom : class
    A single labelled atom record
AtomSites : class
    Ordered atoms in column form (positions, radii, labels, colours)
CrystalStructure : class
    Eight lattice vertices plus atoms, centred on the origin
create_lattice_parameters : function
    Factory function to create LatticeParameters instances
create_atom_sites : function
    Factory function to create AtomSites instances
create_crystal_structure : function
    Factory function to create CrystalStructure instances
is_hex_color : function
    Check a colour string is hex RGB

Type Aliases
------------
- `scalar_float`:
    Union type for scalar float values (float or JAX scalar array)
- `scalar_int`:
    Union type for scalar integer values (int or JAX scalar array)
- `scalar_num`:
    Union type for scalar numeric values (int, float, or JAX scalar array)
- `non_jax_number`:
    Union type for non-JAX numeric values (int or float)
"""

from .crystal_types import (
    Atom,
    AtomSites,
    AtomStyle,
    CrystalStructure,
    LatticeParameters,
    create_atom_sites,
    create_crystal_structure,
    create_lattice_parameters,
    is_hex_color,
)
from .custom_types import non_jax_number, scalar_float, scalar_int, scalar_num

__all__ = [
    "Atom",
    "AtomSites",
    "AtomStyle",
    "CrystalStructure",
    "LatticeParameters",
    "create_atom_sites",
    "create_crystal_structure",
    "create_lattice_parameters",
    "is_hex_color",
    "scalar_float",
    "scalar_int",
    "scalar_num",
    "non_jax_number",
]
