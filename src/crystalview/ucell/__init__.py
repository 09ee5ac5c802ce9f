"""Unit cell geometry and boundary replication.

Extended Summary
----------------
This module provides the lattice geometry used to turn parsed structure
files into renderable models: cell vectors from lattice parameters,
fractional/Cartesian transforms, the eight cell corners and the periodic
images of atoms sitting on cell faces.

Routine Listings
----------------
build_cell_vectors : function
    Convert lattice parameters to Cartesian cell vectors
cell_vectors_from_parameters : function
    Convert a LatticeParameters tuple to Cartesian cell vectors
check_cell_geometry : function
    Reject lattice parameters that do not define a basis
fractional_to_cartesian : function
    Map fractional coordinates onto the cell basis
cartesian_to_fractional : function
    Express Cartesian coordinates in the cell basis
lattice_vertices : function
    The eight cell corners in fixed order
lattice_center : function
    Centroid of the cell corners
center_on_lattice : function
    Recentre corners and atoms on the cell centroid
compute_lengths_angles : function
    Extract lattice parameters from cell vectors
boundary_shifts : function
    Per-axis shift for atoms on cell faces
replicate_boundary_atoms : function
    Add periodic images of atoms on cell faces
"""

from .boundary import boundary_shifts, replicate_boundary_atoms
from .unitcell import (
    build_cell_vectors,
    cartesian_to_fractional,
    cell_vectors_from_parameters,
    center_on_lattice,
    check_cell_geometry,
    compute_lengths_angles,
    fractional_to_cartesian,
    lattice_center,
    lattice_vertices,
)

__all__ = [
    "boundary_shifts",
    "build_cell_vectors",
    "cartesian_to_fractional",
    "cell_vectors_from_parameters",
    "center_on_lattice",
    "check_cell_geometry",
    "compute_lengths_angles",
    "fractional_to_cartesian",
    "lattice_center",
    "lattice_vertices",
    "replicate_boundary_atoms",
]
