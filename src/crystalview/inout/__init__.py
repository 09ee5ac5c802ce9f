"""Data input/output utilities for crystal structure rendering.

Extended Summary
----------------
This module provides functions for reading structure files (CIF and
Quantum ESPRESSO pw.x output), resolving per-atom rendering styles and
exporting renderable structures as JSON.

Routine Listings
----------------
AtomRow : class
    A recognised CIF atom-site row
assemble_structure : function
    Turn cell vectors and fractional atoms into a CrystalStructure
default_atom_style : function
    Style used for labels absent from the mapping
extract_cell_params : function
    Read the six lattice tags from CIF text
is_atom_row : function
    Heuristic recognition of CIF atom-site rows
load_atom_config : function
    Load the label -> radius/colour mapping from JSON
parse_atom_config : function
    Validate a decoded label -> radius/colour document
parse_atom_rows : function
    Tokenize CIF atom-site rows
parse_cif : function
    Parse a CIF file into a CrystalStructure
parse_cif_float : function
    Parse a CIF numeric token
parse_cif_text : function
    Parse CIF text into a CrystalStructure
parse_crystal : function
    Parse CIF or pw.x output into structures (unified API)
parse_espresso_output : function
    Parse a pw.x output file into structures
parse_espresso_text : function
    Parse pw.x output text into structures
read_source_text : function
    Read a structure file as text
resolve_atom_style : function
    Look up the style of an atom label
structure_to_dict : function
    Convert a CrystalStructure into plain Python objects
structure_to_json : function
    Serialise structures to JSON

Notes
-----
Every parse is all-or-nothing: it returns complete structures or raises
a :class:`~crystalview.errors.CrystalViewError`.
"""

from .assembler import assemble_structure, read_source_text
from .atom_config import (
    default_atom_style,
    load_atom_config,
    parse_atom_config,
    resolve_atom_style,
)
from .cif import (
    AtomRow,
    extract_cell_params,
    is_atom_row,
    parse_atom_rows,
    parse_cif,
    parse_cif_float,
    parse_cif_text,
)
from .crystal import parse_crystal, structure_to_dict, structure_to_json
from .espresso import parse_espresso_output, parse_espresso_text

__all__ = [
    "AtomRow",
    "assemble_structure",
    "default_atom_style",
    "extract_cell_params",
    "is_atom_row",
    "load_atom_config",
    "parse_atom_config",
    "parse_atom_rows",
    "parse_cif",
    "parse_cif_float",
    "parse_cif_text",
    "parse_crystal",
    "parse_espresso_output",
    "parse_espresso_text",
    "read_source_text",
    "resolve_atom_style",
    "structure_to_dict",
    "structure_to_json",
]
