"""
=========================================================

CRYSTALVIEW Package (:mod:`crystalview`)

=========================================================

This is the root of the crystalview package, containing submodules for:
- Data I/O (`inout`)
- Unit cell geometry and boundary replication (`ucell`)
- Custom types (`types`)
- Error taxonomy (`errors`)

Each submodule can be directly accessed after importing crystalview.
"""

import jax

jax.config.update("jax_enable_x64", True)

from . import errors, inout, types, ucell  # noqa: E402
from .errors import (  # noqa: E402
    AtomRowParseError,
    CrystalViewError,
    GeometryError,
    MetadataError,
    ParseError,
    SourceReadError,
    TagParseError,
)
from .inout import (  # noqa: E402
    parse_cif,
    parse_cif_text,
    parse_crystal,
    parse_espresso_output,
    parse_espresso_text,
    structure_to_dict,
    structure_to_json,
)

__all__ = [
    "errors",
    "inout",
    "types",
    "ucell",
    "AtomRowParseError",
    "CrystalViewError",
    "GeometryError",
    "MetadataError",
    "ParseError",
    "SourceReadError",
    "TagParseError",
    "parse_cif",
    "parse_cif_text",
    "parse_crystal",
    "parse_espresso_output",
    "parse_espresso_text",
    "structure_to_dict",
    "structure_to_json",
]
