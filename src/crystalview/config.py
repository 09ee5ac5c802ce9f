"""
Configuration & Constants
=========================
Central registry for default paths, environment variables and numerical
tolerances used across crystalview.

Exports:
    DEFAULT_ATOM_CONFIG_PATH (Path): Packaged atom style mapping.
    ATOM_CONFIG_ENV_VAR (str): Environment variable overriding that path.
    TYPECHECK_ENV_VAR (str): Environment variable that disables runtime type checks.
    DEFAULT_ATOM_RADIUS (float): Radius used for labels missing from the mapping.
    DEFAULT_ATOM_COLOR (str): Colour used for labels missing from the mapping.
    BOUNDARY_TOLERANCE (float): Fractional distance treated as "on a face".
    GEOMETRY_TOLERANCE (float): Threshold below which sin(gamma) counts as zero.
    BOHR_TO_ANGSTROM (float): Bohr radius in angstroms.
"""

import os
from pathlib import Path

from beartype.typing import Optional

DATA_PATH: Path = Path(__file__).resolve().parent / "data"
DEFAULT_ATOM_CONFIG_PATH: Path = DATA_PATH / "atom_config.json"
ATOM_CONFIG_ENV_VAR: str = "CRYSTALVIEW_ATOM_CONFIG"
TYPECHECK_ENV_VAR: str = "CRYSTALVIEW_DISABLE_TYPECHECK"

DEFAULT_ATOM_RADIUS: float = 0.35
DEFAULT_ATOM_COLOR: str = "#505050"

BOUNDARY_TOLERANCE: float = 0.01
GEOMETRY_TOLERANCE: float = 1e-10

BOHR_TO_ANGSTROM: float = 0.529177210903


def get_atom_config_path(path: Optional[str] = None) -> Path:
    """
    Resolve the atom style mapping path.

    An explicit path wins, then the ``CRYSTALVIEW_ATOM_CONFIG`` environment
    variable, then the mapping shipped with the package.
    """
    if path is not None:
        return Path(path)
    env_path = os.environ.get(ATOM_CONFIG_ENV_VAR, "").strip()
    if env_path:
        return Path(env_path)
    return DEFAULT_ATOM_CONFIG_PATH
