"""Atom style mapping: label to rendering radius and colour.

Extended Summary
----------------
The renderer draws each atom as a sphere whose radius and colour depend on
its label. This module loads that mapping from a JSON document and
resolves labels against it, falling back to a neutral grey sphere for
labels it does not know.

Routine Listings
----------------
load_atom_config : function
    Load and validate a label -> AtomStyle mapping from JSON
parse_atom_config : function
    Validate an already decoded JSON document
resolve_atom_style : function
    Look up a label, returning the default style on a miss
default_atom_style : function
    The style used for unknown labels

Notes
-----
The shipped mapping uses Jmol colours
(https://jmol.sourceforge.net/jscolors/) and radii derived from the
CrystalMaker atomic radii table.
"""

import json
import logging
from pathlib import Path

from beartype.typing import Any, Dict, Mapping, Optional, Union

from crystalview._typing_utils import beartype
from crystalview.config import (
    DEFAULT_ATOM_COLOR,
    DEFAULT_ATOM_RADIUS,
    get_atom_config_path,
)
from crystalview.errors import MetadataError
from crystalview.types import AtomStyle, is_hex_color

logger = logging.getLogger(__name__)


def default_atom_style() -> AtomStyle:
    """Style for labels absent from the mapping."""
    return AtomStyle(radius=DEFAULT_ATOM_RADIUS, color=DEFAULT_ATOM_COLOR)


@beartype
def parse_atom_config(
    document: Any, source: Optional[Union[str, Path]] = None
) -> Dict[str, AtomStyle]:
    """
    Description
    -----------
    Validate a decoded JSON document and convert it into styles.

    Parameters
    ----------
    - `document` (Any):
        Expected shape ``{label: {"radius": number, "color": "#RRGGBB"}}``.
    - `source` (Optional[Union[str, Path]]):
        Where the document came from, used in error messages.

    Returns
    -------
    - `atom_config` (Dict[str, AtomStyle]):
        Mapping from label to style.

    Raises
    ------
    - MetadataError:
        If the document is not an object, an entry is not an object, or a
        radius or colour is missing or invalid.
    """
    if not isinstance(document, dict):
        raise MetadataError(
            f"atom config must be a JSON object, got {type(document).__name__}",
            source,
        )
    atom_config: Dict[str, AtomStyle] = {}
    for label, entry in document.items():
        if not isinstance(entry, dict):
            raise MetadataError(f"entry for {label!r} must be an object", source)
        if "radius" not in entry or "color" not in entry:
            raise MetadataError(
                f"entry for {label!r} needs both 'radius' and 'color'", source
            )
        radius = entry["radius"]
        color = entry["color"]
        # bool is an int subclass; reject it explicitly
        if isinstance(radius, bool) or not isinstance(radius, (int, float)):
            raise MetadataError(
                f"radius for {label!r} must be a number, got {radius!r}", source
            )
        if not radius > 0:
            raise MetadataError(
                f"radius for {label!r} must be positive, got {radius!r}", source
            )
        if not isinstance(color, str) or not is_hex_color(color):
            raise MetadataError(
                f"color for {label!r} must be a hex RGB string, got {color!r}",
                source,
            )
        atom_config[label] = AtomStyle(radius=float(radius), color=color)
    return atom_config


@beartype
def load_atom_config(path: Optional[Union[str, Path]] = None) -> Dict[str, AtomStyle]:
    """
    Description
    -----------
    Load the atom style mapping from a JSON file.

    Parameters
    ----------
    - `path` (Optional[Union[str, Path]]):
        Path to the mapping. Defaults to the ``CRYSTALVIEW_ATOM_CONFIG``
        environment variable, then to the mapping bundled with the package.

    Returns
    -------
    - `atom_config` (Dict[str, AtomStyle]):
        Mapping from label to style.

    Raises
    ------
    - MetadataError:
        If the file cannot be read, is not valid JSON or is malformed.
    """
    config_path = get_atom_config_path(None if path is None else str(path))
    try:
        text = config_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise MetadataError(f"unable to read atom config: {e}", config_path) from e
    try:
        document = json.loads(text)
    except json.JSONDecodeError as e:
        raise MetadataError(f"invalid JSON in atom config: {e}", config_path) from e
    atom_config = parse_atom_config(document, config_path)
    logger.debug("Loaded %d atom styles from %s", len(atom_config), config_path)
    return atom_config


@beartype
def resolve_atom_style(label: str, atom_config: Mapping[str, AtomStyle]) -> AtomStyle:
    """Return the style for `label`, or the default grey 0.35 sphere."""
    style = atom_config.get(label)
    if style is None:
        return default_atom_style()
    return style
