"""Exception hierarchy for crystal structure parsing.

Extended Summary
----------------
Every failure raised while turning a structure file into a
:class:`~crystalview.types.CrystalStructure` derives from
:class:`CrystalViewError`, so callers can catch the whole family with one
``except`` clause while still being able to inspect the concrete cause.

Routine Listings
----------------
CrystalViewError : class
    Root of the package's exception hierarchy
SourceReadError : class
    Input file missing, unreadable or not valid text
MetadataError : class
    Atom style mapping missing or malformed
ParseError : class
    Base class for text-level parse failures
TagParseError : class
    Lattice tag present but its value is missing or non-numeric
AtomRowParseError : class
    Matched atom row is too short or holds a non-numeric coordinate
GeometryError : class
    Lattice angles do not define a basis

Notes
-----
None of these are recovered inside the package. A parse either returns a
complete structure or raises one of the errors below.
"""

from pathlib import Path

from beartype.typing import Optional, Union


class CrystalViewError(Exception):
    """Base class for all errors raised by crystalview."""


class SourceReadError(CrystalViewError):
    """
    Description
    -----------
    Raised when an input file cannot be read as text.

    Attributes
    ----------
    - `path` (Path):
        The path that failed to read.
    """

    def __init__(self, path: Union[str, Path], reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Unable to read {self.path}: {reason}")


class MetadataError(CrystalViewError, ValueError):
    """
    Description
    -----------
    Raised when the atom style mapping cannot be loaded or is malformed.

    Attributes
    ----------
    - `source` (Optional[Path]):
        The mapping file, if the mapping came from disk.
    """

    def __init__(self, message: str, source: Optional[Union[str, Path]] = None) -> None:
        self.source = Path(source) if source is not None else None
        if self.source is not None:
            message = f"{message} (in {self.source})"
        super().__init__(message)


class ParseError(CrystalViewError, ValueError):
    """
    Description
    -----------
    Base class for failures tied to a specific line of the input text.

    Attributes
    ----------
    - `line_number` (Optional[int]):
        1-based line number of the offending line, if known.
    """

    def __init__(self, message: str, line_number: Optional[int] = None) -> None:
        self.line_number = line_number
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)


class TagParseError(ParseError):
    """
    Description
    -----------
    Raised when a lattice tag is present but its value is absent or
    not a number. A present tag never falls back to a default.

    Attributes
    ----------
    - `tag` (str):
        The tag or block header that failed, e.g. ``_cell_length_a``.
    """

    def __init__(
        self, tag: str, message: str, line_number: Optional[int] = None
    ) -> None:
        self.tag = tag
        super().__init__(f"{tag}: {message}", line_number)


class AtomRowParseError(ParseError):
    """
    Description
    -----------
    Raised when a row recognised as an atom row cannot be tokenized into
    a label and three coordinates.

    Attributes
    ----------
    - `field` (str):
        Name of the missing or malformed field (``label``, ``x``, ``y``,
        ``z`` or ``units``).
    - `token` (Optional[str]):
        The offending token, or None when the field was missing.
    """

    def __init__(
        self,
        field: str,
        message: str,
        line_number: Optional[int] = None,
        token: Optional[str] = None,
    ) -> None:
        self.field = field
        self.token = token
        super().__init__(f"{field}: {message}", line_number)


class GeometryError(CrystalViewError, ValueError):
    """Raised when lattice parameters do not define a unit cell basis."""
