"""Runtime type-checking decorators.

`jaxtyped` and `beartype` are the library decorators unless the
``CRYSTALVIEW_DISABLE_TYPECHECK`` environment variable is set to a true
value, in which case both pass functions through unchanged. Shapes and
types are then no longer checked at call time.
"""

import os
from collections.abc import Callable
from typing import Any, TypeVar

from beartype import beartype as _beartype
from jaxtyping import jaxtyped as _jaxtyped

from crystalview.config import TYPECHECK_ENV_VAR

F = TypeVar("F", bound=Callable[..., Any])

TYPECHECK_DISABLED = os.environ.get(TYPECHECK_ENV_VAR, "").strip().lower() in (
    "1",
    "true",
    "yes",
)


def _passthrough(func: F) -> F:
    return func


if TYPECHECK_DISABLED:

    def jaxtyped(typechecker: Any = None) -> Callable[[F], F]:
        """Pass-through replacement for :func:`jaxtyping.jaxtyped`."""
        return _passthrough

    beartype = _passthrough

else:
    jaxtyped = _jaxtyped
    beartype = _beartype


__all__ = ["jaxtyped", "beartype", "TYPECHECK_DISABLED"]
