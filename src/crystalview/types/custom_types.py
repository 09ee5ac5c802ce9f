"""
Module: types.custom_types
--------------------------
Scalar type aliases shared by the typed function signatures.

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

from beartype.typing import Union
from jaxtyping import Array, Float, Int, Num

scalar_float = Union[float, Float[Array, " "]]
scalar_int = Union[int, Int[Array, " "]]
scalar_num = Union[int, float, Num[Array, " "]]
non_jax_number = Union[int, float]
