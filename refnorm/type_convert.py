"""Scalar type conversion between storage and compute precision."""

import numpy as np


def to_dtype(dtype) -> np.dtype:
    """Normalise anything numpy understands as a dtype (np.float16, 'float32', ...)."""
    return np.dtype(dtype)


def type_convert(value, dtype):
    """
    Convert a scalar to a numpy scalar of `dtype`.

    Float to float conversions round to nearest. Float to integer conversions
    truncate toward zero, the same as a C static cast.

    Args:
        value: A python or numpy scalar.
        dtype: Target dtype.

    Returns:
        np.generic: A numpy scalar of the target type.
    """
    return to_dtype(dtype).type(value)


def is_wider_or_equal(compute_dtype, storage_dtype) -> bool:
    """
    Whether every value of `storage_dtype` is exactly representable in `compute_dtype`.
    """
    return np.can_cast(to_dtype(storage_dtype), to_dtype(compute_dtype), casting='safe')
