import logging
from typing import Union

import numpy as np

from refnorm.tensor import Tensor

logger = logging.getLogger(__name__)

ArrayLike = Union[Tensor, np.ndarray]

MAX_REPORTED_ERRORS = 5


def _as_array(t: ArrayLike) -> np.ndarray:
    return t.data if isinstance(t, Tensor) else np.asarray(t)


def check_err(out: ArrayLike, ref: ArrayLike, msg: str = "Error: Incorrect results!",
              rtol: float = 1e-5, atol: float = 3e-6) -> bool:
    """
    Compare a result against the reference element by element.

    An element fails when |out - ref| > atol + rtol * |ref|. Both operands are widened
    to float64 before comparing so the check itself adds no rounding.

    Args:
        out (ArrayLike): The result under test.
        ref (ArrayLike): The reference result.
        msg (str): Prefix for logged errors.
        rtol (float): Relative tolerance.
        atol (float): Absolute tolerance.

    Returns:
        bool: True when shapes match and every element is within tolerance.
    """
    out_data = _as_array(out).astype(np.float64)
    ref_data = _as_array(ref).astype(np.float64)

    if out_data.shape != ref_data.shape:
        logger.error(f"{msg} out shape {out_data.shape} != ref shape {ref_data.shape}")
        return False

    err = np.abs(out_data - ref_data)
    bad = err > atol + rtol * np.abs(ref_data)
    # nan in either operand is a mismatch
    bad |= np.isnan(out_data) != np.isnan(ref_data)
    if not bad.any():
        return True

    for index in list(zip(*np.nonzero(bad)))[:MAX_REPORTED_ERRORS]:
        index = tuple(int(i) for i in index)
        logger.error(f"{msg} out{list(index)} != ref{list(index)}: {out_data[index]} != {ref_data[index]}")
    logger.error(f"{msg} max err: {np.nanmax(err)}, {int(bad.sum())} of {bad.size} elements out of tolerance")
    return False
