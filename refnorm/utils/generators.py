from typing import Sequence
import numpy as np

from refnorm.tensor import Tensor


def uniform_init(lengths: Sequence[int], low=-0.1, high=0.1, dtype=np.float32) -> Tensor:
    return Tensor(np.random.uniform(low, high, size=tuple(lengths)).astype(dtype))


def normal_init(lengths: Sequence[int], mean=0.0, std=1.0, dtype=np.float32) -> Tensor:
    return Tensor(np.random.normal(loc=mean, scale=std, size=tuple(lengths)).astype(dtype))


def integer_init(lengths: Sequence[int], low=-5, high=5, dtype=np.float32) -> Tensor:
    """
    Integers drawn from [low, high) and stored as `dtype`.
    Small integers are exact in every float type, which keeps sums reproducible.
    """
    return Tensor(np.random.randint(low, high, size=tuple(lengths)).astype(dtype))


def constant_init(lengths: Sequence[int], value=1.0, dtype=np.float32) -> Tensor:
    return Tensor(np.full(tuple(lengths), value, dtype=dtype))


def sequential_init(lengths: Sequence[int], dtype=np.float32) -> Tensor:
    """
    Fills the tensor with 0, 1, 2, ... in row-major order.
    """
    lengths = tuple(lengths)
    return Tensor(np.arange(int(np.prod(lengths))).reshape(lengths).astype(dtype))
