import numpy as np


def _like(x, value):
    # constant with the dtype of x, so the op stays in x's precision
    return np.asarray(value, dtype=getattr(x, 'dtype', None))


class PassThrough:
    """
    Identity post-op. Returns its input unchanged.
    """

    def __call__(self, x):
        return x

    def __repr__(self):
        return "PassThrough()"


class Relu:
    """
    Applies max(x, 0) element-wise. Works on scalars and arrays.
    """

    def __call__(self, x):
        return np.maximum(x, _like(x, 0))

    def __repr__(self):
        return "Relu()"


class Scale:
    """
    Multiplies by a constant factor.

    Parameters:
        scale (float): The factor. It is cast to the dtype of the incoming value on each call.
    """

    def __init__(self, scale: float):
        self.scale = scale

    def __call__(self, x):
        return x * _like(x, self.scale)

    def __repr__(self):
        return f"Scale(scale={self.scale})"


class Sigmoid:
    """
    Applies 1 / (1 + exp(-x)) element-wise.
    """

    def __call__(self, x):
        one = _like(x, 1)
        return one / (one + np.exp(-x))

    def __repr__(self):
        return "Sigmoid()"


def apply_elementwise(op, y):
    """
    Apply a post-op to a single compute-precision value.

    `op` may return either the transformed value or a `(value, passthrough)` pair,
    in which case only the value is kept. The result is cast back to the type of `y`
    so a post-op cannot silently change the compute precision.
    """
    out = op(y)
    if isinstance(out, tuple):
        out = out[0]
    return type(y)(out)
