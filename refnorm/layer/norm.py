import numpy as np

from refnorm.element_wise import PassThrough


class NormLayer:
    """
      Applies normalisation over the last dimension of a 2D input with whole-array
      numpy operations, followed by the affine transformation using `gamma` and `beta`.

      This is the vectorised counterpart of `ReferenceLayernorm`: it uses the same
      E[x^2] - E[x]^2 variance and the same dtype for every intermediate, so its
      results agree with the element-by-element reference within float tolerance.

        Raw Input (M=2, N=4):
        ┌────────┬────────┬────────┬────────┐
        │  1.0   │  2.0   │  3.0   │  4.0   │ ← row 0
        │ -1.0   │  0.0   │  1.0   │  0.0   │ ← row 1
        └────────┴────────┴────────┴────────┘

        Row 0:
        μ       = (1 + 2 + 3 + 4) / 4              = 2.5
        E[x²]   = (1 + 4 + 9 + 16) / 4             = 7.5
        σ²      = E[x²] - μ²                       = 1.25
        inv_std = 1 / sqrt(σ² + eps)               ≈ 0.8944
        y       ≈ [-1.3416, -0.4472, 0.4472, 1.3416]

      Args:
          d_model (int): The size of the last dimension to normalise over.
          eps (float): A small constant added to variance for numerical stability.
          dtype: Compute and output dtype.
          post_op (Callable): Element-wise op applied after the affine transform.

      Parameters:
          - gamma: Scale (initialised to ones)
          - beta: Shift (initialised to zeros)

      Forward:
          Input: array of shape (M, d_model)
          Output: (y, mean, inv_std) with shapes (M, d_model), (M,), (M,)
      """
    def __init__(self, d_model: int, eps: float = 1e-5, dtype=np.float32, post_op=None):
        self.dtype = np.dtype(dtype)
        self.gamma = np.ones(d_model, dtype=self.dtype)
        self.beta = np.zeros(d_model, dtype=self.dtype)
        self.eps = self.dtype.type(eps)
        self.post_op = post_op if post_op is not None else PassThrough()

    def __call__(self, x: np.ndarray):
        return self.forward(x)

    def forward(self, x: np.ndarray):
        x = np.asarray(x).astype(self.dtype)
        n = self.dtype.type(x.shape[-1])

        # 1: mean and mean of squares across the last dimension
        mean = x.sum(axis=-1) / n
        mean_sq = (x * x).sum(axis=-1) / n

        # 2: biased variance from the two accumulators
        var = mean_sq - mean * mean

        inv_std = self.dtype.type(1) / np.sqrt(var + self.eps)

        # 3: normalise, then scale and shift (gamma and beta broadcast over rows)
        normed = (x - mean[:, None]) * inv_std[:, None]
        y = normed * self.gamma + self.beta

        # 4: post-op, vectorised when the op accepts arrays
        y = np.asarray(self.post_op(y), dtype=self.dtype)
        return y, mean, inv_std
