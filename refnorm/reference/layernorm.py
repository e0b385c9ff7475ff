import logging
from dataclasses import dataclass
from typing import Callable, Optional, Sequence, Tuple

import numpy as np

from refnorm.element_wise import PassThrough, apply_elementwise
from refnorm.operator import BaseArgument, BaseInvoker, BaseOperator, StreamConfig
from refnorm.tensor import Tensor
from refnorm.type_convert import is_wider_or_equal, to_dtype, type_convert

logger = logging.getLogger(__name__)


class ReferenceLayernorm(BaseOperator):
    """
      Host reference for layer normalisation of a 2D tensor over its last dimension.

      For every row m of x (shape M x N):

        mean[m]    = sum_n x[m, n] / N
        var[m]     = sum_n x[m, n]^2 / N - mean[m]^2        (biased, E[x^2] - E[x]^2)
        inv_std[m] = 1 / sqrt(var[m] + eps)
        y[m, n]    = post_op((x[m, n] - mean[m]) * inv_std[m] * gamma[n] + beta[n])

      Example, x = [[1, 2, 3, 4]], gamma = 1, beta = 0, eps = 1e-5:

        mean = 2.5, var = 7.5 - 6.25 = 1.25, inv_std = 1 / sqrt(1.25001) ~ 0.8944
        y    ~ [-1.3416, -0.4472, 0.4472, 1.3416]

      All intermediate arithmetic runs in `compute_dtype`. Values are converted from
      storage precision when x, gamma and beta are read, and back to storage precision
      when y, save_mean and save_inv_std are written. The variance formula is kept as
      is (not centred, not Welford) so results can be compared against device kernels
      that use the same formula within a fixed tolerance.

      Args:
          compute_dtype: Precision of all intermediate arithmetic.
          rank (int): Rank of the normalised tensor. Only 2 is supported.
          num_reduce_dim (int): Number of reduced dimensions. Only 1 is supported.
      """

    @dataclass(frozen=True)
    class Argument(BaseArgument):
        x_m_n: Tensor
        gamma_n: Tensor
        beta_n: Tensor
        y_m_n: Tensor
        save_mean_m: Tensor
        save_inv_std_m: Tensor
        y_elementwise_op: Callable
        lengths: Tuple[int, ...]
        reduce_dims: Tuple[int, ...]
        epsilon: float

    class Invoker(BaseInvoker):

        def __init__(self, compute_dtype=np.float32):
            self.compute_dtype = to_dtype(compute_dtype)

        def run(self, arg: BaseArgument, stream_config: Optional[StreamConfig] = None) -> float:
            """
            Run both passes over `arg`, writing y, save_mean and save_inv_std in place.
            `stream_config` is ignored. Always returns 0.0.
            """
            if not isinstance(arg, ReferenceLayernorm.Argument):
                raise TypeError(f"ReferenceLayernorm.Invoker expects a ReferenceLayernorm.Argument, "
                                f"got {type(arg).__name__}")

            compute = self.compute_dtype.type
            M, N = arg.lengths
            logger.debug(f"Running reference layernorm M={M} N={N} compute={self.compute_dtype}")

            mean = [compute(0)] * M
            var = [compute(0)] * M

            # 1: accumulate sum and sum of squares per row
            for m in range(M):
                for n in range(N):
                    x_val = compute(arg.x_m_n[m, n])
                    mean[m] += x_val
                    var[m] += x_val * x_val

                mean[m] = mean[m] / compute(N)
                var[m] = (var[m] / compute(N)) - (mean[m] * mean[m])

            epsilon = compute(arg.epsilon)
            y_dtype = arg.y_m_n.dtype
            save_mean_dtype = arg.save_mean_m.dtype
            save_inv_std_dtype = arg.save_inv_std_m.dtype

            # 2: normalise, apply gamma/beta and the post-op, then store
            for m in range(M):
                divisor = compute(1) / np.sqrt(var[m] + epsilon)

                for n in range(N):
                    x_val = compute(arg.x_m_n[m, n])
                    gamma_val = compute(arg.gamma_n[n])
                    beta_val = compute(arg.beta_n[n])
                    y_val = (x_val - mean[m]) * divisor
                    y_val = (y_val * gamma_val) + beta_val
                    y_val = apply_elementwise(arg.y_elementwise_op, y_val)
                    arg.y_m_n[m, n] = type_convert(y_val, y_dtype)

                arg.save_mean_m[m] = type_convert(mean[m], save_mean_dtype)
                arg.save_inv_std_m[m] = type_convert(divisor, save_inv_std_dtype)

            return 0.0

    def __init__(self, compute_dtype=np.float32, rank: int = 2, num_reduce_dim: int = 1):
        # TODO: support generic layernorm (rank > 2, several reduced dims)
        if not (rank == 2 and num_reduce_dim == 1):
            raise ValueError("Only support 2D version so far")
        self.compute_dtype = to_dtype(compute_dtype)
        self.rank = rank
        self.num_reduce_dim = num_reduce_dim

    @staticmethod
    def is_valid_compilation_parameter() -> bool:
        """
        Host reference has no build-time variants, so always True.
        """
        return True

    def is_supported_argument(self, arg: BaseArgument) -> bool:
        """
        True only for a rank 2 argument reduced over its last dimension.
        """
        if not isinstance(arg, ReferenceLayernorm.Argument):
            logger.debug(f"Unsupported argument type {type(arg).__name__}")
            return False

        if len(arg.lengths) != 2:
            logger.debug(f"Unsupported rank {len(arg.lengths)}, only rank 2 is supported")
            return False

        if len(arg.reduce_dims) != 1:
            logger.debug(f"Unsupported reduce dims {arg.reduce_dims}, exactly one is required")
            return False

        if arg.reduce_dims[0] != 1:
            logger.debug(f"Unsupported reduce dim {arg.reduce_dims[0]}, only the last dim (1) is supported")
            return False

        return True

    def make_argument(self,
                      x_m_n: Tensor,
                      gamma_n: Tensor,
                      beta_n: Tensor,
                      y_m_n: Tensor,
                      save_mean_m: Tensor,
                      save_inv_std_m: Tensor,
                      y_elementwise_op: Optional[Callable] = None,
                      lengths: Optional[Sequence[int]] = None,
                      reduce_dims: Sequence[int] = (1,),
                      epsilon: float = 1e-5) -> 'ReferenceLayernorm.Argument':
        """
        Bundle one invocation. No validation is done here; call `is_supported_argument`.

        Args:
            x_m_n (Tensor): Input of shape (M, N).
            gamma_n (Tensor): Scale of shape (N,).
            beta_n (Tensor): Shift of shape (N,).
            y_m_n (Tensor): Output of shape (M, N), written in place. Must not alias x_m_n.
            save_mean_m (Tensor): Per-row mean of shape (M,), written in place.
            save_inv_std_m (Tensor): Per-row inverse standard deviation of shape (M,), written in place.
            y_elementwise_op (Callable): Post-op applied to each value before it is stored.
                Defaults to PassThrough.
            lengths (Sequence[int]): (M, N). None means the lengths of x_m_n; any other value is kept as given.
            reduce_dims (Sequence[int]): Reduced dimensions.
            epsilon (float): Added to the variance before the square root.
        """
        for t in (x_m_n, gamma_n, beta_n):
            if not is_wider_or_equal(self.compute_dtype, t.dtype):
                logger.debug(f"{t.name} is stored as {t.dtype}, wider than compute type {self.compute_dtype}")

        return ReferenceLayernorm.Argument(
            x_m_n=x_m_n,
            gamma_n=gamma_n,
            beta_n=beta_n,
            y_m_n=y_m_n,
            save_mean_m=save_mean_m,
            save_inv_std_m=save_inv_std_m,
            y_elementwise_op=y_elementwise_op if y_elementwise_op is not None else PassThrough(),
            lengths=x_m_n.get_lengths() if lengths is None else tuple(lengths),
            reduce_dims=tuple(reduce_dims),
            epsilon=type_convert(epsilon, self.compute_dtype),
        )

    def make_invoker(self) -> 'ReferenceLayernorm.Invoker':
        """
        Return a new invoker computing in this operator's compute dtype.
        """
        return ReferenceLayernorm.Invoker(self.compute_dtype)

    def make_invoker_pointer(self) -> BaseInvoker:
        """
        Same as `make_invoker`, typed as the base invoker.
        """
        return self.make_invoker()

    def get_type_string(self) -> str:
        """
        Name of the operator, as reported to callers choosing an implementation.
        """
        return "ReferenceLayernorm\n"
