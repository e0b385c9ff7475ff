from typing import Union, Tuple, Sequence, Optional
import numpy as np


class Tensor:
    """
    A host tensor used as the storage collaborator of the reference operators.

    Unlike a compute tensor it never changes the dtype of the data it wraps, so the
    storage precision of every input and output stays visible to the operator that
    reads or writes it. Element access goes through `t[m, n]` and `t[m, n] = v`.

    Attributes:
        data (np.ndarray): The wrapped array (a view is kept, not a copy).
        name (str): A human readable name used in repr and error messages.
    """

    def __init__(self, data: Union[np.ndarray, Sequence, float, int], dtype=None, name: Optional[str] = ''):
        """
        Initialise a Tensor object.

        Args:
            data (Union[np.ndarray, Sequence, float, int]): The data for the tensor.
            dtype: Storage dtype. If None, the dtype of `data` is kept as is.
            name (str): Optional tensor name.
        """
        self.data = np.asarray(data, dtype=dtype)
        self.name = f"Tensor{name if name else id(self)}"

    def __repr__(self):
        return f"Tensor(name={self.name}, lengths={self.get_lengths()}, dtype={self.dtype})"

    def __getitem__(self, index):
        return self.data[index]

    def __setitem__(self, index, value):
        self.data[index] = value

    def __call__(self, *index):
        return self.data[index]

    @property
    def dtype(self) -> np.dtype:
        return self.data.dtype

    @property
    def ndim(self) -> int:
        return self.data.ndim

    def shape(self) -> Tuple[int, ...]:
        return self.data.shape

    def size(self, dim: Optional[int] = None):
        if dim is None:
            return self.data.shape
        else:
            return self.data.shape[dim]

    def get_lengths(self) -> Tuple[int, ...]:
        return tuple(self.data.shape)

    def get_element_space_size(self) -> int:
        return self.data.size

    def copy(self) -> 'Tensor':
        return Tensor(self.data.copy())

    def transpose(self, dim0: int, dim1: int) -> 'Tensor':
        """
        Swap two dimensions. The result is a strided view sharing storage with this tensor.
        """
        axes = list(range(self.data.ndim))
        axes[dim0], axes[dim1] = axes[dim1], axes[dim0]
        return Tensor(self.data.transpose(axes))

    @property
    def T(self) -> 'Tensor':
        if self.ndim != 2:
            raise ValueError(f".T only supports 2D tensors, got shape {self.data.shape}")
        return self.transpose(1, 0)

    @staticmethod
    def zeros(lengths, dtype=np.float32) -> 'Tensor':
        return Tensor(np.zeros(lengths, dtype=dtype))

    @staticmethod
    def full(lengths, value, dtype=np.float32) -> 'Tensor':
        return Tensor(np.full(lengths, value, dtype=dtype))
