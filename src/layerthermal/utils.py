from __future__ import annotations

import math
from typing import TYPE_CHECKING, Sequence

import numpy as np

if TYPE_CHECKING:
    import numpy.typing as npt


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves going up (2.5 -> 3)."""
    return int(math.floor(value + 0.5))


def weld_key(coords: Sequence[float], decimals: int) -> tuple[int, ...]:
    """
    Build the integer spatial-hash key of a point.

    Two points share a key when every coordinate agrees after scaling by
    ``10**decimals`` and rounding to the nearest integer.

    **Example**:

        weld_key((1.00001, 2.0, -3.0), decimals=4)
        # Output: (10000, 20000, -30000)
    """
    scale = 10 ** decimals
    return tuple(int(round(float(c) * scale)) for c in coords)


def assemble_subarray_at_indices(
    array: npt.NDArray[np.float64],
    subarray: npt.NDArray[np.float64],
    indices: Sequence[int],
) -> None:
    """
    Add a small (n x n) matrix into a larger square matrix at the given rows and columns.

    This method modifies the larger array in-place. Repeated indices accumulate.

    :var array: The larger array to which the subarray will be added.
    :var subarray: A smaller (n x n) array whose values are added.
    :var indices: Global row/column index of each local row/column.

    **Example**:

        large_array = np.zeros((4, 4))
        small_array = np.array([[1, 2], [3, 4]])
        assemble_subarray_at_indices(large_array, small_array, [1, 2])
        # [[0. 0. 0. 0.]
        #  [0. 1. 2. 0.]
        #  [0. 3. 4. 0.]
        #  [0. 0. 0. 0.]]
    """
    idx = np.asarray(indices, dtype=np.int64)
    np.add.at(array, (idx[:, None], idx[None, :]), subarray)
