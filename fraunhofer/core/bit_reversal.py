"""Bit-reversal permutation tables for radix-2 FFT passes.

Functions
---------
radix_of
    log2 of a power-of-two transform length.
reversal_table
    Index permutation that reorders a length-n sequence for in-place butterflies.
"""

from __future__ import annotations

import torch
from torch import Tensor

from fraunhofer.errors import InputFormatError


def radix_of(n: int) -> int:
    """Return log2(n) for a power-of-two length.

    Parameters
    ----------
    n : int
        Transform length.

    Returns
    -------
    int
        Number of bits needed to index ``n`` samples (0 for ``n == 1``).

    Raises
    ------
    InputFormatError
        If ``n`` is not a positive power of two.
    """
    if isinstance(n, bool) or not isinstance(n, int) or n < 1 or n & (n - 1):
        raise InputFormatError(f"Transform length must be a power of two, got {n!r}")
    return n.bit_length() - 1


def reversal_table(size: int, radix: int, device: torch.device | str | None = None) -> Tensor:
    """Build the bit-reversal permutation for ``size`` samples.

    Entry ``i`` holds ``i`` with its ``radix`` low bits reversed. The caller is
    responsible for passing a valid ``(size, radix)`` pair.

    Parameters
    ----------
    size : int
        Number of entries, ``2 ** radix``.
    radix : int
        Bit width of each index.
    device : torch.device or str, optional
        Device of the returned tensor.

    Returns
    -------
    Tensor
        int64 tensor of shape ``[size]``.

    Examples
    --------
    >>> reversal_table(8, 3).tolist()
    [0, 4, 2, 6, 1, 5, 3, 7]
    """
    indices = torch.arange(size, dtype=torch.long, device=device)
    reversed_indices = torch.zeros_like(indices)
    for bit in range(radix):
        reversed_indices |= ((indices >> bit) & 1) << (radix - 1 - bit)
    return reversed_indices
