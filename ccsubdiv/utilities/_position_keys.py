# SPDX-FileCopyrightText: Copyright (c) 2023 - 2026 NVIDIA CORPORATION & AFFILIATES.
# SPDX-FileCopyrightText: All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Exact, bit-pattern keys for floating-point positions.

Vertices are identified by *exact* coincidence, not by proximity: two corners
are the same topological vertex only when every coordinate has the same bit
pattern. Re-subdivision relies on this, since the flat output of one pass
repeats each shared position bit-for-bit and the next pass merges them back.

The only normalisation applied is ``-0.0 -> +0.0``, which compare equal as
floats but differ in their bit patterns.
"""

import torch

_INT_VIEW_DTYPES = {
    torch.float16: torch.int16,
    torch.bfloat16: torch.int16,
    torch.float32: torch.int32,
    torch.float64: torch.int64,
}


def position_keys(points: torch.Tensor) -> torch.Tensor:
    """Reinterpret positions as integer bit patterns suitable for hashing.

    Parameters
    ----------
    points : torch.Tensor
        Floating-point positions, shape (n_points, n_spatial_dims).

    Returns
    -------
    torch.Tensor
        Integer tensor of the same shape. Two rows are equal if and only if
        the corresponding positions are exactly equal as floats (with
        ``-0.0 == +0.0``). NaN coordinates compare by bit pattern.

    Examples
    --------
    >>> keys = position_keys(torch.tensor([[0.0, 1.0], [-0.0, 1.0]]))
    >>> torch.equal(keys[0], keys[1])
    True
    """
    if points.dtype not in _INT_VIEW_DTYPES:
        raise TypeError(
            f"`points` must have a floating-point dtype, but got {points.dtype=}."
        )

    ### Adding +0.0 maps -0.0 onto +0.0 and leaves every other value untouched
    canonical = (points + 0.0).contiguous()
    return canonical.view(_INT_VIEW_DTYPES[points.dtype])


def first_seen_unique(keys: torch.Tensor) -> tuple[torch.Tensor, torch.Tensor]:
    """Deduplicate rows of ``keys``, numbering them in order of first appearance.

    ``torch.unique`` numbers rows in sorted order; this relabels them so that
    the first distinct row gets id 0, the next previously-unseen row id 1, and
    so on. This is the order a sequential scan with a hash map would produce.

    Parameters
    ----------
    keys : torch.Tensor
        Integer keys, shape (n_rows,) or (n_rows, key_width).

    Returns
    -------
    ids : torch.Tensor
        Shape (n_rows,). ``ids[i]`` is the first-seen id of row *i*.
    first_rows : torch.Tensor
        Shape (n_unique,). ``first_rows[k]`` is the row where id *k* first
        appears, so ``keys[first_rows]`` lists the unique rows in id order.

    Examples
    --------
    >>> ids, first_rows = first_seen_unique(torch.tensor([7, 3, 7, 5, 3]))
    >>> ids.tolist(), first_rows.tolist()
    ([0, 1, 0, 2, 1], [0, 1, 3])
    """
    device = keys.device
    n_rows = keys.shape[0]

    if n_rows == 0:
        empty = torch.zeros(0, dtype=torch.int64, device=device)
        return empty, empty

    ### Sorted-order unique ids
    _, sorted_ids = torch.unique(keys, dim=0, return_inverse=True)
    n_unique = int(sorted_ids.max().item()) + 1

    ### First row at which each sorted-order id occurs
    rows = torch.arange(n_rows, dtype=torch.int64, device=device)
    first_rows = torch.full((n_unique,), n_rows, dtype=torch.int64, device=device)
    first_rows.scatter_reduce_(0, sorted_ids, rows, reduce="amin")

    ### Relabel sorted-order ids by first appearance
    order = torch.argsort(first_rows)
    relabel = torch.empty_like(order)
    relabel[order] = torch.arange(n_unique, dtype=torch.int64, device=device)

    return relabel[sorted_ids], first_rows[order]
