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

"""Ragged incidence lists (vertex -> edges, vertex -> faces).

Incidences are stored with offset-indices encoding: the neighbours of source
``i`` are ``indices[offsets[i]:offsets[i + 1]]``. This keeps the adjacency
model a flat arena of integer tensors with no back-pointers.
"""

import torch
from tensordict import tensorclass


@tensorclass
class Adjacency:
    """Ragged adjacency list stored with offset-indices encoding.

    Attributes:
        offsets: Start of each source's neighbour list in ``indices``.
            Shape (n_sources + 1,), dtype int64.
        indices: Flattened neighbour indices. Shape (total_neighbors,), dtype int64.

    Examples
    --------
        >>> # vertex 0 touches edges [0, 3], vertex 1 touches [0, 1], vertex 2 none
        >>> adj = Adjacency(
        ...     offsets=torch.tensor([0, 2, 4, 4]),
        ...     indices=torch.tensor([0, 3, 0, 1]),
        ... )
        >>> adj.to_list()
        [[0, 3], [0, 1], []]
    """

    offsets: torch.Tensor  # shape: (n_sources + 1,), dtype: int64
    indices: torch.Tensor  # shape: (total_neighbors,), dtype: int64

    def __post_init__(self):
        if not torch.compiler.is_compiling():
            if len(self.offsets) < 1:
                raise ValueError(
                    f"Offsets array must have length >= 1 (n_sources + 1), but got {len(self.offsets)=}."
                )
            if self.offsets[0].item() != 0:
                raise ValueError(f"First offset must be 0, but got {self.offsets[0].item()=}.")
            last_offset = self.offsets[-1].item()
            indices_length = len(self.indices)
            if last_offset != indices_length:
                raise ValueError(
                    f"Last offset must equal length of indices, but got "
                    f"{last_offset=} != {indices_length=}."
                )

    def to_list(self) -> list[list[int]]:
        """Convert to a ragged list-of-lists, mainly for tests and debugging."""
        offsets_np = self.offsets.cpu().numpy()
        indices_np = self.indices.cpu().numpy()
        return [
            indices_np[offsets_np[i] : offsets_np[i + 1]].tolist()
            for i in range(len(offsets_np) - 1)
        ]

    @property
    def n_sources(self) -> int:
        return len(self.offsets) - 1

    @property
    def n_total_neighbors(self) -> int:
        return len(self.indices)

    @property
    def counts(self) -> torch.Tensor:
        """Number of neighbours of each source, shape (n_sources,)."""
        return self.offsets[1:] - self.offsets[:-1]

    def expand_to_pairs(self) -> tuple[torch.Tensor, torch.Tensor]:
        """Expand to flat ``(source_indices, target_indices)`` pairs.

        Examples
        --------
            >>> adj = Adjacency(
            ...     offsets=torch.tensor([0, 2, 3]),
            ...     indices=torch.tensor([4, 5, 6]),
            ... )
            >>> sources, targets = adj.expand_to_pairs()
            >>> sources.tolist(), targets.tolist()
            ([0, 0, 1], [4, 5, 6])
        """
        device = self.offsets.device
        if self.n_total_neighbors == 0:
            return torch.zeros(0, dtype=torch.int64, device=device), self.indices

        # A position p belongs to source i when offsets[i] <= p < offsets[i + 1]
        positions = torch.arange(self.n_total_neighbors, dtype=torch.int64, device=device)
        source_indices = torch.searchsorted(self.offsets, positions, right=True) - 1
        return source_indices, self.indices

    def segment_mean(self, values: torch.Tensor) -> torch.Tensor:
        """Average ``values`` over each source's neighbour list.

        Parameters
        ----------
        values : torch.Tensor
            Per-target values, shape (n_targets, *value_shape).

        Returns
        -------
        torch.Tensor
            Shape (n_sources, *value_shape). ``result[i]`` is the mean of
            ``values[j]`` over the neighbours ``j`` of source ``i``; sources
            without neighbours get zeros.
        """
        sources, targets = self.expand_to_pairs()
        sums = torch.zeros(
            (self.n_sources, *values.shape[1:]), dtype=values.dtype, device=values.device
        )
        sums.index_add_(0, sources, values[targets])

        counts = self.counts.clamp(min=1).to(values.dtype)
        return sums / counts.view(-1, *([1] * (values.ndim - 1)))


def build_adjacency_from_pairs(
    source_indices: torch.Tensor,  # shape: (n_pairs,)
    target_indices: torch.Tensor,  # shape: (n_pairs,)
    n_sources: int,
    unique: bool = False,
) -> Adjacency:
    """Build offset-index adjacency from (source, target) pairs.

    Neighbour lists come out sorted by target index.

    Parameters
    ----------
    source_indices : torch.Tensor
        Source entity indices, shape (n_pairs,).
    target_indices : torch.Tensor
        Target entity indices, shape (n_pairs,).
    n_sources : int
        Total number of source entities (may exceed max(source_indices)).
    unique : bool, optional
        If True, repeated (source, target) pairs are listed once, which gives
        each source a *set* of neighbours.

    Returns
    -------
    Adjacency
        ``adjacency.to_list()[i]`` holds the targets of source ``i``.

    Examples
    --------
        >>> sources = torch.tensor([0, 2, 0, 0])
        >>> targets = torch.tensor([1, 3, 1, 0])
        >>> build_adjacency_from_pairs(sources, targets, n_sources=3).to_list()
        [[0, 1, 1], [], [3]]
        >>> build_adjacency_from_pairs(sources, targets, n_sources=3, unique=True).to_list()
        [[0, 1], [], [3]]
    """
    device = source_indices.device

    if len(source_indices) == 0:
        return Adjacency(
            offsets=torch.zeros(n_sources + 1, dtype=torch.int64, device=device),
            indices=torch.zeros(0, dtype=torch.int64, device=device),
        )

    ### Lexicographic sort by (source, target) using two stable argsorts
    sort_by_target = torch.argsort(target_indices, stable=True)
    sort_indices = sort_by_target[
        torch.argsort(source_indices[sort_by_target], stable=True)
    ]
    sorted_sources = source_indices[sort_indices]
    sorted_targets = target_indices[sort_indices]

    ### Drop repeats, which are adjacent after the sort
    if unique:
        keep = torch.ones_like(sorted_sources, dtype=torch.bool)
        keep[1:] = (sorted_sources[1:] != sorted_sources[:-1]) | (
            sorted_targets[1:] != sorted_targets[:-1]
        )
        sorted_sources = sorted_sources[keep]
        sorted_targets = sorted_targets[keep]

    offsets = torch.zeros(n_sources + 1, dtype=torch.int64, device=device)
    offsets[1:] = torch.cumsum(torch.bincount(sorted_sources, minlength=n_sources), dim=0)

    return Adjacency(offsets=offsets, indices=sorted_targets)
