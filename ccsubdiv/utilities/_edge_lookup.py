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

"""Edge keys and lookup for unordered vertex pairs.

An edge is identified by its two endpoint indices regardless of traversal
direction; the canonical form lists the lower index first.
"""

import torch


def canonicalize_edges(edges: torch.Tensor) -> torch.Tensor:
    """Sort each vertex pair so that the lower index comes first.

    Parameters
    ----------
    edges : torch.Tensor
        Vertex pairs, shape (n_edges, 2).

    Returns
    -------
    torch.Tensor
        Shape (n_edges, 2) with ``result[:, 0] <= result[:, 1]``.
    """
    return torch.stack(
        [torch.minimum(edges[:, 0], edges[:, 1]), torch.maximum(edges[:, 0], edges[:, 1])],
        dim=1,
    )


def find_edges_in_reference(
    reference_edges: torch.Tensor,
    query_edges: torch.Tensor,
) -> tuple[torch.Tensor, torch.Tensor]:
    """Find indices of query edges within a reference edge set.

    Uses hash-based lookup with O(n log n) complexity for sorting
    and O(m log n) for queries. Edge direction is ignored.

    Parameters
    ----------
    reference_edges : torch.Tensor
        Reference edge set without duplicates, shape (n_ref, 2).
    query_edges : torch.Tensor
        Query edges to find, shape (n_query, 2).

    Returns
    -------
    indices : torch.Tensor
        Shape (n_query,). For each query edge, its row in ``reference_edges``.
        Undefined where ``matches`` is False.
    matches : torch.Tensor
        Shape (n_query,) bool. True if the query edge was found.

    Examples
    --------
    >>> ref = torch.tensor([[0, 1], [1, 2], [2, 3]])
    >>> query = torch.tensor([[2, 1], [5, 6], [3, 2]])
    >>> indices, matches = find_edges_in_reference(ref, query)
    >>> matches.tolist()
    [True, False, True]
    >>> indices[matches].tolist()
    [1, 2]
    """
    device = reference_edges.device

    if len(reference_edges) == 0 or len(query_edges) == 0:
        return (
            torch.zeros(len(query_edges), dtype=torch.long, device=device),
            torch.zeros(len(query_edges), dtype=torch.bool, device=device),
        )

    sorted_reference = canonicalize_edges(reference_edges)
    sorted_query = canonicalize_edges(query_edges)

    ### hash = v0 * (max_vertex + 1) + v1; unique for non-negative indices
    max_vertex = max(reference_edges.max().item(), query_edges.max().item()) + 1
    reference_hash = sorted_reference[:, 0] * max_vertex + sorted_reference[:, 1]
    query_hash = sorted_query[:, 0] * max_vertex + sorted_query[:, 1]

    reference_hash_sorted, sort_indices = torch.sort(reference_hash)
    positions = torch.searchsorted(reference_hash_sorted, query_hash)
    positions = positions.clamp(max=len(reference_hash_sorted) - 1)

    ### searchsorted returns insertion points, so confirm exact hits
    matches = reference_hash_sorted[positions] == query_hash
    # Negative indices never occur in a reference set
    matches &= (sorted_query[:, 0] >= 0)

    return sort_indices[positions], matches
