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

"""Build an :class:`AdjacencyModel` from a flat polygon :class:`Mesh`.

The builder performs one pass over the faces in input order, corners in slot
order, and assigns vertex and edge indices in the order they are first seen.
Everything is vectorized; the first-seen numbering reproduces what a
sequential scan over hash maps would produce.
"""

import logging

import torch

from ccsubdiv.mesh import PAD_INDEX, Mesh
from ccsubdiv.neighbors import build_adjacency_from_pairs
from ccsubdiv.topology._model import AdjacencyModel
from ccsubdiv.utilities import canonicalize_edges, first_seen_unique, position_keys

logger = logging.getLogger(__name__)


def build_adjacency_model(mesh: Mesh) -> AdjacencyModel:
    """Derive the shared vertex/edge/face topology of a mesh.

    Corners are merged into one vertex when their positions are bitwise equal
    (``-0.0`` and ``+0.0`` are treated as equal). Each face contributes one
    half-edge per corner, from corner ``i`` to corner ``(i + 1) % n``, and
    half-edges on the same unordered vertex pair share one edge.

    An edge records at most two incident faces: the first two seen in the
    scan. Faces past the second still list the edge in ``face_edges``, but are
    not recorded on the edge.

    Parameters
    ----------
    mesh : Mesh
        Input mesh of triangles and quadrilaterals.

    Returns
    -------
    AdjacencyModel
        The adjacency model, on the same device as ``mesh``.

    Examples
    --------
    >>> from ccsubdiv.primitives import cube_surface
    >>> model = build_adjacency_model(cube_surface.load(duplicate_corners=True))
    >>> model.n_vertices, model.n_edges, model.n_faces
    (8, 12, 6)
    """
    device = mesh.points.device
    faces = mesh.faces.to(torch.int64)
    n_faces = faces.shape[0]

    ### Vertices, numbered in corner scan order
    corner_mask = faces != PAD_INDEX  # (n_faces, 4)
    n_corners = corner_mask.sum(dim=1)
    corner_points = mesh.points[faces[corner_mask]]  # row-major = scan order

    corner_vertices, first_corners = first_seen_unique(position_keys(corner_points))
    points = corner_points[first_corners]
    n_vertices = points.shape[0]

    face_vertices = torch.full_like(faces, PAD_INDEX)
    face_vertices[corner_mask] = corner_vertices

    ### Half-edges: corner i -> corner (i + 1) % n
    slots = torch.arange(4, dtype=torch.int64, device=device)
    next_slots = (slots.unsqueeze(0) + 1) % n_corners.unsqueeze(1)
    next_vertices = torch.gather(face_vertices, 1, next_slots)

    half_edges = canonicalize_edges(
        torch.stack([face_vertices[corner_mask], next_vertices[corner_mask]], dim=1)
    )
    half_edge_ids, first_half_edges = first_seen_unique(half_edges)
    edges = half_edges[first_half_edges]
    n_edges = edges.shape[0]

    face_edges = torch.full_like(faces, PAD_INDEX)
    face_edges[corner_mask] = half_edge_ids

    half_edge_faces = (
        torch.arange(n_faces, dtype=torch.int64, device=device)
        .unsqueeze(1)
        .expand(n_faces, 4)[corner_mask]
    )

    ### Edge -> faces: keep the first two incidences of each edge
    # A stable sort groups half-edges by edge while keeping scan order inside
    # each group, so the rank within a group is the incidence number.
    order = torch.argsort(half_edge_ids, stable=True)
    sorted_edge_ids = half_edge_ids[order]
    incidences = torch.bincount(half_edge_ids, minlength=n_edges)
    group_starts = torch.cumsum(incidences, dim=0) - incidences
    ranks = (
        torch.arange(len(order), dtype=torch.int64, device=device)
        - group_starts[sorted_edge_ids]
    )
    recorded = ranks < 2

    edge_faces = torch.full((n_edges, 2), PAD_INDEX, dtype=torch.int64, device=device)
    edge_faces[sorted_edge_ids[recorded], ranks[recorded]] = half_edge_faces[order][
        recorded
    ]

    ### Vertex -> edges and vertex -> faces, as sets
    vertex_faces = build_adjacency_from_pairs(
        corner_vertices, half_edge_faces, n_sources=n_vertices, unique=True
    )
    vertex_edges = build_adjacency_from_pairs(
        half_edges.T.reshape(-1),
        half_edge_ids.repeat(2),
        n_sources=n_vertices,
        unique=True,
    )

    model = AdjacencyModel(
        points=points,
        position_keys=position_keys(points),
        edges=edges,
        edge_faces=edge_faces,
        face_vertices=face_vertices,
        face_edges=face_edges,
        vertex_edges=vertex_edges,
        vertex_faces=vertex_faces,
    )

    if logger.isEnabledFor(logging.DEBUG):
        n_ignored = int((incidences - 2).clamp(min=0).sum().item())
        logger.debug(
            f"Built adjacency model: {n_vertices} vertices, {n_edges} edges "
            f"({model.n_boundary_edges} boundary), {n_faces} faces, "
            f"{n_ignored} edge-face incidences past the second ignored."
        )

    return model
