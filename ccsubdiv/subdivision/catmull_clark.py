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

"""Catmull-Clark subdivision for meshes of triangles and quadrilaterals.

Catmull-Clark is an approximating scheme: every original vertex is moved
towards a weighted average of its neighbourhood, and every face is split into
one quadrilateral per corner. After one pass the mesh is all quads.

One pass runs in four stages over an :class:`AdjacencyModel`:

1. face points: the centroid of each face,
2. edge points: the average of the endpoints and the two adjacent face points
   (midpoint on boundary edges),
3. vertex points: the valence-weighted Catmull-Clark vertex rule,
4. tessellation: a quad ``(edge point, corner, edge point, face point)`` per
   face corner.

The output mesh is flat: each input face appends its own copies of its corner,
edge and face points, so neighbouring faces repeat shared positions
bit-for-bit. The next pass merges them again in the topology builder.
"""

import logging
import time

import torch

from ccsubdiv.mesh import PAD_INDEX, Mesh
from ccsubdiv.topology import AdjacencyModel, build_adjacency_model

logger = logging.getLogger(__name__)


def compute_face_points(model: AdjacencyModel) -> torch.Tensor:
    """Centroid of each face's corners.

    Returns
    -------
    torch.Tensor
        Shape (n_faces, 3).
    """
    corner_mask = model.face_vertices != PAD_INDEX
    corner_points = model.points[model.face_vertices.clamp(min=0)]
    corner_points = corner_points * corner_mask.unsqueeze(-1)
    n_corners = corner_mask.sum(dim=1, keepdim=True).to(model.points.dtype)
    return corner_points.sum(dim=1) / n_corners


def compute_edge_points(
    model: AdjacencyModel,
    face_points: torch.Tensor,  # shape: (n_faces, 3)
) -> torch.Tensor:
    """New position generated on each edge.

    An edge shared by two faces gets ``(P0 + P1 + F0 + F1) / 4``, with ``P``
    the endpoints and ``F`` the face points of the two recorded faces. Any
    other edge (boundary) gets the plain midpoint ``(P0 + P1) / 2``.

    Returns
    -------
    torch.Tensor
        Shape (n_edges, 3).
    """
    p0 = model.points[model.edges[:, 0]]
    p1 = model.points[model.edges[:, 1]]
    midpoints = 0.5 * (p0 + p1)

    adjacent_face_points = face_points[model.edge_faces.clamp(min=0)]  # (n_edges, 2, 3)
    smooth_points = 0.25 * (
        p0 + p1 + adjacent_face_points[:, 0] + adjacent_face_points[:, 1]
    )

    is_interior = (model.edge_face_count == 2).unsqueeze(-1)
    return torch.where(is_interior, smooth_points, midpoints)


def compute_vertex_points(
    model: AdjacencyModel,
    face_points: torch.Tensor,  # shape: (n_faces, 3)
) -> torch.Tensor:
    r"""Repositioned location of every original vertex.

    With :math:`n` the number of faces around the vertex:

    .. math::

        V' = \frac{n - 3}{n} V + \frac{1}{n} \bar{F} + \frac{2}{n} \bar{R}

    where :math:`\bar{F}` averages the face points of the incident faces and
    :math:`\bar{R}` averages the midpoints of the incident edges. Edge
    midpoints are taken from the positions before any vertex is moved.

    Returns
    -------
    torch.Tensor
        Shape (n_vertices, 3).
    """
    original_points = model.points.clone()
    n = model.valence.to(original_points.dtype).unsqueeze(-1)

    ### Valence weights
    m1 = (n - 3.0) / n
    m2 = 1.0 / n
    m3 = 2.0 / n

    avg_face_point = model.vertex_faces.segment_mean(face_points)
    edge_midpoints = 0.5 * (
        original_points[model.edges[:, 0]] + original_points[model.edges[:, 1]]
    )
    avg_edge_midpoint = model.vertex_edges.segment_mean(edge_midpoints)

    return m1 * original_points + m2 * avg_face_point + m3 * avg_edge_midpoint


def tessellate(
    model: AdjacencyModel,
    face_points: torch.Tensor,  # shape: (n_faces, 3)
    edge_points: torch.Tensor,  # shape: (n_edges, 3)
) -> Mesh:
    """Split every face into one quadrilateral per corner.

    For each face, in input order, the output receives the face's corner
    positions (as currently stored in ``model``), its edge points in cyclic
    order and its face point: 9 vertices for a quad, 7 for a triangle. Corner
    ``k`` then yields the quad ``(edge point k-1, corner k, edge point k, face
    point)``, which keeps the winding of the parent face.

    Returns
    -------
    Mesh
        All-quad mesh with ``sum(n_corners)`` faces.
    """
    device = model.points.device
    n_faces = model.n_faces
    corner_mask = model.face_vertices != PAD_INDEX  # (n_faces, 4)
    n_corners = corner_mask.sum(dim=1, keepdim=True)

    ### Per-face block of slots: 4 corners, 4 edge points, 1 face point
    block_points = torch.cat(
        [
            model.points[model.face_vertices.clamp(min=0)],
            edge_points[model.face_edges.clamp(min=0)],
            face_points.unsqueeze(1),
        ],
        dim=1,
    )  # (n_faces, 9, 3)
    block_mask = torch.cat(
        [
            corner_mask,
            corner_mask,
            torch.ones((n_faces, 1), dtype=torch.bool, device=device),
        ],
        dim=1,
    )  # (n_faces, 9)
    new_points = block_points[block_mask]

    # Output vertex index of every used slot
    slot_vertices = torch.full(
        (n_faces, 9), PAD_INDEX, dtype=torch.int64, device=device
    )
    slot_vertices[block_mask] = torch.arange(
        len(new_points), dtype=torch.int64, device=device
    )

    ### One quad per corner
    k = torch.arange(4, dtype=torch.int64, device=device).unsqueeze(0)
    previous_k = (k + n_corners - 1) % n_corners  # (n_faces, 4)
    quads = torch.stack(
        [
            torch.gather(slot_vertices, 1, 4 + previous_k),
            slot_vertices[:, :4],
            slot_vertices[:, 4:8],
            slot_vertices[:, 8:9].expand(n_faces, 4),
        ],
        dim=-1,
    )  # (n_faces, 4, 4)

    return Mesh(points=new_points, faces=quads[corner_mask])


def subdivide_model(model: AdjacencyModel) -> Mesh:
    """Run one Catmull-Clark pass over an adjacency model.

    The model's vertices are moved to their vertex points, so ``model`` is
    mutated and should not be reused for another pass.

    Parameters
    ----------
    model : AdjacencyModel
        Topology of the mesh to refine.

    Returns
    -------
    Mesh
        Refined all-quad mesh.

    Raises
    ------
    TopologyCollisionError
        If a vertex point coincides with the position of another vertex. No
        mesh is produced and ``model`` is left unchanged.
    """
    face_points = compute_face_points(model)
    edge_points = compute_edge_points(model, face_points)
    vertex_points = compute_vertex_points(model, face_points)

    model.move_vertices(vertex_points)

    return tessellate(model, face_points, edge_points)


def apply_subdivision(mesh: Mesh, iterations: int) -> Mesh:
    """Apply ``iterations`` rounds of Catmull-Clark subdivision.

    Each round rebuilds the topology from the previous round's flat output.
    The input mesh is never modified.

    Parameters
    ----------
    mesh : Mesh
        Input mesh of triangles and quadrilaterals.
    iterations : int
        Number of rounds. ``0`` returns an independent copy of ``mesh``.

    Returns
    -------
    Mesh
        Refined mesh. For ``iterations >= 1`` all faces are quads and the face
        count is ``sum(n_corners) * 4 ** (iterations - 1)``.

    Raises
    ------
    TypeError
        If ``iterations`` is not an integer.
    ValueError
        If ``iterations`` is negative.
    TopologyCollisionError
        If a round hits a vertex collision. Earlier rounds are discarded.

    Examples
    --------
    >>> from ccsubdiv.primitives import tetrahedron_surface
    >>> refined = apply_subdivision(tetrahedron_surface.load(), iterations=1)
    >>> refined.n_faces, refined.n_quads
    (12, 12)
    """
    if isinstance(iterations, bool) or not isinstance(iterations, int):
        raise TypeError(
            f"`iterations` must be an int, but got {type(iterations).__name__}."
        )
    if iterations < 0:
        raise ValueError(f"`iterations` must be >= 0, but got {iterations=}.")

    if iterations == 0:
        return Mesh(points=mesh.points.clone(), faces=mesh.faces.clone())

    result = mesh
    for level in range(iterations):
        start = time.perf_counter()
        result = subdivide_model(build_adjacency_model(result))
        elapsed_ms = (time.perf_counter() - start) * 1e3
        logger.debug(
            f"Catmull-Clark level {level + 1}/{iterations}: "
            f"{result.n_points} points, {result.n_faces} faces in {elapsed_ms:.2f} ms."
        )

    return result
