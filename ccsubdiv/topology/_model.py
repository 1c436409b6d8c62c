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

"""The adjacency model: an index-addressed arena of vertex, edge and face records.

Every record field is one tensor row and every cross reference is an integer
index into another tensor, so the vertex <-> edge <-> face back-references
form no ownership cycles. A model is built fresh from a :class:`Mesh` for each
subdivision pass and discarded afterwards.
"""

import torch
from tensordict import tensorclass

from ccsubdiv.errors import TopologyCollisionError
from ccsubdiv.mesh import PAD_INDEX
from ccsubdiv.neighbors import Adjacency
from ccsubdiv.utilities import find_edges_in_reference, position_keys


@tensorclass
class AdjacencyModel:
    """Vertices, edges and faces of a polygon mesh with full cross-indexing.

    Attributes:
        points: Unique vertex positions, shape (n_vertices, 3).
        position_keys: Exact bit-pattern key of each position, shape
            (n_vertices, 3). This is the position -> vertex map; rows are
            pairwise distinct.
        edges: Endpoint vertex indices, lower index first, shape (n_edges, 2).
        edge_faces: First two incident faces of each edge in discovery order,
            shape (n_edges, 2). Boundary edges hold ``-1`` in the second slot.
        face_vertices: Corner vertex indices in winding order, shape
            (n_faces, 4), ``-1`` in the fourth slot of triangles.
        face_edges: Edge indices in the same cyclic order, shape (n_faces, 4).
            Edge ``i`` joins corner ``i`` and corner ``(i + 1) % n``.
        vertex_edges: Set of incident edges of each vertex.
        vertex_faces: Set of incident faces of each vertex.
    """

    points: torch.Tensor  # shape: (n_vertices, 3)
    position_keys: torch.Tensor  # shape: (n_vertices, 3)
    edges: torch.Tensor  # shape: (n_edges, 2)
    edge_faces: torch.Tensor  # shape: (n_edges, 2)
    face_vertices: torch.Tensor  # shape: (n_faces, 4)
    face_edges: torch.Tensor  # shape: (n_faces, 4)
    vertex_edges: Adjacency
    vertex_faces: Adjacency

    @property
    def n_vertices(self) -> int:
        return self.points.shape[0]

    @property
    def n_edges(self) -> int:
        return self.edges.shape[0]

    @property
    def n_faces(self) -> int:
        return self.face_vertices.shape[0]

    @property
    def is_quad(self) -> torch.Tensor:
        """Boolean mask of quadrilateral faces, shape (n_faces,)."""
        return self.face_vertices[:, 3] != PAD_INDEX

    @property
    def n_corners(self) -> torch.Tensor:
        """Number of corners (3 or 4) of each face, shape (n_faces,)."""
        return torch.where(self.is_quad, 4, 3)

    @property
    def edge_face_count(self) -> torch.Tensor:
        """Number of recorded incident faces per edge (1 or 2), shape (n_edges,)."""
        return (self.edge_faces != PAD_INDEX).sum(dim=1)

    @property
    def is_boundary_edge(self) -> torch.Tensor:
        return self.edge_face_count == 1

    @property
    def n_boundary_edges(self) -> int:
        return int(self.is_boundary_edge.sum().item())

    @property
    def valence(self) -> torch.Tensor:
        """Number of incident faces of each vertex, shape (n_vertices,)."""
        return self.vertex_faces.counts

    def find_vertex(self, position: torch.Tensor | list | tuple) -> int | None:
        """Return the vertex at exactly ``position``, or None."""
        position = torch.as_tensor(
            position, dtype=self.points.dtype, device=self.points.device
        )
        key = position_keys(position.reshape(1, -1))
        hits = torch.nonzero((self.position_keys == key).all(dim=1)).flatten()
        return int(hits[0].item()) if len(hits) > 0 else None

    def find_edge(self, v0: int, v1: int) -> int | None:
        """Return the edge joining ``v0`` and ``v1`` (in either order), or None."""
        query = torch.tensor([[v0, v1]], dtype=torch.int64, device=self.edges.device)
        indices, matches = find_edges_in_reference(self.edges, query)
        return int(indices[0].item()) if matches[0] else None

    def move_vertices(self, new_points: torch.Tensor) -> None:
        """Move every vertex to its new position, keeping the position map exact.

        Vertices are moved one at a time in index order. Moving vertex ``i``
        releases its old key, then claims the key of ``new_points[i]``; the
        claim fails if that key is still held by a distinct vertex, i.e. a
        vertex ``j < i`` already moved to the same position, or a vertex
        ``j > i`` not yet moved whose old position it is.

        The check is evaluated for all vertices at once, and the model is only
        updated when no vertex fails.

        Parameters
        ----------
        new_points : torch.Tensor
            Target positions, shape (n_vertices, 3).

        Raises
        ------
        TopologyCollisionError
            For the first vertex (in index order) whose move collides.
        """
        n = self.n_vertices
        if new_points.shape != self.points.shape:
            raise ValueError(
                f"`new_points` must have shape {tuple(self.points.shape)}, "
                f"but got {tuple(new_points.shape)}."
            )
        if n == 0:
            return

        device = self.points.device
        new_points = new_points.to(dtype=self.points.dtype)
        new_keys = position_keys(new_points)

        ### Group identical keys across new and old positions
        _, groups = torch.unique(
            torch.cat([new_keys, self.position_keys], dim=0), dim=0, return_inverse=True
        )
        new_groups, old_groups = groups[:n], groups[n:]
        n_groups = int(groups.max().item()) + 1
        vertex_ids = torch.arange(n, dtype=torch.int64, device=device)

        # Lowest vertex moved onto each key, and highest vertex that starts there
        first_new = torch.full((n_groups,), n, dtype=torch.int64, device=device)
        first_new.scatter_reduce_(0, new_groups, vertex_ids, reduce="amin")
        last_old = torch.full((n_groups,), -1, dtype=torch.int64, device=device)
        last_old.scatter_reduce_(0, old_groups, vertex_ids, reduce="amax")

        held_by_moved = first_new[new_groups] < vertex_ids
        held_by_unmoved = last_old[new_groups] > vertex_ids
        collides = held_by_moved | held_by_unmoved

        if collides.any():
            vertex = int(torch.nonzero(collides)[0].item())
            group = new_groups[vertex]
            other = first_new[group] if held_by_moved[vertex] else last_old[group]
            raise TopologyCollisionError(
                vertex=vertex,
                other=int(other.item()),
                position=tuple(new_points[vertex].tolist()),
            )

        self.points = new_points
        self.position_keys = new_keys
