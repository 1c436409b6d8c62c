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

"""Tests for Catmull-Clark subdivision.

Tests validate the individual stages (face, edge and vertex points,
tessellation) against hand-computed values, the structure and winding of the
output mesh, the iteration driver, and collision reporting.
"""

import logging

import pytest
import torch

from ccsubdiv import (
    Mesh,
    TopologyCollisionError,
    apply_subdivision,
    build_adjacency_model,
    subdivide_model,
)
from ccsubdiv.primitives import cube_surface, quad_grid
from ccsubdiv.subdivision import (
    compute_edge_points,
    compute_face_points,
    compute_vertex_points,
    tessellate,
)

### Helper Functions ###


def create_pyramid() -> Mesh:
    """Closed square pyramid: one quad base and four triangular sides."""
    points = torch.tensor(
        [
            [0.0, 0.0, 0.0],
            [1.0, 0.0, 0.0],
            [1.0, 1.0, 0.0],
            [0.0, 1.0, 0.0],
            [0.5, 0.5, 1.0],
        ]
    )
    polygons = [[0, 3, 2, 1], [0, 1, 4], [1, 2, 4], [2, 3, 4], [3, 0, 4]]
    return Mesh.from_polygons(points, polygons)


def face_normals(mesh: Mesh) -> torch.Tensor:
    """Diagonal cross product normal of every face, shape (n_faces, 3).

    For a triangle the padded fourth corner is replaced by corner 0, which
    reduces the diagonal product to the usual triangle normal.
    """
    p = mesh.points[mesh.faces.clamp(min=0)]
    p3 = torch.where(mesh.is_quad.unsqueeze(-1), p[:, 3], p[:, 0])
    return torch.linalg.cross(p[:, 2] - p[:, 0], p3 - p[:, 1], dim=-1)


def n_unique_positions(mesh: Mesh) -> int:
    return len(torch.unique(mesh.points, dim=0))


def assert_has_point(mesh: Mesh, expected: list[float]) -> None:
    target = torch.tensor(expected, dtype=mesh.points.dtype, device=mesh.points.device)
    distance = (mesh.points - target).norm(dim=-1).min().item()
    assert distance < 1e-6, f"No point near {expected}; closest is {distance=}"


### Stage Functions ###


class TestFacePoints:
    def test_quad_and_triangle_centroids(self):
        model = build_adjacency_model(create_pyramid())
        face_points = compute_face_points(model)
        torch.testing.assert_close(face_points[0], torch.tensor([0.5, 0.5, 0.0]))
        torch.testing.assert_close(
            face_points[1], torch.tensor([0.5, 1.0 / 6.0, 1.0 / 3.0])
        )


class TestEdgePoints:
    def test_interior_edge(self, cube_mesh):
        model = build_adjacency_model(cube_mesh)
        edge_points = compute_edge_points(model, compute_face_points(model))

        v0 = model.find_vertex([0.0, 0.0, 0.0])
        v1 = model.find_vertex([1.0, 0.0, 0.0])
        edge = model.find_edge(v0, v1)
        torch.testing.assert_close(edge_points[edge], torch.tensor([0.5, 0.125, 0.125]))

    def test_triangle_diagonal(self, two_triangles_mesh):
        model = build_adjacency_model(two_triangles_mesh)
        edge_points = compute_edge_points(model, compute_face_points(model))
        diagonal = model.find_edge(0, 2)
        torch.testing.assert_close(edge_points[diagonal], torch.tensor([0.5, 0.5, 0.0]))

    def test_boundary_edge_is_midpoint(self, grid_mesh):
        model = build_adjacency_model(grid_mesh)
        edge_points = compute_edge_points(model, compute_face_points(model))
        boundary = model.is_boundary_edge
        midpoints = model.points[model.edges].mean(dim=1)
        torch.testing.assert_close(edge_points[boundary], midpoints[boundary])


class TestVertexPoints:
    def test_cube_corner(self, cube_mesh):
        model = build_adjacency_model(cube_mesh)
        vertex_points = compute_vertex_points(model, compute_face_points(model))
        v0 = model.find_vertex([0.0, 0.0, 0.0])
        torch.testing.assert_close(vertex_points[v0], torch.full((3,), 2.0 / 9.0))

    def test_regular_interior_vertex_of_flat_grid_stays(self, grid_mesh):
        """Valence-4 weights (1/4, 1/4, 1/2) keep a regular planar vertex fixed."""
        model = build_adjacency_model(grid_mesh)
        vertex_points = compute_vertex_points(model, compute_face_points(model))
        center = model.find_vertex([1.0, 1.0, 0.0])
        torch.testing.assert_close(vertex_points[center], torch.tensor([1.0, 1.0, 0.0]))

    def test_does_not_move_model(self, cube_mesh):
        model = build_adjacency_model(cube_mesh)
        original = model.points.clone()
        compute_vertex_points(model, compute_face_points(model))
        assert torch.equal(model.points, original)


class TestTessellate:
    def test_quad_face_layout(self, cube_mesh):
        """Face f emits 9 points and the quads (e[k-1], c[k], e[k], f)."""
        model = build_adjacency_model(cube_mesh)
        face_points = compute_face_points(model)
        edge_points = compute_edge_points(model, face_points)
        result = tessellate(model, face_points, edge_points)

        assert result.n_points == 6 * 9
        assert result.faces[:4].tolist() == [
            [7, 0, 4, 8],
            [4, 1, 5, 8],
            [5, 2, 6, 8],
            [6, 3, 7, 8],
        ]
        assert (result.faces[4:8] - 9).tolist() == result.faces[:4].tolist()

        torch.testing.assert_close(result.points[0:4], model.points[model.face_vertices[0]])
        torch.testing.assert_close(result.points[4:8], edge_points[model.face_edges[0]])
        torch.testing.assert_close(result.points[8], face_points[0])

    def test_triangle_face_layout(self, tetrahedron_mesh):
        model = build_adjacency_model(tetrahedron_mesh)
        face_points = compute_face_points(model)
        edge_points = compute_edge_points(model, face_points)
        result = tessellate(model, face_points, edge_points)

        assert result.n_points == 4 * 7
        assert result.faces[:3].tolist() == [[5, 0, 3, 6], [3, 1, 4, 6], [4, 2, 5, 6]]
        assert result.n_quads == result.n_faces == 12


### Single Pass ###


class TestSubdivideModel:
    def test_cube(self, cube_mesh):
        result = subdivide_model(build_adjacency_model(cube_mesh))

        assert result.n_faces == 24
        assert result.n_quads == 24
        assert n_unique_positions(result) == 26
        assert_has_point(result, [2.0 / 9.0, 2.0 / 9.0, 2.0 / 9.0])
        assert_has_point(result, [0.5, 0.125, 0.125])
        assert_has_point(result, [0.5, 0.5, 0.0])

    def test_tetrahedron(self, tetrahedron_mesh):
        result = subdivide_model(build_adjacency_model(tetrahedron_mesh))

        assert result.n_faces == 12
        assert result.n_quads == 12
        assert n_unique_positions(result) == 14
        assert_has_point(result, [5.0 / 27.0] * 3)

    def test_mixed_quads_and_triangles(self):
        result = subdivide_model(build_adjacency_model(create_pyramid()))
        assert result.n_faces == 4 + 4 * 3
        assert result.n_points == 9 + 4 * 7
        assert n_unique_positions(result) == 5 + 8 + 5

    def test_moves_model_vertices(self, cube_mesh):
        model = build_adjacency_model(cube_mesh)
        expected = compute_vertex_points(model, compute_face_points(model))
        subdivide_model(model)
        torch.testing.assert_close(model.points, expected)

    @pytest.mark.parametrize("make_mesh", [cube_surface.load, create_pyramid])
    def test_winding_preserved(self, make_mesh):
        """Every child quad faces the same way as its parent face."""
        mesh = make_mesh()
        result = subdivide_model(build_adjacency_model(mesh))

        parents = torch.repeat_interleave(torch.arange(mesh.n_faces), mesh.n_corners)
        parent_normals = face_normals(mesh)[parents]
        child_normals = face_normals(result)
        assert ((parent_normals * child_normals).sum(dim=-1) > 0).all()

    def test_closed_surface_stays_closed(self, cube_mesh):
        result = subdivide_model(build_adjacency_model(cube_mesh))
        model = build_adjacency_model(result)

        assert model.n_boundary_edges == 0
        assert (model.edge_face_count == 2).all()
        # Euler characteristic of a sphere
        assert model.n_vertices - model.n_edges + model.n_faces == 2

    def test_dtype_preserved(self, cube_mesh):
        mesh = Mesh(points=cube_mesh.points.double(), faces=cube_mesh.faces)
        result = subdivide_model(build_adjacency_model(mesh))
        assert result.points.dtype == torch.float64
        assert_has_point(result, [2.0 / 9.0] * 3)


### Collisions ###


class TestCollisions:
    def test_single_quad_collides(self):
        """The corner of a lone quad maps exactly onto the opposite corner."""
        points = torch.tensor(
            [[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [1.0, 1.0, 0.0], [0.0, 1.0, 0.0]]
        )
        mesh = Mesh.from_polygons(points, [[0, 1, 2, 3]])
        with pytest.raises(TopologyCollisionError) as exc_info:
            apply_subdivision(mesh, 1)
        assert exc_info.value.vertex == 0
        assert exc_info.value.other == 2
        assert exc_info.value.position == (1.0, 1.0, 0.0)

    def test_flat_grid_collides(self, grid_mesh):
        """A grid corner maps onto the interior vertex position."""
        with pytest.raises(TopologyCollisionError):
            apply_subdivision(grid_mesh, 1)

    def test_model_unchanged_after_collision(self, grid_mesh):
        model = build_adjacency_model(grid_mesh)
        original = model.points.clone()
        with pytest.raises(TopologyCollisionError):
            subdivide_model(model)
        assert torch.equal(model.points, original)


### Iteration Driver ###


class TestApplySubdivision:
    @pytest.mark.parametrize("iterations, n_faces", [(1, 24), (2, 96), (3, 384)])
    def test_cube_face_counts(self, cube_mesh, iterations, n_faces):
        result = apply_subdivision(cube_mesh, iterations)
        assert result.n_faces == n_faces
        assert result.n_quads == n_faces

    def test_tetrahedron_two_levels(self, tetrahedron_mesh):
        assert apply_subdivision(tetrahedron_mesh, 2).n_faces == 48

    def test_duplicated_corners_same_result(self):
        shared = apply_subdivision(cube_surface.load(), 2)
        duplicated = apply_subdivision(cube_surface.load(duplicate_corners=True), 2)
        assert torch.equal(shared.points, duplicated.points)
        assert torch.equal(shared.faces, duplicated.faces)

    def test_zero_iterations_copies(self, cube_mesh):
        result = apply_subdivision(cube_mesh, 0)
        assert torch.equal(result.points, cube_mesh.points)
        assert torch.equal(result.faces, cube_mesh.faces)

        result.points[0] = 42.0
        assert cube_mesh.points[0].tolist() == [0.0, 0.0, 0.0]

    def test_input_not_modified(self, cube_mesh):
        points = cube_mesh.points.clone()
        faces = cube_mesh.faces.clone()
        apply_subdivision(cube_mesh, 2)
        assert torch.equal(cube_mesh.points, points)
        assert torch.equal(cube_mesh.faces, faces)

    def test_symmetry_preserved(self, cube_mesh):
        result = apply_subdivision(cube_mesh, 2)
        center = torch.unique(result.points, dim=0).mean(dim=0)
        torch.testing.assert_close(center, torch.full((3,), 0.5))

    def test_shrinks_towards_limit_surface(self, cube_mesh):
        result = apply_subdivision(cube_mesh, 2)
        assert result.points.min() > 0.0
        assert result.points.max() < 1.0

    def test_negative_iterations(self, cube_mesh):
        with pytest.raises(ValueError, match="iterations"):
            apply_subdivision(cube_mesh, -1)

    @pytest.mark.parametrize("iterations", [1.0, "2", True])
    def test_non_integer_iterations(self, cube_mesh, iterations):
        with pytest.raises(TypeError, match="iterations"):
            apply_subdivision(cube_mesh, iterations)

    def test_mesh_subdivide_method(self, cube_mesh):
        result = cube_mesh.subdivide(levels=2)
        assert result.n_faces == 96

    def test_debug_log_per_iteration(self, cube_mesh, caplog):
        with caplog.at_level(logging.DEBUG, logger="ccsubdiv.subdivision.catmull_clark"):
            apply_subdivision(cube_mesh, 2)
        assert "Catmull-Clark level 1/2" in caplog.text
        assert "Catmull-Clark level 2/2" in caplog.text
        assert " ms." in caplog.text

    def test_larger_grid_with_interior(self):
        """Boundary meshes subdivide once corners no longer land on vertices."""
        mesh = quad_grid.load(n_x=3, n_y=3)
        # Jitter heights so corner vertex points avoid existing positions
        torch.manual_seed(0)
        points = mesh.points.clone()
        points[:, 2] = 0.1 * torch.rand(mesh.n_points)
        lifted = Mesh(points=points, faces=mesh.faces)
        result = apply_subdivision(lifted, 1)
        assert result.n_faces == 36

    def test_device(self, cube_mesh, device):
        result = apply_subdivision(cube_mesh.to(device), 1)
        assert result.points.device.type == device
        assert result.faces.device.type == device
        assert result.n_faces == 24
