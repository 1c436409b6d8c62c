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

"""Tests for conversion between Mesh and PyVista PolyData."""

import numpy as np
import pytest
import torch

from ccsubdiv import Mesh, apply_subdivision

# PyVista is optional; these tests are skipped if it is unavailable
pv = pytest.importorskip("pyvista")

from ccsubdiv.io import from_pyvista, to_pyvista  # noqa: E402


class TestToPyvista:
    def test_cube(self, cube_mesh):
        pv_mesh = to_pyvista(cube_mesh)
        assert isinstance(pv_mesh, pv.PolyData)
        assert pv_mesh.n_points == 8
        assert pv_mesh.n_cells == 6
        np.testing.assert_allclose(pv_mesh.points, cube_mesh.points.numpy())

    def test_mixed_face_sizes(self):
        points = torch.rand(5, 3)
        mesh = Mesh.from_polygons(points, [[0, 1, 2, 3], [1, 4, 2]])
        pv_mesh = to_pyvista(mesh)
        assert pv_mesh.faces.tolist() == [4, 0, 1, 2, 3, 3, 1, 4, 2]

    def test_no_faces(self):
        mesh = Mesh(points=torch.rand(3, 3), faces=torch.zeros((0, 4), dtype=torch.int64))
        assert to_pyvista(mesh).n_points == 3


class TestFromPyvista:
    def test_round_trip_mixed(self):
        points = torch.rand(5, 3)
        polygons = [[0, 1, 2, 3], [1, 4, 2]]
        mesh = from_pyvista(to_pyvista(Mesh.from_polygons(points, polygons)))
        assert mesh.to_polygons() == polygons
        torch.testing.assert_close(mesh.points, points)

    def test_pyvista_cube(self):
        """pv.Cube has 24 split vertices; topology merges them into 8."""
        mesh = from_pyvista(pv.Cube())
        assert mesh.n_faces == 6
        assert mesh.n_quads == 6
        assert apply_subdivision(mesh, 1).n_faces == 24

    def test_mixed_faces_keep_order_and_winding(self):
        """Triangles and quads interleaved in one PolyData come back in order."""
        points = np.array(
            [
                [0.0, 0.0, 0.0],
                [1.0, 0.0, 0.0],
                [1.0, 1.0, 0.0],
                [0.0, 1.0, 0.0],
                [2.0, 0.0, 0.0],
                [2.0, 1.0, 0.0],
            ],
            dtype=np.float32,
        )
        faces = np.array([3, 1, 4, 5, 4, 0, 1, 2, 3, 3, 1, 5, 2])
        mesh = from_pyvista(pv.PolyData(points, faces=faces))
        assert mesh.to_polygons() == [[1, 4, 5], [0, 1, 2, 3], [1, 5, 2]]
        assert mesh.faces[0].tolist() == [1, 4, 5, -1]

    def test_lines_are_not_faces(self):
        points = np.random.rand(4, 3)
        pv_mesh = pv.PolyData(points, faces=[3, 0, 1, 2], lines=[2, 2, 3])
        mesh = from_pyvista(pv_mesh)
        assert mesh.to_polygons() == [[0, 1, 2]]
        assert mesh.points.dtype == torch.float64

    def test_rejects_polygons(self):
        hexagon = pv.Polygon(n_sides=6)
        with pytest.raises(ValueError, match="corners"):
            from_pyvista(hexagon)
