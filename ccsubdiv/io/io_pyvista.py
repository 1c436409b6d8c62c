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

"""Conversion between :class:`Mesh` and PyVista ``PolyData``.

PyVista is an optional dependency; it is imported on first use. Through it,
any surface format VTK can read (OBJ, PLY, STL, VTP, ...) can be fed to the
subdivision core.
"""

import importlib
from typing import TYPE_CHECKING

import numpy as np
import torch

from ccsubdiv.mesh import Mesh

if TYPE_CHECKING:
    import pyvista


def _import_pyvista():
    try:
        return importlib.import_module("pyvista")
    except ImportError as e:
        raise ImportError(
            "pyvista is required for mesh I/O. Install it with "
            "`pip install ccsubdiv[io]` or `pip install pyvista`."
        ) from e


def from_pyvista(
    pyvista_mesh: "pyvista.PolyData | pyvista.DataSet",
) -> Mesh:
    """Convert a PyVista surface to a Mesh of triangles and quadrilaterals.

    Parameters
    ----------
    pyvista_mesh : pv.PolyData or pv.DataSet
        Input surface. Datasets other than PolyData are reduced to their outer
        surface first.

    Returns
    -------
    Mesh
        Mesh with the same points (as float32 unless already float64) and
        faces, on CPU.

    Raises
    ------
    ValueError
        If a face has other than 3 or 4 corners.
    ImportError
        If pyvista is not installed.
    """
    pv = _import_pyvista()

    if not isinstance(pyvista_mesh, pv.PolyData):
        pyvista_mesh = pyvista_mesh.extract_surface()

    points_np = np.asarray(pyvista_mesh.points)
    if points_np.dtype != np.float64:
        points_np = points_np.astype(np.float32)
    points = torch.from_numpy(np.ascontiguousarray(points_np))

    # One corner-index array per polygon; lines and vertices are not faces
    polygons = pyvista_mesh.irregular_faces

    return Mesh.from_polygons(points, polygons)


def to_pyvista(mesh: Mesh) -> "pyvista.PolyData":
    """Convert a Mesh to a PyVista PolyData surface.

    Parameters
    ----------
    mesh : Mesh
        Input mesh.

    Returns
    -------
    pv.PolyData
        Surface with the same points and faces. Triangles are written with 3
        corners, quads with 4.

    Raises
    ------
    ImportError
        If pyvista is not installed.
    """
    pv = _import_pyvista()

    points_np = mesh.points.detach().cpu().numpy()
    if mesh.n_faces == 0:
        return pv.PolyData(points_np)

    ### PyVista padded format: [n_pts, v0, ..., n_pts, v0, ...]
    faces_np = mesh.faces.cpu().numpy().astype(np.int64)
    n_corners = mesh.n_corners.cpu().numpy().astype(np.int64)
    padded = np.column_stack([n_corners, faces_np])
    keep = np.ones_like(padded, dtype=bool)
    keep[:, 4] = n_corners == 4
    return pv.PolyData(points_np, faces=padded[keep])
