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

"""Flat grid of quadrilaterals in the xy-plane.

Dimensional: 2D manifold in 3D space (has boundary).
"""

import torch

from ccsubdiv.mesh import Mesh


def load(
    n_x: int = 2,
    n_y: int = 2,
    spacing: float = 1.0,
    device: torch.device | str = "cpu",
) -> Mesh:
    """Create an ``n_x`` by ``n_y`` grid of square quads in the plane z = 0.

    Point ``(i, j)`` sits at ``(i * spacing, j * spacing, 0)`` and has index
    ``j * (n_x + 1) + i``. Faces are listed row by row, counter-clockwise seen
    from +z.

    Parameters
    ----------
    n_x : int
        Number of quads along x.
    n_y : int
        Number of quads along y.
    spacing : float
        Side length of each quad.
    device : str
        Compute device ('cpu' or 'cuda').

    Returns
    -------
    Mesh
        All-quad mesh with ``n_x * n_y`` faces and ``(n_x + 1) * (n_y + 1)``
        points.
    """
    if n_x < 1 or n_y < 1:
        raise ValueError(f"n_x and n_y must be at least 1, got {n_x=}, {n_y=}")

    xs = torch.arange(n_x + 1, dtype=torch.float32, device=device) * spacing
    ys = torch.arange(n_y + 1, dtype=torch.float32, device=device) * spacing
    yy, xx = torch.meshgrid(ys, xs, indexing="ij")
    points = torch.stack([xx.flatten(), yy.flatten(), torch.zeros_like(xx.flatten())], dim=1)

    jj, ii = torch.meshgrid(
        torch.arange(n_y, device=device), torch.arange(n_x, device=device), indexing="ij"
    )
    v0 = (jj * (n_x + 1) + ii).flatten()
    faces = torch.stack([v0, v0 + 1, v0 + n_x + 2, v0 + n_x + 1], dim=1)

    return Mesh(points=points, faces=faces)
