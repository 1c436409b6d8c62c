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

"""Axis-aligned cube surface made of six quadrilaterals.

Dimensional: closed 2D manifold in 3D space (no boundary).
"""

import torch

from ccsubdiv.mesh import Mesh

_CORNERS = [
    [0.0, 0.0, 0.0],
    [1.0, 0.0, 0.0],
    [1.0, 1.0, 0.0],
    [0.0, 1.0, 0.0],
    [0.0, 0.0, 1.0],
    [1.0, 0.0, 1.0],
    [1.0, 1.0, 1.0],
    [0.0, 1.0, 1.0],
]

# Counter-clockwise seen from outside, so face normals point outward
_FACES = [
    [0, 3, 2, 1],  # z = 0
    [4, 5, 6, 7],  # z = 1
    [0, 1, 5, 4],  # y = 0
    [3, 7, 6, 2],  # y = 1
    [0, 4, 7, 3],  # x = 0
    [1, 2, 6, 5],  # x = 1
]


def load(
    size: float = 1.0,
    duplicate_corners: bool = False,
    device: torch.device | str = "cpu",
) -> Mesh:
    """Create the surface of the cube ``[0, size]^3``.

    Parameters
    ----------
    size : float
        Side length of the cube.
    duplicate_corners : bool
        If True, every face gets its own four vertices (24 points), the way a
        mesh loader splitting vertices by per-corner attributes would emit it.
        Positions stay bitwise equal, so the topology is unchanged.
    device : str
        Compute device ('cpu' or 'cuda').

    Returns
    -------
    Mesh
        Closed all-quad mesh with 6 faces.
    """
    if size <= 0:
        raise ValueError(f"size must be positive, got {size=}")

    points = torch.tensor(_CORNERS, dtype=torch.float32, device=device) * size
    faces = torch.tensor(_FACES, dtype=torch.int64, device=device)

    if duplicate_corners:
        points = points[faces.flatten()]
        faces = torch.arange(24, dtype=torch.int64, device=device).reshape(6, 4)

    return Mesh(points=points, faces=faces)
