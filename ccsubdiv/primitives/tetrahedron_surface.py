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

"""Surface of the corner tetrahedron with vertices at the origin and unit axes.

Dimensional: closed 2D manifold in 3D space (no boundary).
"""

import torch

from ccsubdiv.mesh import PAD_INDEX, Mesh


def load(size: float = 1.0, device: torch.device | str = "cpu") -> Mesh:
    """Create the tetrahedron with corners ``0``, ``size*x``, ``size*y``, ``size*z``.

    Parameters
    ----------
    size : float
        Length of the three axis-aligned edges.
    device : str
        Compute device ('cpu' or 'cuda').

    Returns
    -------
    Mesh
        Closed mesh of 4 outward-facing triangles.
    """
    if size <= 0:
        raise ValueError(f"size must be positive, got {size=}")

    points = (
        torch.tensor(
            [
                [0.0, 0.0, 0.0],
                [1.0, 0.0, 0.0],
                [0.0, 1.0, 0.0],
                [0.0, 0.0, 1.0],
            ],
            dtype=torch.float32,
            device=device,
        )
        * size
    )
    faces = torch.tensor(
        [
            [0, 2, 1, PAD_INDEX],
            [0, 1, 3, PAD_INDEX],
            [0, 3, 2, PAD_INDEX],
            [1, 2, 3, PAD_INDEX],
        ],
        dtype=torch.int64,
        device=device,
    )
    return Mesh(points=points, faces=faces)
