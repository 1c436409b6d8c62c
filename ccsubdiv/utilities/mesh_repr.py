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

"""Utility functions for string-formatting Mesh representations."""


def format_mesh_repr(mesh) -> str:
    """Format a one-line Mesh representation.

    Parameters
    ----------
    mesh : Mesh
        The Mesh instance to format.

    Returns
    -------
    str
        e.g. ``Mesh(n_points=8, n_faces=6, n_quads=6, n_triangles=0, dtype=torch.float32)``
    """
    class_name = mesh.__class__.__name__
    parts = [
        f"n_points={mesh.n_points}",
        f"n_faces={mesh.n_faces}",
        f"n_quads={mesh.n_quads}",
        f"n_triangles={mesh.n_triangles}",
        f"dtype={mesh.points.dtype}",
    ]

    # mesh.device is None by default and only set when user calls .to(device)
    device = mesh.device
    if device is not None:
        parts.append(f"device={device}")

    return f"{class_name}({', '.join(parts)})"
