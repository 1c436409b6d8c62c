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

"""Topology-aware Catmull-Clark subdivision of triangle/quad meshes.

Typical use::

    >>> from ccsubdiv import apply_subdivision
    >>> from ccsubdiv.primitives import cube_surface
    >>> refined = apply_subdivision(cube_surface.load(), iterations=2)
    >>> refined.n_faces
    96
"""

from ccsubdiv.errors import TopologyCollisionError
from ccsubdiv.mesh import PAD_INDEX, Mesh
from ccsubdiv.subdivision import apply_subdivision, subdivide_model
from ccsubdiv.topology import AdjacencyModel, build_adjacency_model

__version__ = "0.1.0"
