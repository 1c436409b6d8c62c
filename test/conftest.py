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

"""Pytest configuration and shared fixtures for ccsubdiv tests.

This module provides the mesh fixtures and device parametrization used
across the test suite. All fixtures defined here are
automatically available to all test files without explicit imports.
"""

from collections import defaultdict

import pytest
import torch

from ccsubdiv import Mesh
from ccsubdiv.primitives import cube_surface, quad_grid, tetrahedron_surface

# Total time per file
file_timings = defaultdict(float)


### Pytest Hooks ###


def pytest_configure(config):
    """Register custom pytest markers."""
    config.addinivalue_line(
        "markers", "cuda: mark test as requiring CUDA (skipped if unavailable)"
    )


def pytest_collection_modifyitems(config, items):
    """Skip tests marked with 'cuda' if CUDA is not available."""
    if torch.cuda.is_available():
        return

    skip_cuda = pytest.mark.skip(reason="CUDA not available")
    for item in items:
        if "cuda" in item.keywords:
            item.add_marker(skip_cuda)


def pytest_runtest_logreport(report):
    if report.when == "call":
        # report.nodeid format: path::TestClass::test_name
        filename = report.nodeid.split("::")[0]
        file_timings[filename] += report.duration


def pytest_sessionfinish(session, exitstatus):
    print("\n=== Test durations by file ===")
    for filename, duration in sorted(
        file_timings.items(), key=lambda x: x[1], reverse=True
    ):
        print(f"{filename}: {duration:.2f} seconds")


### Pytest Fixtures ###


@pytest.fixture(
    params=[
        "cpu",
        pytest.param("cuda", marks=pytest.mark.cuda),
    ]
)
def device(request):
    """Parametrize tests over all available devices (CPU, CUDA).

    CUDA tests are automatically skipped if CUDA is not available via
    the pytest_collection_modifyitems hook.
    """
    return request.param


@pytest.fixture
def cube_mesh():
    """Unit cube ``[0, 1]^3`` as 6 outward quads over 8 shared points."""
    return cube_surface.load()


@pytest.fixture
def tetrahedron_mesh():
    """Corner tetrahedron as 4 outward triangles."""
    return tetrahedron_surface.load()


@pytest.fixture
def grid_mesh():
    """Flat 2x2 grid of unit quads (3x3 points, one interior vertex)."""
    return quad_grid.load(n_x=2, n_y=2)


@pytest.fixture
def two_triangles_mesh():
    """Unit square split along the (0,0)-(1,1) diagonal."""
    points = torch.tensor(
        [
            [0.0, 0.0, 0.0],
            [1.0, 0.0, 0.0],
            [1.0, 1.0, 0.0],
            [0.0, 1.0, 0.0],
        ]
    )
    return Mesh.from_polygons(points, [[0, 1, 2], [0, 2, 3]])
