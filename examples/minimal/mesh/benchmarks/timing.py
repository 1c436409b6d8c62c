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

"""Per-level timing of Catmull-Clark subdivision and its JSON report."""

import json
import platform
import time
from pathlib import Path

import torch

import ccsubdiv
from ccsubdiv import Mesh, apply_subdivision, build_adjacency_model


def _synchronize(device: torch.device) -> None:
    if device.type == "cuda":
        torch.cuda.synchronize(device)


def best_time(func, device: torch.device, repeats: int = 3):
    """Run ``func`` ``repeats`` times after one warmup call.

    Returns
    -------
    tuple[float, Any]
        Fastest wall time in seconds and the result of the last call.
    """
    func()
    _synchronize(device)

    times = []
    for _ in range(repeats):
        start = time.perf_counter()
        result = func()
        _synchronize(device)
        times.append(time.perf_counter() - start)
    return min(times), result


def time_levels(mesh: Mesh, levels: int, repeats: int = 3) -> list[dict]:
    """Time one subdivision pass per level, each starting from the previous level.

    Every row records the level, the fastest pass time, the time spent in
    building the adjacency model alone, and the size of the refined mesh.
    """
    device = mesh.points.device
    rows = []
    current = mesh
    for level in range(1, levels + 1):
        source = current
        build_seconds, model = best_time(
            lambda: build_adjacency_model(source), device, repeats
        )
        pass_seconds, current = best_time(
            lambda: apply_subdivision(source, 1), device, repeats
        )
        rows.append(
            {
                "level": level,
                "n_input_vertices": model.n_vertices,
                "n_input_edges": model.n_edges,
                "n_points": current.n_points,
                "n_faces": current.n_faces,
                "build_seconds": build_seconds,
                "pass_seconds": pass_seconds,
            }
        )
        print(
            f"level {level}: {current.n_points} points, {current.n_faces} quads, "
            f"{pass_seconds * 1000:.3f} ms (topology {build_seconds * 1000:.3f} ms)"
        )
    return rows


def write_results(path: str | Path, rows: list[dict], config: dict) -> Path:
    """Dump the per-level rows with the run configuration and library versions."""
    path = Path(path)
    payload = {
        "versions": {
            "python": platform.python_version(),
            "torch": torch.__version__,
            "ccsubdiv": ccsubdiv.__version__,
        },
        "config": config,
        "levels": rows,
    }
    path.write_text(json.dumps(payload, indent=2))
    print(f"Timings saved to {path}")
    return path
