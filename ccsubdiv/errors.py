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

"""Typed exceptions raised by the subdivision core.

Precondition violations (malformed faces, out-of-range indices, negative
iteration counts) are reported with the builtin ``ValueError``/``TypeError``.
The one checked failure of the algorithm itself, two distinct vertices being
driven onto the same position, has its own type so callers can tell the two
apart.
"""

__all__ = ["TopologyCollisionError"]


def _format_context(ctx: dict) -> str:
    """Return a compact `` | key1=val1, key2=val2`` suffix, or ``""``."""
    if not ctx:
        return ""
    parts = []
    for key in sorted(ctx):
        value = repr(ctx[key])
        if len(value) > 120:
            value = value[:117] + "..."
        parts.append(f"{key}={value}")
    return " | " + ", ".join(parts)


class TopologyCollisionError(RuntimeError):
    """A vertex move would land exactly on another vertex's position.

    The position-to-vertex map of an adjacency model is keyed by the exact bit
    pattern of each position, so two distinct vertices can never share one.
    This only happens for degenerate input (for example zero-length edges, or
    a valence-1 corner mapped onto a neighbouring vertex) and is not retried:
    the whole subdivision iteration fails and no partial mesh is returned.

    Parameters
    ----------
    vertex : int
        Index of the vertex being moved.
    other : int
        Index of the vertex that already holds the target position.
    position : tuple[float, ...]
        The colliding target position.
    """

    def __init__(self, vertex: int, other: int, position: tuple[float, ...]):
        self.vertex = vertex
        self.other = other
        self.position = position
        super().__init__(
            "topology error in moving vertex: same position for different vertices"
        )

    def __str__(self) -> str:
        context = {"vertex": self.vertex, "other": self.other, "position": self.position}
        return super().__str__() + _format_context(context)
