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

"""Rigid and scaling transformations of mesh positions.

Transformations only touch ``points``; connectivity is copied unchanged, and a
new :class:`Mesh` is always returned.
"""

from typing import TYPE_CHECKING

import torch

if TYPE_CHECKING:
    from ccsubdiv.mesh import Mesh


### Public API ###


def translate(
    mesh: "Mesh",
    offset: torch.Tensor | list | tuple,
) -> "Mesh":
    """Apply a translation to the mesh.

    Parameters
    ----------
    mesh : Mesh
        Input mesh to translate.
    offset : torch.Tensor or list or tuple
        Translation vector, shape (3,).

    Returns
    -------
    Mesh
        New Mesh with translated points.
    """
    offset = torch.as_tensor(offset, device=mesh.points.device, dtype=mesh.points.dtype)

    if not torch.compiler.is_compiling():
        if offset.shape != (3,):
            raise ValueError(f"offset must have shape (3,), got {offset.shape}")

    from ccsubdiv.mesh import Mesh

    return Mesh(points=mesh.points + offset, faces=mesh.faces.clone())


def scale(
    mesh: "Mesh",
    factor: float | torch.Tensor | list | tuple,
    center: torch.Tensor | list | tuple | None = None,
) -> "Mesh":
    """Scale the mesh by specified factor(s).

    Parameters
    ----------
    mesh : Mesh
        Input mesh to scale.
    factor : float or torch.Tensor or list or tuple
        Scale factor(s). Scalar for uniform, shape (3,) for per-axis scaling.
    center : torch.Tensor or list or tuple or None
        Center point for scaling. If None, scales about the origin.

    Returns
    -------
    Mesh
        New Mesh with scaled points.
    """
    factor_tensor = torch.as_tensor(
        factor, device=mesh.points.device, dtype=mesh.points.dtype
    )
    if factor_tensor.ndim == 0:
        factor_tensor = factor_tensor.expand(3)
    elif not torch.compiler.is_compiling() and factor_tensor.shape != (3,):
        raise ValueError(f"factor must be scalar or shape (3,), got {factor_tensor.shape}")

    ### Handle center by translate-scale-translate
    if center is not None:
        center = torch.as_tensor(
            center, device=mesh.points.device, dtype=mesh.points.dtype
        )
        return translate(scale(translate(mesh, -center), factor_tensor), center)

    from ccsubdiv.mesh import Mesh

    return Mesh(points=mesh.points * factor_tensor, faces=mesh.faces.clone())


def fit_to_unit_cube(mesh: "Mesh") -> "Mesh":
    """Center the mesh at the origin and scale it into ``[-0.5, 0.5]^3``.

    The bounding box is taken over the vertices referenced by faces. Its
    center moves to the origin and its largest extent becomes 1; the scaling
    is uniform, so proportions are kept.

    Parameters
    ----------
    mesh : Mesh
        Input mesh. Must have at least one face with non-zero extent.

    Returns
    -------
    Mesh
        New Mesh fitting the unit cube centered at the origin.

    Raises
    ------
    ValueError
        If the mesh has no faces or all referenced vertices coincide.

    Examples
    --------
    >>> from ccsubdiv.primitives import quad_grid
    >>> fitted = fit_to_unit_cube(quad_grid.load(n_x=4, n_y=2))
    >>> fitted.points.amin(dim=0).tolist(), fitted.points.amax(dim=0).tolist()
    ([-0.5, -0.25, 0.0], [0.5, 0.25, 0.0])
    """
    if mesh.n_faces == 0:
        raise ValueError("Cannot fit a mesh without faces to the unit cube.")

    referenced = mesh.faces[mesh.faces >= 0]
    used_points = mesh.points[referenced]
    low = used_points.amin(dim=0)
    high = used_points.amax(dim=0)

    max_extent = (high - low).max()
    if max_extent.item() <= 0:
        raise ValueError(
            f"Cannot fit a degenerate mesh to the unit cube, got {max_extent.item()=}."
        )

    return scale(translate(mesh, -0.5 * (low + high)), 1.0 / max_extent)
