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

from typing import TYPE_CHECKING, Any, Self, Sequence

import torch
from tensordict import tensorclass

from ccsubdiv.utilities.mesh_repr import format_mesh_repr

PAD_INDEX = -1
"""Value of the unused fourth slot of a triangular face."""


@tensorclass(tensor_only=True)
class Mesh:
    r"""A flat polygon mesh of triangles and quadrilaterals.

    This is the exchange type of the subdivision core: the input of the
    topology builder and the output of every subdivision pass. It carries
    vertex positions only (no normals, UVs or other per-corner attributes) and
    makes no deduplication guarantee, so several vertices may share one
    position.

    **Core Data Structure**

    - ``points``: Vertex coordinates with shape :math:`(N_p, 3)`.

    - ``faces``: Face connectivity with shape :math:`(N_f, 4)`. Each row lists
      the corner indices of one face in winding order. A quadrilateral uses
      all four slots; a triangle uses the first three and stores ``-1`` in the
      fourth (:data:`PAD_INDEX`).

    Parameters
    ----------
    points : torch.Tensor
        Vertex coordinates with shape :math:`(N_p, 3)`. Must be floating-point.
    faces : torch.Tensor
        Face connectivity with shape :math:`(N_f, 4)`. Must be integer dtype.

    Raises
    ------
    ValueError
        If either tensor has the wrong shape, or a face references a vertex
        outside ``[0, N_p)``.
    TypeError
        If ``points`` is not floating-point or ``faces`` is not integer.

    Examples
    --------
    A unit square split into two triangles:

    >>> import torch
    >>> from ccsubdiv import Mesh
    >>> points = torch.tensor([
    ...     [0.0, 0.0, 0.0],
    ...     [1.0, 0.0, 0.0],
    ...     [1.0, 1.0, 0.0],
    ...     [0.0, 1.0, 0.0],
    ... ])
    >>> faces = torch.tensor([
    ...     [0, 1, 2, -1],
    ...     [0, 2, 3, -1],
    ... ])
    >>> mesh = Mesh(points=points, faces=faces)
    >>> mesh.n_points, mesh.n_faces, mesh.n_triangles
    (4, 2, 2)

    The same square as a single quad, from ragged polygons:

    >>> quad = Mesh.from_polygons(points, [[0, 1, 2, 3]])
    >>> quad.is_quad.tolist()
    [True]
    """

    points: torch.Tensor  # shape: (n_points, 3)
    faces: torch.Tensor  # shape: (n_faces, 4)

    def __post_init__(self):
        ### Validate shapes, dtypes and index ranges
        if not torch.compiler.is_compiling():
            if self.points.ndim != 2 or self.points.shape[-1] != 3:
                raise ValueError(
                    f"`points` must have shape (n_points, 3), but got {self.points.shape=}."
                )
            if self.faces.ndim != 2 or self.faces.shape[-1] != 4:
                raise ValueError(
                    f"`faces` must have shape (n_faces, 4), but got {self.faces.shape=}."
                )
            if not torch.is_floating_point(self.points):
                raise TypeError(
                    f"`points` must have a floating-point dtype, but got {self.points.dtype=}."
                )
            if torch.is_floating_point(self.faces) or self.faces.dtype == torch.bool:
                raise TypeError(
                    f"`faces` must have an int-like dtype, but got {self.faces.dtype=}."
                )
            if self.points.device != self.faces.device:
                raise ValueError(
                    f"`points` and `faces` must be on the same device, "
                    f"but got {self.points.device=} and {self.faces.device=}."
                )
            if self.n_faces > 0:
                corners = self.faces[:, :3]
                fourth = self.faces[:, 3]
                if corners.min().item() < 0 or corners.max().item() >= self.n_points:
                    raise ValueError(
                        f"The first three corners of every face must index into "
                        f"`points` (0 <= index < {self.n_points}), but got "
                        f"min={corners.min().item()}, max={corners.max().item()}."
                    )
                bad_fourth = (fourth != PAD_INDEX) & ((fourth < 0) | (fourth >= self.n_points))
                if bad_fourth.any():
                    raise ValueError(
                        f"The fourth corner of a face must be {PAD_INDEX} (triangle) or "
                        f"index into `points`, but got {fourth[bad_fourth].tolist()}."
                    )

    if TYPE_CHECKING:

        def to(self, *args: Any, **kwargs: Any) -> Self:
            """Move the mesh to another device and/or dtype."""
            ...

    @classmethod
    def from_polygons(
        cls,
        points: torch.Tensor | Sequence[Sequence[float]],
        polygons: Sequence[Sequence[int]],
    ) -> "Mesh":
        """Build a mesh from a ragged list of triangles and quadrilaterals.

        Parameters
        ----------
        points : torch.Tensor or sequence of 3-sequences
            Vertex coordinates. Non-tensor input becomes float32.
        polygons : sequence of sequences of int
            Corner indices of each face in winding order; every polygon must
            have 3 or 4 corners.

        Returns
        -------
        Mesh
            Mesh with triangles padded by :data:`PAD_INDEX`.

        Raises
        ------
        ValueError
            If a polygon has fewer than 3 or more than 4 corners.
        """
        if not isinstance(points, torch.Tensor):
            points = torch.tensor(points, dtype=torch.float32)

        rows = []
        for face_index, polygon in enumerate(polygons):
            polygon = [int(i) for i in polygon]
            if len(polygon) not in (3, 4):
                raise ValueError(
                    f"Face {face_index} has {len(polygon)} corners; only triangles "
                    f"(3) and quadrilaterals (4) are supported."
                )
            rows.append(polygon + [PAD_INDEX] * (4 - len(polygon)))

        faces = torch.tensor(rows, dtype=torch.int64, device=points.device).reshape(-1, 4)
        return cls(points=points, faces=faces)

    def to_polygons(self) -> list[list[int]]:
        """Convert faces to ragged Python lists (3 or 4 indices each)."""
        return [
            [i for i in row if i != PAD_INDEX] for row in self.faces.cpu().tolist()
        ]

    @property
    def n_points(self) -> int:
        return self.points.shape[0]

    @property
    def n_faces(self) -> int:
        return self.faces.shape[0]

    @property
    def is_quad(self) -> torch.Tensor:
        """Boolean mask of quadrilateral faces, shape (n_faces,)."""
        return self.faces[:, 3] != PAD_INDEX

    @property
    def n_corners(self) -> torch.Tensor:
        """Number of corners (3 or 4) of each face, shape (n_faces,)."""
        return torch.where(self.is_quad, 4, 3)

    @property
    def n_quads(self) -> int:
        return int(self.is_quad.sum().item())

    @property
    def n_triangles(self) -> int:
        return self.n_faces - self.n_quads

    @property
    def face_centroids(self) -> torch.Tensor:
        """Arithmetic mean of each face's corner positions.

        Returns
        -------
        torch.Tensor
            Shape (n_faces, 3).
        """
        corner_mask = self.faces != PAD_INDEX
        corner_points = self.points[self.faces.clamp(min=0)]
        corner_points = corner_points * corner_mask.unsqueeze(-1)
        return corner_points.sum(dim=1) / self.n_corners.unsqueeze(-1).to(self.points.dtype)

    def subdivide(self, levels: int = 1) -> "Mesh":
        """Apply ``levels`` rounds of Catmull-Clark subdivision.

        Parameters
        ----------
        levels : int, optional
            Number of subdivision iterations. ``0`` returns an independent copy.

        Returns
        -------
        Mesh
            All-quad refined mesh (for ``levels >= 1``).

        Raises
        ------
        ValueError
            If ``levels`` is negative.
        TopologyCollisionError
            If a vertex reposition collides with another vertex.

        Examples
        --------
        >>> from ccsubdiv.primitives import cube_surface
        >>> refined = cube_surface.load().subdivide(levels=2)
        >>> refined.n_faces
        96
        """
        from ccsubdiv.subdivision import apply_subdivision

        return apply_subdivision(self, levels)

    def translate(self, offset: torch.Tensor | list | tuple) -> "Mesh":
        """Translate all points by ``offset``. See :func:`ccsubdiv.transformations.translate`."""
        from ccsubdiv.transformations import translate

        return translate(self, offset)

    def scale(
        self,
        factor: float | torch.Tensor | list | tuple,
        center: torch.Tensor | list | tuple | None = None,
    ) -> "Mesh":
        """Scale the mesh about ``center``. See :func:`ccsubdiv.transformations.scale`."""
        from ccsubdiv.transformations import scale

        return scale(self, factor, center=center)

    def fit_to_unit_cube(self) -> "Mesh":
        """Center and rescale into ``[-0.5, 0.5]^3``. See :func:`ccsubdiv.transformations.fit_to_unit_cube`."""
        from ccsubdiv.transformations import fit_to_unit_cube

        return fit_to_unit_cube(self)


### Override the tensorclass __repr__ with custom formatting
# Must be done after class definition because @tensorclass overrides __repr__
def _mesh_repr(self) -> str:
    return format_mesh_repr(self)


Mesh.__repr__ = _mesh_repr  # type: ignore
