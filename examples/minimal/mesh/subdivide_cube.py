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

"""Subdivide a cube several times and report the time spent per level.

Usage::

    python subdivide_cube.py --levels 4 --device cpu --output results.json
"""

import argparse
import logging

import torch
from benchmarks import time_levels, write_results

from ccsubdiv.primitives import cube_surface


def main():
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--levels", type=int, default=4)
    parser.add_argument("--device", default="cpu")
    parser.add_argument("--repeats", type=int, default=3)
    parser.add_argument("--output", default=None, help="optional JSON results file")
    parser.add_argument("--verbose", action="store_true", help="show per-level debug logs")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    device = torch.device(args.device)
    mesh = cube_surface.load(device=device).fit_to_unit_cube()
    rows = time_levels(mesh, args.levels, repeats=args.repeats)

    if args.output is not None:
        write_results(
            args.output,
            rows,
            {"mesh": "cube", "device": str(device), "repeats": args.repeats},
        )


if __name__ == "__main__":
    main()
