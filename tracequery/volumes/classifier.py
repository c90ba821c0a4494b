# Copyright 2018-2024
# Institute of Neuroscience and Medicine (INM-1), Forschungszentrum Jülich GmbH

# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at

#     http://www.apache.org/licenses/LICENSE-2.0

# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

import math
from typing import Callable, Iterable, List, Mapping, Optional, Tuple, Union

from .volume import LabelVolume, read_volume
from ..commons.conf import SearchConf

StructureLookup = Union[Mapping[int, str], Callable[[int], Optional[str]]]


class SpatialVolumeClassifier:
    """
    Classifies real world coordinates into atlas regions.

    A coordinate is divided by the voxel scale (units per voxel), rounded up,
    and used as [x, y, z] index into the label volume. The label found there
    is a numeric structure id, translated to a region id with
    `structure_lookup`. Negative and out of range coordinates, background
    labels and labels without a region are unclassifiable and give None, as
    are NaN and infinite coordinates.
    """

    def __init__(
        self,
        volume: LabelVolume,
        structure_lookup: StructureLookup,
        voxel_scale: float = None,
    ):
        self.volume = volume
        self._lookup = (
            structure_lookup if callable(structure_lookup) else structure_lookup.get
        )
        self.voxel_scale = float(voxel_scale or SearchConf.VOXEL_SCALE)

    @classmethod
    def from_file(
        cls, path: str, structure_lookup: StructureLookup, voxel_scale: float = None
    ) -> "SpatialVolumeClassifier":
        return cls(read_volume(path), structure_lookup, voxel_scale=voxel_scale)

    @property
    def dims(self) -> Tuple[int, int, int]:
        return self.volume.dims

    def voxel_index(self, x: float, y: float, z: float) -> Optional[Tuple[int, int, int]]:
        if not all(math.isfinite(c) for c in (x, y, z)):
            return None
        if x < 0 or y < 0 or z < 0:
            return None
        index = tuple(math.ceil(c / self.voxel_scale) for c in (x, y, z))
        if any(i >= d for i, d in zip(index, self.dims)):
            return None
        return index

    def label_at(self, x: float, y: float, z: float) -> Optional[int]:
        index = self.voxel_index(x, y, z)
        if index is None:
            return None
        return int(self.volume.labels[index])

    def classify(self, x: float, y: float, z: float) -> Optional[str]:
        label = self.label_at(x, y, z)
        if not label:
            return None
        return self._lookup(label)

    def classify_many(self, points: Iterable[Tuple[float, float, float]]) -> List[Optional[str]]:
        return [self.classify(*point) for point in points]
