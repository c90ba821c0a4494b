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

import time
from typing import Any, Dict, Iterator, List, Optional, TYPE_CHECKING

from .compartments import CompartmentTree
from ..commons.logger import logger
from ..exceptions import AtlasConfigurationError, NotFoundException
from ..volumes import SpatialVolumeClassifier

if TYPE_CHECKING:
    from ..persistence import SearchStore


class Atlas:
    """An atlas together with its compartment tree and, optionally, its label volume."""

    def __init__(
        self,
        id: str,
        name: str,
        compartments: CompartmentTree,
        classifier: SpatialVolumeClassifier = None,
        root_structure_id: int = None,
        spatial_url: str = None,
    ):
        self.id = id
        self.name = name
        self.compartments = compartments
        self.classifier = classifier
        self.root_structure_id = root_structure_id
        self.spatial_url = spatial_url

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.name!r})"

    @classmethod
    def load(cls, store: "SearchStore", spec: Dict[str, Any]) -> "Atlas":
        start = time.perf_counter()
        root_structure_id = spec.get("root_structure_id")
        compartments = CompartmentTree.load(store, spec["id"], root_structure_id)
        classifier = None
        if spec.get("spatial_url"):
            classifier = SpatialVolumeClassifier.from_file(
                spec["spatial_url"], compartments.region_id_for_structure
            )
            logger.debug(
                f"{spec.get('name')} spatial location extents {' '.join(str(d) for d in classifier.dims)}"
            )
        logger.debug(f"loaded atlas {spec.get('name')} in {time.perf_counter() - start:.1f}s")
        return cls(
            id=spec["id"],
            name=spec.get("name", ""),
            compartments=compartments,
            classifier=classifier,
            root_structure_id=root_structure_id,
            spatial_url=spec.get("spatial_url"),
        )

    def whole_brain_id(self) -> Optional[str]:
        return self.compartments.whole_brain_id

    def find_for_location(
        self, x: float, y: float, z: float, use_fallback: bool = False
    ) -> Optional[str]:
        """
        Region id containing the coordinate. With use_fallback, coordinates
        outside of any region are attributed to the whole brain.
        """
        if self.classifier is None:
            raise AtlasConfigurationError(f"{self} has no spatial volume to classify against.")
        region_id = self.classifier.classify(x, y, z)
        if region_id is None and use_fallback:
            return self.compartments.whole_brain_id
        return region_id


class AtlasCache:
    """
    Every atlas of a store, built once at startup. The first atlas listed by
    the store is the default one.
    """

    def __init__(self, atlases: List[Atlas]):
        if len(atlases) == 0:
            raise AtlasConfigurationError("At least one atlas is required.")
        self._atlases: Dict[str, Atlas] = {atlas.id: atlas for atlas in atlases}
        self.default = atlases[0]

    @classmethod
    def load(cls, store: "SearchStore") -> "AtlasCache":
        return cls([Atlas.load(store, spec) for spec in store.load_atlases()])

    def get(self, atlas_id: str) -> Atlas:
        try:
            return self._atlases[atlas_id]
        except KeyError as e:
            raise NotFoundException(f"No atlas with id {atlas_id!r}") from e

    def __iter__(self) -> Iterator[Atlas]:
        return iter(self._atlases.values())

    def __len__(self) -> int:
        return len(self._atlases)
