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
"""Per-atlas compartment hierarchy with keyed lookups and descendant closures."""

import time
from bisect import bisect_left
from enum import Enum
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, TYPE_CHECKING, Union

import anytree
import pandas as pd
from tqdm import tqdm

from .region import Region
from ..commons.iterable import unique
from ..commons.keyed_table import KeyedTable
from ..commons.logger import logger
from ..exceptions import AtlasConfigurationError, RootRegionMissingError

if TYPE_CHECKING:
    from ..persistence import SearchStore


class RegionKey(str, Enum):
    ID = "id"
    ACRONYM = "acronym"
    NAME = "name"
    SAFE_NAME = "safe_name"
    STRUCTURE_ID = "structure_id"


class CompartmentTree:
    """
    All regions of one atlas, addressable by id, acronym, name, safe name and
    numeric structure id, together with the precomputed closure (the region
    itself plus every descendant) of every region.

    The tree is built once, either from a persistence store (`load`) or from
    a list of regions (`from_regions`), and is read-only afterwards.
    Concurrent searches may share one instance without locking.
    """

    def __init__(
        self,
        regions: Iterable[Region],
        closures: Dict[str, Sequence[str]],
        root_structure_id: Optional[int] = None,
        atlas_id: str = None,
    ):
        self.atlas_id = atlas_id
        self._regions: List[Region] = list(regions)
        self._tables: Dict[RegionKey, KeyedTable[Region]] = {
            key: KeyedTable(f"regions by {key.value}") for key in RegionKey
        }
        for region in self._regions:
            self._tables[RegionKey.ID].add(region.id, region)
            self._tables[RegionKey.ACRONYM].add(region.acronym, region)
            self._tables[RegionKey.NAME].add(region.name, region)
            self._tables[RegionKey.SAFE_NAME].add(region.safe_name, region)
            self._tables[RegionKey.STRUCTURE_ID].add(region.structure_id, region)

        self._closures: KeyedTable[tuple] = KeyedTable("region closures")
        for region_id, closure in closures.items():
            self._closures.add(region_id, tuple(closure))

        self._root_id: Optional[str] = None
        if root_structure_id is not None:
            root = self._tables[RegionKey.STRUCTURE_ID].get(int(root_structure_id))
            if root is None:
                raise RootRegionMissingError(
                    f"Root structure id {root_structure_id} is not among the "
                    f"{len(self._regions)} regions of atlas {atlas_id!r}."
                )
            self._root_id = root.id
        else:
            logger.warning(
                f"No root structure id configured for atlas {atlas_id!r}, "
                "whole brain selections will be treated as regular regions."
            )

        self._link_hierarchy()

    @classmethod
    def load(
        cls,
        store: "SearchStore",
        atlas_id: str,
        root_structure_id: Optional[int] = None,
    ) -> "CompartmentTree":
        """
        Fetch all regions of an atlas and materialize every closure with one
        path prefix query per region.

        Raises
        ------
        RootRegionMissingError
            If the configured root structure id is not among the loaded regions.
        """
        start = time.perf_counter()
        regions = store.load_regions(atlas_id)
        logger.debug(f"caching {len(regions)} regions of atlas {atlas_id!r}")

        closures: Dict[str, List[str]] = {}
        for region in tqdm(
            regions,
            desc=f"Building compartment closures of {atlas_id}",
            total=len(regions),
            disable=logger.level > 20,
        ):
            rows = store.load_regions_with_path_prefix(atlas_id, region.structure_id_path)
            closures[region.id] = unique(row["id"] for row in rows)

        tree = cls(regions, closures, root_structure_id=root_structure_id, atlas_id=atlas_id)
        logger.info(
            f"loaded {len(regions)} regions of atlas {atlas_id!r} in {time.perf_counter() - start:.1f}s"
        )
        return tree

    @classmethod
    def from_regions(
        cls,
        regions: Iterable[Region],
        root_structure_id: Optional[int] = None,
        atlas_id: str = None,
    ) -> "CompartmentTree":
        """
        Build the tree without a store. Closures are computed with the same
        path prefix rule the store query uses: after sorting by path, the
        descendants of a region form one contiguous run starting at the
        region itself.
        """
        regions = list(regions)
        ordered = sorted(regions, key=lambda r: r.structure_id_path)
        paths = [r.structure_id_path for r in ordered]
        closures: Dict[str, List[str]] = {}
        for region in regions:
            lo = bisect_left(paths, region.structure_id_path)
            hi = bisect_left(paths, region.structure_id_path + "\U0010ffff", lo)
            closures[region.id] = [r.id for r in ordered[lo:hi]]
        return cls(regions, closures, root_structure_id=root_structure_id, atlas_id=atlas_id)

    def _link_hierarchy(self):
        by_structure_id = self._tables[RegionKey.STRUCTURE_ID]
        for region in self._regions:
            if region.parent_structure_id is None:
                continue
            parent = by_structure_id.get(region.parent_structure_id)
            if parent is None or parent is region:
                continue
            try:
                region.parent = parent
            except anytree.LoopError as e:
                raise AtlasConfigurationError(
                    f"Region hierarchy of atlas {self.atlas_id!r} contains a loop at {region!r}"
                ) from e

    def __len__(self) -> int:
        return len(self._regions)

    def __iter__(self) -> Iterator[Region]:
        return iter(self._regions)

    def __contains__(self, region_id: str) -> bool:
        return region_id in self._tables[RegionKey.ID]

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(atlas_id={self.atlas_id!r}, regions={len(self)})"

    @property
    def whole_brain_id(self) -> Optional[str]:
        return self._root_id

    @property
    def root(self) -> Optional[Region]:
        return self._tables[RegionKey.ID].get(self._root_id)

    def is_root(self, region_id: str) -> bool:
        """True if the id is the whole brain region. Callers treat it as 'no restriction'."""
        if self._root_id is None or region_id is None:
            return False
        region = self._tables[RegionKey.ID].get(region_id)
        return region is not None and region.id == self._root_id

    def get(self, region_id: str) -> Region:
        return self._tables[RegionKey.ID][region_id]

    def find(self, key: Union[str, int], by: Union[RegionKey, str] = RegionKey.ID) -> Optional[Region]:
        by = RegionKey(by)
        if by is RegionKey.STRUCTURE_ID:
            try:
                key = int(key)
            except (TypeError, ValueError):
                return None
        return self._tables[by].get(key)

    def resolve(self, key: Union[str, int], by: Union[RegionKey, str] = RegionKey.ID) -> Optional[str]:
        """Return the id of the region matching key, case-insensitively, or None."""
        region = self.find(key, by)
        return None if region is None else region.id

    def region_id_for_structure(self, structure_id: int) -> Optional[str]:
        return self.resolve(structure_id, RegionKey.STRUCTURE_ID)

    def match_any_label(self, label: str, allow_simplify: bool = False) -> Optional[Region]:
        """
        Resolve free text by acronym, then by name, then by safe name.
        With allow_simplify, commas are dropped before the name lookups.
        """
        if label is None:
            return None
        region = self.find(label, RegionKey.ACRONYM)
        if allow_simplify:
            label = label.replace(",", "")
        if region is None:
            region = self.find(label, RegionKey.NAME)
        if region is None:
            region = self.find(label, RegionKey.SAFE_NAME)
        return region

    def closure_of(self, region_id: str) -> Optional[List[str]]:
        closure = self._closures.get(region_id)
        return None if closure is None else list(closure)

    def tree2str(self) -> str:
        roots = [r for r in self._regions if r.parent is None]
        return "\n".join(r.tree2str() for r in roots)

    @property
    def dataframe(self) -> pd.DataFrame:
        return pd.DataFrame(
            [region.to_dict() for region in self._regions],
            columns=[
                "id",
                "structure_id",
                "parent_structure_id",
                "structure_id_path",
                "depth",
                "name",
                "safe_name",
                "acronym",
                "has_geometry",
                "atlas_id",
            ],
        ).set_index("id")
