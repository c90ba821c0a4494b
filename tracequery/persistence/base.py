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
"""Interface of the persistence collaborator the search reads from."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, Iterable, List, Optional, TYPE_CHECKING

import pandas as pd

if TYPE_CHECKING:
    from ..atlases import Region
    from ..query.fragment import QueryFragment


@dataclass
class Record:
    """A tracing record as returned to search callers."""

    id: str
    label: str = ""
    collection_id: Optional[str] = None
    citation: Optional[str] = None
    attributes: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, spec: Dict[str, Any]) -> "Record":
        known = {"id", "label", "collection_id", "citation"}
        return cls(
            id=spec["id"],
            label=spec.get("label") or "",
            collection_id=spec.get("collection_id"),
            citation=spec.get("citation"),
            attributes={k: v for k, v in spec.items() if k not in known},
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class SearchStore(ABC):
    """
    Read access to atlases, regions, the statistics index and records.

    The search subsystem never writes through this interface. Calls taking a
    timeout must abort the in-flight query once it has elapsed and raise;
    implementations do not retry.
    """

    @abstractmethod
    def load_atlases(self) -> List[Dict[str, Any]]:
        """Atlas rows: id, name, root_structure_id and optionally spatial_url."""
        raise NotImplementedError

    @abstractmethod
    def load_regions(self, atlas_id: str) -> List["Region"]:
        raise NotImplementedError

    @abstractmethod
    def load_regions_with_path_prefix(self, atlas_id: str, prefix: str) -> List[Dict[str, str]]:
        """Rows with `id` and `structure_id_path` whose path starts with prefix."""
        raise NotImplementedError

    def load_node_structures(self) -> Dict[str, int]:
        """
        Node structure entity ids mapped to their SWC values. Stores without
        node structure entities return an empty mapping.
        """
        return {}

    @abstractmethod
    def query_statistics_index(
        self, fragment: "QueryFragment", timeout: float = None
    ) -> pd.DataFrame:
        """
        Index rows matching the fragment, with at least the `record_id` and
        `region_id` columns, plus `soma_x`, `soma_y` and `soma_z` when
        `fragment.include_soma` is set.
        """
        raise NotImplementedError

    @abstractmethod
    def load_records_by_ids(self, ids: Iterable[str], timeout: float = None) -> List[Record]:
        raise NotImplementedError

    @abstractmethod
    def count_records(self, collection_ids: Iterable[str] = None) -> int:
        raise NotImplementedError
