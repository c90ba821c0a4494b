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
"""A SearchStore kept entirely in memory, backed by a pandas DataFrame."""

import json
from typing import Any, Dict, Iterable, List, Union

import pandas as pd

from .base import Record, SearchStore
from ..atlases import Region
from ..commons.iterable import unique
from ..commons.logger import logger
from ..query.fragment import Column, QueryFragment

INDEX_DEFAULTS: Dict[Column, Any] = {
    Column.RECORD_ID: None,
    Column.REGION_ID: None,
    Column.STRUCTURE_KIND_ID: None,
    Column.COLLECTION_ID: None,
    Column.LABEL: "",
    Column.CITATION: "",
    Column.NODE_COUNT: 0,
    Column.PATH_COUNT: 0,
    Column.BRANCH_COUNT: 0,
    Column.END_COUNT: 0,
    Column.SOMA_X: 0.0,
    Column.SOMA_Y: 0.0,
    Column.SOMA_Z: 0.0,
}


def _as_index_frame(index: Union[None, pd.DataFrame, Iterable[Dict[str, Any]]]) -> pd.DataFrame:
    frame = pd.DataFrame(index if index is not None else [])
    for column, default in INDEX_DEFAULTS.items():
        if column.value not in frame.columns:
            frame[column.value] = default
    for column in (Column.LABEL, Column.CITATION):
        frame[column.value] = frame[column.value].fillna("").astype(str)
    for column in (Column.RECORD_ID, Column.REGION_ID, Column.STRUCTURE_KIND_ID, Column.COLLECTION_ID):
        series = frame[column.value].astype("object")
        frame[column.value] = series.where(series.notna(), None)
    return frame


def _as_node_structure_map(
    node_structures: Union[None, Dict[str, int], Iterable[Dict[str, Any]]]
) -> Dict[str, int]:
    """Accepts an id to SWC value mapping, or rows with `id` and `swc_value`."""
    if node_structures is None:
        return {}
    if isinstance(node_structures, dict):
        return {str(k): int(v) for k, v in node_structures.items()}
    return {str(row["id"]): int(row["swc_value"]) for row in node_structures}


def records_from_index(frame: pd.DataFrame) -> List[Record]:
    """One record per distinct record id, labelled from its first index row."""
    first_rows = frame.drop_duplicates(subset=Column.RECORD_ID.value)
    return [
        Record(
            id=row[Column.RECORD_ID.value],
            label=row[Column.LABEL.value] or "",
            collection_id=row[Column.COLLECTION_ID.value],
            citation=row[Column.CITATION.value] or None,
        )
        for _, row in first_rows.iterrows()
    ]


class InMemoryStore(SearchStore):
    """
    Regions, statistics index and records held in process. Fragments are
    evaluated with `QueryFragment.apply`, so a query never blocks and the
    timeout arguments are accepted for interface compatibility only.
    """

    def __init__(
        self,
        regions: Iterable[Union[Region, Dict[str, Any]]] = (),
        index: Union[None, pd.DataFrame, Iterable[Dict[str, Any]]] = None,
        records: Iterable[Union[Record, Dict[str, Any]]] = None,
        atlases: Iterable[Dict[str, Any]] = (),
        node_structures: Union[None, Dict[str, int], Iterable[Dict[str, Any]]] = None,
    ):
        # keep plain rows, every load hands out fresh Region nodes
        self._regions = [r.to_dict() if isinstance(r, Region) else dict(r) for r in regions]
        self._index = _as_index_frame(index)
        if records is None:
            records = records_from_index(self._index)
        self._records: Dict[str, Record] = {}
        for record in records:
            record = record if isinstance(record, Record) else Record.from_dict(record)
            self._records[record.id] = record
        self._atlases = [dict(a) for a in atlases]
        self._node_structures = _as_node_structure_map(node_structures)

    @classmethod
    def from_files(
        cls,
        regions_path: str,
        index_path: str = None,
        records_path: str = None,
        atlases_path: str = None,
        node_structures_path: str = None,
    ) -> "InMemoryStore":
        """
        Regions, records, atlases and node structures are JSON lists; the index is CSV, or
        JSON records when the file name ends with .json.
        """
        def read_json(path):
            with open(path, "r", encoding="utf-8") as fp:
                return json.load(fp)

        index = None
        if index_path is not None:
            index = (
                pd.read_json(index_path, orient="records", dtype=False)
                if index_path.lower().endswith(".json")
                else pd.read_csv(index_path)
            )
        store = cls(
            regions=read_json(regions_path),
            index=index,
            records=read_json(records_path) if records_path else None,
            atlases=read_json(atlases_path) if atlases_path else (),
            node_structures=read_json(node_structures_path) if node_structures_path else None,
        )
        logger.debug(
            f"loaded {len(store._regions)} regions, {len(store._index)} index rows "
            f"and {len(store._records)} records"
        )
        return store

    def _regions_of(self, atlas_id: str) -> List[Dict[str, Any]]:
        return [r for r in self._regions if r.get("atlas_id") in (None, atlas_id)]

    def load_atlases(self) -> List[Dict[str, Any]]:
        if self._atlases:
            return [dict(a) for a in self._atlases]
        return [
            {"id": atlas_id, "name": atlas_id}
            for atlas_id in unique(r.get("atlas_id") for r in self._regions)
            if atlas_id is not None
        ]

    def load_regions(self, atlas_id: str) -> List[Region]:
        return [Region.from_dict(row) for row in self._regions_of(atlas_id)]

    def load_regions_with_path_prefix(self, atlas_id: str, prefix: str) -> List[Dict[str, str]]:
        rows = [
            {"id": row["id"], "structure_id_path": row["structure_id_path"]}
            for row in self._regions_of(atlas_id)
            if row["structure_id_path"].startswith(prefix)
        ]
        return sorted(rows, key=lambda row: row["structure_id_path"])

    def load_node_structures(self) -> Dict[str, int]:
        return dict(self._node_structures)

    def query_statistics_index(self, fragment: QueryFragment, timeout: float = None) -> pd.DataFrame:
        return fragment.apply(self._index).reset_index(drop=True)

    def load_records_by_ids(self, ids: Iterable[str], timeout: float = None) -> List[Record]:
        return [self._records[i] for i in ids if i in self._records]

    def count_records(self, collection_ids: Iterable[str] = None) -> int:
        collection_ids = set(collection_ids or ())
        if len(collection_ids) == 0:
            return len(self._records)
        return len([r for r in self._records.values() if r.collection_id in collection_ids])
