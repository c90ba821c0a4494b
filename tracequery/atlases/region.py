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

import anytree
from typing import Any, Dict, Iterator


class Region(anytree.NodeMixin):
    """
    One compartment of an atlas ontology.

    The ancestor chain is encoded twice: as the numeric `parent_structure_id`,
    used to link the anytree hierarchy, and as the materialized
    `structure_id_path` (e.g. "/997/8/567/"), which is a prefix of the path
    of every descendant and is what descendant lookups are based on.
    """

    def __init__(
        self,
        id: str,
        structure_id: int,
        structure_id_path: str,
        name: str,
        acronym: str,
        safe_name: str = None,
        parent_structure_id: int = None,
        depth: int = None,
        has_geometry: bool = False,
        atlas_id: str = None,
    ):
        anytree.NodeMixin.__init__(self)
        self.id = id
        self.structure_id = int(structure_id)
        self.structure_id_path = structure_id_path
        self.name = name
        self.acronym = acronym
        self.safe_name = safe_name or name
        self.parent_structure_id = (
            None if parent_structure_id is None else int(parent_structure_id)
        )
        self.structure_depth = (
            depth
            if depth is not None
            else max(len([s for s in structure_id_path.split("/") if s]) - 1, 0)
        )
        self.has_geometry = bool(has_geometry)
        self.atlas_id = atlas_id

    @classmethod
    def from_dict(cls, spec: Dict[str, Any]) -> "Region":
        return cls(
            id=spec["id"],
            structure_id=spec["structure_id"],
            structure_id_path=spec["structure_id_path"],
            name=spec["name"],
            acronym=spec["acronym"],
            safe_name=spec.get("safe_name"),
            parent_structure_id=spec.get("parent_structure_id"),
            depth=spec.get("depth"),
            has_geometry=spec.get("has_geometry", False),
            atlas_id=spec.get("atlas_id"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "structure_id": self.structure_id,
            "parent_structure_id": self.parent_structure_id,
            "structure_id_path": self.structure_id_path,
            "depth": self.structure_depth,
            "name": self.name,
            "safe_name": self.safe_name,
            "acronym": self.acronym,
            "has_geometry": self.has_geometry,
            "atlas_id": self.atlas_id,
        }

    def __hash__(self):
        return hash(self.id)

    def __eq__(self, other):
        return isinstance(other, Region) and other.id == self.id

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.acronym!r}, structure_id={self.structure_id})"

    def __iter__(self) -> Iterator["Region"]:
        return anytree.PreOrderIter(self)

    def is_ancestor_path_of(self, other: "Region") -> bool:
        return other.structure_id_path.startswith(self.structure_id_path)

    def tree2str(self):
        """Render region-tree as a string"""
        return "\n".join(
            "%s%s" % (pre, node.acronym)
            for pre, _, node in anytree.RenderTree(
                self, style=anytree.render.ContRoundStyle
            )
        )
