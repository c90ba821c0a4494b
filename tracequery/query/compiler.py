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

from typing import Hashable, Iterable, List, Mapping, Optional, Union

from .fragment import AnyOf, Column, Compare, Constraint, Contains, In, QueryFragment
from .operators import resolve_operator
from .predicate import (
    AnatomicalPredicate,
    CustomRegionPredicate,
    IdentifierPredicate,
    Predicate,
    Threshold,
)
from ..atlases import CompartmentTree
from ..commons.enum import ContainedInEnum
from ..commons.iterable import unique
from ..commons.keyed_table import KeyedTable
from ..commons.logger import logger


class NodeStructure(int, ContainedInEnum):
    """SWC node structure values."""

    UNDEFINED = 0
    SOMA = 1
    AXON = 2
    BASAL_DENDRITE = 3
    APICAL_DENDRITE = 4
    FORK_POINT = 5
    END_POINT = 6


# soma, axon and dendrites are not counted, they are defined by the structure kind
COUNT_COLUMNS = {
    NodeStructure.UNDEFINED: Column.PATH_COUNT,
    NodeStructure.FORK_POINT: Column.BRANCH_COUNT,
    NodeStructure.END_POINT: Column.END_COUNT,
}


def resolve_node_structure(
    node_structure: Union[int, str, NodeStructure],
    node_structures: Mapping[Hashable, int] = None,
) -> Optional[NodeStructure]:
    """
    SWC value of a node structure given by entity id (looked up in
    `node_structures`), SWC value, digit string or name. None if unknown.
    """
    if node_structure is None:
        return None
    if node_structures is not None and isinstance(node_structure, str):
        value = node_structures.get(node_structure)
        if value is not None:
            node_structure = value
    try:
        return NodeStructure.from_spec(node_structure)
    except ValueError:
        return None


def count_column_name(
    node_structure: Union[int, str, NodeStructure],
    node_structures: Mapping[Hashable, int] = None,
) -> Optional[Column]:
    value = resolve_node_structure(node_structure, node_structures)
    return None if value is None else COUNT_COLUMNS.get(value)


class PredicateCompiler:
    """
    Compiles one predicate into a QueryFragment for the statistics index.

    Anatomical region ids are expanded to their closures through the
    compartment tree; the whole brain region is dropped so that selecting it
    means no region restriction at all. A collection scope, when given, is
    added to the fragment of every kind.

    Node structures in count thresholds may be given by entity id; the
    `node_structures` mapping (entity id to SWC value) resolves them.
    """

    def __init__(
        self,
        compartments: CompartmentTree,
        node_structures: Mapping[str, int] = None,
    ):
        self.compartments = compartments
        self.node_structures: KeyedTable[int] = KeyedTable(
            "node structures", dict(node_structures or {})
        )

    def compile(
        self, predicate: Predicate, collection_ids: Iterable[str] = None
    ) -> QueryFragment:
        constraints: List[Constraint] = list(self._scope(collection_ids))

        if isinstance(predicate, AnatomicalPredicate):
            constraints.extend(self._anatomical(predicate))
            constraints.extend(self._threshold(predicate.threshold))
            return QueryFragment(tuple(constraints))
        if isinstance(predicate, CustomRegionPredicate):
            # the sphere is applied by the orchestrator on the soma coordinates
            constraints.extend(self._threshold(predicate.threshold))
            return QueryFragment(tuple(constraints), include_soma=True)
        if isinstance(predicate, IdentifierPredicate):
            constraints.append(self._identifier(predicate))
            return QueryFragment(tuple(constraints))
        raise TypeError(f"Cannot compile {type(predicate).__name__}")

    def scope_fragment(self, collection_ids: Iterable[str] = None) -> QueryFragment:
        """Every index row within the collection scope."""
        return QueryFragment(tuple(self._scope(collection_ids)))

    @staticmethod
    def _scope(collection_ids: Iterable[str]) -> List[Constraint]:
        collection_ids = tuple(collection_ids or ())
        if len(collection_ids) == 0:
            return []
        return [In(Column.COLLECTION_ID, collection_ids)]

    def _anatomical(self, predicate: AnatomicalPredicate) -> List[Constraint]:
        constraints: List[Constraint] = []

        # none or both structure kinds: no restriction
        if len(predicate.structure_kind_ids) == 1:
            constraints.append(
                In(Column.STRUCTURE_KIND_ID, tuple(predicate.structure_kind_ids))
            )

        requested = [
            region_id
            for region_id in predicate.region_ids
            if not self.compartments.is_root(region_id)
        ]
        if len(requested) > 0:
            region_ids = []
            for region_id in requested:
                closure = self.compartments.closure_of(region_id)
                if closure is None:
                    logger.warning(f"Region {region_id!r} is not part of {self.compartments}")
                    continue
                region_ids.extend(closure)
            constraints.append(In(Column.REGION_ID, tuple(unique(region_ids))))

        return constraints

    @staticmethod
    def _identifier(predicate: IdentifierPredicate) -> Constraint:
        identifiers = tuple(predicate.identifiers)
        if predicate.exact_match or len(identifiers) == 0:
            return AnyOf((In(Column.LABEL, identifiers), In(Column.CITATION, identifiers)))
        return AnyOf(
            tuple(
                Contains(column, identifier)
                for identifier in identifiers
                for column in (Column.LABEL, Column.CITATION)
            )
        )

    def _threshold(self, threshold: Threshold) -> List[Constraint]:
        symbol, amount = "gt", 0
        if threshold.operator_id:
            operator = resolve_operator(threshold.operator_id)
            if operator is None:
                logger.warning(
                    f"Unknown operator id {threshold.operator_id!r}, using greater than 0"
                )
            else:
                symbol, amount = operator.symbol, threshold.amount

        if len(threshold.node_structure_ids) == 0:
            return [Compare(Column.NODE_COUNT, symbol, amount)]

        columns, unknown = [], []
        for node_structure in threshold.node_structure_ids:
            value = resolve_node_structure(node_structure, self.node_structures)
            if value is None:
                unknown.append(node_structure)
                continue
            column = COUNT_COLUMNS.get(value)
            if column is None:
                logger.debug(f"No count column for node structure {value.name}")
                continue
            columns.append(column)
        columns = unique(columns)

        if len(unknown) > 0:
            logger.warning(
                f"Unknown node structures {unknown}"
                + ("" if columns else ", thresholding the total node count instead")
            )
        if len(columns) == 0:
            # soma, axon and dendrite nodes alone have no count to threshold
            return [Compare(Column.NODE_COUNT, symbol, amount)] if unknown else []
        if len(columns) == 1:
            return [Compare(columns[0], symbol, amount)]
        return [AnyOf(tuple(Compare(column, symbol, amount) for column in columns))]
