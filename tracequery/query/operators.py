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
"""Numeric comparison operators available to count thresholds."""

from typing import List, NamedTuple, Optional

from ..commons.keyed_table import KeyedTable


class QueryOperator(NamedTuple):
    id: str
    display: str
    symbol: str


GREATER_THAN = QueryOperator("8905baf3-89bc-4e23-b542-e8d0947991f8", "greater than", "gt")
EQUALS = QueryOperator("1fd2e1fb-6a1c-4a56-a6d4-3c1f2e1dbb1a", "equals", "eq")
LESS_THAN = QueryOperator("3c8c4f2e-0b47-4a0e-9e0b-d8c2f3a5e7b6", "less than", "lt")

DEFAULT_OPERATOR_ID = GREATER_THAN.id

_operators: KeyedTable[QueryOperator] = KeyedTable(
    "query operators",
    {op.id: op for op in (GREATER_THAN, EQUALS, LESS_THAN)},
)


def operators() -> List[QueryOperator]:
    return _operators.values()


def resolve_operator(operator_id: Optional[str]) -> Optional[QueryOperator]:
    """Operator for the id, or None for missing and unknown ids."""
    return _operators.get(operator_id)


def get_operator(operator_id: str) -> QueryOperator:
    return _operators[operator_id]
