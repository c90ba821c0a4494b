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
"""
Query fragments: the constraint sets predicates compile into.

A fragment is a conjunction of column constraints over the statistics
index. It does not execute anything itself; a store either renders it to
SQL (`to_sql`) or evaluates it against a pandas DataFrame (`mask`).
"""

import operator
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Tuple

import pandas as pd


class Column(str, Enum):
    RECORD_ID = "record_id"
    REGION_ID = "region_id"
    STRUCTURE_KIND_ID = "structure_kind_id"
    COLLECTION_ID = "collection_id"
    LABEL = "label"
    CITATION = "citation"
    NODE_COUNT = "node_count"
    PATH_COUNT = "path_count"
    BRANCH_COUNT = "branch_count"
    END_COUNT = "end_count"
    SOMA_X = "soma_x"
    SOMA_Y = "soma_y"
    SOMA_Z = "soma_z"


SOMA_COLUMNS = (Column.SOMA_X, Column.SOMA_Y, Column.SOMA_Z)

COMPARATORS = {
    "eq": (operator.eq, "="),
    "lt": (operator.lt, "<"),
    "gt": (operator.gt, ">"),
}


class _Params:
    def __init__(self):
        self.values: Dict[str, Any] = {}

    def add(self, value: Any) -> str:
        name = f"p{len(self.values)}"
        self.values[name] = value
        return f"%({name})s"


def _quote(column: Column) -> str:
    return f'"{Column(column).value}"'


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class Constraint(ABC):

    @abstractmethod
    def mask(self, frame: pd.DataFrame) -> pd.Series:
        raise NotImplementedError

    @abstractmethod
    def render(self, params: _Params) -> str:
        raise NotImplementedError


@dataclass(frozen=True)
class In(Constraint):
    column: Column
    values: Tuple[Any, ...]

    def mask(self, frame):
        return frame[Column(self.column).value].isin(self.values)

    def render(self, params):
        if len(self.values) == 0:
            return "FALSE"
        return f"{_quote(self.column)} IN {params.add(tuple(self.values))}"


@dataclass(frozen=True)
class Compare(Constraint):
    column: Column
    symbol: str
    amount: float

    def __post_init__(self):
        if self.symbol not in COMPARATORS:
            raise ValueError(f"Unknown comparison {self.symbol!r}")

    def mask(self, frame):
        fn, _ = COMPARATORS[self.symbol]
        return fn(frame[Column(self.column).value], self.amount).fillna(False).astype(bool)

    def render(self, params):
        _, sql = COMPARATORS[self.symbol]
        return f"{_quote(self.column)} {sql} {params.add(self.amount)}"


@dataclass(frozen=True)
class Contains(Constraint):
    """Case-insensitive substring match."""

    column: Column
    text: str

    def mask(self, frame):
        return (
            frame[Column(self.column).value]
            .fillna("")
            .astype(str)
            .str.contains(self.text, case=False, regex=False)
        )

    def render(self, params):
        return f"{_quote(self.column)} ILIKE {params.add('%' + _escape_like(self.text) + '%')}"


@dataclass(frozen=True)
class AnyOf(Constraint):
    constraints: Tuple[Constraint, ...]

    def mask(self, frame):
        result = pd.Series(False, index=frame.index)
        for constraint in self.constraints:
            result = result | constraint.mask(frame)
        return result

    def render(self, params):
        if len(self.constraints) == 0:
            return "FALSE"
        return "(" + " OR ".join(c.render(params) for c in self.constraints) + ")"


@dataclass(frozen=True)
class AllOf(Constraint):
    constraints: Tuple[Constraint, ...]

    def mask(self, frame):
        result = pd.Series(True, index=frame.index)
        for constraint in self.constraints:
            result = result & constraint.mask(frame)
        return result

    def render(self, params):
        if len(self.constraints) == 0:
            return "TRUE"
        return " AND ".join(c.render(params) for c in self.constraints)


@dataclass(frozen=True)
class QueryFragment:
    """Column constraints ANDed together, plus whether soma coordinates are needed."""

    constraints: Tuple[Constraint, ...] = ()
    include_soma: bool = False

    @property
    def where(self) -> AllOf:
        return AllOf(self.constraints)

    @property
    def columns(self) -> List[Column]:
        columns = [Column.RECORD_ID, Column.REGION_ID]
        if self.include_soma:
            columns.extend(SOMA_COLUMNS)
        return columns

    def mask(self, frame: pd.DataFrame) -> pd.Series:
        return self.where.mask(frame)

    def apply(self, frame: pd.DataFrame) -> pd.DataFrame:
        return frame.loc[self.mask(frame), [c.value for c in self.columns]]

    def to_sql(self) -> Tuple[str, Dict[str, Any]]:
        """
        Render the constraints as a parameterised WHERE clause, DB-API
        pyformat style.

        Example
        -------
        >>> QueryFragment((In(Column.REGION_ID, ("a", "b")),)).to_sql()
        ('"region_id" IN %(p0)s', {'p0': ('a', 'b')})
        """
        params = _Params()
        return self.where.render(params), params.values
