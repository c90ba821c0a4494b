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
"""Runs a whole search: compile, query, post-filter, compose, load, sort."""

import time
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, TYPE_CHECKING

import numpy as np
import pandas as pd

from .compiler import PredicateCompiler
from .composition import compose
from .context import SearchContext
from .fragment import Column, QueryFragment, SOMA_COLUMNS
from .predicate import CustomRegionPredicate, Predicate, Sphere
from ..commons.conf import SearchConf
from ..commons.iterable import unique
from ..commons.logger import logger
from ..exceptions import SearchTimeoutError

if TYPE_CHECKING:
    from ..atlases import Atlas
    from ..persistence import Record, SearchStore


@dataclass
class QueryPage:
    """
    Result of one search. On failure `records` is empty, `total_count` is 0
    and `error` holds the exception, so that callers can tell a failed search
    from one that legitimately matched nothing.
    """

    token: str
    elapsed_ms: float
    total_count: int
    records: List["Record"] = field(default_factory=list)
    error: Optional[Exception] = None

    @property
    def failed(self) -> bool:
        return self.error is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "token": self.token,
            "elapsedMs": self.elapsed_ms,
            "totalCount": self.total_count,
            "records": [record.to_dict() for record in self.records],
            "error": None if self.error is None else str(self.error) or type(self.error).__name__,
        }


def within_sphere(rows: pd.DataFrame, sphere: Sphere) -> pd.DataFrame:
    """Rows whose soma lies at most `sphere.radius` from the center."""
    center = np.asarray(sphere.center.as_tuple(), dtype=float)
    soma = rows[[c.value for c in SOMA_COLUMNS]].to_numpy(dtype=float)
    distance = np.linalg.norm(soma - center, axis=1)
    return rows.loc[distance <= sphere.radius]


def _raw_token(context: Any) -> Optional[str]:
    if isinstance(context, SearchContext):
        return context.token
    if isinstance(context, Mapping):
        return context.get("token") or context.get("nonce")
    return None


class SearchOrchestrator:
    """
    Drives a search against a store with a compiler bound to one atlas.

    The orchestrator holds no per-search state: many searches may run
    concurrently on one instance. Per-predicate index queries are issued in
    parallel on a thread pool when `max_workers` is above one. `search`
    never raises; any failure, a timeout included, yields an error page.
    """

    def __init__(
        self,
        store: "SearchStore",
        compiler: PredicateCompiler,
        max_workers: int = None,
        timeout: float = None,
    ):
        self.store = store
        self.compiler = compiler
        self.max_workers = max_workers
        self.timeout = timeout

    @classmethod
    def for_atlas(cls, store: "SearchStore", atlas: "Atlas", **kwargs) -> "SearchOrchestrator":
        compiler = PredicateCompiler(atlas.compartments, store.load_node_structures())
        return cls(store, compiler, **kwargs)

    def search(self, context: Any = None, timeout: float = None) -> QueryPage:
        """
        Run a search.

        Parameters
        ----------
        context: SearchContext, Mapping, list of predicates or None
            Anything `SearchContext.from_input` accepts.
        timeout: float
            Seconds the index queries and the record load may take in total.
            Defaults to the orchestrator's timeout, then to SearchConf.QUERY_TIMEOUT.

        Returns
        -------
        QueryPage
        """
        start = time.perf_counter()
        # known before parsing, so a malformed context still echoes its token
        token = _raw_token(context)
        try:
            context = SearchContext.from_input(context)
            token = context.token
            timeout = self._timeout(timeout)
            deadline = None if timeout is None else start + timeout

            records = self._perform(context, deadline)
            total_count = self.store.count_records(context.collection_ids)
            elapsed_ms = (time.perf_counter() - start) * 1000
            logger.debug(
                f"search {token} matched {len(records)} of {total_count} records in {elapsed_ms:.0f}ms"
            )
            return QueryPage(token, elapsed_ms, total_count, records)
        except Exception as e:
            elapsed_ms = (time.perf_counter() - start) * 1000
            logger.error(f"search {token} failed after {elapsed_ms:.0f}ms: {e}", exc_info=1)
            return QueryPage(token, elapsed_ms, 0, [], e)

    def _timeout(self, timeout: Optional[float]) -> Optional[float]:
        for value in (timeout, self.timeout, SearchConf.QUERY_TIMEOUT):
            if value is not None:
                return float(value)
        return None

    @staticmethod
    def _remaining(deadline: Optional[float]) -> Optional[float]:
        if deadline is None:
            return None
        remaining = deadline - time.perf_counter()
        if remaining <= 0:
            raise SearchTimeoutError("search timed out")
        return remaining

    def _perform(self, context: SearchContext, deadline: Optional[float]) -> List["Record"]:
        fragments = [
            self.compiler.compile(predicate, context.collection_ids)
            for predicate in context.predicates
        ]
        results = self._query_all(fragments, deadline)

        universe = None
        id_sets = []
        for predicate, rows in zip(context.predicates, results):
            candidates = self._candidates(predicate, rows)
            if predicate.invert:
                if universe is None:
                    universe = self._universe(context, deadline)
                excluded = set(candidates)
                candidates = [i for i in universe if i not in excluded]
            id_sets.append(candidates)

        ids = compose(id_sets, context.predicates)
        records = self.store.load_records_by_ids(ids, timeout=self._remaining(deadline))
        return sorted(records, key=lambda r: (r.label or "", r.id), reverse=True)

    def _query_all(
        self, fragments: Sequence[QueryFragment], deadline: Optional[float]
    ) -> List[pd.DataFrame]:
        max_workers = min(self.max_workers or SearchConf.MAX_WORKERS, len(fragments))
        if max_workers <= 1:
            return [
                self.store.query_statistics_index(f, timeout=self._remaining(deadline))
                for f in fragments
            ]

        timeout = self._remaining(deadline)
        executor = ThreadPoolExecutor(max_workers=max_workers)
        try:
            futures = [
                executor.submit(self.store.query_statistics_index, f, timeout=timeout)
                for f in fragments
            ]
            _, not_done = wait(futures, timeout=timeout)
            if not_done:
                raise SearchTimeoutError(
                    f"{len(not_done)} of {len(futures)} index queries did not finish within {timeout:.1f}s"
                )
            return [future.result() for future in futures]
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

    @staticmethod
    def _candidates(predicate: Predicate, rows: pd.DataFrame) -> List[str]:
        if isinstance(predicate, CustomRegionPredicate) and predicate.sphere is not None and predicate.sphere.is_set:
            rows = within_sphere(rows, predicate.sphere)
        return [i for i in unique(rows[Column.RECORD_ID.value]) if pd.notna(i)]

    def _universe(self, context: SearchContext, deadline: Optional[float]) -> List[str]:
        rows = self.store.query_statistics_index(
            self.compiler.scope_fragment(context.collection_ids),
            timeout=self._remaining(deadline),
        )
        return [i for i in unique(rows[Column.RECORD_ID.value]) if pd.notna(i)]
