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

from typing import Hashable, List, Sequence

from .predicate import Composition, Predicate
from ..commons.iterable import unique


def combine(running: List[Hashable], candidates: Sequence[Hashable], composition: Composition) -> List[Hashable]:
    """Combine the running result with one predicate's candidates, keeping the running order."""
    composition = Composition(composition)
    if composition is Composition.OR:
        return unique([*running, *candidates])
    lookup = set(candidates)
    if composition is Composition.AND:
        return [item for item in running if item in lookup]
    return [item for item in running if item not in lookup]


def compose(id_sets: Sequence[Sequence[Hashable]], predicates: Sequence[Predicate]) -> List[Hashable]:
    """
    Fold per-predicate candidate ids into one result, left to right.

    The first predicate seeds the result regardless of its composition. Each
    later predicate combines with the running result using its own
    composition: AND intersects, OR unites, NOT removes its candidates. The
    fold is order dependent, [A, B(NOT)] is A minus B while [B, A(NOT)] is
    B minus A.
    """
    if len(id_sets) != len(predicates):
        raise ValueError(
            f"Got {len(id_sets)} candidate sets for {len(predicates)} predicates"
        )
    if len(id_sets) == 0:
        return []

    running = unique(id_sets[0])
    for candidates, predicate in zip(id_sets[1:], predicates[1:]):
        running = combine(running, candidates, predicate.composition)
    return running
