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

import uuid
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional, Tuple, Union

from .predicate import Predicate, default_predicate, parse_predicate


def new_token() -> str:
    return str(uuid.uuid4())


@dataclass(frozen=True)
class SearchContext:
    """
    A validated search request: a correlation token, the ordered predicates
    and an optional collection scope. Never holds zero predicates; an empty
    request is replaced by the permissive default predicate.
    """

    predicates: Tuple[Predicate, ...] = ()
    token: str = field(default_factory=new_token)
    collection_ids: Tuple[str, ...] = ()

    def __post_init__(self):
        predicates = tuple(parse_predicate(p) for p in (self.predicates or ()))
        if len(predicates) == 0:
            predicates = (default_predicate(),)
        object.__setattr__(self, "predicates", predicates)
        object.__setattr__(self, "token", self.token or new_token())
        object.__setattr__(self, "collection_ids", tuple(self.collection_ids or ()))

    @classmethod
    def from_input(
        cls, spec: Union[None, "SearchContext", Mapping[str, Any], Iterable[Any]] = None
    ) -> "SearchContext":
        """
        Accepts None, a list of predicates, or a mapping with `predicates`,
        and optionally `token` (or `nonce`) and `collectionIds`.
        """
        if isinstance(spec, SearchContext):
            return spec
        if spec is None:
            return cls()
        if isinstance(spec, Mapping):
            return cls(
                predicates=tuple(spec.get("predicates") or ()),
                token=_first(spec, "token", "nonce"),
                collection_ids=tuple(_first(spec, "collectionIds", "collection_ids") or ()),
            )
        return cls(predicates=tuple(spec))


def _first(spec: Mapping[str, Any], *keys: str) -> Optional[Any]:
    for key in keys:
        if spec.get(key) is not None:
            return spec[key]
    return None
