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

from typing import Dict, Generic, Hashable, Iterator, List, Optional, TypeVar

from .logger import logger
from ..exceptions import NotFoundException

T = TypeVar("T")


def fold_key(key: Hashable) -> Hashable:
    if isinstance(key, str):
        return key.casefold()
    return key


class KeyedTable(Generic[T]):
    """
    Lookup table for instances by a single key. String keys are case folded,
    both when adding and when looking up, so that "VISp", "visp" and "VISP"
    address the same entry.
    """

    def __init__(self, name: str = None, elements: Dict[Hashable, T] = None):
        self.name = name or self.__class__.__name__
        self._elements: Dict[Hashable, T] = {}
        for key, value in (elements or {}).items():
            self.add(key, value)

    def add(self, key: Hashable, value: T) -> None:
        """Add a key/value pair to the table.

        Args:
            key (Hashable): Unique name or key of the object
            value (object): The registered object
        """
        folded = fold_key(key)
        if folded in self._elements and self._elements[folded] is not value:
            logger.warning(
                f"Key {key!r} already in {self.name}, existing value will be replaced."
            )
        self._elements[folded] = value

    def get(self, key: Hashable) -> Optional[T]:
        if key is None:
            return None
        return self._elements.get(fold_key(key))

    def __getitem__(self, key: Hashable) -> T:
        value = self.get(key)
        if value is None:
            hint = ""
            if isinstance(key, str):
                import difflib

                closest = difflib.get_close_matches(
                    fold_key(key),
                    [k for k in self._elements.keys() if isinstance(k, str)],
                    n=3,
                )
                if len(closest) > 0:
                    hint = f" Did you mean {' or '.join(closest)}?"
            raise NotFoundException(f"{key!r} not in {self.name}.{hint}")
        return value

    def __contains__(self, key: Hashable) -> bool:
        return fold_key(key) in self._elements

    def __iter__(self) -> Iterator[T]:
        return (v for v in self._elements.values())

    def __len__(self) -> int:
        return len(self._elements)

    def __str__(self) -> str:
        if len(self) > 0:
            return f"{self.name}:\n - " + "\n - ".join(str(k) for k in self._elements.keys())
        else:
            return f"Empty {self.name}"

    def keys(self) -> List[Hashable]:
        return list(self._elements.keys())

    def values(self) -> List[T]:
        return list(self._elements.values())
