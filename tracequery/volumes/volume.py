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
"""Labelled 3D volumes and the registry of file format providers."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Tuple, Type
import os

import numpy as np

from ..commons.logger import logger
from ..exceptions import VolumeReadError


@dataclass(frozen=True)
class LabelVolume:
    """A read-only 3D array of integer labels, indexed [x, y, z]."""

    labels: np.ndarray
    source: str = None

    def __post_init__(self):
        if self.labels.ndim != 3:
            raise VolumeReadError(
                f"Expected a 3D label volume, but {self.source!r} has shape {self.labels.shape}"
            )
        self.labels.setflags(write=False)

    @property
    def dims(self) -> Tuple[int, int, int]:
        return tuple(int(d) for d in self.labels.shape)

    def __str__(self):
        return f"{self.__class__.__name__}({self.source!r}, dims={self.dims})"


class VolumeProvider(ABC):

    _providers: Dict[str, Type["VolumeProvider"]] = {}

    def __init_subclass__(cls, srctype: str, suffixes: Tuple[str, ...] = ()) -> None:
        cls.srctype = srctype
        cls.suffixes = suffixes
        for suffix in suffixes:
            VolumeProvider._providers[suffix] = cls
        return super().__init_subclass__()

    def __init__(self, path: str):
        self.path = path

    @abstractmethod
    def fetch(self) -> np.ndarray:
        raise NotImplementedError

    @classmethod
    def for_path(cls, path: str) -> "VolumeProvider":
        lowered = path.lower()
        for suffix in sorted(cls._providers, key=len, reverse=True):
            if lowered.endswith(suffix):
                return cls._providers[suffix](path)
        raise VolumeReadError(
            f"No volume provider for {path!r}. Supported suffixes: "
            + ", ".join(sorted(cls._providers))
        )


def read_volume(path: str) -> LabelVolume:
    """
    Read a labelled volume file, choosing the provider from the file suffix.

    Raises
    ------
    VolumeReadError
        If the file is missing, of an unsupported format, unreadable or not 3D.
    """
    if not os.path.isfile(path):
        raise VolumeReadError(f"Volume file {path!r} does not exist.")
    provider = VolumeProvider.for_path(path)
    try:
        labels = provider.fetch()
    except VolumeReadError:
        raise
    except Exception as e:
        raise VolumeReadError(f"Could not read {provider.srctype} volume {path!r}: {e}") from e
    volume = LabelVolume(np.asarray(labels), source=path)
    logger.debug(f"spatial lookup extents {volume.dims[0]} {volume.dims[1]} {volume.dims[2]}")
    return volume
