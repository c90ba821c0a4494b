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

from .exceptions import (
    TraceQueryException,
    AtlasConfigurationError,
    RootRegionMissingError,
    VolumeReadError,
    NotFoundException,
    SearchTimeoutError,
)
from .commons.logger import logger, QUIET, VERBOSE, set_log_level
from .commons.conf import SearchConf
from ._version import __version__
from .atlases import Region, RegionKey, CompartmentTree, Atlas, AtlasCache
from .volumes import LabelVolume, SpatialVolumeClassifier, read_volume
from .query import (
    SearchContext,
    PredicateCompiler,
    SearchOrchestrator,
    QueryPage,
    compose,
    parse_predicate,
    default_predicate,
    Composition,
    PredicateKind,
)
from .persistence import SearchStore, InMemoryStore, Record

logger.debug(f"Version: {__version__}")


def create_search(store: SearchStore, atlas_id: str = None, **kwargs) -> SearchOrchestrator:
    """
    Build the atlas caches of a store once and return an orchestrator bound
    to one atlas (the default atlas if none is given).
    """
    atlases = AtlasCache.load(store)
    atlas = atlases.default if atlas_id is None else atlases.get(atlas_id)
    return SearchOrchestrator.for_atlas(store, atlas, **kwargs)
