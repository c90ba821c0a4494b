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

from .operators import QueryOperator, operators, resolve_operator, get_operator, DEFAULT_OPERATOR_ID
from .predicate import (
    PredicateKind,
    Composition,
    CenterPoint,
    Sphere,
    Threshold,
    Predicate,
    AnatomicalPredicate,
    CustomRegionPredicate,
    IdentifierPredicate,
    default_predicate,
    parse_predicate,
)
from .fragment import Column, QueryFragment, In, Compare, Contains, AnyOf, AllOf
from .compiler import PredicateCompiler, NodeStructure, count_column_name
from .context import SearchContext
from .composition import compose
from .orchestrator import SearchOrchestrator, QueryPage
