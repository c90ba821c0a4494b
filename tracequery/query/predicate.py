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
Typed search predicates.

A predicate is one of three kinds, each a frozen dataclass carrying only the
fields meaningful to it. `parse_predicate` turns the wire representation
(camelCase or snake_case keys) into the matching class.
"""

from dataclasses import dataclass, field
from typing import Any, ClassVar, Iterable, Mapping, Optional, Tuple, Union

from .operators import DEFAULT_OPERATOR_ID
from ..commons.enum import ContainedInEnum
from ..commons.logger import logger


class PredicateKind(int, ContainedInEnum):
    ANATOMICAL = 1
    CUSTOM_REGION = 2
    IDENTIFIER = 3

    @classmethod
    def aliases(cls):
        # names used by the wire format and by earlier clients
        return {
            "AnatomicalRegion": cls.ANATOMICAL,
            "Custom": cls.CUSTOM_REGION,
            "IdentifierOrCitation": cls.IDENTIFIER,
            "IdOrDoi": cls.IDENTIFIER,
            "Id": cls.IDENTIFIER,
        }


class Composition(int, ContainedInEnum):
    """How a predicate's candidates combine with the running result."""

    AND = 1
    OR = 2
    NOT = 3

    @classmethod
    def parse(cls, spec: Any, default: "Composition" = None) -> "Composition":
        default = default or cls.AND
        if spec is None:
            return default
        try:
            return cls.from_spec(spec)
        except ValueError:
            logger.warning(f"Unknown composition {spec!r}, using {default.name}")
            return default


@dataclass(frozen=True)
class CenterPoint:
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.x, self.y, self.z)


@dataclass(frozen=True)
class Sphere:
    center: CenterPoint
    radius: float

    @property
    def is_set(self) -> bool:
        return self.center is not None and bool(self.radius)


@dataclass(frozen=True)
class Threshold:
    """Numeric threshold on per-region counts."""

    operator_id: Optional[str] = None
    amount: float = 0
    node_structure_ids: Tuple[Union[int, str], ...] = ()


@dataclass(frozen=True)
class Predicate:
    kind: ClassVar[PredicateKind]

    composition: Composition = Composition.AND
    invert: bool = False


@dataclass(frozen=True)
class AnatomicalPredicate(Predicate):
    kind: ClassVar[PredicateKind] = PredicateKind.ANATOMICAL

    region_ids: Tuple[str, ...] = ()
    structure_kind_ids: Tuple[str, ...] = ()
    threshold: Threshold = field(default_factory=Threshold)


@dataclass(frozen=True)
class CustomRegionPredicate(Predicate):
    kind: ClassVar[PredicateKind] = PredicateKind.CUSTOM_REGION

    sphere: Optional[Sphere] = None
    threshold: Threshold = field(default_factory=Threshold)


@dataclass(frozen=True)
class IdentifierPredicate(Predicate):
    kind: ClassVar[PredicateKind] = PredicateKind.IDENTIFIER

    identifiers: Tuple[str, ...] = ()
    exact_match: bool = False


def default_predicate() -> AnatomicalPredicate:
    """The permissive predicate: any region, any structure, more than zero nodes."""
    return AnatomicalPredicate(
        threshold=Threshold(operator_id=DEFAULT_OPERATOR_ID, amount=0)
    )


# wire names first, then the names used by earlier clients
_ALIASES = {
    "kind": ("kind", "predicateType", "predicate_type"),
    "composition": ("composition",),
    "invert": ("invert",),
    "region_ids": ("regionIds", "region_ids", "brainAreaIds"),
    "structure_kind_ids": ("structureKindIds", "structure_kind_ids", "tracingStructureIds"),
    "node_structure_ids": ("nodeStructureIds", "node_structure_ids"),
    "identifiers": ("identifiers", "tracingIdsOrDOIs"),
    "exact_match": ("exactMatch", "exact_match", "tracingIdsOrDOIsExactMatch"),
    "operator_id": ("operatorId", "operator_id"),
    "amount": ("amount",),
    "sphere": ("sphere",),
    "center": ("arbCenter",),
    "radius": ("arbSize",),
}


def _pick(spec: Mapping[str, Any], name: str, default: Any = None) -> Any:
    for key in _ALIASES[name]:
        if key in spec and spec[key] is not None:
            return spec[key]
    return default


def _as_tuple(value: Any) -> Tuple:
    if value is None:
        return ()
    if isinstance(value, (str, int)):
        return (value,)
    if isinstance(value, Iterable):
        return tuple(v for v in value if v is not None)
    raise TypeError(f"Expected a list, got {type(value).__name__}")


def _as_float(value: Any, name: str, default: float = 0.0) -> float:
    if value is None:
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        logger.warning(f"Malformed {name} {value!r}, using {default}")
        return default


def _parse_center(spec: Any) -> Optional[CenterPoint]:
    if spec is None:
        return None
    if isinstance(spec, CenterPoint):
        return spec
    if isinstance(spec, Mapping):
        return CenterPoint(
            *(_as_float(spec.get(axis), f"center {axis}") for axis in ("x", "y", "z"))
        )
    x, y, z = spec
    return CenterPoint(_as_float(x, "center x"), _as_float(y, "center y"), _as_float(z, "center z"))


def _parse_sphere(spec: Mapping[str, Any]) -> Optional[Sphere]:
    sphere = _pick(spec, "sphere")
    if isinstance(sphere, Sphere):
        return sphere
    if isinstance(sphere, Mapping):
        center, radius = sphere.get("center"), sphere.get("radius")
    else:
        center, radius = _pick(spec, "center"), _pick(spec, "radius")
    center = _parse_center(center)
    if center is None and radius is None:
        return None
    return Sphere(center=center, radius=_as_float(radius, "radius"))


def _parse_threshold(spec: Mapping[str, Any]) -> Threshold:
    return Threshold(
        operator_id=_pick(spec, "operator_id") or None,
        amount=_as_float(_pick(spec, "amount"), "amount"),
        node_structure_ids=_as_tuple(_pick(spec, "node_structure_ids")),
    )


def parse_predicate(spec: Union[Predicate, Mapping[str, Any]]) -> Predicate:
    """
    Build a typed predicate from its wire representation.

    A missing kind means an anatomical predicate. Unknown compositions and
    malformed numbers fall back to defaults; an unknown kind is a ValueError.
    """
    if isinstance(spec, Predicate):
        return spec
    if not isinstance(spec, Mapping):
        raise TypeError(f"Cannot parse a predicate from {type(spec).__name__}")

    kind = PredicateKind.from_spec(_pick(spec, "kind", PredicateKind.ANATOMICAL))
    common = dict(
        composition=Composition.parse(_pick(spec, "composition")),
        invert=bool(_pick(spec, "invert", False)),
    )

    if kind is PredicateKind.ANATOMICAL:
        return AnatomicalPredicate(
            region_ids=tuple(str(i) for i in _as_tuple(_pick(spec, "region_ids"))),
            structure_kind_ids=tuple(
                str(i) for i in _as_tuple(_pick(spec, "structure_kind_ids"))
            ),
            threshold=_parse_threshold(spec),
            **common,
        )
    if kind is PredicateKind.CUSTOM_REGION:
        return CustomRegionPredicate(
            sphere=_parse_sphere(spec),
            threshold=_parse_threshold(spec),
            **common,
        )
    return IdentifierPredicate(
        identifiers=tuple(str(i) for i in _as_tuple(_pick(spec, "identifiers"))),
        exact_match=bool(_pick(spec, "exact_match", False)),
        **common,
    )
