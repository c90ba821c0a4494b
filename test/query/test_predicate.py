import pytest

from tracequery.query import (
    AnatomicalPredicate,
    CenterPoint,
    Composition,
    CustomRegionPredicate,
    DEFAULT_OPERATOR_ID,
    IdentifierPredicate,
    PredicateKind,
    Sphere,
    Threshold,
    default_predicate,
    parse_predicate,
)


def test_default_predicate():
    predicate = default_predicate()
    assert isinstance(predicate, AnatomicalPredicate)
    assert predicate.region_ids == ()
    assert predicate.structure_kind_ids == ()
    assert predicate.threshold == Threshold(operator_id=DEFAULT_OPERATOR_ID, amount=0)
    assert predicate.composition is Composition.AND
    assert predicate.invert is False


def test_parse_anatomical_camel_case():
    predicate = parse_predicate({
        "kind": 1,
        "composition": 2,
        "invert": True,
        "regionIds": ["a", "b"],
        "structureKindIds": ["axon"],
        "nodeStructureIds": [5],
        "operatorId": DEFAULT_OPERATOR_ID,
        "amount": "3",
    })
    assert predicate == AnatomicalPredicate(
        composition=Composition.OR,
        invert=True,
        region_ids=("a", "b"),
        structure_kind_ids=("axon",),
        threshold=Threshold(DEFAULT_OPERATOR_ID, 3.0, (5,)),
    )


def test_parse_snake_case():
    predicate = parse_predicate({
        "kind": "anatomical",
        "region_ids": "a",
        "structure_kind_ids": ["axon", "dendrite"],
    })
    assert predicate.region_ids == ("a",)
    assert predicate.structure_kind_ids == ("axon", "dendrite")


def test_parse_legacy_names():
    predicate = parse_predicate({
        "predicateType": 3,
        "tracingIdsOrDOIs": ["AA0001"],
        "tracingIdsOrDOIsExactMatch": True,
    })
    assert predicate == IdentifierPredicate(identifiers=("AA0001",), exact_match=True)


@pytest.mark.parametrize("spec", [
    {"kind": 2, "sphere": {"center": {"x": 1, "y": 2, "z": 3}, "radius": 4}},
    {"kind": "custom_region", "sphere": {"center": [1, 2, 3], "radius": "4"}},
    {"kind": "CustomRegion", "arbCenter": {"x": 1, "y": 2, "z": 3}, "arbSize": 4},
])
def test_parse_custom_region(spec):
    predicate = parse_predicate(spec)
    assert isinstance(predicate, CustomRegionPredicate)
    assert predicate.sphere == Sphere(CenterPoint(1.0, 2.0, 3.0), 4.0)
    assert predicate.sphere.is_set


def test_parse_custom_region_without_sphere():
    predicate = parse_predicate({"kind": 2})
    assert predicate.sphere is None


@pytest.mark.parametrize("sphere, expected", [
    (Sphere(CenterPoint(0, 0, 0), 5), True),
    (Sphere(CenterPoint(0, 0, 0), 0), False),
    (Sphere(None, 5), False),
])
def test_sphere_is_set(sphere, expected):
    assert sphere.is_set == expected


def test_missing_kind_is_anatomical():
    assert isinstance(parse_predicate({}), AnatomicalPredicate)


def test_unknown_kind():
    with pytest.raises(ValueError):
        parse_predicate({"kind": 42})


def test_not_a_mapping():
    with pytest.raises(TypeError):
        parse_predicate(["kind", 1])


def test_predicate_passes_through():
    predicate = IdentifierPredicate(identifiers=("x",))
    assert parse_predicate(predicate) is predicate


@pytest.mark.parametrize("spec, expected", [
    (None, Composition.AND),
    (1, Composition.AND),
    (2, Composition.OR),
    (3, Composition.NOT),
    ("or", Composition.OR),
    ("NOT", Composition.NOT),
    ("2", Composition.OR),
    (Composition.NOT, Composition.NOT),
    (0, Composition.AND),
    ("xor", Composition.AND),
])
def test_parse_composition(spec, expected):
    assert Composition.parse(spec) is expected


def test_malformed_amount_uses_default():
    predicate = parse_predicate({"amount": "many"})
    assert predicate.threshold.amount == 0.0


@pytest.mark.parametrize("spec, expected", [
    (1, PredicateKind.ANATOMICAL),
    ("2", PredicateKind.CUSTOM_REGION),
    ("identifier", PredicateKind.IDENTIFIER),
    ("custom-region", PredicateKind.CUSTOM_REGION),
    ("IdentifierOrCitation", PredicateKind.IDENTIFIER),
    ("identifier_or_citation", PredicateKind.IDENTIFIER),
    ("IdOrDoi", PredicateKind.IDENTIFIER),
    ("ID", PredicateKind.IDENTIFIER),
    ("AnatomicalRegion", PredicateKind.ANATOMICAL),
    ("ANATOMICAL", PredicateKind.ANATOMICAL),
    ("CUSTOM", PredicateKind.CUSTOM_REGION),
    ("CustomRegion", PredicateKind.CUSTOM_REGION),
])
def test_predicate_kind_from_spec(spec, expected):
    assert PredicateKind.from_spec(spec) is expected


def test_predicates_are_immutable():
    predicate = default_predicate()
    with pytest.raises(AttributeError):
        predicate.invert = True


@pytest.mark.parametrize("kind", ["IdentifierOrCitation", "IdOrDoi", "ID", 3])
def test_parse_identifier_kind_names(kind):
    predicate = parse_predicate({"kind": kind, "identifiers": ["AA0001"], "exactMatch": True})
    assert predicate == IdentifierPredicate(identifiers=("AA0001",), exact_match=True)


def test_parse_unknown_kind_name():
    with pytest.raises(ValueError):
        parse_predicate({"kind": "Citation"})
