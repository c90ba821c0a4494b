import pytest

from tracequery.atlases import CompartmentTree, Region
from tracequery.persistence import InMemoryStore
from tracequery.query import PredicateCompiler, SearchOrchestrator

ROOT_STRUCTURE_ID = 997

REGION_ROWS = [
    dict(id="r-root", structure_id=997, parent_structure_id=None, structure_id_path="/997/",
         name="root", safe_name="root", acronym="root"),
    dict(id="r-grey", structure_id=8, parent_structure_id=997, structure_id_path="/997/8/",
         name="Basic cell groups and regions", safe_name="Basic cell groups and regions", acronym="grey"),
    dict(id="r-ctx", structure_id=688, parent_structure_id=8, structure_id_path="/997/8/688/",
         name="Cerebral cortex", safe_name="Cerebral cortex", acronym="CTX"),
    dict(id="r-visp", structure_id=385, parent_structure_id=688, structure_id_path="/997/8/688/385/",
         name="Primary visual area", safe_name="Primary visual area", acronym="VISp", has_geometry=True),
    dict(id="r-cb", structure_id=512, parent_structure_id=8, structure_id_path="/997/8/512/",
         name="Cerebellum", safe_name="Cerebellum (CB)", acronym="CB"),
]


def index_row(record_id, region_id, kind, label, citation="", collection="c1",
              nodes=0, paths=0, branches=0, ends=0, soma=(0.0, 0.0, 0.0)):
    return dict(
        record_id=record_id, region_id=region_id, structure_kind_id=kind,
        collection_id=collection, label=label, citation=citation,
        node_count=nodes, path_count=paths, branch_count=branches, end_count=ends,
        soma_x=soma[0], soma_y=soma[1], soma_z=soma[2],
    )


INDEX_ROWS = [
    index_row("n1", "r-visp", "axon", "AA0001", "10.1101/abc", nodes=10, branches=2, ends=3, soma=(3, 4, 0)),
    index_row("n1", "r-cb", "dendrite", "AA0001", "10.1101/abc", nodes=5, soma=(3, 4, 0)),
    index_row("n2", "r-ctx", "axon", "AA0002", "10.1101/xyz", nodes=4, paths=1, soma=(3, 4, 1)),
    index_row("n3", "r-cb", "axon", "AA0003", nodes=0, soma=(100, 100, 100)),
    index_row("n3", "r-grey", "dendrite", "AA0003", nodes=7, ends=1, soma=(100, 100, 100)),
    index_row("n4", None, "axon", "AA0004", collection="c2", nodes=12, soma=(0, 0, 0)),
]


@pytest.fixture
def region_rows():
    return [dict(row) for row in REGION_ROWS]


@pytest.fixture
def regions(region_rows):
    return [Region.from_dict(row) for row in region_rows]


@pytest.fixture
def compartments(regions):
    return CompartmentTree.from_regions(regions, root_structure_id=ROOT_STRUCTURE_ID)


@pytest.fixture
def index_rows():
    return [dict(row) for row in INDEX_ROWS]


@pytest.fixture
def store(region_rows, index_rows):
    return InMemoryStore(regions=region_rows, index=index_rows)


@pytest.fixture
def compiler(compartments):
    return PredicateCompiler(compartments)


@pytest.fixture
def orchestrator(store, compiler):
    return SearchOrchestrator(store, compiler, max_workers=1)
