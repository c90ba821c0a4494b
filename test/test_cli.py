import json

import nrrd
import numpy as np
import pandas as pd
import pytest
from click.testing import CliRunner

from tracequery import QUIET
from tracequery.cli import tracequery
from tracequery.query.operators import EQUALS


@pytest.fixture
def files(tmp_path, region_rows, index_rows):
    regions = tmp_path / "regions.json"
    regions.write_text(json.dumps(region_rows))
    index = tmp_path / "index.csv"
    pd.DataFrame(index_rows).to_csv(index, index=False)
    labels = np.zeros((5, 5, 5), dtype=np.int32)
    labels[1, 1, 1] = 385
    volume = tmp_path / "labels.nrrd"
    nrrd.write(str(volume), labels)
    return dict(regions=str(regions), index=str(index), volume=str(volume))


def test_tree(files):
    result = CliRunner().invoke(tracequery, ["tree", files["regions"]])
    assert result.exit_code == 0, result.output
    assert "VISp" in result.output
    assert result.output.splitlines()[0].strip() == "root"


@pytest.mark.parametrize("point, expected", [
    (("10", "10", "10"), "VISp\tPrimary visual area\tr-visp"),
    (("0", "0", "0"), "unclassifiable"),
    (("100", "0", "0"), "unclassifiable"),
])
def test_classify(files, point, expected):
    result = CliRunner().invoke(
        tracequery,
        ["classify", *point, "--volume", files["volume"], "--regions", files["regions"]],
    )
    assert result.exit_code == 0, result.output
    assert result.output.strip() == expected


def test_classify_with_scale(files):
    result = CliRunner().invoke(
        tracequery,
        ["classify", "1", "1", "1", "--volume", files["volume"], "--regions", files["regions"],
         "--scale", "1"],
    )
    assert result.output.strip() == "VISp\tPrimary visual area\tr-visp"


def run_search(files, context, *args):
    # the compartment progress bar writes to stderr
    with QUIET:
        return CliRunner().invoke(
            tracequery,
            ["search", "--regions", files["regions"], "--index", files["index"], *args],
            input=context,
        )


def test_search(files):
    context = json.dumps({"token": "t", "predicates": [{"regionIds": ["r-ctx"]}]})
    result = run_search(files, context, "--root-structure-id", "997")
    assert result.exit_code == 0, result.output
    page = json.loads(result.output)
    assert page["token"] == "t"
    assert page["totalCount"] == 4
    assert [r["label"] for r in page["records"]] == ["AA0002", "AA0001"]
    assert page["error"] is None


def test_search_empty_context(files):
    result = run_search(files, "", "--root-structure-id", "997")
    assert result.exit_code == 0, result.output
    assert len(json.loads(result.output)["records"]) == 4


def test_search_failure_exits_nonzero(files):
    result = run_search(files, json.dumps([{"kind": 99}]))
    assert result.exit_code == 1
    assert json.loads(result.output)["error"]


def test_search_with_node_structures(files, tmp_path):
    node_structures = tmp_path / "node_structures.json"
    node_structures.write_text(json.dumps([{"id": "ns-end", "swc_value": 6}]))
    context = json.dumps([{"nodeStructureIds": ["ns-end"], "operatorId": EQUALS.id, "amount": 3}])
    result = run_search(files, context, "--node-structures", str(node_structures))
    assert result.exit_code == 0, result.output
    assert [r["label"] for r in json.loads(result.output)["records"]] == ["AA0001"]


def test_search_error_page_keeps_token(files):
    result = run_search(files, json.dumps({"token": "t", "predicates": [{"kind": 99}]}))
    assert result.exit_code == 1
    assert json.loads(result.output)["token"] == "t"
