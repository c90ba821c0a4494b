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
"""Command line interface to tracequery."""

import json
import logging

import click

from .atlases import CompartmentTree, Region
from .commons.logger import set_log_level
from .persistence import InMemoryStore
from .query import PredicateCompiler, SearchOrchestrator
from .volumes import SpatialVolumeClassifier


def _load_regions(path):
    with open(path, "r", encoding="utf-8") as fp:
        return [Region.from_dict(spec) for spec in json.load(fp)]


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Log debug messages.")
def tracequery(verbose):
    """ Command line interface to the tracing record search.
    """
    if verbose:
        set_log_level(logging.DEBUG)


@tracequery.command()
@click.argument("regions", type=click.Path(exists=True, dir_okay=False))
def tree(regions):
    """Render the region hierarchy of a JSON region file."""
    click.echo(CompartmentTree.from_regions(_load_regions(regions)).tree2str())


@tracequery.command()
@click.argument("x", type=float)
@click.argument("y", type=float)
@click.argument("z", type=float)
@click.option("--volume", required=True, type=click.Path(exists=True, dir_okay=False),
        help="Label volume (NRRD or NIfTI).")
@click.option("--regions", required=True, type=click.Path(exists=True, dir_okay=False),
        help="JSON region file.")
@click.option("--scale", default=None, type=float, help="Units per voxel.")
def classify(x, y, z, volume, regions, scale):
    """Print the region containing the coordinate X Y Z."""
    compartments = CompartmentTree.from_regions(_load_regions(regions))
    classifier = SpatialVolumeClassifier.from_file(
        volume, compartments.region_id_for_structure, voxel_scale=scale
    )
    region_id = classifier.classify(x, y, z)
    if region_id is None:
        click.echo("unclassifiable")
        return
    region = compartments.get(region_id)
    click.echo(f"{region.acronym}\t{region.name}\t{region.id}")


@tracequery.command()
@click.option("--regions", required=True, type=click.Path(exists=True, dir_okay=False),
        help="JSON region file.")
@click.option("--index", "index_path", required=True, type=click.Path(exists=True, dir_okay=False),
        help="Statistics index as CSV or JSON.")
@click.option("--records", default=None, type=click.Path(exists=True, dir_okay=False),
        help="JSON record file. Records are derived from the index if omitted.")
@click.option("--node-structures", default=None, type=click.Path(exists=True, dir_okay=False),
        help="JSON node structure file, rows with id and swc_value.")
@click.option("--atlas-id", default=None, help="Atlas the regions belong to.")
@click.option("--root-structure-id", default=None, type=int,
        help="Structure id of the whole brain region.")
@click.option("--timeout", default=None, type=float, help="Seconds before the search is aborted.")
@click.argument("context", type=click.File("r"), default="-")
def search(regions, index_path, records, node_structures, atlas_id, root_structure_id, timeout, context):
    """Run the search CONTEXT (JSON, '-' for stdin) and print the result page."""
    store = InMemoryStore.from_files(
        regions, index_path, records_path=records, node_structures_path=node_structures
    )
    compartments = CompartmentTree.load(store, atlas_id, root_structure_id)
    compiler = PredicateCompiler(compartments, store.load_node_structures())
    orchestrator = SearchOrchestrator(store, compiler)
    text = context.read().strip()
    page = orchestrator.search(json.loads(text) if text else None, timeout=timeout)
    click.echo(json.dumps(page.to_dict(), indent=2, default=str))
    if page.failed:
        raise SystemExit(1)


def main():  # pragma: no cover
    tracequery()


if __name__ == "__main__":  # pragma: no cover
    main()
