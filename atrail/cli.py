#!/usr/bin/env python
"""
A-trail pipeline

This script converts 3D meshes into planar graphs and rotation systems,
makes them Eulerian and searches for an A-trail: a closed trail through every
edge whose transitions never cross at any vertex. Each stage is available as
its own subcommand; ``run`` chains them from a PLY mesh to the trail files.
"""

import argparse
import logging
import os
import time
import traceback

import networkx as nx

from atrail.core import (
    embed_planar,
    make_embedding_eulerian,
    mesh_to_embedding,
    mesh_to_graph,
    planar_vcode,
    postman_tour,
)
from atrail.formats import (
    default_output,
    read_dimacs,
    read_edge_code,
    read_ply,
    read_trail,
    write_dimacs,
    write_edge_code,
    write_trail,
)
from atrail.search import InvalidInput, SearchAborted, SearchConfig, SearchContext
from atrail.search.config import VERTEX_ORDERS
from atrail.utils import load_fixed_transitions, save_json
from atrail.viz import plot_trail

# Exit codes of the search and run subcommands
EXIT_FOUND = 0
EXIT_NOT_FOUND = 1
EXIT_WRITE_ERROR = 2
EXIT_INVALID_INPUT = 3
EXIT_ABORTED = 4


def report_graph(G, name="graph"):
    """
    Print whether a graph is connected and planar.

    Returns
    -------
    bool
        True if the graph is both connected and planar.
    """
    connected = G.number_of_nodes() > 0 and nx.is_connected(nx.Graph(G))
    if connected:
        print(f"The {name} is connected.")
    else:
        print(f"Warning: The {name} is not connected!")
    planar, _ = nx.check_planarity(nx.Graph(G))
    if planar:
        print(f"The {name} is planar.")
    else:
        print(f"Warning: The {name} is not planar!")
    return connected and planar


def search_config_from_args(args):
    """Build a SearchConfig from ``--config`` and the command line overrides."""
    if getattr(args, "config", None):
        config = SearchConfig.from_json_file(args.config)
    else:
        config = SearchConfig()
    return config.updated(
        order=args.order,
        max_nodes=args.max_nodes,
        time_limit=args.time_limit,
        verbose=False if args.quiet else None,
    )


def find_trail(edge_code, edge_trail_file, node_trail_file, args):
    """
    Search an edge code for an A-trail and write the trail files.

    Parameters
    ----------
    edge_code : list of list of int
        Rotation system to search.
    edge_trail_file : str
        Output path for the edge sequence.
    node_trail_file : str
        Output path for the vertex sequence.
    args : argparse.Namespace
        Parsed search options.

    Returns
    -------
    int
        Exit code.
    """
    try:
        config = search_config_from_args(args)
        fixed = load_fixed_transitions(args.fixed) if args.fixed else None
        context = SearchContext(edge_code, config=config, fixed=fixed)
    except InvalidInput as e:
        print(f"Error: Invalid edge code: {e}")
        return EXIT_INVALID_INPUT
    except (OSError, TypeError, ValueError) as e:
        print(f"Error: Invalid search options: {e}")
        return EXIT_INVALID_INPUT

    try:
        trail = context.run()
    except SearchAborted as e:
        print(f"Error: {e} after {e.nodes} candidates")
        if args.report:
            save_json(args.report, context.summary(), indent=2)
        return EXIT_ABORTED

    if args.report:
        save_json(args.report, context.summary(), indent=2)
        print(f"Wrote search report to {args.report}")

    if trail is None:
        print("Unable to find an A-trail for the given edge code")
        return EXIT_NOT_FOUND

    print(
        f"Found an A-trail for the graph ({len(trail)} edges, "
        f"{context.nodes} candidates, {context.elapsed:.2f} seconds)"
    )
    try:
        write_trail(edge_trail_file, trail.edges)
        print(f"Wrote the trail as edge list to file {edge_trail_file}")
        write_trail(node_trail_file, trail.vertices)
        print(f"Wrote the trail as node list to file {node_trail_file}")
    except OSError as e:
        print(f"Error: Unable to write trail files: {e}")
        return EXIT_WRITE_ERROR
    return EXIT_FOUND


def run_ply_to_dimacs(args):
    """Handles the 'ply-to-dimacs' subcommand."""
    print("ply-to-dimacs: converts a PLY mesh to a dimacs graph.")
    output = args.output or default_output(args.ply, ".dimacs")
    try:
        vertices, faces = read_ply(args.ply)
    except (OSError, ValueError) as e:
        print(f"Error: {e}")
        return 1
    print(f"Done reading the PLY file {args.ply}")

    G = mesh_to_graph(len(vertices), faces)
    report_graph(G, "graph in the PLY")
    write_dimacs(output, G)
    print(f"Successfully converted the PLY {args.ply} to dimacs {output}.")
    return 0


def run_ply_to_embedding(args):
    """Handles the 'ply-to-embedding' subcommand."""
    print("ply-to-embedding: converts a PLY mesh to a vertex rotation (vcode).")
    output = args.output or default_output(args.ply, ".vcode")
    try:
        vertices, faces = read_ply(args.ply)
        print(f"Fetching the embedding from the PLY file {args.ply}")
        vcode = mesh_to_embedding(len(vertices), faces)
    except (OSError, ValueError) as e:
        print(f"Error: {e}")
        return 1
    write_edge_code(output, vcode, header=True)
    print(f"Successfully wrote the embedding to {output}.")
    return 0


def run_embed_planar(args):
    """Handles the 'embed-planar' subcommand."""
    print("embed-planar: outputs a planar embedding of a graph as an edge code.")
    output = args.output or default_output(args.dimacs, ".ecode")
    try:
        G = read_dimacs(args.dimacs)
        ecode = embed_planar(G)
    except (OSError, ValueError) as e:
        print(f"Error: {e}")
        return 1
    print("The graph is planar.")
    write_edge_code(output, ecode)
    print(f"Wrote the embedding to {output}")
    return 0


def run_postman_tour(args):
    """Handles the 'postman-tour' subcommand."""
    print("postman-tour: makes a graph Eulerian by duplicating edges.")
    try:
        G = read_dimacs(args.dimacs)
        multigraph = postman_tour(G, verbose=not args.quiet)
    except (OSError, ValueError) as e:
        print(f"Error: {e}")
        return 1
    write_dimacs(args.output, multigraph)
    print(
        f"Wrote an Eulerian multigraph with {multigraph.number_of_edges()} edges "
        f"to {args.output}"
    )
    return 0


def run_make_eulerian(args):
    """Handles the 'make-eulerian' subcommand."""
    print("make-eulerian: converts a vertex rotation (vcode) to an edge code.")
    output = args.output or default_output(args.vcode, ".ecode")
    try:
        vcode = read_edge_code(args.vcode)
        print(f"Successfully read vcode from {args.vcode}.")
        G = read_dimacs(args.dimacs)
        print(f"Successfully read multigraph from {args.dimacs}.")
        ecode = make_embedding_eulerian(vcode, G)
    except (OSError, ValueError) as e:
        print(f"Error: {e}")
        return 1
    write_edge_code(output, ecode)
    print(f"Wrote the embedding as an edge code to {output}")
    return 0


def run_search(args):
    """Handles the 'search' subcommand."""
    print("search: searches for an A-trail for a given edge code.")
    edge_trail_file = args.edge_trail or default_output(args.ecode, ".trail")
    node_trail_file = args.node_trail or default_output(args.ecode, ".ntrail")
    try:
        edge_code = read_edge_code(args.ecode)
    except (OSError, ValueError) as e:
        print(f"Error: Invalid edge code: {e}")
        return EXIT_INVALID_INPUT
    print(f"Read graph from the edge code {args.ecode}")
    return find_trail(edge_code, edge_trail_file, node_trail_file, args)


def run_pipeline(args):
    """Handles the 'run' subcommand: PLY mesh to A-trail."""
    print("Starting A-trail Run Pipeline...")
    start_time = time.time()

    output_dir = args.output_dir or os.path.dirname(os.path.abspath(args.ply))
    if not os.path.isdir(output_dir):
        print(f"Output directory {output_dir} does not exist. Creating it...")
        os.makedirs(output_dir, exist_ok=True)
    base = os.path.join(output_dir, os.path.splitext(os.path.basename(args.ply))[0])
    files = {
        "dimacs": base + ".dimacs",
        "vcode": base + ".vcode",
        "postman": base + ".postman.dimacs",
        "ecode": base + ".ecode",
        "trail": base + ".trail",
        "ntrail": base + ".ntrail",
    }

    if os.path.exists(files["trail"]) and not args.overwrite:
        print(
            f"Trail file {files['trail']} already exists, skipping the pipeline. "
            "Use --overwrite to force regeneration."
        )
        return 0

    try:
        # STEP 1: mesh graph and its rotation system
        vertices, faces = read_ply(args.ply)
        G = mesh_to_graph(len(vertices), faces)
        report_graph(G, "graph in the PLY")
        write_dimacs(files["dimacs"], G)
        print(f"Wrote the mesh graph to {files['dimacs']}")

        if args.planar_embedding:
            print("Computing a planar embedding of the mesh graph")
            vcode = planar_vcode(G)
        else:
            print("Reading the embedding off the mesh faces")
            vcode = mesh_to_embedding(len(vertices), faces)
        write_edge_code(files["vcode"], vcode, header=True)
        print(f"Wrote the embedding to {files['vcode']}")

        # STEP 2: Eulerization and the Eulerian edge code
        multigraph = postman_tour(G, verbose=not args.quiet)
        write_dimacs(files["postman"], multigraph)
        print(f"Wrote the Eulerian multigraph to {files['postman']}")
        ecode = make_embedding_eulerian(vcode, multigraph)
        write_edge_code(files["ecode"], ecode)
        print(f"Wrote the edge code to {files['ecode']}")
    except (OSError, ValueError) as e:
        print(f"Error: {e}")
        return 1
    except Exception:
        print("Error while preparing the edge code:")
        traceback.print_exc()
        return 1

    # STEP 3: A-trail search
    status = find_trail(ecode, files["trail"], files["ntrail"], args)

    elapsed_time = time.time() - start_time
    print("\nSummary:")
    for key, path in files.items():
        state = path if os.path.exists(path) else "Not created"
        print(f"  {key}: {state}")
    print(f"Completed in {elapsed_time:.2f} seconds")
    return status


def run_plotting(args):
    """Handles the 'plot' subcommand to render a trail on its mesh."""
    print("Starting A-trail Plotting...")
    output = args.output or default_output(args.ntrail, ".png")
    try:
        vertices, faces = read_ply(args.ply)
        node_trail = read_trail(args.ntrail)
        result = plot_trail(
            vertices,
            node_trail,
            output,
            faces=faces if args.wireframe else None,
            overwrite=args.overwrite,
        )
    except (OSError, ValueError) as e:
        print(f"Failed to generate plot: {e}")
        return 1
    print(f"Successfully saved plot: {result}")
    return 0


def add_common_args(parser):
    """Add output location and overwrite options."""
    parser.add_argument(
        "--output-dir",
        help="Directory to save output files (default: next to the input file)",
    )
    parser.add_argument(
        "--overwrite", action="store_true", help="Overwrite existing files"
    )


def add_quiet_arg(parser):
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Hide progress bars and search progress messages",
    )


def add_search_args(parser):
    """Add the A-trail search options."""
    parser.add_argument(
        "--order",
        choices=list(VERTEX_ORDERS),
        default=None,
        help="Vertex processing order (default: bfs)",
    )
    parser.add_argument(
        "--max-nodes",
        type=int,
        default=None,
        help="Abort the search after this many candidate transition systems",
    )
    parser.add_argument(
        "--time-limit",
        type=float,
        default=None,
        help="Abort the search after this many seconds",
    )
    parser.add_argument(
        "--config",
        help="JSON file with search parameters; command line options take precedence",
    )
    parser.add_argument(
        "--fixed",
        help=(
            "JSON file pinning the transitions of some vertices, mapping a vertex "
            "to pairs of rotation positions, e.g. {\"0\": [[0, 3], [1, 2]]}"
        ),
    )
    parser.add_argument("--report", help="Write a JSON report of the search here")
    add_quiet_arg(parser)


def build_parser():
    """Build the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        description="atrail: mesh to planar graph to A-trail pipeline"
    )
    subparsers = parser.add_subparsers(
        dest="command", required=True, help="Subcommand to run"
    )

    # 'ply-to-dimacs' subcommand
    parser_dimacs = subparsers.add_parser(
        "ply-to-dimacs", help="Convert a PLY mesh to a dimacs graph"
    )
    parser_dimacs.add_argument("ply", help="Input ascii PLY file")
    parser_dimacs.add_argument(
        "-o", "--output", help="Output dimacs file (default: <ply>.dimacs)"
    )
    parser_dimacs.set_defaults(func=run_ply_to_dimacs)

    # 'ply-to-embedding' subcommand
    parser_vcode = subparsers.add_parser(
        "ply-to-embedding", help="Extract the vertex rotation (vcode) of a PLY mesh"
    )
    parser_vcode.add_argument("ply", help="Input ascii PLY file")
    parser_vcode.add_argument(
        "-o", "--output", help="Output vcode file (default: <ply>.vcode)"
    )
    parser_vcode.set_defaults(func=run_ply_to_embedding)

    # 'embed-planar' subcommand
    parser_embed = subparsers.add_parser(
        "embed-planar", help="Embed a dimacs graph in the plane as an edge code"
    )
    parser_embed.add_argument("dimacs", help="Input dimacs file")
    parser_embed.add_argument(
        "-o", "--output", help="Output edge code (default: <dimacs>.ecode)"
    )
    parser_embed.set_defaults(func=run_embed_planar)

    # 'postman-tour' subcommand
    parser_postman = subparsers.add_parser(
        "postman-tour", help="Make a dimacs graph Eulerian by duplicating edges"
    )
    parser_postman.add_argument("dimacs", help="Input dimacs file")
    parser_postman.add_argument("output", help="Output dimacs multigraph")
    add_quiet_arg(parser_postman)
    parser_postman.set_defaults(func=run_postman_tour)

    # 'make-eulerian' subcommand
    parser_eulerian = subparsers.add_parser(
        "make-eulerian",
        help="Combine a vcode and an Eulerian multigraph into an edge code",
    )
    parser_eulerian.add_argument("vcode", help="Input vertex rotation (vcode)")
    parser_eulerian.add_argument("dimacs", help="Input dimacs multigraph")
    parser_eulerian.add_argument(
        "-o", "--output", help="Output edge code (default: <vcode>.ecode)"
    )
    parser_eulerian.set_defaults(func=run_make_eulerian)

    # 'search' subcommand
    parser_search = subparsers.add_parser(
        "search", help="Search an edge code for an A-trail"
    )
    parser_search.add_argument("ecode", help="Input edge code")
    parser_search.add_argument(
        "edge_trail", nargs="?", help="Output edge trail (default: <ecode>.trail)"
    )
    parser_search.add_argument(
        "node_trail", nargs="?", help="Output node trail (default: <ecode>.ntrail)"
    )
    add_search_args(parser_search)
    parser_search.set_defaults(func=run_search)

    # 'run' subcommand
    parser_run = subparsers.add_parser(
        "run", help="Run the whole pipeline from a PLY mesh to an A-trail"
    )
    parser_run.add_argument("ply", help="Input ascii PLY file")
    add_common_args(parser_run)
    parser_run.add_argument(
        "--planar-embedding",
        action="store_true",
        help=(
            "Compute the rotation system with a planarity test instead of "
            "reading it off the mesh faces"
        ),
    )
    add_search_args(parser_run)
    parser_run.set_defaults(func=run_pipeline)

    # 'plot' subcommand
    parser_plot = subparsers.add_parser("plot", help="Plot a node trail on its mesh")
    parser_plot.add_argument("ply", help="PLY mesh the trail was computed from")
    parser_plot.add_argument("ntrail", help="Node trail file (.ntrail)")
    parser_plot.add_argument(
        "-o", "--output", help="Output PNG (default: <ntrail>.png)"
    )
    parser_plot.add_argument(
        "--wireframe", action="store_true", help="Draw the mesh faces underneath"
    )
    parser_plot.add_argument(
        "--overwrite", action="store_true", help="Overwrite an existing image"
    )
    parser_plot.set_defaults(func=run_plotting)

    return parser


def main(argv=None):
    """Main function to parse arguments and dispatch subcommands."""
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
    return args.func(args)


if __name__ == "__main__":
    exit(main())
