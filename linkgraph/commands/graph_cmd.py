"""Graph commands - build, lay out and analyze a vault's link graph."""

from __future__ import annotations

import html
import json
from collections import Counter
from pathlib import Path
from typing import IO

from rich.console import Console
from rich.table import Table

from ..config import EngineConfig, load_config
from ..engine.protocol import Response
from ..engine.worker import EngineClient, EngineWorker
from ..errors import EngineError
from ..graph.analysis import isolated_nodes, shortest_path
from ..graph.builder import build_graph
from ..graph.layout import LayoutSettings, seed_positions
from ..models import GraphModel, Node
from ..vault.loader import load_documents


def _load_graph(vault_path: Path, config: EngineConfig) -> GraphModel:
    documents = load_documents(vault_path)
    return build_graph(documents, colors=config.colors)


def _emit(text: str, out: Path | None, console: Console, label: str) -> None:
    if out:
        out.write_text(text, encoding="utf-8")
        console.print(f"Wrote {label} to {out}", style="green")
    else:
        print(text, end="" if text.endswith("\n") else "\n")


def run_graph(
    vault_path: Path,
    *,
    config: EngineConfig | None = None,
    fmt: str = "md",
    out: Path | None = None,
    top: int = 25,
) -> int:
    """Output a summary of the vault graph: sizes, clusters and best-connected notes."""
    console = Console(stderr=True)
    config = config or load_config(vault_path)

    model = _load_graph(vault_path, config)
    payload = _summarize_graph(model, top=top)

    if fmt == "rich":
        _print_rich(payload, console=Console())
        return 0

    if fmt == "json":
        text = json.dumps(payload, indent=2, sort_keys=True) + "\n"
    else:
        text = _summary_to_markdown(payload)

    _emit(text, out, console, "graph summary")
    return 0


def run_layout(
    vault_path: Path,
    *,
    config: EngineConfig | None = None,
    fmt: str = "json",
    out: Path | None = None,
    iterations: int | None = None,
    width: float | None = None,
    height: float | None = None,
    seed: int | None = None,
) -> int:
    """Compute a force-directed layout and write it as JSON or SVG."""
    console = Console(stderr=True)
    config = config or load_config(vault_path)
    defaults = config.layout

    try:
        settings = LayoutSettings(
            width=width if width is not None else defaults.width,
            height=height if height is not None else defaults.height,
            iterations=iterations if iterations is not None else defaults.iterations,
            damping=defaults.damping,
        )
    except EngineError as e:
        console.print(f"Invalid layout settings: {e.message}", style="red")
        return 1

    model = _load_graph(vault_path, config)
    start = seed_positions(
        model.nodes,
        settings.width,
        settings.height,
        seed=seed if seed is not None else defaults.seed,
    )

    console.print(
        f"Computing layout for {len(model.nodes)} nodes ({settings.iterations} iterations)...",
        style="dim",
    )
    try:
        with EngineClient() as client:
            positioned = client.calculate_layout(start, model.edges, settings)
    except EngineError as e:
        console.print(f"Layout failed: {e.message}", style="red")
        return 1

    laid_out = GraphModel(nodes=positioned, edges=model.edges)
    if fmt == "svg":
        text = _to_svg(laid_out, title=f"Link graph: {vault_path.name}")
    else:
        data = laid_out.to_dict()
        data["settings"] = settings.to_dict()
        text = json.dumps(data, indent=2, allow_nan=False) + "\n"

    _emit(text, out, console, "layout")
    return 0


def run_analyze(
    vault_path: Path,
    *,
    config: EngineConfig | None = None,
    fmt: str = "md",
    out: Path | None = None,
    top: int = 25,
) -> int:
    """Report network metrics for the vault graph."""
    console = Console(stderr=True)
    config = config or load_config(vault_path)
    model = _load_graph(vault_path, config)

    try:
        with EngineClient() as client:
            analysis = client.analyze_network(model.nodes, model.edges)
    except EngineError as e:
        console.print(f"Analysis failed: {e.message}", style="red")
        return 1

    payload = {
        "title": "Network analysis",
        "vault": str(vault_path),
        **analysis.to_dict(),
        "isolatedNodes": isolated_nodes(model.nodes, model.edges),
    }

    if fmt == "json":
        text = json.dumps(payload, indent=2, sort_keys=True) + "\n"
    else:
        text = _analysis_to_markdown(payload, names={n.id: n.name for n in model.nodes}, top=top)

    _emit(text, out, console, "network analysis")
    return 0


def run_communities(
    vault_path: Path,
    *,
    config: EngineConfig | None = None,
    fmt: str = "md",
    out: Path | None = None,
) -> int:
    """Detect communities in the vault graph and list their members."""
    console = Console(stderr=True)
    config = config or load_config(vault_path)
    model = _load_graph(vault_path, config)

    try:
        with EngineClient() as client:
            result = client.find_communities(model.nodes, model.edges)
    except EngineError as e:
        console.print(f"Community detection failed: {e.message}", style="red")
        return 1

    names = {n.id: n.name for n in model.nodes}
    clusters = {n.id: n.cluster for n in model.nodes}
    rows = []
    for group in sorted(result.groups, key=lambda g: (-g.size, g.id)):
        cluster_counts = Counter(clusters[m] for m in group.node_ids)
        rows.append(
            {
                "id": group.id,
                "size": group.size,
                "members": [names[m] for m in group.node_ids],
                "clusters": dict(cluster_counts),
            }
        )

    payload = {
        "title": "Communities",
        "vault": str(vault_path),
        "node_count": len(model.nodes),
        "edge_count": len(model.edges),
        "community_count": len(result.groups),
        "communities": rows,
        "community_by_node_id": result.community_by_node_id,
    }

    if fmt == "json":
        text = json.dumps(payload, indent=2, sort_keys=True) + "\n"
    else:
        text = _communities_to_markdown(payload)

    _emit(text, out, console, "communities report")
    return 0


def run_centrality(
    vault_path: Path,
    *,
    config: EngineConfig | None = None,
    fmt: str = "md",
    out: Path | None = None,
    top: int = 25,
) -> int:
    """Rank notes by centrality."""
    console = Console(stderr=True)
    config = config or load_config(vault_path)
    model = _load_graph(vault_path, config)

    try:
        with EngineClient() as client:
            centrality = client.calculate_centrality(model.nodes, model.edges)
    except EngineError as e:
        console.print(f"Centrality failed: {e.message}", style="red")
        return 1

    names = {n.id: n.name for n in model.nodes}
    rows = [{"id": node_id, "name": names.get(node_id, node_id), "centrality": value} for node_id, value in centrality.items()]
    rows.sort(key=lambda r: (-r["centrality"], r["name"]))
    rows = rows[: max(0, top)]

    if fmt == "json":
        text = json.dumps({"title": "Centrality", "nodes": rows}, indent=2) + "\n"
    else:
        lines = ["## Centrality", "", "| Note | Centrality |", "|---|---:|"]
        for r in rows:
            lines.append(f"| `{r['name']}` | {r['centrality']} |")
        text = "\n".join(lines) + "\n"

    _emit(text, out, console, "centrality report")
    return 0


def run_path(vault_path: Path, source: str, target: str, *, config: EngineConfig | None = None) -> int:
    """Print the shortest link path between two notes (matched by name or id)."""
    console = Console(stderr=True)
    config = config or load_config(vault_path)
    model = _load_graph(vault_path, config)

    start = _find_node(model, source)
    end = _find_node(model, target)
    missing = [name for name, node in ((source, start), (target, end)) if node is None]
    if missing:
        console.print(f"Unknown note(s): {', '.join(missing)}", style="red")
        return 1

    path = shortest_path(start.id, end.id, model.edges)
    if not path:
        console.print(f"No path between {start.name} and {end.name}", style="yellow")
        return 1

    names = {n.id: n.name for n in model.nodes}
    print(" -> ".join(names[p] for p in path))
    console.print(f"{len(path) - 1} hop(s)", style="dim")
    return 0


def run_serve(stdin: IO[str], stdout: IO[str]) -> int:
    """Answer JSON-lines engine requests from ``stdin`` on ``stdout``.

    Each input line is one request; each output line is its response, in
    input order. Lines that are not JSON get an error response with no id.
    """
    with EngineWorker() as worker:
        for line in stdin:
            line = line.strip()
            if not line:
                continue
            try:
                message = json.loads(line)
            except json.JSONDecodeError as e:
                response = Response.failure(None, f"Invalid JSON: {e.msg}")
            else:
                worker.post(message)
                response = worker.outbox.get()
            try:
                text = json.dumps(response.to_dict(), allow_nan=False)
            except ValueError as e:
                text = json.dumps(Response.failure(None, f"Unserializable response: {e}").to_dict())
            stdout.write(text + "\n")
            stdout.flush()
    return 0


def _find_node(model: GraphModel, query: str) -> Node | None:
    key = query.strip().lower()
    for node in model.nodes:
        if node.id.lower() == key or node.name.lower() == key:
            return node
    return None


def _summarize_graph(model: GraphModel, *, top: int) -> dict:
    kinds = Counter(e.kind for e in model.edges)
    clusters = Counter(n.cluster for n in model.nodes if n.kind == "document")

    rows = [
        {
            "name": n.name,
            "cluster": n.cluster,
            "connections": n.connection_count,
            "centrality": round(n.centrality, 3),
        }
        for n in model.nodes
        if n.kind == "document"
    ]
    rows.sort(key=lambda r: (-r["centrality"], -r["connections"], r["name"]))

    return {
        "title": "Vault link graph",
        "node_count": len(model.nodes),
        "document_count": sum(1 for n in model.nodes if n.kind == "document"),
        "container_count": sum(1 for n in model.nodes if n.kind == "container"),
        "edge_count": len(model.edges),
        "reference_edges": kinds.get("reference", 0),
        "containment_edges": kinds.get("containment", 0),
        "bidirectional_edges": sum(1 for e in model.edges if e.bidirectional),
        "clusters": dict(sorted(clusters.items(), key=lambda kv: (-kv[1], kv[0]))),
        "top_nodes": rows[: max(0, top)],
    }


def _summary_to_markdown(payload: dict) -> str:
    lines: list[str] = []
    lines.append(f"## {payload['title']}")
    lines.append("")
    lines.append(f"- Nodes: {payload['node_count']} ({payload['document_count']} notes, {payload['container_count']} folders)")
    lines.append(f"- Edges: {payload['edge_count']} ({payload['reference_edges']} links, {payload['containment_edges']} folder)")
    lines.append(f"- Bidirectional links: {payload['bidirectional_edges']}")
    lines.append("")

    lines.append("### Clusters")
    lines.append("")
    lines.append("| Cluster | Notes |")
    lines.append("|---|---:|")
    for cluster, count in payload["clusters"].items():
        lines.append(f"| `{cluster}` | {count} |")
    lines.append("")

    lines.append("### Top notes")
    lines.append("")
    lines.append("| Note | Cluster | Links | Centrality |")
    lines.append("|---|---|---:|---:|")
    for r in payload["top_nodes"]:
        lines.append(f"| `{r['name']}` | `{r['cluster']}` | {r['connections']} | {r['centrality']} |")
    lines.append("")

    return "\n".join(lines).rstrip() + "\n"


def _print_rich(payload: dict, *, console: Console) -> None:
    console.print(f"[bold]{payload['title']}[/bold]")
    console.print(f"Nodes: {payload['node_count']}  Edges: {payload['edge_count']}")
    console.print()

    t = Table(title="Top notes", show_header=True, header_style="bold")
    t.add_column("Note", style="cyan", no_wrap=True)
    t.add_column("Cluster")
    t.add_column("Links", justify="right")
    t.add_column("Centrality", justify="right")
    for r in payload["top_nodes"]:
        t.add_row(str(r["name"]), str(r["cluster"]), str(r["connections"]), f"{r['centrality']:.3f}")
    console.print(t)


def _analysis_to_markdown(payload: dict, *, names: dict[str, str], top: int) -> str:
    lines: list[str] = []
    lines.append(f"## {payload['title']}")
    lines.append("")
    lines.append("| Metric | Value |")
    lines.append("|---|---:|")
    lines.append(f"| Nodes | {payload['nodeCount']} |")
    lines.append(f"| Edges | {payload['edgeCount']} |")
    lines.append(f"| Density | {payload['density']} |")
    lines.append(f"| Average degree | {payload['avgDegree']} |")
    lines.append(f"| Average clustering coefficient | {payload['avgClusteringCoefficient']} |")
    lines.append(f"| Isolated notes | {len(payload['isolatedNodes'])} |")
    lines.append("")

    degrees = sorted(payload["degreeByNodeId"].items(), key=lambda kv: (-kv[1], names.get(kv[0], kv[0])))
    lines.append("### Degree")
    lines.append("")
    lines.append("| Note | Degree |")
    lines.append("|---|---:|")
    for node_id, degree in degrees[: max(0, top)]:
        lines.append(f"| `{names.get(node_id, node_id)}` | {degree} |")
    lines.append("")

    return "\n".join(lines).rstrip() + "\n"


def _communities_to_markdown(payload: dict) -> str:
    lines: list[str] = []
    lines.append(f"# {payload['title']}")
    lines.append("")
    lines.append(f"- Vault: `{payload['vault']}`")
    lines.append(f"- Nodes: {payload['node_count']}")
    lines.append(f"- Edges: {payload['edge_count']}")
    lines.append(f"- Communities: {payload['community_count']}")
    lines.append("")

    lines.append("| Community | Size | Top clusters | Members |")
    lines.append("|---|---:|---|---|")
    for row in payload["communities"]:
        top_clusters = sorted(row["clusters"].items(), key=lambda kv: (-kv[1], kv[0]))[:3]
        top_clusters_s = ", ".join(f"{k}:{v}" for k, v in top_clusters)
        members = ", ".join(f"`{m}`" for m in row["members"][:10])
        if row["size"] > 10:
            members += f" (+{row['size'] - 10} more)"
        lines.append(f"| `c{row['id']}` | {row['size']} | {top_clusters_s} | {members} |")
    lines.append("")

    return "\n".join(lines)


def _to_svg(model: GraphModel, *, title: str) -> str:
    """Render positioned nodes and edges as a standalone SVG."""
    bg = "#0f1115"
    edge_color = "#3a4154"
    containment_color = "#2a6f5b"
    text_color = "#e6e6e6"
    border = "#3a4154"

    margin = 60.0
    positioned = [n for n in model.nodes if n.position is not None]
    if positioned:
        min_x = min(n.position.x for n in positioned)
        max_x = max(n.position.x for n in positioned)
        min_y = min(n.position.y for n in positioned)
        max_y = max(n.position.y for n in positioned)
    else:
        min_x = max_x = min_y = max_y = 0.0

    width = max(200.0, max_x - min_x) + margin * 2
    height = max(200.0, max_y - min_y) + margin * 2

    positions: dict[str, tuple[float, float]] = {
        n.id: (n.position.x - min_x + margin, n.position.y - min_y + margin) for n in positioned
    }

    def esc(s: str) -> str:
        return html.escape(s, quote=True)

    parts: list[str] = []
    parts.append(
        f'<svg xmlns="http://www.w3.org/2000/svg" width="{width:.0f}" height="{height:.0f}" '
        f'viewBox="0 0 {width:.0f} {height:.0f}" style="background:{bg}">'
    )
    parts.append(
        f'<text x="{margin / 2:.0f}" y="{margin / 2:.0f}" fill="{text_color}" font-family="Helvetica" font-size="16">{esc(title)}</text>'
    )

    # Edges first (under nodes)
    parts.append('<g id="edges" stroke-linecap="round" fill="none">')
    for edge in model.edges:
        if edge.source not in positions or edge.target not in positions:
            continue
        x1, y1 = positions[edge.source]
        x2, y2 = positions[edge.target]
        color = containment_color if edge.kind == "containment" else edge_color
        dash = "" if edge.bidirectional or edge.kind == "containment" else ' stroke-dasharray="5,5"'
        parts.append(
            f'<line x1="{x1:.1f}" y1="{y1:.1f}" x2="{x2:.1f}" y2="{y2:.1f}" stroke="{color}" '
            f'stroke-width="{edge.strength * 3:.1f}" opacity="0.8"{dash}/>'
        )
    parts.append("</g>")

    # Nodes
    parts.append('<g id="nodes">')
    for node in positioned:
        x, y = positions[node.id]
        r = node.weight / 2
        if node.kind == "container":
            parts.append(
                f'<rect x="{(x - r):.1f}" y="{(y - r):.1f}" width="{2 * r:.1f}" height="{2 * r:.1f}" rx="4" '
                f'fill="{bg}" stroke="{node.color}" stroke-width="1.5"/>'
            )
        else:
            parts.append(f'<circle cx="{x:.1f}" cy="{y:.1f}" r="{r:.1f}" fill="{node.color}" stroke="{border}" stroke-width="1.0"/>')
        parts.append(
            f'<text x="{x:.1f}" y="{(y + r + 14):.1f}" fill="{text_color}" font-family="Helvetica" '
            f'font-size="11" text-anchor="middle">{esc(node.name)}</text>'
        )
    parts.append("</g>")
    parts.append("</svg>")
    return "\n".join(parts) + "\n"
