"""Small demonstration harness for the ringfield distribution engine."""
from __future__ import annotations

import argparse
import logging
from typing import List, Sequence

from .src.generation.config import load_world_seeds
from .src.generation.metrics import collect_region_metrics, export_region_metrics
from .src.generation.orchestrator import DistributionOrchestrator
from .src.generation.settings import load_distribution_settings


def create_parser() -> argparse.ArgumentParser:
    # //1.- Construct the parser shared across tests and manual runs.
    parser = argparse.ArgumentParser(description="Generate ringfield regions around a player position")
    parser.add_argument("--seed", type=int, default=None, help="World seed (default: RINGFIELD_WORLD_SEED or 0)")
    parser.add_argument("--x", type=float, default=25.0, help="Player x coordinate")
    parser.add_argument("--z", type=float, default=25.0, help="Player z coordinate")
    parser.add_argument("--render-distance", type=float, default=120.0, help="Radius for active regions")
    parser.add_argument("--workers", type=int, default=1, help="Worker threads for pending regions")
    parser.add_argument("--config-dir", default=None, help="Directory holding the JSON settings files")
    parser.add_argument("--metrics", default=None, help="Optional path for a JSON metrics export")
    return parser


def run(args: Sequence[str] | None = None) -> List[str]:
    # //2.- Generate every active region and summarize each one.
    parsed = create_parser().parse_args(args)
    seeds = load_world_seeds({"world_seed": parsed.seed} if parsed.seed is not None else None)
    orchestrator = DistributionOrchestrator(seeds, load_distribution_settings(parsed.config_dir))
    generated = orchestrator.generate_pending((parsed.x, 0.0, parsed.z), parsed.render_distance, parsed.workers)
    lines: List[str] = []
    metrics = []
    for region in sorted(generated):
        result = orchestrator.result(region)
        if result is None:
            continue
        metric = collect_region_metrics(result)
        metrics.append(metric)
        lines.append(
            f"{metric.region_key}: {metric.base_count} features, {len(result.zones)} zones, "
            f"{metric.corridor_count} corridors, {metric.total_count} placements"
        )
    if parsed.metrics:
        export_region_metrics(metrics, filepath=parsed.metrics)
    return lines


def main() -> int:
    # //3.- Enable a default logging configuration for console runs.
    logging.basicConfig(level=logging.INFO, format="[%(asctime)s] %(levelname)s %(message)s")
    for line in run():
        print(line)
    return 0


if __name__ == "__main__":  # pragma: no cover - exercised by manual runs
    raise SystemExit(main())
