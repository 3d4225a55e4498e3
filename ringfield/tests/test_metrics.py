"""Tests validating region metrics export workflow."""
from __future__ import annotations

import json
import math

from ringfield.src.generation.config import WorldSeeds
from ringfield.src.generation.metrics import RegionMetrics, collect_region_metrics, export_region_metrics
from ringfield.src.generation.orchestrator import DistributionOrchestrator
from ringfield.src.terrain.sampler import flat_terrain
from ringfield.src.world.regions import RegionId


# //1.- Metrics collection should summarize generated regions and export them.
def test_collect_region_metrics_and_export(tmp_path) -> None:
    orchestrator = DistributionOrchestrator(WorldSeeds(world_seed=12), height_fn=flat_terrain(1.0))
    regions = [RegionId(1, 3), RegionId(2, 0)]
    metrics = []
    for region in regions:
        orchestrator.generate(region)
        metric = collect_region_metrics(orchestrator.result(region))
        metrics.append(metric)
        result = orchestrator.result(region)
        assert metric.region_key == region.key
        assert metric.base_count == len(result.base_placements)
        assert metric.total_count == len(result.placements)
        assert sum(metric.size_counts.values()) == metric.base_count
        assert sum(metric.zone_categories.values()) == len(result.zones)
        assert metric.min_spacing >= 2.0
        assert metric.min_corridor_clearance >= orchestrator.settings.corridors.clearance

    output_path = tmp_path / "metrics.json"
    export_region_metrics(metrics, filepath=str(output_path))

    with output_path.open("r", encoding="utf-8") as handle:
        payload = json.load(handle)
    assert [entry["region"] for entry in payload["regions"]] == ["r1_q3", "r2_q0"]
    assert payload["regions"][0]["base_count"] == metrics[0].base_count
    assert set(payload["regions"][0]["size_counts"]) == {"tiny", "small", "medium", "large", "massive"}


def test_unbounded_distances_export_as_null(tmp_path) -> None:
    sparse = RegionMetrics(
        region_key="r0_q0",
        base_count=1,
        total_count=1,
        size_counts={"tiny": 1},
        landmark_count=0,
        corridor_marker_count=0,
        gateway_count=0,
        zone_categories={},
        forced_entry_count=0,
        corridor_count=0,
        min_spacing=math.inf,
        min_corridor_clearance=math.inf,
    )
    output_path = tmp_path / "sparse.json"
    export_region_metrics([sparse], filepath=str(output_path))
    entry = json.loads(output_path.read_text(encoding="utf-8"))["regions"][0]
    assert entry["min_spacing"] is None
    assert entry["min_corridor_clearance"] is None
    assert entry["base_count"] == 1
