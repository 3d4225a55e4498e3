"""Tests for the command line demonstration harness."""
from __future__ import annotations

import json

from ringfield import sandbox_demo


def test_demo_summarizes_active_regions(tmp_path) -> None:
    metrics_path = tmp_path / "demo.json"
    lines = sandbox_demo.run(["--seed", "5", "--render-distance", "60", "--metrics", str(metrics_path)])
    assert lines
    assert lines[0].startswith("r0_q")
    with metrics_path.open("r", encoding="utf-8") as handle:
        payload = json.load(handle)
    assert len(payload["regions"]) == len(lines)
