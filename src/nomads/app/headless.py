from __future__ import annotations

import argparse
import csv
import json
import logging
import math
from pathlib import Path
from typing import Optional

from ..sim.core.agent import Personality
from ..sim.core.config import SimulationConfig
from ..sim.core.world import World
from ..sim.types.metrics import TickMetrics

logger = logging.getLogger(__name__)

_BASIC_HEADER = [
    "tick",
    "population",
    "trails",
    "trails_created",
    "trails_removed",
    "avg_excitement",
    "highlighted",
    "tick_ms",
]

_DETAILED_HEADER = [
    "tick",
    "population",
    "trails",
    "trails_created",
    "trails_removed",
    "wandering",
    "pursuing",
    "evading",
    "holding",
    "avg_excitement",
    "highlighted",
    "tick_ms",
    "trails_per_agent",
    "avg_trail_opacity",
    "occupied_cells",
    "max_cell_occupancy",
    "max_excitement",
    "offensive",
    "defensive",
]


def _format_basic_row(metrics: TickMetrics, tick_ms: float) -> list[object]:
    return [
        metrics.tick,
        metrics.population,
        metrics.trails,
        metrics.trails_created,
        metrics.trails_removed,
        f"{metrics.average_excitement:.4f}",
        metrics.highlighted,
        f"{tick_ms:.3f}",
    ]


def _format_detailed_row(world: World, metrics: TickMetrics, tick_ms: float) -> list[object]:
    snapshot = world.snapshot(metrics.tick)
    agents = snapshot.agents
    trails = snapshot.trails
    population = metrics.population

    trails_per_agent = 0.0 if population <= 0 else metrics.trails / population
    avg_trail_opacity = 0.0 if not trails else sum(trail.opacity for trail in trails) / len(trails)
    cell_counts: dict[tuple[int, int], int] = {}
    max_excitement = 0.0
    offensive = 0
    for agent in agents:
        key = (agent.row, agent.column)
        cell_counts[key] = cell_counts.get(key, 0) + 1
        max_excitement = max(max_excitement, agent.excitement)
        if agent.personality == Personality.OFFENSIVE:
            offensive += 1
    max_cell_occupancy = max(cell_counts.values()) if cell_counts else 0

    return [
        metrics.tick,
        population,
        metrics.trails,
        metrics.trails_created,
        metrics.trails_removed,
        metrics.wandering,
        metrics.pursuing,
        metrics.evading,
        metrics.holding,
        f"{metrics.average_excitement:.4f}",
        metrics.highlighted,
        f"{tick_ms:.3f}",
        f"{trails_per_agent:.4f}",
        f"{avg_trail_opacity:.4f}",
        len(cell_counts),
        max_cell_occupancy,
        f"{max_excitement:.4f}",
        offensive,
        population - offensive,
    ]


def _percentile(sorted_values: list[float], percentile: float) -> float:
    if not sorted_values:
        return 0.0
    if len(sorted_values) == 1:
        return float(sorted_values[0])
    pos = (len(sorted_values) - 1) * percentile
    low = int(math.floor(pos))
    high = int(math.ceil(pos))
    if low == high:
        return float(sorted_values[low])
    weight = pos - low
    return float(sorted_values[low] + (sorted_values[high] - sorted_values[low]) * weight)


def _summary_stats(values: list[float]) -> dict[str, float]:
    if not values:
        return {"min": 0.0, "max": 0.0, "avg": 0.0, "p50": 0.0, "p90": 0.0, "p99": 0.0}
    sorted_values = sorted(values)
    return {
        "min": float(sorted_values[0]),
        "max": float(sorted_values[-1]),
        "avg": float(sum(values) / len(values)),
        "p50": _percentile(sorted_values, 0.50),
        "p90": _percentile(sorted_values, 0.90),
        "p99": _percentile(sorted_values, 0.99),
    }


def run_headless(
    steps: int,
    seed: Optional[int],
    log_path: Optional[Path],
    deterministic_log: bool = False,
    log_format: str = "detailed",
    summary_path: Optional[Path] = None,
    summary_window: int = 500,
    config: Optional[SimulationConfig] = None,
) -> World:
    config = config if config is not None else SimulationConfig()
    if seed is not None:
        config.seed = seed

    log_mode = log_format.lower().strip()
    if log_mode not in {"basic", "detailed"}:
        raise ValueError(f"Unknown log format: {log_format}")

    world = World(config)
    logger.info(
        "Running %d ticks on a %dx%d grid with %d nomads (seed=%d)",
        steps,
        config.rows,
        config.columns,
        config.initial_population,
        config.seed,
    )

    writer = None
    csv_file = None
    if log_path:
        csv_file = Path(log_path).open("w", newline="")
        writer = csv.writer(csv_file)
        writer.writerow(_DETAILED_HEADER if log_mode == "detailed" else _BASIC_HEADER)

    tick_ms_series: list[float] = []
    trail_series: list[float] = []
    excitement_series: list[float] = []
    pursuit_ticks = 0
    evasion_ticks = 0

    try:
        for tick in range(steps):
            metrics = world.step(tick)
            tick_ms = 0.0 if deterministic_log else metrics.tick_duration_ms

            if summary_path:
                tick_ms_series.append(tick_ms)
                trail_series.append(float(metrics.trails))
                excitement_series.append(metrics.average_excitement)
                pursuit_ticks += int(metrics.pursuing > 0)
                evasion_ticks += int(metrics.evading > 0)

            if writer:
                if log_mode == "detailed":
                    writer.writerow(_format_detailed_row(world, metrics, tick_ms))
                else:
                    writer.writerow(_format_basic_row(metrics, tick_ms))
    finally:
        if csv_file:
            csv_file.close()

    if summary_path:
        window = max(1, int(summary_window))
        tail_slice = slice(max(0, len(tick_ms_series) - window), len(tick_ms_series))
        summary = {
            "steps": steps,
            "seed": config.seed,
            "grid": {"rows": config.rows, "columns": config.columns},
            "population": config.initial_population,
            "log_format": log_mode,
            "deterministic_log": deterministic_log,
            "tick_ms": _summary_stats(tick_ms_series),
            "trails": _summary_stats(trail_series),
            "excitement": _summary_stats(excitement_series),
            "ticks_with_pursuit": pursuit_ticks,
            "ticks_with_evasion": evasion_ticks,
            "tail_window": {
                "window": window,
                "tick_ms": _summary_stats(tick_ms_series[tail_slice]),
                "trails": _summary_stats(trail_series[tail_slice]),
                "excitement": _summary_stats(excitement_series[tail_slice]),
            },
        }
        Path(summary_path).write_text(json.dumps(summary, indent=2))

    logger.info("Finished %d ticks with %d active trails", steps, len(world.trails))
    return world


def main() -> None:
    parser = argparse.ArgumentParser(description="Headless grid nomads simulation")
    parser.add_argument("--steps", type=int, default=1000)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--config", type=Path, default=None, help="YAML file with simulation settings")
    parser.add_argument("--log", type=Path, default=None, help="CSV file to write metrics")
    parser.add_argument(
        "--log-format",
        choices=["basic", "detailed"],
        default="detailed",
        help="CSV format to write when --log is provided.",
    )
    parser.add_argument(
        "--summary",
        type=Path,
        default=None,
        help="Optional JSON file to write summary stats for the run.",
    )
    parser.add_argument(
        "--summary-window",
        type=int,
        default=500,
        help="Tail window size (ticks) for summary stats.",
    )
    parser.add_argument(
        "--deterministic-log",
        action="store_true",
        help="Write deterministic CSV (tick_ms is forced to 0.000 so identical seeds match).",
    )
    parser.add_argument("--log-level", default="WARNING", help="Python logging level name")
    args = parser.parse_args()
    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    config = SimulationConfig.from_yaml(args.config) if args.config else None
    run_headless(
        args.steps,
        args.seed,
        args.log,
        deterministic_log=args.deterministic_log,
        log_format=args.log_format,
        summary_path=args.summary,
        summary_window=args.summary_window,
        config=config,
    )


if __name__ == "__main__":
    main()
