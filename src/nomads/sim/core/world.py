from __future__ import annotations

import logging
from time import perf_counter
from typing import Any, List, Sequence, Tuple

from ..systems import behavior, neighbors, trails as trail_system
from ..systems import metrics as metrics_system
from ..types.metrics import TickMetrics
from ..types.snapshot import AgentView, Snapshot, SnapshotMetadata, SnapshotWorld, TrailView
from .agent import Color, NeighborInfo, Nomad
from .config import ColorAssignment, SimulationConfig
from .errors import ConfigurationError
from .rng import DeterministicRng
from .topology import GridTopology, Position
from .trail import Trail

logger = logging.getLogger(__name__)

_NOMAD_COLORS = (Color.RED, Color.BLUE)


class World:
    """Owns the nomads and trails of one run and advances them a tick at a time.

    Not re-entrant: the host must serialise calls to ``step``.
    """

    def __init__(self, config: SimulationConfig, rng: DeterministicRng | None = None):
        config.validate()
        self._config = config
        self._topology = GridTopology(config.rows, config.columns)
        self._rng = rng if rng is not None else DeterministicRng(config.seed)
        self._agents: List[Nomad] = []
        self._trails: List[Trail] = []
        self._next_id = 0
        self._next_trail_id = 0
        self._highlighted = 0
        self._metrics: TickMetrics | None = None
        self._bootstrap_population()
        logger.debug(
            "Created world %dx%d with %d nomads (seed=%s)",
            config.rows,
            config.columns,
            len(self._agents),
            self._rng.seed,
        )

    @property
    def topology(self) -> GridTopology:
        return self._topology

    @property
    def agents(self) -> Tuple[AgentView, ...]:
        return self._agent_views()

    @property
    def trails(self) -> Tuple[TrailView, ...]:
        return self._trail_views()

    @property
    def metrics(self) -> TickMetrics | None:
        return self._metrics

    def rng_state(self) -> tuple[Any, ...]:
        return self._rng.get_state()

    def add_agent(self, color: Color, position: Position) -> int:
        """Place a nomad on the board and return its id."""
        agent = Nomad(
            id=self._next_id,
            position=self._topology.normalize(position),
            color=color,
            excitement_radius=self._config.excitement_radius,
        )
        self._agents.append(agent)
        self._next_id += 1
        self._refresh_neighbors()
        return agent.id

    def reset(self) -> None:
        self._agents.clear()
        self._trails.clear()
        self._rng.reset()
        self._next_id = 0
        self._next_trail_id = 0
        self._highlighted = 0
        self._metrics = None
        self._bootstrap_population()

    def step(self, tick: int) -> TickMetrics:
        start = perf_counter()
        config = self._config
        topology = self._topology

        previous: List[Position] = []
        for agent in self._agents:
            previous.append(agent.position)
            behavior.act(agent, self._agents, topology, self._rng, config.avoidance_range)

        for agent, position in zip(self._agents, previous):
            trail_system.drop_trail(self._trails, self._next_trail_id, position, agent.color)
            self._next_trail_id += 1

        self._refresh_neighbors()
        self._trails, removed = trail_system.decay_trails(self._trails, config.decay_rate)

        elapsed_ms = (perf_counter() - start) * 1000.0
        metrics = metrics_system.create_metrics(
            tick,
            self._agents,
            len(self._trails),
            len(previous),
            removed,
            self._highlighted,
            elapsed_ms,
        )
        self._metrics = metrics
        return metrics

    def neighbors_of(self, agent_id: int) -> Tuple[NeighborInfo, ...]:
        for agent in self._agents:
            if agent.id == agent_id:
                return tuple(agent.neighbors)
        raise KeyError(agent_id)

    def snapshot(self, tick: int) -> Snapshot:
        return Snapshot(
            tick=tick,
            metrics=self._metrics,
            agents=self._agent_views(),
            trails=self._trail_views(),
            next_trail_id=self._next_trail_id,
            world=SnapshotWorld(rows=self._topology.rows, columns=self._topology.columns),
            metadata=SnapshotMetadata(
                seed=self._config.seed,
                avoidance_range=self._config.avoidance_range,
                decay_rate=self._config.decay_rate,
                config_version=self._config.config_version,
            ),
        )

    def _agent_views(self) -> Tuple[AgentView, ...]:
        return tuple(
            AgentView(
                id=agent.id,
                row=agent.position.row,
                column=agent.position.column,
                color=agent.color,
                personality=agent.personality,
                action=agent.action,
                excitement=agent.excitement_level,
                highlighted=agent.highlighted,
            )
            for agent in self._agents
        )

    def _trail_views(self) -> Tuple[TrailView, ...]:
        return tuple(
            TrailView(
                id=trail.id,
                row=trail.position.row,
                column=trail.position.column,
                color=trail.color,
                opacity=trail.opacity,
            )
            for trail in self._trails
        )

    def restore(self, snapshot: Snapshot, rng_state: Sequence[Any] | None = None) -> None:
        """Replace the world state with ``snapshot``; ticking resumes from there."""
        if (snapshot.world.rows, snapshot.world.columns) != (self._topology.rows, self._topology.columns):
            raise ConfigurationError(
                f"Snapshot grid {snapshot.world.rows}x{snapshot.world.columns} does not match "
                f"{self._topology.rows}x{self._topology.columns}"
            )
        self._agents = []
        for view in snapshot.agents:
            agent = Nomad(
                id=view.id,
                position=self._topology.normalize(Position(view.row, view.column)),
                color=view.color,
                action=view.action,
                excitement_radius=self._config.excitement_radius,
            )
            self._agents.append(agent)
        self._trails = [
            Trail(
                id=view.id,
                position=self._topology.normalize(Position(view.row, view.column)),
                color=view.color,
                opacity=view.opacity,
            )
            for view in snapshot.trails
        ]
        self._next_id = max((agent.id for agent in self._agents), default=-1) + 1
        self._next_trail_id = snapshot.next_trail_id
        self._metrics = snapshot.metrics
        if rng_state is not None:
            self._rng.set_state(rng_state)
        self._refresh_neighbors()
        logger.debug(
            "Restored tick %d: %d nomads, %d trails", snapshot.tick, len(self._agents), len(self._trails)
        )

    def _refresh_neighbors(self) -> None:
        neighbors.refresh_neighbors(self._agents, self._topology)
        self._highlighted = neighbors.apply_highlights(self._agents, self._config.highlight_radius)

    def _bootstrap_population(self) -> None:
        assignment = ColorAssignment(self._config.color_assignment)
        for index in range(self._config.initial_population):
            position = self._topology.random_position(self._rng)
            if assignment == ColorAssignment.ALTERNATING:
                color = _NOMAD_COLORS[index % len(_NOMAD_COLORS)]
            else:
                color = self._rng.choice(_NOMAD_COLORS)
            self.add_agent(color, position)
