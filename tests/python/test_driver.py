import asyncio
import json

from nomads.app.driver import SimulationController, render_payload
from nomads.app.palette import BACKGROUND_RGB, COLOR_RGB, faded_rgb, highlight_rgb
from nomads.sim.core.agent import Color
from nomads.sim.core.config import SimulationConfig, load_app_config


def test_snapshot_queue_ack_cleanup() -> None:
    controller = SimulationController(SimulationConfig())

    async def exercise() -> None:
        controller.tick = 1
        await controller._broadcast_snapshot()
        controller.tick = 2
        await controller._broadcast_snapshot()
        queued_ticks = [item.tick for item in await controller.pending()]
        assert queued_ticks == [1, 2]
        await controller.acknowledge(1)
        remaining_ticks = [item.tick for item in await controller.pending()]
        assert remaining_ticks == [2]

    asyncio.run(exercise())


def test_advance_notifies_listeners_on_broadcast_interval() -> None:
    controller = SimulationController(SimulationConfig(initial_population=3), broadcast_interval=2)
    received = []
    controller.listeners.append(received.append)

    async def exercise() -> None:
        for _ in range(4):
            await controller.advance()

    asyncio.run(exercise())

    assert controller.tick == 4
    assert [snapshot.tick for snapshot in received] == [2, 4]
    assert all(len(snapshot.agents) == 3 for snapshot in received)


def test_reset_clears_queue_and_tick() -> None:
    controller = SimulationController(SimulationConfig(initial_population=2))

    async def exercise():
        await controller.advance()
        await controller.advance()
        await controller.reset()
        return [item.tick for item in await controller.pending()]

    ticks = asyncio.run(exercise())

    assert controller.tick == 0
    assert ticks == [0]


def test_loop_ticks_while_running() -> None:
    controller = SimulationController(SimulationConfig(initial_population=2, tick_interval=0.001))

    async def exercise() -> None:
        await controller.start()
        await asyncio.sleep(0.1)
        await controller.shutdown()

    asyncio.run(exercise())

    assert controller.tick > 0
    assert not controller.running


def test_set_speed_is_clamped() -> None:
    controller = SimulationController(SimulationConfig())
    assert controller.set_speed(100) == 5.0
    assert controller.set_speed(0) == 0.1
    assert controller.set_speed(2) == 2.0


def test_serialized_snapshot_carries_display_colors() -> None:
    controller = SimulationController(SimulationConfig(initial_population=4))

    async def exercise():
        await controller.advance()
        return await controller.pending()

    queued = asyncio.run(exercise())
    message = json.loads(queued[-1].payload)

    assert message["type"] == "snapshot"
    payload = message["payload"]
    assert len(payload["agents"]) == 4
    assert all(len(agent["rgb"]) == 3 for agent in payload["agents"])
    assert all(trail["opacity"] > 0 for trail in payload["trails"])
    snapshot = controller.world.snapshot(controller.tick)
    assert render_payload(snapshot)["trails"] == payload["trails"]


def test_palette_blends_toward_background() -> None:
    assert faded_rgb(Color.RED, 1.0) == COLOR_RGB[Color.RED]
    assert faded_rgb(Color.BLUE, 0.0) == BACKGROUND_RGB
    half = faded_rgb(Color.BLUE, 0.5)
    assert all(min(a, b) <= c <= max(a, b) for a, b, c in zip(COLOR_RGB[Color.BLUE], BACKGROUND_RGB, half))
    assert highlight_rgb(Color.RED, 1.0) == (255, 255, 255)


def test_controller_from_app_config() -> None:
    app = load_app_config({"broadcast_interval": 3, "simulation": {"rows": 6, "columns": 7, "initial_population": 2}})
    controller = SimulationController.from_app_config(app)

    assert controller.broadcast_interval == 3
    assert controller.world.topology.rows == 6
    assert controller.world.topology.columns == 7
    assert len(controller.world.agents) == 2
