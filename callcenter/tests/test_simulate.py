import os
import tempfile
import unittest

from callcenter.config import ConfigurationError, SimulationConfig
from callcenter.events import EventKind
from callcenter.sampling import make_rng
from callcenter.simulate import CallCenterSimulation, main, run_simulation

ARRIVAL = EventKind.ARRIVAL.value
COMPLETION = EventKind.COMPLETION.value
ABANDONMENT = EventKind.ABANDONMENT.value


class _ConstantSource:
    """Always returns u, so every duration is floor(ln 2 / rate)."""

    def __init__(self, value: float = 0.5):
        self.value = value

    def random(self) -> float:
        return self.value


def _config(**overrides) -> SimulationConfig:
    params = dict(num_agents=1, max_wait_time=2, arrival_rate=0.5, average_call_time=4.0, simulation_horizon=10)
    params.update(overrides)
    return SimulationConfig(**params)


class ScriptedTraceTest(unittest.TestCase):
    """With u=0.5, gaps are 1 minute and services 2 minutes on a single agent."""

    def test_hand_computed_trace(self) -> None:
        simulation = CallCenterSimulation(_config(), _ConstantSource())
        result = simulation.run()

        expected = [
            (1, ARRIVAL, 1),
            (2, ARRIVAL, 2),
            (3, ARRIVAL, 3),
            (3, COMPLETION, 1),
            (4, ARRIVAL, 4),
            (4, ABANDONMENT, 2),
            (5, ARRIVAL, 5),
            (5, ABANDONMENT, 3),
            (5, COMPLETION, 2),
            (6, ARRIVAL, 6),
            (6, ABANDONMENT, 4),
            (7, ARRIVAL, 7),
            (7, ABANDONMENT, 5),
            (7, COMPLETION, 4),
            (8, ARRIVAL, 8),
            (8, ABANDONMENT, 6),
            (9, ARRIVAL, 9),
            (9, ABANDONMENT, 7),
            (9, COMPLETION, 6),
        ]
        self.assertEqual(result.trace(), expected)
        self.assertEqual(result.as_tuple(), (9, 3, 1.0))
        self.assertEqual(result.completed_calls, 4)
        self.assertEqual(result.busy_minutes, (10,))

        # Call 8 is in service and call 9 waits when the horizon is reached.
        self.assertEqual(simulation.state.wait_queue.call_ids(), [9])
        self.assertEqual(simulation.state.agent_pool[0].current_call_id, 8)
        self.assertEqual(
            [(ev.timestamp, ev.kind.value, ev.call_id) for ev in simulation.event_queue.pending()],
            [(10, ABANDONMENT, 8), (11, ABANDONMENT, 9), (11, COMPLETION, 8)],
        )

    def test_completion_at_horizon_is_not_dispatched(self) -> None:
        simulation = CallCenterSimulation(_config(max_wait_time=5, simulation_horizon=3), _ConstantSource())
        result = simulation.run()

        self.assertEqual(result.trace(), [(1, ARRIVAL, 1), (2, ARRIVAL, 2)])
        self.assertEqual(result.completed_calls, 0)
        # Call 2 would have reserved 2 more minutes had the completion at t=3 run.
        self.assertEqual(result.busy_minutes, (2,))
        self.assertAlmostEqual(result.utilization, 2 / 3)
        self.assertEqual(simulation.state.wait_queue.call_ids(), [2])

    def test_zero_patience_abandons_at_queue_time(self) -> None:
        result = run_simulation(_config(max_wait_time=0, average_call_time=100.0), _ConstantSource())

        self.assertEqual(result.total_calls, 9)
        self.assertEqual(result.abandoned_calls, 8)
        trace = result.trace()
        self.assertEqual(trace[0], (1, ARRIVAL, 1))
        for call_id in range(2, 10):
            idx = trace.index((call_id, ARRIVAL, call_id))
            self.assertEqual(trace[idx + 1], (call_id, ABANDONMENT, call_id))

    def test_utilization_above_one_is_surfaced(self) -> None:
        cfg = _config(average_call_time=100.0, simulation_horizon=2, max_wait_time=5)
        with self.assertLogs(level="WARNING") as captured:
            result = run_simulation(cfg, _ConstantSource())

        self.assertEqual(result.busy_minutes, (69,))
        self.assertAlmostEqual(result.utilization, 34.5)
        self.assertTrue(any("exceeds 1" in line for line in captured.output))


class SeededRunPropertiesTest(unittest.TestCase):
    CONFIGS = [
        SimulationConfig(1, 5, 0.5, 3.0, 1440),
        SimulationConfig(3, 10, 1.5, 5.0, 1440),
        SimulationConfig(5, 0, 2.0, 9.0, 600),
        SimulationConfig(10, 15, 1.0, 7.0, 1440),
    ]

    def test_counts_and_ordering_invariants(self) -> None:
        for cfg in self.CONFIGS:
            for seed in range(3):
                with self.subTest(cfg=cfg, seed=seed):
                    simulation = CallCenterSimulation(cfg, make_rng(seed))
                    result = simulation.run()

                    self.assertGreaterEqual(result.abandoned_calls, 0)
                    self.assertLessEqual(result.abandoned_calls, result.total_calls)
                    self.assertEqual(result.total_calls, simulation.stats.scheduled_arrivals)

                    timestamps = [ev.timestamp for ev in result.dispatched_events]
                    self.assertEqual(timestamps, sorted(timestamps))
                    self.assertTrue(all(t < cfg.simulation_horizon for t in timestamps))

                    outstanding = {
                        ev.agent_id for ev in simulation.event_queue.pending() if ev.kind is EventKind.COMPLETION
                    }
                    busy = {agent.agent_id for agent in simulation.state.agent_pool if not agent.is_idle}
                    self.assertEqual(outstanding, busy)

    def test_same_seed_reproduces_results_and_dispatch_order(self) -> None:
        cfg = SimulationConfig(3, 5, 1.5, 3.0, 1440)
        first = run_simulation(cfg, make_rng(2024))
        second = run_simulation(cfg, make_rng(2024))

        self.assertEqual(first.as_tuple(), second.as_tuple())
        self.assertEqual(first.trace(), second.trace())
        self.assertEqual(
            [ev.seq for ev in first.dispatched_events],
            [ev.seq for ev in second.dispatched_events],
        )

    def test_ample_agents_never_abandon(self) -> None:
        cfg = SimulationConfig(200, 5, 0.5, 3.0, 1440)
        for seed in range(3):
            result = run_simulation(cfg, make_rng(seed))
            self.assertGreater(result.total_calls, 0)
            self.assertEqual(result.abandoned_calls, 0)
            self.assertLess(result.utilization, 0.1)


class ConfigValidationTest(unittest.TestCase):
    def test_rejects_invalid_parameters(self) -> None:
        bad = [
            dict(num_agents=0),
            dict(num_agents=-2),
            dict(arrival_rate=0.0),
            dict(arrival_rate=-1.0),
            dict(average_call_time=0.0),
            dict(max_wait_time=-1),
            dict(simulation_horizon=0),
        ]
        for overrides in bad:
            with self.subTest(overrides=overrides):
                with self.assertRaises(ConfigurationError):
                    _config(**overrides)

    def test_zero_patience_is_valid(self) -> None:
        self.assertEqual(_config(max_wait_time=0).max_wait_time, 0)
        self.assertAlmostEqual(_config(average_call_time=4.0).service_rate, 0.25)


class SimulateCliTest(unittest.TestCase):
    def test_main_runs_and_writes_log(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            log_file = os.path.join(tmpdir, "logs", "simulation.log")
            status = main(["--agents", "2", "--horizon", "120", "--seed", "1", "--log-file", log_file])

            self.assertEqual(status, 0)
            with open(log_file, encoding="utf-8") as handle:
                content = handle.read()
            self.assertIn("Agent utilization", content)
            self.assertIn("seed 1 (source: --seed)", content)

    def test_main_rejects_invalid_configuration(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            log_file = os.path.join(tmpdir, "simulation.log")
            self.assertEqual(main(["--lambda", "0", "--log-file", log_file]), 2)


if __name__ == "__main__":
    unittest.main()
