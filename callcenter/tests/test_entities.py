import unittest

from callcenter.entities import AgentPool, AgentState, Call, CallCenterState, WaitQueue


class AgentPoolTest(unittest.TestCase):
    def test_first_idle_scans_lowest_id_first(self) -> None:
        pool = AgentPool(3)
        self.assertEqual(pool.first_idle().agent_id, 0)

        pool[0].assign(Call(1, 0), 4)
        self.assertEqual(pool.first_idle().agent_id, 1)

        pool[1].assign(Call(2, 0), 1)
        pool[2].assign(Call(3, 0), 2)
        self.assertIsNone(pool.first_idle())
        self.assertEqual(pool.busy_count(), 3)

    def test_busy_minutes_reserved_on_assign_and_kept_on_release(self) -> None:
        pool = AgentPool(1)
        agent = pool[0]
        agent.assign(Call(1, 0), 6)
        self.assertIs(agent.state, AgentState.BUSY)
        self.assertEqual(agent.busy_minutes, 6)

        self.assertEqual(agent.release(), 1)
        self.assertTrue(agent.is_idle)
        self.assertEqual(agent.busy_minutes, 6)

        agent.assign(Call(2, 3), 0)
        self.assertEqual(pool.total_busy_minutes(), 6)


class WaitQueueTest(unittest.TestCase):
    def test_fifo_order(self) -> None:
        queue = WaitQueue()
        for call_id in (4, 2, 9):
            queue.push(Call(call_id, 0))
        self.assertEqual(queue.pop_head().call_id, 4)
        self.assertEqual(queue.call_ids(), [2, 9])

    def test_remove_by_id(self) -> None:
        queue = WaitQueue()
        for call_id in (1, 2, 3):
            queue.push(Call(call_id, 0))

        self.assertEqual(queue.remove(2).call_id, 2)
        self.assertNotIn(2, queue)
        self.assertIsNone(queue.remove(2))
        self.assertEqual(queue.call_ids(), [1, 3])

    def test_pop_head_on_empty_queue(self) -> None:
        self.assertIsNone(WaitQueue().pop_head())


class CallCenterStateTest(unittest.TestCase):
    def test_call_ids_are_monotonic_from_one(self) -> None:
        state = CallCenterState(1, 5, 10)
        self.assertEqual([state.issue_call_id() for _ in range(3)], [1, 2, 3])

    def test_clock_never_moves_backwards(self) -> None:
        state = CallCenterState(1, 5, 10)
        state.advance_clock(4)
        state.advance_clock(4)
        with self.assertRaises(RuntimeError):
            state.advance_clock(3)


if __name__ == "__main__":
    unittest.main()
