import datetime as dt
import unittest

from tightrope.errors import CyclicDependencyError, InvalidScheduleError, UnknownTaskError
from tightrope.model import CascadedUpdate, Dependency, ScheduleOverride, Task
from tightrope.reflow import apply_updates, reflow
from tightrope.validate import check_precedence


def d(day: int, month: int = 1, year: int = 2024) -> dt.date:
    return dt.date(year, month, day)


def dep(p: str, s: str) -> Dependency:
    return Dependency(predecessor_id=p, successor_id=s)


class TestReflowCoreContract(unittest.TestCase):
    def setUp(self) -> None:
        self.a = Task("A", d(1), d(3))
        self.b = Task("B", d(4), d(6))
        self.chain = [self.a, self.b]
        self.deps = [dep("A", "B")]

    def test_move_root_cascades_to_successor(self) -> None:
        out = reflow(self.chain, self.deps, ScheduleOverride("A", start_date=d(10)))
        self.assertEqual(
            out,
            [
                CascadedUpdate("A", d(10), d(12)),
                CascadedUpdate("B", d(13), d(15)),
            ],
        )
        self.assertEqual(out[1].duration, 3)

    def test_idempotent(self) -> None:
        ov = ScheduleOverride("A", start_date=d(10))
        self.assertEqual(reflow(self.chain, self.deps, ov), reflow(self.chain, self.deps, ov))

    def test_noop_override_returns_empty(self) -> None:
        self.assertEqual(reflow(self.chain, self.deps, ScheduleOverride("A", start_date=d(1))), [])
        self.assertEqual(reflow(self.chain, self.deps, ScheduleOverride("A", duration=3)), [])
        self.assertEqual(reflow(self.chain, self.deps, ScheduleOverride("A")), [])

    def test_inputs_are_not_mutated(self) -> None:
        tasks = list(self.chain)
        deps = list(self.deps)
        reflow(tasks, deps, ScheduleOverride("A", start_date=d(10)))
        self.assertEqual(tasks, [Task("A", d(1), d(3)), Task("B", d(4), d(6))])
        self.assertEqual(deps, [dep("A", "B")])

    def test_resize_end_keeps_every_start_that_is_not_pushed(self) -> None:
        c = Task("C", d(7), d(9))
        tasks = [self.a, self.b, c]
        deps = [dep("A", "B"), dep("B", "C")]

        out = reflow(tasks, deps, ScheduleOverride("A", duration=5))
        by_id = {u.id: u for u in out}

        self.assertEqual(by_id["A"].start_date, d(1))
        self.assertEqual(by_id["A"].end_date, d(5))
        self.assertEqual((by_id["B"].start_date, by_id["B"].duration), (d(6), 3))
        self.assertEqual((by_id["C"].start_date, by_id["C"].duration), (d(9), 3))

    def test_resize_end_on_chained_task_keeps_its_start(self) -> None:
        out = reflow(self.chain, self.deps, ScheduleOverride("B", duration=10))
        self.assertEqual(out, [CascadedUpdate("B", d(4), d(13))])

    def test_end_date_override_sets_duration(self) -> None:
        out = reflow(self.chain, self.deps, ScheduleOverride("A", end_date=d(5)))
        self.assertEqual(out, [CascadedUpdate("A", d(1), d(5)), CascadedUpdate("B", d(6), d(8))])

    def test_resize_start_changes_start_and_duration(self) -> None:
        out = reflow(self.chain, self.deps, ScheduleOverride("A", start_date=d(30, 12, 2023), duration=5))
        self.assertEqual(out, [CascadedUpdate("A", d(30, 12, 2023), d(3))])

    def test_degenerate_duration_is_clamped_to_one_day(self) -> None:
        for bad in (0, -3):
            out = reflow(self.chain, self.deps, ScheduleOverride("A", duration=bad))
            self.assertEqual(out, [CascadedUpdate("A", d(1), d(1)), CascadedUpdate("B", d(2), d(4))])

    def test_end_before_start_override_is_clamped(self) -> None:
        out = reflow(self.chain, self.deps, ScheduleOverride("B", end_date=d(1)))
        self.assertEqual(out, [CascadedUpdate("B", d(4), d(4))])

    def test_contradicting_duration_and_end_date_fails(self) -> None:
        with self.assertRaises(InvalidScheduleError):
            reflow(self.chain, self.deps, ScheduleOverride("A", end_date=d(5), duration=3))

    def test_fan_out_moves_both_successors(self) -> None:
        b = Task("B", d(4), d(5))
        c = Task("C", d(4), d(8))
        tasks = [self.a, b, c]
        deps = [dep("A", "B"), dep("A", "C")]

        out = reflow(tasks, deps, ScheduleOverride("A", start_date=d(3)))
        self.assertEqual(
            out,
            [
                CascadedUpdate("A", d(3), d(5)),
                CascadedUpdate("B", d(6), d(7)),
                CascadedUpdate("C", d(6), d(10)),
            ],
        )

    def test_diamond_later_move_binds_on_moved_predecessor(self) -> None:
        b = Task("B", d(1), d(5))
        c = Task("C", d(6), d(7))
        tasks = [self.a, b, c]
        deps = [dep("A", "C"), dep("B", "C")]

        out = reflow(tasks, deps, ScheduleOverride("A", start_date=d(5)))
        self.assertEqual(out, [CascadedUpdate("A", d(5), d(7)), CascadedUpdate("C", d(8), d(9))])

    def test_diamond_earlier_move_leaves_successor_bound_by_other_branch(self) -> None:
        b = Task("B", d(1), d(5))
        c = Task("C", d(6), d(7))
        e = Task("E", d(8), d(9))
        tasks = [self.a, b, c, e]
        deps = [dep("A", "C"), dep("B", "C"), dep("C", "E")]

        out = reflow(tasks, deps, ScheduleOverride("A", start_date=d(29, 12, 2023)))
        self.assertEqual(out, [CascadedUpdate("A", d(29, 12, 2023), d(31, 12, 2023))])

    def test_node_reached_by_two_paths_is_finalized_once_with_max_constraint(self) -> None:
        # A -> B -> D and A -> C -> D, C is longer
        b = Task("B", d(4), d(4))
        c = Task("C", d(4), d(8))
        dd = Task("D", d(9), d(10))
        tasks = [self.a, b, c, dd]
        deps = [dep("A", "B"), dep("A", "C"), dep("B", "D"), dep("C", "D")]

        out = reflow(tasks, deps, ScheduleOverride("A", start_date=d(2)))
        self.assertEqual([u.id for u in out], ["A", "B", "C", "D"])
        self.assertEqual(out[-1], CascadedUpdate("D", d(10), d(11)))

    def test_tight_policy_pulls_successors_earlier(self) -> None:
        out = reflow(self.chain, self.deps, ScheduleOverride("A", duration=1))
        self.assertEqual(out, [CascadedUpdate("A", d(1), d(1)), CascadedUpdate("B", d(2), d(4))])

    def test_chained_task_cannot_start_before_its_predecessors(self) -> None:
        self.assertEqual(reflow(self.chain, self.deps, ScheduleOverride("B", start_date=d(1))), [])

        out = reflow(self.chain, self.deps, ScheduleOverride("B", start_date=d(2), duration=2))
        self.assertEqual(out, [CascadedUpdate("B", d(4), d(5))])

    def test_moving_chained_task_later_keeps_predecessor_derived_start(self) -> None:
        c = Task("C", d(7), d(9))
        tasks = [self.a, self.b, c]
        deps = [dep("A", "B"), dep("B", "C")]

        self.assertEqual(reflow(tasks, deps, ScheduleOverride("B", start_date=d(10))), [])

        out = reflow(tasks, deps, ScheduleOverride("B", start_date=d(10), duration=4))
        self.assertEqual(out, [CascadedUpdate("B", d(4), d(7)), CascadedUpdate("C", d(8), d(10))])

    def test_moving_chained_task_with_slack_snaps_it_to_its_predecessors(self) -> None:
        loose = Task("B", d(8), d(10))
        out = reflow([self.a, loose], self.deps, ScheduleOverride("B", start_date=d(12)))
        self.assertEqual(out, [CascadedUpdate("B", d(4), d(6))])

    def test_resize_end_on_chained_task_with_slack_keeps_its_start(self) -> None:
        loose = Task("B", d(8), d(10))
        out = reflow([self.a, loose], self.deps, ScheduleOverride("B", duration=5))
        self.assertEqual(out, [CascadedUpdate("B", d(8), d(12))])

    def test_unrelated_tasks_are_untouched(self) -> None:
        x = Task("X", d(1), d(2))
        out = reflow(self.chain + [x], self.deps, ScheduleOverride("A", start_date=d(10)))
        self.assertNotIn("X", [u.id for u in out])

    def test_precedence_holds_after_applying_cascade(self) -> None:
        tasks = [
            Task("A", d(1), d(3)),
            Task("B", d(4), d(6)),
            Task("C", d(4), d(5)),
            Task("D", d(7), d(9)),
            Task("E", d(10), d(10)),
            Task("F", d(1), d(9)),
        ]
        deps = [dep("A", "B"), dep("A", "C"), dep("B", "D"), dep("C", "D"), dep("D", "E"), dep("F", "E")]
        self.assertEqual(check_precedence(tasks, deps), [])

        for ov in (
            ScheduleOverride("A", start_date=d(8)),
            ScheduleOverride("A", duration=1),
            ScheduleOverride("C", duration=9),
            ScheduleOverride("F", start_date=d(20)),
        ):
            after = apply_updates(tasks, reflow(tasks, deps, ov))
            self.assertEqual(check_precedence(after, deps), [], ov)

    def test_unknown_override_id_fails(self) -> None:
        with self.assertRaises(UnknownTaskError):
            reflow(self.chain, self.deps, ScheduleOverride("nope", start_date=d(1)))

    def test_unknown_dependency_id_fails(self) -> None:
        with self.assertRaises(UnknownTaskError):
            reflow(self.chain, self.deps + [dep("A", "ghost")], ScheduleOverride("A", start_date=d(2)))

    def test_duplicate_task_ids_fail(self) -> None:
        with self.assertRaises(InvalidScheduleError):
            reflow(self.chain + [Task("A", d(1), d(1))], self.deps, ScheduleOverride("A", start_date=d(2)))

    def test_self_dependency_is_ignored(self) -> None:
        out = reflow(self.chain, self.deps + [dep("A", "A")], ScheduleOverride("A", start_date=d(10)))
        self.assertEqual([u.id for u in out], ["A", "B"])

    def test_cycle_downstream_is_rejected(self) -> None:
        c = Task("C", d(7), d(9))
        deps = [dep("A", "B"), dep("B", "C"), dep("C", "B")]
        with self.assertRaises(CyclicDependencyError) as cm:
            reflow([self.a, self.b, c], deps, ScheduleOverride("A", start_date=d(10)))
        cycle = cm.exception.cycle
        self.assertEqual(cycle[0], cycle[-1])
        self.assertEqual(set(cycle), {"B", "C"})

    def test_cycle_through_target_is_rejected(self) -> None:
        with self.assertRaises(CyclicDependencyError):
            reflow(self.chain, [dep("A", "B"), dep("B", "A")], ScheduleOverride("A", start_date=d(10)))

    def test_cycle_outside_the_cascade_is_ignored(self) -> None:
        x = Task("X", d(1), d(1))
        y = Task("Y", d(2), d(2))
        deps = self.deps + [dep("X", "Y"), dep("Y", "X")]
        out = reflow(self.chain + [x, y], deps, ScheduleOverride("A", start_date=d(10)))
        self.assertEqual([u.id for u in out], ["A", "B"])


if __name__ == "__main__":
    unittest.main(verbosity=2)
