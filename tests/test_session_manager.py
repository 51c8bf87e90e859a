import random
import unittest

from flashanzan.app import explain
from flashanzan.app.scheduler import LoopScheduler
from flashanzan.app.session_manager import STATE_CHANGED, SessionManager
from flashanzan.drills.sequence import prefix_sums
from tests.fakes import FakeClock


class SessionTestCase(unittest.TestCase):
    def make(self, mode: str = "manual", interval_s: float = 1.0) -> SessionManager:
        self.clock = FakeClock()
        self.sched = LoopScheduler(clock=self.clock.clock, sleep=self.clock.sleep)
        self.snapshots = []
        sm = SessionManager(self.sched, mode=mode, interval_s=interval_s, rng=random.Random(1234))
        sm.events.subscribe(STATE_CHANGED, self.snapshots.append)
        return sm

    def assertIdle(self, sm: SessionManager) -> None:
        self.assertEqual(sm.phase, "idle")
        self.assertEqual(sm.current_index, 0)
        self.assertIsNone(sm.current_number)
        self.assertIsNone(sm.answer)
        self.assertEqual(sm.numbers, ())
        self.assertFalse(sm.timer_pending)


class InitialStateTests(SessionTestCase):
    def test_defaults(self) -> None:
        sm = SessionManager(LoopScheduler())
        self.assertEqual(sm.mode, "home")
        self.assertEqual(sm.interval_s, 1.0)
        self.assertIdle(sm)

    def test_rejects_unknown_mode(self) -> None:
        with self.assertRaises(ValueError):
            SessionManager(LoopScheduler(), mode="turbo")

    def test_rejects_negative_interval(self) -> None:
        with self.assertRaises(ValueError):
            SessionManager(LoopScheduler(), interval_s=-1)

    def test_rejects_nan_interval(self) -> None:
        with self.assertRaises(ValueError):
            SessionManager(LoopScheduler(), interval_s=float("nan"))


class ManualModeTests(SessionTestCase):
    def test_walks_through_sequence_then_finishes(self) -> None:
        sm = self.make("manual")
        self.assertTrue(sm.start_game())
        nums = sm.numbers
        self.assertEqual(len(nums), 8)
        self.assertEqual(sm.phase, "running")
        self.assertEqual(sm.current_index, 0)
        self.assertEqual(sm.current_number, nums[0])
        for i in range(1, 8):
            self.assertTrue(sm.advance())
            self.assertEqual(sm.current_index, i)
            self.assertEqual(sm.current_number, nums[i])
        self.assertTrue(sm.advance())
        self.assertEqual(sm.phase, "finished")
        self.assertIsNone(sm.current_number)
        self.assertEqual(sm.current_index, 7)

    def test_no_timer_in_manual_mode(self) -> None:
        sm = self.make("manual")
        sm.start_game()
        self.assertFalse(sm.timer_pending)
        self.sched.advance(60)
        self.assertEqual(sm.current_index, 0)

    def test_generated_sequence_respects_running_sums(self) -> None:
        sm = self.make("manual")
        sm.start_game()
        sums = prefix_sums(sm.numbers)
        self.assertTrue(all(s >= 0 for s in sums))
        self.assertGreater(sums[-1], 0)

    def test_each_start_regenerates(self) -> None:
        sm = self.make("manual")
        sm.start_game()
        first = sm.numbers
        sm.reset()
        sm.start_game()
        self.assertNotEqual(sm.numbers, first)


class AnswerFlowTests(SessionTestCase):
    def finish(self, sm: SessionManager) -> None:
        sm.start_game()
        for _ in range(8):
            sm.advance()

    def test_reveal_sums_all_numbers(self) -> None:
        sm = self.make("manual")
        self.finish(sm)
        self.assertTrue(sm.reveal_answer())
        self.assertEqual(sm.phase, "showingAnswer")
        self.assertEqual(sm.answer, sum(sm.numbers))
        self.assertGreater(sm.answer, 0)

    def test_inspect_and_back_keep_values(self) -> None:
        sm = self.make("manual")
        self.finish(sm)
        sm.reveal_answer()
        nums, answer = sm.numbers, sm.answer
        self.assertTrue(sm.inspect_numbers())
        self.assertEqual(sm.phase, "showingNumbers")
        self.assertEqual(sm.numbers, nums)
        self.assertEqual(sm.answer, answer)
        self.assertTrue(sm.back_from_inspect())
        self.assertEqual(sm.phase, "showingAnswer")
        self.assertEqual(sm.numbers, nums)
        self.assertEqual(sm.answer, answer)

    def test_out_of_phase_commands_are_ignored(self) -> None:
        sm = self.make("manual")
        self.assertFalse(sm.advance())
        self.assertFalse(sm.reveal_answer())
        self.assertFalse(sm.inspect_numbers())
        self.assertFalse(sm.back_from_inspect())
        self.assertIdle(sm)
        sm.start_game()
        self.assertFalse(sm.reveal_answer())
        self.assertEqual(sm.phase, "running")
        self.assertEqual(self.snapshots[-1].phase, "running")

    def test_advance_after_finish_is_ignored(self) -> None:
        sm = self.make("manual")
        self.finish(sm)
        self.assertFalse(sm.advance())
        self.assertEqual(sm.phase, "finished")


class ResetTests(SessionTestCase):
    def drive_to(self, sm: SessionManager, phase: str) -> None:
        if phase == "idle":
            return
        sm.start_game()
        if phase == "running":
            sm.advance()
            return
        for _ in range(8):
            sm.advance()
        if phase == "finished":
            return
        sm.reveal_answer()
        if phase == "showingNumbers":
            sm.inspect_numbers()

    def test_reset_from_every_phase(self) -> None:
        for mode in ("manual", "auto"):
            for phase in ("idle", "running", "finished", "showingAnswer", "showingNumbers"):
                with self.subTest(mode=mode, phase=phase):
                    sm = self.make("manual")
                    self.drive_to(sm, phase)
                    sm.set_mode(mode)
                    self.assertEqual(sm.phase, phase)
                    self.assertTrue(sm.reset())
                    self.assertIdle(sm)
                    self.assertEqual(sm.mode, mode)
                    self.assertTrue(sm.reset())
                    self.assertIdle(sm)

    def test_go_home_resets_and_changes_mode(self) -> None:
        sm = self.make("auto")
        sm.start_game()
        self.assertTrue(sm.timer_pending)
        self.assertTrue(sm.go_home())
        self.assertIdle(sm)
        self.assertEqual(sm.mode, "home")
        self.assertEqual(self.sched.pending(), [])

    def test_reset_keeps_interval(self) -> None:
        sm = self.make("auto", interval_s=2.5)
        sm.start_game()
        sm.reset()
        self.assertEqual(sm.interval_s, 2.5)


class AutoModeTests(SessionTestCase):
    def test_one_number_per_interval_then_finished(self) -> None:
        sm = self.make("auto", interval_s=1)
        sm.start_game()
        nums = sm.numbers
        self.assertEqual(sm.current_index, 0)
        self.assertEqual(sm.current_number, nums[0])
        for i in range(1, 8):
            self.assertEqual(self.sched.advance(1), 1)
            self.assertEqual(sm.current_index, i)
            self.assertEqual(sm.current_number, nums[i])
            self.assertEqual(sm.phase, "running")
        self.sched.advance(1)
        self.assertEqual(sm.phase, "finished")
        self.assertIsNone(sm.current_number)
        self.assertFalse(sm.timer_pending)
        self.assertEqual(self.clock.now, 8)
        self.assertEqual(self.sched.pending(), [])

    def test_no_advance_before_interval_elapses(self) -> None:
        sm = self.make("auto", interval_s=2)
        sm.start_game()
        self.sched.advance(1.5)
        self.assertEqual(sm.current_index, 0)
        self.sched.advance(0.5)
        self.assertEqual(sm.current_index, 1)

    def test_single_pending_timer(self) -> None:
        sm = self.make("auto")
        sm.start_game()
        self.assertEqual(len(self.sched.pending()), 1)
        sm.advance()
        self.assertEqual(len(self.sched.pending()), 1)
        sm.set_interval(3)
        self.assertEqual(len(self.sched.pending()), 1)

    def test_manual_advance_reschedules_instead_of_double_advancing(self) -> None:
        sm = self.make("auto", interval_s=1)
        sm.start_game()
        self.sched.advance(0.5)
        sm.advance()
        self.assertEqual(sm.current_index, 1)
        # The stale timer due at t=1 must not fire
        self.sched.advance(0.75)
        self.assertEqual(sm.current_index, 1)
        self.sched.advance(0.25)
        self.assertEqual(sm.current_index, 2)

    def test_interval_change_restarts_countdown(self) -> None:
        sm = self.make("auto", interval_s=1)
        sm.start_game()
        self.sched.advance(0.5)
        sm.set_interval(4)
        self.sched.advance(3.5)
        self.assertEqual(sm.current_index, 0)
        self.sched.advance(0.5)
        self.assertEqual(sm.current_index, 1)

    def test_switching_to_manual_cancels_timer(self) -> None:
        sm = self.make("auto")
        sm.start_game()
        sm.set_mode("manual")
        self.assertFalse(sm.timer_pending)
        self.sched.advance(10)
        self.assertEqual(sm.current_index, 0)
        sm.set_mode("auto")
        self.assertTrue(sm.timer_pending)
        self.sched.advance(1)
        self.assertEqual(sm.current_index, 1)

    def test_reset_cancels_pending_advance(self) -> None:
        sm = self.make("auto")
        sm.start_game()
        sm.reset()
        self.assertEqual(self.sched.advance(5), 0)
        self.assertIdle(sm)

    def test_restart_mid_run_uses_new_sequence_and_timer(self) -> None:
        sm = self.make("auto")
        sm.start_game()
        self.sched.advance(3)
        sm.start_game()
        self.assertEqual(sm.current_index, 0)
        self.assertEqual(len(self.sched.pending()), 1)
        self.sched.advance(1)
        self.assertEqual(sm.current_index, 1)

    def test_zero_interval_flashes_through(self) -> None:
        sm = self.make("auto", interval_s=0)
        sm.start_game()
        while self.sched.run_once():
            pass
        self.assertEqual(sm.phase, "finished")
        self.assertEqual(self.clock.now, 0)

    def test_no_timer_after_finish(self) -> None:
        sm = self.make("auto")
        sm.start_game()
        self.sched.advance(8)
        sm.reveal_answer()
        sm.inspect_numbers()
        self.assertFalse(sm.timer_pending)


class SettersAndEventsTests(SessionTestCase):
    def test_set_mode_validation_and_noop(self) -> None:
        sm = self.make("manual")
        with self.assertRaises(ValueError):
            sm.set_mode("fast")
        self.assertFalse(sm.set_mode("manual"))
        self.assertTrue(sm.set_mode("auto"))
        self.assertEqual(sm.mode, "auto")

    def test_set_interval(self) -> None:
        sm = self.make("auto")
        self.assertTrue(sm.set_interval(2.3))
        self.assertEqual(sm.interval_s, 2.3)
        self.assertFalse(sm.set_interval(2.3))
        with self.assertRaises(ValueError):
            sm.set_interval(-0.1)

    def test_set_interval_rejects_non_finite_without_side_effects(self) -> None:
        sm = self.make("auto")
        sm.start_game()
        emitted = len(self.snapshots)
        for bad in (float("nan"), float("inf")):
            with self.assertRaises(ValueError):
                sm.set_interval(bad)
        self.assertEqual(sm.interval_s, 1.0)
        self.assertEqual(len(self.sched.pending()), 1)
        self.assertEqual(len(self.snapshots), emitted)
        self.sched.advance(1)
        self.assertEqual(sm.current_index, 1)

    def test_emits_snapshot_per_applied_command(self) -> None:
        sm = self.make("manual")
        sm.start_game()
        sm.advance()
        sm.reveal_answer()  # ignored
        self.assertEqual([s.phase for s in self.snapshots], ["running", "running"])
        last = self.snapshots[-1]
        self.assertEqual(last.current_index, 1)
        self.assertEqual(last.numbers, list(sm.numbers))
        self.assertFalse(last.timer_pending)

    def test_snapshot_matches_properties(self) -> None:
        sm = self.make("auto", interval_s=1.5)
        sm.start_game()
        snap = sm.snapshot()
        self.assertEqual(snap.mode, "auto")
        self.assertEqual(snap.phase, "running")
        self.assertEqual(snap.interval_s, 1.5)
        self.assertEqual(snap.current_number, sm.current_number)
        self.assertTrue(snap.timer_pending)
        self.assertIsNone(snap.answer)

    def test_failing_subscriber_does_not_block_others(self) -> None:
        sm = self.make("manual")

        def broken(_snap) -> None:
            raise RuntimeError("boom")

        seen = []
        sm.events.subscribe(STATE_CHANGED, broken)
        sm.events.subscribe(STATE_CHANGED, seen.append)
        sm.start_game()
        self.assertEqual(len(seen), 1)


class ExplainTraceTests(SessionTestCase):
    def tearDown(self) -> None:
        explain.enable(False)

    def test_traces_transitions_when_enabled(self) -> None:
        import io
        from contextlib import redirect_stdout

        explain.enable(True)
        sm = self.make("auto")
        buf = io.StringIO()
        with redirect_stdout(buf):
            sm.start_game()
            self.sched.advance(1)
        out = buf.getvalue()
        self.assertIn("[EXPLAIN] game_started", out)
        self.assertIn("[EXPLAIN] timer_scheduled", out)
        self.assertIn("[EXPLAIN] timer_fired", out)
        self.assertIn("[EXPLAIN] advanced", out)

    def test_records_carry_elapsed_stamp(self) -> None:
        import io
        from contextlib import redirect_stdout

        buf = io.StringIO()
        with redirect_stdout(buf):
            explain.trace("before_enable")
            self.assertFalse(explain.enabled())
            explain.enable(True)
            explain.trace("timer_fired", {"index": 3})
            explain.trace("odd_payload", {"handle": object()})
            explain.enable(False)
            explain.trace("after_disable")
        self.assertFalse(explain.enabled())
        lines = buf.getvalue().splitlines()
        self.assertEqual(len(lines), 2)
        self.assertRegex(lines[0], r"^\[EXPLAIN\] timer_fired :: \{\"index\":3\} @\+\d+\.\d\ds$")
        self.assertRegex(lines[1], r"^\[EXPLAIN\] odd_payload @\+\d+\.\d\ds$")


if __name__ == "__main__":
    unittest.main()
