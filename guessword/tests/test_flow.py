"""
Tests for the summary handoff and the flow that drives a play session.

Tests:
- SummaryHandoff final score and restart event
- Game -> summary -> game transitions
- Stale commands across stages
- Session manager lifecycle
"""

import asyncio
import time

import pytest

from ..config import GameConfig
from ..engine import GameSession, SummaryHandoff, StaleCommandError
from ..session import SessionManager, GameFlow, FlowStage
from .helpers import SMALL_POOL, expire


class TestSummaryHandoff:
    """Tests for SummaryHandoff."""

    def test_holds_final_score(self):
        handoff = SummaryHandoff(7)
        assert handoff.final_score == 7
        assert handoff.restart_requested is False

    def test_final_score_is_read_only(self):
        handoff = SummaryHandoff(3)
        with pytest.raises(AttributeError):
            handoff.final_score = 10
        assert handoff.final_score == 3

    def test_restart_request_and_consume(self):
        handoff = SummaryHandoff(1)

        assert handoff.request_restart() is True
        assert handoff.restart_requested is True

        assert handoff.consume_restart() is True
        assert handoff.restart_requested is False

    def test_double_request_collapses(self):
        """Two presses before consumption are one pending restart."""
        handoff = SummaryHandoff(1)
        handoff.request_restart()

        assert handoff.request_restart() is False
        assert handoff.consume_restart() is True
        assert handoff.restart_requested is False
        assert handoff.consume_restart() is False

    def test_from_unfinished_session_raises(self, game):
        with pytest.raises(ValueError):
            SummaryHandoff.from_session(game)

    def test_from_finished_session(self, game):
        game.mark_skip()
        expire(game)

        handoff = SummaryHandoff.from_session(game)
        assert handoff.final_score == -1

    def test_snapshot(self):
        handoff = SummaryHandoff(4)
        handoff.request_restart()

        assert handoff.snapshot().to_dict() == {"final_score": 4, "restart_requested": True}


class TestEndToEnd:
    """The full game -> summary -> restart scenario."""

    def test_five_tick_scenario(self, rng):
        """Two corrects and a skip in the first four ticks score 1."""
        game = GameSession(GameConfig(session_length=5), rng=rng)
        game.start(auto_tick=False)

        game.tick()
        game.mark_correct()
        game.tick()
        game.mark_correct()
        game.tick()
        game.mark_skip()
        game.tick()

        assert game.score == 1
        assert game.finished is False

        game.tick()

        assert game.finished is True
        assert game.remaining_time == 0

        handoff = SummaryHandoff.from_session(game)
        game.consume_finished()
        game.dispose()
        assert handoff.final_score == 1

        handoff.request_restart()
        assert handoff.restart_requested is True

        handoff.consume_restart()
        assert handoff.restart_requested is False


class TestGameFlow:
    """Tests for GameFlow stage transitions."""

    def test_begin_starts_game(self, flow, config):
        assert flow.stage == FlowStage.PLAYING
        assert flow.game is not None
        assert flow.game.is_active
        assert flow.game.remaining_time == config.session_length
        assert flow.summary is None

    def test_begin_twice_raises(self, flow):
        with pytest.raises(RuntimeError):
            flow.begin()

    def test_expiry_switches_to_summary(self, flow):
        """The flow reacts to the finished event on its own."""
        game = flow.game
        flow.mark_correct()
        flow.mark_correct()
        flow.mark_skip()
        expire(game)

        assert flow.stage == FlowStage.SUMMARY
        assert flow.summary.final_score == 1
        assert flow.game is None
        assert flow.session.rounds_completed == 1

        # The event was consumed and the game released
        assert game.finished is False
        assert game.disposed
        assert not game.timer_running

    def test_sync_is_idempotent(self, flow):
        """Re-observing after the reaction does not replay it."""
        expire(flow.game)

        result = flow.sync()
        assert result.transitions == []
        assert result.stage == FlowStage.SUMMARY
        assert flow.session.rounds_completed == 1

    def test_restart_starts_fresh_game(self, flow, config):
        first_game = flow.game
        flow.mark_correct()
        expire(first_game)

        result = flow.request_restart()

        assert result.accepted
        assert result.transitions == ["restarted"]
        assert result.stage == FlowStage.PLAYING
        assert flow.summary is None
        assert flow.game is not first_game
        assert flow.game.score == 0
        assert flow.game.remaining_time == config.session_length

    def test_commands_return_snapshots(self, flow):
        result = flow.mark_correct()

        assert result.accepted
        assert result.game.score == 1
        assert result.game.current_word == flow.game.current_word

    def test_commands_in_summary_are_stale(self, flow):
        expire(flow.game)

        result = flow.mark_correct()

        assert result.accepted is False
        assert result.stage == FlowStage.SUMMARY
        assert flow.summary.final_score == 0

    def test_restart_while_playing_is_stale(self, flow):
        game = flow.game
        result = flow.request_restart()

        assert result.accepted is False
        assert flow.game is game

    def test_strict_policy_raises(self, manager):
        session = manager.create_session(
            config=GameConfig(session_length=1, reject_stale_commands=True),
        )
        strict_flow = GameFlow(session, auto_tick=False)
        strict_flow.begin()

        with pytest.raises(StaleCommandError):
            strict_flow.request_restart()

        expire(strict_flow.game)
        with pytest.raises(StaleCommandError) as exc_info:
            strict_flow.mark_skip()
        assert exc_info.value.state == "summary"

    def test_listeners_see_transitions(self, flow):
        updates = []
        flow.subscribe(updates.append)

        flow.mark_correct()
        expire(flow.game)
        flow.request_restart()

        transitions = [t for update in updates for t in update.transitions]
        assert transitions == ["game_finished", "restarted"]
        assert updates[0].game.score == 1

    def test_reattached_listener_does_not_replay(self, flow):
        """A listener attached after the reaction sees no finished event."""
        expire(flow.game)

        updates = []
        flow.subscribe(updates.append)
        flow.sync()

        assert updates == []
        assert flow.state().summary.final_score == 0

    def test_end_on_empty_from_command(self, manager):
        session = manager.create_session(
            config=GameConfig(session_length=50, word_pool=SMALL_POOL, end_on_empty=True),
        )
        empty_flow = GameFlow(session, auto_tick=False)
        empty_flow.begin()

        empty_flow.mark_correct()
        empty_flow.mark_correct()
        result = empty_flow.mark_correct()

        assert result.accepted
        assert result.transitions == ["game_finished"]
        assert result.stage == FlowStage.SUMMARY
        assert result.summary.final_score == 3

    def test_failing_game_listener_does_not_block_summary(self, flow):
        """A broken observer on the game does not keep the flow in PLAYING."""
        def broken(snapshot):
            raise RuntimeError("listener failed")

        flow.game.subscribe(broken)
        expire(flow.game)

        assert flow.stage == FlowStage.SUMMARY
        assert flow.summary.final_score == 0

    def test_runs_on_event_loop(self, manager):
        """Expiry on a real loop reaches the summary without polling."""
        session = manager.create_session(config=GameConfig(session_length=3, tick_seconds=0.01))

        async def scenario():
            loop_flow = GameFlow(session)
            loop_flow.begin()
            loop_flow.mark_correct()
            await asyncio.sleep(0.3)
            return loop_flow

        loop_flow = asyncio.run(scenario())

        assert loop_flow.stage == FlowStage.SUMMARY
        assert loop_flow.summary.final_score == 1


class TestSessionManager:
    """Tests for SessionManager."""

    def test_create_and_get(self, manager, config):
        session = manager.create_session()

        assert manager.get_session(session.session_id) is session
        assert session.config == config
        assert session.stage == FlowStage.PLAYING
        assert session.is_active()

    def test_sessions_are_independent(self, manager):
        first = manager.create_session(seed=1)
        second = manager.create_session(seed=1)
        first_flow = GameFlow(first, auto_tick=False)
        second_flow = GameFlow(second, auto_tick=False)
        first_flow.begin()
        second_flow.begin()

        # Same seed, same shuffle
        assert first.game.current_word == second.game.current_word

        first_flow.mark_correct()

        assert first.session_id != second.session_id
        assert first.game.score == 1
        assert second.game.score == 0

    def test_end_session_disposes_game(self, manager, flow):
        game = flow.game
        session_id = flow.session.session_id

        assert manager.end_session(session_id) is True

        assert game.disposed
        assert not game.timer_running
        assert flow.session.stage == FlowStage.ENDED
        assert manager.get_session(session_id) is None

    def test_end_unknown_session(self, manager):
        assert manager.end_session("missing") is False

    def test_list_active_sessions(self, manager):
        ids = {manager.create_session().session_id for _ in range(3)}
        assert set(manager.list_active_sessions()) == ids

    def test_cleanup_stale_sessions(self, manager, flow):
        idle = flow.session
        fresh = manager.create_session()
        idle.last_activity = time.time() - 7200
        game = idle.game

        removed = manager.cleanup_stale_sessions(max_idle_seconds=3600)

        assert removed == [idle.session_id]
        assert game.disposed
        assert manager.get_session(fresh.session_id) is fresh
