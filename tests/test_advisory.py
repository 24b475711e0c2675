"""Tests for engine.advisory.AdvisoryChannel: consultant state and stale replies."""

import threading
from concurrent.futures import Future

from content.schemas import FALLBACK_ERROR
from core.state import Stage
from engine.advisory import AdvisoryChannel, InlineExecutor
from engine.config import GREETING_MESSAGE, IDLE_MESSAGE
from engine.pipeline import decide


class ManualExecutor:
    """Holds submitted calls until the test releases them."""

    def __init__(self):
        self.jobs = []

    def submit(self, fn, *args, **kwargs):
        fut = Future()
        self.jobs.append((fut, fn, args, kwargs))
        return fut

    def start(self, index):
        self.jobs[index][0].set_running_or_notify_cancel()

    def run(self, index):
        fut, fn, args, kwargs = self.jobs[index]
        fut.set_result(fn(*args, **kwargs))

    def shutdown(self, wait=True):
        pass


class ExplodingAdvisor:
    def request_feedback(self, stage, choice_label, result_label):
        raise RuntimeError("quota exceeded")


class TestChannelLifecycle:
    def test_idle_then_greeting_then_reply(self, engine, channel, advisor):
        assert channel.message == IDLE_MESSAGE
        engine.start_session()
        assert channel.message == GREETING_MESSAGE

        decide(engine, "C")
        assert advisor.calls == [(1, "Niche Down", "Blue Ocean Strategy.")]
        assert channel.message == "Noted. (1)"
        assert not channel.thinking

    def test_reset_goes_idle(self, engine, channel):
        engine.start_session()
        decide(engine, "C")
        engine.reset_session()
        assert channel.message == IDLE_MESSAGE

    def test_provider_exception_becomes_fallback(self, engine):
        channel = AdvisoryChannel(ExplodingAdvisor(), executor=InlineExecutor()).attach(engine)
        engine.start_session()
        res = decide(engine, "B")
        assert res.accepted
        assert channel.message == FALLBACK_ERROR
        assert not channel.thinking

    def test_closed_executor_still_lets_the_decision_through(self, engine, advisor):
        channel = AdvisoryChannel(advisor).attach(engine)
        channel.shutdown(wait=True)
        engine.start_session()

        res = decide(engine, "C")
        assert res.accepted
        assert engine.state.stage == Stage.OFFER
        assert (engine.state.cash, engine.state.brand) == (10_000, 25)
        assert not channel.thinking
        assert channel.message == FALLBACK_ERROR
        assert channel.pending is None
        assert advisor.calls == []

    def test_reply_never_touches_game_state(self, engine, channel):
        engine.start_session()
        decide(engine, "C")
        s = engine.state
        assert (s.cash, s.brand, s.stage) == (10_000, 25, Stage.OFFER)


class TestStaleReplies:
    def test_older_reply_is_dropped(self, engine, advisor):
        ex = ManualExecutor()
        channel = AdvisoryChannel(advisor, executor=ex).attach(engine)
        engine.start_session()

        decide(engine, "C")      # stage 1
        decide(engine, "A")      # stage 2
        assert channel.thinking

        ex.run(1)
        assert channel.message == "Noted. (2)"
        assert not channel.thinking

        ex.run(0)                # late reply for stage 1
        assert channel.message == "Noted. (2)"
        assert channel.stale_dropped == 1

    def test_reply_after_reset_is_dropped(self, engine, advisor):
        ex = ManualExecutor()
        channel = AdvisoryChannel(advisor, executor=ex).attach(engine)
        engine.start_session()
        decide(engine, "C")
        ex.start(0)              # already in flight, cannot be cancelled
        engine.reset_session()

        ex.run(0)
        assert channel.message == IDLE_MESSAGE
        assert not channel.thinking

    def test_pending_cancelled_on_reset(self, engine, advisor):
        ex = ManualExecutor()
        channel = AdvisoryChannel(advisor, executor=ex).attach(engine)
        engine.start_session()
        decide(engine, "C")
        assert channel.pending is ex.jobs[0][0]

        engine.reset_session()
        assert ex.jobs[0][0].cancelled()
        assert channel.pending is None


class TestThreadPool:
    def test_real_executor_delivers(self, engine):
        release = threading.Event()

        class SlowAdvisor:
            def request_feedback(self, stage, choice_label, result_label):
                release.wait(timeout=5)
                return f"late {stage}"

        channel = AdvisoryChannel(SlowAdvisor()).attach(engine)
        try:
            engine.start_session()
            decide(engine, "C")
            assert channel.thinking
            # the game keeps moving while the consultant thinks
            decide(engine, "A")
            assert engine.state.stage == Stage.MESSAGING

            fut = channel.pending
            release.set()
            fut.result(timeout=5)
            channel.shutdown(wait=True)
            assert channel.message == "late 2"
        finally:
            release.set()
            channel.shutdown(wait=True)
