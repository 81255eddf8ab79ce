import unittest

from synthetic import pose_frame

from pushcount.counter import Phase, RepCounterState
from pushcount.landmarks import LandmarkFrame
from pushcount.session import ChannelClosed, CounterSession, FrameChannel, replay


def rep_frames(reps: int):
    frames = [pose_frame(170)]
    for _ in range(reps):
        frames += [pose_frame(120), pose_frame(80), pose_frame(120), pose_frame(170)]
    return frames


class FrameChannelTests(unittest.TestCase):
    def test_delivers_in_order_until_closed(self) -> None:
        channel = FrameChannel(maxsize=4)
        frames = [pose_frame(a) for a in (170, 80, 170)]
        for f in frames:
            self.assertTrue(channel.offer(f))
        channel.close()
        self.assertEqual(list(channel), frames)
        self.assertIsNone(channel.get(timeout=0.1))

    def test_full_channel_drops_oldest(self) -> None:
        channel = FrameChannel(maxsize=2)
        a, b, c = (LandmarkFrame.empty(timestamp_ms=t) for t in (1, 2, 3))
        channel.offer(a)
        channel.offer(b)
        self.assertFalse(channel.offer(c))
        channel.close()
        self.assertEqual([f.timestamp_ms for f in channel], [2, 3])
        self.assertEqual(channel.dropped, 1)

    def test_offer_after_close_raises(self) -> None:
        channel = FrameChannel()
        channel.close()
        channel.close()
        with self.assertRaises(ChannelClosed):
            channel.offer(LandmarkFrame.empty())

    def test_invalid_size(self) -> None:
        with self.assertRaises(ValueError):
            FrameChannel(maxsize=0)


class CounterSessionTests(unittest.TestCase):
    def test_process_publishes_snapshots(self) -> None:
        seen = []
        session = CounterSession(on_update=seen.append)
        for frame in rep_frames(2):
            session.process(frame)

        final = session.snapshot()
        self.assertEqual(final.rep_count, 2)
        self.assertEqual(final.instruction, "Go down!")
        self.assertIs(final.phase, Phase.UP)
        self.assertEqual(final.image_size, (480, 640))
        self.assertEqual(final.frames_processed, 9)
        self.assertEqual([s.rep_count for s in seen], [0, 0, 0, 0, 1, 1, 1, 1, 2])

    def test_worker_thread_drains_channel(self) -> None:
        channel = FrameChannel(maxsize=64)
        session = CounterSession()
        worker = session.start(channel)
        for frame in rep_frames(3):
            channel.offer(frame)
        channel.close()
        session.join(timeout=5)

        self.assertFalse(worker.is_alive())
        self.assertEqual(session.snapshot().rep_count, 3)

    def test_failing_callback_stops_worker_and_closes_channel(self) -> None:
        def explode(snap) -> None:
            raise RuntimeError("display gone")

        channel = FrameChannel()
        session = CounterSession(on_update=explode)
        with self.assertLogs("pushcount.session", level="ERROR") as logs:
            worker = session.start(channel)
            channel.offer(pose_frame(170))
            session.join(timeout=5)

        self.assertFalse(worker.is_alive())
        self.assertTrue(channel.closed)
        self.assertIn("counter session failed", logs.output[0])
        with self.assertRaises(ChannelClosed):
            channel.offer(pose_frame(80))

    def test_start_twice_raises(self) -> None:
        channel = FrameChannel()
        session = CounterSession()
        session.start(channel)
        try:
            with self.assertRaises(RuntimeError):
                session.start(channel)
        finally:
            channel.close()
            session.join(timeout=5)


class ReplayTests(unittest.TestCase):
    def test_replay_is_deterministic(self) -> None:
        frames = rep_frames(4) + [LandmarkFrame.empty(), pose_frame(80)]
        first = replay(frames)
        second = replay(frames)
        self.assertEqual(first, second)
        self.assertEqual(len(first), len(frames))
        self.assertEqual(first[-2].rep_count, 4)
        self.assertEqual((first[-1].rep_count, first[-1].phase), (4, Phase.DOWN))

    def test_replay_resumes_from_state(self) -> None:
        mid = RepCounterState(rep_count=7, phase=Phase.DOWN)
        states = replay([pose_frame(170)], initial=mid)
        self.assertEqual(states[-1].rep_count, 8)

    def test_replay_of_nothing(self) -> None:
        self.assertEqual(replay([]), [])


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
