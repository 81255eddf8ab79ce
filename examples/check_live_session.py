"""Quick check for the threaded counting pipeline.

Replays a JSONL landmark recording as if it were a live camera: a producer
thread offers frames to a channel at a fixed rate while the session worker
counts reps and prints every change in count or instruction.

    python examples/check_live_session.py recordings/session.jsonl --fps 30
"""

import argparse
import threading
import time
from pathlib import Path

from pushcount.session import CounterSession, FrameChannel, SessionSnapshot
from pushcount.vision.cache import load_landmark_frames


def main() -> None:
    p = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    p.add_argument("recording", help="JSONL landmark recording")
    p.add_argument("--fps", type=float, default=30.0, help="Playback rate (default: 30)")
    p.add_argument("--queue", type=int, default=2, help="Channel capacity before stale frames drop")
    args = p.parse_args()

    last = {}

    def show(snap: SessionSnapshot) -> None:
        key = (snap.rep_count, snap.instruction)
        if last.get("key") != key:
            last["key"] = key
            print(f"frame {snap.frames_processed:5d}: reps={snap.rep_count} {snap.instruction}")

    channel = FrameChannel(maxsize=args.queue)
    session = CounterSession(on_update=show)
    session.start(channel)

    def produce() -> None:
        for frame in load_landmark_frames(Path(args.recording)):
            channel.offer(frame)
            time.sleep(1.0 / args.fps)
        channel.close()

    producer = threading.Thread(target=produce)
    producer.start()
    producer.join()
    session.join()

    print(f"Done. reps={session.snapshot().rep_count} dropped={channel.dropped}")


if __name__ == "__main__":
    main()
