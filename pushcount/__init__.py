"""pushcount: push-up repetition counting from pose landmarks.

The package turns a stream of pose landmark frames into a rep count and a
coaching instruction. Pose extraction, replay of recordings and an HTTP
service sit around the counter.
"""

__all__ = [
    "cli",
    "config",
    "counter",
    "geometry",
    "landmarks",
    "session",
]

__version__ = "0.1.0"
