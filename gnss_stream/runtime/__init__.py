"""Runtime scheduling, output streams and network fan-out."""

from gnss_stream.runtime.fanout import FanoutAdapter
from gnss_stream.runtime.scheduler import Scheduler, SchedulerState
from gnss_stream.runtime.streams import OutputStream, StreamSubscription

__all__ = [
    "FanoutAdapter",
    "OutputStream",
    "Scheduler",
    "SchedulerState",
    "StreamSubscription",
]
