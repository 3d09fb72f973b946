"""
Persistence sinks.

`Sink` is the closed set of variants the channel logger dispatches over when
clearing or reading back entries; adding a variant means extending those
`match` statements.
"""

from typing import Union

from .base import BaseSink
from .relational import RelationalSink
from .stream import StreamSink

Sink = Union[RelationalSink, StreamSink]

__all__ = ["BaseSink", "RelationalSink", "StreamSink", "Sink"]
