"""Packing component values into protobuf ``Any`` messages.

Intermediate values such as artifacts are stored as ``Any`` messages. A
value qualifies if it is a protobuf message itself or if it can produce one
through a ``proto()`` method.
"""

from __future__ import annotations

from typing import Any, Iterable, Protocol, runtime_checkable

from google.protobuf import any_pb2
from google.protobuf.message import Message

__all__ = [
    "ProtoMarshaler",
    "ProtoError",
    "proto_any",
    "proto_any_slice",
    "proto_any_unmarshal",
]


@runtime_checkable
class ProtoMarshaler(Protocol):
    """A value that can be represented as a protobuf message."""

    def proto(self) -> Message:
        """Return the message; it may already be an ``Any``."""


class ProtoError(Exception):
    """A value could not be converted as requested (failed precondition)."""


def _message_of(m: Any) -> Message | None:
    if isinstance(m, Message):
        return m
    if isinstance(m, ProtoMarshaler):
        return m.proto()
    return None


def proto_any(m: Any) -> any_pb2.Any | None:
    """Return ``m`` packed in an ``Any``, or None if it is not convertible."""
    msg = _message_of(m)
    if msg is None:
        return None
    if isinstance(msg, any_pb2.Any):
        return msg
    result = any_pb2.Any()
    result.Pack(msg)
    return result


def proto_any_slice(m: Iterable[Any]) -> list[any_pb2.Any | None]:
    """Pack each value of ``m`` with :func:`proto_any`."""
    return [proto_any(item) for item in m]


def proto_any_unmarshal(m: Any, out: Message) -> None:
    """Unpack the ``Any`` that ``m`` holds into ``out``."""
    msg = _message_of(m)
    if msg is None:
        raise ProtoError(
            f"expected value to be a proto message, got {type(m).__name__}"
        )
    if not isinstance(msg, any_pb2.Any):
        raise ProtoError(f"expected Any, got {type(msg).__name__}")
    if not msg.Unpack(out):
        raise ProtoError(
            f"mismatched message type: got {msg.type_url!r}, "
            f"want {out.DESCRIPTOR.full_name!r}"
        )