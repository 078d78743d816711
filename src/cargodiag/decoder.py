"""Decoder for cargo's ``--message-format=json`` output.

Cargo writes one JSON object per line, mixing compiler messages with
artifact and progress records, and a build script or a proc macro may print
arbitrary text to the same stream. Each line is decoded on its own. A line
that fails to decode is skipped and does not stop the lines after it.
"""

import json
import logging
from collections.abc import Iterator

from pydantic import ValidationError

from cargodiag.models import Message, MessageRecord, OtherRecord, StreamRecord

logger = logging.getLogger(__name__)


def _validate_message(data: object) -> Message:
    """Validate a message tree bottom-up without recursing into ``children``.

    Nodes are collected in pre-order and validated in reverse, so every
    child is a Message instance by the time its parent is validated.

    Raises:
        ValidationError: If any node of the tree is malformed.
    """
    order: list[object] = []
    pending = [data]
    while pending:
        node = pending.pop()
        order.append(node)
        children = node.get("children") if isinstance(node, dict) else None
        if isinstance(children, list):
            pending.extend(children)

    built: dict[int, Message] = {}
    for node in reversed(order):
        fields = node
        if isinstance(node, dict) and isinstance(node.get("children"), list):
            fields = {**node, "children": [built[id(child)] for child in node["children"]]}
        built[id(node)] = Message.model_validate(fields)
    return built[id(data)]


def decode_line(line: str) -> StreamRecord | None:
    """Decode a single line of cargo output.

    Args:
        line: One line of output, with or without its trailing newline.

    Returns:
        A MessageRecord for compiler messages, an OtherRecord for any other
        JSON object, or None when the line is not a record at all.
    """
    line = line.strip()
    if not line:
        return None

    try:
        data = json.loads(line)
    except json.JSONDecodeError as e:
        logger.debug(f"Skipping non-JSON line: {e}")
        return None
    except RecursionError:
        logger.debug("Skipping line nested too deeply to parse")
        return None

    if not isinstance(data, dict):
        logger.debug(f"Skipping JSON line that is not an object: {type(data).__name__}")
        return None

    if "message" not in data:
        reason = data.get("reason")
        return OtherRecord(reason=reason if isinstance(reason, str) else None)

    try:
        message = _validate_message(data["message"])
    except ValidationError as e:
        logger.debug(f"Skipping record with malformed message: {e.error_count()} errors")
        return None

    return MessageRecord(message=message)


def decode_stream(text: str) -> Iterator[StreamRecord]:
    """Lazily decode newline-delimited cargo output.

    Args:
        text: The full captured stdout of a cargo invocation.

    Yields:
        Decoded records in stream order. Undecodable lines are dropped.
    """
    for line in text.split("\n"):
        record = decode_line(line)
        if record is not None:
            yield record
