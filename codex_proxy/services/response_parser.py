#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
响应解析器模块 - 把后端 Responses SSE 响应体还原为一段助手文本

只关心两类事件：
- response.output_text.delta: 增量文本
- response.output_item.done: 完整输出项，在没有任何增量时作为兜底
其它事件一律忽略。
"""

import enum
from dataclasses import dataclass, field
from typing import List, Optional, Union

from ..errors import EmptyContent
from ..helpers import json_lib


DATA_PREFIX = "data: "
DONE_MARKER = "[DONE]"

DELTA_EVENT = "response.output_text.delta"
ITEM_DONE_EVENT = "response.output_item.done"


@dataclass(frozen=True)
class OutputTextDelta:
    """One incremental text fragment."""
    delta: str


@dataclass(frozen=True)
class OutputItemDone:
    """A completed output item; `texts` are the `text` values of its content entries."""
    texts: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class UnknownEvent:
    """Any event kind the extractor does not act on."""
    type: Optional[str] = None


BackendEvent = Union[OutputTextDelta, OutputItemDone, UnknownEvent]


class ExtractionState(enum.Enum):
    NO_CONTENT = "no_content"
    HAVE_DELTA = "have_delta"
    HAVE_FALLBACK_ONLY = "have_fallback_only"


def _parse_delta(event: dict) -> BackendEvent:
    delta = event.get("delta")
    if isinstance(delta, str):
        return OutputTextDelta(delta=delta)
    return UnknownEvent(type=DELTA_EVENT)


def _parse_item_done(event: dict) -> BackendEvent:
    item = event.get("item")
    content = item.get("content") if isinstance(item, dict) else None
    if not isinstance(content, list):
        return OutputItemDone()

    texts = []
    for entry in content:
        text = entry.get("text") if isinstance(entry, dict) else None
        if isinstance(text, str):
            texts.append(text)
    return OutputItemDone(texts=texts)


_EVENT_PARSERS = {
    DELTA_EVENT: _parse_delta,
    ITEM_DONE_EVENT: _parse_item_done,
}


def parse_event(payload: str) -> Optional[BackendEvent]:
    """Decode one `data:` payload. Returns None when it is not well-formed JSON."""
    try:
        event = json_lib.loads(payload)
    except ValueError:
        return None

    if not isinstance(event, dict):
        return UnknownEvent()

    event_type = event.get("type")
    parser = _EVENT_PARSERS.get(event_type) if isinstance(event_type, str) else None
    if parser is None:
        return UnknownEvent(type=event_type if isinstance(event_type, str) else None)
    return parser(event)


def iter_events(raw_body: str):
    """Yield parsed events from a buffered SSE body, stopping at `data: [DONE]`."""
    for line in raw_body.split("\n"):
        line = line.rstrip("\r")
        if not line.startswith(DATA_PREFIX):
            continue

        payload = line[len(DATA_PREFIX):]
        if payload == DONE_MARKER:
            break

        event = parse_event(payload)
        if event is not None:
            yield event


class ResponseExtractor:
    """
    累积一个后端响应体中的助手文本

    一旦出现任何 delta，结果就是所有 delta 的拼接（item-done 文本被丢弃）；
    否则使用 item-done 文本的拼接；两者都没有时抛出 EmptyContent。
    """

    def __init__(self) -> None:
        self.state = ExtractionState.NO_CONTENT
        self._delta_parts: List[str] = []
        self._fallback_parts: List[str] = []

    def feed(self, event: BackendEvent) -> None:
        if isinstance(event, OutputTextDelta):
            self.state = ExtractionState.HAVE_DELTA
            self._delta_parts.append(event.delta)
        elif isinstance(event, OutputItemDone):
            self._fallback_parts.extend(event.texts)
            if self.state is ExtractionState.NO_CONTENT and "".join(event.texts):
                self.state = ExtractionState.HAVE_FALLBACK_ONLY
        # UnknownEvent: nothing to do

    def result(self) -> str:
        if self.state is ExtractionState.HAVE_DELTA:
            text = "".join(self._delta_parts)
        elif self.state is ExtractionState.HAVE_FALLBACK_ONLY:
            text = "".join(self._fallback_parts)
        else:
            text = ""

        if not text:
            raise EmptyContent()
        return text


def extract(raw_body: str) -> str:
    """Parse a backend event-stream body into the assistant text."""
    extractor = ResponseExtractor()
    for event in iter_events(raw_body):
        extractor.feed(event)
    return extractor.result()
