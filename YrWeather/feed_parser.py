"""Incremental XML event stream used to read the place and weather feeds.

Documents are fed to a pull parser chunk by chunk and consumed elements are
cleared and detached from their parent as soon as they close, so the whole
tree is never held in memory.
Callers pass an ``until`` predicate to stop reading as soon as they have
what they need.
"""
import xml.etree.ElementTree as ET
from typing import Callable, Dict, Iterable, Iterator, List, NamedTuple, Optional

START = "start"
END = "end"


class FeedEvent(NamedTuple):
    """A single parser event with the element's local (un-namespaced) name."""
    event: str
    name: str
    attrib: Dict[str, str]
    text: Optional[str]  # only set on END events


def local_name(tag: str) -> str:
    """Strip a ``{namespace}`` prefix from an element tag."""
    return tag.rsplit("}", 1)[-1]


def _read_events(parser: ET.XMLPullParser, open_elements: List[ET.Element]) -> Iterator[FeedEvent]:
    for event, elem in parser.read_events():
        if event == START:
            open_elements.append(elem)
            yield FeedEvent(START, local_name(elem.tag), dict(elem.attrib), None)
        else:
            open_elements.pop()
            text = elem.text.strip() if elem.text else None
            yield FeedEvent(END, local_name(elem.tag), dict(elem.attrib), text)
            # Detach from the parent so closed siblings don't pile up under the root
            if open_elements:
                open_elements[-1].remove(elem)
            elem.clear()


def iter_events(
    chunks: Iterable[bytes],
    until: Optional[Callable[[], bool]] = None,
) -> Iterator[FeedEvent]:
    """
    Yield start/end events for a document delivered as byte chunks.

    Args:
        chunks: Raw document chunks (e.g. ``response.iter_content()``)
        until: Checked after every event; iteration stops once it returns True

    Raises:
        xml.etree.ElementTree.ParseError: If the document is malformed or empty
    """
    parser = ET.XMLPullParser(events=(START, END))
    open_elements: List[ET.Element] = []
    for chunk in chunks:
        if not chunk:
            continue
        parser.feed(chunk)
        for feed_event in _read_events(parser, open_elements):
            yield feed_event
            if until is not None and until():
                return
    parser.close()
    for feed_event in _read_events(parser, open_elements):
        yield feed_event
        if until is not None and until():
            return
