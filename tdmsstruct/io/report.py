from __future__ import annotations

from dataclasses import dataclass, field
import json
import math
import re
from typing import Any, Iterator, Protocol, TextIO, Union
from xml.sax.saxutils import escape

from tdmsstruct.core.exceptions import ReportError


ReportValue = Union[int, float, bool, str, bytes]

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8" standalone="no" ?>'

# Characters XML 1.0 does not allow, even as character references
_XML_INVALID_CHARS = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\ufffe\uffff]")


class ReportSink(Protocol):
    """Protocol for ordered, nestable name -> value recorders.

    Every `open` must be matched by exactly one `close` (LIFO). The decoder
    only writes to a sink, it never reads back.
    """

    def open(self, name: str) -> None:
        ...

    def close(self) -> None:
        ...

    def set(self, name: str, value: ReportValue) -> None:
        ...

    def finish(self, *, force: bool = False) -> None:
        ...


def format_value(value: ReportValue) -> str:
    """Render a leaf value as text.

    Booleans render as 1/0, bytes as lower-case hex.
    """
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).hex()
    if isinstance(value, float):
        return repr(value)
    return str(value)


class _NestingSink:
    """Bookkeeping of open levels shared by the concrete sinks."""

    def __init__(self) -> None:
        self._open: list[str] = []
        self._finished = False

    @property
    def depth(self) -> int:
        return len(self._open)

    def open(self, name: str) -> None:
        self._check_active()
        self._on_open(name)
        self._open.append(name)

    def close(self) -> None:
        self._check_active()
        if not self._open:
            raise ReportError("close() called without a matching open()")
        name = self._open.pop()
        self._on_close(name)

    def set(self, name: str, value: ReportValue) -> None:
        self._check_active()
        self._on_set(name, value)

    def finish(self, *, force: bool = False) -> None:
        """Finalise the output.

        With `force`, levels still open (e.g. after a failed run) are closed
        first; otherwise unbalanced nesting raises ReportError.
        """
        if self._finished:
            return
        if self._open and not force:
            raise ReportError(f"Unbalanced report, still open: {'/'.join(self._open)}")
        while self._open:
            self.close()
        self._on_finish()
        self._finished = True

    def _check_active(self) -> None:
        if self._finished:
            raise ReportError("Report already finished")

    # ---- hooks ----
    def _on_open(self, name: str) -> None:
        ...

    def _on_close(self, name: str) -> None:
        ...

    def _on_set(self, name: str, value: ReportValue) -> None:
        ...

    def _on_finish(self) -> None:
        ...


class XmlReportSink(_NestingSink):
    """Streams the report as indented XML, one element per line."""

    def __init__(self, stream: TextIO, *, indent: str = "  "):
        super().__init__()
        self._stream = stream
        self._indent = indent
        self._stream.write(XML_DECLARATION + "\n")

    def _prefix(self) -> str:
        return self._indent * self.depth

    def _on_open(self, name: str) -> None:
        self._stream.write(f"{self._prefix()}<{name}>\n")

    def _on_close(self, name: str) -> None:
        # depth already reflects the popped level
        self._stream.write(f"{self._prefix()}</{name}>\n")

    def _on_set(self, name: str, value: ReportValue) -> None:
        text = escape(_XML_INVALID_CHARS.sub("\ufffd", format_value(value)))
        self._stream.write(f"{self._prefix()}<{name}>{text}</{name}>\n")

    def _on_finish(self) -> None:
        self._stream.flush()


@dataclass(slots=True)
class ReportNode:
    """One node of an in-memory report: a leaf (value) or a level (children)."""
    name: str
    value: ReportValue | None = None
    children: list["ReportNode"] = field(default_factory=list, repr=False)

    @property
    def is_leaf(self) -> bool:
        return not self.children and self.value is not None

    def __iter__(self) -> Iterator["ReportNode"]:
        return iter(self.children)

    def find(self, name: str) -> "ReportNode | None":
        for child in self.children:
            if child.name == name:
                return child
        return None

    def find_all(self, name: str) -> list["ReportNode"]:
        return [child for child in self.children if child.name == name]

    def get(self, name: str, default: Any = None) -> Any:
        node = self.find(name)
        return default if node is None else node.value

    def lookup(self, path: str) -> "ReportNode":
        """Follow a '/'-separated path of first-matching child names."""
        node = self
        for part in path.split("/"):
            found = node.find(part)
            if found is None:
                raise KeyError(f"No node '{part}' below '{node.name}' (path '{path}')")
            node = found
        return node

    def leaves(self) -> list[tuple[str, ReportValue | None]]:
        """Depth-first list of (slash-joined path, value) for every leaf."""
        out: list[tuple[str, ReportValue | None]] = []

        def _walk(node: ReportNode, prefix: str) -> None:
            for child in node.children:
                path = f"{prefix}/{child.name}"
                if child.children:
                    _walk(child, path)
                else:
                    out.append((path, child.value))

        _walk(self, self.name)
        return out


class TreeReportSink(_NestingSink):
    """Records the report as a ReportNode tree."""

    def __init__(self) -> None:
        super().__init__()
        self.root = ReportNode(name="")
        self._stack: list[ReportNode] = [self.root]

    def _on_open(self, name: str) -> None:
        node = ReportNode(name=name)
        self._stack[-1].children.append(node)
        self._stack.append(node)

    def _on_close(self, name: str) -> None:
        self._stack.pop()

    def _on_set(self, name: str, value: ReportValue) -> None:
        self._stack[-1].children.append(ReportNode(name=name, value=value))

    @property
    def document(self) -> ReportNode:
        """The single top-level node (``file`` for a decoded TDMS file)."""
        if len(self.root.children) != 1:
            raise ReportError(f"Expected one top-level node, found {len(self.root.children)}")
        return self.root.children[0]


# Levels whose children are rendered as a JSON array.
JSON_LIST_LEVELS = frozenset(
    {
        "segments",
        "objects",
        "properties",
        "channels",
        "format_changing_scalers",
        "data_with_size_vector",
    }
)


def _json_leaf(value: ReportValue | None) -> Any:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).hex()
    if isinstance(value, float) and not math.isfinite(value):
        # NaN and infinities have no JSON literal
        return repr(value)
    return value


class _RepeatedList(list):
    """List built from repeated child names, distinguishable from list values."""
    _repeated = True


def node_to_json(node: ReportNode) -> Any:
    if node.name in JSON_LIST_LEVELS:
        return [node_to_json(child) for child in node.children]
    if not node.children:
        return _json_leaf(node.value) if node.value is not None else {}

    out: dict[str, Any] = {}
    for child in node.children:
        value = node_to_json(child)
        if child.name in out:
            existing = out[child.name]
            if isinstance(existing, list) and getattr(existing, "_repeated", False):
                existing.append(value)
            else:
                out[child.name] = _RepeatedList([existing, value])
        else:
            out[child.name] = value
    return out


class JsonReportSink(TreeReportSink):
    """Collects the report in memory and writes it as JSON on finish()."""

    def __init__(self, stream: TextIO, *, indent: int = 2):
        super().__init__()
        self._stream = stream
        self._indent = indent

    def _on_finish(self) -> None:
        doc = {child.name: node_to_json(child) for child in self.root.children}
        json.dump(doc, self._stream, indent=self._indent, ensure_ascii=False, allow_nan=False)
        self._stream.write("\n")
        self._stream.flush()


class NullReportSink(_NestingSink):
    """Discards every value; still checks that nesting is balanced."""
