"""
Flex Layout
===========

A small flexbox-style layout engine for the vector backend.

Supports row and column containers with gap, padding, borders, margins
(negative margins included), fixed and percentage widths, ``flex_grow`` on
rows, ``align_items`` and ``justify_content``, absolutely positioned children
with insets, and wrapped text leaves measured by a pluggable measurer.
"""

from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Protocol, Tuple
import re

from hcrm.core.exceptions import CardRenderError
from hcrm.models.schemas import AssetName

Edges = Tuple[float, float, float, float]  # top, right, bottom, left

_TOKEN_RE = re.compile(r"\s+|[A-Za-z0-9_\-.,:;!?'\"/%()]+|.", re.DOTALL)


def edges(*values: float) -> Edges:
    """Expand CSS-style shorthand (1 to 4 values) into top, right, bottom, left."""
    if len(values) == 1:
        return (values[0],) * 4
    if len(values) == 2:
        return (values[0], values[1], values[0], values[1])
    if len(values) == 3:
        return (values[0], values[1], values[2], values[1])
    if len(values) == 4:
        return values  # type: ignore[return-value]
    raise ValueError(f"Expected 1 to 4 edge values, got {len(values)}")


class TextMeasurer(Protocol):
    """Measures the advance width of a single line of text."""

    def measure(self, font: AssetName, size: float, letter_spacing: float, text: str) -> float: ...


@dataclass
class Style:
    """Layout and paint properties of a node."""

    direction: str = "column"  # row | column
    width: Optional[float] = None
    height: Optional[float] = None
    width_percent: Optional[float] = None
    min_width: Optional[float] = None
    padding: Edges = (0.0, 0.0, 0.0, 0.0)
    margin: Edges = (0.0, 0.0, 0.0, 0.0)
    gap: float = 0.0
    align_items: str = "stretch"  # stretch | center | start | end
    justify_content: str = "start"  # start | center | end | space-between
    flex_grow: float = 0.0

    position: str = "relative"  # relative | absolute
    top: Optional[float] = None
    right: Optional[float] = None
    bottom: Optional[float] = None
    left: Optional[float] = None

    background: Optional[str] = None
    background_image: Optional[bytes] = None
    border_width: float = 0.0
    border_color: Optional[str] = None
    opacity: float = 1.0

    font: Optional[AssetName] = None
    font_size: float = 16.0
    color: str = "#ffffff"
    letter_spacing: float = 0.0
    line_height: float = 1.2
    text_align: str = "left"  # left | center | right
    italic: bool = False

    @property
    def is_absolute(self) -> bool:
        return self.position == "absolute"

    @property
    def inset(self) -> Edges:
        """Padding plus border on each side."""
        t, r, b, l = self.padding
        bw = self.border_width
        return (t + bw, r + bw, b + bw, l + bw)


@dataclass
class Box:
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0


@dataclass
class Node:
    """A layout node; text nodes are leaves."""

    style: Style = field(default_factory=Style)
    children: List["Node"] = field(default_factory=list)
    text: Optional[str] = None
    key: Optional[str] = None

    # Computed by the layout engine
    box: Box = field(default_factory=Box)
    lines: List[str] = field(default_factory=list)

    def walk(self) -> Iterator["Node"]:
        """Pre-order traversal."""
        yield self
        for child in self.children:
            yield from child.walk()

    def find(self, key: str) -> Optional["Node"]:
        for node in self.walk():
            if node.key == key:
                return node
        return None


class LayoutError(CardRenderError):
    """Exception raised when a tree cannot be laid out."""

    pass


class LayoutEngine:
    """Computes absolute border boxes for every node of a tree."""

    def __init__(self, measurer: TextMeasurer):
        self.measurer = measurer

    def compute(self, root: Node, width: float) -> Node:
        root_width = root.style.width if root.style.width is not None else width
        _, root_height = self._measure(root, root_width)
        self._place(root, 0.0, 0.0, root_width, root_height)
        return root

    # Measurement

    def _text_width(self, node: Node, text: str) -> float:
        s = node.style
        if s.font is None:
            raise LayoutError(f"Text node {node.key or text!r} has no font")
        return self.measurer.measure(s.font, s.font_size, s.letter_spacing, text)

    def _wrap(self, node: Node, max_width: float) -> Tuple[List[str], float]:
        """Greedy line wrapping; returns the lines and the widest line width."""
        lines: List[str] = []
        for paragraph in (node.text or "").split("\n"):
            line = ""
            for token in _TOKEN_RE.findall(paragraph):
                candidate = line + token
                if not line or self._text_width(node, candidate.rstrip()) <= max_width:
                    line = candidate
                    continue
                lines.append(line.rstrip())
                token = token.lstrip()
                line = ""
                for char in token:
                    if line and self._text_width(node, line + char) > max_width:
                        lines.append(line)
                        line = ""
                    line += char
            lines.append(line.rstrip())

        # a first token wider than the line is split by character too
        fitted: List[str] = []
        for line in lines:
            if len(line) > 1 and self._text_width(node, line) > max_width:
                chunk = ""
                for char in line:
                    if chunk and self._text_width(node, chunk + char) > max_width:
                        fitted.append(chunk)
                        chunk = ""
                    chunk += char
                fitted.append(chunk)
            else:
                fitted.append(line)

        widest = max((self._text_width(node, line) for line in fitted), default=0.0)
        return fitted, widest

    def _resolve_width(self, node: Node, container_width: float) -> Optional[float]:
        s = node.style
        if s.width is not None:
            return s.width
        if s.width_percent is not None:
            return container_width * s.width_percent / 100.0
        return None

    def _measure(self, node: Node, available_width: float) -> Tuple[float, float]:
        """Border-box size of a node given the width available to it."""
        s = node.style
        top, right, bottom, left = s.inset
        own_width = self._resolve_width(node, available_width)
        inner_available = max((own_width if own_width is not None else available_width) - left - right, 0.0)

        if node.text is not None:
            lines, content_width = self._wrap(node, inner_available)
            content_height = len(lines) * s.font_size * s.line_height
        else:
            flow = [child for child in node.children if not child.style.is_absolute]
            sizes = []
            for child in flow:
                mt, mr, mb, ml = child.style.margin
                w, h = self._measure(child, inner_available - ml - mr)
                sizes.append((w + ml + mr, h + mt + mb))
            gaps = s.gap * max(len(flow) - 1, 0)
            if s.direction == "row":
                content_width = sum(w for w, _ in sizes) + gaps
                content_height = max((h for _, h in sizes), default=0.0)
            else:
                content_width = max((w for w, _ in sizes), default=0.0)
                content_height = sum(h for _, h in sizes) + gaps

        width = own_width if own_width is not None else content_width + left + right
        if s.min_width is not None:
            width = max(width, s.min_width)
        height = s.height if s.height is not None else content_height + top + bottom
        return width, height

    # Placement

    def _justify(self, justify: str, free: float, count: int) -> Tuple[float, float]:
        """Leading offset and extra spacing between items."""
        free = max(free, 0.0)
        if justify == "center":
            return free / 2.0, 0.0
        if justify == "end":
            return free, 0.0
        if justify == "space-between" and count > 1:
            return 0.0, free / (count - 1)
        return 0.0, 0.0

    def _cross_offset(self, align: str, free: float) -> float:
        if align == "center":
            return free / 2.0
        if align == "end":
            return free
        return 0.0

    def _place(self, node: Node, x: float, y: float, width: float, height: float) -> None:
        node.box = Box(x, y, width, height)
        s = node.style
        top, right, bottom, left = s.inset
        cx, cy = x + left, y + top
        cw, ch = max(width - left - right, 0.0), max(height - top - bottom, 0.0)

        if node.text is not None:
            node.lines, _ = self._wrap(node, cw)
            return

        flow = [child for child in node.children if not child.style.is_absolute]
        if s.direction == "row":
            self._place_row(node, flow, cx, cy, cw, ch)
        else:
            self._place_column(node, flow, cx, cy, cw, ch)

        for child in node.children:
            if child.style.is_absolute:
                self._place_absolute(child, x, y, width, height)

    def _place_column(
        self, node: Node, flow: List[Node], cx: float, cy: float, cw: float, ch: float
    ) -> None:
        s = node.style
        items = []
        for child in flow:
            mt, mr, mb, ml = child.style.margin
            slot = cw - ml - mr
            child_width = self._resolve_width(child, cw)
            if child_width is None:
                if s.align_items == "stretch":
                    child_width = slot
                else:
                    child_width = min(self._measure(child, slot)[0], slot)
            child_height = (
                child.style.height
                if child.style.height is not None
                else self._measure(child, child_width)[1]
            )
            items.append((child, child_width, child_height))

        used = sum(h + c.style.margin[0] + c.style.margin[2] for c, _, h in items)
        used += s.gap * max(len(items) - 1, 0)
        lead, between = self._justify(s.justify_content, ch - used, len(items))

        cursor = cy + lead
        for child, child_width, child_height in items:
            mt, mr, mb, ml = child.style.margin
            cursor += mt
            offset = self._cross_offset(s.align_items, cw - ml - mr - child_width)
            self._place(child, cx + ml + offset, cursor, child_width, child_height)
            cursor += child_height + mb + s.gap + between

    def _place_row(
        self, node: Node, flow: List[Node], cx: float, cy: float, cw: float, ch: float
    ) -> None:
        s = node.style
        widths = []
        for child in flow:
            mt, mr, mb, ml = child.style.margin
            child_width = self._resolve_width(child, cw)
            if child_width is None:
                child_width = 0.0 if child.style.flex_grow else self._measure(child, cw - ml - mr)[0]
            widths.append(child_width)

        gaps = s.gap * max(len(flow) - 1, 0)
        margins = sum(c.style.margin[1] + c.style.margin[3] for c in flow)
        free = cw - sum(widths) - margins - gaps
        grow_total = sum(c.style.flex_grow for c in flow)
        if free > 0 and grow_total > 0:
            widths = [
                w + free * c.style.flex_grow / grow_total for c, w in zip(flow, widths)
            ]
            free = 0.0
        lead, between = self._justify(s.justify_content, free, len(flow))

        cursor = cx + lead
        for child, child_width in zip(flow, widths):
            mt, mr, mb, ml = child.style.margin
            slot = ch - mt - mb
            if child.style.height is not None:
                child_height = child.style.height
            elif s.align_items == "stretch":
                child_height = slot
            else:
                child_height = self._measure(child, child_width)[1]
            offset = self._cross_offset(s.align_items, slot - child_height)
            cursor += ml
            self._place(child, cursor, cy + mt + offset, child_width, child_height)
            cursor += child_width + mr + s.gap + between

    def _place_absolute(
        self, child: Node, x: float, y: float, width: float, height: float
    ) -> None:
        cs = child.style
        child_width = self._resolve_width(child, width)
        if child_width is None:
            if cs.left is not None and cs.right is not None:
                child_width = width - cs.left - cs.right
            else:
                child_width = self._measure(child, width)[0]
        if cs.height is not None:
            child_height = cs.height
        elif cs.top is not None and cs.bottom is not None:
            child_height = height - cs.top - cs.bottom
        else:
            child_height = self._measure(child, child_width)[1]

        if cs.left is not None:
            child_x = x + cs.left
        elif cs.right is not None:
            child_x = x + width - cs.right - child_width
        else:
            child_x = x
        if cs.top is not None:
            child_y = y + cs.top
        elif cs.bottom is not None:
            child_y = y + height - cs.bottom - child_height
        else:
            child_y = y
        self._place(child, child_x, child_y, child_width, child_height)


def compute_layout(root: Node, width: float, measurer: TextMeasurer) -> Node:
    """Lay out a tree at the given width; boxes are written onto the nodes."""
    return LayoutEngine(measurer).compute(root, width)
