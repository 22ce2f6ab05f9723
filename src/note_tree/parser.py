"""Markdown parser producing a note tree with source offsets.

This module splits a note body into an optional YAML frontmatter block and
content blocks (headings, paragraphs, fenced and indented code, HTML,
thematic breaks), then scans headings and paragraphs for inline images and
links. HTML blocks follow the CommonMark start conditions, so a paragraph
that merely opens with an inline tag or an autolink is still scanned.
Offsets are recorded against the original body so nodes can be replaced in
place.

Only the subset of Markdown needed to locate references is recognised:
code blocks and code spans are skipped, backslash escapes are honoured and
link labels are scanned recursively so images nested in links are found.
"""

import re
from typing import Callable, Iterator, List, Optional, Tuple

from .models import Node, NodeType, Position

# YAML frontmatter block at the very top of the body (between --- lines)
FRONTMATTER_PATTERN = re.compile(
    r'\A---[ \t]*\r?\n(?:(.*?)\r?\n)?---[ \t]*(?=\r?\n|\Z)',
    re.DOTALL
)

FENCE_PATTERN = re.compile(r'^[ \t]*(`{3,}|~{3,})')
INDENTED_CODE_PATTERN = re.compile(r'^(?: {4}| {0,3}\t)')
INDENT_PATTERN = re.compile(r'^(?: {0,3}\t| {1,4})', re.MULTILINE)
LIST_ITEM_PATTERN = re.compile(r'^ {0,3}(?:[-+*]|\d{1,9}[.)])(?:[ \t]|$)')
HEADING_PATTERN = re.compile(r'^ {0,3}(#{1,6})(?:[ \t]|$)')
THEMATIC_BREAK_PATTERN = re.compile(r'^ {0,3}([-*_])(?:[ \t]*\1){2,}[ \t]*$')
AUTOLINK_PATTERN = re.compile(r'<[A-Za-z][A-Za-z0-9+.-]{1,31}:[^<>\s]*>')
ESCAPE_PATTERN = re.compile(r'\\([!-/:-@\[-`{-~])')

# HTML blocks closed by a marker, as (opening, closing) pairs
HTML_DELIMITED_BLOCKS = [
    (re.compile(r'^ {0,3}<(?:script|pre|style|textarea)(?=[ \t>]|$)', re.IGNORECASE),
     re.compile(r'</(?:script|pre|style|textarea)>', re.IGNORECASE)),
    (re.compile(r'^ {0,3}<!--'), re.compile(r'-->')),
    (re.compile(r'^ {0,3}<\?'), re.compile(r'\?>')),
    (re.compile(r'^ {0,3}<![A-Za-z]'), re.compile(r'>')),
    (re.compile(r'^ {0,3}<!\[CDATA\['), re.compile(r'\]\]>')),
]

HTML_BLOCK_TAGS = frozenset("""
    address article aside base basefont blockquote body caption center col
    colgroup dd details dialog dir div dl dt fieldset figcaption figure footer
    form frame frameset h1 h2 h3 h4 h5 h6 head header hr html iframe legend li
    link main menu menuitem nav noframes ol optgroup option p param search
    section summary table tbody td tfoot th thead title tr track ul
""".split())
HTML_BLOCK_TAG_PATTERN = re.compile(r'^ {0,3}</?([A-Za-z][A-Za-z0-9]*)(?=[ \t>]|/>|$)')

# A lone complete open or closing tag on its line
HTML_TAG_LINE_PATTERN = re.compile(
    r'^ {0,3}(?:'
    r'<[A-Za-z][A-Za-z0-9-]*'
    r'(?:[ \t]+[A-Za-z_:][A-Za-z0-9_.:-]*'
    r'(?:[ \t]*=[ \t]*(?:[^\s"\'=<>`]+|\'[^\']*\'|"[^"]*"))?)*'
    r'[ \t]*/?>'
    r'|</[A-Za-z][A-Za-z0-9-]*[ \t]*>'
    r')[ \t]*$'
)

# Internal reference addresses: inkdrop://file:<id>, inkdrop://note:<id>, inkdrop://note/<id>
REFERENCE_URL_PATTERN = re.compile(r'^inkdrop://(file|note)[:/]([^/?#\s)]+)')

Predicate = Callable[[Node], bool]


def parse_reference_url(url: Optional[str]) -> Optional[str]:
    """Extract the document identifier from an internal reference address.

    Examples:
        >>> parse_reference_url("inkdrop://file:Sk3n9x")
        'file:Sk3n9x'
        >>> parse_reference_url("inkdrop://note/B1a2c3")
        'note:B1a2c3'
        >>> parse_reference_url("https://example.com/a.png") is None
        True
    """
    if not url:
        return None
    match = REFERENCE_URL_PATTERN.match(url)
    if not match:
        return None
    return f"{match.group(1)}:{match.group(2)}"


def is_image(node: Node) -> bool:
    return node.type is NodeType.IMAGE


def is_link(node: Node) -> bool:
    return node.type is NodeType.LINK


def is_reference(node: Node) -> bool:
    return node.is_reference


def find_nodes(tree: Node, predicate: Predicate, reverse: bool = False) -> Iterator[Node]:
    """Lazily yield nodes matching a predicate.

    Forward order is document pre-order. Reverse order is its exact mirror:
    later siblings first and descendants before their ancestors, so nodes
    come out in decreasing start offset. Every call starts a new traversal.

    Args:
        tree: Root of the traversal (included in the search)
        predicate: Function selecting the nodes to yield
        reverse: Yield in reverse document order

    Yields:
        Matching nodes
    """
    if reverse:
        yield from _walk_reverse(tree, predicate)
    else:
        yield from _walk_forward(tree, predicate)


def _walk_forward(node: Node, predicate: Predicate) -> Iterator[Node]:
    if predicate(node):
        yield node
    for child in node.children:
        yield from _walk_forward(child, predicate)


def _walk_reverse(node: Node, predicate: Predicate) -> Iterator[Node]:
    for child in reversed(node.children):
        yield from _walk_reverse(child, predicate)
    if predicate(node):
        yield node


def _format_destination(url: str) -> str:
    """Format a link destination, wrapping it in <> when required."""
    depth = 0
    balanced = True
    for ch in url:
        if ch == '(':
            depth += 1
        elif ch == ')':
            depth -= 1
            if depth < 0:
                balanced = False
                break
    if not url or not balanced or depth != 0 or re.search(r'[\s<>]', url):
        escaped = url.replace('<', '\\<').replace('>', '\\>')
        return f"<{escaped}>"
    return url


def _format_title(title: Optional[str]) -> str:
    if title is None:
        return ""
    escaped = title.replace('\\', '\\\\').replace('"', '\\"')
    return f' "{escaped}"'


def render_destination(url: str, title: Optional[str] = None) -> str:
    """Render the tail of a link or image from the closing bracket on.

    Example:
        >>> render_destination("./a.md", "A")
        '](./a.md "A")'
    """
    return f"]({_format_destination(url)}{_format_title(title)})"


def render_node(node: Node) -> str:
    """Serialize an image or link node back to Markdown.

    The label (alt text for images) is emitted as it appeared in the source.

    Raises:
        ValueError: If the node is not an image or link
    """
    if node.type is NodeType.IMAGE:
        return f"![{node.value}{render_destination(node.url or '', node.title)}"
    if node.type is NodeType.LINK:
        return f"[{node.value}{render_destination(node.url or '', node.title)}"
    raise ValueError(f"Cannot render node of type {node.type.value}")


def _unescape(text: str) -> str:
    return ESCAPE_PATTERN.sub(r'\1', text)


class NoteParser:
    """Parses note bodies into trees of Nodes.

    Example:
        >>> tree = NoteParser().parse("![a](inkdrop://file:X)")
        >>> [n.url for n in find_nodes(tree, is_image)]
        ['inkdrop://file:X']
    """

    def parse(self, body: str) -> Node:
        """Parse a note body.

        Args:
            body: Markdown source of the note

        Returns:
            Root node whose children are the frontmatter node (if any) followed
            by the content blocks
        """
        root = Node(type=NodeType.ROOT, position=Position(0, len(body)))

        offset = 0
        match = FRONTMATTER_PATTERN.match(body)
        if match:
            root.children.append(Node(
                type=NodeType.FRONTMATTER,
                position=Position(0, match.end()),
                value=match.group(1) or "",
            ))
            offset = match.end()

        root.children.extend(self._parse_blocks(body, offset))
        return root

    def _split_lines(self, body: str, offset: int) -> List[Tuple[int, int]]:
        """Return (start, end) of each line from offset, end excluding the newline."""
        lines = []
        start = offset
        length = len(body)
        while start < length:
            newline = body.find('\n', start)
            if newline == -1:
                lines.append((start, length))
                break
            end = newline
            if end > start and body[end - 1] == '\r':
                end -= 1
            lines.append((start, end))
            start = newline + 1
        return lines

    def _html_block_close(
        self, line: str, interrupting: bool = False
    ) -> Optional[Tuple[int, Optional[re.Pattern]]]:
        """Return how an HTML block opening on this line is closed.

        Args:
            line: Candidate first line of the block
            interrupting: The line follows paragraph text, where a lone tag
                does not open a block

        Returns:
            Tuple of (offset to search the closing marker from, closing
            pattern), with a None pattern when the block runs to the next
            blank line, or None when the line does not open an HTML block
        """
        if AUTOLINK_PATTERN.match(line.lstrip(' ')):
            return None

        for opening, closing in HTML_DELIMITED_BLOCKS:
            match = opening.match(line)
            if match:
                return match.end(), closing

        tag = HTML_BLOCK_TAG_PATTERN.match(line)
        if tag and tag.group(1).lower() in HTML_BLOCK_TAGS:
            return 0, None

        if not interrupting and HTML_TAG_LINE_PATTERN.match(line):
            return 0, None
        return None

    def _parse_blocks(self, body: str, offset: int) -> List[Node]:
        blocks: List[Node] = []
        lines = self._split_lines(body, offset)
        in_list = False
        i = 0

        while i < len(lines):
            start, end = lines[i]
            line = body[start:end]

            if not line.strip():
                i += 1
                continue

            indented = INDENTED_CODE_PATTERN.match(line)
            if not indented:
                in_list = (
                    bool(LIST_ITEM_PATTERN.match(line))
                    and not THEMATIC_BREAK_PATTERN.match(line)
                )

            # Indented code, unless the indentation continues a list item
            if indented and not in_list:
                last = i
                j = i + 1
                while j < len(lines):
                    next_line = body[lines[j][0]:lines[j][1]]
                    if next_line.strip():
                        if not INDENTED_CODE_PATTERN.match(next_line):
                            break
                        last = j
                    j += 1
                block_end = lines[last][1]
                blocks.append(Node(
                    type=NodeType.CODE,
                    position=Position(start, block_end),
                    value=INDENT_PATTERN.sub('', body[start:block_end]),
                ))
                i = last + 1
                continue

            # Fenced code blocks
            fence = FENCE_PATTERN.match(line)
            if fence:
                marker = fence.group(1)
                closing = re.compile(
                    r'^[ \t]*' + re.escape(marker[0]) + '{' + str(len(marker)) + r',}[ \t]*$'
                )
                j = i + 1
                while j < len(lines) and not closing.match(body[lines[j][0]:lines[j][1]]):
                    j += 1
                # An unclosed fence runs to the end of the body
                last = min(j, len(lines) - 1)
                inner = body[lines[i + 1][0]:lines[j - 1][1]] if j > i + 1 else ""
                blocks.append(Node(
                    type=NodeType.CODE,
                    position=Position(start, lines[last][1]),
                    value=inner,
                ))
                i = j + 1
                continue

            heading = HEADING_PATTERN.match(line)
            if heading:
                node = Node(
                    type=NodeType.HEADING,
                    position=Position(start, end),
                    level=len(heading.group(1)),
                )
                node.children = self._scan_inline(body, start, end)
                blocks.append(node)
                i += 1
                continue

            if THEMATIC_BREAK_PATTERN.match(line):
                blocks.append(Node(type=NodeType.THEMATIC_BREAK, position=Position(start, end)))
                i += 1
                continue

            html = self._html_block_close(line)
            if html is not None:
                search_from, closing = html
                j = i
                while j < len(lines):
                    current = body[lines[j][0]:lines[j][1]]
                    if closing is None:
                        if not current.strip():
                            break
                    elif closing.search(current, search_from if j == i else 0):
                        j += 1
                        break
                    j += 1
                # An unclosed block runs to the end of the body
                block_end = lines[j - 1][1]
                blocks.append(Node(
                    type=NodeType.HTML,
                    position=Position(start, block_end),
                    value=body[start:block_end],
                ))
                i = j
                continue

            # Paragraph: runs until a blank line or the start of another block
            j = i + 1
            while j < len(lines):
                next_line = body[lines[j][0]:lines[j][1]]
                if (
                    not next_line.strip()
                    or FENCE_PATTERN.match(next_line)
                    or HEADING_PATTERN.match(next_line)
                    or THEMATIC_BREAK_PATTERN.match(next_line)
                    or self._html_block_close(next_line, interrupting=True) is not None
                ):
                    break
                j += 1
            block_end = lines[j - 1][1]
            node = Node(type=NodeType.PARAGRAPH, position=Position(start, block_end))
            node.children = self._scan_inline(body, start, block_end)
            blocks.append(node)
            i = j

        return blocks

    def _code_span_end(self, text: str, i: int, end: int) -> Optional[int]:
        """Return the end of a code span opening at i, or None if unclosed."""
        run = 0
        while i + run < end and text[i + run] == '`':
            run += 1
        j = i + run
        while j < end:
            if text[j] == '`':
                k = j
                while k < end and text[k] == '`':
                    k += 1
                if k - j == run:
                    return k
                j = k
            else:
                j += 1
        return None

    def _scan_inline(self, text: str, start: int, end: int) -> List[Node]:
        """Split text[start:end] into text, code span, image and link nodes."""
        children: List[Node] = []
        text_start = start
        i = start

        def flush(upto: int) -> None:
            if upto > text_start:
                children.append(Node(
                    type=NodeType.TEXT,
                    position=Position(text_start, upto),
                    value=text[text_start:upto],
                ))

        while i < end:
            ch = text[i]

            if ch == '\\':
                i += 2
                continue

            if ch == '`':
                span_end = self._code_span_end(text, i, end)
                if span_end is None:
                    while i < end and text[i] == '`':
                        i += 1
                    continue
                flush(i)
                children.append(Node(
                    type=NodeType.INLINE_CODE,
                    position=Position(i, span_end),
                    value=text[i:span_end],
                ))
                i = text_start = span_end
                continue

            if ch == '<':
                autolink = AUTOLINK_PATTERN.match(text, i, end)
                if autolink:
                    i = autolink.end()
                    continue

            node = None
            if ch == '!' and i + 1 < end and text[i + 1] == '[':
                node = self._parse_reference(text, i, end, image=True)
            elif ch == '[':
                node = self._parse_reference(text, i, end, image=False)

            if node is not None:
                flush(i)
                children.append(node)
                i = text_start = node.position.end
                continue

            i += 1

        flush(end)
        return children

    def _find_label_end(self, text: str, open_idx: int, end: int) -> Optional[int]:
        """Return the index of the ']' matching the '[' at open_idx."""
        depth = 0
        j = open_idx
        while j < end:
            ch = text[j]
            if ch == '\\':
                j += 2
                continue
            if ch == '`':
                span_end = self._code_span_end(text, j, end)
                if span_end is not None:
                    j = span_end
                    continue
            if ch == '[':
                depth += 1
            elif ch == ']':
                depth -= 1
                if depth == 0:
                    return j
            j += 1
        return None

    @staticmethod
    def _skip_whitespace(text: str, j: int, end: int) -> int:
        while j < end and text[j] in ' \t\r\n':
            j += 1
        return j

    def _parse_destination(
        self, text: str, j: int, end: int
    ) -> Optional[Tuple[str, Optional[str], int]]:
        """Parse '(destination "title")' starting just after the '('.

        Returns:
            Tuple of (url, title, index after ')'), or None if malformed
        """
        j = self._skip_whitespace(text, j, end)

        if j < end and text[j] == '<':
            k = j + 1
            while k < end and text[k] not in '<>\n':
                k += 2 if text[k] == '\\' else 1
            if k >= end or text[k] != '>':
                return None
            url = text[j + 1:k]
            j = k + 1
        else:
            depth = 0
            k = j
            while k < end:
                ch = text[k]
                if ch == '\\' and k + 1 < end:
                    k += 2
                    continue
                if ch.isspace():
                    break
                if ch == '(':
                    depth += 1
                elif ch == ')':
                    if depth == 0:
                        break
                    depth -= 1
                k += 1
            if depth != 0:
                return None
            url = text[j:k]
            j = k

        title = None
        w = self._skip_whitespace(text, j, end)
        if w > j and w < end and text[w] in '"\'(':
            closer = ')' if text[w] == '(' else text[w]
            k = w + 1
            while k < end and text[k] != closer:
                k += 2 if text[k] == '\\' else 1
            if k >= end:
                return None
            title = _unescape(text[w + 1:k])
            w = self._skip_whitespace(text, k + 1, end)

        if w < end and text[w] == ')':
            return _unescape(url), title, w + 1
        return None

    def _parse_reference(self, text: str, i: int, end: int, image: bool) -> Optional[Node]:
        """Parse an inline image or link starting at i."""
        open_idx = i + 1 if image else i
        close = self._find_label_end(text, open_idx, end)
        if close is None or close + 1 >= end or text[close + 1] != '(':
            return None

        destination = self._parse_destination(text, close + 2, end)
        if destination is None:
            return None
        url, title, node_end = destination

        node = Node(
            type=NodeType.IMAGE if image else NodeType.LINK,
            position=Position(i, node_end),
            value=text[open_idx + 1:close],
            url=url,
            title=title,
            label=Position(open_idx + 1, close),
        )
        if not image:
            node.children = self._scan_inline(text, open_idx + 1, close)
        return node
