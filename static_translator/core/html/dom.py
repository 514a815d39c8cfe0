"""
Tagged-variant node model for HTML documents

Documents are parsed with lxml's HTML parser and converted into plain
TextNode / CommentNode / ElementNode values. The serializer writes them back
as HTML: script and style content is emitted raw, void elements get no
closing tag, text and attribute values are escaped with html.escape.
The source slices of protected elements are located separately, with the
standard library tokenizer, so they can be restored verbatim.
"""
import re
from dataclasses import dataclass, field
from html import escape, unescape
from html.parser import HTMLParser
from typing import Callable, Dict, Iterator, List, Optional, Tuple, Union

from lxml import etree
from lxml import html as lxml_html

from static_translator.core.exceptions import HtmlProcessingError
from static_translator.utils.unified_logger import get_logger
from .constants import RAW_TEXT_ELEMENTS, VOID_ELEMENTS


@dataclass
class TextNode:
    text: str


@dataclass
class CommentNode:
    text: str


@dataclass(eq=False)
class ElementNode:
    """
    Element with a lowercase tag name, ordered attributes and ordered children.

    Compared by identity so elements can be used as dictionary keys.
    """
    tag: str
    attrs: Dict[str, str] = field(default_factory=dict)
    children: List['Node'] = field(default_factory=list)


Node = Union[TextNode, CommentNode, ElementNode]


@dataclass
class Document:
    """Parsed document: optional doctype, top-level comments and the root element"""
    root: ElementNode
    doctype: Optional[str] = None
    leading: List[Node] = field(default_factory=list)
    trailing: List[Node] = field(default_factory=list)


def _html_parser() -> etree.HTMLParser:
    return etree.HTMLParser(encoding='utf-8', default_doctype=False,
                            remove_comments=False, remove_pis=False)


def _convert_children(element, dropped: List[str]) -> List[Node]:
    children: List[Node] = []
    if element.text:
        children.append(TextNode(element.text))
    for child in element:
        converted = _convert(child, dropped)
        if converted is not None:
            children.append(converted)
        if child.tail:
            children.append(TextNode(child.tail))
    return children


def _convert(element, dropped: List[str]) -> Optional[Node]:
    """Convert one lxml node (without its tail) into a Node"""
    if isinstance(element, etree._Comment):
        return CommentNode(element.text or '')
    if isinstance(element, etree._ProcessingInstruction):
        dropped.append(etree.tostring(element, encoding='unicode', with_tail=False))
        return None
    if isinstance(element, etree._Entity):
        return TextNode(f"&{element.name};")
    tag = element.tag if isinstance(element.tag, str) else str(element.tag)
    return ElementNode(
        tag=tag.lower(),
        attrs={str(name): value for name, value in element.attrib.items()},
        children=_convert_children(element, dropped)
    )


def parse_document(markup: str) -> Document:
    """
    Parse a complete HTML document.

    Args:
        markup: HTML source text

    Returns:
        Document whose root is the <html> element

    Raises:
        HtmlProcessingError: If the markup cannot be parsed into a document
    """
    try:
        root = etree.fromstring(markup.encode('utf-8'), _html_parser())
    except (etree.ParserError, etree.XMLSyntaxError, ValueError) as e:
        raise HtmlProcessingError(f"Could not parse HTML document: {e}") from e
    if root is None:
        raise HtmlProcessingError("Could not parse HTML document: document is empty")

    dropped: List[str] = []
    leading = [node for node in (_convert(sibling, dropped)
                                 for sibling in reversed(list(root.itersiblings(preceding=True))))
               if node is not None]
    trailing = [node for node in (_convert(sibling, dropped)
                                  for sibling in root.itersiblings())
                if node is not None]
    document = Document(
        root=_convert(root, dropped),
        doctype=root.getroottree().docinfo.doctype or None,
        leading=leading,
        trailing=trailing
    )
    if dropped:
        get_logger().warning(f"Dropped {len(dropped)} processing instruction(s): {', '.join(dropped)}")
    return document


def parse_fragment(markup: str) -> List[Node]:
    """
    Parse an inner-markup fragment into a list of nodes.

    Leading whitespace is kept even when the fragment starts with an element.
    Text without markup (including whitespace or a lone &nbsp;) becomes a
    single text node.
    """
    if '<' not in markup:
        return [TextNode(unescape(markup))] if markup else []

    container = lxml_html.fragment_fromstring(markup, create_parent='div')
    children = _convert_children(container, [])
    leading = markup[:len(markup) - len(markup.lstrip())]
    if leading:
        if children and isinstance(children[0], TextNode):
            if not children[0].text.startswith(leading):
                children[0] = TextNode(leading + children[0].text.lstrip())
        else:
            children.insert(0, TextNode(leading))
    return children


def escape_text(text: str) -> str:
    return escape(text, quote=False)


def escape_attribute(value: str) -> str:
    return escape(value, quote=True)


def serialize_node(node: Node) -> str:
    """Serialize a node and its subtree to HTML"""
    if isinstance(node, TextNode):
        return escape_text(node.text)
    if isinstance(node, CommentNode):
        return f"<!--{node.text}-->"

    attrs = ''.join(f' {name}="{escape_attribute(value or "")}"' for name, value in node.attrs.items())
    if node.tag in VOID_ELEMENTS:
        return f"<{node.tag}{attrs}>"
    return f"<{node.tag}{attrs}>{inner_markup(node)}</{node.tag}>"


def raw_text_content(element: ElementNode) -> str:
    """Body of a script or style element, written back without escaping"""
    return ''.join(child.text for child in element.children if isinstance(child, TextNode))


def inner_markup(element: ElementNode) -> str:
    if element.tag in RAW_TEXT_ELEMENTS:
        return raw_text_content(element)
    return ''.join(serialize_node(child) for child in element.children)


def serialize_document(document: Document) -> str:
    parts = []
    if document.doctype:
        parts.append(document.doctype + '\n')
    for node in document.leading:
        parts.append(serialize_node(node) + '\n')
    parts.append(serialize_node(document.root))
    for node in document.trailing:
        parts.append('\n' + serialize_node(node))
    return ''.join(parts)


def iter_elements(node: Node) -> Iterator[ElementNode]:
    """Pre-order walk over every element of a subtree, the node itself included"""
    if not isinstance(node, ElementNode):
        return
    stack = [node]
    while stack:
        element = stack.pop()
        yield element
        stack.extend(reversed([c for c in element.children if isinstance(c, ElementNode)]))


def text_content(node: Node) -> str:
    if isinstance(node, TextNode):
        return node.text
    if isinstance(node, CommentNode):
        return ''
    return ''.join(text_content(child) for child in node.children)


def find_first(root: ElementNode, tag: str) -> Optional[ElementNode]:
    for element in iter_elements(root):
        if element.tag == tag:
            return element
    return None


def find_all(root: ElementNode, tag: str) -> List[ElementNode]:
    return [element for element in iter_elements(root) if element.tag == tag]


class _RawElementLocator(HTMLParser):
    """
    Finds the source slices of selected elements, outermost first.

    lxml decodes entities and normalises attributes while parsing, so the
    exact source text of an element can only be read from the markup itself.
    """

    def __init__(self, source: str, predicate: Callable[[str, Dict[str, str]], bool]):
        super().__init__(convert_charrefs=False)
        self.source = source
        self.predicate = predicate
        self.fragments: List[Tuple[str, str]] = []
        self._line_starts = [0] + [match.end() for match in re.finditer('\n', source)]
        self._open_tag: Optional[str] = None
        self._open_start = 0
        self._depth = 0

    def _offset(self) -> int:
        line, column = self.getpos()
        return self._line_starts[line - 1] + column

    def handle_starttag(self, tag, attrs):
        if self._open_tag is not None:
            if tag == self._open_tag:
                self._depth += 1
            return
        if self.predicate(tag, {name: value or '' for name, value in attrs}):
            self._open_tag = tag
            self._open_start = self._offset()
            self._depth = 1

    def handle_startendtag(self, tag, attrs):
        # HTML ignores the self-closing slash on non-void elements
        self.handle_starttag(tag, attrs)

    def handle_endtag(self, tag):
        if tag != self._open_tag:
            return
        self._depth -= 1
        if self._depth == 0:
            end = self.source.find('>', self._offset()) + 1
            self.fragments.append((tag, self.source[self._open_start:end]))
            self._open_tag = None


def locate_raw_elements(markup: str,
                        predicate: Callable[[str, Dict[str, str]], bool]) -> List[Tuple[str, str]]:
    """
    Verbatim source markup of every element selected by predicate.

    Args:
        markup: HTML source text
        predicate: Called with the lowercase tag name and its attributes

    Returns:
        (tag, raw markup) pairs in document order; descendants of a selected
        element are never reported separately. An element left unclosed at
        the end of the source is not reported.
    """
    locator = _RawElementLocator(markup, predicate)
    locator.feed(markup)
    locator.close()
    return locator.fragments
