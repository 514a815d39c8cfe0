"""
Translatable unit extraction

Converts an HTML document into translatable units plus a skeleton that can
be rehydrated for any target language. Processing order within one pass:

1. protect scripts, styles and code blocks in the placeholder vault
2. singleton metadata (title, description, Open Graph, Twitter Card)
3. JSON-LD structured data blocks
4. alt / title / placeholder attributes
5. innermost block-level element bodies
"""
import json
from typing import Dict, List, Optional, Tuple

from static_translator.config import SafetyConfig
from static_translator.core.exceptions import StructuredDataError
from static_translator.core.models import ExtractionResult, TranslationUnit
from static_translator.utils.unified_logger import get_logger
from .constants import (
    ATTRIBUTE_KEYS,
    BLOCK_KEY_PREFIX,
    BLOCK_TAGS,
    CODE_BLOCK_TAGS,
    JSON_LD_TYPE,
    JSONLD_KEY_PREFIX,
    META_SINGLETONS,
    TITLE_KEY,
    TRANSLATE_KEY_ATTR,
    numbered_key,
)
from .dom import (
    CommentNode,
    ElementNode,
    find_all,
    find_first,
    inner_markup,
    iter_elements,
    locate_raw_elements,
    parse_document,
    serialize_document,
    serialize_node,
    text_content,
)
from .placeholder_vault import PlaceholderVault


def is_json_ld_type(attrs: Dict[str, str]) -> bool:
    return (attrs.get('type') or '').strip().lower() == JSON_LD_TYPE


def is_json_ld(element: ElementNode) -> bool:
    return element.tag == 'script' and is_json_ld_type(element.attrs)


def find_title(root: ElementNode) -> Optional[ElementNode]:
    head = find_first(root, 'head')
    return find_first(head, 'title') if head is not None else None


def find_meta(root: ElementNode, attribute: str, value: str) -> Optional[ElementNode]:
    for meta in find_all(root, 'meta'):
        if (meta.attrs.get(attribute) or '').strip().lower() == value:
            return meta
    return None


def attribute_carriers(root: ElementNode, attribute: str) -> List[ElementNode]:
    """Every element carrying the attribute, in document order"""
    return [element for element in iter_elements(root) if attribute in element.attrs]


def is_translatable(text: Optional[str]) -> bool:
    return bool(text and text.strip()) and not PlaceholderVault.is_token_only(text)


class HtmlExtractor:
    """
    Extracts translatable units from HTML documents

    One extractor can be shared by concurrent tasks: every call to extract()
    builds its own document tree and placeholder vault.
    """

    def __init__(self, safety: Optional[SafetyConfig] = None):
        self.safety = safety or SafetyConfig()
        self.logger = get_logger()

    def extract(self, html: str) -> ExtractionResult:
        """
        Extract translatable units from one document.

        Args:
            html: Source HTML text

        Returns:
            ExtractionResult with units, key -> text mapping, skeleton and
            the protected fragments
        """
        if not html.strip():
            return ExtractionResult(skeleton=html)

        document = parse_document(html)
        vault = PlaceholderVault()
        units: List[TranslationUnit] = []

        self._protect(html, document.root, vault)
        self._extract_metadata(document.root, units)
        self._extract_structured_data(document.root, units)
        self._extract_attributes(document.root, units)
        self._extract_blocks(document.root, units)

        mapping: Dict[str, str] = {unit.key: unit.text for unit in units}
        return ExtractionResult(
            units=units,
            mapping=mapping,
            skeleton=serialize_document(document),
            placeholders=vault.entries
        )

    def _is_protected(self, tag: str, attrs: Dict[str, str]) -> bool:
        if tag == 'script':
            return self.safety.preserve_scripts and not is_json_ld_type(attrs)
        if tag == 'style':
            return self.safety.preserve_styles
        if tag in CODE_BLOCK_TAGS:
            return self.safety.preserve_code_blocks
        return False

    def _collect_protected(self, element: ElementNode,
                           found: List[Tuple[ElementNode, int, ElementNode]]) -> None:
        """(parent, index, element) for every protected subtree, outermost first"""
        for index, child in enumerate(element.children):
            if not isinstance(child, ElementNode):
                continue
            if self._is_protected(child.tag, child.attrs):
                found.append((element, index, child))
            else:
                self._collect_protected(child, found)

    def _protect(self, html: str, root: ElementNode, vault: PlaceholderVault) -> None:
        """Replace protected subtrees by placeholder comments holding their source markup"""
        found: List[Tuple[ElementNode, int, ElementNode]] = []
        self._collect_protected(root, found)
        if not found:
            return

        raw = locate_raw_elements(html, self._is_protected)
        if [tag for tag, _ in raw] != [element.tag for _, _, element in found]:
            self.logger.warning("Protected elements could not be matched to the source markup; "
                                "restoring them from the parsed tree instead")
            raw = [(element.tag, serialize_node(element)) for _, _, element in found]

        for (parent, index, _), (_, markup) in zip(found, raw):
            parent.children[index] = CommentNode(vault.protect(markup))

    def _extract_metadata(self, root: ElementNode, units: List[TranslationUnit]) -> None:
        title = find_title(root)
        if title is not None:
            text = text_content(title)
            if is_translatable(text):
                units.append(TranslationUnit(TITLE_KEY, text))

        for key, attribute, value in META_SINGLETONS:
            meta = find_meta(root, attribute, value)
            if meta is None:
                continue
            content = meta.attrs.get('content')
            if is_translatable(content):
                units.append(TranslationUnit(key, content))

    def _extract_structured_data(self, root: ElementNode, units: List[TranslationUnit]) -> None:
        scripts = [element for element in iter_elements(root) if is_json_ld(element)]
        for index, script in enumerate(scripts):
            raw = text_content(script)
            if not raw.strip():
                continue
            try:
                serialized = self._serialize_json_ld(raw)
            except StructuredDataError as e:
                self.logger.warning(f"Skipping JSON-LD block #{index}: {e.message}")
                continue
            key = numbered_key(JSONLD_KEY_PREFIX, index)
            script.attrs[TRANSLATE_KEY_ATTR] = key
            units.append(TranslationUnit(key, serialized))

    @staticmethod
    def _serialize_json_ld(raw: str) -> str:
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise StructuredDataError(f"Invalid JSON: {e}") from e
        return json.dumps(data, ensure_ascii=False)

    def _extract_attributes(self, root: ElementNode, units: List[TranslationUnit]) -> None:
        for attribute, prefix in ATTRIBUTE_KEYS:
            for index, element in enumerate(attribute_carriers(root, attribute)):
                value = element.attrs.get(attribute)
                if is_translatable(value):
                    units.append(TranslationUnit(numbered_key(prefix, index), value))

    def _extract_blocks(self, root: ElementNode, units: List[TranslationUnit]) -> None:
        body = find_first(root, 'body')
        if body is None:
            return

        count = 0
        for element in select_blocks(body):
            key = numbered_key(BLOCK_KEY_PREFIX, count)
            count += 1
            units.append(TranslationUnit(key, inner_markup(element)))
            element.attrs[TRANSLATE_KEY_ATTR] = key


def has_block_descendant(element: ElementNode) -> bool:
    return any(descendant.tag in BLOCK_TAGS
               for descendant in iter_elements(element) if descendant is not element)


def select_blocks(body: ElementNode) -> List[ElementNode]:
    """
    Innermost block elements with text, in document order.

    A block containing another block is never selected; its descendants are.
    """
    selected = []
    for element in iter_elements(body):
        if element.tag not in BLOCK_TAGS or TRANSLATE_KEY_ATTR in element.attrs:
            continue
        if has_block_descendant(element):
            continue
        if text_content(element).strip():
            selected.append(element)
    return selected


def extract_units(html: str, safety: Optional[SafetyConfig] = None) -> ExtractionResult:
    """Convenience wrapper around HtmlExtractor.extract()"""
    return HtmlExtractor(safety).extract(html)
