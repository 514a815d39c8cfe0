"""
Reinjection of translated units into a document skeleton

Apply order: singleton metadata, JSON-LD blocks, attributes, tagged block
bodies, the root lang attribute, hreflang alternate links, and finally
placeholder restoration.
"""
import json
from typing import Dict, List, Optional, Sequence

from static_translator.config import SeoConfig
from static_translator.core.models import ExtractionResult
from static_translator.utils.unified_logger import get_logger
from .constants import (
    ATTRIBUTE_KEYS,
    META_SINGLETONS,
    TITLE_KEY,
    TRANSLATE_KEY_ATTR,
    numbered_key,
)
from .dom import (
    ElementNode,
    TextNode,
    find_first,
    iter_elements,
    parse_document,
    parse_fragment,
    serialize_document,
)
from .extractor import attribute_carriers, find_meta, find_title, is_json_ld
from .placeholder_vault import PlaceholderVault


def serialize_json_for_script(data) -> str:
    """JSON text safe to embed in a <script> element"""
    return json.dumps(data, ensure_ascii=False).replace('</', '<\\/')


def build_hreflang_languages(target_languages: Sequence[str], source_language: str) -> List[str]:
    """Target languages followed by the source language, duplicates removed"""
    languages = []
    for lang in list(target_languages) + [source_language]:
        if lang and lang not in languages:
            languages.append(lang)
    return languages


def build_hreflang_href(lang: str, base_url: Optional[str]) -> str:
    if base_url:
        return f"{base_url.rstrip('/')}/{lang}/"
    return f"/{lang}/"


def _is_alternate_link(element: ElementNode) -> bool:
    rel = (element.attrs.get('rel') or '').lower().split()
    return element.tag == 'link' and 'alternate' in rel and 'hreflang' in element.attrs


def _remove_elements(element: ElementNode, predicate) -> None:
    element.children = [child for child in element.children
                        if not (isinstance(child, ElementNode) and predicate(child))]
    for child in element.children:
        if isinstance(child, ElementNode):
            _remove_elements(child, predicate)


class HtmlReinjector:
    """
    Rewrites a skeleton with translations for one target language.

    Args:
        seo: hreflang settings
        target_languages: Every configured target language
        source_language: Language of the source documents
    """

    def __init__(self, seo: Optional[SeoConfig] = None,
                 target_languages: Sequence[str] = (),
                 source_language: str = 'en'):
        self.seo = seo or SeoConfig()
        self.target_languages = list(target_languages)
        self.source_language = source_language
        self.logger = get_logger()
        self._base_url_warned = False

    def reinject(self, extraction: ExtractionResult, translations: Dict[str, str], language: str) -> str:
        """
        Produce the final document for one language.

        Args:
            extraction: Result of the extraction pass over the source document
            translations: key -> translated text (missing keys keep their original)
            language: Target language code

        Returns:
            Final HTML with every placeholder restored

        Raises:
            PlaceholderLeakError: If a placeholder token survives restoration
        """
        document = parse_document(extraction.skeleton)
        root = document.root
        resolved = {key: self._accept(key, original, translations.get(key))
                    for key, original in extraction.mapping.items()}

        self._apply_metadata(root, resolved)
        self._apply_structured_data(root, resolved, extraction.mapping)
        self._apply_attributes(root, resolved)
        self._apply_blocks(root, resolved, extraction.mapping)

        root.attrs['lang'] = language
        if self.seo.inject_hreflang:
            self.inject_hreflang(root, language)

        vault = PlaceholderVault(extraction.placeholders)
        return vault.restore(serialize_document(document))

    def _accept(self, key: str, original: str, translated: Optional[str]) -> str:
        """Translated text, or the original when it is missing or broke placeholders"""
        if translated is None or not translated.strip():
            return original
        if PlaceholderVault.token_counts(original) != PlaceholderVault.token_counts(translated):
            self.logger.warning(f"Translation of {key} altered protected placeholders; keeping original text")
            return original
        return translated

    def _apply_metadata(self, root: ElementNode, resolved: Dict[str, str]) -> None:
        if TITLE_KEY in resolved:
            title = find_title(root)
            if title is not None:
                title.children = [TextNode(resolved[TITLE_KEY])]

        for key, attribute, value in META_SINGLETONS:
            if key not in resolved:
                continue
            meta = find_meta(root, attribute, value)
            if meta is not None:
                meta.attrs['content'] = resolved[key]

    def _apply_structured_data(self, root: ElementNode, resolved: Dict[str, str],
                               originals: Dict[str, str]) -> None:
        for script in [element for element in iter_elements(root) if is_json_ld(element)]:
            key = script.attrs.pop(TRANSLATE_KEY_ATTR, None)
            if key is None or key not in resolved or resolved[key] == originals.get(key):
                continue
            try:
                data = json.loads(resolved[key])
            except json.JSONDecodeError as e:
                self.logger.warning(f"Translated JSON-LD block {key} is not valid JSON ({e}); keeping original")
                continue
            script.children = [TextNode(serialize_json_for_script(data))]

    def _apply_attributes(self, root: ElementNode, resolved: Dict[str, str]) -> None:
        for attribute, prefix in ATTRIBUTE_KEYS:
            for index, element in enumerate(attribute_carriers(root, attribute)):
                key = numbered_key(prefix, index)
                if key in resolved:
                    element.attrs[attribute] = resolved[key]

    def _apply_blocks(self, root: ElementNode, resolved: Dict[str, str],
                      originals: Dict[str, str]) -> None:
        tagged = [element for element in iter_elements(root) if TRANSLATE_KEY_ATTR in element.attrs]
        for element in tagged:
            key = element.attrs.pop(TRANSLATE_KEY_ATTR)
            if key in resolved and resolved[key] != originals.get(key):
                element.children = parse_fragment(resolved[key])

    def inject_hreflang(self, root: ElementNode, language: str) -> None:
        """Replace alternate-language links with one link per configured language"""
        _remove_elements(root, _is_alternate_link)

        base_url = self.seo.base_url
        if not base_url and not self._base_url_warned:
            self.logger.warning("seo.baseUrl is not configured. Hreflang tags will use relative paths.")
            self._base_url_warned = True

        head = find_first(root, 'head')
        if head is None:
            head = ElementNode('head')
            root.children.insert(0, head)

        for lang in build_hreflang_languages(self.target_languages, self.source_language):
            hreflang = 'x-default' if lang == language else lang
            head.children.append(ElementNode('link', {
                'rel': 'alternate',
                'hreflang': hreflang,
                'href': build_hreflang_href(lang, base_url),
            }))
            head.children.append(TextNode('\n'))
