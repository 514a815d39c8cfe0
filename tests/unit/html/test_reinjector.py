"""Unit tests for HtmlReinjector."""

import json
from unittest.mock import MagicMock

from static_translator.config import SeoConfig
from static_translator.core.html.extractor import extract_units
from static_translator.core.html.reinjector import (
    HtmlReinjector,
    build_hreflang_href,
    build_hreflang_languages,
    serialize_json_for_script,
)


def no_hreflang():
    return HtmlReinjector(SeoConfig(inject_hreflang=False), ['es'], 'en')


class TestReinject:
    """Test rewriting a skeleton with translations."""

    def test_title_block_and_script(self, sample_page_html):
        extraction = extract_units(sample_page_html)
        html = no_hreflang().reinject(extraction, {'TITLE': 'Hola', 'BLOCK#0': 'Mundo'}, 'es')
        assert '<title>Hola</title>' in html
        assert '<p>Mundo</p>' in html
        assert '<script>var x=1;</script>' in html
        assert '<html lang="es">' in html

    def test_no_tags_or_tokens_left(self, sample_page_html):
        extraction = extract_units(sample_page_html)
        html = no_hreflang().reinject(extraction, {'TITLE': 'Hola', 'BLOCK#0': 'Mundo'}, 'es')
        assert 'data-translate-key' not in html
        assert '__HTMLT_PROTECTED_' not in html

    def test_missing_translation_keeps_original(self, sample_page_html):
        extraction = extract_units(sample_page_html)
        html = no_hreflang().reinject(extraction, {'TITLE': 'Hola'}, 'es')
        assert '<p>World</p>' in html

    def test_empty_translation_keeps_original(self, sample_page_html):
        extraction = extract_units(sample_page_html)
        html = no_hreflang().reinject(extraction, {'TITLE': '   ', 'BLOCK#0': 'Mundo'}, 'es')
        assert '<title>Hello</title>' in html

    def test_translation_with_markup_is_parsed(self):
        extraction = extract_units('<html><body><p>Hello <a href="/x">World</a></p></body></html>')
        html = no_hreflang().reinject(extraction, {'BLOCK#0': 'Hola <a href="/x">Mundo</a>'}, 'es')
        assert '<p>Hola <a href="/x">Mundo</a></p>' in html

    def test_inline_code_survives_translation(self):
        extraction = extract_units('<html><body><p>Run <code>ls -la</code> now</p></body></html>')
        translated = 'Ejecuta <!--__HTMLT_PROTECTED_0__--> ahora'
        html = no_hreflang().reinject(extraction, {'BLOCK#0': translated}, 'es')
        assert '<p>Ejecuta <code>ls -la</code> ahora</p>' in html

    def test_dropped_placeholder_keeps_original(self):
        """A translation that loses a token is rejected."""
        extraction = extract_units('<html><body><p>Run <code>ls</code> now</p></body></html>')
        html = no_hreflang().reinject(extraction, {'BLOCK#0': 'Ejecuta ahora'}, 'es')
        assert '<p>Run <code>ls</code> now</p>' in html

    def test_duplicated_placeholder_keeps_original(self):
        extraction = extract_units('<html><body><p>Run <code>ls</code> now</p></body></html>')
        translated = '<!--__HTMLT_PROTECTED_0__--> y <!--__HTMLT_PROTECTED_0__-->'
        html = no_hreflang().reinject(extraction, {'BLOCK#0': translated}, 'es')
        assert html.count('<code>ls</code>') == 1

    def test_meta_and_attributes(self):
        source = ('<html><head><meta name="description" content="A site"></head>'
                  '<body><img src="a.png" alt="Cat"><input placeholder="Search"></body></html>')
        extraction = extract_units(source)
        html = no_hreflang().reinject(extraction, {
            'META_DESCRIPTION': 'Un sitio',
            'ALT#0': 'Gato',
            'PLACEHOLDER#0': 'Buscar',
        }, 'es')
        assert 'content="Un sitio"' in html
        assert 'alt="Gato"' in html
        assert 'placeholder="Buscar"' in html

    def test_attribute_values_are_escaped(self):
        extraction = extract_units('<html><body><img alt="Say hi"></body></html>')
        html = no_hreflang().reinject(extraction, {'ALT#0': 'Di "hola" & adiós'}, 'es')
        assert 'alt="Di &quot;hola&quot; &amp; adiós"' in html

    def test_extraction_is_reusable_across_languages(self, sample_page_html):
        extraction = extract_units(sample_page_html)
        reinjector = HtmlReinjector(SeoConfig(inject_hreflang=False), ['es', 'fr'], 'en')
        spanish = reinjector.reinject(extraction, {'BLOCK#0': 'Mundo'}, 'es')
        french = reinjector.reinject(extraction, {'BLOCK#0': 'Monde'}, 'fr')
        assert '<p>Mundo</p>' in spanish and 'lang="es"' in spanish
        assert '<p>Monde</p>' in french and 'lang="fr"' in french


class TestStructuredData:
    """Test JSON-LD reinjection."""

    SOURCE = ('<html><head><script type="application/ld+json">{"@type": "Article", "headline": "Hello"}'
              '</script></head><body></body></html>')

    def test_translated_json_is_reserialized(self):
        extraction = extract_units(self.SOURCE)
        translated = json.dumps({"@type": "Article", "headline": "Hola"})
        html = no_hreflang().reinject(extraction, {'JSONLD#0': translated}, 'es')
        assert '{"@type": "Article", "headline": "Hola"}' in html
        assert 'data-translate-key' not in html

    def test_invalid_translated_json_keeps_original(self):
        extraction = extract_units(self.SOURCE)
        html = no_hreflang().reinject(extraction, {'JSONLD#0': '{"headline": Hola'}, 'es')
        assert '{"@type": "Article", "headline": "Hello"}' in html

    def test_script_close_sequence_is_escaped(self):
        assert serialize_json_for_script({"text": "</script>"}) == '{"text": "<\\/script>"}'


class TestHreflang:
    """Test alternate-language link injection."""

    SOURCE = ('<html><head><title>T</title><link rel="alternate" hreflang="de" href="/de/"></head>'
              '<body><p>Text</p></body></html>')

    def test_links_for_every_language(self):
        reinjector = HtmlReinjector(SeoConfig(base_url='https://example.com'), ['fr', 'es'], 'en')
        html = reinjector.reinject(extract_units(self.SOURCE), {}, 'fr')
        assert '<link rel="alternate" hreflang="x-default" href="https://example.com/fr/">' in html
        assert '<link rel="alternate" hreflang="es" href="https://example.com/es/">' in html
        assert '<link rel="alternate" hreflang="en" href="https://example.com/en/">' in html
        assert 'hreflang="de"' not in html

    def test_relative_links_warn_once(self):
        reinjector = HtmlReinjector(SeoConfig(), ['fr', 'es'], 'en')
        reinjector.logger = MagicMock()
        extraction = extract_units(self.SOURCE)
        reinjector.reinject(extraction, {}, 'fr')
        html = reinjector.reinject(extraction, {}, 'es')
        assert '<link rel="alternate" hreflang="fr" href="/fr/">' in html
        assert reinjector.logger.warning.call_count == 1

    def test_head_is_created_when_missing(self):
        reinjector = HtmlReinjector(SeoConfig(base_url='https://example.com'), ['fr'], 'en')
        html = reinjector.reinject(extract_units('<html><body><p>Text</p></body></html>'), {}, 'fr')
        assert '<head><link rel="alternate"' in html

    def test_language_list_is_deduplicated(self):
        assert build_hreflang_languages(['fr', 'en', 'fr'], 'en') == ['fr', 'en']

    def test_href_trailing_slash(self):
        assert build_hreflang_href('fr', 'https://example.com/') == 'https://example.com/fr/'
        assert build_hreflang_href('fr', None) == '/fr/'


class TestProtectedMarkupFidelity:
    """Test that protected elements come back exactly as written."""

    SOURCE = ('<html><head><style media=\'screen\'>a[title="x"]{color:red}</style></head><body>'
              '<pre>say &quot;hi&quot; &amp; bye&nbsp;now</pre>'
              '<p>Text <code class=inline>a&#39;b</code></p>'
              '<pre data-x=\'1\'>x &lt; y</pre>'
              '<script async src="a.js"></script>'
              '</body></html>')

    def test_untranslated_round_trip_restores_source_bytes(self):
        """Entities, attribute quoting and boolean attributes survive unchanged."""
        html = no_hreflang().reinject(extract_units(self.SOURCE), {}, 'es')
        assert '<style media=\'screen\'>a[title="x"]{color:red}</style>' in html
        assert '<pre>say &quot;hi&quot; &amp; bye&nbsp;now</pre>' in html
        assert '<p>Text <code class=inline>a&#39;b</code></p>' in html
        assert '<pre data-x=\'1\'>x &lt; y</pre>' in html
        assert '<script async src="a.js"></script>' in html

    def test_translated_block_restores_inline_code_verbatim(self):
        extraction = extract_units(self.SOURCE)
        html = no_hreflang().reinject(extraction, {'BLOCK#0': 'Texto <!--__HTMLT_PROTECTED_2__-->'}, 'es')
        assert '<p>Texto <code class=inline>a&#39;b</code></p>' in html


class TestWhitespaceTranslations:
    """Test translations without any markup."""

    def test_nbsp_translation_is_kept(self):
        extraction = extract_units('<html><body><p>Hello</p></body></html>')
        html = no_hreflang().reinject(extraction, {'BLOCK#0': '&nbsp;'}, 'es')
        assert '<p>\xa0</p>' in html
        assert '<p></p>' not in html

    def test_entity_in_plain_translation_is_decoded_once(self):
        extraction = extract_units('<html><body><p>Salt &amp; pepper</p></body></html>')
        html = no_hreflang().reinject(extraction, {'BLOCK#0': 'Sal &amp; pimienta'}, 'es')
        assert '<p>Sal &amp; pimienta</p>' in html
