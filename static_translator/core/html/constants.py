"""
Constants for HTML extraction and reinjection

Tag tables, metadata selectors and key formats used by the extractor and the
reinjection engine.
"""
import re

# Block-level elements whose inner markup is translated as a whole
BLOCK_TAGS = frozenset({
    'p', 'h1', 'h2', 'h3', 'h4', 'h5', 'h6',
    'li', 'td', 'th', 'dt', 'dd',
    'blockquote', 'figcaption', 'caption',
    'label', 'legend', 'summary',
})

# Elements without a closing tag
VOID_ELEMENTS = frozenset({
    'area', 'base', 'br', 'col', 'embed', 'hr', 'img', 'input',
    'link', 'meta', 'param', 'source', 'track', 'wbr',
})

# Elements whose text content is emitted without escaping
RAW_TEXT_ELEMENTS = frozenset({'script', 'style'})

CODE_BLOCK_TAGS = frozenset({'pre', 'code'})

JSON_LD_TYPE = 'application/ld+json'

# Attribute set on extraction sites in the skeleton, removed on reinjection
TRANSLATE_KEY_ATTR = 'data-translate-key'

# Placeholder tokens are HTML comments so the skeleton parses back unchanged
PLACEHOLDER_KEYWORD = '__HTMLT_PROTECTED_'
PLACEHOLDER_COMMENT_PATTERN = re.compile(r'^__HTMLT_PROTECTED_(\d+)__$')
PLACEHOLDER_TOKEN_PATTERN = re.compile(r'<!--__HTMLT_PROTECTED_(\d+)__-->')


def create_placeholder_comment(index: int) -> str:
    """Comment body of the placeholder with the given index"""
    return f"{PLACEHOLDER_KEYWORD}{index}__"


def create_placeholder_token(index: int) -> str:
    """Serialized placeholder token as it appears in the skeleton"""
    return f"<!--{create_placeholder_comment(index)}-->"


# Singleton metadata: key -> (attribute name used to select the meta, selector value)
TITLE_KEY = 'TITLE'
META_SINGLETONS = (
    ('META_DESCRIPTION', 'name', 'description'),
    ('META_KEYWORDS', 'name', 'keywords'),
    ('OG_TITLE', 'property', 'og:title'),
    ('OG_DESCRIPTION', 'property', 'og:description'),
    ('OG_SITE_NAME', 'property', 'og:site_name'),
    ('OG_IMAGE_ALT', 'property', 'og:image:alt'),
    ('TWITTER_TITLE', 'name', 'twitter:title'),
    ('TWITTER_DESCRIPTION', 'name', 'twitter:description'),
    ('TWITTER_IMAGE_ALT', 'name', 'twitter:image:alt'),
)
META_KEY_PREFIXES = ('META_', 'OG_', 'TWITTER_')

# Translatable attributes: attribute name -> numbered key prefix
ATTRIBUTE_KEYS = (
    ('alt', 'ALT'),
    ('title', 'TITLE_ATTR'),
    ('placeholder', 'PLACEHOLDER'),
)

JSONLD_KEY_PREFIX = 'JSONLD'
BLOCK_KEY_PREFIX = 'BLOCK'


def numbered_key(prefix: str, index: int) -> str:
    return f"{prefix}#{index}"
