import json
from typing import Dict, NamedTuple, Optional, Sequence


class PromptPair(NamedTuple):
    """A pair of system and user prompts for LLM translation."""
    system: str
    user: str


# ============================================================================
# SHARED PROMPT SECTIONS
# ============================================================================

CONTEXT_HINTS = {
    'title': "You are translating a page title. Keep it concise and SEO-friendly.",
    'meta': "You are translating meta descriptions and social card text. "
            "Optimize for search engines while maintaining the message.",
}

MARKUP_PRESERVATION_SECTION = """**MARKUP PRESERVATION:**
- Some texts contain HTML. Keep every tag, attribute and entity exactly as given; translate only the human-readable text
- Comments such as <!--__HTMLT_PROTECTED_0__--> are protected content markers. Copy them unchanged, in the same place, exactly once
- Some texts are JSON documents (structured data). Return valid JSON with the same keys and structure; translate only human-readable string values, never URLs, identifiers, dates or "@" keys"""


def build_glossary_section(glossary: Optional[Dict[str, str]]) -> str:
    """
    Build the glossary section for one target language.

    Args:
        glossary: term -> translation for the target language

    Returns:
        str: Glossary instructions, or an empty string without terms
    """
    if not glossary:
        return ""
    entries = "\n".join(f'- "{term}" -> "{translation}"' for term, translation in glossary.items())
    return f"""**GLOSSARY (use these translations consistently):**
{entries}
"""


def build_context_section(context_hint: Optional[str]) -> str:
    hint = CONTEXT_HINTS.get(context_hint or "")
    return f"**CONTEXT:** {hint}\n" if hint else ""


def _get_output_format_section(count: int) -> str:
    example_items = ",\n    ".join(f'"translation of text {index}"' for index in range(min(count, 3)))
    return f"""# OUTPUT FORMAT

Return ONLY a JSON object with a "translations" array:
{{
  "translations": [
    {example_items}
  ]
}}

**CRITICAL OUTPUT RULES:**
1. The "translations" array MUST contain exactly {count} strings
2. Keep the EXACT SAME ORDER as the input array
3. Do NOT add explanations, comments, notes, or markdown fences"""


# ============================================================================
# BATCH TRANSLATION PROMPT
# ============================================================================

def generate_batch_translation_prompt(
    texts: Sequence[str],
    target_language: str,
    glossary: Optional[Dict[str, str]] = None,
    context_hint: Optional[str] = None
) -> PromptPair:
    """
    Generate the prompt for one batch of website texts.

    Args:
        texts: Source texts in batch order
        target_language: Target language code (e.g. "fr", "pt-BR")
        glossary: term -> translation for the target language
        context_hint: "title", "meta" or None

    Returns:
        PromptPair: A named tuple with 'system' and 'user' prompts
    """
    count = len(texts)

    system_prompt = f"""You are a professional translator specializing in website localization.

# TRANSLATION PRINCIPLES

Translate the given website texts into the language with code "{target_language}".

**PRIORITY ORDER:**
1. Maintain the tone and style of the original text
2. Keep brand names and technical terms untranslated unless the glossary says otherwise
3. Keep translations natural and culturally appropriate for "{target_language}"

{MARKUP_PRESERVATION_SECTION}

{build_glossary_section(glossary)}{build_context_section(context_hint)}
{_get_output_format_section(count)}"""

    user_prompt = f"""# TEXTS TO TRANSLATE

Translate the following {count} text(s) to "{target_language}":

{json.dumps(list(texts), ensure_ascii=False, indent=2)}

Return the JSON object with exactly {count} translation(s) now:"""

    return PromptPair(system=system_prompt.strip(), user=user_prompt.strip())
