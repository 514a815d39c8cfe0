"""Unit tests for PlaceholderVault."""

import pytest

from static_translator.core.exceptions import PlaceholderLeakError
from static_translator.core.html.placeholder_vault import PlaceholderVault
from static_translator.core.models import PlaceholderEntry


class TestPlaceholderVault:
    """Test protection and restoration of raw markup."""

    def test_protect_returns_sequential_comment_bodies(self):
        """Each protected fragment gets the next index."""
        vault = PlaceholderVault()
        assert vault.protect('<script>a</script>') == '__HTMLT_PROTECTED_0__'
        assert vault.protect('<style>b</style>') == '__HTMLT_PROTECTED_1__'
        assert len(vault) == 2
        assert vault.entries[1] == PlaceholderEntry('<!--__HTMLT_PROTECTED_1__-->', '<style>b</style>')

    def test_restore_is_exact(self):
        """Restoration puts back the raw markup byte-for-byte."""
        vault = PlaceholderVault()
        vault.protect('<script>if (a < b && c) { x = "</p>"; }</script>')
        vault.protect('<pre class="x">  indented\n  code</pre>')
        text = '<body><!--__HTMLT_PROTECTED_0__--><p>x</p><!--__HTMLT_PROTECTED_1__--></body>'
        restored = vault.restore(text)
        assert restored == ('<body><script>if (a < b && c) { x = "</p>"; }</script>'
                            '<p>x</p><pre class="x">  indented\n  code</pre></body>')

    def test_restore_is_single_pass(self):
        """Restored markup is not scanned again for tokens."""
        vault = PlaceholderVault()
        vault.protect('<code>&lt;!--__HTMLT_PROTECTED_1__--&gt;</code>')
        vault.protect('<code>second</code>')
        restored = vault.restore('<!--__HTMLT_PROTECTED_0__--> <!--__HTMLT_PROTECTED_1__-->')
        assert restored == '<code>&lt;!--__HTMLT_PROTECTED_1__--&gt;</code> <code>second</code>'

    def test_unknown_token_raises_leak_error(self):
        """A token without an entry is a correctness failure."""
        vault = PlaceholderVault()
        vault.protect('<script></script>')
        with pytest.raises(PlaceholderLeakError) as exc_info:
            vault.restore('<!--__HTMLT_PROTECTED_0__--><!--__HTMLT_PROTECTED_7__-->')
        assert exc_info.value.leaked_tokens == ['<!--__HTMLT_PROTECTED_7__-->']

    def test_vault_from_entries(self):
        """A vault rebuilt from entries restores the same fragments."""
        original = PlaceholderVault()
        original.protect('<style>p{}</style>')
        rebuilt = PlaceholderVault(original.entries)
        assert rebuilt.restore('<!--__HTMLT_PROTECTED_0__-->') == '<style>p{}</style>'

    def test_token_counts(self):
        counts = PlaceholderVault.token_counts('a <!--__HTMLT_PROTECTED_0__--> b <!--__HTMLT_PROTECTED_0__-->')
        assert counts == {'0': 2}

    def test_is_token_only(self):
        assert PlaceholderVault.is_token_only('  <!--__HTMLT_PROTECTED_3__-->  ')
        assert not PlaceholderVault.is_token_only('Run <!--__HTMLT_PROTECTED_3__-->')
