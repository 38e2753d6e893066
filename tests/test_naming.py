"""Tests for the config-key and registry-filename name schemes."""

from mcpget.core.naming import display_name, registry_filename, server_key


class TestServerKey:
    def test_scoped_name(self):
        assert server_key("@modelcontextprotocol/server-brave-search") == (
            "@modelcontextprotocol-server-brave-search"
        )

    def test_plain_name_unchanged(self):
        assert server_key("mcp-server-fetch") == "mcp-server-fetch"

    def test_every_separator_replaced(self):
        assert server_key("a/b/c") == "a-b-c"

    def test_idempotent(self):
        key = server_key("@scope/pkg")
        assert server_key(key) == key


class TestDisplayName:
    def test_reverses_scoped_key(self):
        assert display_name("@scope-pkg") == "@scope/pkg"

    def test_is_lossy(self):
        # both names share a key, so the reverse can only guess
        assert server_key("foo-bar") == server_key("foo/bar")
        assert display_name(server_key("foo-bar")) == "foo/bar"


class TestRegistryFilename:
    def test_scoped_name(self):
        assert registry_filename("@modelcontextprotocol/server-github") == (
            "modelcontextprotocol--server-github.json"
        )

    def test_plain_name(self):
        assert registry_filename("mcp-server-time") == "mcp-server-time.json"

    def test_differs_from_config_key(self):
        name = "@scope/pkg"
        assert registry_filename(name) != server_key(name) + ".json"

    def test_distinct_for_names_sharing_a_key(self):
        assert registry_filename("foo-bar") != registry_filename("foo/bar")
