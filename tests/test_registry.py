"""Tests for command and context registration."""

import pytest

from ctxshell.commands import command
from ctxshell.errors import RegistrationError
from ctxshell.registry import CommandRegistry
from ctxshell.specs import ROOT_CONTEXT, CommandSpec, ContextSpec


def _factory(name, context="", aliases=(), hidden=False):
    @command(CommandSpec(name=name, context=context, aliases=tuple(aliases), hidden=hidden))
    def handler(runtime, command_input):
        return None

    return handler


@pytest.fixture
def registry():
    return CommandRegistry()


class TestContexts:
    """Test context registration and lookup."""

    def test_root_context_is_preseeded(self, registry):
        """Test that the root context always exists."""
        root = registry.context(ROOT_CONTEXT)

        assert root is not None
        assert root.prompt == "> "

    def test_alias_lookup(self, registry):
        """Test context lookup by alias."""
        registry.register_context(ContextSpec(name="servers", aliases=("srv",)))

        assert registry.context("srv").name == "servers"
        assert registry.resolve_context_name("srv") == "servers"
        assert registry.resolve_context_name("servers") == "servers"
        assert registry.resolve_context_name("nope") is None

    def test_alias_last_write_wins(self, registry):
        """Test that a reused alias points at the latest context."""
        registry.register_context(ContextSpec(name="a", aliases=("x",)))
        registry.register_context(ContextSpec(name="b", aliases=("x",)))

        assert registry.context("x").name == "b"

    def test_listing_excludes_root_and_hidden(self, registry):
        """Test that listings skip root and hidden contexts."""
        registry.register_context(ContextSpec(name="zeta"))
        registry.register_context(ContextSpec(name="alpha"))
        registry.register_context(ContextSpec(name="secret", hidden=True))

        assert [c.name for c in registry.contexts()] == ["alpha", "zeta"]
        assert [c.name for c in registry.contexts(include_hidden=True)] == ["alpha", "secret", "zeta"]


class TestCommands:
    """Test command registration and resolution."""

    def test_name_and_aliases_resolve_to_same_spec(self, registry):
        """Test that a name and its aliases share one entry."""
        registry.register_command(_factory("list", "servers", aliases=("l", "ls")))

        entries = [registry.resolve("servers", token) for token in ("list", "l", "ls")]
        assert all(entry.spec is entries[0].spec for entry in entries)
        assert entries[0].spec.name == "list"

    def test_resolution_is_scoped_to_one_context(self, registry):
        """Test that commands resolve only in their own context."""
        registry.register_command(_factory("status"))
        registry.register_command(_factory("list", "servers"))

        assert registry.resolve("servers", "status") is None
        assert registry.resolve(ROOT_CONTEXT, "list") is None

    def test_empty_name_is_rejected(self, registry):
        """Test that an empty command name is rejected."""
        with pytest.raises(RegistrationError, match="command spec must define name"):
            registry.register_command(_factory(""))

    def test_listing_folds_aliases_and_sorts(self, registry):
        """Test that listings show each command once, sorted."""
        registry.register_command(_factory("stop", "servers", aliases=("s",)))
        registry.register_command(_factory("list", "servers", aliases=("l",)))
        registry.register_command(_factory("debug", "servers", hidden=True))

        assert [s.name for s in registry.commands("servers")] == ["list", "stop"]
        assert [s.name for s in registry.commands("servers", include_hidden=True)] == [
            "debug",
            "list",
            "stop",
        ]

    def test_reregistration_replaces_entry(self, registry):
        """Test that registering again replaces the entry."""
        registry.register_command(_factory("list", "servers"))
        replacement = _factory("list", "servers")
        registry.register_command(replacement)

        assert registry.resolve("servers", "list").factory is replacement

    def test_unregister_removes_aliases(self, registry):
        """Test that unregistering removes the aliases too."""
        registry.register_command(_factory("list", "servers", aliases=("l",)))

        assert registry.unregister_command("servers", "l") is True
        assert registry.resolve("servers", "list") is None
        assert registry.resolve("servers", "l") is None
        assert registry.unregister_command("servers", "list") is False

    def test_namespace_listing(self, registry):
        """Test listing commands across a namespace."""
        registry.register_command(_factory("list", "cloud.servers"))
        registry.register_command(_factory("list", "cloud.db"))
        registry.register_command(_factory("list", "local"))

        specs = registry.namespace_commands("cloud.")
        assert [(s.context, s.name) for s in specs] == [("cloud.db", "list"), ("cloud.servers", "list")]


class TestWriter:
    """Test the restricted registration capability."""

    def test_writer_registers(self, registry):
        """Test registering through the writer."""
        writer = registry.writer()
        writer.register_context(ContextSpec(name="ext"))
        writer.register_command(_factory("hello", "ext"))

        assert registry.context("ext") is not None
        assert registry.resolve("ext", "hello") is not None

    def test_writer_exposes_no_read_access(self, registry):
        """Test that the writer has no lookup methods."""
        writer = registry.writer()

        assert not hasattr(writer, "resolve")
        assert not hasattr(writer, "commands")
        assert not hasattr(writer, "_commands")
