"""Tests for the import alias manager."""

from __future__ import annotations

from structmap.domain.imports import ImportAliasManager, normalize_path


class TestNormalizePath:
    def test_strips_quotes_and_space(self) -> None:
        assert normalize_path(' "example.com/x" ') == "example.com/x"


class TestRegister:
    def test_aliases_in_first_seen_order(self) -> None:
        mgr = ImportAliasManager()
        mgr.register("example.com/a")
        mgr.register("example.com/b")
        mgr.register("example.com/a")
        assert mgr.registered == {"example.com/a": "ref1", "example.com/b": "ref2"}

    def test_quoted_path_is_the_same_path(self) -> None:
        mgr = ImportAliasManager()
        mgr.register('"example.com/a"')
        mgr.register("example.com/a")
        assert mgr.alias_of("example.com/a") == "ref1"
        assert len(mgr.registered) == 1

    def test_path_without_separator_gets_no_alias(self) -> None:
        mgr = ImportAliasManager()
        mgr.register("time")
        mgr.register("example.com/a")
        assert mgr.alias_of("time") == ""
        assert mgr.alias_of("example.com/a") == "ref1"

    def test_empty_path_ignored(self) -> None:
        mgr = ImportAliasManager()
        mgr.register("  ")
        assert mgr.registered == {}

    def test_unregistered_alias_is_empty(self) -> None:
        assert ImportAliasManager().alias_of("example.com/nope") == ""


class TestQualifierFor:
    def test_alias(self) -> None:
        mgr = ImportAliasManager()
        mgr.register("example.com/a")
        assert mgr.qualifier_for("example.com/a") == "ref1"

    def test_bare_standard_library_name(self) -> None:
        mgr = ImportAliasManager()
        mgr.register("time")
        assert mgr.qualifier_for("time") == "time"

    def test_unknown(self) -> None:
        assert ImportAliasManager().qualifier_for("example.com/a") == ""


class TestRender:
    def test_only_referenced_aliases_emitted(self) -> None:
        mgr = ImportAliasManager()
        mgr.register("example.com/a")
        mgr.register("example.com/b")
        block = mgr.render("func F(src ref2.T) {}")
        assert block == 'import (\n\tref2 "example.com/b"\n)'

    def test_alias_order(self) -> None:
        mgr = ImportAliasManager()
        for path in ("example.com/a", "example.com/b", "example.com/c"):
            mgr.register(path)
        block = mgr.render("ref3.X ref1.Y")
        assert block.index("ref1") < block.index("ref3")

    def test_ref1_does_not_match_ref11(self) -> None:
        mgr = ImportAliasManager()
        for i in range(11):
            mgr.register(f"example.com/p{i + 1}")
        block = mgr.render("x := ref11.Value")
        assert '\tref11 "example.com/p11"' in block
        assert '\tref1 "example.com/p1"' not in block

    def test_selector_suffix_does_not_count(self) -> None:
        mgr = ImportAliasManager()
        mgr.register("example.com/a")
        assert mgr.render("x.ref1.Value") == ""

    def test_nothing_referenced(self) -> None:
        mgr = ImportAliasManager()
        mgr.register("example.com/a")
        assert mgr.render("dst.A = src.A") == ""

    def test_bare_import_rendered_unaliased(self) -> None:
        mgr = ImportAliasManager()
        mgr.register("time")
        mgr.register("example.com/a")
        block = mgr.render("dst.At = time.Now()\nvar _ ref1.T")
        assert block == 'import (\n\t"time"\n\n\tref1 "example.com/a"\n)'

    def test_ten_registered_three_referenced(self) -> None:
        mgr = ImportAliasManager()
        for i in range(10):
            mgr.register(f"example.com/p{i}")
        block = mgr.render("var a ref2.A\nvar b ref5.B\nvar c ref9.C")
        assert len(block.splitlines()) == 5
        assert [line.split()[0] for line in block.splitlines()[1:-1]] == ["ref2", "ref5", "ref9"]
