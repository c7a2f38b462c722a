"""
Tests for application class resolution.

Tests camel_case, class_name_of, NamespaceLookup and ClassRegistry.
"""

import sys
import types
from types import SimpleNamespace

import pytest

from kickstand.bootstrap import ClassRegistry, NamespaceLookup, camel_case, class_name_of
from kickstand.exceptions import ClassNotFoundError, KickstandError


class Outer:
    class Inner:
        pass


class RecordingNamespace:
    """Namespace that records every attribute lookup."""

    def __init__(self, lookups, **attrs):
        self._lookups = lookups
        self._attrs = attrs

    def __getattr__(self, name):
        self._lookups.append(name)
        try:
            return self._attrs[name]
        except KeyError:
            raise AttributeError(name) from None


# =============================================================================
# camel_case Tests
# =============================================================================


class TestCamelCase:
    """Tests for file name to class name conversion."""

    def test_snake_case(self):
        assert camel_case("my_api") == "MyApi"

    def test_already_camel_case(self):
        assert camel_case("Already") == "Already"

    def test_every_segment_is_capitalized(self):
        assert camel_case("already_good_Case") == "AlreadyGoodCase"

    def test_lowercase_single_word(self):
        assert camel_case("echo") == "Echo"

    def test_mixed_case_without_underscore_is_kept(self):
        assert camel_case("HelloAPI") == "HelloAPI"

    def test_segment_case_is_normalized(self):
        assert camel_case("my_API") == "MyApi"


# =============================================================================
# class_name_of Tests
# =============================================================================


class TestClassNameOf:
    """Tests for normalizing app_class values."""

    def test_string_passes_through(self):
        assert class_name_of("Foo::Bar") == "Foo::Bar"

    def test_class_from_module(self):
        assert class_name_of(Outer.Inner) == f"{__name__}.Outer.Inner"

    def test_class_from_main(self):
        klass = type("MainApi", (), {"__module__": "__main__"})
        assert class_name_of(klass) == "MainApi"

    def test_other_values_use_str(self):
        assert class_name_of(42) == "42"


# =============================================================================
# NamespaceLookup Tests
# =============================================================================


class TestNamespaceLookup:
    """Tests for NamespaceLookup."""

    def test_top_level_class(self):
        lookup = NamespaceLookup(SimpleNamespace(MyApi=Outer))
        assert lookup.lookup("MyApi") is Outer

    def test_nested_class_with_dots(self):
        lookup = NamespaceLookup(SimpleNamespace(Outer=Outer))
        assert lookup.lookup("Outer.Inner") is Outer.Inner

    def test_nested_class_with_double_colon(self):
        lookup = NamespaceLookup(SimpleNamespace(Outer=Outer))
        assert lookup.lookup("Outer::Inner") is Outer.Inner

    def test_segments_are_looked_up_in_order(self):
        lookups = []
        foo = RecordingNamespace(lookups, Bar=Outer)
        root = RecordingNamespace(lookups, Foo=foo)

        assert NamespaceLookup(root).lookup("Foo::Bar") is Outer
        assert lookups == ["Foo", "Bar"]

    def test_missing_nested_segment(self):
        lookups = []
        root = RecordingNamespace(lookups, Foo=RecordingNamespace(lookups))

        with pytest.raises(ClassNotFoundError) as exc_info:
            NamespaceLookup(root).lookup("Foo::Bar")

        assert exc_info.value.class_name == "Foo::Bar"
        assert "Foo::Bar" in str(exc_info.value)
        assert lookups == ["Foo", "Bar"]

    def test_missing_first_segment(self):
        with pytest.raises(ClassNotFoundError, match="Class Nope not found."):
            NamespaceLookup(SimpleNamespace()).lookup("Nope")

    def test_error_is_not_a_generic_lookup_error(self):
        with pytest.raises(ClassNotFoundError) as exc_info:
            NamespaceLookup(SimpleNamespace()).lookup("Nope")

        assert isinstance(exc_info.value, KickstandError)
        assert not isinstance(exc_info.value, (LookupError, AttributeError, NameError))

    def test_non_class_is_not_found(self):
        lookup = NamespaceLookup(SimpleNamespace(settings={"a": 1}))
        with pytest.raises(ClassNotFoundError):
            lookup.lookup("settings")

    def test_empty_segment_is_not_found(self):
        lookup = NamespaceLookup(SimpleNamespace(Outer=Outer))
        with pytest.raises(ClassNotFoundError):
            lookup.lookup("Outer..Inner")

    def test_falls_back_to_loaded_modules(self):
        lookup = NamespaceLookup(SimpleNamespace())
        assert lookup.lookup(f"{__name__}.Outer.Inner") is Outer.Inner

    def test_loaded_submodule_without_parent_attribute(self, monkeypatch):
        parent = types.ModuleType("kickstand_fake_pkg")
        child = types.ModuleType("kickstand_fake_pkg.apis")
        child.BillingApi = Outer
        monkeypatch.setitem(sys.modules, "kickstand_fake_pkg", parent)
        monkeypatch.setitem(sys.modules, "kickstand_fake_pkg.apis", child)

        lookup = NamespaceLookup(SimpleNamespace())
        assert lookup.lookup("kickstand_fake_pkg.apis.BillingApi") is Outer

    def test_modules_are_not_imported(self):
        lookup = NamespaceLookup(SimpleNamespace())
        with pytest.raises(ClassNotFoundError):
            lookup.lookup("kickstand_never_imported_module.Api")
        assert "kickstand_never_imported_module" not in sys.modules

    def test_default_root_is_main_module(self, monkeypatch):
        main = types.ModuleType("__main__")
        main.MainApi = Outer
        monkeypatch.setitem(sys.modules, "__main__", main)

        assert NamespaceLookup().lookup("MainApi") is Outer


# =============================================================================
# ClassRegistry Tests
# =============================================================================


class TestClassRegistry:
    """Tests for ClassRegistry."""

    def test_register_under_qualified_name(self):
        registry = ClassRegistry()
        registry.register(Outer.Inner)

        assert registry.lookup("Outer.Inner") is Outer.Inner
        assert registry.lookup("Outer::Inner") is Outer.Inner

    def test_register_under_custom_name(self):
        registry = ClassRegistry()
        registry.register(Outer, name="billing::Api")

        assert registry.has("billing.Api")
        assert registry.lookup("billing::Api") is Outer

    def test_lookup_missing(self):
        with pytest.raises(ClassNotFoundError) as exc_info:
            ClassRegistry().lookup("Foo::Bar")
        assert exc_info.value.class_name == "Foo::Bar"

    def test_register_replaces(self):
        registry = ClassRegistry()
        registry.register(Outer, name="Api")
        registry.register(Outer.Inner, name="Api")

        assert registry.lookup("Api") is Outer.Inner
        assert registry.registered_names == ["Api"]

    def test_unregister(self):
        registry = ClassRegistry()
        registry.register(Outer)

        assert registry.unregister("Outer") is True
        assert registry.unregister("Outer") is False
        assert not registry.has("Outer")

    def test_clear(self):
        registry = ClassRegistry()
        registry.register(Outer)
        registry.clear()
        assert registry.registered_names == []
