"""
Тесты метаданных модулей и реестра модулей.
"""

import asyncio

import pytest

from templater.modules.base import ALL_FILE_TYPES, ModuleDescriptor, Phase, TemplateModule
from templater.modules.registry import ModuleRegistry


def make_module(name, priority=100, tags=(), file_types=ALL_FILE_TYPES):
    cls = type(
        f"{name.title()}Module",
        (TemplateModule,),
        {
            "name": name,
            "priority": priority,
            "tags": frozenset(tags),
            "supported_file_types": frozenset(file_types),
        },
    )
    return cls()


class UpperModule(TemplateModule):
    name = "upper"
    tags = frozenset({"upper"})

    async def render(self, text, context, file_type):
        async def replace(match):
            return match.data.upper()

        return await self.replace_tags(text, replace)


class TestTemplateModule:

    def test_identity_module_implements_no_phases(self):
        assert make_module("plain").implemented_phases() == frozenset()

    def test_overridden_phases_detected(self):
        assert UpperModule().implemented_phases() == frozenset({Phase.RENDER})

    def test_descriptor(self):
        descriptor = UpperModule().descriptor()
        assert descriptor == ModuleDescriptor(
            name="upper",
            tags=frozenset({"upper"}),
            supported_file_types=ALL_FILE_TYPES,
            priority=100,
            phases=frozenset({Phase.RENDER}),
        )

    def test_should_process_requires_tag(self):
        module = UpperModule()
        assert module.should_process("a {% upper x %}", "docx") is True
        assert module.should_process("a {% lower x %}", "docx") is False
        assert module.should_process("{% upper x %}", "odt") is False

    def test_untagged_module_always_applies(self):
        assert make_module("any").should_process("", "xlsx") is True

    def test_find_tags_in_text_order(self):
        module = make_module("multi", tags=("a", "b"))
        matches = module.find_tags("{% b two %} x {%a one%} {% a %}")
        assert [(m.name, m.data) for m in matches] == [("b", "two"), ("a", "one"), ("a", "")]
        assert matches[0].start == 0
        assert matches[0].raw == "{% b two %}"

    def test_tag_name_is_not_a_prefix_match(self):
        module = make_module("img", tags=("image",))
        assert module.find_tags("{% images x %}") == []

    def test_replace_tags(self):
        result = asyncio.run(UpperModule().render("x {% upper abc %} y {%upper d%}", {}, "docx"))
        assert result == "x ABC y D"

    def test_session_outside_run(self):
        with pytest.raises(RuntimeError):
            UpperModule().session


class TestModuleRegistry:

    def setup_method(self):
        self.registry = ModuleRegistry()

    def test_register_orders_by_priority(self):
        for name, priority in [("c", 50), ("a", 10), ("b", 30)]:
            self.registry.register(make_module(name, priority))
        assert self.registry.processing_order() == ["a", "b", "c"]

    def test_equal_priority_keeps_registration_order(self):
        for name in ["z", "y", "x"]:
            self.registry.register(make_module(name, 20))
        self.registry.register(make_module("first", 5))
        assert self.registry.processing_order() == ["first", "z", "y", "x"]

    def test_duplicate_name_rejected(self):
        self.registry.register(make_module("dup"))
        with pytest.raises(ValueError, match="already registered"):
            self.registry.register(make_module("dup"))

    def test_empty_name_rejected(self):
        with pytest.raises(ValueError):
            self.registry.register(make_module(""))

    def test_explicit_descriptor_overrides_class_metadata(self):
        module = make_module("m", 100)
        descriptor = ModuleDescriptor(
            name="custom",
            tags=frozenset(),
            supported_file_types=frozenset({"docx"}),
            priority=1,
            phases=frozenset({Phase.POSTRENDER}),
        )
        self.registry.register(make_module("other", 50))
        self.registry.register(module, descriptor)
        assert self.registry.processing_order() == ["custom", "other"]
        assert self.registry.get("custom") is module
        assert self.registry.descriptor("custom") is descriptor

    def test_unregister(self):
        module = make_module("gone", 1)
        self.registry.register(module)
        self.registry.register(make_module("kept", 2))
        assert self.registry.unregister("gone") is module
        assert "gone" not in self.registry
        assert self.registry.processing_order() == ["kept"]
        assert self.registry.get("gone") is None

    def test_unregister_unknown(self):
        with pytest.raises(KeyError):
            self.registry.unregister("nope")

    def test_order_is_deterministic_after_reregistration(self):
        for name in ["a", "b", "c"]:
            self.registry.register(make_module(name, 10))
        self.registry.unregister("a")
        self.registry.register(make_module("a", 10))
        assert self.registry.processing_order() == ["b", "c", "a"]

    def test_stats_and_len(self):
        self.registry.register(make_module("b", 2))
        self.registry.register(make_module("a", 1))
        assert len(self.registry) == 2
        assert [entry.name for entry in self.registry] == ["a", "b"]
        assert self.registry.stats() == {
            "total_modules": 2,
            "module_names": ["a", "b"],
            "processing_order": ["a", "b"],
        }

    def test_clear(self):
        self.registry.register(make_module("a"))
        self.registry.clear()
        assert len(self.registry) == 0
        assert self.registry.ordered() == []
