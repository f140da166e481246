import pytest

from voiceruntime import VoiceProfile, default_registry
from voiceruntime.config import ConfigurationError, PropertyStore
from voiceruntime.factory import ComponentRegistry, ObjectDescriptor, instantiate


class Plain:
    def __init__(self):
        self.args = ()


class Pair:
    def __init__(self, first, second):
        self.args = (first, second)


class Broken:
    def __init__(self, reason):
        raise ValueError(f"cannot use {reason}")


@pytest.fixture
def registry():
    registry = ComponentRegistry()
    registry.register("demo.Plain", Plain)
    registry.register("demo.Pair", Pair)
    registry.register("demo.Broken", Broken)
    return registry


@pytest.fixture
def props():
    return PropertyStore({"demo.lexicon": "  lexicon.fst  ", "demo.empty": ""})


def test_parse_without_parentheses():
    descriptor = ObjectDescriptor.parse("demo.Plain")
    assert descriptor.type_name == "demo.Plain"
    assert descriptor.raw_args is None


def test_parse_keeps_raw_arguments():
    descriptor = ObjectDescriptor.parse("demo.Pair(a, $demo.lexicon )")
    assert descriptor.type_name == "demo.Pair"
    assert descriptor.raw_args == ("a", " $demo.lexicon ")


def test_parse_empty_argument_list():
    assert ObjectDescriptor.parse("demo.Plain()").raw_args == ()


def test_parse_uses_last_closing_parenthesis():
    descriptor = ObjectDescriptor.parse("demo.Pair(f(x),y)")
    assert descriptor.raw_args == ("f(x)", "y")


def test_no_parentheses_invokes_no_argument_factory(registry, props):
    obj = instantiate("demo.Plain", store=props, registry=registry)
    assert isinstance(obj, Plain)


def test_empty_parentheses_invokes_zero_argument_factory(registry, props):
    obj = instantiate("demo.Plain()", store=props, registry=registry)
    assert isinstance(obj, Plain)


def test_two_arguments_are_trimmed_in_order(registry, props):
    obj = instantiate("demo.Pair( left ,right  )", store=props, registry=registry)
    assert obj.args == ("left", "right")


def test_indirect_argument_uses_trimmed_property_value(registry, props):
    obj = instantiate("demo.Pair(x,$demo.lexicon)", store=props, registry=registry)
    assert obj.args == ("x", "lexicon.fst")


def test_indirect_argument_with_empty_value(registry, props):
    obj = instantiate("demo.Pair($demo.empty,y)", store=props, registry=registry)
    assert obj.args == ("", "y")


def test_missing_indirect_property_fails_with_descriptor(registry, props):
    with pytest.raises(ConfigurationError) as excinfo:
        instantiate("demo.Pair(x,$demo.unset)", store=props, registry=registry)
    message = str(excinfo.value)
    assert "demo.Pair(x,$demo.unset)" in message
    assert "No such property: demo.unset" in message


def test_unknown_type(registry, props):
    with pytest.raises(ConfigurationError, match="No factory registered for type 'demo.Nope'"):
        instantiate("demo.Nope", store=props, registry=registry)


def test_argument_count_must_match(registry, props):
    with pytest.raises(ConfigurationError, match="3 string argument"):
        instantiate("demo.Pair(a,b,c)", store=props, registry=registry)
    with pytest.raises(ConfigurationError, match="no-argument constructor"):
        instantiate("demo.Pair", store=props, registry=registry)


def test_constructor_failure_is_wrapped(registry, props):
    with pytest.raises(ConfigurationError) as excinfo:
        instantiate("demo.Broken(tape)", store=props, registry=registry)
    assert "cannot use tape" in str(excinfo.value)
    assert isinstance(excinfo.value.__cause__, ValueError)


def test_register_as_decorator_and_default_arities():
    registry = ComponentRegistry()

    @registry.register("demo.Optional")
    def make(name, flavour="plain"):
        return (name, flavour)

    assert "demo.Optional" in registry
    _, arities = registry.lookup("demo.Optional")
    assert arities == frozenset({1, 2})
    assert registry.create("demo.Optional", ["a"]) == ("a", "plain")
    assert registry.names() == ["demo.Optional"]

    registry.unregister("demo.Optional")
    assert "demo.Optional" not in registry


def test_var_positional_factories_need_explicit_arities():
    registry = ComponentRegistry()
    with pytest.raises(ValueError):
        registry.register("demo.Any", lambda *args: args)
    registry.register("demo.Any", lambda *args: args, arities=(1, 2))
    assert registry.create("demo.Any", ["a", "b"]) == ("a", "b")


def test_builtin_voice_profile_registration():
    voice = instantiate("voiceruntime.VoiceProfile(anna, de)", store=PropertyStore())
    assert voice == VoiceProfile(name="anna", locale="de")
    assert "voiceruntime.MemoryPolicy" in default_registry
