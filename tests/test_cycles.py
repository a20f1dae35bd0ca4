import pytest

from deferbind import Container, CyclicResolutionError, ResolutionError


def test_self_referencing_producer_raises_cyclic_resolution_error():
    c = Container()
    c.register("a", lambda container: container.resolve("a"))

    with pytest.raises(CyclicResolutionError) as ctx:
        c.resolve("a")
    assert ctx.value.chain == ["a", "a"]
    assert isinstance(ctx.value, ResolutionError)


def test_transitive_cycle_reports_chain():
    c = Container()
    c.register("a", lambda container: container.resolve("b"))
    c.register("b", lambda container: container.resolve("a"))

    with pytest.raises(CyclicResolutionError) as ctx:
        c.resolve("a")
    assert ctx.value.chain == ["a", "b", "a"]
    assert "a -> b -> a" in str(ctx.value)


def test_cycle_chain_starts_at_repeated_identifier():
    c = Container()
    c.register("root", lambda container: container.resolve("a"))
    c.register("a", lambda container: container.resolve("b"))
    c.register("b", lambda container: container.resolve("a"))

    with pytest.raises(CyclicResolutionError) as ctx:
        c.resolve("root")
    assert ctx.value.chain == ["a", "b", "a"]


def test_cycle_through_deferred_factory_is_detected():
    c = Container()
    c.defer("a", lambda container: container.resolve("a"))

    with pytest.raises(CyclicResolutionError):
        c.resolve("a")
    # promotion did not happen
    assert c.has("a")


def test_container_is_usable_after_cycle():
    c = Container()
    c.register("a", lambda container: container.resolve("b"))
    c.register("b", lambda container: container.resolve("a"))

    with pytest.raises(CyclicResolutionError):
        c.resolve("a")

    c.register("b", "fixed")
    assert c.resolve("a") == "fixed"


def test_diamond_dependencies_are_not_a_cycle():
    c = Container()
    c.register("config", lambda _: {"dsn": "sqlite://"})
    c.register("repo", lambda container: ("repo", container.resolve("config")))
    c.register("cache", lambda container: ("cache", container.resolve("config")))
    c.register("svc", lambda container: (container.resolve("repo"), container.resolve("cache")))

    repo, cache = c.resolve("svc")
    assert repo[1] is cache[1]


def test_resolving_same_transient_twice_within_producer_is_not_a_cycle():
    c = Container()
    c.transient("item", lambda _: object())
    c.register("pair", lambda container: (container.resolve("item"), container.resolve("item")))

    first, second = c.resolve("pair")
    assert first is not second
