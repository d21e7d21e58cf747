import pytest

import scopebind
from scopebind import (
    GLOBAL_SCOPE,
    DependencyNotFoundError,
    default_container,
    destroy,
    inject,
    register_for,
    register_instance,
    register_self,
    replace_with,
    service,
    service_for,
)


@pytest.fixture(autouse=True)
def _clean_default_container():
    scopebind.reset()
    yield
    scopebind.reset()


class Greeter:
    def greet(self, name: str) -> str:
        return f"Hello, {name}"


def test_module_functions_share_the_default_container():
    register_self(Greeter)

    assert default_container.is_registered(Greeter, GLOBAL_SCOPE)
    assert inject(Greeter) is default_container.inject(Greeter)


def test_decorators_register_in_default_container():
    @service()
    class Clock: ...

    @service_for(Greeter, "polite")
    class PoliteGreeter(Greeter):
        def greet(self, name: str) -> str:
            return f"Good day, {name}"

    assert isinstance(inject(Clock), Clock)
    assert inject(Greeter, "polite").greet("Ada") == "Good day, Ada"


def test_replace_and_destroy_through_module_functions():
    register_for("greeting", lambda: "hi")
    assert inject("greeting") == "hi"

    replace_with("greeting", instance="hello")
    assert inject("greeting") == "hello"

    destroy("greeting")
    assert not default_container.is_cached("greeting")
    assert inject("greeting") == "hello"


def test_register_instance_and_reset():
    greeter = Greeter()
    register_instance(Greeter, greeter)
    assert inject(Greeter) is greeter

    scopebind.reset()

    with pytest.raises(DependencyNotFoundError, match="Greeter in key: #global#"):
        inject(Greeter)
