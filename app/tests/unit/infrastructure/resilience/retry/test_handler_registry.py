"""Unit tests for the retry handler registry."""

import pytest

from infrastructure.resilience.retry import HandlerRegistrationError, HandlerRegistry

pytestmark = pytest.mark.unit


def _handler(payload, shop):
    return None


class TestHandlerRegistry:
    def test_register_and_get(self):
        registry = HandlerRegistry()
        registry.register("products/update", _handler)

        assert registry.get("products/update") is _handler
        assert "products/update" in registry
        assert registry.topics() == ["products/update"]

    def test_get_unknown_returns_none(self):
        assert HandlerRegistry().get("products/update") is None

    @pytest.mark.parametrize("topic", ["", "   "])
    def test_rejects_empty_topic(self, topic):
        with pytest.raises(HandlerRegistrationError):
            HandlerRegistry().register(topic, _handler)

    def test_rejects_non_callable(self):
        with pytest.raises(HandlerRegistrationError, match="not callable"):
            HandlerRegistry().register("products/update", "not-a-handler")

    def test_rejects_duplicate_topic(self):
        registry = HandlerRegistry()
        registry.register("products/update", _handler)

        with pytest.raises(HandlerRegistrationError, match="already registered"):
            registry.register("products/update", _handler)

    def test_closed_topic_set(self):
        registry = HandlerRegistry(known_topics=["products/update"])

        with pytest.raises(HandlerRegistrationError, match="unknown topic"):
            registry.register("orders/create", _handler)

    def test_registration_error_is_value_error(self):
        assert issubclass(HandlerRegistrationError, ValueError)
