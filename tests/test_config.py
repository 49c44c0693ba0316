"""Tests for ContextVar-based render configuration.

Validates thread isolation, context manager behavior, and that walkers pick
up the config active when they are created.
"""

from threading import Thread

import pytest

from safemdx import (
    ConfigError,
    MdxWalker,
    RenderConfig,
    from_dict,
    get_render_config,
    render,
    render_config_context,
    reset_render_config,
    set_render_config,
)

DOC = {
    "type": "root",
    "children": [
        {
            "type": "paragraph",
            "position": {"start": {"line": 3, "column": 1, "offset": 0}, "end": {"line": 3, "column": 4, "offset": 3}},
            "children": [{"type": "text", "value": "abc"}],
        }
    ],
}


class TestRenderConfigDataclass:
    """Test RenderConfig frozen dataclass behavior."""

    def test_default_values(self) -> None:
        config = RenderConfig()
        assert config.allow_esm_imports is False
        assert config.add_line_numbers is False
        assert config.evaluate_expressions is True
        assert config.unravel_paragraphs is False
        assert config.normalize_content_model is True
        assert config.markup_tag_converter is None

    def test_immutability(self) -> None:
        config = RenderConfig()
        with pytest.raises(AttributeError):
            config.add_line_numbers = True  # type: ignore[misc]

    def test_rejects_non_bool_flags(self) -> None:
        with pytest.raises(ConfigError, match="add_line_numbers must be a bool"):
            RenderConfig(add_line_numbers="yes")  # type: ignore[arg-type]

    def test_rejects_non_callable_converter(self) -> None:
        with pytest.raises(ConfigError, match="markup_tag_converter must be callable"):
            RenderConfig(markup_tag_converter="lower")  # type: ignore[arg-type]

    def test_from_dict_ignores_unknown_keys(self) -> None:
        config = RenderConfig.from_dict({"allow_esm_imports": True, "theme": "dark"})
        assert config == RenderConfig(allow_esm_imports=True)


class TestContextVarFunctions:
    """Test get/set/reset functions."""

    def teardown_method(self) -> None:
        reset_render_config()

    def test_default_config(self) -> None:
        assert get_render_config() == RenderConfig()

    def test_set_and_get(self) -> None:
        set_render_config(RenderConfig(add_line_numbers=True))
        assert get_render_config().add_line_numbers is True

    def test_reset_restores_default(self) -> None:
        set_render_config(RenderConfig(add_line_numbers=True))
        reset_render_config()
        assert get_render_config().add_line_numbers is False


class TestRenderConfigContext:
    """Test render_config_context context manager."""

    def test_nested_contexts(self) -> None:
        with render_config_context(RenderConfig(add_line_numbers=True)):
            with render_config_context(RenderConfig(evaluate_expressions=False)):
                assert get_render_config().add_line_numbers is False
                assert get_render_config().evaluate_expressions is False
            assert get_render_config().add_line_numbers is True
        assert get_render_config() == RenderConfig()

    def test_context_restores_on_exception(self) -> None:
        with pytest.raises(ValueError, match="test"):
            with render_config_context(RenderConfig(add_line_numbers=True)):
                raise ValueError("test")
        assert get_render_config().add_line_numbers is False

    def test_walker_captures_config_at_creation(self) -> None:
        with render_config_context(RenderConfig(add_line_numbers=True)):
            walker = MdxWalker(from_dict(DOC))
        paragraph = walker.run().element.children
        assert paragraph.props == {"data-markdown-line": 3}

    def test_explicit_config_wins(self) -> None:
        with render_config_context(RenderConfig(add_line_numbers=True)):
            paragraph = render(DOC, config=RenderConfig()).element.children
        assert paragraph.props == {}


class TestThreadIsolation:
    """Test thread-local configuration isolation."""

    def test_thread_isolation(self) -> None:
        results: dict[int, object] = {}

        def worker(thread_id: int, numbered: bool) -> None:
            set_render_config(RenderConfig(add_line_numbers=numbered))
            results[thread_id] = render(DOC).element.children.props.get("data-markdown-line")

        threads = [Thread(target=worker, args=(i, i % 2 == 0)) for i in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert results == {0: 3, 1: None, 2: 3, 3: None}
        # The main thread is untouched
        assert get_render_config().add_line_numbers is False
