"""Tests for the renderer registry."""

from __future__ import annotations

import pytest

from facadegen.codegen.core.metadata import MetadataSnapshot
from facadegen.codegen.languages.python import DataclassFacadeRenderer
from facadegen.codegen import registry as registry_module
from facadegen.codegen.registry import (
    RegistryError,
    RendererRegistry,
    get_registry,
    list_backends,
    register_renderer,
)


def test_builtin_backends_are_registered() -> None:
    registry = get_registry()

    assert registry.list_backends() == ["dataclass", "sqlalchemy"]
    assert registry.resolve_name("PY") == "dataclass"
    assert registry.resolve_name("sa") == "sqlalchemy"
    assert registry.list_formatters() == ["basic", "none"]


def test_backend_info() -> None:
    info = get_registry().get_backend_info("python")

    assert info["name"] == "dataclass"
    assert info["factory"] == "DataclassFacadeRenderer"
    assert info["aliases"] == ["py", "python"]


def test_unknown_backend() -> None:
    registry = RendererRegistry()

    with pytest.raises(RegistryError, match="No renderer registered"):
        registry.resolve_name("cobol")
    assert not registry.is_supported("cobol")


def test_alias_conflict_is_rejected() -> None:
    registry = RendererRegistry()
    registry.register("first", DataclassFacadeRenderer, aliases=["shared"])

    with pytest.raises(RegistryError, match="already points"):
        registry.register("second", DataclassFacadeRenderer, aliases=["shared"])


def test_unregister_drops_aliases() -> None:
    registry = RendererRegistry()
    registry.register("first", DataclassFacadeRenderer, aliases=["one"])

    registry.unregister("first")

    assert not registry.is_supported("one")


def test_create_renderer_uses_configured_formatter(make_config, provider) -> None:
    registry = RendererRegistry()
    registry.register("dataclass", DataclassFacadeRenderer)
    registry.register_formatter("upper", str.upper)
    config = make_config(options={"code-formatter": "upper"})

    renderer = registry.create_renderer("dataclass", config, MetadataSnapshot(provider))

    assert renderer.formatter is str.upper
    assert renderer.formatter_name == "upper"


def test_unknown_formatter(make_config, provider) -> None:
    registry = RendererRegistry()
    registry.register("dataclass", DataclassFacadeRenderer)
    config = make_config(options={"code-formatter": "black"})

    with pytest.raises(RegistryError, match="Unknown code formatter"):
        registry.create_renderer("dataclass", config, MetadataSnapshot(provider))


def test_factory_must_return_a_renderer(make_config, provider) -> None:
    registry = RendererRegistry()
    registry.register("broken", lambda *args, **kwargs: object())
    registry.register_formatter("basic", str)

    with pytest.raises(RegistryError, match="not a SourceRenderer"):
        registry.create_renderer("broken", make_config(), MetadataSnapshot(provider))


def test_register_renderer_on_global_registry(monkeypatch) -> None:
    monkeypatch.setattr(registry_module, "_global_registry", None)

    register_renderer("facade", DataclassFacadeRenderer, aliases=["fc"])

    assert "facade" in list_backends()
    assert get_registry().resolve_name("fc") == "facade"
