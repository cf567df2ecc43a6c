"""Unit tests for BaseOrchestrator abstract class."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import pytest

from tfradius.core.common.base_orchestrator import BaseOrchestrator
from tfradius.core.config import ConversionSettings
from tfradius.ir.models import ModuleMetadata, ParsedModule
from tfradius.models.radius import (
    INJECTED_DESCRIPTIONS,
    PropertyType,
    ResourceTypeDefinition,
    SchemaProperty,
    create_resource_type,
)

# -------------------- Fakes / helpers --------------------


class FakeParser:
    """Minimal ModuleParser fake with multi-part ext support."""

    def __init__(self, exts: list[str] | None = None):
        self._exts = exts or [".tf", ".tf.json"]
        self.parsed: list[Path] = []
        self.built_with: dict[str, Any] = {}

    def get_supported_extensions(self) -> list[str]:
        return self._exts

    def can_parse(self, file_path: Path) -> bool:
        return any(file_path.name.endswith(ext) for ext in self._exts)

    def parse(self, file_path: Path) -> dict[str, Any]:
        self.parsed.append(file_path)
        return {"file": file_path.name}

    def build_module(
        self,
        parsed_files: list[dict[str, Any]],
        source_path: Path,
        origin: str = "",
        name: str | None = None,
        settings: ConversionSettings | None = None,
    ) -> ParsedModule:
        self.built_with = {"files": parsed_files, "origin": origin, "name": name}
        return ParsedModule(metadata=ModuleMetadata(name=name or "m", origin=origin))


class BoomParser(FakeParser):
    def parse(self, file_path: Path) -> dict[str, Any]:
        raise RuntimeError("parse boom")


def _definition() -> ResourceTypeDefinition:
    builder = create_resource_type("Custom.Test", "testResource")
    for name, description in INJECTED_DESCRIPTIONS.items():
        builder.with_property(
            name, SchemaProperty(type=PropertyType.STRING, description=description)
        )
    return builder.with_required(*INJECTED_DESCRIPTIONS).build()


class FakeMapper:
    def __init__(self) -> None:
        self.calls: list[tuple[ParsedModule, ConversionSettings | None]] = []

    def map(
        self, module: ParsedModule, settings: ConversionSettings | None = None
    ) -> ResourceTypeDefinition:
        self.calls.append((module, settings))
        return _definition()


class ConcreteOrchestrator(BaseOrchestrator):
    def __init__(self, parser: FakeParser | None = None) -> None:
        super().__init__()
        self._parser = parser or FakeParser()
        self._mapper = FakeMapper()

    def get_parser(self) -> FakeParser:
        return self._parser

    def get_mapper(self) -> FakeMapper:
        return self._mapper


@pytest.fixture
def module_dir(tmp_path: Path) -> Path:
    d = tmp_path / "module"
    d.mkdir()
    (d / "variables.tf").write_text("")
    (d / "main.tf").write_text("")
    (d / "override.tf.json").write_text("{}")
    (d / "README.md").write_text("")
    nested = d / "modules" / "inner"
    nested.mkdir(parents=True)
    (nested / "variables.tf").write_text("")
    return d


class TestFindSourceFiles:
    def test_top_level_only_sorted(self, module_dir: Path) -> None:
        orch = ConcreteOrchestrator()
        files = orch.find_source_files(module_dir)
        assert [f.name for f in files] == ["main.tf", "override.tf.json", "variables.tf"]

    def test_single_file(self, module_dir: Path) -> None:
        orch = ConcreteOrchestrator()
        assert orch.find_source_files(module_dir / "main.tf") == [module_dir / "main.tf"]

    def test_missing_path(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError, match="does not exist"):
            ConcreteOrchestrator().find_source_files(tmp_path / "missing")


class TestTranslate:
    def test_returns_definition_and_keeps_output(self, module_dir: Path) -> None:
        orch = ConcreteOrchestrator()
        definition = orch.translate(module_dir, origin="git://x", name="mod")

        assert definition.namespace == "Custom.Test"
        assert orch.last_output is not None
        assert orch.last_output.startswith("namespace: Custom.Test\n")
        assert orch._parser.built_with["origin"] == "git://x"
        assert orch._parser.built_with["name"] == "mod"
        assert len(orch._parser.built_with["files"]) == 3

    def test_passes_settings_to_mapper(self, module_dir: Path) -> None:
        orch = ConcreteOrchestrator()
        settings = ConversionSettings(max_type_depth=3)
        orch.translate(module_dir, settings=settings)
        assert orch._mapper.calls[0][1] is settings

    def test_writes_output_file(self, module_dir: Path, tmp_path: Path) -> None:
        out = tmp_path / "out" / "nested" / "type.yaml"
        orch = ConcreteOrchestrator()
        orch.translate(module_dir, out)
        assert out.read_text(encoding="utf-8") == orch.last_output

    def test_no_files_raises(self, tmp_path: Path) -> None:
        empty = tmp_path / "empty"
        empty.mkdir()
        with pytest.raises(ValueError, match="No supported source files"):
            ConcreteOrchestrator().translate(empty)

    def test_failure_writes_nothing(
        self, module_dir: Path, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        out = tmp_path / "out.yaml"
        orch = ConcreteOrchestrator(parser=BoomParser())
        with caplog.at_level(logging.ERROR):
            with pytest.raises(RuntimeError, match="parse boom"):
                orch.translate(module_dir, out)
        assert not out.exists()
        assert orch.last_output is None
        assert any("Conversion failed" in r.getMessage() for r in caplog.records)


def test_orchestrator_info() -> None:
    info = ConcreteOrchestrator().get_orchestrator_info()
    assert info["class_name"] == "ConcreteOrchestrator"
    assert info["parser"]["supported_extensions"] == [".tf", ".tf.json"]
    assert info["mapper"]["class_name"] == "FakeMapper"
