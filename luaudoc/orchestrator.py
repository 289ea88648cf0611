"""Pipeline orchestration for extract/render/build flows."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from . import __version__
from .config import LuauDocConfig, RenderConfig, load_config
from .extract.aggregator import ExtractionResult, ModuleAggregator
from .logging import get_logger
from .models import Diagnostic, ReferenceDocument
from .reference import (
    LoadedReference,
    ReferenceDocumentError,
    dump_reference_document,
    load_reference_document,
    write_reference_document,
)
from .render.grouping import is_signal_property, plan_pages
from .render.markdown import MarkdownWriter
from .render.pages import PageRenderer
from .render.styles import write_tab_size_rule
from .render.xref import CrossReferenceResolver
from .stores import ManifestStore


@dataclass
class ExtractOutcome:
    """Result of an extraction run."""

    output: Optional[Path]
    document: ReferenceDocument
    diagnostics: List[Diagnostic] = field(default_factory=list)


@dataclass
class RenderOutcome:
    """Result of a render run; paths are relative to `out_dir`."""

    out_dir: Path
    manifest_path: Optional[Path]
    written: List[str] = field(default_factory=list)
    unchanged: List[str] = field(default_factory=list)
    deleted: List[str] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)
    stylesheet_updated: bool = False


@dataclass
class BuildOutcome:
    extract: ExtractOutcome
    render: RenderOutcome

    @property
    def diagnostics(self) -> List[Diagnostic]:
        return self.extract.diagnostics + self.render.diagnostics


def render_pages(
    document: ReferenceDocument,
    config: RenderConfig,
    writer: MarkdownWriter | None = None,
) -> Dict[str, str]:
    """Render every class page plus the overview, keyed by relative output path."""
    predicate = is_signal_property if config.classify_signals_as_events else None
    entries = plan_pages(
        document,
        include_private=config.include_private,
        event_predicate=predicate,
    )
    resolver = CrossReferenceResolver(entries, config.route_base_path)
    renderer = PageRenderer(config, resolver)
    writer = writer or MarkdownWriter(config.templates_dir)
    return {page.relative_path: writer.write(page) for page in renderer.render_all(entries)}


class Orchestrator:
    """Coordinates the extraction and rendering pipelines for one project."""

    def __init__(self, writer: MarkdownWriter | None = None) -> None:
        self.writer = writer
        self.logger = get_logger("orchestrator")

    def load(self, config_path: Path | str) -> LuauDocConfig:
        config = load_config(Path(config_path))
        self.logger.debug("Loaded configuration for %s", config.root)
        return config

    def run_extract(self, config: LuauDocConfig, *, write: bool = True) -> ExtractOutcome:
        extract = config.extract
        self.logger.info("Extracting reference from %s", extract.src_dir)
        result: ExtractionResult = ModuleAggregator(
            extract.src_dir,
            root=config.root,
            types_dir=extract.types_dir,
            module_id_overrides=extract.module_id_overrides,
            exclude_paths=extract.exclude_paths,
            generator_version=__version__,
        ).run()

        output = extract.output if write else None
        if output is not None:
            write_reference_document(result.document, output)
            self.logger.info("Wrote reference document to %s", output)
        return ExtractOutcome(output=output, document=result.document, diagnostics=result.diagnostics)

    def run_render(
        self,
        config: LuauDocConfig,
        *,
        loaded: LoadedReference | None = None,
    ) -> RenderOutcome:
        render = config.render
        if loaded is None:
            if render.input is None:
                raise ReferenceDocumentError("No reference document configured for rendering")
            loaded = load_reference_document(render.input)
        out_dir = render.out_dir or config.root / "docs" / "reference" / render.lang
        self.logger.info("Rendering %s reference pages into %s", render.lang, out_dir)

        outputs = render_pages(loaded.document, render, self._writer_for(render))
        manifest = ManifestStore(render.manifest_path)
        result = manifest.reconcile(
            out_dir,
            render.lang,
            outputs,
            input_path=loaded.path,
            input_raw=loaded.raw,
            generator_version=loaded.document.generator_version,
            clean=render.clean,
        )

        outcome = RenderOutcome(
            out_dir=out_dir,
            manifest_path=render.manifest_path,
            written=result.written,
            unchanged=result.unchanged,
            deleted=result.deleted,
            diagnostics=result.diagnostics,
        )
        if render.code_tab_size and render.stylesheet is not None:
            outcome.stylesheet_updated = write_tab_size_rule(render.stylesheet, render.code_tab_size)
        self.logger.info(
            "Rendered %d pages (%d written, %d deleted)",
            len(outputs),
            len(outcome.written),
            len(outcome.deleted),
        )
        return outcome

    def run_build(self, config: LuauDocConfig) -> BuildOutcome:
        extracted = self.run_extract(config)
        raw = dump_reference_document(extracted.document)
        loaded = LoadedReference(document=extracted.document, raw=raw, path=extracted.output)
        rendered = self.run_render(config, loaded=loaded)
        return BuildOutcome(extract=extracted, render=rendered)

    def _writer_for(self, render: RenderConfig) -> MarkdownWriter:
        if self.writer is not None:
            return self.writer
        return MarkdownWriter(render.templates_dir)


__all__ = [
    "BuildOutcome",
    "ExtractOutcome",
    "Orchestrator",
    "RenderOutcome",
    "render_pages",
]
