"""Runs the library pipeline once per architecture, strictly in sequence."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from .models import ArchitectureTarget, PipelineResult
from .pipeline import Pipeline


@dataclass(slots=True)
class ArchitectureBuildDriver:
    pipeline: Pipeline

    def run(self, targets: Sequence[ArchitectureTarget]) -> dict[str, PipelineResult]:
        """Build every target in order; a failure leaves later targets untouched."""
        results: dict[str, PipelineResult] = {}
        for target in targets:
            target.prefix.mkdir(parents=True, exist_ok=True)
            results[target.identifier] = self.pipeline.run(target)
        return results
