"""Coordinators - orchestrate services into a pipeline run."""

from .pipeline_coordinator import PipelineContext, PipelineReport, PipelineStrategy, VocabularyPipeline

__all__ = ["PipelineContext", "PipelineReport", "PipelineStrategy", "VocabularyPipeline"]
