"""Hiring pipeline: per-company stage registry and application state machine."""

from .registry import StageRegistry
from .engine import PipelineEngine, PipelineColumn
from .roles import stage_role, is_terminal

__all__ = ['StageRegistry', 'PipelineEngine', 'PipelineColumn', 'stage_role', 'is_terminal']
