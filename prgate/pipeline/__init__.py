"""Pipeline: per-unit orchestration and report comments."""

from .comments import render_failure_comment, render_success_comment
from .models import AnalysisResult, PipelineOutcome, PipelineRun
from .orchestrator import Orchestrator
