"""
tripgen: AI travel plan generation pipeline.

This package contains:
- shared/: Common infrastructure (LLM client, logging, plan content contract)
- generation/: Prompt/schema-driven generation service
- rate_limit/: Per-user sliding-window admission control
- plans/: GeneratedPlan records, storage and inbound operations
- graph/: Generation job graph (plan status state machine)
- jobs/: Job payload, timeout-bounded runner and worker pool
- api/: FastAPI adapter
"""

from tripgen.generation.service import GenerationService
from tripgen.graph.build import create_generation_job_graph

__all__ = ["GenerationService", "create_generation_job_graph"]
