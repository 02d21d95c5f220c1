"""Generation job graph: drives a GeneratedPlan from pending to a terminal status."""

from tripgen.graph.build import create_generation_job_graph, build_initial_state

__all__ = ["create_generation_job_graph", "build_initial_state"]
