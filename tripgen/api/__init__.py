"""HTTP adapter for the generation core."""

from tripgen.api.plans_api import router

__all__ = ["router"]
