"""Pipeline orchestration for Smart Image."""

from .orchestrator import ImagePipeline, run_pipeline

__all__ = [
    "ImagePipeline",
    "run_pipeline",
]
