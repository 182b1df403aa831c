"""Core traversal and optimization functionality."""

from .reducer import ImageReducer, run
from .scanner import DirectoryScanner
from .planner import OptimizationPlanner
from .verifier import VerificationController
from .engine import TransformEngine, PillowTransformEngine
from .errors import ImageReducerError, ConfigError, TransformError
from .models import (
    FileOutcome,
    ImageProbe,
    RunStats,
    ScanConfiguration,
    TransformPlan,
    TreeEntry,
)

__all__ = [
    "ImageReducer", "run", "DirectoryScanner", "OptimizationPlanner", "VerificationController",
    "TransformEngine", "PillowTransformEngine", "ImageReducerError", "ConfigError", "TransformError",
    "FileOutcome", "ImageProbe", "RunStats", "ScanConfiguration", "TransformPlan", "TreeEntry",
]
