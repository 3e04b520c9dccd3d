"""Data model for parsed calibration inputs.

This package provides Pydantic models for the parse result and the
validation settings. All public classes are re-exported from this module for
convenient imports.
"""

from ftcalib.schema.base import AnalysisKeyModel, FrozenModel, IdentityKey, SubscriptableModel
from ftcalib.schema.calibration import (
    AliasAnalysis,
    AnalysisCorrelation,
    BinCorrelation,
    Boundary,
    CalibrationAnalysis,
    CalibrationBin,
    CalibrationInfo,
    CopyTarget,
    DefaultAnalysis,
    SystematicError,
)
from ftcalib.schema.config import ValidationConfig, load_config_with_overrides

__all__ = [
    # Base
    "AnalysisKeyModel",
    "FrozenModel",
    "IdentityKey",
    "SubscriptableModel",
    # Calibration
    "AliasAnalysis",
    "AnalysisCorrelation",
    "BinCorrelation",
    "Boundary",
    "CalibrationAnalysis",
    "CalibrationBin",
    "CalibrationInfo",
    "CopyTarget",
    "DefaultAnalysis",
    "SystematicError",
    # Config
    "ValidationConfig",
    "load_config_with_overrides",
]
