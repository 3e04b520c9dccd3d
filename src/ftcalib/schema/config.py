"""Validation settings and the helper that applies command line overrides.

The settings select which consistency checks run and how the parsed input is
prepared before they do (ignore list, alias expansion, merging).
"""

import copy
import logging
from typing import Annotated, Any, Dict, List, Optional

from omegaconf import OmegaConf
from pydantic import Field, field_validator

from ftcalib.schema.base import SubscriptableModel

logger = logging.getLogger(__name__)

LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class ValidationConfig(SubscriptableModel):
    """Settings for preparing and validating a parsed calibration input.

    Attributes
    ----------
    bin_by_bin : bool
        Check bins for pairwise orthogonality instead of requiring shared
        axis partitions within a combination group.
    ignore_extended : bool
        Leave ``exbin`` bins out of the axis partitions.
    ignore : List[str]
        Bins to drop before validation, in the ``--ignore`` display format.
    expand_aliases : bool
        Apply ``Copy`` directives before validation.
    merge_same_analyses : bool
        Merge analyses that share an identity key before validation.
    log_level : str
        Root logging level used by the command line tool.
    """

    bin_by_bin: Annotated[
        bool,
        Field(
            default=False,
            description="Require pairwise orthogonal bins instead of shared binning.",
        ),
    ]
    ignore_extended: Annotated[
        bool,
        Field(
            default=False,
            description="Skip extrapolated (exbin) bins when building partitions.",
        ),
    ]
    ignore: Annotated[
        List[str],
        Field(
            default_factory=list,
            description="Bins to remove, as printed in binning error messages.",
        ),
    ]
    expand_aliases: Annotated[
        bool,
        Field(default=True, description="Apply Copy directives before validation."),
    ]
    merge_same_analyses: Annotated[
        bool,
        Field(
            default=True,
            description="Merge analyses with identical identity keys before validation.",
        ),
    ]
    log_level: Annotated[
        str,
        Field(default="INFO", description="Logging level for the command line tool."),
    ]

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: Any) -> str:
        level = str(v).upper()
        if level not in LOG_LEVELS:
            raise ValueError(
                f"Invalid log level '{v}'. Must be one of {', '.join(LOG_LEVELS)}."
            )
        return level


def load_config_with_overrides(
    base_cfg: Optional[Dict[str, Any]], overrides: List[str]
) -> ValidationConfig:
    """
    Apply ``key=value`` overrides to a base settings dict and validate the result.

    Parameters
    ----------
    base_cfg : dict or None
        Starting values. Missing keys take the ``ValidationConfig`` defaults.
    overrides : list of str
        Overrides in OmegaConf dotlist form (e.g. ``bin_by_bin=true``).

    Returns
    -------
    ValidationConfig
        The merged and validated settings.

    Raises
    ------
    ValueError
        If an override is not of the form ``key=value``.
    KeyError
        If an override names a setting that does not exist.
    """
    base_copy = ValidationConfig().model_dump()
    base_copy.update(copy.deepcopy(base_cfg or {}))

    valid_keys = set(ValidationConfig.model_fields)
    filtered_cli = []
    for arg in overrides:
        try:
            key, _ = arg.split("=", 1)
        except ValueError:
            raise ValueError(
                f"Invalid override format: {arg}. Expected 'key=value'"
            )
        if key not in valid_keys:
            raise KeyError(
                f"Cannot override non-existent setting: {key}. "
                f"Valid settings: {', '.join(sorted(valid_keys))}"
            )
        filtered_cli.append(arg)

    base_oc = OmegaConf.create(base_copy)
    cli_cfg = OmegaConf.from_dotlist(filtered_cli)
    merged = OmegaConf.to_container(OmegaConf.merge(base_oc, cli_cfg), resolve=True)
    logger.debug(f"Validation settings: {merged}")
    return ValidationConfig(**merged)
