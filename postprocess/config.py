"""
Configuration for the postprocessing pipeline.

All stages are parameterized through PostProcessConfig so a run is fully
described by one immutable object. Option names match the keys used by
the deployment config files (model_name, det_db_thresh, ...).
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

from config import (
    DET_MODEL_NAME,
    DET_DB_THRESH,
    DET_DB_BOX_THRESH,
    DET_DB_UNCLIP_RATIO,
    MAX_CANDIDATES,
    MIN_BOX_SIZE,
    USE_DILATION,
    SCORE_MODE,
    SCORE_MODES,
)

from .errors import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PostProcessConfig:
    """Configuration for all postprocessing stages.

    Attributes:
        model_name: Postprocessing variant to run. Only "DET" is supported;
                    anything else fails at dispatch time.
        det_db_thresh: Binarization threshold in (0, 1).
        det_db_box_thresh: Minimum region score in (0, 1).
        det_db_unclip_ratio: Expansion ratio for the polygon offset (> 0).
        max_candidates: Maximum number of region outlines per image.
        min_size: Minimum fitted box size; expanded boxes need min_size + 2.
        use_dilation: Whether to dilate the binary mask before tracing.
        score_mode: "fast" (fitted box) or "slow" (raw outline) scoring.
    """

    model_name: str = DET_MODEL_NAME
    det_db_thresh: float = DET_DB_THRESH
    det_db_box_thresh: float = DET_DB_BOX_THRESH
    det_db_unclip_ratio: float = DET_DB_UNCLIP_RATIO
    max_candidates: int = MAX_CANDIDATES
    min_size: int = MIN_BOX_SIZE
    use_dilation: bool = USE_DILATION
    score_mode: str = SCORE_MODE

    def validate(self) -> None:
        """Validate configuration parameters.

        Raises:
            ConfigurationError: If any parameter is invalid.
        """
        if not 0.0 < self.det_db_thresh < 1.0:
            raise ConfigurationError(
                f"det_db_thresh must be in (0, 1), got {self.det_db_thresh}"
            )
        if not 0.0 < self.det_db_box_thresh < 1.0:
            raise ConfigurationError(
                f"det_db_box_thresh must be in (0, 1), got {self.det_db_box_thresh}"
            )
        if self.det_db_unclip_ratio <= 0:
            raise ConfigurationError(
                f"det_db_unclip_ratio must be positive, got {self.det_db_unclip_ratio}"
            )
        if self.max_candidates <= 0:
            raise ConfigurationError(
                f"max_candidates must be positive, got {self.max_candidates}"
            )
        if self.min_size < 0:
            raise ConfigurationError(
                f"min_size must be non-negative, got {self.min_size}"
            )
        if self.score_mode not in SCORE_MODES:
            raise ConfigurationError(
                f"score_mode must be one of {SCORE_MODES}, got {self.score_mode!r}"
            )

    def with_overrides(self, **overrides: Any) -> PostProcessConfig:
        """Return a copy with the given fields replaced; None values are ignored."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        return dataclasses.replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        return dataclasses.asdict(self)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> PostProcessConfig:
        """Build a config from key/value options, ignoring unknown keys.

        Raises:
            ConfigurationError: If a value has the wrong type.
        """
        known = {f.name: f for f in dataclasses.fields(cls)}
        kwargs: dict[str, Any] = {}
        for key, value in data.items():
            if key not in known:
                logger.warning("Ignoring unknown postprocess option %r", key)
                continue
            kwargs[key] = _coerce(key, value, known[key].default)
        return cls(**kwargs)


def _coerce(key: str, value: Any, default: Any) -> Any:
    """Coerce a raw option value to the type of its default."""
    try:
        if isinstance(default, bool):
            if isinstance(value, str):
                return value.strip().lower() in ("1", "true", "yes", "on")
            return bool(value)
        if isinstance(default, int):
            return int(value)
        if isinstance(default, float):
            return float(value)
        return str(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid value for {key}: {value!r}") from e


def load_postprocess_config(path: Path) -> PostProcessConfig:
    """Parse a YAML postprocess config file.

    Expected format (the ``postprocess`` wrapper key is optional)::

        postprocess:
          model_name: DET
          det_db_thresh: 0.3
          det_db_box_thresh: 0.6
          det_db_unclip_ratio: 1.5

    Args:
        path: Path to the YAML config file.

    Returns:
        Validated PostProcessConfig.

    Raises:
        ConfigurationError: If the file is not a mapping or values are invalid.
    """
    import yaml  # type: ignore[import-untyped]

    with open(path) as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ConfigurationError(f"Postprocess config {path} must be a mapping")

    section = data.get("postprocess", data)
    if not isinstance(section, dict):
        raise ConfigurationError(f"'postprocess' section in {path} must be a mapping")

    config = PostProcessConfig.from_mapping(section)
    config.validate()
    return config
