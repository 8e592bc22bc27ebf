"""
Pipeline configuration.

Configuration is a value passed into every pipeline call; nothing here is
process-wide mutable state. Default scoring thresholds live in
thresholds.yaml next to this module and can be replaced by a custom file.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator

THRESHOLDS_FILE = Path(__file__).parent / "thresholds.yaml"


class ScoringThresholds(BaseModel, frozen=True):
    """Tunable heuristics for detection and mojibake scoring."""

    max_control_ratio: float = Field(default=0.05, ge=0.0, le=1.0)
    plausibility_weight: float = Field(default=0.6, ge=0.0)
    signature_weight: float = Field(default=0.4, ge=0.0)
    min_inference_score: float = Field(default=0.3, ge=0.0)
    corroboration_min_bytes: int = Field(default=64, ge=0)
    corroboration_bonus: float = Field(default=0.1, ge=0.0)
    control_penalty: float = Field(default=1.0, gt=0.0)
    mojibake_pair_penalty: float = Field(default=1.0, gt=0.0)
    replacement_penalty: float = Field(default=2.0, gt=0.0)
    entity_lookahead: int = Field(default=32, ge=1)


class CharacterPolicy(BaseModel, frozen=True):
    """
    What to do with characters the output encoding cannot represent.

    The steps are tried in order: transcode, transliterate, then delete or
    replace. replacement=None together with delete=False makes such a
    character a fatal error. An empty replacement writes the &0xHH; entity.
    """

    transcode: bool = False
    transliterate: bool = False
    delete: bool = False
    replacement: str | None = "?"

    @field_validator("replacement")
    @classmethod
    def _single_character(cls, value: str | None) -> str | None:
        if value is not None and len(value) > 1:
            raise ValueError("replacement must be a single character or empty")
        return value

    @property
    def has_fallback(self) -> bool:
        """Whether unrepresentable characters can always be handled."""
        return self.delete or self.replacement is not None


class PipelineConfig(BaseModel, frozen=True):
    """Values consumed by the pipeline, writer and transcoder."""

    output_encoding: str = "UTF-8"
    input_encoding: str | None = Field(
        default=None,
        description="Forces the source encoding and skips detection",
    )
    policy: CharacterPolicy = Field(default_factory=CharacterPolicy)
    strict: bool = Field(
        default=False,
        description="Report instead of correcting",
    )
    allow_inference: bool = True
    max_mojibake_rounds: int = Field(default=4, ge=0, le=16)
    thresholds: ScoringThresholds = Field(default_factory=lambda: get_default_thresholds())
    program_id: str = "TransADIF"


def _load_thresholds_from_yaml(path: Path) -> ScoringThresholds:
    """Load thresholds from a YAML file."""
    with open(path, encoding="utf-8") as f:
        data: dict[str, Any] = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Expected a mapping in {path}")
    return ScoringThresholds(**(data.get("thresholds") or {}))


def load_thresholds(path: Path | str) -> ScoringThresholds:
    """
    Load custom thresholds.

    Keys missing from the file keep their defaults.

    Raises:
        FileNotFoundError: If the file does not exist
        pydantic.ValidationError: If a value is out of range
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Thresholds file not found: {path}")
    return _load_thresholds_from_yaml(path)


@lru_cache(maxsize=1)
def get_default_thresholds() -> ScoringThresholds:
    """
    Get the shipped default thresholds.

    The thresholds are cached after first load.
    """
    if not THRESHOLDS_FILE.exists():
        return ScoringThresholds()

    return _load_thresholds_from_yaml(THRESHOLDS_FILE)
