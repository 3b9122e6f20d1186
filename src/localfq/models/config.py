"""Configuration for the LocalFQ training and routing pipeline.

``LocalFQConfig`` is the validated, immutable configuration a ``LocalFQ``
instance is built with. ``LocalFQSettings`` reads the same fields from the
environment (``LOCALFQ_`` prefix) or a ``.env`` file for scripts.
"""

from __future__ import annotations

import logging
import math
import sys
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_MIN_CLUSTER_SIZE = 4
DEFAULT_MERGE_TOLERANCE = 0.5
DEFAULT_MAX_DEPTH = 32

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class LocalFQConfig(BaseModel):
    """Configuration for Fastmap embedding, quad-tree clustering and routing.

    Attributes:
        n_components: Embedding dimensions (routing works on the 2-D plane)
        merge_tolerance: Max relative density difference for merging leaves
        min_cluster_size: Clusters with this many points or fewer are dropped.
            ``"sqrt"`` uses sqrt(n_samples) instead of a fixed count.
        min_split_size: Nodes with this many points or fewer are not split.
            ``None`` uses sqrt(n_samples).
        max_depth: Hard limit on quad-tree depth
        random_state: Seed for pivot selection (None = unseeded)
        normalize_distances: Min-max scale attributes before Euclidean distance
        strict_schema: Raise on queries missing attributes instead of zero-filling
        n_jobs: Parallel jobs for per-cluster training (1 = sequential)
    """

    model_config = ConfigDict(frozen=True)

    n_components: int = Field(default=2, description="Embedding dimensions")
    merge_tolerance: float = Field(
        default=DEFAULT_MERGE_TOLERANCE,
        gt=0.0,
        le=1.0,
        description="Relative density tolerance for merging leaves",
    )
    min_cluster_size: int | Literal["sqrt"] = Field(
        default=DEFAULT_MIN_CLUSTER_SIZE,
        description="Drop clusters with at most this many points",
    )
    min_split_size: int | None = Field(
        default=None, ge=1, description="Do not split nodes at or below this size"
    )
    max_depth: int = Field(default=DEFAULT_MAX_DEPTH, gt=0, description="Max tree depth")
    random_state: int | None = Field(default=42, description="Pivot selection seed")
    normalize_distances: bool = Field(
        default=True, description="Min-max scale attributes for distances"
    )
    strict_schema: bool = Field(
        default=False, description="Raise on missing query attributes"
    )
    n_jobs: int = Field(default=1, description="Parallel jobs for cluster training")

    @field_validator("n_components")
    @classmethod
    def _check_n_components(cls, value: int) -> int:
        # Boxes and the 5-point local matrix are 2-D
        if value != 2:
            raise ValueError(f"n_components must be 2, got {value}")
        return value

    @field_validator("min_cluster_size")
    @classmethod
    def _check_min_cluster_size(cls, value: int | str) -> int | str:
        if isinstance(value, int) and value < 0:
            raise ValueError("min_cluster_size must be >= 0")
        return value

    @field_validator("n_jobs")
    @classmethod
    def _check_n_jobs(cls, value: int) -> int:
        if value == 0:
            raise ValueError("n_jobs must not be 0")
        return value

    def resolve_min_cluster_size(self, n_samples: int) -> int:
        """Effective drop threshold for a training set of ``n_samples``."""
        if self.min_cluster_size == "sqrt":
            return int(math.sqrt(n_samples))
        return self.min_cluster_size

    def resolve_min_split_size(self, n_samples: int) -> int:
        """Effective split threshold for a training set of ``n_samples``."""
        if self.min_split_size is not None:
            return self.min_split_size
        return max(1, int(math.sqrt(n_samples)))


class LocalFQSettings(BaseSettings):
    """Environment-driven defaults for LocalFQ.

    Example: LOCALFQ_RANDOM_STATE=7 LOCALFQ_MIN_CLUSTER_SIZE=sqrt
    """

    model_config = SettingsConfigDict(
        env_prefix="LOCALFQ_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    merge_tolerance: float = Field(default=DEFAULT_MERGE_TOLERANCE, gt=0.0, le=1.0)
    min_cluster_size: int | Literal["sqrt"] = Field(default=DEFAULT_MIN_CLUSTER_SIZE)
    min_split_size: int | None = Field(default=None, ge=1)
    max_depth: int = Field(default=DEFAULT_MAX_DEPTH, gt=0)
    random_state: int | None = Field(default=42)
    normalize_distances: bool = Field(default=True)
    strict_schema: bool = Field(default=False)
    n_jobs: int = Field(default=1)
    log_level: str = Field(default="INFO", description="Level for configure_logging()")

    def to_config(self) -> LocalFQConfig:
        """Build a LocalFQConfig from these settings."""
        return LocalFQConfig(**self.model_dump(exclude={"log_level"}))


def configure_logging(settings: LocalFQSettings | None = None) -> None:
    """Configure root logging for scripts using LocalFQ.

    The library itself never installs handlers.
    """
    settings = settings or LocalFQSettings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format=LOG_FORMAT,
        stream=sys.stdout,
    )
