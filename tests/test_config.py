"""Tests for configuration models."""

import pytest
from pydantic import ValidationError

from localfq import LocalFQConfig, LocalFQSettings
from localfq.models import configure_logging


class TestLocalFQConfig:
    """Tests for LocalFQConfig."""

    def test_defaults(self):
        """Test default values."""
        config = LocalFQConfig()
        assert config.n_components == 2
        assert config.merge_tolerance == 0.5
        assert config.min_cluster_size == 4
        assert config.min_split_size is None
        assert config.max_depth == 32
        assert config.random_state == 42
        assert config.normalize_distances is True
        assert config.strict_schema is False
        assert config.n_jobs == 1

    def test_only_two_components(self):
        """Test that the embedding must be 2-D."""
        with pytest.raises(ValidationError, match="n_components must be 2"):
            LocalFQConfig(n_components=3)

    @pytest.mark.parametrize("tolerance", [0.0, -0.1, 1.5])
    def test_invalid_tolerance(self, tolerance):
        """Test merge_tolerance bounds."""
        with pytest.raises(ValidationError):
            LocalFQConfig(merge_tolerance=tolerance)

    def test_negative_min_cluster_size(self):
        """Test that min_cluster_size cannot be negative."""
        with pytest.raises(ValidationError, match="min_cluster_size must be >= 0"):
            LocalFQConfig(min_cluster_size=-1)

    def test_zero_n_jobs(self):
        """Test that n_jobs=0 is rejected."""
        with pytest.raises(ValidationError, match="n_jobs must not be 0"):
            LocalFQConfig(n_jobs=0)

    def test_frozen(self):
        """Test that the config is immutable."""
        config = LocalFQConfig()
        with pytest.raises(ValidationError):
            config.max_depth = 5

    def test_resolve_fixed_min_cluster_size(self):
        """Test that a fixed threshold is independent of the sample count."""
        assert LocalFQConfig().resolve_min_cluster_size(10_000) == 4

    def test_resolve_sqrt_min_cluster_size(self):
        """Test the sqrt(n) threshold."""
        config = LocalFQConfig(min_cluster_size="sqrt")
        assert config.resolve_min_cluster_size(150) == 12

    def test_resolve_min_split_size(self):
        """Test the split threshold default and override."""
        assert LocalFQConfig().resolve_min_split_size(150) == 12
        assert LocalFQConfig().resolve_min_split_size(0) == 1
        assert LocalFQConfig(min_split_size=5).resolve_min_split_size(150) == 5


class TestLocalFQSettings:
    """Tests for environment-driven settings."""

    def test_defaults(self, monkeypatch):
        """Test default settings without environment variables."""
        monkeypatch.delenv("LOCALFQ_RANDOM_STATE", raising=False)
        settings = LocalFQSettings()
        assert settings.log_level == "INFO"
        assert settings.random_state == 42

    def test_reads_environment(self, monkeypatch):
        """Test LOCALFQ_ prefixed environment variables."""
        monkeypatch.setenv("LOCALFQ_RANDOM_STATE", "7")
        monkeypatch.setenv("LOCALFQ_MIN_CLUSTER_SIZE", "sqrt")
        monkeypatch.setenv("LOCALFQ_STRICT_SCHEMA", "true")

        settings = LocalFQSettings()
        assert settings.random_state == 7
        assert settings.min_cluster_size == "sqrt"
        assert settings.strict_schema is True

    def test_to_config(self, monkeypatch):
        """Test conversion to LocalFQConfig."""
        monkeypatch.setenv("LOCALFQ_MERGE_TOLERANCE", "0.25")
        config = LocalFQSettings(log_level="DEBUG").to_config()

        assert isinstance(config, LocalFQConfig)
        assert config.merge_tolerance == 0.25

    def test_configure_logging(self):
        """Test that configure_logging accepts explicit settings."""
        configure_logging(LocalFQSettings(log_level="WARNING"))
