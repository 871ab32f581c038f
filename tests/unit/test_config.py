"""
Unit tests for LoaderOptions configuration dataclass.
"""

import pytest

from lazyloader.config import NO_LAZY_LOAD_BATCH_SIZE, LoaderOptions


@pytest.mark.unit
class TestLoaderOptions:
    """Test LoaderOptions dataclass."""

    def test_loader_options_defaults(self) -> None:
        """Test LoaderOptions with default values."""
        options = LoaderOptions()

        assert options.batch_size == NO_LAZY_LOAD_BATCH_SIZE
        assert options.meter_prefix == "lazyloader"
        assert options.is_lazy() is False

    def test_loader_options_lazy(self) -> None:
        options = LoaderOptions(batch_size=25)

        assert options.is_lazy() is True

    def test_loader_options_rejects_negative_batch_size(self) -> None:
        with pytest.raises(ValueError, match="batch_size must be >= 0"):
            LoaderOptions(batch_size=-5)

    def test_meter_names(self) -> None:
        """Test meter names are derived from the prefix."""
        options = LoaderOptions(meter_prefix="users")

        assert options.meter_names() == (
            "users.unlazy_load",
            "users.lazy_load_last_batch",
            "users.lazy_load_batch",
        )

    def test_loader_options_equality(self) -> None:
        assert LoaderOptions(batch_size=5) == LoaderOptions(batch_size=5)
        assert LoaderOptions(batch_size=5) != LoaderOptions(batch_size=6)
