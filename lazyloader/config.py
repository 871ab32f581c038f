from dataclasses import dataclass

# Batch size that disables paging: the whole result set is read in one call.
NO_LAZY_LOAD_BATCH_SIZE = 0


@dataclass
class LoaderOptions:
    """
    Configuration for a LazyLoader.

    batch_size selects the fetch strategy (NO_LAZY_LOAD_BATCH_SIZE reads
    everything at once), meter_prefix namespaces the fetch meters registered
    on a MeterManager.
    """

    batch_size: int = NO_LAZY_LOAD_BATCH_SIZE
    meter_prefix: str = "lazyloader"

    def __post_init__(self) -> None:
        if self.batch_size < 0:
            raise ValueError(f"batch_size must be >= 0, got {self.batch_size}")

    def is_lazy(self) -> bool:
        """
        Check if paging is enabled.

        Returns:
            True if batches are fetched on demand, False for a single full read
        """
        return self.batch_size != NO_LAZY_LOAD_BATCH_SIZE

    def meter_names(self) -> tuple[str, str, str]:
        """
        Names of the unlazy-load, last-batch and intermediate-batch meters.

        Returns:
            Tuple of meter names derived from meter_prefix
        """
        return (
            f"{self.meter_prefix}.unlazy_load",
            f"{self.meter_prefix}.lazy_load_last_batch",
            f"{self.meter_prefix}.lazy_load_batch",
        )
