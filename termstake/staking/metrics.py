"""Metric keys are defined here."""
import enum


class Metrics(enum.Enum):
    # Lifecycle
    STAKING_CREATED = 'lifecycle_stakingCreated'
    STAKING_CANCELLED = 'lifecycle_stakingCancelled'
    SWEEP_OUTCOME = 'sweep_outcome'

    # Reconciliation
    RECONCILIATION_OUTCOME = 'reconciliation_outcome'

    def __str__(self) -> str:
        return 'staking__' + self.value
