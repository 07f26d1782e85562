"""Staking (business logic related) errors"""


class StakingError(Exception):
    def __init__(self, message=None) -> None:
        super().__init__(message)
        self.code = self.__class__.__name__
        self.message = message or ''


class ValidationError(StakingError):
    """Caller supplied input that can never succeed as is."""


class InvalidAmount(ValidationError):
    pass


class InvalidWalletAddress(ValidationError):
    pass


class InvalidStakingPeriod(ValidationError):
    pass


class InvalidRateTable(ValidationError):
    pass


class DuplicateDepositHash(ValidationError):
    """The deposit transaction is already backing another staking."""


class ConfigurationError(StakingError):
    """Requested period has no configured interest rate."""


class NotFound(StakingError):
    pass


class AuthorizationError(StakingError):
    pass


class NotOwner(AuthorizationError):
    pass


class AdminAuthenticationFailed(AuthorizationError):
    pass


class InvalidState(StakingError):
    """Operation is not allowed in the staking's current status."""


class SettlementError(StakingError):
    """Payout or query against the settlement network failed, safe to retry later."""


class SettlementTimeout(SettlementError):
    pass


class SettlementConfigurationError(SettlementError):
    pass


class PayoutNotConfirmed(SettlementError):
    pass


class StoreError(StakingError):
    pass
