"""Transaction hash markers

A payout response may omit the transaction hash. Such results are kept apart
from network-issued hashes by type, so nothing downstream ever queries the
network for a placeholder.
"""
from typing import Optional, Union

UNCONFIRMED_PREFIX = 'unconfirmed:'


class TransactionHash:
    confirmed: bool

    def __init__(self, value: str) -> None:
        self.value = value

    def __eq__(self, other):
        return type(self) is type(other) and self.value == other.value

    def __hash__(self):
        return hash((type(self).__name__, self.value))

    def __str__(self):
        return self.value

    def __repr__(self):
        return f'{type(self).__name__}({self.value!r})'


class ConfirmedHash(TransactionHash):
    """Hash issued by the settlement network."""
    confirmed = True


class UnconfirmedHash(TransactionHash):
    """Placeholder for a payout whose response carried no hash, value is the reason."""
    confirmed = False


AnyHash = Union[ConfirmedHash, UnconfirmedHash]


def to_db(tx_hash: Optional[AnyHash]) -> Optional[str]:
    if tx_hash is None:
        return None
    if isinstance(tx_hash, UnconfirmedHash):
        return UNCONFIRMED_PREFIX + tx_hash.value
    return tx_hash.value


def from_db(value: Optional[str]) -> Optional[AnyHash]:
    if not value:
        return None
    if value.startswith(UNCONFIRMED_PREFIX):
        return UnconfirmedHash(value[len(UNCONFIRMED_PREFIX):])
    return ConfirmedHash(value)
