from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Optional

import requests
from django.conf import settings

from termstake.base.logging import logger
from termstake.blockchain import signing
from termstake.blockchain.hashes import AnyHash, ConfirmedHash, UnconfirmedHash
from termstake.blockchain.utils import APIError, NotFound, Service, to_unit
from termstake.staking.errors import SettlementConfigurationError, SettlementError, SettlementTimeout


@dataclass
class PayoutResult:
    confirmed: bool
    tx_hash: Optional[AnyHash] = None
    raw_response: Any = None
    is_dry_run: bool = False
    error: str = ''


@dataclass
class TransactionQueryResult:
    found: bool
    data: Any = None
    raw_response: Any = None
    status_code: Optional[int] = None


class SettlementClient(Service):
    """Client of the settlement network, the only component talking to it.

    Payouts are signed with the staking pool key and broadcast as ``Send``
    transactions. While real transactions are disabled every payout is a
    confirmed dry run that never leaves the process.
    """

    supported_requests = {
        'get_timestamp': '/api/ts',
        'broadcast': '/broadcast/',
        'get_transaction': '/txs/{tx_hash}',
    }

    def __init__(self, base_url=None, private_key=None, pool_address=None, enable_real_transactions=None,
                 timeout=None, query_timeout=None):
        super().__init__(base_url or settings.SETTLEMENT_BASE_URL)
        self.private_key = settings.SETTLEMENT_PRIVATE_KEY if private_key is None else private_key
        self.pool_address = settings.SETTLEMENT_POOL_ADDRESS if pool_address is None else pool_address
        self.enable_real_transactions = (
            settings.SETTLEMENT_ENABLE_REAL_TRANSACTIONS if enable_real_transactions is None
            else enable_real_transactions
        )
        self.timeout = timeout or settings.SETTLEMENT_TIMEOUT
        self.query_timeout = query_timeout or settings.SETTLEMENT_QUERY_TIMEOUT

    def check_configuration(self) -> dict:
        return {
            'has_private_key': bool(self.private_key),
            'has_pool_address': bool(self.pool_address),
            'real_transactions_enabled': self.enable_real_transactions,
            'api_url': self.base_url,
            'pool_address': self.pool_address,
        }

    def _call(self, request_method, timeout, **kwargs):
        try:
            return self.request(request_method, timeout=timeout, **kwargs)
        except requests.Timeout as e:
            raise SettlementTimeout(f'Settlement network timed out on {request_method}') from e
        except requests.RequestException as e:
            raise SettlementError(f'Settlement network unreachable: {e}') from e

    def broadcast_payout(self, to_address: str, amount: Decimal) -> PayoutResult:
        """Send ``amount`` from the staking pool to ``to_address``.

        Raises SettlementError on network failures and error statuses. A
        response the network answered but flagged as an error is returned as
        an unconfirmed result.
        """
        if not self.private_key:
            raise SettlementConfigurationError('Settlement private key is not configured')
        if not self.pool_address:
            raise SettlementConfigurationError('Staking pool address is not configured')
        if not signing.is_valid_private_key(self.private_key):
            raise SettlementConfigurationError('Settlement private key must be 32 bytes hex encoded')

        if not self.enable_real_transactions:
            logger.info('[DRY RUN] payout of %s to %s was not broadcast', amount, to_address)
            return PayoutResult(
                confirmed=True,
                tx_hash=UnconfirmedHash('dry-run'),
                raw_response={'output': 'DRY RUN'},
                is_dry_run=True,
            )

        amount_in_units = str(to_unit(amount, settings.SETTLEMENT_AMOUNT_DECIMALS))
        try:
            timestamp = self._call('get_timestamp', self.timeout)
            body = signing.build_send_request(
                self.private_key,
                from_address=self.pool_address,
                to_address=to_address,
                amount=amount_in_units,
                timestamp=timestamp if isinstance(timestamp, int) else None,
            )
            response = self._call('broadcast', self.timeout, body=signing.json_body(body))
        except APIError as e:
            raise SettlementError(f'Payout broadcast rejected: {e}') from e

        if not isinstance(response, dict):
            response = {'output': response}
        error = response.get('error')
        output = response.get('output')
        if error or (isinstance(output, str) and 'error' in output):
            logger.warning('Payout to %s was not accepted: %s', to_address, error or output)
            return PayoutResult(confirmed=False, raw_response=response, error=str(error or output))

        tx_hash = response.get('txhash') or response.get('txid') or response.get('hash')
        if tx_hash:
            tx_hash = ConfirmedHash(str(tx_hash))
        else:
            logger.warning('Payout to %s was accepted without a transaction hash', to_address)
            tx_hash = UnconfirmedHash('missing-hash')
        return PayoutResult(confirmed=True, tx_hash=tx_hash, raw_response=response)

    def query_transaction(self, tx_hash: str) -> TransactionQueryResult:
        """Look up a transaction, a 404 means the network does not know it."""
        try:
            data = self._call('get_transaction', self.query_timeout, tx_hash=tx_hash)
        except NotFound:
            return TransactionQueryResult(found=False, status_code=404)
        except APIError as e:
            raise SettlementError(f'Transaction query failed: {e}') from e
        return TransactionQueryResult(found=True, data=data, raw_response=data, status_code=200)
