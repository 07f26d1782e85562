from .main import IS_TEST_RUNNER, env

# Periods that every rate table must define, in days
STAKING_MANDATORY_PERIODS = [int(p) for p in env.list('STAKING_MANDATORY_PERIODS', default=['30', '90', '180', '365'])]
STAKING_MIN_WALLET_ADDRESS_LENGTH = env.int('STAKING_MIN_WALLET_ADDRESS_LENGTH', default=10)
STAKING_MIN_ADMIN_PASSWORD_LENGTH = 8
STAKING_EXPIRING_SOON_DAYS = 3

# Reconciliation
STAKING_RECONCILIATION_STALE_COOLDOWN_DAYS = env.int('STAKING_RECONCILIATION_STALE_COOLDOWN_DAYS', default=2)
STAKING_RECONCILIATION_PURGE_AGE_DAYS = env.int('STAKING_RECONCILIATION_PURGE_AGE_DAYS', default=3)
STAKING_RECONCILIATION_DELAY = 0 if IS_TEST_RUNNER else env.float('STAKING_RECONCILIATION_DELAY', default=0.05)
STAKING_SWEEP_DELAY = 0 if IS_TEST_RUNNER else env.float('STAKING_SWEEP_DELAY', default=0.05)

# Settlement network
SETTLEMENT_BASE_URL = env.str('SETTLEMENT_BASE_URL', default='https://qcc-backend.com')
SETTLEMENT_POOL_ADDRESS = env.str('SETTLEMENT_POOL_ADDRESS', default='')
SETTLEMENT_ENABLE_REAL_TRANSACTIONS = env.bool('SETTLEMENT_ENABLE_REAL_TRANSACTIONS', default=False)
SETTLEMENT_TIMEOUT = env.int('SETTLEMENT_TIMEOUT', default=30)
SETTLEMENT_QUERY_TIMEOUT = env.int('SETTLEMENT_QUERY_TIMEOUT', default=10)
SETTLEMENT_AMOUNT_DECIMALS = 18
