STAKING_CRON_CLASSES = [
    'termstake.staking.crons.SweepExpiredStakingsCron',
    'termstake.staking.crons.ReconcileStakingsCron',
]

CRON_CLASSES = STAKING_CRON_CLASSES

DJANGO_CRON_LOCK_TIME = 30 * 60  # 30 minutes
DJANGO_CRON_DELETE_LOGS_OLDER_THAN = 30  # days
