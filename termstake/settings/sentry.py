import sentry_sdk
from sentry_sdk.integrations.django import DjangoIntegration

from .main import ENV, env

ENABLE_SENTRY = env.bool('ENABLE_SENTRY', False)
SENTRY_DSN = env.str('SENTRY_DSN', default='')
METRICS_BACKEND = 'sentry' if ENABLE_SENTRY else 'logger'

if ENABLE_SENTRY:
    sentry_sdk.init(
        dsn=SENTRY_DSN,
        traces_sample_rate=0.01,
        sample_rate=0.5,
        integrations=[DjangoIntegration(transaction_style='function_name')],
        environment=ENV,
    )
