from .main import *  # noqa: F401,F403
from .secret import *  # noqa: F401,F403
from .db import *  # noqa: F401,F403
from .cache import *  # noqa: F401,F403
from .celery import *  # noqa: F401,F403
from .cron import *  # noqa: F401,F403
from .rest import *  # noqa: F401,F403
from .sentry import *  # noqa: F401,F403
from .staking import *  # noqa: F401,F403
from .logging import *  # noqa: F401,F403
