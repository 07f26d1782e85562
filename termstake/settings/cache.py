import os

REDIS_MAX_SOCKET_CONNECT_TIMEOUT = REDIS_MAX_SOCKET_TIMEOUT = 5
REDIS_MAX_CONNECTIONS = 100
LOCAL_MEMORY_MAX_ENTRIES = 100000

REDIS_URL = os.environ.get('REDIS_URL')
REDIS_PASSWORD = os.environ.get('REDIS_PASSWORD')

if REDIS_URL:
    CACHES = {
        'default': {
            'BACKEND': 'django_redis.cache.RedisCache',
            'LOCATION': '{}/0'.format(REDIS_URL),
            'OPTIONS': {
                'CLIENT_CLASS': 'django_redis.client.DefaultClient',
                'CONNECTION_POOL_KWARGS': {'max_connections': REDIS_MAX_CONNECTIONS, 'retry_on_timeout': True},
                'PASSWORD': REDIS_PASSWORD,
                'SOCKET_CONNECT_TIMEOUT': REDIS_MAX_SOCKET_CONNECT_TIMEOUT,  # seconds
                'SOCKET_TIMEOUT': REDIS_MAX_SOCKET_TIMEOUT,  # seconds
            },
        },
    }
else:
    CACHES = {
        'default': {
            'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
            'LOCATION': 'termstake',
            'OPTIONS': {
                'MAX_ENTRIES': LOCAL_MEMORY_MAX_ENTRIES,
            },
        },
    }
