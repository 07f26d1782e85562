import os

from .main import IS_TEST_RUNNER

REDIS_HOST = os.environ.get('REDIS_HOST', 'localhost')
REDIS_PORT = os.environ.get('REDIS_PORT', '6379')
REDIS_PASSWORD = os.environ.get('REDIS_PASSWORD', '')

# Redis settings
CELERY_BROKER_URL = f'redis://:{REDIS_PASSWORD}@{REDIS_HOST}:{REDIS_PORT}/0'
CELERY_RESULT_BACKEND = f'redis://:{REDIS_PASSWORD}@{REDIS_HOST}:{REDIS_PORT}/1'

# Celery settings
CELERY_ACCEPT_CONTENT = ['json']  # Accept JSON-formatted messages
CELERY_TASK_SERIALIZER = 'json'  # Serialize tasks in JSON
CELERY_TASK_ALWAYS_EAGER = IS_TEST_RUNNER
