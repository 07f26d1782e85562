import os

from celery import Celery

# Set the default Django settings module for the 'celery' program.
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'termstake.settings')

app = Celery('termstake')

# Using a string here means the worker doesn't have to serialize
# the configuration object to child processes.
app.config_from_object('django.conf:settings', namespace='CELERY')
app.conf.task_create_missing_queues = True

# Auto-discover tasks from installed apps.
app.autodiscover_tasks()
