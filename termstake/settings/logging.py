import json
import logging.config
import os
from pathlib import Path
from typing import Any, Dict, Set

from logstash_async.constants import Constants
from logstash_async.formatter import LogstashFormatter

from .main import BASE_DIR, DEBUG, ENV, IS_PROD, IS_TEST_RUNNER

## Logstash Setting
LOGSTASH_URL: str = os.environ.get('LOGSTASH_URL', '')
LOGSTASH_PORT: int = int(os.environ.get('LOGSTASH_PORT', '8083'))
LOGSTASH_USERNAME: str = os.environ.get('LOGSTASH_USERNAME', '')
LOGSTASH_PASSWORD: str = os.environ.get('LOGSTASH_PASSWORD', '')

LOGGING_CONFIG: None = None
BASE_LOG_DIR: str = os.path.join(BASE_DIR, 'logs')
Path(BASE_LOG_DIR).mkdir(parents=True, exist_ok=True)

DJANGO_LOGGING_FORMAT: str = '{levelname} {asctime} {module} {process:d} {thread:d} {message}'
FILE_FORMATTER: str = '%(asctime)s - %(levelname)s - %(message)s'
DATEFMT: str = '%d/%b/%Y %H:%M:%S'
DEFAULT_LOG_LEVEL: str = 'WARNING' if IS_TEST_RUNNER else 'INFO'


class SafeLogstashRecordFormatter(LogstashFormatter):
    def format(self, record: logging.LogRecord) -> str:
        record.env = ENV
        record_dict: Dict[str, Any] = dict(record.__dict__)
        if record_dict.get('msg'):
            record_dict['message'] = record.getMessage()
        record_dict['extra'] = {'index_name': record_dict.get('index_name', 'log')}
        extra_fields: Set[str] = {
            'name',
            'levelname',
            'pathname',
            'filename',
            'module',
            'exc_info',
            'exc_text',
            'stack_info',
            'lineno',
            'funcName',
            'msecs',
            'thread',
            'threadName',
            'processName',
            'process',
        }
        for field in extra_fields:
            record_dict.pop(field, None)
        return json.dumps(record_dict, ensure_ascii=self._ensure_ascii, default=str)


class NoExtraFilter(logging.Filter):
    """Keep records carrying structured ``extra`` fields out of the plain console."""

    def filter(self, record: logging.LogRecord) -> bool:
        record_dict: Dict[str, Any] = record.__dict__
        extra_keys: Set[str] = set(record_dict.keys()) - set(Constants.FORMATTER_RECORD_FIELD_SKIP_LIST)
        return not extra_keys


APP_HANDLERS = ['console', 'error_file_handler']

LOGGING: Dict[str, Any] = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': DJANGO_LOGGING_FORMAT,
            'datefmt': DATEFMT,
            'style': '{',
        },
        'wrapper': {
            'format': FILE_FORMATTER,
            'datefmt': DATEFMT,
        },
        'logstash': {
            '()': SafeLogstashRecordFormatter,
        },
    },
    'filters': {
        'no_extra': {
            '()': NoExtraFilter,
        }
    },
    'handlers': {
        'console': {
            'level': 'DEBUG',
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
            'filters': ['no_extra'],
        },
        'error_file_handler': {
            'level': 'WARNING',
            'class': 'logging.handlers.RotatingFileHandler',
            'formatter': 'verbose',
            'filename': os.path.join(BASE_LOG_DIR, 'error.log'),
            'maxBytes': 1024 * 1024 * 100,  # 100MB
        },
        'cron_file_handler': {
            'level': 'DEBUG',
            'class': 'logging.handlers.RotatingFileHandler',
            'formatter': 'wrapper',
            'filename': os.path.join(BASE_LOG_DIR, 'cron.log'),
            'maxBytes': 1024 * 1024 * 10,  # 10MB
            'backupCount': 5
        },
    },
    'loggers': {
        'django': {
            'handlers': ['console'],
            'level': DEFAULT_LOG_LEVEL,
            'propagate': False,
        },
        'app': {
            'handlers': APP_HANDLERS,
            'level': DEFAULT_LOG_LEVEL,
        },
        'cron_file_logger': {
            'handlers': ['cron_file_handler'],
            'level': 'DEBUG'
        }
    }
}

if LOGSTASH_URL:
    LOGGING['handlers']['logstash'] = {
        'level': 'INFO',
        'class': 'logstash_async.handler.AsynchronousLogstashHandler',
        'formatter': 'logstash',
        'host': LOGSTASH_URL,
        'port': LOGSTASH_PORT,
        'username': LOGSTASH_USERNAME,
        'password': LOGSTASH_PASSWORD,
        'transport': 'logstash_async.transport.HttpTransport',
        'database_path': None,  # None means using memory cache
        'ssl_enable': IS_PROD or DEBUG,
        'ssl_verify': IS_PROD or DEBUG,
    }
    LOGGING['loggers']['app']['handlers'] = APP_HANDLERS + ['logstash']

logging.config.dictConfig(LOGGING)
