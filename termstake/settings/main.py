import os
import sys
from pathlib import Path

import environ

env = environ.Env(
    # set casting, default value
    ENV=(str, 'debug'),
    MASTERKEY=(str, ''),
    SECRET_KEY=(str, 'termstake-insecure-secret'),
    CIRUNNER=(bool, False),
    ALLOWED_HOSTS=(list, ['*']),
    TIME_ZONE=(str, 'UTC'),
)

BASE_DIR = str(Path(__file__).parents[2])
environ.Env.read_env(os.path.join(BASE_DIR, '.env'))

IS_CI_RUNNER = env('CIRUNNER')
IS_TEST_RUNNER = 'pytest' in sys.modules

ENV = env.str('ENV')
DEBUG = ENV == 'debug' and not IS_TEST_RUNNER
IS_PROD = ENV == 'prod'
IS_TESTNET = ENV == 'testnet' or IS_CI_RUNNER
ALLOWED_HOSTS = env.list('ALLOWED_HOSTS')

# Application definition

INSTALLED_APPS = [
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django_cron',
    'rest_framework',
    'termstake.base.apps.BaseConfig',
    'termstake.staking.apps.StakingConfig',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.middleware.common.CommonMiddleware',
]

ROOT_URLCONF = 'termstake.urls'

WSGI_APPLICATION = 'termstake.wsgi.application'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {'context_processors': []},
    },
]

# The single admin credential is hashed with Django's hashers
PASSWORD_HASHERS = [
    'django.contrib.auth.hashers.PBKDF2PasswordHasher',
    'django.contrib.auth.hashers.Argon2PasswordHasher',
]
if IS_TEST_RUNNER:
    PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']

# Internationalization

TIME_ZONE = env.str('TIME_ZONE')

USE_I18N = False

USE_TZ = True

# Default primary key field type

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

if IS_PROD:
    USE_X_FORWARDED_HOST = True
    SECURE_PROXY_SSL_HEADER = ('HTTP_X_FORWARDED_PROTO', 'https')
