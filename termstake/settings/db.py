import os

from .main import BASE_DIR, env

DATABASES = {
    'default': env.db(default='sqlite:///' + os.path.join(BASE_DIR, 'database.sqlite3')),
}
