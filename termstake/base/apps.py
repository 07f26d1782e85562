from django.apps import AppConfig


class BaseConfig(AppConfig):
    name = 'termstake.base'
    verbose_name = 'Base settings'
