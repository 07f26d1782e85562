"""Staking App Config"""
from django.apps import AppConfig


class StakingConfig(AppConfig):
    name = 'termstake.staking'
    default_auto_field = 'django.db.models.BigAutoField'

    def ready(self):
        from . import serializers  # pylint: disable=unused-import,import-outside-toplevel
