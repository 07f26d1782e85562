import datetime
from decimal import Decimal

from django.db.models import QuerySet


class BaseSerializer:
    serializers = {}

    @classmethod
    def get_serializer(cls, obj):
        return cls.serializers.get(type(obj))

    @classmethod
    def register_serializer(cls, model, serializer):
        cls.serializers[model] = serializer


def register_serializer(model=None):
    def decorator(serializer):
        BaseSerializer.register_serializer(model, serializer)
        return serializer
    return decorator


def normalize_number(num):
    if not isinstance(num, (int, float, Decimal)):
        return str(num)
    if isinstance(num, float):
        num = Decimal(str(num))
    str_value = f'{num:f}'
    if '.' in str_value:
        str_value = str_value.rstrip('0').rstrip('.')
    return str_value


def serialize_decimal(obj, opts=None):
    opts = opts or {}
    if opts.get('decimalAsFloat'):
        return float(obj)
    return normalize_number(obj)


def serialize(obj, opts=None):
    """ Serializes an object, optimized for the project data model

        Levels:
          * 1: only direct fields are returned
          * 2: derived values that need extra computation
    """
    opts = opts or {}
    if obj is None:
        return None
    if isinstance(obj, (int, float, str, bool)):
        return obj
    if isinstance(obj, (datetime.datetime, datetime.date)):
        return obj.isoformat()
    if isinstance(obj, datetime.timedelta):
        return obj.total_seconds()
    if isinstance(obj, (list, tuple, QuerySet)):
        return [serialize(x, opts=opts) for x in obj]
    if isinstance(obj, dict):
        return {serialize(k): serialize(v, opts=opts) for k, v in obj.items()}
    if isinstance(obj, Decimal):
        return serialize_decimal(obj, opts=opts)

    serializer = BaseSerializer.get_serializer(obj)
    if serializer is None:
        return str(obj)
    return serialize(serializer(obj, opts=opts), opts=opts)
