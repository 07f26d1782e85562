"""API Utilities

usage:

@public_api('GET', 'POST')
def example_view(request):
    if request.method == 'POST':
        return create_example(parse_int(request.g('foo'), required=True))
    return list_examples()
"""
from functools import wraps

from django.conf import settings
from django.http import Http404
from django.http.response import HttpResponse, JsonResponse
from rest_framework import exceptions as drf_exceptions
from rest_framework import serializers
from rest_framework.decorators import api_view, authentication_classes, permission_classes
from rest_framework.views import exception_handler as drf_exception_handler

from termstake.base.logging import report_exception
from termstake.base.serializers import serialize


class APIException(Exception):
    pass


class ParseError(APIException):
    pass


class TermstakeAPIError(APIException):
    def __init__(self, *, code, message=None, status_code=None):
        super().__init__(code, message)
        self.status_code = status_code
        self.code = code
        self.message = message


def failure_response(code, message, status_code):
    return JsonResponse(status=status_code, data={'success': False, 'code': code, 'message': message})


def get_data(request):
    """Return query parameters for GET requests and the parsed body otherwise."""
    if request.method in ('GET', 'DELETE'):
        return request.query_params
    data = request.data
    if not hasattr(data, 'get'):
        return {}
    return data


def handle_exception(e):
    if isinstance(e, (ParseError, serializers.ValidationError, drf_exceptions.ParseError)):
        return failure_response('ParseError', str(e), 400)
    if isinstance(e, TermstakeAPIError):
        return failure_response(e.code, e.message or e.code, e.status_code or 400)
    if isinstance(e, Http404):
        return failure_response('NotFound', str(e) or 'Not found', 404)
    report_exception()
    if settings.DEBUG:
        raise e
    return failure_response('UnexpectedError', 'We cannot proceed with your request.', 500)


def run_api_view(view, request, *args, **kwargs):
    # Parse request data
    try:
        data = get_data(request)
    except Exception as e:
        return handle_exception(e)

    def g(k, default=None):
        return data.get(k, default)

    request.g = g

    # Run and track exceptions
    try:
        r = view(request, *args, **kwargs)
    except Exception as e:
        return handle_exception(e)

    if isinstance(r, HttpResponse):
        return r
    payload = r if isinstance(r, dict) else {'result': r}
    return JsonResponse({'success': True, **serialize(payload)}, safe=False)


def public_api(*methods):
    def decorator(view):
        @wraps(view)
        @api_view(list(methods))
        @authentication_classes([])
        @permission_classes([])
        def wrapped_view(request, *args, **kwargs):
            return run_api_view(view, request, *args, **kwargs)

        wrapped_view.csrf_exempt = True
        return wrapped_view
    return decorator


def exception_handler(exc, context):
    # Call REST framework's default exception handler to get the standard error response.
    response = drf_exception_handler(exc, context)
    if response is None:
        return None
    detail = getattr(exc, 'detail', None)
    response.data = {
        'success': False,
        'code': exc.__class__.__name__,
        'message': str(detail) if detail is not None else str(exc),
    }
    return response
