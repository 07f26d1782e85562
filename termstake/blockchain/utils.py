import re
import time
from abc import ABC
from decimal import ROUND_DOWN, Decimal, localcontext
from typing import Any, Dict, NoReturn, Optional, Union

import requests
from rest_framework import status

from termstake.base.logging import logger
from termstake.base.metrics import metric_incr


class Service(ABC):  # noqa: B024
    """General class for handling settlement network API services."""

    _base_url = None
    timeout = 30
    supported_requests: Dict[str, str] = {}

    def __init__(self, base_url: Optional[str] = None) -> None:
        if base_url:
            self._base_url = base_url.rstrip('/')

    def get_name(self) -> str:
        name = self.__class__.__name__
        return re.sub(r'(?<!^)(?=[A-Z])', '_', name).lower()

    def build_request_url(self, request_method: str, **params: Any) -> str:
        path_url = self.supported_requests.get(request_method)
        if path_url:
            return self.base_url + path_url.format(**params)
        return self.base_url

    @property
    def base_url(self) -> Optional[str]:
        return self._base_url

    def get_header(self) -> Dict[str, str]:
        return {'Content-Type': 'application/json'}

    def request(
            self,
            request_method: str,
            body: Optional[Union[str, Dict[str, Any]]] = None,
            headers: Optional[Dict[str, str]] = None,
            timeout: Optional[int] = None,
            **params: Any
    ) -> Any:
        request_url = self.build_request_url(request_method, **params)

        if not headers:
            headers = self.get_header() or {}

        start_time = time.time()
        try:
            # if body is passed, use post
            if body:
                response = requests.post(request_url, data=body, headers=headers, timeout=timeout or self.timeout)
            else:
                response = requests.get(request_url, headers=headers, timeout=timeout or self.timeout)
        except requests.RequestException as e:
            metric_incr('metric_settlement_api_errors', labels=(self.get_name(), request_method, e.__class__.__name__))
            raise
        logger.debug(
            '%s %s responded %s in %.3fs',
            self.get_name(), request_method, response.status_code, time.time() - start_time,
        )

        if not status.HTTP_200_OK <= response.status_code <= status.HTTP_201_CREATED:
            metric_incr('metric_settlement_api_errors', labels=(self.get_name(), request_method, response.status_code))
            self.process_error_response(response)

        try:
            return response.json()
        except ValueError as e:
            raise ParseError(f'Invalid JSON response: {response.text[:200]}') from e

    def process_error_response(self, response: requests.Response) -> NoReturn:
        if response.status_code == status.HTTP_404_NOT_FOUND:
            raise NotFound('Error 404: Not Found.')
        if response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR:
            raise InternalServerError('Error 500: Internal Server Error.')
        if response.status_code == status.HTTP_502_BAD_GATEWAY:
            raise BadGateway('Error 502: Bad Gateway.')
        if response.status_code == status.HTTP_504_GATEWAY_TIMEOUT:
            raise GatewayTimeOut('Error 504: Gateway timeout.')
        if response.status_code == status.HTTP_403_FORBIDDEN:
            raise Forbidden('Error 403: Forbidden.')
        if response.status_code == status.HTTP_429_TOO_MANY_REQUESTS:
            raise RateLimitError('Too Many Requests.')
        raise APIError(f'Following error occurred: {response.text}, status code: {response.status_code}.')


def to_unit(number: Union[str, Decimal], precision: int) -> int:
    """Convert a Decimal amount to integer base units, truncating sub-unit dust."""
    with localcontext() as ctx:
        ctx.prec = 999
        return int((Decimal(number) * Decimal(f'1e{precision}')).to_integral_value(rounding=ROUND_DOWN))


# Exceptions
class APIError(Exception):
    pass


class NotFound(APIError):  # noqa: N818
    pass


class RateLimitError(APIError):
    pass


class InternalServerError(APIError):
    pass


class BadGateway(APIError):  # noqa: N818
    pass


class Forbidden(APIError):  # noqa: N818
    pass


class GatewayTimeOut(APIError):  # noqa: N818
    pass


class ParseError(APIError):
    pass
