"""
Minimal synchronous HTTP transport
One attempt per call; failures are reported in the response, never raised
"""

import requests
from typing import Any, Dict, List, NamedTuple, Optional, Tuple, Union

from registrar_api.utils.logger import get_logger


logger = get_logger(__name__)

Params = Union[Dict[str, Any], List[Tuple[str, Any]]]


class HttpResponse(NamedTuple):
    """Outcome of a single HTTP call"""

    status_code: int
    text: str
    error: Optional[str]
    url: str


class HttpTransport:
    """
    Thin wrapper around requests.request.
    TLS certificate and hostname verification are always on.
    """

    def __init__(self, read_timeout: int = 20, write_timeout: int = 30):
        self.read_timeout = read_timeout
        self.write_timeout = write_timeout

    def request(
        self,
        method: str,
        url: str,
        params: Optional[Params] = None,
        json: Any = None,
        data: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        timeout: Optional[int] = None
    ) -> HttpResponse:
        """
        Perform one HTTP call.

        Args:
            method: HTTP method (GET, POST, PUT, PATCH, DELETE)
            url: Absolute URL without query string
            params: Query parameters (dict, or list of pairs for repeated keys)
            json: JSON body
            data: Form body
            headers: Extra request headers
            timeout: Seconds; defaults to read timeout for GET/DELETE, write timeout otherwise

        Returns:
            HttpResponse(status_code, text, error, url); status_code is 0 on transport failure
        """
        method = method.upper()
        if timeout is None:
            timeout = self.read_timeout if method in ("GET", "DELETE") else self.write_timeout

        logger.debug(f"{method} {url}")

        try:
            response = requests.request(
                method=method,
                url=url,
                params=params,
                json=json,
                data=data,
                headers=headers or {},
                timeout=timeout,
                verify=True
            )
        except requests.exceptions.Timeout:
            logger.warning(f"{method} {url} timed out after {timeout} seconds")
            return HttpResponse(0, "", f"Request timed out after {timeout} seconds", url)
        except requests.exceptions.SSLError as e:
            logger.warning(f"{method} {url} TLS error: {e}")
            return HttpResponse(0, "", f"TLS error: {str(e)}", url)
        except requests.exceptions.ConnectionError as e:
            logger.warning(f"{method} {url} connection error: {e}")
            return HttpResponse(0, "", f"Connection error: {str(e)}", url)
        except requests.exceptions.RequestException as e:
            logger.warning(f"{method} {url} network error: {e}")
            return HttpResponse(0, "", f"Network error: {str(e)}", url)

        logger.debug(f"{method} {url} -> HTTP {response.status_code}")

        return HttpResponse(response.status_code, response.text or "", None, url)

    def get(self, url: str, params: Optional[Params] = None, headers: Optional[Dict[str, str]] = None) -> HttpResponse:
        return self.request("GET", url, params=params, headers=headers)

    def delete(self, url: str, params: Optional[Params] = None, headers: Optional[Dict[str, str]] = None) -> HttpResponse:
        return self.request("DELETE", url, params=params, headers=headers)

    def post_json(self, url: str, body: Any, headers: Optional[Dict[str, str]] = None) -> HttpResponse:
        return self.request("POST", url, json=body, headers=self._with_type(headers, "application/json"))

    def put_json(self, url: str, body: Any, headers: Optional[Dict[str, str]] = None) -> HttpResponse:
        return self.request("PUT", url, json=body, headers=self._with_type(headers, "application/json"))

    def patch_json(self, url: str, body: Any, headers: Optional[Dict[str, str]] = None) -> HttpResponse:
        return self.request("PATCH", url, json=body, headers=self._with_type(headers, "application/json"))

    def post_form(self, url: str, form: Dict[str, Any], headers: Optional[Dict[str, str]] = None) -> HttpResponse:
        return self.request(
            "POST", url, data=form,
            headers=self._with_type(headers, "application/x-www-form-urlencoded")
        )

    @staticmethod
    def _with_type(headers: Optional[Dict[str, str]], content_type: str) -> Dict[str, str]:
        return {**(headers or {}), "Content-Type": content_type}
