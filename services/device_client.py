"""HTTP access to a plug's status fragment."""

from __future__ import annotations

import time

import httpx

from settings import DEFAULT_FETCH_TIMEOUT

STATUS_QUERY = "?m"


class DeviceFetchError(Exception):
    """The status page could not be fetched or decoded."""

    def __init__(self, target: str, reason: str) -> None:
        super().__init__(f"{target}: {reason}")
        self.target = target
        self.reason = reason


def status_url(target: str) -> str:
    return f"http://{target}/{STATUS_QUERY}"


class DeviceClient:
    """Single-attempt fetcher bounded by a total deadline; no retries.

    httpx applies ``timeout`` per network operation, so the body is streamed
    and checked against ``timeout`` measured from the start of the request.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_FETCH_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.timeout = timeout
        self._client = httpx.Client(timeout=timeout, transport=transport)

    def close(self) -> None:
        self._client.close()

    def fetch_status(self, target: str) -> str:
        deadline = time.monotonic() + self.timeout
        try:
            with self._client.stream("GET", status_url(target)) as response:
                response.raise_for_status()
                body = bytearray()
                for chunk in response.iter_bytes():
                    if time.monotonic() > deadline:
                        raise DeviceFetchError(target, "timed out")
                    body.extend(chunk)
        except httpx.TimeoutException as exc:
            raise DeviceFetchError(target, "timed out") from exc
        except httpx.HTTPStatusError as exc:
            raise DeviceFetchError(
                target, f"unexpected status {exc.response.status_code}"
            ) from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise DeviceFetchError(target, str(exc) or type(exc).__name__) from exc

        if time.monotonic() > deadline:
            raise DeviceFetchError(target, "timed out")
        try:
            return body.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DeviceFetchError(target, "response body is not valid UTF-8") from exc
