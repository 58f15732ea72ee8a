from typing import Any, Dict, Optional, Type, TypeVar

import httpx
from loguru import logger
from pydantic import ValidationError

from ..codec import decode_json
from ..config import Settings, get_settings
from ..errors import (
    AppError,
    DecodingError,
    Forbidden,
    NetworkError,
    NotFound,
    RateLimited,
    ServerError,
    Unauthorized,
    ValidationFailed,
)

T = TypeVar("T")


def describe_validation_error(exc: ValidationError) -> str:
    """Name the offending field path, the way a decoder would report it."""
    err = exc.errors()[0]
    loc = [str(part) for part in err.get("loc", ())]
    path = ".".join(loc)
    kind = err.get("type")
    if kind == "missing":
        parent = ".".join(loc[:-1])
        key = loc[-1] if loc else "?"
        return f"Key '{key}' not found at path: {parent}"
    if kind == "json_invalid":
        return f"Data corrupted at path: {path} - {err.get('msg')}"
    if err.get("input", ...) is None:
        return f"Value not found at path: {path}"
    return f"Type mismatch at path: {path} - {err.get('msg')}"


def decode(content: bytes, decode_as: Type[T]) -> T:
    try:
        return decode_json(content, decode_as)
    except ValidationError as exc:
        raise DecodingError(describe_validation_error(exc)) from exc


def _server_message(resp: httpx.Response) -> Optional[str]:
    try:
        data = resp.json()
    except ValueError:
        return None
    if isinstance(data, dict):
        message = data.get("message")
        if isinstance(message, str) and message:
            return message
    return None


def error_for_response(resp: httpx.Response) -> AppError:
    status = resp.status_code
    message = _server_message(resp)
    if status == 404:
        return NotFound()
    if status == 401:
        return Unauthorized(message)
    if status == 403:
        if message and "rate limit" in message.lower():
            return RateLimited()
        return Forbidden(message)
    if status == 422:
        return ValidationFailed(message)
    if status == 429:
        return RateLimited()
    return ServerError(status)


class HttpTransport:
    """GET-only JSON transport; every call returns a decoded value or raises ``AppError``."""

    def __init__(self, settings: Optional[Settings] = None, client: Optional[httpx.AsyncClient] = None):
        self.settings = settings or get_settings()
        headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": self.settings.github_user_agent,
            "X-GitHub-Api-Version": self.settings.github_api_version,
        }
        if self.settings.github_token:
            headers["Authorization"] = f"Bearer {self.settings.github_token}"
        self.headers = headers
        if client is None:
            client_kwargs: Dict[str, Any] = {
                "base_url": str(self.settings.github_base_url),
                "follow_redirects": True,
            }
            if self.settings.github_proxy:
                client_kwargs["proxy"] = self.settings.github_proxy
            client = httpx.AsyncClient(**client_kwargs)
        self.client = client

    async def fetch(self, url: str, decode_as: Type[T], params: Optional[Dict[str, Any]] = None) -> T:
        try:
            resp = await self.client.get(
                url,
                params=params,
                headers=self.headers,
                timeout=self.settings.request_timeout_seconds,
                follow_redirects=True,
            )
        except httpx.TimeoutException as exc:
            raise NetworkError("Request timed out") from exc
        except httpx.NetworkError as exc:
            raise NetworkError("No internet connection") from exc
        except httpx.HTTPError as exc:
            raise NetworkError(str(exc) or type(exc).__name__) from exc

        if 200 <= resp.status_code < 300:
            return decode(resp.content, decode_as)

        error = error_for_response(resp)
        logger.warning(f"GitHub {resp.status_code} for {resp.request.url}: {error.message}")
        raise error

    async def aclose(self) -> None:
        await self.client.aclose()
