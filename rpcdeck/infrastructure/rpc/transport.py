"""
JSON-RPC 2.0 over HTTP (requests)

Responsibilities:
- Build the request envelope {jsonrpc, id, method, params} with a monotonic id.
- POST it as JSON to the configured endpoint.
- Map the outcome onto the error taxonomy:
  - network failure            -> TransportError ("RPC Error: <cause>")
  - non-JSON / malformed body  -> ParseError     ("RPC Error: <detail>")
  - envelope with `error`      -> ProtocolError  (endpoint message, verbatim)
  - otherwise                  -> `result`, untyped

Notes:
- The JSON-RPC error object wins over the HTTP status code.
- No retry and no timeout: a hung endpoint keeps the caller waiting.
- send() runs the blocking request on a daemon thread so that several slots
  can be pending at once on one event loop, and a request that never returns
  does not hold up interpreter exit.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
import threading
from typing import Any, Dict, Optional, Sequence

import requests

from rpcdeck.config import DEFAULT_RPC_URL
from rpcdeck.domain.errors import ParseError, ProtocolError, TransportError

logger = logging.getLogger(__name__)


class JsonRpcTransport:
    def __init__(self, url: Optional[str] = None, session: Optional[requests.Session] = None) -> None:
        self.url = url or DEFAULT_RPC_URL
        self._session = session or requests.Session()
        self._ids = itertools.count(1)

    # ---------- Public API ----------

    async def send(self, method: str, params: Sequence[Any] = ()) -> Any:
        loop = asyncio.get_running_loop()
        future = loop.create_future()

        def work() -> None:
            try:
                result = self.send_sync(method, params)
            except Exception as e:
                _deliver(loop, future, error=e)
            else:
                _deliver(loop, future, result=result)

        threading.Thread(target=work, name=f"rpc-{method}", daemon=True).start()
        return await future

    def send_sync(self, method: str, params: Sequence[Any] = ()) -> Any:
        payload = self.build_request(method, params)
        logger.debug("-> %s id=%s url=%s", method, payload["id"], self.url)

        try:
            resp = self._session.post(
                self.url,
                json=payload,
                headers={"Content-Type": "application/json"},
                timeout=None,
            )
        except requests.RequestException as e:
            logger.debug("<- %s id=%s transport failure: %s", method, payload["id"], e)
            raise TransportError(str(e)) from e

        try:
            data = resp.json()
        except ValueError as e:
            raise ParseError(f"invalid JSON response (HTTP {resp.status_code})") from e

        return self.parse_response(data, method=method, request_id=payload["id"])

    def build_request(self, method: str, params: Sequence[Any] = ()) -> Dict[str, Any]:
        return {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": list(params or []),
        }

    def parse_response(self, data: Any, method: str = "", request_id: Any = None) -> Any:
        if not isinstance(data, dict):
            raise ParseError(f"unexpected response of type {type(data).__name__}")

        error = data.get("error")
        if error is not None:
            if isinstance(error, dict):
                message = str(error.get("message") or "Unknown error")
                code = error.get("code")
                logger.debug("<- %s id=%s error code=%s: %s", method, request_id, code, message)
                raise ProtocolError(message, code=code, data=error.get("data"))
            raise ProtocolError(str(error))

        if "result" not in data:
            raise ParseError("response carries neither 'result' nor 'error'")

        logger.debug("<- %s id=%s ok", method, request_id)
        return data["result"]

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> "JsonRpcTransport":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()


def _settle(future: "asyncio.Future", result: Any, error: Optional[BaseException]) -> None:
    if future.done():
        return
    if error is not None:
        future.set_exception(error)
    else:
        future.set_result(result)


def _deliver(loop: asyncio.AbstractEventLoop, future: "asyncio.Future", result: Any = None, error: Optional[BaseException] = None) -> None:
    try:
        loop.call_soon_threadsafe(_settle, future, result, error)
    except RuntimeError:
        # loop already closed; nobody is waiting for this reply
        logger.debug("Discarding reply for a closed event loop")


__all__ = ["JsonRpcTransport", "DEFAULT_RPC_URL"]
