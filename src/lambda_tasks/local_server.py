"""
Serves a Lambda handler over HTTP for local testing.

Two kinds of request are understood:

* ``POST /2015-03-31/functions/<name>/invocations`` behaves like the Lambda
  Invoke API: the request body is the event, the response is the handler's
  return value as JSON.
* Any other request is converted into an API Gateway proxy event and the
  handler's ``{"statusCode", "headers", "body"}`` result is mapped back to
  an HTTP response.
"""

from __future__ import annotations

import base64
import importlib.util
import json
import os
import sys
import time
import uuid
from pathlib import Path
from typing import Any, Callable, Dict

from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse, Response

from . import output
from .config import TargetConfig
from .errors import LambdaTasksError

INVOKE_PATH = "/2015-03-31/functions/{function_name}/invocations"


class LocalContext:
    """The subset of the Lambda context object handlers commonly read."""

    def __init__(self, config: TargetConfig, timeout: int = 3):
        self.function_name = config.function_name or ""
        self.function_version = "$LATEST"
        self.memory_limit_in_mb = config.memory_size or 128
        self.invoked_function_arn = (
            f"arn:aws:lambda:{config.region}:000000000000:function:{self.function_name}"
        )
        self.aws_request_id = str(uuid.uuid4())
        self.log_group_name = f"/aws/lambda/{self.function_name}"
        self.log_stream_name = "local"
        self._deadline = time.monotonic() + (config.timeout or timeout)

    def get_remaining_time_in_millis(self) -> int:
        return max(0, int((self._deadline - time.monotonic()) * 1000))


def load_handler(entry_module: Path, handler: str) -> Callable[[Any, Any], Any]:
    """Imports entry_module and returns the function named by 'module.function'."""
    entry_module = Path(entry_module).resolve()
    function_name = handler.rsplit(".", 1)[-1]

    source_root = str(entry_module.parent)
    if source_root not in sys.path:
        sys.path.insert(0, source_root)

    spec = importlib.util.spec_from_file_location(entry_module.stem, entry_module)
    if spec is None or spec.loader is None:
        raise LambdaTasksError(f"Cannot import {entry_module}")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    try:
        return getattr(module, function_name)
    except AttributeError:
        raise LambdaTasksError(
            f"{entry_module} has no handler function '{function_name}'"
        ) from None


async def _proxy_event(request: Request, path: str) -> Dict[str, Any]:
    body = await request.body()
    try:
        text = body.decode("utf-8")
        is_base64 = False
    except UnicodeDecodeError:
        text = base64.b64encode(body).decode("ascii")
        is_base64 = True

    return {
        "resource": "/{proxy+}",
        "path": "/" + path,
        "httpMethod": request.method,
        "headers": dict(request.headers),
        "queryStringParameters": dict(request.query_params) or None,
        "pathParameters": {"proxy": path} if path else None,
        "requestContext": {
            "httpMethod": request.method,
            "path": "/" + path,
            "requestId": str(uuid.uuid4()),
            "stage": "local",
        },
        "body": text or None,
        "isBase64Encoded": is_base64,
    }


def _proxy_response(result: Any) -> Response:
    if not isinstance(result, dict) or "statusCode" not in result:
        return JSONResponse(result)

    body = result.get("body") or ""
    content = base64.b64decode(body) if result.get("isBase64Encoded") else body
    if not isinstance(content, (str, bytes)):
        content = json.dumps(content)
    return Response(
        content=content,
        status_code=int(result["statusCode"]),
        headers={k: str(v) for k, v in (result.get("headers") or {}).items()},
    )


class LocalRunner:
    """Runs the entry module's handler behind a local uvicorn server."""

    def __init__(self, host: str = "127.0.0.1", port: int = 3000):
        self.host = host
        self.port = port

    def create_app(self, entry_module: Path, config: TargetConfig) -> FastAPI:
        handler = load_handler(entry_module, config.handler)
        app = FastAPI(title=f"{config.function_name} (local)")

        @app.post(INVOKE_PATH)
        async def invoke(function_name: str, request: Request):
            raw = await request.body()
            try:
                event = json.loads(raw) if raw else {}
            except ValueError as e:
                return JSONResponse(
                    {"errorType": "InvalidRequestContentException", "errorMessage": str(e)},
                    status_code=400,
                )
            result = await run_in_threadpool(handler, event, LocalContext(config))
            return JSONResponse(result)

        @app.api_route(
            "/{path:path}",
            methods=["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"],
        )
        async def proxy(path: str, request: Request):
            event = await _proxy_event(request, path)
            result = await run_in_threadpool(handler, event, LocalContext(config))
            return _proxy_response(result)

        return app

    def serve(self, entry_module: Path, config: TargetConfig) -> None:
        """Blocks serving the handler until the process is interrupted."""
        import uvicorn

        os.environ.update(config.environment)
        app = self.create_app(entry_module, config)
        output.success(
            f"Serving {config.function_name} at http://{self.host}:{self.port}/"
        )
        uvicorn.run(app, host=self.host, port=self.port)
