import os
import threading

import pytest
from fastapi.testclient import TestClient
from lambda_tasks.config import TargetConfig
from lambda_tasks.errors import LambdaTasksError
from lambda_tasks.local_server import LocalContext, LocalRunner, load_handler

PROXY_HANDLER = '''import json


def handler(event, context):
    if "httpMethod" not in event:
        return {"raw": event, "function": context.function_name}
    return {
        "statusCode": 201,
        "headers": {"X-Path": event["path"]},
        "body": json.dumps({"method": event["httpMethod"], "query": event["queryStringParameters"]}),
    }
'''


@pytest.fixture
def client(make_target):
    target = make_target("local_orders", files={"handler.py": PROXY_HANDLER})
    config = TargetConfig(function_name="orders-dev")
    app = LocalRunner().create_app(target / "handler.py", config)
    return TestClient(app)


def test_invoke_endpoint_passes_raw_event(client):
    response = client.post(
        "/2015-03-31/functions/orders-dev/invocations", json={"orderId": 7}
    )

    assert response.status_code == 200
    assert response.json() == {"raw": {"orderId": 7}, "function": "orders-dev"}


def test_http_request_becomes_proxy_event(client):
    response = client.get("/orders/7?expand=items")

    assert response.status_code == 201
    assert response.headers["x-path"] == "/orders/7"
    assert response.json() == {"method": "GET", "query": {"expand": "items"}}


def test_invoke_endpoint_rejects_invalid_json(client):
    response = client.post(
        "/2015-03-31/functions/orders-dev/invocations",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json()["errorType"] == "InvalidRequestContentException"
    assert response.json()["errorMessage"]


def test_handler_runs_off_the_event_loop(make_target):
    target = make_target(
        "local_threads",
        files={
            "handler.py": (
                "import threading\n\n\n"
                "def handler(event, context):\n"
                "    return {'thread': threading.current_thread().name}\n"
            )
        },
    )
    app = LocalRunner().create_app(target / "handler.py", TargetConfig(function_name="threads"))

    with TestClient(app) as client:
        invoked = client.post("/2015-03-31/functions/threads/invocations", json={})
        proxied = client.get("/anything")
        loop_thread = client.portal.call(lambda: threading.current_thread().name)

    assert invoked.json()["thread"] != loop_thread
    assert proxied.json()["thread"] != loop_thread


def test_load_handler_missing_function(make_target):
    target = make_target("local_missing")

    with pytest.raises(LambdaTasksError, match="no handler function 'main'"):
        load_handler(target / "handler.py", "handler.main")


def test_context_remaining_time():
    context = LocalContext(TargetConfig(function_name="orders", timeout=10))

    assert 0 < context.get_remaining_time_in_millis() <= 10000
    assert context.invoked_function_arn.endswith(":function:orders")


def test_serve_runs_uvicorn(make_target, mocker):
    target = make_target("local_serve")
    run = mocker.patch("uvicorn.run")
    mocker.patch.dict("os.environ", {})
    config = TargetConfig(function_name="serve", environment={"STAGE": "local"})

    LocalRunner(port=8123).serve(target / "handler.py", config)

    assert run.call_args.kwargs == {"host": "127.0.0.1", "port": 8123}
    assert os.environ["STAGE"] == "local"
