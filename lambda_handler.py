"""
AWS Lambda handler using Mangum with ASGI adapter.

This file is the entry point for Lambda invocations.
Mangum requires ASGI, so the WSGI entry point is wrapped with asgiref.
The application itself is built lazily on the first invocation and reused
while the container stays warm.
"""
import os

from mangum import Mangum
from asgiref.wsgi import WsgiToAsgi
from student_api.handler import EntryPoint
from student_api.lifecycle import ApplicationLifecycle

lifecycle = ApplicationLifecycle()
entry_point = EntryPoint(lifecycle)

# Create Lambda handler
handler = Mangum(
    WsgiToAsgi(entry_point),
    lifespan="off",
    api_gateway_base_path=os.environ.get("API_GATEWAY_BASE_PATH", "/"),
)
