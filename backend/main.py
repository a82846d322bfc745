import socket

import uvicorn

from notemate import app
from notemate.config import settings


def resolve_port(host: str, configured: int) -> int:
    """Use the configured port, or let the OS hand out a free one when it is 0."""
    if configured:
        return configured
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind((host, 0))
        return s.getsockname()[1]


def serve() -> None:
    port = resolve_port(settings.host, settings.port)
    # The launching shell reads this line to find the API
    print(f"PORT={port}", flush=True)
    uvicorn.run(app, host=settings.host, port=port, log_level=settings.log_level)


if __name__ == "__main__":
    serve()
