"""Fixtures that serve the application over a real socket with uvicorn."""

import socket
import threading
import time

import pytest
import uvicorn

from market.main import create_app


class _ThreadedServer(uvicorn.Server):
    def install_signal_handlers(self) -> None:
        # Signal handlers can only be installed from the main thread
        pass


def _free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


@pytest.fixture(scope="function")
def live_server():
    """Base ``ws://`` URL of the app running under uvicorn in a background thread."""
    port = _free_port()
    config = uvicorn.Config(
        create_app(testing=True),
        host="127.0.0.1",
        port=port,
        log_level="warning",
        lifespan="on",
    )
    server = _ThreadedServer(config)
    thread = threading.Thread(target=server.run, daemon=True)
    thread.start()

    deadline = time.monotonic() + 10
    while not server.started:
        if not thread.is_alive() or time.monotonic() > deadline:
            raise RuntimeError("uvicorn did not start")
        time.sleep(0.01)

    yield f"ws://127.0.0.1:{port}"

    server.should_exit = True
    thread.join(timeout=10)
