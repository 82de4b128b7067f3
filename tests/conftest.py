import socket
import sys
from pathlib import Path

import pytest


REPO_ROOT = Path(__file__).resolve().parents[1]
SRC = REPO_ROOT / "src"
DATASETS = Path(__file__).resolve().parent / "fixtures" / "datasets"

# Prefer repo sources over any installed package.
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


@pytest.fixture(autouse=True)
def block_network(monkeypatch):
    """Dataset sources are files or mocked transports; no test opens a real socket."""

    real_connect = socket.socket.connect

    def loopback_only(sock, address):
        if address[0] not in ("127.0.0.1", "localhost"):
            raise RuntimeError(f"test tried to connect to {address[0]}")
        return real_connect(sock, address)

    monkeypatch.setattr(socket.socket, "connect", loopback_only)


@pytest.fixture
def datasets_dir():
    return DATASETS


@pytest.fixture
def settings(datasets_dir):
    from listing_aggregator.config import Settings

    return Settings(
        data_dir=str(datasets_dir),
        base_url=None,
        source_timeout=5.0,
        page_size=20,
        max_bytes=5_000_000,
    )


@pytest.fixture
def service(settings):
    from listing_aggregator.pipeline import SearchService

    return SearchService(settings=settings)
