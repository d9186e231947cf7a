"""Shared pytest fixtures for all tests."""

import pytest
import pytest_asyncio

from client.config import ClientConfig
from client.file_client import FileServiceClient
from fileserver.grpc_server import create_server
from fileserver.storage import FileStorage


@pytest.fixture
def storage(tmp_path):
    """
    Create an empty storage root.

    Args:
        tmp_path: pytest tmp_path fixture

    Returns:
        FileStorage rooted in a temporary directory
    """
    file_storage = FileStorage(tmp_path / 'storage')
    file_storage.ensure_root()
    return file_storage


@pytest.fixture
def client_config(tmp_path):
    """
    Create client configuration with a temporary downloads directory.

    Returns:
        ClientConfig pointing at tmp_path/downloads
    """
    return ClientConfig(downloads_dir=tmp_path / 'downloads')


@pytest.fixture
def sample_file(tmp_path):
    """
    Create a 130000-byte local file with non-repeating content.

    Returns:
        Path to the file
    """
    file_path = tmp_path / 'sample.bin'
    file_path.write_bytes(bytes(i % 251 for i in range(130000)))
    return file_path


@pytest.fixture
def empty_file(tmp_path):
    """
    Create a zero-length local file.

    Returns:
        Path to the file
    """
    file_path = tmp_path / 'empty.txt'
    file_path.write_bytes(b'')
    return file_path


@pytest_asyncio.fixture
async def server_address(storage):
    """
    Run an in-process file server on an ephemeral localhost port.

    Yields:
        Address string for FileServiceClient
    """
    server = create_server(storage)
    port = server.add_insecure_port('127.0.0.1:0')
    await server.start()
    yield f'127.0.0.1:{port}'
    await server.stop(None)


@pytest_asyncio.fixture
async def file_client(server_address):
    """
    Connected FileServiceClient, closed after the test.
    """
    client = FileServiceClient(server_address)
    yield client
    await client.close()
