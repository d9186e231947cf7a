"""Tests for the transfer client: parsing, handlers and exit codes."""

import io
from unittest.mock import AsyncMock, Mock

import grpc
import pytest

import client.main as client_main
from client.commands import execute_command, handle_download, handle_metadata, handle_upload
from client.file_client import FileServiceClient, iter_upload_chunks, translate_rpc_error
from client.models import DownloadCommand, MetadataCommand, UploadCommand
from client.parser import parse_command
from common.exceptions import (
    ChannelError,
    InvalidFileNameError,
    LocalIOError,
    StoredFileNotFoundError,
    UsageError
)
from common.protocol import Chunk, FileMetadata, UploadStatus


class FakeDownloadClient:
    """Stands in for FileServiceClient.download."""

    def __init__(self, chunks=(), error=None):
        self.chunks = list(chunks)
        self.error = error

    async def download(self, file_name):
        for chunk in self.chunks:
            yield chunk
        if self.error is not None:
            raise self.error


class FakeRpcError(grpc.RpcError):
    def __init__(self, code, details):
        self._code = code
        self._details = details

    def code(self):
        return self._code

    def details(self):
        return self._details


class TestParseCommand:
    """Command-line parsing."""

    def test_parse_upload(self):
        assert parse_command(['upload', 'docs/report.pdf']) == UploadCommand(path='docs/report.pdf')

    def test_parse_download(self):
        assert parse_command(['download', 'report.pdf']) == DownloadCommand(file_name='report.pdf')

    def test_parse_metadata(self):
        assert parse_command(['metadata', 'report.pdf']) == MetadataCommand(file_name='report.pdf')

    def test_unknown_command(self):
        with pytest.raises(UsageError, match='Unknown command: delete'):
            parse_command(['delete', 'report.pdf'])

    def test_missing_arguments(self):
        with pytest.raises(UsageError):
            parse_command([])
        with pytest.raises(UsageError):
            parse_command(['upload'])
        with pytest.raises(UsageError):
            parse_command(['download', 'a.txt', 'b.txt'])

    def test_download_rejects_paths(self):
        with pytest.raises(UsageError):
            parse_command(['download', '../etc/passwd'])

    @pytest.mark.parametrize('name', ['.', '..'])
    def test_download_and_metadata_reject_dot_entries(self, name):
        with pytest.raises(UsageError):
            parse_command(['download', name])
        with pytest.raises(UsageError):
            parse_command(['metadata', name])


def test_iter_upload_chunks_splits_130000_bytes():
    chunks = list(iter_upload_chunks(io.BytesIO(b'x' * 130000), 'big.bin'))

    assert [len(c.content) for c in chunks] == [65536, 64464]
    assert {c.file_name for c in chunks} == {'big.bin'}


def test_iter_upload_chunks_empty_file_sends_one_empty_chunk():
    chunks = list(iter_upload_chunks(io.BytesIO(b''), 'empty.txt'))

    assert chunks == [Chunk(content=b'', file_name='empty.txt')]


@pytest.mark.parametrize('code, expected', [
    (grpc.StatusCode.NOT_FOUND, StoredFileNotFoundError),
    (grpc.StatusCode.INVALID_ARGUMENT, InvalidFileNameError),
    (grpc.StatusCode.INTERNAL, ChannelError),
    (grpc.StatusCode.UNAVAILABLE, ChannelError),
])
def test_translate_rpc_error(code, expected):
    error = translate_rpc_error(FakeRpcError(code, 'details'), 'a.txt')
    assert isinstance(error, expected)


@pytest.mark.asyncio
async def test_upload_missing_local_file_is_local_io_error(tmp_path):
    client = FileServiceClient('127.0.0.1:1')

    with pytest.raises(LocalIOError):
        await client.upload(tmp_path / 'nope.txt')

    assert client._channel is None


@pytest.mark.asyncio
async def test_handle_upload_prints_status(client_config):
    mock_client = Mock(spec=FileServiceClient)
    mock_client.upload = AsyncMock(return_value=UploadStatus(success=True, message='Received 5 bytes'))

    result = await handle_upload(UploadCommand(path='hello.txt'), mock_client, client_config)

    assert result == 'Upload Status: Received 5 bytes'
    mock_client.upload.assert_awaited_once()
    assert mock_client.upload.await_args.args[1] == client_config.chunk_size


@pytest.mark.asyncio
async def test_handle_download_writes_chunks_in_order(client_config):
    fake = FakeDownloadClient([Chunk(content=b'B', file_name='x.txt'), Chunk(content=b'A', file_name='x.txt')])

    result = await handle_download(DownloadCommand(file_name='x.txt'), fake, client_config)

    assert result == 'Download completed'
    assert (client_config.downloads_dir / 'x.txt').read_bytes() == b'BA'
    assert not (client_config.downloads_dir / 'x.txt.part').exists()


@pytest.mark.asyncio
async def test_handle_download_not_found_leaves_no_file(client_config):
    fake = FakeDownloadClient(error=StoredFileNotFoundError('File not found on server: x.txt'))

    with pytest.raises(StoredFileNotFoundError):
        await handle_download(DownloadCommand(file_name='x.txt'), fake, client_config)

    assert list(client_config.downloads_dir.iterdir()) == []


@pytest.mark.asyncio
async def test_handle_download_failure_keeps_existing_destination(client_config):
    client_config.downloads_dir.mkdir()
    (client_config.downloads_dir / 'x.txt').write_bytes(b'previous')
    fake = FakeDownloadClient([Chunk(content=b'new', file_name='x.txt')], error=ChannelError('reset'))

    with pytest.raises(ChannelError):
        await handle_download(DownloadCommand(file_name='x.txt'), fake, client_config)

    assert (client_config.downloads_dir / 'x.txt').read_bytes() == b'previous'
    assert not (client_config.downloads_dir / 'x.txt.part').exists()


@pytest.mark.asyncio
async def test_handle_metadata_output(client_config):
    mock_client = Mock(spec=FileServiceClient)
    mock_client.get_metadata = AsyncMock(return_value=FileMetadata(
        file_name='notes.txt', size=42,
        created_at='2026-10-19T10:00:00+00:00', modified_at='2026-10-19T11:00:00+00:00'
    ))

    result = await handle_metadata(MetadataCommand(file_name='notes.txt'), mock_client, client_config)

    assert result == (
        "Metadata for notes.txt:\n"
        "Size: 42 bytes\n"
        "Created: 2026-10-19T10:00:00+00:00\n"
        "Modified: 2026-10-19T11:00:00+00:00"
    )


@pytest.mark.asyncio
async def test_execute_command_dispatches(client_config):
    mock_client = Mock(spec=FileServiceClient)
    mock_client.upload = AsyncMock(return_value=UploadStatus(success=True, message='Received 0 bytes'))

    result = await execute_command(UploadCommand(path='a.txt'), mock_client, client_config)

    assert result == 'Upload Status: Received 0 bytes'


class TestMainExitCodes:
    """Error kinds map to distinct exit codes."""

    def test_usage_error_before_any_io(self, monkeypatch, capsys):
        run = AsyncMock()
        monkeypatch.setattr(client_main, 'run_command', run)

        code = client_main.main(['rename', 'a.txt'])

        assert code == 2
        run.assert_not_called()
        assert 'Unknown command: rename' in capsys.readouterr().err

    @pytest.mark.parametrize('error, expected_code', [
        (StoredFileNotFoundError('File not found on server: a.txt'), 3),
        (LocalIOError('Could not open file a.txt'), 4),
        (ChannelError('RPC failed (UNAVAILABLE)'), 5),
        (InvalidFileNameError('Invalid file name'), 2),
    ])
    def test_error_kinds(self, monkeypatch, capsys, error, expected_code):
        monkeypatch.setattr(client_main, 'run_command', AsyncMock(side_effect=error))

        code = client_main.main(['metadata', 'a.txt'])

        assert code == expected_code
        assert str(error) in capsys.readouterr().err

    def test_success_prints_output(self, monkeypatch, capsys):
        monkeypatch.setattr(client_main, 'run_command', AsyncMock(return_value='Download completed'))

        code = client_main.main(['--debug', 'download', 'a.txt'])

        assert code == 0
        assert capsys.readouterr().out.strip() == 'Download completed'

    def test_invalid_chunk_size_config(self, monkeypatch, capsys):
        monkeypatch.setenv('FILESERVER_CHUNK_SIZE', '0')

        assert client_main.main(['metadata', 'a.txt']) == 2
