"""Shared RPC/protocol message definitions (serialization formats)."""

from dataclasses import dataclass
import json
import base64


@dataclass
class Chunk:
    """One ordered piece of file content tagged with its file name."""
    content: bytes
    file_name: str

    def to_json(self) -> bytes:
        """Serialize to JSON bytes."""
        return json.dumps({
            'content': base64.b64encode(self.content).decode('ascii'),
            'file_name': self.file_name
        }).encode('utf-8')

    @classmethod
    def from_json(cls, data: bytes) -> 'Chunk':
        """Deserialize from JSON bytes."""
        obj = json.loads(data)
        return cls(
            content=base64.b64decode(obj['content'], validate=True),
            file_name=obj['file_name']
        )


@dataclass
class FileRequest:
    """Request message for Download and GetMetadata RPCs."""
    file_name: str

    def to_json(self) -> bytes:
        """Serialize to JSON bytes."""
        return json.dumps({'file_name': self.file_name}).encode('utf-8')

    @classmethod
    def from_json(cls, data: bytes) -> 'FileRequest':
        """Deserialize from JSON bytes."""
        obj = json.loads(data)
        return cls(file_name=obj['file_name'])


@dataclass
class UploadStatus:
    """Response message for Upload RPC, sent once when the stream closes."""
    success: bool
    message: str

    def to_json(self) -> bytes:
        """Serialize to JSON bytes."""
        return json.dumps({
            'success': self.success,
            'message': self.message
        }).encode('utf-8')

    @classmethod
    def from_json(cls, data: bytes) -> 'UploadStatus':
        """Deserialize from JSON bytes."""
        obj = json.loads(data)
        return cls(success=obj['success'], message=obj['message'])


@dataclass
class FileMetadata:
    """Response message for GetMetadata RPC."""
    file_name: str
    size: int
    created_at: str
    modified_at: str

    def to_json(self) -> bytes:
        """Serialize to JSON bytes."""
        return json.dumps(self.__dict__).encode('utf-8')

    @classmethod
    def from_json(cls, data: bytes) -> 'FileMetadata':
        """Deserialize from JSON bytes."""
        obj = json.loads(data)
        return cls(
            file_name=obj['file_name'],
            size=obj['size'],
            created_at=obj['created_at'],
            modified_at=obj['modified_at']
        )
