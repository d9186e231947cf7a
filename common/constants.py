"""Project-wide constants (chunk size, default ports, RPC names)."""

CHUNK_SIZE_BYTES: int = 64 * 1024  # 64 KiB advisory chunk size

DEFAULT_SERVER_PORT: int = 50051
DEFAULT_SERVER_HOST: str = "[::]"
DEFAULT_SERVER_ADDRESS: str = f"localhost:{DEFAULT_SERVER_PORT}"

SERVICE_NAME: str = "files.FileService"
UPLOAD_METHOD: str = f"/{SERVICE_NAME}/Upload"
DOWNLOAD_METHOD: str = f"/{SERVICE_NAME}/Download"
GET_METADATA_METHOD: str = f"/{SERVICE_NAME}/GetMetadata"

GRPC_KEEPALIVE_TIME_MS: int = 30000
GRPC_KEEPALIVE_TIMEOUT_MS: int = 10000

PARTIAL_DOWNLOAD_SUFFIX: str = ".part"
