"""Request and response helpers built on FastAPI/Starlette."""

from .downloads import download_static_file
from .json_io import encode_json, error_json, read_json, write_json
from .remote import push_json_to_remote
from .uploads import upload_files, upload_one_file

__all__ = [
    "download_static_file",
    "encode_json",
    "error_json",
    "push_json_to_remote",
    "read_json",
    "upload_files",
    "upload_one_file",
    "write_json",
]
