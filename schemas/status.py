from pydantic import BaseModel
from typing import Optional


class ServerStatusSnapshot(BaseModel):
    server_start_time: Optional[str] = None
    server_start_response_time: Optional[str] = None
    server_error: Optional[str] = None
    server_error_time: Optional[str] = None
