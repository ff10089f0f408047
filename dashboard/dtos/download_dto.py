from dataclasses import dataclass


@dataclass
class DownloadDTO:
    content: bytes
    filename: str
    content_type: str = "application/octet-stream"
