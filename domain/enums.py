from __future__ import annotations
from enum import Enum

class ImageSource(str, Enum):
    file = "file"       # photo or image document sent to the chat
    url = "url"
    sample = "sample"   # built-in demo picture

class ExtractionStatus(str, Enum):
    ok = "ok"
    failed = "failed"
