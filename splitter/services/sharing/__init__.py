"""
Sharing Services Package

Encodes splitter state into URL tokens, builds and parses share links,
and copies links to the clipboard.
"""

from splitter.services.sharing.clipboard import (
    CallableClipboard,
    ClipboardError,
    ClipboardWriter,
    CommandClipboard,
)
from splitter.services.sharing.codec import DecodeError, decode, encode
from splitter.services.sharing.link import (
    DEFAULT_TOKEN_PARAM,
    build_share_link,
    extract_token,
)

__all__ = [
    # Codec
    "DecodeError",
    "decode",
    "encode",
    # Links
    "DEFAULT_TOKEN_PARAM",
    "build_share_link",
    "extract_token",
    # Clipboard
    "CallableClipboard",
    "ClipboardError",
    "ClipboardWriter",
    "CommandClipboard",
]
