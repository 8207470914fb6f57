"""
Chunked transfer engine.

Features:
- Payload splitting into size-bounded chunks, gzip per chunk
- Sequential upload threading the server-assigned message id
- Chunked download following the mex-chunk-range cursor
- Protocol violations raised, transport failures returned as results
"""

from meshtransfer.transfer._chunking import (
    compress_chunk,
    compress_chunks,
    decompress_chunk,
    split_into_chunks,
)
from meshtransfer.transfer._download import ChunkDownloader, parse_chunk_range
from meshtransfer.transfer._endpoints import MailboxEndpoints
from meshtransfer.transfer._models import (
    ChunkRange,
    DownloadPhase,
    DownloadState,
    TransferResult,
    TransferStats,
    UploadPhase,
)
from meshtransfer.transfer._upload import ChunkUploader, next_upload_phase

__all__ = [
    "ChunkRange",
    "ChunkDownloader",
    "ChunkUploader",
    "DownloadPhase",
    "DownloadState",
    "MailboxEndpoints",
    "TransferResult",
    "TransferStats",
    "UploadPhase",
    "compress_chunk",
    "compress_chunks",
    "decompress_chunk",
    "next_upload_phase",
    "parse_chunk_range",
    "split_into_chunks",
]
