"""Public SDK surface for Partons.

This module provides a stable import path for library users.
It re-exports the client, the async source, and the data model.
"""

from __future__ import annotations

from core.config import PartonsConfig
from core.constants import CL_1_SIGMA
from core.types import DataFormat, Header, SourceConfig, SourcePatterns
from engine.interface import Pdf, PdfBackend, PdfSet, PdfUncertainty
from engine.noop import NoopBackend
from grid.block import Block
from grid.info import Info
from grid.member import Member, block_index
from ingest.index import Index
from ingest.registry_sdk import PartonSet, PartonsClient
from ingest.source import Source
from ingest.sync_bridge import BlockingSource, open_blocking

__all__ = [
    "CL_1_SIGMA",
    "Block",
    "BlockingSource",
    "DataFormat",
    "Header",
    "Index",
    "Info",
    "Member",
    "NoopBackend",
    "PartonSet",
    "PartonsClient",
    "PartonsConfig",
    "Pdf",
    "PdfBackend",
    "PdfSet",
    "PdfUncertainty",
    "Source",
    "SourceConfig",
    "SourcePatterns",
    "block_index",
    "open_blocking",
]
