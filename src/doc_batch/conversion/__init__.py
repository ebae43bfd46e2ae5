"""
Domain layer for batch document conversion.
Provides the format sniffer, codecs, packaging, download registry, retention
sweeper and the batch service that ties them together, so front-ends (HTTP
or others) can use the same core logic.
"""

from .codecs import TextExtractor
from .history import HistoryLog
from .interfaces import OcrGateway, PdfTextGateway
from .packager import ArchivePackager
from .registry import ArtifactRegistry
from .service import BatchConversionService
from .sweeper import RetentionSweeper
