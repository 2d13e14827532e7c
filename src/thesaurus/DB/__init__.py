from .catalog import IndexCatalog, parse_index, parse_metadata
from .corpus import CorpusReader
from .writer import ArchiveWriter

__all__ = ["IndexCatalog", "CorpusReader", "ArchiveWriter", "parse_index", "parse_metadata"]
