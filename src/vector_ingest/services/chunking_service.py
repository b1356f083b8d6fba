"""Text chunking for RAG ingestion.

Chunking strategies form a closed set (``ChunkingStrategy``). Each member maps
to a pure function ``(text, config) -> List[TextChunk]`` through
``resolve_strategy``; adding a strategy means adding an enum member and a
branch there.
"""

from typing import Callable, List, Union

from vector_ingest.models.chunk import ChunkingConfig, ChunkingStrategy, TextChunk
from vector_ingest.utils.errors import InvalidConfiguration

ChunkFunction = Callable[[str, ChunkingConfig], List[TextChunk]]


def validate_config(config: ChunkingConfig) -> None:
    """Raise InvalidConfiguration unless ``window_size > 0`` and ``0 <= overlap < window_size``."""
    if config.window_size <= 0:
        raise InvalidConfiguration(
            "Chunk size must be greater than 0",
            details={"window_size": config.window_size},
        )
    if config.overlap < 0:
        raise InvalidConfiguration(
            "Chunk overlap must be non-negative",
            details={"overlap": config.overlap},
        )
    if config.overlap >= config.window_size:
        raise InvalidConfiguration(
            "Chunk overlap must be less than chunk size",
            details={"overlap": config.overlap, "window_size": config.window_size},
        )


def chunk_fixed_size(text: str, config: ChunkingConfig) -> List[TextChunk]:
    """
    Split text into fixed-size character windows with overlap.

    Windows are ``[offset, min(offset + window_size, len(text)))`` with the
    offset advancing by ``window_size - overlap``. Whitespace-only windows are
    skipped and do not consume an index.

    Args:
        text: Input text
        config: Window size and overlap in characters

    Returns:
        Chunks ordered by index (and therefore by start offset)

    Raises:
        InvalidConfiguration: If the window parameters are invalid
    """
    validate_config(config)

    if not text or not text.strip():
        return []

    step = config.window_size - config.overlap
    chunks: List[TextChunk] = []
    index = 0
    start = 0
    length = len(text)

    while start < length:
        end = min(start + config.window_size, length)
        window = text[start:end]

        if window.strip():
            chunks.append(
                TextChunk(
                    index=index,
                    text=window,
                    start_char=start,
                    end_char=end,
                    strategy_name=ChunkingStrategy.FIXED_SIZE.value,
                )
            )
            index += 1

        if end >= length:
            break
        start += step

    return chunks


def resolve_strategy(strategy: Union[str, ChunkingStrategy]) -> ChunkFunction:
    """
    Look up the chunk function for a strategy name.

    Raises:
        InvalidConfiguration: If the name is not a known strategy
    """
    try:
        member = ChunkingStrategy(strategy)
    except ValueError as e:
        available = [s.value for s in ChunkingStrategy]
        raise InvalidConfiguration(
            f"Chunking strategy '{strategy}' not found. Available strategies: {', '.join(available)}",
            details={"strategy": str(strategy), "available": available},
        ) from e

    if member is ChunkingStrategy.FIXED_SIZE:
        return chunk_fixed_size

    raise InvalidConfiguration(f"Chunking strategy '{member.value}' has no implementation")


def chunk_text(
    text: str,
    window_size: int,
    overlap: int,
    strategy: Union[str, ChunkingStrategy] = ChunkingStrategy.FIXED_SIZE,
) -> List[TextChunk]:
    """Chunk ``text`` with the named strategy."""
    chunker = resolve_strategy(strategy)
    return chunker(text, ChunkingConfig(window_size=window_size, overlap=overlap))
