"""Data manipulation utility functions."""

from itertools import islice
from typing import List, Any, Iterable, Iterator


def batched(xs: Iterable[Any], n: int) -> Iterator[List[Any]]:
    """Yield successive n-sized chunks from an iterable.
    
    Args:
        xs: Items to batch (consumed lazily)
        n: Batch size
        
    Yields:
        Batches of size n (last batch may be smaller)
    """
    if n < 1:
        raise ValueError(f"Batch size must be positive, got {n}")
    it = iter(xs)
    while True:
        chunk = list(islice(it, n))
        if not chunk:
            return
        yield chunk
