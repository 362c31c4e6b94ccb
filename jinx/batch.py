"""Load many jinx definitions at once, skipping the ones that fail."""

import logging
from typing import Any, Dict, Iterable, Optional, Tuple, Union

from .definition import JinxDefinition, load_jinx

logger = logging.getLogger(__name__)

BatchItem = Union[str, Tuple[str, Optional[str]], Dict[str, Any]]


def _unpack(item: BatchItem) -> Tuple[Any, Optional[str]]:
    if isinstance(item, tuple):
        content, path = (item + (None,))[:2]
        return content, path
    if isinstance(item, dict) and "content" in item:
        return item["content"], item.get("path")
    return item, None


def load_jinxes(items: Iterable[BatchItem]) -> Dict[str, JinxDefinition]:
    """
    Load multiple jinxes and return a lookup dict keyed by name.

    Items may be ``(content, path)`` tuples, ``{"content": ..., "path": ...}``
    dicts, or bare content. An item that fails to load is logged and left
    out. When two jinxes share a name the later one wins.

    Args:
        items: Raw definitions, each with an optional source path

    Returns:
        Dictionary mapping jinx name to definition
    """
    jinxes: Dict[str, JinxDefinition] = {}

    for item in items:
        content, path = _unpack(item)
        try:
            jinx = load_jinx(content, path)
        except Exception as e:
            logger.error(f"Failed to load jinx from {path or '<unknown>'}: {e}")
            continue

        if jinx.jinx_name in jinxes:
            logger.debug(
                f"Jinx '{jinx.jinx_name}' from {path or '<unknown>'} replaces an earlier definition"
            )
        jinxes[jinx.jinx_name] = jinx

    logger.info(f"Loaded {len(jinxes)} jinx definitions")
    return jinxes
