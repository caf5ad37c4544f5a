"""Entity → document transformation and text helpers"""

from sync.transformers.entity_transformer import EntityTransformer
from sync.transformers.text import slugify, strip_tags

__all__ = ["EntityTransformer", "slugify", "strip_tags"]
