"""Change-detection engines."""

from log_manager.engines.base import Engine, EntryRecorder
from log_manager.engines.posts import PostLifecycleEngine
from log_manager.engines.taxonomy import TaxonomyLifecycleEngine
from log_manager.engines.media import FeaturedAssetEngine
from log_manager.engines.users import UserSessionEngine

__all__ = [
    "Engine",
    "EntryRecorder",
    "PostLifecycleEngine",
    "TaxonomyLifecycleEngine",
    "FeaturedAssetEngine",
    "UserSessionEngine",
]
