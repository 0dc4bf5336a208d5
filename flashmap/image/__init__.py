from .base import MCUBOOT_FW_START_ADDRESS, CombinedImage, SparseImage
from .recent import MAX_RECENT_FILES, RecentFiles
from .store import ImageStore

__all__ = [
    "MCUBOOT_FW_START_ADDRESS",
    "MAX_RECENT_FILES",
    "CombinedImage",
    "ImageStore",
    "RecentFiles",
    "SparseImage",
]
