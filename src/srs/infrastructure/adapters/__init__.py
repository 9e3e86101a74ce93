# Infrastructure Adapters Package
from .fsrs_scheduler import FsrsScheduler

__all__ = ["FsrsScheduler"]
