# Application Stats Package
from .folder_stats import FolderStats, FolderStatsCalculator

__all__ = ["FolderStats", "FolderStatsCalculator"]
