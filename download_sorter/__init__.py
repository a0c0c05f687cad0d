"""
Download Sorter
===============

Keeps a downloads folder tidy by moving files into category folders
based on their extension.

Features:
- One-shot sorting of everything already in the folder
- Live sorting of new arrivals via filesystem notifications
- User-editable JSON rules and an append-only activity log
"""

__version__ = "0.1.0"
__author__ = "Dharshan"

from download_sorter.main import DownloadSorter

__all__ = ["DownloadSorter"]
