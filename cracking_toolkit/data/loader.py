"""
Wordlist and corpus file loading
"""

import hashlib
import logging
import os
from dataclasses import dataclass
from datetime import datetime
from typing import Iterator, List, Optional

from ..interfaces import UnsupportedConfigurationError


logger = logging.getLogger(__name__)


@dataclass
class WordlistInfo:
    """Information about a wordlist file"""
    path: str
    name: str
    size: int = 0
    entry_count: int = 0
    hash_md5: Optional[str] = None
    last_modified: Optional[datetime] = None

    def __post_init__(self):
        if not os.path.exists(self.path):
            raise UnsupportedConfigurationError(f"Wordlist not found: {self.path}", "WORDLIST_NOT_FOUND")
        stat = os.stat(self.path)
        self.size = stat.st_size
        self.last_modified = datetime.fromtimestamp(stat.st_mtime)

        with open(self.path, 'rb') as f:
            self.hash_md5 = hashlib.md5(f.read()).hexdigest()
        self.entry_count = sum(1 for _ in read_wordlist(self.path))


def read_wordlist(path: str) -> Iterator[str]:
    """Yield non-empty, non-comment entries from a wordlist file in file order"""
    with open(path, 'r', encoding='utf-8', errors='ignore') as f:
        for line in f:
            entry = line.rstrip('\r\n')
            if entry.strip() and not entry.startswith('#'):
                yield entry


def load_wordlist(path: str) -> List[str]:
    """
    Load a wordlist into memory.

    Args:
        path: Wordlist file path

    Returns:
        List[str]: Entries in file order

    Raises:
        UnsupportedConfigurationError: If the file is missing or unreadable
    """
    info = WordlistInfo(path=path, name=os.path.basename(path))
    try:
        entries = list(read_wordlist(path))
    except OSError as e:
        raise UnsupportedConfigurationError(f"Cannot read wordlist {path}: {e}", "WORDLIST_UNREADABLE")

    logger.info(f"Loaded wordlist {info.name}: {info.entry_count} entries (md5 {info.hash_md5})")
    return entries
