"""
Static datasets and wordlist loading
"""

from .wordlists import (
    COMMON_PASSWORDS, KEYBOARD_ROWS, STRENGTH_DICTIONARY, MARKOV_TRAINING_CORPUS
)
from .loader import WordlistInfo, read_wordlist, load_wordlist

__all__ = [
    'COMMON_PASSWORDS',
    'KEYBOARD_ROWS',
    'STRENGTH_DICTIONARY',
    'MARKOV_TRAINING_CORPUS',
    'WordlistInfo',
    'read_wordlist',
    'load_wordlist',
]
