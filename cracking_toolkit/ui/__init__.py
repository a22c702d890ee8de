"""
User Interface components for CrackLab
"""

from .cli import CrackLabCLI, ProgressDisplay, CLIColors

__all__ = ['CrackLabCLI', 'ProgressDisplay', 'CLIColors']

__version__ = "1.0.0"
