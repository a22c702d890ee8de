#!/usr/bin/env python3
"""
CrackLab - Main CLI Entry Point

This script provides the command-line interface for the CrackLab
password auditing engine.
"""

import sys
import os

# Add the project root to Python path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from cracking_toolkit.ui.cli import main

if __name__ == '__main__':
    sys.exit(main())
