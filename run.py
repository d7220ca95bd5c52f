#!/usr/bin/env python3
"""
run.py - Main entry point for 3D Connect Four
"""

import os
import sys

# Add the project root to Python path to ensure imports work
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from connect4_3d.interfaces.cli import main


if __name__ == "__main__":
    sys.exit(main())
