#!/usr/bin/env python3
"""
Circl Walkthrough CLI - Main entry point.

Usage:
    python walkthrough_cli.py onboard --usage "Find Mentors"
    python walkthrough_cli.py walk
    python walkthrough_cli.py flows
"""

import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from circl_walkthrough.tutorial.cli import main

if __name__ == "__main__":
    main()
