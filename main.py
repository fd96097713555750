#!/usr/bin/env python3
"""
Main entry point for ws-loader.

This wrapper script allows running the tool directly with python main.py
without installing the package first.
"""

import os
import sys

sys.path.insert(0, os.path.abspath(os.path.dirname(__file__)))

from ws_loader.cli.main import main

if __name__ == "__main__":
    main()
