"""
Entry Point Script (Bootstrap)
==============================
Development runner that works without installing the package.

Why is this file needed?
------------------------
1. It is located outside the 'src' package to act as a convenient runner.
2. It puts 'src' on 'sys.path' so 'import ramenviz' resolves from a checkout.

Usage:
    $ python run.py [file] [--log-level debug]
"""
import os
import sys

src_path: str = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'src')
sys.path.insert(0, src_path)

from ramenviz.main import main

if __name__ == "__main__":
    main()
