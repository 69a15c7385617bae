"""
GB Inspector Command-Line Interface
===================================

This package provides the command-line tool for the inspector:

- **gbdisasm**: Cartridge header report and linear SM83 disassembly

The tool is implemented as a Click-based CLI application with
comprehensive help and error reporting.
"""

__all__ = ["gbdisasm"]
