"""
Prompt Builder - token counts and prompt documents for a directory of files.

This package scans the files directly inside a directory, drops files by
glob pattern and lines by substring, then either reports a per-file token
count or concatenates each file's name and contents into a single prompt
for use with large language models.
"""

__version__ = "0.1.0"
