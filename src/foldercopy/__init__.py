"""
Folder Copy - concatenate a directory tree into one structured document.

This package walks a directory, skips ignored names and likely-binary files,
and joins the remaining files into a single text blob with a header and a
language-tagged code fence per file, ready for the clipboard or a markdown
export.
"""

__version__ = "0.1.0"
__author__ = "Folder Copy Team"
