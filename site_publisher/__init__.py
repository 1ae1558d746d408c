"""Publish exported static-site files to a web server over FTP/FTPS."""

__version__ = "1.0.0"
