"""
Core application engine for orchestrating the download process.

This package contains the primary logic. Manifests are parsed by `manifest`,
found inside jar archives by `jar_scanner`, and the `DownloadManager` acts as
the session coordinator that downloads every dependency they declare.
"""
