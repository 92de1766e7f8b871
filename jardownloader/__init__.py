"""
jardownloader: fetches the dependencies listed in plugin manifests.
"""

__version__ = "0.1.3"
