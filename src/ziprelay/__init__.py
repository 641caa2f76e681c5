"""
ziprelay - relays XML documents from dropped zip archives to an object store.
"""

__version__ = "0.1.0"
