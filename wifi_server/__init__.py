"""
Mobile WiFi Server - device registry, command queue and media ingestion.
"""

__version__ = "0.1.0"
