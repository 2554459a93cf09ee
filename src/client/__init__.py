"""
Data service client module.
"""

from src.client.data_service import DataServiceClient

__all__ = [
    "DataServiceClient",
]
