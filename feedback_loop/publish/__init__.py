"""
Model id propagation to the hosting platform.
"""

from .netlify import MODEL_ENV_KEY, NetlifyEnvPublisher, PublishResult

__all__ = [
    "MODEL_ENV_KEY",
    "NetlifyEnvPublisher",
    "PublishResult",
]
