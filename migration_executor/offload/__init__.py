"""Storage copy-offload host preparation"""

from .vib import ensure_vib, get_vib_version

__all__ = ['ensure_vib', 'get_vib_version']
