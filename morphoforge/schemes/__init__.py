"""
模式管理模块
"""

from morphoforge.schemes.scheme_store import SchemeStore

__all__ = ["SchemeStore"]
