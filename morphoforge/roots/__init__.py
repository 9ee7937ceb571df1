"""
词根管理模块

负责词根及其派生词的存储
"""

from morphoforge.roots.root_store import RootStore

__all__ = ["RootStore"]
