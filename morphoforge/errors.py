"""
引擎异常类型

查找失败时抛出明确的异常，调用方据此区分"实体不存在"与"结果为空"
"""


class MorphologyError(Exception):
    """形态引擎异常基类"""


class InvalidRootError(MorphologyError, ValueError):
    """词根不是三个单字符"""


class RootNotFoundError(MorphologyError, LookupError):
    """词根不存在"""

    def __init__(self, key: str):
        super().__init__(f"词根不存在: {key}")
        self.key = key


class SchemeNotFoundError(MorphologyError, LookupError):
    """模式不存在"""

    def __init__(self, name: str):
        super().__init__(f"模式不存在: {name}")
        self.name = name


class SnapshotImportError(MorphologyError, ValueError):
    """快照结构错误，导入被拒绝"""
