"""
模式存储
按名称和标识符两个键管理形态模式，保持插入顺序
"""

import logging
import re
from typing import Dict, Iterable, Iterator, List, Optional

from morphoforge.errors import SchemeNotFoundError
from morphoforge.models import Scheme

logger = logging.getLogger("morphoforge")

ID_PREFIX = "scheme-"
_ID_PATTERN = re.compile(r"^scheme-(\d+)$")


class SchemeStore:
    """
    形态模式存储

    名称唯一；标识符由递增计数器生成，删除后不再复用
    """

    def __init__(self):
        self._schemes: Dict[str, Scheme] = {}  # 名称 -> 模式，dict保持插入顺序
        self._ids: Dict[str, str] = {}  # 标识符 -> 名称
        self._next_id = 1

    def add(self, name: str, template: str, description: str = "", scheme_id: Optional[str] = None) -> bool:
        """
        添加模式

        Args:
            name: 模式名称
            template: 模板
            description: 描述
            scheme_id: 指定标识符（快照恢复时使用），为None时自动生成

        Returns:
            是否添加成功（名称或标识符已存在时返回False，不做修改）
        """
        if name in self._schemes:
            logger.warning(f"模式名称已存在，未添加: {name}")
            return False

        if scheme_id is None:
            scheme_id = self._allocate_id()
        elif scheme_id in self._ids:
            logger.warning(f"模式标识符已存在，未添加: {scheme_id}")
            return False
        else:
            self._reserve_id(scheme_id)

        self._schemes[name] = Scheme(scheme_id, name, template, description)
        self._ids[scheme_id] = name
        logger.info(f"已添加模式 '{name}' ({scheme_id}): {template}")
        return True

    def update(self, name: str, template: Optional[str] = None, description: Optional[str] = None) -> bool:
        """
        修改已有模式的模板或描述，保留标识符和顺序

        Returns:
            模式是否存在
        """
        current = self._schemes.get(name)
        if current is None:
            return False

        self._schemes[name] = Scheme(
            current.id,
            name,
            current.template if template is None else template,
            current.description if description is None else description,
        )
        logger.info(f"已修改模式 '{name}'")
        return True

    def remove(self, name: str) -> bool:
        """
        删除模式，不影响已存储的派生词

        Returns:
            模式是否存在
        """
        scheme = self._schemes.pop(name, None)
        if scheme is None:
            return False
        del self._ids[scheme.id]
        logger.info(f"已删除模式 '{name}' ({scheme.id})")
        return True

    def get(self, name: str) -> Scheme:
        scheme = self._schemes.get(name)
        if scheme is None:
            raise SchemeNotFoundError(name)
        return scheme

    def get_by_id(self, scheme_id: str) -> Scheme:
        name = self._ids.get(scheme_id)
        if name is None:
            raise SchemeNotFoundError(scheme_id)
        return self._schemes[name]

    def exists(self, name: str) -> bool:
        return name in self._schemes

    def list(self) -> List[Scheme]:
        """按插入顺序返回全部模式"""
        return list(self._schemes.values())

    def seed(self, records: Iterable[Dict[str, str]]) -> int:
        """
        批量添加预置模式，重名的跳过

        Returns:
            实际添加的数量
        """
        added = 0
        for record in records:
            if self.add(record["name"], record["template"], record.get("description", "")):
                added += 1
        logger.info(f"预置模式已加载: {added} 个")
        return added

    def _allocate_id(self) -> str:
        scheme_id = f"{ID_PREFIX}{self._next_id}"
        self._next_id += 1
        return scheme_id

    def _reserve_id(self, scheme_id: str) -> None:
        # 外部指定的标识符若符合计数格式，计数器需越过它
        match = _ID_PATTERN.match(scheme_id)
        if match:
            self._next_id = max(self._next_id, int(match.group(1)) + 1)

    def __len__(self) -> int:
        return len(self._schemes)

    def __iter__(self) -> Iterator[Scheme]:
        return iter(list(self._schemes.values()))

    def __contains__(self, name: str) -> bool:
        return name in self._schemes

    @property
    def next_id(self) -> int:
        return self._next_id

    def replace_with(self, other: "SchemeStore") -> None:
        """整体替换为另一个存储的内容（快照恢复）"""
        self._schemes = other._schemes
        self._ids = other._ids
        self._next_id = other._next_id

    def advance_ids(self, next_id: int) -> None:
        """保证后续分配的标识符不小于 next_id"""
        self._next_id = max(self._next_id, next_id)
