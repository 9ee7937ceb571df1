"""
词根存储
负责词根的增删查以及派生词的挂载与删除
"""

import logging
from typing import Any, Dict, Iterator, List

from morphoforge.errors import RootNotFoundError
from morphoforge.models import DerivedWord, Root, make_root_letters

logger = logging.getLogger("morphoforge")


class RootStore:
    """
    词根存储

    键为三个字母的拼接；每个词根按插入顺序持有派生词，(词形, 模式名) 去重
    """

    def __init__(self):
        self._roots: Dict[str, Root] = {}

    def add(self, c1: str, c2: str, c3: str) -> str:
        """
        添加词根，已存在时直接返回其键

        Raises:
            InvalidRootError: 任一位置不是恰好一个字符

        Returns:
            词根键
        """
        letters = make_root_letters(c1, c2, c3)
        key = "".join(letters)
        if key not in self._roots:
            self._roots[key] = Root(letters)
            logger.info(f"已添加词根: {key}")
        else:
            logger.debug(f"词根已存在: {key}")
        return key

    def exists(self, c1: str, c2: str, c3: str) -> bool:
        return "".join(make_root_letters(c1, c2, c3)) in self._roots

    def remove(self, c1: str, c2: str, c3: str) -> bool:
        """删除词根及其全部派生词"""
        key = "".join(make_root_letters(c1, c2, c3))
        root = self._roots.pop(key, None)
        if root is None:
            return False
        logger.info(f"已删除词根: {key}（连同 {len(root.derived)} 个派生词）")
        return True

    def list_all(self) -> List[Dict[str, Any]]:
        """
        列出全部词根

        Returns:
            [{"key": ..., "derived_word_count": ..., "derived_words": [{"word", "scheme"}]}, ...]
        """
        return [root.to_dict() for root in self._roots.values()]

    def attach_derived_word(self, c1: str, c2: str, c3: str, word: str, scheme_name: str) -> bool:
        """
        挂载派生词

        Raises:
            RootNotFoundError: 词根不存在

        Returns:
            是否新增（相同的 (词形, 模式名) 已存在时返回False）
        """
        root = self._get(c1, c2, c3)
        added = root.attach(word, scheme_name)
        if added:
            logger.debug(f"[{root.key}] 已存储派生词: {word} ({scheme_name})")
        return added

    def derived_words_of(self, c1: str, c2: str, c3: str) -> List[DerivedWord]:
        """返回词根已存储派生词的副本"""
        return list(self._get(c1, c2, c3).derived)

    def remove_derived_word(self, c1: str, c2: str, c3: str, word: str) -> bool:
        """删除所有词形等于 word 的派生词，不区分模式"""
        root = self._get(c1, c2, c3)
        removed = root.remove_word(word)
        if removed:
            logger.info(f"[{root.key}] 已删除派生词: {word}")
        return removed

    def get(self, key: str) -> Root:
        root = self._roots.get(key)
        if root is None:
            raise RootNotFoundError(key)
        return root

    def _get(self, c1: str, c2: str, c3: str) -> Root:
        return self.get("".join(make_root_letters(c1, c2, c3)))

    def keys(self) -> List[str]:
        return list(self._roots)

    def __len__(self) -> int:
        return len(self._roots)

    def __iter__(self) -> Iterator[Root]:
        return iter(list(self._roots.values()))

    def __contains__(self, key: str) -> bool:
        return key in self._roots

    def replace_with(self, other: "RootStore") -> None:
        """整体替换为另一个存储的内容（快照恢复）"""
        self._roots = other._roots
