"""
共享数据类型
词根、模式、派生词和验证结果
"""

import unicodedata
from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence, Tuple

from morphoforge.errors import InvalidRootError


def make_root_letters(c1: str, c2: str, c3: str) -> Tuple[str, str, str]:
    """
    校验并返回词根三元组

    Raises:
        InvalidRootError: 任一位置不是恰好一个字符
    """
    letters = (c1, c2, c3)
    for letter in letters:
        if not isinstance(letter, str) or len(letter) != 1:
            raise InvalidRootError(f"词根必须由三个单字符组成: {letters!r}")
    return letters


def split_root(root: str) -> Tuple[str, str, str]:
    """将三字符词根字符串拆分为三元组（先做NFC规范化，与文本导入一致）"""
    if isinstance(root, str):
        root = unicodedata.normalize("NFC", root)
    if not isinstance(root, str) or len(root) != 3:
        raise InvalidRootError(f"词根必须恰好包含三个字符: {root!r}")
    return root[0], root[1], root[2]


@dataclass(frozen=True)
class DerivedWord:
    """派生词：(词形, 模式名) 值对象，不持有所属词根的引用"""
    word: str
    scheme: str

    def to_dict(self) -> Dict[str, str]:
        return {"word": self.word, "scheme": self.scheme}


@dataclass(frozen=True)
class Scheme:
    """形态模式"""
    id: str
    name: str
    template: str
    description: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {
            "id": self.id,
            "name": self.name,
            "template": self.template,
            "description": self.description,
        }


@dataclass
class Root:
    """词根及其已存储的派生词（按插入顺序）"""
    letters: Tuple[str, str, str]
    derived: List[DerivedWord] = field(default_factory=list)

    @property
    def key(self) -> str:
        return "".join(self.letters)

    def attach(self, word: str, scheme: str) -> bool:
        """追加派生词，(词形, 模式名) 已存在时不重复添加"""
        entry = DerivedWord(word, scheme)
        if entry in self.derived:
            return False
        self.derived.append(entry)
        return True

    def remove_word(self, word: str) -> bool:
        """删除所有词形等于 word 的条目，不区分模式"""
        before = len(self.derived)
        self.derived = [d for d in self.derived if d.word != word]
        return len(self.derived) < before

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "derived_word_count": len(self.derived),
            "derived_words": [d.to_dict() for d in self.derived],
        }


@dataclass(frozen=True)
class ValidationResult:
    """验证结果：无匹配时 scheme 为空字符串"""
    valid: bool
    scheme: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"valid": self.valid, "scheme": self.scheme}


def derived_pairs(words: Sequence[DerivedWord]) -> List[Dict[str, str]]:
    """派生词列表转为字典列表，供展示层使用"""
    return [d.to_dict() for d in words]
