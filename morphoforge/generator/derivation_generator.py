"""
派生词生成模块
将词根字母代入模式模板的占位符
"""

import logging
from typing import List, Sequence

from morphoforge.config.config_manager import DEFAULT_SEPARATOR, DEFAULT_SLOTS
from morphoforge.models import DerivedWord, make_root_letters
from morphoforge.roots.root_store import RootStore
from morphoforge.schemes.scheme_store import SchemeStore

logger = logging.getLogger("morphoforge")


def normalize_template(template: str, separator: str = DEFAULT_SEPARATOR) -> str:
    """去掉模板中的分隔符，如 'ف-ا-ع-ل' -> 'فاعل'"""
    if not template:
        return ""
    return template.replace(separator, "") if separator else template


def has_all_slots(
    template: str,
    slots: Sequence[str] = DEFAULT_SLOTS,
    separator: str = DEFAULT_SEPARATOR,
) -> bool:
    """模板是否包含全部三个占位符"""
    body = normalize_template(template, separator)
    return bool(body) and all(slot in body for slot in slots)


def generate(
    c1: str,
    c2: str,
    c3: str,
    template: str,
    slots: Sequence[str] = DEFAULT_SLOTS,
    separator: str = DEFAULT_SEPARATOR,
) -> str:
    """
    根据模板生成派生词

    第1个占位符替换为c1，第2个为c2，第3个为c3，其余字符原样保留

    例如: generate('ك', 'ت', 'ب', 'ف-ا-ع-ل') -> 'كاتب'

    Args:
        c1, c2, c3: 词根字母
        template: 模板
        slots: 三个占位符字符
        separator: 模板分隔符

    Returns:
        派生词；模板缺少占位符或词根不合法时返回空字符串
    """
    if not all(isinstance(c, str) and len(c) == 1 for c in (c1, c2, c3)):
        return ""
    if not has_all_slots(template, slots, separator):
        return ""

    mapping = dict(zip(slots, (c1, c2, c3)))
    return "".join(mapping.get(ch, ch) for ch in normalize_template(template, separator))


class DerivationGenerator:
    """
    基于存储中的词根和模式生成派生词
    """

    def __init__(
        self,
        root_store: RootStore,
        scheme_store: SchemeStore,
        slots: Sequence[str] = DEFAULT_SLOTS,
        separator: str = DEFAULT_SEPARATOR,
    ):
        """
        初始化派生词生成器

        Args:
            root_store: 词根存储
            scheme_store: 模式存储
            slots: 三个占位符字符
            separator: 模板分隔符
        """
        self.root_store = root_store
        self.scheme_store = scheme_store
        self.slots = tuple(slots)
        self.separator = separator

    def generate(self, c1: str, c2: str, c3: str, template: str) -> str:
        return generate(c1, c2, c3, template, self.slots, self.separator)

    def generate_with_scheme(self, c1: str, c2: str, c3: str, scheme_name: str) -> str:
        """
        按模式名生成派生词，不要求词根已注册

        Raises:
            SchemeNotFoundError: 模式不存在
        """
        scheme = self.scheme_store.get(scheme_name)
        return self.generate(c1, c2, c3, scheme.template)

    def generate_all_for_root(self, c1: str, c2: str, c3: str) -> List[DerivedWord]:
        """
        用所有模式为词根生成派生词，跳过生成结果为空的模式

        Raises:
            RootNotFoundError: 词根不存在
        """
        key = self._require_root(c1, c2, c3)

        results = []
        for scheme in self.scheme_store:
            word = self.generate(c1, c2, c3, scheme.template)
            if word:
                results.append(DerivedWord(word, scheme.name))
            else:
                logger.debug(f"[{key}] 模式 '{scheme.name}' 无法生成派生词")

        logger.debug(f"[{key}] 共生成 {len(results)} 个派生词")
        return results

    def generate_and_store(self, c1: str, c2: str, c3: str, scheme_name: str) -> bool:
        """
        按模式生成派生词并存储到词根下

        Raises:
            SchemeNotFoundError: 模式不存在
            RootNotFoundError: 词根不存在

        Returns:
            是否生成并存储了新派生词
        """
        scheme = self.scheme_store.get(scheme_name)
        key = self._require_root(c1, c2, c3)

        word = self.generate(c1, c2, c3, scheme.template)
        if not word:
            logger.warning(f"[{key}] 模式 '{scheme_name}' 模板不可用: {scheme.template}")
            return False

        return self.root_store.attach_derived_word(c1, c2, c3, word, scheme.name)

    def generate_and_store_all(self, c1: str, c2: str, c3: str) -> int:
        """
        用所有模式生成派生词并存储

        Returns:
            新存储的数量（已存在的相同条目不计）
        """
        count = 0
        for derived in self.generate_all_for_root(c1, c2, c3):
            if self.root_store.attach_derived_word(c1, c2, c3, derived.word, derived.scheme):
                count += 1

        logger.info(f"[{''.join((c1, c2, c3))}] 已生成并存储 {count} 个派生词")
        return count

    def _require_root(self, c1: str, c2: str, c3: str) -> str:
        return self.root_store.get("".join(make_root_letters(c1, c2, c3))).key
