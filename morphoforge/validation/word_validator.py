"""
派生词验证模块
反向查找：判断一个词由哪个模式从给定词根派生
"""

import logging

from morphoforge.generator.derivation_generator import DerivationGenerator
from morphoforge.models import ValidationResult, make_root_letters

logger = logging.getLogger("morphoforge")


class WordValidator:
    """
    依次用每个模式生成候选词并与目标词比较

    按模式插入顺序遍历，第一个匹配的模式胜出
    """

    def __init__(self, generator: DerivationGenerator):
        self.generator = generator

    def validate(self, word: str, c1: str, c2: str, c3: str) -> ValidationResult:
        """
        验证 word 是否可由词根经某个模式派生

        Raises:
            RootNotFoundError: 词根不存在

        Returns:
            ValidationResult(valid, scheme)；无匹配时 scheme 为空字符串
        """
        key = "".join(make_root_letters(c1, c2, c3))
        self.generator.root_store.get(key)

        for scheme in self.generator.scheme_store:
            candidate = self.generator.generate(c1, c2, c3, scheme.template)
            if candidate and candidate == word:
                logger.debug(f"[{key}] '{word}' 匹配模式 '{scheme.name}'")
                return ValidationResult(True, scheme.name)

        logger.debug(f"[{key}] '{word}' 未匹配任何模式")
        return ValidationResult(False, "")

    def validate_and_store(self, word: str, c1: str, c2: str, c3: str) -> ValidationResult:
        """验证通过时把词存储到词根下"""
        result = self.validate(word, c1, c2, c3)
        if result.valid:
            self.generator.root_store.attach_derived_word(c1, c2, c3, word, result.scheme)
        return result
