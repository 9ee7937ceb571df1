"""
形态引擎
整合所有模块，对展示层提供完整的操作接口
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from morphoforge.config.config_manager import DEFAULT_SEPARATOR, DEFAULT_SLOTS, ConfigManager
from morphoforge.generator.derivation_generator import DerivationGenerator
from morphoforge.ingestion.text_loader import TextLoader
from morphoforge.models import derived_pairs, split_root
from morphoforge.roots.root_store import RootStore
from morphoforge.schemes.scheme_store import SchemeStore
from morphoforge.storage.snapshot_codec import SnapshotCodec
from morphoforge.validation.word_validator import WordValidator

logger = logging.getLogger("morphoforge")


class MorphologyEngine:
    """
    词根、模式与派生词的统一入口

    词根以三字符字符串传入，如 'كتب'
    """

    def __init__(
        self,
        root_store: Optional[RootStore] = None,
        scheme_store: Optional[SchemeStore] = None,
        slots: Sequence[str] = DEFAULT_SLOTS,
        separator: str = DEFAULT_SEPARATOR,
    ):
        """
        初始化形态引擎

        Args:
            root_store: 词根存储，为None时新建
            scheme_store: 模式存储，为None时新建
            slots: 三个占位符字符
            separator: 模板分隔符
        """
        self.root_store = root_store if root_store is not None else RootStore()
        self.scheme_store = scheme_store if scheme_store is not None else SchemeStore()

        self.generator = DerivationGenerator(self.root_store, self.scheme_store, slots, separator)
        self.validator = WordValidator(self.generator)
        self.loader = TextLoader(self.root_store)
        self.codec = SnapshotCodec(self.root_store, self.scheme_store)

        logger.info("MorphologyEngine 已初始化")

    @classmethod
    def from_config(cls, config_manager: ConfigManager, seed_schemes: bool = True) -> "MorphologyEngine":
        """
        按配置创建引擎，并可预置 schemes.yaml 中的模式
        """
        engine = cls(
            slots=config_manager.get_slots(),
            separator=config_manager.get_separator(),
        )
        if seed_schemes:
            engine.scheme_store.seed(config_manager.get_default_schemes())
        return engine

    # ------------------------------------------------------------------
    # 词根
    # ------------------------------------------------------------------

    def add_root(self, root: str) -> str:
        return self.root_store.add(*split_root(root))

    def root_exists(self, root: str) -> bool:
        return self.root_store.exists(*split_root(root))

    def remove_root(self, root: str) -> bool:
        return self.root_store.remove(*split_root(root))

    def load_roots_from_text(self, content: str) -> int:
        return self.loader.load_roots_from_text(content)

    def load_roots_from_file(self, file_path: str) -> int:
        return self.loader.load_roots_from_file(file_path)

    def list_all_roots(self) -> List[Dict[str, Any]]:
        return self.root_store.list_all()

    # ------------------------------------------------------------------
    # 生成
    # ------------------------------------------------------------------

    def generate_derived_word(self, root: str, scheme_name: str) -> str:
        """按模式名生成派生词（可能为空字符串）"""
        return self.generator.generate_with_scheme(*split_root(root), scheme_name)

    def generate_all_derived_words(self, root: str) -> List[Dict[str, str]]:
        return derived_pairs(self.generator.generate_all_for_root(*split_root(root)))

    def generate_and_store(self, root: str, scheme_name: str) -> bool:
        return self.generator.generate_and_store(*split_root(root), scheme_name)

    def generate_and_store_all(self, root: str) -> int:
        return self.generator.generate_and_store_all(*split_root(root))

    # ------------------------------------------------------------------
    # 已存储派生词
    # ------------------------------------------------------------------

    def attach_derived_word(self, root: str, word: str, scheme_name: str) -> bool:
        return self.root_store.attach_derived_word(*split_root(root), word, scheme_name)

    def list_stored_derived_words(self, root: str) -> List[Dict[str, str]]:
        return derived_pairs(self.root_store.derived_words_of(*split_root(root)))

    def remove_derived_word(self, root: str, word: str) -> bool:
        return self.root_store.remove_derived_word(*split_root(root), word)

    # ------------------------------------------------------------------
    # 验证
    # ------------------------------------------------------------------

    def validate_word(self, word: str, root: str) -> Dict[str, Any]:
        """
        Returns:
            {"valid": bool, "scheme": 模式名或空字符串}
        """
        return self.validator.validate(word, *split_root(root)).to_dict()

    def validate_and_store(self, word: str, root: str) -> Dict[str, Any]:
        return self.validator.validate_and_store(word, *split_root(root)).to_dict()

    # ------------------------------------------------------------------
    # 模式
    # ------------------------------------------------------------------

    def add_scheme(self, name: str, template: str, description: str = "") -> bool:
        return self.scheme_store.add(name, template, description)

    def update_scheme(self, name: str, template: Optional[str] = None, description: Optional[str] = None) -> bool:
        return self.scheme_store.update(name, template, description)

    def remove_scheme(self, name: str) -> bool:
        return self.scheme_store.remove(name)

    def list_schemes(self) -> List[Dict[str, str]]:
        return [scheme.to_dict() for scheme in self.scheme_store]

    # ------------------------------------------------------------------
    # 快照
    # ------------------------------------------------------------------

    def export_snapshot(self) -> str:
        return self.codec.export_snapshot()

    def import_snapshot(self, blob: str) -> bool:
        return self.codec.import_snapshot(blob)
