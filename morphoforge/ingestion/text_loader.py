"""
词根批量导入
从自由文本中提取三字母词根
"""

import logging
import unicodedata
from pathlib import Path
from typing import List

from morphoforge.roots.root_store import RootStore

logger = logging.getLogger("morphoforge")


def extract_root_candidates(content: str) -> List[str]:
    """
    按空白和换行切分文本，保留恰好三个字符的词

    按字符（码位）计数，先做NFC规范化
    """
    if not content:
        return []
    tokens = unicodedata.normalize("NFC", content).split()
    return [token for token in tokens if len(token) == 3]


class TextLoader:
    """将文本中的词根批量写入词根存储"""

    def __init__(self, root_store: RootStore):
        self.root_store = root_store

    def load_roots_from_text(self, content: str) -> int:
        """
        从文本加载词根，不合格的词静默跳过

        Args:
            content: 文本内容

        Returns:
            新增词根数量（已存在的和重复出现的不计）
        """
        added = 0
        skipped = 0
        for token in extract_root_candidates(content):
            if token in self.root_store:
                skipped += 1
                continue
            self.root_store.add(token[0], token[1], token[2])
            added += 1

        logger.info(f"文本导入完成: 新增 {added} 个词根，跳过重复 {skipped} 个")
        return added

    def load_roots_from_file(self, file_path: str) -> int:
        """
        从UTF-8文本文件加载词根

        Raises:
            FileNotFoundError: 文件不存在
        """
        path = Path(file_path)
        if not path.exists():
            raise FileNotFoundError(f"词根文件不存在: {path}")

        with open(path, "r", encoding="utf-8") as f:
            content = f.read()

        logger.info(f"正在从文件加载词根: {path}")
        return self.load_roots_from_text(content)
