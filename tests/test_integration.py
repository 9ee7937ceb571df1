"""
集成测试
完整的端到端流程测试
"""

import json
import logging
import tempfile
import unicodedata
from pathlib import Path

import pytest
import yaml
from morphoforge.config.config_manager import ConfigManager
from morphoforge.errors import InvalidRootError, RootNotFoundError, SchemeNotFoundError, SnapshotImportError
from morphoforge.main import main
from morphoforge.pipeline.morphology_engine import MorphologyEngine

PROJECT_CONFIG_DIR = Path(__file__).resolve().parent.parent / "config"


@pytest.fixture
def integration_env():
    """为集成测试创建完整环境"""
    with tempfile.TemporaryDirectory() as tmpdir:
        tmpdir = Path(tmpdir)

        config_dir = tmpdir / "config"
        config_dir.mkdir()

        config_data = {
            "system": {"log_level": "DEBUG", "log_file": str(tmpdir / "logs" / "test.log")},
            "storage": {"data_dir": str(tmpdir / "data"), "snapshot_name": "morphology"},
        }
        with open(config_dir / "config.yaml", "w", encoding="utf-8") as f:
            yaml.dump(config_data, f, allow_unicode=True)

        schemes_data = {
            "schemes": [
                {"name": "فاعل", "template": "ف-ا-ع-ل", "description": "主动分词"},
                {"name": "مفعول", "template": "م-ف-ع-و-ل", "description": "被动分词"},
            ]
        }
        with open(config_dir / "schemes.yaml", "w", encoding="utf-8") as f:
            yaml.dump(schemes_data, f, allow_unicode=True)

        yield {"config_dir": str(config_dir), "data_dir": tmpdir / "data", "tmpdir": tmpdir}

        logger = logging.getLogger("morphoforge")
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)


@pytest.fixture
def engine(integration_env):
    """创建按配置预置模式的引擎"""
    return MorphologyEngine.from_config(ConfigManager(config_dir=integration_env["config_dir"]))


class TestMorphologyEngine:
    """引擎接口测试"""

    def test_scenario(self, engine):
        """测试添加词根、生成与验证的完整场景"""
        assert engine.add_root("كتب") == "كتب"
        assert engine.root_exists("كتب") is True

        assert engine.generate_derived_word("كتب", "فاعل") == "كاتب"
        assert engine.validate_word("كاتب", "كتب") == {"valid": True, "scheme": "فاعل"}
        assert engine.validate_word("كتبب", "كتب") == {"valid": False, "scheme": ""}

    def test_add_root_idempotent(self, engine):
        """测试重复添加词根"""
        engine.add_root("كتب")
        engine.generate_and_store("كتب", "فاعل")

        assert engine.add_root("كتب") == "كتب"
        assert engine.list_stored_derived_words("كتب") == [{"word": "كاتب", "scheme": "فاعل"}]

    def test_decomposed_root_is_normalized(self, engine):
        """测试分解形式的词根与文本导入一样按NFC处理"""
        decomposed = unicodedata.normalize("NFD", "آمن")
        assert len(decomposed) == 4

        assert engine.add_root(decomposed) == "آمن"
        assert engine.root_exists("آمن") is True
        assert engine.root_exists(decomposed) is True
        assert engine.load_roots_from_text(decomposed) == 0
        assert engine.remove_root(decomposed) is True
        assert engine.root_exists("آمن") is False

    def test_invalid_root_string(self, engine):
        """测试词根不是三个字符"""
        with pytest.raises(InvalidRootError):
            engine.add_root("كتبر")

    def test_generate_all_and_store_all(self, engine):
        """测试生成并存储全部派生词"""
        engine.add_root("درس")

        assert engine.generate_all_derived_words("درس") == [
            {"word": "دارس", "scheme": "فاعل"},
            {"word": "مدروس", "scheme": "مفعول"},
        ]
        assert engine.generate_and_store_all("درس") == 2
        assert engine.list_all_roots()[0]["derived_word_count"] == 2

    def test_remove_root_then_list_fails(self, engine):
        """测试删除词根后查询派生词报错"""
        engine.add_root("كتب")
        engine.generate_and_store_all("كتب")

        assert engine.remove_root("كتب") is True
        with pytest.raises(RootNotFoundError):
            engine.list_stored_derived_words("كتب")

    def test_orphaned_derived_words_survive_scheme_removal(self, engine):
        """测试删除模式后已存储派生词仍保留模式名"""
        engine.add_root("كتب")
        engine.generate_and_store("كتب", "مفعول")

        assert engine.remove_scheme("مفعول") is True
        assert engine.list_stored_derived_words("كتب") == [{"word": "مكتوب", "scheme": "مفعول"}]
        with pytest.raises(SchemeNotFoundError):
            engine.generate_and_store("كتب", "مفعول")

    def test_attach_and_remove_derived_word(self, engine):
        """测试手动挂载和删除派生词"""
        engine.add_root("كتب")

        assert engine.attach_derived_word("كتب", "كتاب", "فعال") is True
        assert engine.attach_derived_word("كتب", "كتاب", "فعال") is False
        assert engine.remove_derived_word("كتب", "كتاب") is True
        assert engine.list_stored_derived_words("كتب") == []

    def test_scheme_crud(self, engine):
        """测试模式增删改查"""
        assert engine.add_scheme("فعّال", "ف-ع-ّ-ا-ل", "强调形容词") is True
        assert engine.add_scheme("فاعل", "ف-ع-ل") is False
        assert engine.update_scheme("فعّال", description="职业名词") is True

        schemes = engine.list_schemes()
        assert [s["name"] for s in schemes] == ["فاعل", "مفعول", "فعّال"]
        assert schemes[0]["template"] == "ف-ا-ع-ل"
        assert schemes[2]["description"] == "职业名词"

    def test_validate_and_store(self, engine):
        """测试验证并存储"""
        engine.add_root("علم")

        assert engine.validate_and_store("معلوم", "علم") == {"valid": True, "scheme": "مفعول"}
        assert engine.list_stored_derived_words("علم") == [{"word": "معلوم", "scheme": "مفعول"}]

    def test_snapshot_round_trip(self, engine):
        """测试快照往返"""
        engine.load_roots_from_text("كتب\nدرس كتب")
        engine.generate_and_store_all("كتب")
        blob = engine.export_snapshot()

        restored = MorphologyEngine()
        assert restored.import_snapshot(blob) is True
        assert restored.list_all_roots() == engine.list_all_roots()
        assert restored.list_schemes() == engine.list_schemes()

    def test_malformed_snapshot(self, engine):
        """测试导入错误快照不修改状态"""
        engine.add_root("كتب")

        with pytest.raises(SnapshotImportError):
            engine.import_snapshot('{"schemes": []}')
        assert engine.root_exists("كتب") is True

    def test_default_project_schemes(self):
        """测试项目自带的预置模式都可用于生成"""
        engine = MorphologyEngine.from_config(ConfigManager(config_dir=str(PROJECT_CONFIG_DIR)))
        engine.add_root("كتب")

        words = engine.generate_all_derived_words("كتب")
        assert len(words) == len(engine.list_schemes())
        assert {"word": "استكتب", "scheme": "استفعل"} in words


class TestCommandLine:
    """命令行测试"""

    def _run(self, env, *argv):
        return main(["--config-dir", env["config_dir"], *argv])

    def test_state_persists_between_runs(self, integration_env, capsys):
        """测试多次调用之间通过快照保存状态"""
        env = integration_env

        assert self._run(env, "add-root", "كتب") == 0
        assert self._run(env, "generate", "كتب", "فاعل") == 0
        assert self._run(env, "find-root", "كتب") == 0

        capsys.readouterr()
        assert self._run(env, "derived", "كتب") == 0
        assert "كاتب (فاعل)" in capsys.readouterr().out

        snapshot = json.loads((env["data_dir"] / "morphology.json").read_text(encoding="utf-8"))
        assert snapshot["roots"] == [{"key": "كتب", "derived": [{"word": "كاتب", "scheme": "فاعل"}]}]

    def test_load_and_validate(self, integration_env, capsys):
        """测试从文件加载词根并验证"""
        env = integration_env
        roots_file = env["tmpdir"] / "roots.txt"
        roots_file.write_text("كتب\nدرس كتب\n", encoding="utf-8")

        assert self._run(env, "load", str(roots_file)) == 0
        assert "新增词根: 2" in capsys.readouterr().out

        assert self._run(env, "validate", "مدروس", "درس") == 0
        assert "مفعول" in capsys.readouterr().out
        assert self._run(env, "validate", "كتبب", "كتب") == 1

    def test_missing_root_is_handled(self, integration_env, capsys):
        """测试词根不存在时返回错误码"""
        assert self._run(integration_env, "derived", "علم") == 1
        assert "错误" in capsys.readouterr().out

    def test_add_scheme_requires_slots(self, integration_env, capsys):
        """测试添加缺少占位符的模式被拒绝"""
        assert self._run(integration_env, "add-scheme", "坏模式", "م-ك-ت") == 1
        assert self._run(integration_env, "add-scheme", "فعيل", "ف-ع-ي-ل") == 0

        capsys.readouterr()
        self._run(integration_env, "schemes")
        out = capsys.readouterr().out
        assert "فعيل" in out
        assert "坏模式" not in out

    def test_export_and_import(self, integration_env):
        """测试导出和导入快照文件"""
        env = integration_env
        exported = env["tmpdir"] / "export.json"

        self._run(env, "add-root", "كتب")
        assert self._run(env, "export", str(exported)) == 0
        self._run(env, "remove-root", "كتب")
        assert self._run(env, "find-root", "كتب") == 1

        assert self._run(env, "import", str(exported)) == 0
        assert self._run(env, "find-root", "كتب") == 0

    def test_export_writes_saved_snapshot(self, integration_env):
        """测试首次运行时导出也会先保存快照"""
        env = integration_env
        exported = env["tmpdir"] / "fresh.json"

        assert self._run(env, "export", str(exported)) == 0

        saved = (env["data_dir"] / "morphology.json").read_text(encoding="utf-8")
        assert exported.read_text(encoding="utf-8") == saved
        assert [s["name"] for s in json.loads(saved)["schemes"]] == ["فاعل", "مفعول"]

    def test_export_to_missing_directory_fails(self, integration_env, capsys):
        """测试导出目标目录不存在时返回错误码"""
        env = integration_env
        target = env["tmpdir"] / "missing" / "export.json"

        assert self._run(env, "export", str(target)) == 1
        assert "导出失败" in capsys.readouterr().out

    def test_reset_discards_saved_state(self, integration_env):
        """测试删除快照后回到预置状态"""
        env = integration_env
        self._run(env, "add-root", "كتب")
        self._run(env, "remove-scheme", "فاعل")

        assert self._run(env, "reset") == 0
        assert not (env["data_dir"] / "morphology.json").exists()
        assert self._run(env, "find-root", "كتب") == 1
        assert self._run(env, "add-root", "كتب") == 0
        assert self._run(env, "generate", "كتب", "فاعل") == 0

    def test_backups_stay_bounded(self, integration_env):
        """测试多次修改后数据目录中只保留一份备份"""
        env = integration_env
        for root in ("كتب", "درس", "علم", "فهم", "شرب"):
            assert self._run(env, "add-root", root) == 0

        assert len(list(env["data_dir"].glob("morphology.*.bak"))) == 1

    def test_undecodable_import_file(self, integration_env, capsys):
        """测试导入文件不是UTF-8时返回错误码而不是抛出异常"""
        env = integration_env
        bad_file = env["tmpdir"] / "bad.json"
        bad_file.write_bytes(b"\xff\xfe\x00\x81")

        assert self._run(env, "import", str(bad_file)) == 1
        assert "错误" in capsys.readouterr().out

    def test_invalid_yaml_config(self, integration_env, capsys):
        """测试配置文件无法解析时返回错误码"""
        env = integration_env
        config_file = Path(env["config_dir"]) / "config.yaml"
        config_file.write_text("system: [unclosed\n", encoding="utf-8")

        assert self._run(env, "roots") == 1
        assert "错误" in capsys.readouterr().out
