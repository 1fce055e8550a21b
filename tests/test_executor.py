"""
modsync - Unit Tests: modsync/executor.py

Run: pytest tests/test_executor.py -v
"""
import sys

import pytest

from modsync.errors import ExecutionFailure, ModuleNotDownloaded, ModuleNotFound
from modsync.executor import ModuleExecutor

from conftest import COUNTER_MODULE, HELLO_MODULE


@pytest.fixture
def executor(local_catalog):
    return ModuleExecutor(local_catalog)


class TestExecute:
    def test_returns_run_result(self, executor, write_local):
        write_local("module_01", HELLO_MODULE)
        assert executor.execute("module_01") == "hello"

    def test_constructs_once_then_runs(self, executor, write_local):
        write_local("module_01", COUNTER_MODULE)
        # init + run appended on a fresh load
        assert executor.execute("module_01") == 2

    def test_reloads_on_every_call(self, executor, write_local):
        write_local("module_01", COUNTER_MODULE)
        assert executor.execute("module_01") == 2
        assert executor.execute("module_01") == 2

    def test_picks_up_updated_code(self, executor, write_local):
        write_local("module_01", HELLO_MODULE)
        assert executor.execute("module_01") == "hello"
        write_local("module_01", HELLO_MODULE.replace(b'"hello"', b'"updated"'))
        assert executor.execute("module_01") == "updated"

    def test_not_registered_in_sys_modules(self, executor, write_local):
        write_local("module_01", HELLO_MODULE)
        executor.execute("module_01")
        assert not any(name.startswith("modsync_loaded") for name in sys.modules)

    def test_dataclass_module_loads(self, executor, write_local):
        write_local("module_01", (
            b"from dataclasses import dataclass\n"
            b"@dataclass\n"
            b"class Module:\n"
            b"    greeting: str = \"hi\"\n"
            b"    def run(self):\n"
            b"        return self.greeting\n"
        ))
        assert executor.execute("module_01") == "hi"

    def test_no_bytecode_cache_written(self, executor, write_local, modules_root):
        write_local("module_01", HELLO_MODULE)
        executor.execute("module_01")
        assert not (modules_root / "module_01" / "__pycache__").exists()

    def test_custom_export_and_method(self, local_catalog, write_local):
        write_local("module_01", b"class Plugin:\n    def start(self):\n        return 42\n")
        executor = ModuleExecutor(local_catalog, export_name="Plugin", entry_method="start")
        assert executor.execute("module_01") == 42


class TestNotDownloaded:
    def test_missing_module_raises_not_downloaded(self, executor):
        with pytest.raises(ModuleNotDownloaded):
            executor.execute("module_99")

    def test_not_downloaded_is_a_not_found(self, executor):
        with pytest.raises(ModuleNotFound):
            executor.execute("module_99")

    def test_empty_directory_is_not_downloaded(self, executor, modules_root):
        (modules_root / "module_01").mkdir(parents=True)
        with pytest.raises(ModuleNotDownloaded):
            executor.execute("module_01")


class TestExecutionFailure:
    @pytest.mark.parametrize("source", [
        b"def broken(:\n",
        b"raise ImportError('missing dependency')\n",
        b"x = 1\n",
        b"Module = 5\n",
        b"class Module:\n    pass\n",
        b"class Module:\n    def __init__(self, required):\n        pass\n    def run(self):\n        pass\n",
        b"class Module:\n    def run(self):\n        raise ValueError('bad input')\n",
        b"import sys\nclass Module:\n    def run(self):\n        sys.exit(3)\n",
        b"class Module:\n    @property\n    def run(self):\n        raise RuntimeError('no entry')\n",
    ], ids=[
        "syntax_error", "load_raises", "no_export", "export_not_callable",
        "no_run", "ctor_needs_args", "run_raises", "run_exits", "entry_lookup_raises",
    ])
    def test_failures_wrapped(self, executor, write_local, source):
        write_local("module_01", source)
        with pytest.raises(ExecutionFailure):
            executor.execute("module_01")

    def test_original_exception_chained(self, executor, write_local):
        write_local("module_01", b"class Module:\n    def run(self):\n        raise ValueError('bad input')\n")
        with pytest.raises(ExecutionFailure) as exc:
            executor.execute("module_01")
        assert isinstance(exc.value.__cause__, ValueError)
        assert "bad input" in str(exc.value)
