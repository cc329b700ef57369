"""Integration tests for IsolatedLogManager.

These tests verify real-world behavior including thread isolation and file
output, which require actual threads and handlers (not mocked).
"""

import json
import threading
import time
from typing import Dict

import pytest

from flotilla.core.logger_factory import IsolatedLogManager

pytestmark = pytest.mark.integration


class TestIsolatedLogManagerThreadIsolation:
    """Test thread isolation in IsolatedLogManager."""

    def setup_method(self) -> None:
        self.manager = IsolatedLogManager("isolation_test")

    def teardown_method(self) -> None:
        self.manager.shutdown()

    def test_thread_isolation(self) -> None:
        """Context set in one thread is invisible to another."""
        self.manager.configure(enable_json=False, enable_console=False)

        contexts: Dict[int, dict] = {}
        barrier = threading.Barrier(2)

        def thread_worker(thread_id: int) -> None:
            self.manager.set_context(fleet=f"storage/fleet-{thread_id}")
            barrier.wait()
            time.sleep(0.01)
            contexts[thread_id] = self.manager.get_context()

        threads = [threading.Thread(target=thread_worker, args=(i,)) for i in (1, 2)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert contexts[1]["fleet"] == "storage/fleet-1"
        assert contexts[2]["fleet"] == "storage/fleet-2"


class TestIsolatedLogManagerFileOutput:
    """Test JSON file output with context and extras."""

    def setup_method(self) -> None:
        self.manager = IsolatedLogManager("file_output_test")

    def teardown_method(self) -> None:
        self.manager.shutdown()

    def test_json_lines_with_context(self, temp_dir) -> None:
        log_file = temp_dir / "logs" / "flotilla.jsonl"
        # Logger handed out before configuration still receives the handlers
        logger = self.manager.create_logger("driver")
        self.manager.configure(log_file=log_file, enable_console=False)

        with self.manager.context(fleet="storage/my-nfs"):
            logger.warning(
                "Failed to add gateway %s", "b", extra={"event_type": "membership", "exit_code": 1}
            )
        logger.debug("Pass converged")

        entries = [json.loads(line) for line in log_file.read_text().splitlines()]
        assert len(entries) == 1
        assert entries[0]["logger"] == "file_output_test.driver"
        assert entries[0]["message"] == "Failed to add gateway b"
        assert entries[0]["context"] == {"fleet": "storage/my-nfs"}
        assert entries[0]["fields"]["exit_code"] == 1

    def test_reconfigure_replaces_handlers(self, temp_dir) -> None:
        logger = self.manager.create_logger("reconfigured")
        self.manager.configure(log_file=temp_dir / "one.jsonl", enable_console=False)
        self.manager.configure(log_file=temp_dir / "two.jsonl", enable_console=False)

        logger.info("after reconfigure")

        assert (temp_dir / "one.jsonl").read_text() == ""
        assert "after reconfigure" in (temp_dir / "two.jsonl").read_text()
        assert len(logger.handlers) == 1
