"""Tests for logging setup."""

import json
import logging

import structlog

from coolify_migrate.core.logging_config import get_migration_logger, setup_logging
from coolify_migrate.core.status import StatusReporter


def test_status_lines_reach_log_file(tmp_path, capsys):
    setup_logging(log_dir=tmp_path / "logs", log_level="ERROR")
    try:
        StatusReporter().success("Backup file created", archive="/tmp/a.tar.gz")
        get_migration_logger().info("Migration finished", volumes=2)

        for handler in logging.getLogger().handlers:
            handler.flush()

        records = [
            json.loads(line)
            for line in (tmp_path / "logs" / "migration.log").read_text().splitlines()
        ]
        events = {record["event"]: record for record in records}
        assert events["Backup file created"]["archive"] == "/tmp/a.tar.gz"
        assert events["Backup file created"]["status"] == "success"
        assert events["Migration finished"]["volumes"] == 2
        assert capsys.readouterr().out == "✅ Backup file created\n"
    finally:
        logging.getLogger().handlers.clear()
        structlog.reset_defaults()


def test_console_only_without_log_dir(tmp_path):
    setup_logging(log_dir=None, log_level="DEBUG")
    try:
        handlers = logging.getLogger().handlers
        assert len(handlers) == 1
        assert logging.getLogger().level == logging.DEBUG
    finally:
        logging.getLogger().handlers.clear()
        structlog.reset_defaults()


def test_status_lines_stay_off_the_console(capsys):
    setup_logging(log_dir=None, log_level="WARNING")
    try:
        StatusReporter().warning("Backup file does not exist, creating")
        get_migration_logger().warning("Migration interrupted")

        captured = capsys.readouterr()
        assert captured.out == "🚸 Backup file does not exist, creating\n"
        assert "Backup file does not exist" not in captured.err
        assert "Migration interrupted" in captured.err
    finally:
        logging.getLogger().handlers.clear()
        structlog.reset_defaults()
