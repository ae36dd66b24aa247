"""Tests for settings validation and task dependencies."""

from dataclasses import replace

import pytest

from local_anything.config import LocalizeConfig
from local_anything.validation import (
    ConfigurationError,
    TaskDependencyError,
    disable_task,
    enable_task,
    require_valid,
    task_errors,
    validate_settings,
)


class TestTaskDependencies:
    """Tests for the extract/download/replace state machine."""

    def test_enable_replace_enables_prerequisites(self):
        assert enable_task(set(), "replace") == {"extract", "download", "replace"}

    def test_enable_download(self):
        assert enable_task({"extract"}, "download") == {"extract", "download"}

    def test_disable_leaf(self):
        assert disable_task({"extract", "download", "replace"}, "replace") == {"extract", "download"}

    def test_disable_prerequisite_rejected(self):
        with pytest.raises(TaskDependencyError, match="download"):
            disable_task({"extract", "download"}, "extract")

    def test_disable_download_while_replace_enabled(self):
        with pytest.raises(TaskDependencyError, match="replace"):
            disable_task({"extract", "download", "replace"}, "download")

    def test_unknown_task(self):
        with pytest.raises(ValueError):
            enable_task(set(), "upload")

    def test_task_errors(self):
        assert task_errors({"extract"}) == []
        assert task_errors(set()) == ["At least one task must be selected."]
        assert task_errors({"replace"}) == ["Task replace requires extract, download."]


class TestValidateSettings:
    """Tests for validate_settings."""

    def test_defaults_are_valid(self):
        result = validate_settings(LocalizeConfig())
        assert result.is_valid is True
        assert result.errors == []

    def test_no_extensions(self):
        config = replace(LocalizeConfig(), preset_extensions=(), custom_extensions=())
        result = validate_settings(config)
        assert result.is_valid is False
        assert "At least one file extension must be selected or added." in result.errors

    def test_custom_extensions_only(self):
        config = replace(LocalizeConfig(), preset_extensions=(), custom_extensions=(".pdf",))
        assert validate_settings(config).is_valid is True

    def test_missing_store_path(self):
        config = replace(LocalizeConfig(), store_path="  ")
        assert "Storage path is required." in validate_settings(config).errors

    def test_invalid_extension_format(self):
        config = replace(LocalizeConfig(), custom_extensions=("pdf", ".t-t"))
        errors = validate_settings(config).errors
        assert any("pdf, .t-t" in error or ".t-t, pdf" in error for error in errors)

    def test_unknown_preset_and_scope(self):
        config = replace(LocalizeConfig(), preset_extensions=("images",), scope="everywhere")
        errors = validate_settings(config).errors
        assert "Unknown extension preset(s): images." in errors
        assert "Invalid scope: everywhere." in errors

    def test_require_valid_raises_with_all_errors(self):
        config = replace(LocalizeConfig(), tasks=frozenset(), store_path="")
        with pytest.raises(ConfigurationError) as excinfo:
            require_valid(config)
        assert len(excinfo.value.errors) == 2
