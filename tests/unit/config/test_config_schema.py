"""
aggregate-planner - unit tests for config schema validation

File: tests/unit/config/test_config_schema.py
"""

from __future__ import annotations

from typing import Any

import pytest

from aggregate_planner.config.schema import (
    ConfigValidationError,
    assert_valid_config,
    default_config,
    merge_config,
    migration_guidance,
    validate_config,
)


def _with(overlay: dict[str, Any]) -> dict[str, Any]:
    return merge_config(default_config(), overlay)


def _issue_paths(payload: object) -> list[str]:
    result = validate_config(payload)
    assert not result.is_valid
    return [issue.path for issue in result.issues]


@pytest.mark.unit
def test_defaults_are_valid() -> None:
    result = validate_config(default_config())

    assert result.is_valid
    assert result.config == default_config()


@pytest.mark.unit
def test_non_mapping_root_is_rejected() -> None:
    assert _issue_paths(["not", "a", "table"]) == ["<root>"]


@pytest.mark.unit
@pytest.mark.parametrize(
    ("overlay", "path"),
    [
        ({"observability": {"log_level": "TRACE"}}, "observability.log_level"),
        ({"observability": {"log_to_console": "yes"}}, "observability.log_to_console"),
        ({"run": {"skip_env_var": "aem-skip"}}, "run.skip_env_var"),
        ({"paths": {"mapping_file": "sub/runmode.mapping"}}, "paths.mapping_file"),
        ({"paths": {"output_dir": "  "}}, "paths.output_dir"),
        ({"sdk": {"group_id": "com.adobe:aem"}}, "sdk.group_id"),
        ({"sdk": {"version": 2024}}, "sdk.version"),
        ({"meta": {"schema_version": True}}, "meta.schema_version"),
        ({"addons": {"group_id": "g"}}, "addons"),
        ({"addons": [{"group_id": "g", "artifact_id": "a"}]}, "addons[0].classifier"),
    ],
)
def test_invalid_values_report_field_paths(overlay: dict[str, Any], path: str) -> None:
    assert path in _issue_paths(_with(overlay))


@pytest.mark.unit
def test_duplicate_addons_are_rejected() -> None:
    addon = {"group_id": "g", "artifact_id": "a", "classifier": "c"}

    assert _issue_paths(_with({"addons": [addon, dict(addon, classifier="d")]})) == ["addons[1]"]


@pytest.mark.unit
def test_missing_sections_are_reported() -> None:
    payload = default_config()
    del payload["run"]  # type: ignore[misc]

    assert _issue_paths(payload) == ["run"]


@pytest.mark.unit
def test_log_level_is_normalized_to_upper_case() -> None:
    config = assert_valid_config(_with({"observability": {"log_level": "debug"}}))

    assert config["observability"]["log_level"] == "DEBUG"


@pytest.mark.unit
def test_assert_valid_config_lists_every_issue() -> None:
    payload = _with({"run": {"skip_env_var": "1BAD"}, "paths": {"mapping_file": "a/b"}})

    with pytest.raises(ConfigValidationError) as caught:
        assert_valid_config(payload)

    rendered = str(caught.value)
    assert "- paths.mapping_file: must be a file name, not a path" in rendered
    assert "- run.skip_env_var:" in rendered


@pytest.mark.unit
def test_merge_replaces_lists_and_leaves_inputs_untouched() -> None:
    base = {"addons": [{"group_id": "g"}], "sdk": {"group_id": "a", "artifact_id": "b"}}
    overlay = {"addons": [], "sdk": {"artifact_id": "c"}}

    merged = merge_config(base, overlay)

    assert merged == {"addons": [], "sdk": {"group_id": "a", "artifact_id": "c"}}
    assert base["addons"] == [{"group_id": "g"}]


@pytest.mark.unit
def test_migration_guidance_messages() -> None:
    assert "older than supported" in migration_guidance(0)
    assert "newer than supported" in migration_guidance(5)
    assert migration_guidance(1) == "schema version is current"
