"""
aggregate-planner - unit tests for the YAML dependency description

File: tests/unit/inputs/test_dependencies.py
"""

from __future__ import annotations

from pathlib import Path

import pytest

from aggregate_planner.inputs.dependencies import (
    DependencyFileError,
    load_dependencies,
    parse_dependencies,
)


@pytest.mark.unit
def test_load_accepts_id_strings_and_mappings(tmp_path: Path) -> None:
    path = tmp_path / "dependencies.yaml"
    path.write_text(
        """
dependencies:
  - com.adobe.aem:aem-sdk-api:2024.3.15
  - group_id: com.adobe.cq
    artifact_id: core.wcm.components.content
    type: zip
    version: 2.23.4
dependency_management:
  - group_id: com.adobe.aem
    artifact_id: aem-forms-sdk-api
    version: 2024.3
""".strip(),
        encoding="utf-8",
    )

    lookup = load_dependencies(path)

    assert [str(item) for item in lookup.dependencies] == [
        "com.adobe.aem:aem-sdk-api:2024.3.15",
        "com.adobe.cq:core.wcm.components.content:zip:2.23.4",
    ]
    forms = lookup.find("com.adobe.aem", "aem-forms-sdk-api")
    assert forms is not None
    assert forms.version == "2024.3"


@pytest.mark.unit
def test_missing_file_is_empty_unless_required(tmp_path: Path) -> None:
    absent = tmp_path / "absent.yaml"

    assert load_dependencies(absent, required=False).dependencies == ()
    with pytest.raises(DependencyFileError, match="not found"):
        load_dependencies(absent)


@pytest.mark.unit
def test_empty_document_is_an_empty_lookup() -> None:
    lookup = parse_dependencies(None)

    assert lookup.dependencies == ()
    assert lookup.dependency_management == ()


@pytest.mark.unit
def test_invalid_yaml_is_reported(tmp_path: Path) -> None:
    path = tmp_path / "dependencies.yaml"
    path.write_text("dependencies: [unclosed", encoding="utf-8")

    with pytest.raises(DependencyFileError, match="invalid YAML"):
        load_dependencies(path)


@pytest.mark.unit
@pytest.mark.parametrize(
    ("payload", "message"),
    [
        (["g:a:1"], "root must be a mapping"),
        ({"plugins": []}, "unknown sections"),
        ({"dependencies": "g:a:1"}, "must be a list"),
        ({"dependencies": ["g:a"]}, r"dependencies\[0\]"),
        ({"dependencies": [{"group_id": "g", "artifact_id": "a"}]}, r"dependencies\[0\]"),
        (
            {"dependencies": [{"group_id": "g", "artifact_id": "a", "version": 1, "scope": "x"}]},
            "unknown fields",
        ),
        ({"dependency_management": [42]}, "Maven id string or a mapping"),
    ],
)
def test_malformed_entries_are_rejected(payload: object, message: str) -> None:
    with pytest.raises(DependencyFileError, match=message):
        parse_dependencies(payload, source="deps.yaml")
