from pathlib import Path

from research_queue_planner import (
    GraphValidator,
    InputLoader,
    KnowledgeCategory,
    QueueCategory,
)


def test_loads_json_and_csv_and_filters_supported(tmp_path: Path):
    research_file = tmp_path / "research.json"
    research_file.write_text(
        """
        [
          {"defName": "Electricity", "label": "Electricity", "techLevel": "Industrial", "prerequisites": [], "researchCost": 1600},
          {"defName": "Psychic", "label": "Psychic rituals", "knowledgeCategory": "Advanced", "prerequisites": []},
          {"defName": "Ship", "label": "Starflight", "prerequisites": ["Electricity"], "hidden": true}
        ]
        """
    )

    anomaly_file = tmp_path / "anomaly.csv"
    anomaly_file.write_text("defName,label,prerequisites\nObelisk,Obelisk study,\nBioferrite,Bioferrite,Obelisk\n")

    unsupported = tmp_path / "ignore.me"
    unsupported.write_text("noop")

    report = InputLoader(tmp_path).load()

    assert set(report.nodes.keys()) == {"Electricity", "Psychic", "Ship", "Obelisk", "Bioferrite"}
    assert report.nodes["Electricity"].knowledge_category is KnowledgeCategory.STANDARD
    assert report.nodes["Electricity"].category is QueueCategory.RESEARCH
    assert report.nodes["Electricity"].tech_level == "Industrial"
    assert report.nodes["Electricity"].metadata == {"researchCost": 1600}
    assert report.nodes["Psychic"].knowledge_category is KnowledgeCategory.ADVANCED
    assert report.nodes["Psychic"].category is QueueCategory.ANOMALY
    assert report.nodes["Obelisk"].knowledge_category is KnowledgeCategory.BASIC
    assert report.nodes["Obelisk"].prereqs == []
    assert report.nodes["Bioferrite"].prereqs == ["Obelisk"]
    assert report.nodes["Ship"].hidden is True
    assert report.nodes["Electricity"].hidden is False
    assert any("unsupported" in warning for warning in report.warnings)


def test_records_without_identifier_and_duplicates_are_reported(tmp_path: Path):
    (tmp_path / "research.json").write_text(
        """
        [
          {"label": "Nameless"},
          {"defName": "Electricity"},
          {"defName": "Electricity", "label": "Again"}
        ]
        """
    )

    report = InputLoader(tmp_path).load()

    assert report.has_errors
    assert any("missing an identifier" in error for error in report.errors)
    assert any("Duplicate research id Electricity" in warning for warning in report.warnings)
    assert report.nodes["Electricity"].friendly_name == "Electricity"


def test_validate_missing_and_cycles(tmp_path: Path):
    research = tmp_path / "research.json"
    research.write_text(
        """
        [
          {"defName": "TechA", "label": "Tech A", "prerequisites": ["TechB"]},
          {"defName": "TechB", "label": "Tech B", "prerequisites": ["TechA", "Missing"]}
        ]
        """
    )

    report = InputLoader(tmp_path).load()
    result = GraphValidator(report.nodes).validate()

    assert result.has_errors
    messages = {issue.message for issue in result.errors}
    assert any("Missing reference" in message for message in messages)
    assert any("Cycle detected" in message for message in messages)


def test_cross_queue_prerequisite_is_a_warning(tmp_path: Path):
    research = tmp_path / "research.tsv"
    research.write_text(
        "defName\tprerequisites\tknowledgeCategory\n"
        "Electricity\t\tstandard\n"
        "Void\tElectricity\tadvanced\n"
    )

    report = InputLoader(tmp_path).load()
    result = GraphValidator(report.nodes).validate()

    assert not result.has_errors
    assert result.summary() == "0 error(s), 1 warning(s)"
    assert result.warnings[0].nodes == ["Electricity"]
