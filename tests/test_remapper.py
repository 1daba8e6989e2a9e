"""Tests for map id remapping and reference fixup."""

import logging

import orjson
import pytest

from conftest import make_event, make_map, map_info, transfer
from gitcompat.errors import PlanConflictError, StructuralError
from gitcompat.maps.map_index import normalize_index, split_remap_suffix
from gitcompat.maps.references import remap_command, remap_commands, remap_system
from gitcompat.maps.remapper import (
    RemapRequest,
    parse_remap_plan,
    remap_project,
    validate_plan,
)


class TestRemapSuffix:
    """Test parsing the trailing id request."""

    def test_suffix(self) -> None:
        """Test names with and without a request."""
        assert split_remap_suffix("Forest Cave::42") == ("Forest Cave", 42)
        assert split_remap_suffix("Town :: 7 ") == ("Town", 7)
        assert split_remap_suffix("Town") == ("Town", None)
        assert split_remap_suffix("a::b") == ("a::b", None)

    def test_only_trailing_suffix_counts(self) -> None:
        """Test a suffix in the middle of the name is not a request."""
        assert split_remap_suffix("Room::3 east") == ("Room::3 east", None)


class TestParsePlan:
    """Test collecting requests from the index."""

    def test_requests(self) -> None:
        """Test every entry with a suffix becomes a request."""
        table = [None, map_info(1, "Town"), map_info(2, "Cave::42"), None, map_info(4, "Inn::4")]
        assert parse_remap_plan(table) == [
            RemapRequest(from_index=2, to_index=42, name="Cave::42"),
            RemapRequest(from_index=4, to_index=4, name="Inn::4"),
        ]

    def test_out_of_range_is_skipped(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test ids outside 1-999 are ignored with a warning."""
        table = [None, map_info(1, "A::0"), map_info(2, "B::1000"), map_info(3, "C::5")]
        with caplog.at_level(logging.WARNING):
            plan = parse_remap_plan(table)

        assert [request.to_index for request in plan] == [5]
        assert "A::0" in caplog.text
        assert "B::1000" in caplog.text


class TestValidatePlan:
    """Test conflict detection."""

    def test_duplicate_targets(self) -> None:
        """Test two maps requesting one id are rejected together."""
        table = [None, map_info(1, "A::9"), map_info(2, "B::9")]
        with pytest.raises(PlanConflictError) as exc_info:
            validate_plan(table, parse_remap_plan(table))
        assert len(exc_info.value.conflicts) == 1
        assert "'A::9'" in exc_info.value.conflicts[0]
        assert "'B::9'" in exc_info.value.conflicts[0]

    def test_occupied_target(self) -> None:
        """Test requesting an id held by a map that stays is rejected."""
        table = [None, map_info(1, "A::2"), map_info(2, "B")]
        with pytest.raises(PlanConflictError) as exc_info:
            validate_plan(table, parse_remap_plan(table))
        assert "'B'" in exc_info.value.conflicts[0]

    def test_target_vacated_by_plan(self) -> None:
        """Test a target held by a map that moves away is allowed."""
        table = [None, map_info(1, "A::2"), map_info(2, "B::1")]
        validate_plan(table, parse_remap_plan(table))

    def test_relabel_only(self) -> None:
        """Test requesting a map's own id is not a conflict."""
        table = [None, map_info(1, "A::1")]
        validate_plan(table, parse_remap_plan(table))


class TestReferences:
    """Test rewriting transfer commands."""

    def test_direct_transfer(self) -> None:
        """Test a direct Transfer Player target is rewritten."""
        command = transfer(7)
        assert remap_command(command, {7: 42}) is True
        assert command["parameters"][1] == 42

    def test_variable_designation_untouched(self) -> None:
        """Test a transfer whose map comes from a variable is left alone."""
        command = transfer(7, designation=1)
        assert remap_command(command, {7: 42}) is False
        assert command["parameters"][1] == 7

    def test_vehicle_location(self) -> None:
        """Test Set Vehicle Location keeps its map id in the third parameter."""
        command = {"code": 202, "indent": 0, "parameters": [0, 0, 7, 3, 4]}
        assert remap_command(command, {7: 42}) is True
        assert command["parameters"] == [0, 0, 42, 3, 4]

    def test_other_commands_untouched(self) -> None:
        """Test commands that are not transfers pass through."""
        command = {"code": 101, "indent": 0, "parameters": ["", 0, 7, 2]}
        assert remap_command(command, {7: 42}) is False
        assert command["parameters"][2] == 7

    def test_unmapped_target(self) -> None:
        """Test transfers to maps outside the mapping pass through."""
        command = transfer(3)
        assert remap_command(command, {7: 42}) is False

    def test_nested_commands(self) -> None:
        """Test commands are found at any depth."""
        document = [None, {"id": 1, "pages": [{"list": [transfer(7), transfer(8)]}]}]
        assert remap_commands(document, {7: 42, 8: 9}) == 2
        commands = document[1]["pages"][0]["list"]
        assert [command["parameters"][1] for command in commands] == [42, 9]

    def test_system_start_maps(self) -> None:
        """Test the player and vehicle start maps are rewritten."""
        system = {"startMapId": 7, "boat": {"startMapId": 7}, "ship": {"startMapId": 1}}
        assert remap_system(system, {7: 42}) == 2
        assert system == {"startMapId": 42, "boat": {"startMapId": 42}, "ship": {"startMapId": 1}}


class TestNormalizeIndex:
    """Test the fixed index length."""

    def test_pad(self) -> None:
        """Test short indexes are padded."""
        table = normalize_index([None, map_info(1, "A")])
        assert len(table) == 1000
        assert table[1]["name"] == "A"
        assert table[999] is None

    def test_trim_empty_tail(self) -> None:
        """Test empty slots past the last id are dropped."""
        assert len(normalize_index([None] * 1200)) == 1000

    def test_entry_past_last_id(self) -> None:
        """Test entries past id 999 are rejected."""
        table = [None] * 1001
        table[1000] = map_info(1000, "Far")
        with pytest.raises(StructuralError):
            normalize_index(table)


class TestRemapProject:
    """Test the full remap pass on disk."""

    def test_no_index(self, project) -> None:
        """Test a project without a map index has nothing to remap."""
        assert not remap_project(project.data).changed

    def test_no_requests_writes_nothing(self, project, write_spy) -> None:
        """Test an index without requests is left alone."""
        project.write_index([map_info(1, "Town")])
        writes_before = write_spy.count

        report = remap_project(project.data)

        assert not report.changed
        assert write_spy.count == writes_before

    def test_move_and_fix_references(self, project) -> None:
        """Test moving map 7 to 42 renames it and rewrites transfers to it."""
        project.write_index([map_info(1, "Town"), map_info(7, "Forest Cave::42", parent_id=1)])
        project.write_map(1, make_map(2, 2, [
            None,
            make_event("ToCave", 0, 0, 1, [transfer(7)]),
            make_event("ByVariable", 1, 0, 2, [transfer(7, designation=1)]),
            make_event("ToTown", 0, 1, 3, [transfer(1)]),
        ]))
        project.write_map(7, make_map(1, 1, [None]))
        project.write("System.json", {"startMapId": 7, "versionId": 3})
        project.write("CommonEvents.json", [None, {"id": 1, "list": [transfer(7)]}])

        report = remap_project(project.data)

        assert report.changed
        assert report.renamed == [("Map007.json", "Map042.json")]
        assert not (project.data / "Map007.json").exists()
        assert (project.data / "Map042.json").is_file()

        events = project.read_map(1)["events"]
        assert events[1]["pages"][0]["list"][0]["parameters"][1] == 42
        assert events[2]["pages"][0]["list"][0]["parameters"][1] == 7
        assert events[3]["pages"][0]["list"][0]["parameters"][1] == 1
        assert project.read("System.json")["startMapId"] == 42
        assert project.read("CommonEvents.json")[1]["list"][0]["parameters"][1] == 42

        index = project.read("MapInfos.json")
        assert len(index) == 1000
        assert index[7] is None
        assert index[42]["id"] == 42
        assert index[42]["name"] == "Forest Cave"
        assert index[42]["parentId"] == 1

    def test_children_follow_parent(self, project) -> None:
        """Test parentId references to a moved map are rewritten."""
        project.write_index([map_info(1, "World::10"), map_info(2, "Village", parent_id=1)])
        project.write_map(1, make_map(1, 1, [None]))
        project.write_map(2, make_map(1, 1, [None]))

        remap_project(project.data)

        index = project.read("MapInfos.json")
        assert index[2]["parentId"] == 10
        assert index[10]["name"] == "World"

    def test_swap(self, project) -> None:
        """Test two maps can trade ids."""
        project.write_index([map_info(1, "A::2"), map_info(2, "B::1")])
        project.write_map(1, make_map(1, 1, [None, make_event("from A", 0, 0, 1)]))
        project.write_map(2, make_map(1, 1, [None, make_event("from B", 0, 0, 1)]))

        remap_project(project.data)

        assert project.read_map(1)["events"][1]["name"] == "from B"
        assert project.read_map(2)["events"][1]["name"] == "from A"
        index = project.read("MapInfos.json")
        assert (index[1]["name"], index[2]["name"]) == ("B", "A")
        assert not list(project.data.glob("*.remap"))

    def test_stale_target_document(self, project) -> None:
        """Test a leftover document at an unindexed target is replaced."""
        project.write_index([map_info(1, "A::5")])
        project.write_map(1, make_map(1, 1, [None, make_event("new", 0, 0, 1)]))
        project.write_map(5, make_map(1, 1, [None, make_event("stale", 0, 0, 1)]))

        remap_project(project.data)

        assert project.read_map(5)["events"][1]["name"] == "new"

    def test_relabel_only(self, project) -> None:
        """Test a request for a map's own id strips the suffix and moves nothing."""
        project.write_index([map_info(3, "Inn::3")])
        project.write_map(3, make_map(1, 1, [None]))

        report = remap_project(project.data)

        assert report.changed
        assert report.renamed == []
        assert (project.data / "Map003.json").is_file()
        assert project.read("MapInfos.json")[3]["name"] == "Inn"

    def test_entry_without_document(self, project) -> None:
        """Test an index entry without a map document still moves."""
        project.write_index([map_info(4, "Ghost::8")])

        report = remap_project(project.data)

        assert report.renamed == []
        assert project.read("MapInfos.json")[8]["name"] == "Ghost"

    def test_conflict_writes_nothing(self, project, write_spy) -> None:
        """Test a conflicting plan leaves every file untouched."""
        project.write_index([map_info(1, "A::9"), map_info(2, "B::9")])
        project.write_map(1, make_map(1, 1, [None]))
        project.write_map(2, make_map(1, 1, [None]))
        writes_before = write_spy.count

        with pytest.raises(PlanConflictError):
            remap_project(project.data)

        assert write_spy.count == writes_before
        assert (project.data / "Map001.json").is_file()
        assert (project.data / "Map002.json").is_file()

    def test_interrupted_remap_stops_the_run(self, project, write_spy) -> None:
        """Test a leftover staging file is reported and nothing is touched."""
        project.write_index([map_info(3, "A::5")])
        staged = project.data / "Map003.json.remap"
        staged.write_bytes(orjson.dumps(make_map(1, 1, [None])))
        writes_before = write_spy.count

        with pytest.raises(StructuralError) as exc_info:
            remap_project(project.data)

        assert "Map003.json.remap" in str(exc_info.value)
        assert write_spy.count == writes_before
        assert staged.is_file()
        assert project.read("MapInfos.json")[3]["name"] == "A::5"

    def test_entry_past_last_id_writes_nothing(self, project, write_spy) -> None:
        """Test an oversized index is rejected before any document moves."""
        table = [None] * 1001
        table[1] = map_info(1, "A::5")
        table[1000] = map_info(1000, "Far")
        project.write("MapInfos.json", table)
        project.write_map(1, make_map(1, 1, [None]))
        writes_before = write_spy.count

        with pytest.raises(StructuralError):
            remap_project(project.data)

        assert write_spy.count == writes_before
        assert (project.data / "Map001.json").is_file()
        assert not (project.data / "Map005.json").exists()
