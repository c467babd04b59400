from pathlib import Path

import pytest
from loguru import logger

from api_doc_builder.aggregator import aggregate
from api_doc_builder.errors import GroupLoadError, MissingDefinitionError
from api_doc_builder.loader.detect import detect_source
from api_doc_builder.loader.group_file import parse_group_file
from api_doc_builder.loader.sources import load_group, load_groups
from api_doc_builder.schema.model import ArrayOf, Inline, Primitive, Ref
from api_doc_builder.swagger.dsl import Info, Operation, Path as ApiPath
from api_doc_builder.swagger.group import PathGroup

FIXTURES = Path(__file__).parent / "fixtures"

INFO = Info(title="Petstore", version="1.0.0")

PLUGIN_GROUP = PathGroup(name="plugin", paths=(ApiPath(template="/health").get(Operation()),))


@pytest.fixture
def warnings():
    messages = []
    handler_id = logger.add(messages.append, level="WARNING", format="{message}")
    yield messages
    logger.remove(handler_id)


class TestDetectSource:
    def test_detect_group_files(self):
        assert detect_source(str(FIXTURES / "pets.yaml")) == "file"
        assert detect_source("missing.json") == "file"

    def test_detect_module_reference(self):
        assert detect_source("myapi.docs:pets") == "module"

    def test_unknown_defaults_to_file(self):
        assert detect_source("no-colon-here") == "file"


class TestGroupFileParser:
    def test_parse_pets_group(self):
        group = parse_group_file(FIXTURES / "pets.yaml")
        assert group.name == "pets"
        assert [d.name for d in group.definitions] == ["Pet", "PetKind", "Error"]
        assert [p.template for p in group.paths] == ["/pets", "/pets/{petId}"]

    def test_parse_definitions(self):
        group = parse_group_file(FIXTURES / "pets.yaml")
        pet, kind, _ = group.definitions
        assert pet.kind == "object"
        assert pet.description == "A pet in the store"
        assert pet.properties[0].type == Primitive(type="integer", format="int64")
        assert pet.properties[2].required is False
        assert pet.properties[3].type == Ref(name="PetKind")
        assert kind.values == ("cat", "dog")

    def test_parse_operations(self):
        group = parse_group_file(FIXTURES / "pets.yaml")
        pets, pet_by_id = group.paths
        assert list(pets.operations) == ["get", "post"]

        list_pets = pets.operations["get"]
        assert list_pets.summary == "List all pets"
        assert list_pets.tags == frozenset({"pets"})
        assert list_pets.parameters[0].location == "query"
        assert list_pets.parameters[0].required is False
        assert list_pets.parameters[0].format == "int32"
        assert list_pets.response_map()["200"].schema_ == ArrayOf(items=Ref(name="Pet"))

        body = pets.operations["post"].parameters[0]
        assert body.location == "body"
        assert body.required is True
        assert body.schema_ == Ref(name="Pet")

    def test_parse_path_param_and_response_mapping(self):
        group = parse_group_file(FIXTURES / "pets.yaml")
        get_pet = group.paths[1].operations["get"]
        assert get_pet.parameters[0].required is True
        assert get_pet.parameters[0].param_type == "integer"
        assert [code for code, _ in get_pet.responses] == ["200", "default"]

    def test_parse_sum_types_from_json(self):
        group = parse_group_file(FIXTURES / "shapes.json")
        assert [d.name for d in group.definitions] == ["Shape", "Circle", "Square", "Drawing"]
        shape = group.definitions[0]
        assert shape.kind == "composite"
        assert shape.members == (Ref(name="Circle"), Ref(name="Square"))

        drawing = group.definitions[3]
        assert drawing.properties[0].type == ArrayOf(items=Ref(name="Shape"))
        origin = drawing.properties[1].type
        assert isinstance(origin, Inline)
        assert origin.definition.name == "origin"
        assert group.paths[0].operations["post"].operation_id == "createDrawing"

    def test_unsupported_method_is_skipped(self):
        group = parse_group_file(FIXTURES / "broken.yaml")
        assert list(group.paths[0].operations) == ["get"]

    def test_duplicate_status_codes_survive_parsing(self):
        group = parse_group_file(FIXTURES / "broken.yaml")
        assert [code for code, _ in group.paths[0].operations["get"].responses] == ["200", "200"]

    def test_name_defaults_to_file_stem(self, tmp_path):
        f = tmp_path / "orders.yaml"
        f.write_text("paths:\n  /orders:\n    get:\n      responses:\n        - {status: 200, description: OK}\n")
        assert parse_group_file(f).name == "orders"

    def test_composite_with_external_members(self, tmp_path):
        f = tmp_path / "vehicles.yaml"
        f.write_text("definitions:\n  - {name: Vehicle, kind: composite, members: [Car, Bike]}\n")
        vehicle = parse_group_file(f).definitions[0]
        assert vehicle.members == (Ref(name="Car"), Ref(name="Bike"))

    def test_not_a_mapping(self):
        with pytest.raises(GroupLoadError, match="mapping"):
            parse_group_file(FIXTURES / "not_a_group.yaml")

    def test_invalid_yaml(self, tmp_path):
        f = tmp_path / "bad.yaml"
        f.write_text("name: [unclosed\n")
        with pytest.raises(GroupLoadError):
            parse_group_file(f)

    def test_unknown_definition_kind(self, tmp_path):
        f = tmp_path / "odd.yaml"
        f.write_text("definitions:\n  - {name: Odd, kind: tuple}\n")
        with pytest.raises(GroupLoadError, match="tuple"):
            parse_group_file(f)

    def test_definitions_must_be_mappings(self, tmp_path):
        f = tmp_path / "names.yaml"
        f.write_text("definitions:\n  - Pet\n")
        with pytest.raises(GroupLoadError, match="invalid path group"):
            parse_group_file(f)

    def test_path_without_operations(self, tmp_path):
        f = tmp_path / "empty_path.yaml"
        f.write_text("paths:\n  /pets:\n")
        with pytest.raises(GroupLoadError, match="invalid path group"):
            parse_group_file(f)

    def test_invalid_utf8(self, tmp_path):
        f = tmp_path / "latin1.yaml"
        f.write_bytes(b"name: caf\xe9\xff\n")
        with pytest.raises(GroupLoadError, match="UTF-8"):
            parse_group_file(f)

    def test_schema_typed_parameter_warns(self, tmp_path, warnings):
        f = tmp_path / "lookup.yaml"
        f.write_text("paths:\n  /pets:\n    get:\n      parameters:\n        - {name: filter, in: query, type: Pet}\n")
        param = parse_group_file(f).paths[0].operations["get"].parameters[0]
        assert param.param_type == "string"
        assert any("filter" in message and "'Pet'" in message for message in warnings)

    def test_primitive_parameter_does_not_warn(self, warnings):
        parse_group_file(FIXTURES / "pets.yaml")
        assert not any("non-primitive" in message for message in warnings)


class TestLoadGroups:
    def test_missing_file(self):
        with pytest.raises(GroupLoadError, match="not found"):
            load_group(str(FIXTURES / "nope.yaml"))

    def test_load_from_module(self):
        group = load_group("test_group_file:PLUGIN_GROUP")
        assert group.name == "plugin"

    def test_module_attribute_must_be_a_group(self):
        with pytest.raises(GroupLoadError, match="not a PathGroup"):
            load_group("test_group_file:INFO")

    def test_unimportable_module(self):
        with pytest.raises(GroupLoadError, match="Cannot import"):
            load_group("no_such_module_anywhere:group")

    def test_fixture_files_aggregate(self):
        groups = load_groups([str(FIXTURES / "pets.yaml"), str(FIXTURES / "shapes.json")])
        assert aggregate(INFO, groups).ok

    def test_pets_and_dinos_files(self):
        groups = load_groups([str(FIXTURES / "pets.yaml"), str(FIXTURES / "dinos.yaml")])
        result = aggregate(INFO, groups)
        assert len(result.errors) == 1
        assert isinstance(result.errors[0], MissingDefinitionError)
        assert result.errors[0].name == "Dino"
        assert result.errors[0].site == "GET /dinos/{id} response 200"
