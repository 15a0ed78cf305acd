"""
Descriptor transformation tests

🧪 Copy Semantics:
Copies must be structurally equal, share no mutable state with the source,
and keep None collections as None.
"""

from aasregistry.model.descriptors import LangString, ProtocolInformation, SubmodelDescriptor
from aasregistry.persistence.transform import (
    convert_endpoints, convert_protocol_information, convert_reference, convert_shell,
    convert_submodel, convert_submodels,
)


class TestConvertShell:
    """Deep copies of shell descriptors"""

    def test_none_passes_through(self):
        assert convert_shell(None) is None
        assert convert_submodel(None) is None
        assert convert_submodels(None) is None
        assert convert_endpoints(None) is None
        assert convert_reference(None) is None

    def test_copy_is_structurally_equal(self, make_shell, make_submodel):
        shell = make_shell("aas-1", [make_submodel("sm-1"), make_submodel("sm-2")])

        copy = convert_shell(shell)

        assert copy is not shell
        assert copy.model_dump() == shell.model_dump()

    def test_copy_shares_no_nested_objects(self, make_shell, make_submodel):
        shell = make_shell("aas-1", [make_submodel("sm-1")])

        copy = convert_shell(shell)

        assert copy.description is not shell.description
        assert copy.description[0] is not shell.description[0]
        assert copy.submodel_descriptors is not shell.submodel_descriptors
        assert copy.submodel_descriptors[0] is not shell.submodel_descriptors[0]
        assert copy.endpoints[0].protocol_information is not shell.endpoints[0].protocol_information
        assert copy.administration is not shell.administration

    def test_mutating_source_does_not_change_copy(self, make_shell, make_submodel):
        shell = make_shell("aas-1", [make_submodel("sm-1")])
        copy = convert_shell(shell)

        shell.description.append(LangString(language="de", text="Verwaltungsschale"))
        shell.submodel_descriptors[0].id_short = "changed"
        shell.submodel_descriptors.append(make_submodel("sm-2"))
        shell.endpoints[0].protocol_information.endpoint_protocol_version.append("2.0")

        assert len(copy.description) == 1
        assert copy.submodel_descriptors[0].id_short == "short-sm-1"
        assert [s.id for s in copy.submodel_descriptors] == ["sm-1"]
        assert copy.endpoints[0].protocol_information.endpoint_protocol_version == ["1.1"]

    def test_none_collections_stay_none(self, make_shell):
        shell = make_shell("aas-1")
        shell.specific_asset_ids = None

        copy = convert_shell(shell)

        assert copy.submodel_descriptors is None
        assert copy.specific_asset_ids is None
        assert copy.display_name is None

    def test_empty_collections_stay_empty(self, make_shell):
        copy = convert_shell(make_shell("aas-1", []))

        assert copy.submodel_descriptors == []


class TestConvertParts:
    """Copies of nested value types"""

    def test_protocol_information_versions_copied(self):
        info = ProtocolInformation(href="http://x", endpoint_protocol_version=["1.0", "1.1"])

        copy = convert_protocol_information(info)
        info.endpoint_protocol_version.append("2.0")

        assert copy.endpoint_protocol_version == ["1.0", "1.1"]

    def test_protocol_information_without_versions(self):
        copy = convert_protocol_information(ProtocolInformation(href="http://x"))

        assert copy.href == "http://x"
        assert copy.endpoint_protocol_version is None

    def test_submodel_without_optional_parts(self):
        submodel = SubmodelDescriptor(id="sm-1")

        copy = convert_submodel(submodel)

        assert copy.model_dump() == submodel.model_dump()
        assert copy.endpoints is None
        assert copy.semantic_id is None

    def test_reference_keys_are_copied(self, make_submodel):
        reference = make_submodel("sm-1").semantic_id

        copy = convert_reference(reference)

        assert copy.keys[0] is not reference.keys[0]
        assert copy.keys[0].value == "urn:sem:1"
