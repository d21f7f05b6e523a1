#!/usr/bin/env python3
"""Tests for template_tag_rules.py - per-tag rules and the dispatch table."""

import pytest

from template_descriptor import TemplateDescriptor
from template_tag_rules import TAG_VALIDATORS, is_int32, iter_tag_messages, verify_tag


def descriptor_with_tags(**tags: str) -> TemplateDescriptor:
    return TemplateDescriptor.from_dict({"classifications": ["Universal"], "tags": tags})


def check(key: str, value: str, **other_tags: str) -> list[str]:
    """Run the rules registered for key against a descriptor holding the tag."""
    descriptor = descriptor_with_tags(**{key: value}, **other_tags)
    return verify_tag(key, value, descriptor)


class TestAllowedValues:
    """Tags whose whole value must come from a fixed set."""

    @pytest.mark.parametrize(
        "key,value",
        [
            ("language", "CSharp"),
            ("language", "VisualBasic"),
            ("type", "item"),
            ("wts.type", "page"),
            ("wts.type", "composition"),
            ("wts.group", "BackgroundWork"),
            ("wts.export.baseclass", "INotifyPropertyChanged"),
            ("wts.export.setter", "Set"),
        ],
    )
    def test_allowed_value_passes(self, key: str, value: str) -> None:
        assert check(key, value) == []

    def test_unknown_language(self) -> None:
        assert check("language", "FSharp") == ["Invalid value 'FSharp' specified in the language tag."]

    def test_type_must_be_item(self) -> None:
        assert check("type", "project") == ["Invalid value 'project' specified in the type tag."]

    def test_unknown_wts_type(self) -> None:
        assert check("wts.type", "service") == ["Invalid value 'service' specified in the wts.type tag."]

    def test_group_message_names_group_tag(self) -> None:
        assert check("wts.group", "Data") == ["Invalid value 'Data' specified in the wts.group tag."]

    def test_export_tags_report_unexpected_value(self) -> None:
        assert check("wts.export.baseclass", "BindableBase") == [
            "Unexpected value 'BindableBase' specified in the wts.export.baseclass tag."
        ]
        assert check("wts.export.setter", "SetProperty") == [
            "Unexpected value 'SetProperty' specified in the wts.export.setter tag."
        ]

    def test_values_are_case_sensitive(self) -> None:
        assert check("language", "csharp") != []


class TestBooleanTags:
    @pytest.mark.parametrize("key", ["wts.rightClickEnabled", "wts.multipleInstance", "wts.isHidden"])
    @pytest.mark.parametrize("value", ["true", "false"])
    def test_literal_booleans_pass(self, key: str, value: str) -> None:
        assert check(key, value) == []

    @pytest.mark.parametrize("key", ["wts.rightClickEnabled", "wts.multipleInstance", "wts.isHidden"])
    def test_other_spellings_fail(self, key: str) -> None:
        assert check(key, "True") == [f"Invalid value 'True' specified in the {key} tag."]


class TestIntegerTags:
    @pytest.mark.parametrize("key", ["wts.displayOrder", "wts.compositionOrder", "wts.genGroup"])
    def test_integer_passes(self, key: str) -> None:
        assert check(key, "10") == []

    @pytest.mark.parametrize("key", ["wts.displayOrder", "wts.compositionOrder", "wts.genGroup"])
    def test_non_integer_fails(self, key: str) -> None:
        assert check(key, "first") == [f"The {key} tag must be an integer. Not 'first'."]

    @pytest.mark.parametrize("value", ["0", "-3", "+7", " 12 ", "2147483647", "-2147483648"])
    def test_int32_accepts(self, value: str) -> None:
        assert is_int32(value)

    @pytest.mark.parametrize("value", ["", "1.5", "1_000", "2147483648", "0x10", "1 2"])
    def test_int32_rejects(self, value: str) -> None:
        assert not is_int32(value)


class TestPipeDelimitedTags:
    def test_every_framework_valid(self) -> None:
        assert check("wts.framework", "MVVMBasic|MVVMLight|CodeBehind|CaliburnMicro") == []

    def test_one_message_per_invalid_framework(self) -> None:
        assert check("wts.framework", "MVVMBasic|Prism|ReactiveUI") == [
            "Invalid value 'Prism' specified in the wts.framework tag.",
            "Invalid value 'ReactiveUI' specified in the wts.framework tag.",
        ]

    def test_project_types(self) -> None:
        assert check("wts.projecttype", "Blank|SplitView|TabbedPivot") == []
        assert check("wts.projecttype", "Blank|MenuBar") == [
            "Invalid value 'MenuBar' specified in the wts.projecttype tag."
        ]

    def test_trailing_pipe_is_an_empty_element(self) -> None:
        assert check("wts.projecttype", "Blank|") == ["Invalid value '' specified in the wts.projecttype tag."]


class TestOrderTag:
    @pytest.mark.parametrize("value", ["1", "", "anything"])
    def test_order_is_always_rejected(self, value: str) -> None:
        messages = check("wts.order", value)
        assert len(messages) == 1
        assert "wts.order tag is no longer supported" in messages[0]
        assert "wts.displayOrder" in messages[0]
        assert "wts.compositionOrder" in messages[0]


class TestVersionTag:
    @pytest.mark.parametrize("value", ["1.0.0", "10.20.30", "2.5.1"])
    def test_valid_versions(self, value: str) -> None:
        assert check("wts.version", value) == []

    @pytest.mark.parametrize("value", ["1.0", "1.0.0.0", "100.0.0", "1-0-0", "v1.0.0", "1.0.0 "])
    def test_invalid_versions(self, value: str) -> None:
        assert check("wts.version", value) == [
            f"'{value}' specified in the wts.version tag does not match the expected format of 'X.Y.Z'."
        ]


class TestLicensesTag:
    def test_markdown_link_passes(self) -> None:
        assert check("wts.licenses", "[Newtonsoft.Json](https://www.newtonsoft.com/json)") == []

    @pytest.mark.parametrize(
        "value",
        [
            "Newtonsoft.Json",
            "[MIT](https://opensource.org/licenses/MIT)",
            "[Newtonsoft.Json](ftp://example.com/license)",
            "[Newtonsoft.Json](http://a.b)",
            "[Newtonsoft.Json](https://example.com/license) trailing",
        ],
    )
    def test_malformed_links_fail(self, value: str) -> None:
        assert check("wts.licenses", value) == [
            f"'{value}' specified in the wts.licenses tag does not match the expected format."
        ]


class TestDefaultInstanceRules:
    def test_blank_default_instance(self) -> None:
        assert check("wts.defaultInstance", "  ") == ["The tag wts.defaultInstance cannot be blank if specified."]

    def test_default_instance_with_value(self) -> None:
        assert check("wts.defaultInstance", "SampleDataService") == []

    def test_single_instance_feature_without_default(self) -> None:
        messages = check("wts.type", "feature", **{"wts.multipleInstance": "false"})
        assert len(messages) == 1
        assert "wts.defaultInstance" in messages[0]
        assert "wts.multipleInstance is 'false'" in messages[0]

    def test_single_instance_feature_with_blank_default(self) -> None:
        messages = check("wts.type", "feature", **{"wts.multipleInstance": "false", "wts.defaultInstance": ""})
        assert any("must define a valid value for wts.defaultInstance" in m for m in messages)

    def test_single_instance_feature_with_default(self) -> None:
        tags = {"wts.multipleInstance": "false", "wts.defaultInstance": "SettingsStorage"}
        assert check("wts.type", "feature", **tags) == []

    def test_multiple_instance_feature_needs_no_default(self) -> None:
        assert check("wts.type", "feature", **{"wts.multipleInstance": "true"}) == []

    def test_feature_without_multiple_instance_tag(self) -> None:
        assert check("wts.type", "feature") == []

    def test_rule_only_applies_to_features(self) -> None:
        assert check("wts.type", "page", **{"wts.multipleInstance": "false"}) == []


class TestNonStringValues:
    """JSON numbers, booleans and nulls reach the rules after the descriptor reads them as text."""

    def test_scalars_are_read_as_text(self) -> None:
        descriptor = TemplateDescriptor.from_dict(
            {"tags": {"wts.displayOrder": 5, "wts.isHidden": True, "wts.defaultInstance": None}}
        )
        assert dict(descriptor.tags) == {"wts.displayOrder": "5", "wts.isHidden": "true", "wts.defaultInstance": None}
        assert [m for tag_messages in iter_tag_messages(descriptor) for m in tag_messages] == [
            "The tag wts.defaultInstance cannot be blank if specified."
        ]

    def test_null_default_instance_is_blank(self) -> None:
        assert check("wts.defaultInstance", None) == ["The tag wts.defaultInstance cannot be blank if specified."]

    def test_null_integer(self) -> None:
        assert not is_int32(None)
        assert check("wts.displayOrder", None) == ["The wts.displayOrder tag must be an integer. Not ''."]

    def test_null_allowed_value(self) -> None:
        assert check("language", None) == ["Invalid value '' specified in the language tag."]


class TestCompositionFilterTag:
    def test_valid_query(self) -> None:
        assert check("wts.compositionFilter", "$framework==MVVMBasic|MVVMLight & wts.type==page") == []

    def test_unparsable_query(self) -> None:
        messages = check("wts.compositionFilter", "wts.type=page")
        assert len(messages) == 1
        assert messages[0].startswith("Unable to parse the wts.compositionFilter value of 'wts.type=page': ")

    def test_vb_template_must_reference_vb_identity(self) -> None:
        value = "identity==wts.Page.Blank"
        messages = check("wts.compositionFilter", value, language="VisualBasic")
        assert messages == [f"The wts.compositionFilter identity value does not match the language. ({value})"]

    def test_vb_template_with_vb_identity(self) -> None:
        assert check("wts.compositionFilter", "identity==wts.Page.Blank.VB", language="VisualBasic") == []

    def test_csharp_template_is_not_checked_for_vb_identity(self) -> None:
        assert check("wts.compositionFilter", "identity==wts.Page.Blank", language="CSharp") == []

    def test_missing_language_tag_is_not_an_error(self) -> None:
        assert check("wts.compositionFilter", "identity==wts.Page.Blank") == []


class TestDispatch:
    def test_unregistered_tags_are_silently_skipped(self) -> None:
        assert check("wts.someFutureTag", "whatever") == []
        assert "wts.someFutureTag" not in TAG_VALIDATORS

    def test_dependencies_tag_has_no_local_rule(self) -> None:
        assert "wts.dependencies" in TAG_VALIDATORS
        assert check("wts.dependencies", "not|checked|here") == []

    def test_dispatch_table_is_read_only(self) -> None:
        with pytest.raises(TypeError):
            TAG_VALIDATORS["new.tag"] = ()  # type: ignore[index]

    def test_usage_follows_declaration_order(self) -> None:
        descriptor = descriptor_with_tags(**{"wts.order": "1", "language": "Go", "custom": "x", "type": "project"})
        messages = [m for tag_messages in iter_tag_messages(descriptor) for m in tag_messages]
        assert len(messages) == 3
        assert "wts.order" in messages[0]
        assert "language tag" in messages[1]
        assert "type tag" in messages[2]

    def test_rules_do_not_modify_descriptor(self) -> None:
        descriptor = descriptor_with_tags(**{"wts.type": "feature", "wts.multipleInstance": "false"})
        before = dict(descriptor.tags)
        list(iter_tag_messages(descriptor))
        assert dict(descriptor.tags) == before
