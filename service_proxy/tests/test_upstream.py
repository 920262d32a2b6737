"""
Unit tests for upstream URL construction and input sanitising.
"""

import pytest

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from service_proxy.app.domain.upstream import (
    UpstreamLocation,
    ascii_target,
    clean_string,
    should_forward_body,
    strip_prefix,
)
from shared.test_helpers import proxy_test_environment


class TestCleanString:
    """Test cases for clean_string."""

    @pytest.mark.parametrize("raw, expected", [
        ("/Courses", "/Courses"),
        ("  /Courses  ", "/Courses"),
        ("/Cour\r\nses", "/Courses"),
        ("\t/Courses\t", "/Courses"),
        ("?$filter=Status eq 'Active'\n", "?$filter=Status eq 'Active'"),
        ("", ""),
    ])
    def test_strips_control_characters_and_whitespace(self, raw, expected):
        """Control characters are removed and the result is trimmed."""
        assert clean_string(raw) == expected

    def test_none_becomes_empty(self):
        """Missing configuration values become empty strings."""
        assert clean_string(None) == ""

    def test_inner_spaces_preserved(self):
        """Only surrounding whitespace is trimmed."""
        assert clean_string(" a b ") == "a b"


class TestAsciiTarget:
    """Test cases for ascii_target."""

    def test_plain_ascii_unchanged(self):
        assert ascii_target(b"$filter=Status eq 'Active'&$top=5") == "$filter=Status eq 'Active'&$top=5"

    def test_existing_escapes_not_reencoded(self):
        assert ascii_target(b"/Courses(%27C%20001%27)") == "/Courses(%27C%20001%27)"

    def test_raw_utf8_becomes_escapes(self):
        """Unescaped UTF-8 keeps its bytes instead of being decoded as latin-1."""
        raw = "$filter=Title eq 'Caf\u00e9'".encode("utf-8")
        assert ascii_target(raw) == "$filter=Title eq 'Caf%C3%A9'"

    def test_invalid_utf8_bytes_escaped(self):
        assert ascii_target(b"/Items\xff") == "/Items%FF"

    def test_control_characters_left_for_clean_string(self):
        assert clean_string(ascii_target(b"/Courses\r\n")) == "/Courses"


class TestStripPrefix:
    """Test cases for strip_prefix."""

    def test_removes_api_prefix(self):
        assert strip_prefix("/api/Courses") == "/Courses"

    def test_keeps_nested_path_and_encoding(self):
        assert strip_prefix("/api/Courses(%27C001%27)/Sessions") == "/Courses(%27C001%27)/Sessions"

    def test_only_leading_prefix_removed(self):
        assert strip_prefix("/api/items/api/x") == "/items/api/x"

    def test_path_without_prefix_untouched(self):
        assert strip_prefix("/Courses") == "/Courses"


class TestShouldForwardBody:
    """Test cases for should_forward_body."""

    @pytest.mark.parametrize("method", ["POST", "PUT", "PATCH", "post", "Patch"])
    def test_mutating_methods(self, method):
        assert should_forward_body(method) is True

    @pytest.mark.parametrize("method", ["GET", "DELETE", "HEAD", "OPTIONS", "get", "TRACE"])
    def test_other_methods(self, method):
        assert should_forward_body(method) is False


class TestUpstreamLocation:
    """Test cases for UpstreamLocation."""

    @pytest.fixture
    def location(self):
        """Location built from the test configuration."""
        return UpstreamLocation.from_config(proxy_test_environment.get_proxy_config())

    def test_company_root(self, location):
        """Segments are joined in the fixed order."""
        assert location.company_root == proxy_test_environment.company_root()

    def test_build_url_with_filter(self, location):
        """Endpoint and query are appended without re-encoding."""
        url = location.build_url("/Courses", "?$filter=Status eq 'Active'")
        assert url == (
            "https://api.businesscentral.dynamics.com/v2.0/tenant-guid/Sandbox"
            "/api/alletec/learning/v1.0/companies(company-guid)"
            "/Courses?$filter=Status eq 'Active'"
        )

    def test_build_url_sanitises_parts(self, location):
        url = location.build_url("/Courses\r\n", "?$top=5\t")
        assert url.endswith("/companies(company-guid)/Courses?$top=5")

    def test_build_url_without_query(self, location):
        assert location.build_url("/Assessments") == f"{location.company_root}/Assessments"

    def test_from_config_cleans_values(self):
        """Configured values lose stray whitespace and line breaks."""
        config = proxy_test_environment.get_proxy_config(
            base_url=" https://bc.example.com\n",
            company_id="\tcompany-guid ",
            api_publisher="contoso",
            api_group="training",
        )
        location = UpstreamLocation.from_config(config)

        assert location.base_url == "https://bc.example.com"
        assert location.company_id == "company-guid"
        assert location.company_root == (
            "https://bc.example.com/v2.0/tenant-guid/Sandbox"
            "/api/contoso/training/v1.0/companies(company-guid)"
        )

    def test_missing_values_produce_malformed_url(self):
        """Unset configuration is not validated and yields empty segments."""
        location = UpstreamLocation("", "", "", "", "")
        assert location.build_url("/Courses") == "/v2.0///api/alletec/learning//companies()/Courses"
