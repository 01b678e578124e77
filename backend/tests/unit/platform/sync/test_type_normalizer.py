"""Tests for the type normalizer."""

import pytest

from payload_source.core.exceptions import InvalidTypeConfig
from payload_source.platform.entities._base import SimpleType, TypeWithOverrides
from payload_source.platform.sync.type_normalizer import normalize_types, parse_type_config

ENDPOINT = "https://cms.example.com/api"


def test_bare_names_get_the_base_endpoint():
    """Test that string entries become descriptors with the default endpoint."""
    descriptors = normalize_types(["posts", "authors"], ENDPOINT)

    assert [d.slug for d in descriptors] == ["posts", "authors"]
    assert all(d.endpoint == ENDPOINT for d in descriptors)
    assert all(d.locale is None for d in descriptors)


def test_overrides_keep_their_endpoint_locale_and_params():
    """Test that mapping entries keep their overrides and input order is preserved."""
    descriptors = normalize_types(
        [
            "posts",
            {"slug": "pages", "locale": "de", "params": {"depth": 2}},
            {"slug": "legacy", "endpoint": "https://old.example.com/api/"},
        ],
        ENDPOINT + "/",
    )

    posts, pages, legacy = descriptors
    assert posts.endpoint == ENDPOINT
    assert pages.locale == "de"
    assert pages.params == {"depth": 2}
    assert pages.endpoint == ENDPOINT
    assert legacy.endpoint == "https://old.example.com/api"


def test_none_means_no_types():
    """Test that an unset type list yields no descriptors."""
    assert normalize_types(None, ENDPOINT) == []


def test_parse_returns_tagged_variants():
    """Test that entries are parsed into the matching variant."""
    assert parse_type_config("posts") == SimpleType(name="posts")
    assert isinstance(parse_type_config({"slug": "posts"}), TypeWithOverrides)


@pytest.mark.parametrize(
    "entry",
    [
        42,
        None,
        ["posts"],
        "",
        {"endpoint": "https://cms.example.com/api"},
        {"slug": ""},
        {"slug": 3},
        {"slug": "posts", "locale": 3},
        {"slug": "posts", "unknown": True},
    ],
)
def test_malformed_entries_are_rejected(entry):
    """Test that malformed entries raise InvalidTypeConfig."""
    with pytest.raises(InvalidTypeConfig):
        normalize_types(["posts", entry], ENDPOINT)


def test_a_single_string_is_not_a_list():
    """Test that a bare string instead of a list is rejected, not split into letters."""
    with pytest.raises(InvalidTypeConfig):
        normalize_types("posts", ENDPOINT)
