"""Tests for layered resource resolution."""

from unittest.mock import patch

import pytest

from crd_mcp_server.core import MatchType, ResourceIndex, Resolver
from crd_mcp_server.core.similarity import similarity
from crd_mcp_server.errors import InvalidInputError
from crd_mcp_server.models import ResourceDefinition


@pytest.fixture
def webapp():
    return ResourceDefinition(
        group="example.com", kind="WebApp", plural="webapps", short_aliases=("wa",)
    )


@pytest.fixture
def resolver(webapp):
    redis = ResourceDefinition(
        group="cache.example.com", kind="RedisCluster", plural="redisclusters"
    )
    return Resolver(ResourceIndex.build([webapp, redis]))


@pytest.mark.unit
class TestResolveLayers:
    """Test each resolution layer."""

    def test_exact_key(self, resolver, webapp):
        """Test composite key lookup."""
        resolution = resolver.resolve("example.com/WebApp")
        assert resolution.found
        assert resolution.definition is webapp
        assert resolution.match_type is MatchType.EXACT_KEY
        assert resolution.suggestions == ()

    def test_exact_kind(self, resolver, webapp):
        """Test exact kind lookup."""
        resolution = resolver.resolve("WebApp")
        assert resolution.definition is webapp
        assert resolution.match_type is MatchType.EXACT_KIND

    def test_case_insensitive_kind(self, resolver, webapp):
        """Test kind lookup ignoring case."""
        resolution = resolver.resolve("webapp")
        assert resolution.definition is webapp
        assert resolution.match_type is MatchType.CASE_INSENSITIVE_KIND

    def test_alias(self, resolver, webapp):
        """Test short alias lookup."""
        resolution = resolver.resolve("wa")
        assert resolution.definition is webapp
        assert resolution.match_type is MatchType.ALIAS

        assert resolver.resolve("WA").definition is webapp

    def test_typo_is_a_miss_with_suggestion(self, resolver):
        """Test that a near match is suggested, never resolved."""
        resolution = resolver.resolve("Wbeapp")
        assert not resolution.found
        assert resolution.definition is None
        assert resolution.match_type is None
        assert resolution.suggestions[0] == "example.com/WebApp"

    def test_hyphenated_typo(self, resolver):
        """Test a misspelled kind with separators."""
        resolution = resolver.resolve("redis-cluser")
        assert not resolution.found
        assert resolution.suggestions[0] == "cache.example.com/RedisCluster"

    def test_unrelated_query_has_no_suggestions(self, resolver):
        """Test that weak candidates are dropped."""
        resolution = resolver.resolve("zzzzzzzzzzzzzzzzzzzzzz")
        assert not resolution.found
        assert resolution.suggestions == ()

    @pytest.mark.parametrize("query", ["", "   ", None, 42])
    def test_empty_or_invalid_query(self, resolver, query):
        """Test that empty and non-string queries are rejected."""
        with pytest.raises(InvalidInputError):
            resolver.resolve(query)


@pytest.mark.unit
class TestResolveShortCircuit:
    """Test that exact layers never run the fuzzy search."""

    @pytest.mark.parametrize("query", ["example.com/WebApp", "WebApp", "webapp", "wa"])
    def test_no_similarity_on_hit(self, resolver, query):
        """Test that a hit performs no similarity computation."""
        with patch("crd_mcp_server.core.resolver.similarity", wraps=similarity) as spy:
            assert resolver.resolve(query).found
        spy.assert_not_called()

    def test_similarity_on_miss(self, resolver):
        """Test that a miss does run the fuzzy search."""
        with patch("crd_mcp_server.core.resolver.similarity", wraps=similarity) as spy:
            resolver.resolve("Wbeapp")
        assert spy.called


@pytest.mark.unit
class TestFindSimilar:
    """Test fuzzy candidate search."""

    def test_ordering_by_score_then_kind(self):
        """Test ties broken by kind name."""
        index = ResourceIndex.build([
            ResourceDefinition(group="x.io", kind="Cab", plural="cabs"),
            ResourceDefinition(group="x.io", kind="Caa", plural="caas"),
            ResourceDefinition(group="x.io", kind="Cat", plural="cats"),
        ])
        resolver = Resolver(index)

        # "Cat" scores 1.0; "Caa" and "Cab" tie
        assert resolver.find_similar("cat") == ["x.io/Cat", "x.io/Caa", "x.io/Cab"]

    def test_limit(self):
        """Test the result limit."""
        index = ResourceIndex.build([
            ResourceDefinition(group="x.io", kind=f"Kind{i}", plural=f"kind{i}s")
            for i in range(8)
        ])
        assert len(Resolver(index).find_similar("Kind")) == 5
        assert len(Resolver(index).find_similar("Kind", limit=2)) == 2

    def test_group_and_plural_are_compared(self):
        """Test that group and plural names contribute to the score."""
        index = ResourceIndex.build([
            ResourceDefinition(group="kafka.io", kind="Topic", plural="topics"),
        ])
        assert Resolver(index).find_similar("kafka.i0") == ["kafka.io/Topic"]

    def test_find_similar_kinds(self, resolver):
        """Test kind-name suggestions over an explicit list."""
        kinds = ["RedisCluster", "WebApp", "KafkaTopic"]
        assert resolver.find_similar_kinds("RedisClustr", kinds)[0] == "RedisCluster"
        assert resolver.find_similar_kinds("qqqqqqqqqqqqqq", kinds) == []
