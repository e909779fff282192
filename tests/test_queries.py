"""Tests for the query façade behind the MCP tools."""

from unittest.mock import patch

import pytest

from crd_mcp_server.constants import ErrorCode, ResponseStatus
from crd_mcp_server.core import ResourceIndex
from crd_mcp_server.models import (
    Complexity,
    ExampleManifest,
    GuidanceDocument,
    ResourceDefinition,
    ToolResult,
)
from crd_mcp_server.tools import ResourceQueries
from crd_mcp_server.tools.queries import preview_text, truncate_content

REDIS_KEY = "cache.example.com/RedisCluster"


@pytest.mark.integration
class TestListResources:
    """Test listing resource definitions."""

    def test_list_all(self, queries):
        """Test the unfiltered listing order and histogram."""
        result = queries.list_resources()

        assert result.success
        kinds = [r["kind"] for r in result.data["resources"]]
        # categorised first, uncategorised last
        assert kinds == ["RedisCluster", "KafkaTopic", "WebApp"]
        assert result.data["total_count"] == 3
        assert result.data["categories"] == {
            "database": 1,
            "messaging": 1,
            "uncategorized": 1,
        }

    def test_resource_shape(self, queries):
        """Test the dictionary returned per resource."""
        resource = queries.list_resources(search="redis").data["resources"][0]

        assert resource["resource_type"] == REDIS_KEY
        assert resource["short_names"] == ["rc"]
        assert resource["versions"] == ["v1alpha1"]
        assert resource["scope"] == "Namespaced"
        assert resource["description"] == "A managed Redis cluster"
        assert resource["file_path"].endswith("platform.yaml")

    def test_filters(self, queries):
        """Test category, group, scope and search filters."""
        assert [r["kind"] for r in queries.list_resources(scope="Cluster").data["resources"]] == ["WebApp"]
        assert [r["kind"] for r in queries.list_resources(category="messaging").data["resources"]] == ["KafkaTopic"]
        assert [r["kind"] for r in queries.list_resources(group="example.com").data["resources"]] == ["WebApp"]
        assert [r["kind"] for r in queries.list_resources(search="RETENTION").data["resources"]] == ["KafkaTopic"]

    def test_search_miss_suggests_similar(self, queries):
        """Test suggestions for a misspelled search."""
        result = queries.list_resources(search="redis-clustr")

        assert not result.success
        assert result.error_code == ErrorCode.NOT_FOUND.value
        assert result.suggestions[0].startswith("Did you mean one of these resources:")
        assert REDIS_KEY in result.suggestions[0]

    def test_category_miss_lists_other_categories(self, queries):
        """Test suggestions for an unused category."""
        result = queries.list_resources(category="storage")

        assert result.error_code == ErrorCode.NOT_FOUND.value
        assert "Try other categories: database, messaging" in result.suggestions

    def test_invalid_scope(self, queries):
        """Test scope validation."""
        result = queries.list_resources(scope="Global")
        assert result.error_code == ErrorCode.INVALID_INPUT.value


@pytest.mark.integration
class TestDescribeResource:
    """Test describing a single resource."""

    def test_describe_by_alias(self, queries):
        """Test describing a resource through its short alias."""
        result = queries.describe_resource("rc")

        assert result.success
        assert result.metadata["match_type"] == "alias"
        assert result.data["resource_type"] == REDIS_KEY
        assert result.data["metadata"]["category"] == "database"
        assert len(result.data["samples"]) == 2
        assert [i["title"] for i in result.data["instructions"]] == ["Redis Setup"]
        assert result.data["related_resources"] == []
        assert (
            "Always configure persistent storage for production databases"
            in result.data["best_practices"]
        )

    def test_usage_examples(self, queries):
        """Test the generated and sample-based usage examples."""
        usage = queries.describe_resource(REDIS_KEY).data["usage_examples"]

        basic = usage[0]["example"]
        assert basic["apiVersion"] == "cache.example.com/v1alpha1"
        assert basic["metadata"] == {"name": "example-rediscluster", "namespace": "default"}
        assert basic["spec"] == {"version": "1.0", "replicas": 1, "mode": "standalone"}
        # only the simple sample is reused
        assert len(usage) == 2
        assert usage[1]["example"]["metadata"]["name"] == "simple-redis"

    def test_cluster_scoped_usage_has_no_namespace(self, queries):
        """Test that cluster-scoped resources get no namespace."""
        result = queries.describe_resource("webapp")
        assert result.metadata["match_type"] == "case_insensitive_kind"
        assert "namespace" not in result.data["usage_examples"][0]["example"]["metadata"]

    def test_miss_with_suggestion(self, queries):
        """Test that a typo is not auto-resolved."""
        result = queries.describe_resource("Wbeapp")

        assert not result.success
        assert result.error_code == ErrorCode.NOT_FOUND.value
        assert result.suggestions == ["Did you mean: example.com/WebApp?"]

    @pytest.mark.parametrize("value", ["", "  ", None, 7])
    def test_invalid_input(self, queries, value):
        """Test empty and non-string resource types."""
        result = queries.describe_resource(value)
        assert result.error_code == ErrorCode.INVALID_INPUT.value

    def test_related_resources(self):
        """Test same-group, same-category and referenced relationships."""
        definitions = [
            ResourceDefinition(group="db.io", kind="Postgres", plural="postgreses", category="database"),
            ResourceDefinition(group="db.io", kind="PostgresUser", plural="postgresusers", category="database"),
            ResourceDefinition(group="cache.io", kind="Redis", plural="redises", category="database"),
            ResourceDefinition(group="net.io", kind="Gateway", plural="gateways"),
        ]
        sample = ExampleManifest(
            kind="Postgres",
            raw_content={"spec": {"exposeVia": "Gateway"}},
            description="with gateway",
        )
        queries = ResourceQueries(
            ResourceIndex.build(definitions, examples={"Postgres": [sample]})
        )

        related = queries.find_related_resources(definitions[0])

        assert [(r["kind"], r["relationship"]) for r in related] == [
            ("PostgresUser", "same-group"),
            ("Redis", "same-category"),
            ("Gateway", "referenced-in-samples"),
        ]

    def test_guidance_matching_kind_only(self):
        """Test that guidance naming the kind is kept without a category tag."""
        definition = ResourceDefinition(
            group="cache.example.com",
            kind="RedisCluster",
            plural="redisclusters",
            category="database",
        )
        kind_only = GuidanceDocument(
            title="RedisCluster production setup",
            body_text="Run three replicas.",
            declared_kinds=("RedisCluster",),
            tags=("production", "redis"),
            category="cache",
        )
        tag_only = GuidanceDocument(
            title="Database backups",
            body_text="Schedule nightly snapshots.",
            tags=("database",),
            category="database",
        )
        unrelated = GuidanceDocument(
            title="Ingress rules", body_text="Expose services.", tags=("networking",)
        )
        queries = ResourceQueries(
            ResourceIndex.build([definition], guidance=[unrelated, tag_only, kind_only])
        )

        result = queries.describe_resource("RedisCluster")

        # kind match scores above a tag-only match
        assert [i["title"] for i in result.data["instructions"]] == [
            "RedisCluster production setup",
            "Database backups",
        ]
        assert result.metadata["instructions_found"] == 2

    def test_no_guidance(self):
        """Test a definition that no guidance applies to."""
        definition = ResourceDefinition(group="example.com", kind="Widget", plural="widgets")
        unrelated = GuidanceDocument(title="Ingress rules", body_text="", tags=("networking",))
        queries = ResourceQueries(ResourceIndex.build([definition], guidance=[unrelated]))

        result = queries.describe_resource("Widget")

        assert result.success
        assert result.data["instructions"] == []

    def test_samples_are_copies(self, queries):
        """Test that mutating returned samples leaves the index untouched."""
        def simple_sample(result):
            return next(
                s for s in result.data["samples"] if s["metadata"]["name"] == "simple-redis"
            )

        first = queries.describe_resource(REDIS_KEY)
        simple_sample(first)["content"]["spec"]["replicas"] = 99
        simple_sample(first)["metadata"]["labels"] = {"mutated": "yes"}
        first.data["usage_examples"][1]["example"]["metadata"]["name"] = "changed"

        second = queries.describe_resource(REDIS_KEY)

        assert simple_sample(second)["content"]["spec"]["replicas"] == 1
        assert "labels" not in simple_sample(second)["metadata"]
        assert second.data["usage_examples"][1]["example"]["metadata"]["name"] == "simple-redis"


@pytest.mark.integration
class TestFindExamples:
    """Test example lookup."""

    def test_sorted_simple_first(self, queries):
        """Test ordering by complexity."""
        result = queries.find_examples("RedisCluster")

        assert result.success
        assert [s["complexity"] for s in result.data["samples"]] == ["simple", "advanced"]
        assert result.data["total_samples"] == 2
        assert result.data["available_complexities"] == ["advanced", "simple"]
        assert "production" in result.data["available_tags"]

    def test_complexity_and_tag_filters(self, queries):
        """Test complexity and tag filters."""
        advanced = queries.find_examples("RedisCluster", complexity="advanced")
        assert advanced.data["filtered_count"] == 1
        assert advanced.data["samples"][0]["description"] == "Production Redis cluster with persistence"

        tagged = queries.find_examples("RedisCluster", tags=["prod"])
        assert [s["metadata"]["name"] for s in tagged.data["samples"]] == ["prod-redis"]

    def test_limit_and_content(self, queries):
        """Test limit and content omission."""
        result = queries.find_examples("RedisCluster", limit=1, include_content=False)

        assert result.data["returned_count"] == 1
        assert result.data["filtered_count"] == 2
        assert "content" not in result.data["samples"][0]

    def test_unknown_kind_suggests_alternatives(self, queries):
        """Test that find_examples does not resolve kinds fuzzily."""
        result = queries.find_examples("Redis")

        assert result.error_code == ErrorCode.NOT_FOUND.value
        assert result.suggestions == [
            "Did you mean one of these: RedisCluster?",
            "Available kinds with samples: RedisCluster",
        ]

    def test_filters_exclude_everything(self, queries):
        """Test a filter combination with no results."""
        result = queries.find_examples("RedisCluster", complexity="intermediate")

        assert result.error_code == ErrorCode.NOT_FOUND.value
        assert "Available complexities: advanced, simple" in result.suggestions

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"kind": None},
            {"kind": ""},
            {"kind": 5},
            {"kind": "RedisCluster", "complexity": "expert"},
            {"kind": "RedisCluster", "tags": "prod"},
            {"kind": "RedisCluster", "limit": 0},
            {"kind": "RedisCluster", "limit": 51},
        ],
    )
    def test_invalid_input(self, queries, kwargs):
        """Test input validation."""
        result = queries.find_examples(**kwargs)
        assert result.error_code == ErrorCode.INVALID_INPUT.value

    def test_insertion_order_does_not_leak(self):
        """Test that an advanced sample loaded first is still listed last."""
        advanced = ExampleManifest(
            kind="WebApp", raw_content={}, description="a", complexity=Complexity.ADVANCED
        )
        simple = ExampleManifest(
            kind="WebApp", raw_content={}, description="b", complexity=Complexity.SIMPLE
        )
        queries = ResourceQueries(
            ResourceIndex.build([], examples={"WebApp": [advanced, simple]})
        )

        result = queries.find_examples("WebApp")

        assert [s["description"] for s in result.data["samples"]] == ["b", "a"]

    def test_samples_are_copies(self, queries):
        """Test that mutating found samples leaves the index untouched."""
        found = queries.find_examples("RedisCluster")
        found.data["samples"][1]["content"]["metadata"]["labels"]["environment"] = "dev"
        found.data["samples"][1]["metadata"]["labels"].clear()

        again = queries.find_examples("RedisCluster").data["samples"][1]

        assert again["content"]["metadata"]["labels"] == {"environment": "production"}
        assert again["metadata"]["labels"] == {"environment": "production"}


@pytest.mark.integration
class TestFindGuidance:
    """Test guidance lookup."""

    def test_empty_query(self, queries):
        """Test that no criteria is an error, not an empty success."""
        for kwargs in ({}, {"resource_type": "", "category": "", "tags": []}):
            result = queries.find_guidance(**kwargs)
            assert not result.success
            assert result.error_code == ErrorCode.EMPTY_QUERY.value

    def test_by_category(self, queries):
        """Test category lookup with related resources and practices."""
        result = queries.find_guidance(category="database")

        assert result.success
        assert result.data["guidance_count"] == 1
        assert result.data["total_available"] == 3
        entry = result.data["guidance"][0]
        assert entry["title"] == "Redis Setup"
        assert entry["priority"] == 10
        assert entry["applicable_kinds"][0] == "RedisCluster"
        assert [r["resource_type"] for r in result.data["related_resources"]] == [REDIS_KEY]
        assert result.data["best_practices"] == [
            "Always enable persistence for production clusters",
            "Set memory limits on every replica",
        ]

    def test_by_resource_type(self, queries):
        """Test resource type lookup through detected kinds."""
        result = queries.find_guidance(resource_type="WebApp")

        assert [g["title"] for g in result.data["guidance"]] == ["Service Guidelines"]

    def test_content_preview(self):
        """Test that long bodies are cut to a preview."""
        document = GuidanceDocument(title="Long", body_text="x" * 600, tags=("long",))
        queries = ResourceQueries(ResourceIndex.build([], guidance=[document]))

        content = queries.find_guidance(tags=["long"]).data["guidance"][0]["content"]

        assert content == "x" * 500 + "..."

    def test_no_match(self, queries):
        """Test a query that matches nothing."""
        result = queries.find_guidance(tags=["nonexistent-zz"])

        assert result.error_code == ErrorCode.NOT_FOUND.value
        assert result.suggestions[-1] == "Remove some filters to broaden the search"

    def test_invalid_limit(self, queries):
        """Test limit validation."""
        result = queries.find_guidance(category="database", limit=100)
        assert result.error_code == ErrorCode.INVALID_INPUT.value


@pytest.mark.unit
class TestErrorConversion:
    """Test that internal faults become failure results."""

    def test_unexpected_error(self):
        """Test an unexpected exception inside an operation."""
        queries = ResourceQueries(ResourceIndex.build([]))
        with patch.object(queries.resolver, "resolve", side_effect=RuntimeError("boom")):
            result = queries.describe_resource("WebApp")

        assert result.error_code == ErrorCode.UNEXPECTED_ERROR.value
        assert "boom" in result.error
        assert result.suggestions == ["Check that names are spelled correctly"]

    def test_malformed_record(self):
        """Test a lookup error raised from inside an operation."""
        queries = ResourceQueries(ResourceIndex.build([]))
        with patch.object(queries.resolver, "resolve", side_effect=KeyError("kind")):
            result = queries.describe_resource("WebApp")

        assert result.error_code == ErrorCode.INVALID_INPUT.value
        assert result.suggestions == ["Check the input shape"]

    def test_result_dicts(self):
        """Test the response dictionaries."""
        assert ToolResult.ok({"a": 1}, ["next"]).to_dict() == {
            "status": ResponseStatus.SUCCESS.value,
            "data": {"a": 1},
            "suggestions": ["next"],
            "metadata": {},
        }
        assert ToolResult.fail("nope", "NOT_FOUND").to_dict() == {
            "status": ResponseStatus.ERROR.value,
            "error": "nope",
            "error_code": "NOT_FOUND",
            "suggestions": [],
        }


@pytest.mark.unit
class TestContentHelpers:
    """Test payload trimming helpers."""

    def test_truncate_content(self):
        """Test that only large payloads are replaced by a preview."""
        small = {"spec": {"replicas": 1}}
        assert truncate_content(small) is small

        large = truncate_content({"spec": {"data": "x" * 2000}})
        assert large["truncated"] is True
        assert len(large["preview"]) == 1000

    def test_preview_text(self):
        """Test text previews."""
        assert preview_text("short") == "short"
        assert preview_text("abcdef", max_length=3) == "abc..."
