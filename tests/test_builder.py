"""Tests for payload parsing and workload spec construction."""

import pytest
from conftest import NOW

from reviewapp.builder import build_workload_spec, describe, parse_request, update_ops
from reviewapp.models import Handle, RequestError, ReviewRequest, StopRequest, TargetContext
from reviewapp.settings import ReviewSettings, public_address

CONTEXT = TargetContext(
    organization=Handle(id="org-1", name="galacticfog"),
    environment=Handle(id="env-1", name="review"),
    provider=Handle(id="prov-1", name="dcos"),
)


def _request(**kwargs) -> ReviewRequest:
    data = {"slug": "pr-42", "image": "ui:abc", "git_ref": "main", "git_sha": "abc", "git_author": "Jane"}
    data.update(kwargs)
    return ReviewRequest.model_validate(data)


class TestParseRequest:
    def test_valid(self, payload: dict) -> None:
        request = parse_request(ReviewRequest, payload)
        assert request.slug == "pr-42"
        assert request.git_author == "Jane Doe"

    def test_missing_image(self) -> None:
        with pytest.raises(RequestError) as info:
            parse_request(ReviewRequest, {"slug": "pr-42"})
        assert info.value.problems == ["missing required field 'image'"]

    def test_empty_slug_counts_as_missing(self) -> None:
        with pytest.raises(RequestError) as info:
            parse_request(ReviewRequest, {"slug": "", "image": "ui:abc"})
        assert info.value.problems == ["missing required field 'slug'"]

    def test_both_missing(self) -> None:
        with pytest.raises(RequestError) as info:
            parse_request(ReviewRequest, {})
        assert len(info.value.problems) == 2

    def test_wrong_type(self) -> None:
        with pytest.raises(RequestError) as info:
            parse_request(ReviewRequest, {"slug": "pr-42", "image": ["ui"]})
        assert info.value.problems[0].startswith("invalid field 'image'")

    def test_optional_fields_default_none(self) -> None:
        request = parse_request(ReviewRequest, {"slug": "pr-42", "image": "ui:abc"})
        assert request.git_ref is None
        assert request.git_sha is None
        assert request.git_author is None

    def test_stop_request_accepts_legacy_key(self) -> None:
        assert parse_request(StopRequest, {"gitlab_env_slug": "pr-9"}).slug == "pr-9"


class TestPublicAddress:
    def test_default_template(self, settings: ReviewSettings) -> None:
        assert public_address(settings, "pr-42") == "ui-review-pr-42.test.galacticfog.com"

    def test_deterministic(self, settings: ReviewSettings) -> None:
        assert public_address(settings, "pr-42") == public_address(settings, "pr-42")

    def test_custom_suffix(self, settings: ReviewSettings) -> None:
        custom = settings.model_copy(update={"domain_suffix": "review.example.test"})
        assert public_address(custom, "pr-42") == "ui-review-pr-42.review.example.test"


class TestBuildWorkloadSpec:
    def test_name_is_slug(self, settings: ReviewSettings) -> None:
        spec = build_workload_spec(_request(), CONTEXT, settings, now=NOW)
        assert spec.name == "pr-42"

    def test_description_order(self) -> None:
        text = describe(_request(), "Sun Oct 18 2026 12:00:00 UTC")
        assert text == (
            "CI review app: \n"
            "Time: Sun Oct 18 2026 12:00:00 UTC\n"
            "Author: Jane\n"
            "Git ref: main\n"
            "SHA: abc\n"
        )

    def test_fixed_resource_shape(self, settings: ReviewSettings) -> None:
        props = build_workload_spec(_request(), CONTEXT, settings, now=NOW).properties
        assert props.provider == {"id": "prov-1"}
        assert props.num_instances == 1
        assert props.cpus == 0.1
        assert props.memory == 64.0
        assert props.disk == 0.0
        assert props.network == "BRIDGE"
        assert props.force_pull is True
        assert len(props.port_mappings) == 1
        assert props.port_mappings[0].protocol == "tcp"
        assert props.port_mappings[0].container_port == 80
        assert props.port_mappings[0].expose_endpoint is True

    def test_env_from_settings(self, settings: ReviewSettings) -> None:
        props = build_workload_spec(_request(), CONTEXT, settings, now=NOW).properties
        assert props.env == {
            "META_API_URL": "https://meta.test.galacticfog.com",
            "SEC_API_URL": "https://security.test.galacticfog.com",
        }

    def test_labels(self, settings: ReviewSettings) -> None:
        labels = build_workload_spec(_request(), CONTEXT, settings, now=NOW).properties.labels
        assert labels == {
            "HAPROXY_GROUP": "external",
            "HAPROXY_0_VHOST": "ui-review-pr-42.test.galacticfog.com",
            "HAPROXY_0_REDIRECT_TO_HTTPS": "true",
            "DEPLOYED_AT": "Sun Oct 18 2026 12:00:00 UTC",
            "GIT_AUTHOR": "Jane",
            "GIT_SHA": "abc",
            "GIT_REF": "main",
            "REVIEW_APP": "pr-42",
        }

    def test_labels_skip_missing_git_metadata(self, settings: ReviewSettings) -> None:
        request = ReviewRequest(slug="pr-42", image="ui:abc")
        labels = build_workload_spec(request, CONTEXT, settings, now=NOW).properties.labels
        assert "GIT_SHA" not in labels
        assert labels["REVIEW_APP"] == "pr-42"

    def test_payload_shape(self, settings: ReviewSettings) -> None:
        payload = build_workload_spec(_request(), CONTEXT, settings, now=NOW).to_payload()
        assert set(payload) == {"name", "description", "properties"}
        assert payload["properties"]["container_type"] == "DOCKER"
        assert payload["properties"]["port_mappings"] == [
            {"protocol": "tcp", "name": "web", "expose_endpoint": True, "container_port": 80}
        ]

    def test_requires_provider(self, settings: ReviewSettings) -> None:
        context = CONTEXT.model_copy(update={"provider": None})
        with pytest.raises(ValueError):
            build_workload_spec(_request(), context, settings)


class TestUpdateOps:
    def test_only_image_description_labels(self, settings: ReviewSettings) -> None:
        spec = build_workload_spec(_request(), CONTEXT, settings, now=NOW)
        ops = update_ops(spec)
        assert [op.path for op in ops] == ["/properties/image", "/description", "/properties/labels"]
        assert all(op.op == "replace" for op in ops)
        assert ops[0].value == "ui:abc"
