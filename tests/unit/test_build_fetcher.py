"""Tests for BuildFetcher — paging parameters and the fetch error policy."""

from __future__ import annotations

import logging

import pytest

from monocle.bridge.circleci_client import CircleCIError
from monocle.config import FetchErrorPolicy
from monocle.core.build_fetcher import BuildFetcher, FetchError
from monocle.models.project import ProjectRef


class TestFetch:
    def test_queries_first_page(self, project_ref: ProjectRef, make_build_source, make_raw_build):
        source = make_build_source([make_raw_build(3), make_raw_build(2)])
        builds = BuildFetcher(source).fetch(project_ref)

        assert [b.build_num for b in builds] == [3, 2]
        assert source.queries == [
            {
                "user": "acme",
                "project": "widgets",
                "branch": "main",
                "limit": 30,
                "offset": 0,
                "vcs_type": "github",
            }
        ]

    def test_custom_page_size(self, project_ref: ProjectRef, make_build_source):
        source = make_build_source()
        BuildFetcher(source, page_size=10).fetch(project_ref)
        assert source.queries[0]["limit"] == 10
        assert source.queries[0]["offset"] == 0

    def test_default_policy_is_degrade(self, make_build_source):
        assert BuildFetcher(make_build_source()).policy is FetchErrorPolicy.DEGRADE


class TestErrorPolicy:
    def test_degrade_returns_empty(self, project_ref: ProjectRef, make_build_source, caplog):
        source = make_build_source(error=CircleCIError("HTTP 500"))
        with caplog.at_level(logging.WARNING, logger="monocle"):
            builds = BuildFetcher(source, FetchErrorPolicy.DEGRADE).fetch(project_ref)

        assert builds == []
        assert "HTTP 500" in caplog.text

    def test_propagate_raises_fetch_error(self, project_ref: ProjectRef, make_build_source):
        cause = CircleCIError("HTTP 500")
        source = make_build_source(error=cause)
        with pytest.raises(FetchError, match="acme/widgets@main") as info:
            BuildFetcher(source, FetchErrorPolicy.PROPAGATE).fetch(project_ref)
        assert info.value.__cause__ is cause

    def test_other_errors_are_not_swallowed(self, project_ref: ProjectRef, make_build_source):
        source = make_build_source(error=KeyError("bug"))
        with pytest.raises(KeyError):
            BuildFetcher(source).fetch(project_ref)
