"""Tests for SBOM, lockfile and package.json analysis."""
import json

import pytest

from fakes import FakeGitHub, FakeLogger, FakeSbomCache
from helpers import contents_envelope
from oss_compliance.core.domain.exceptions import GitHubConnectionError
from oss_compliance.core.domain.models import SbomAnalysis
from oss_compliance.core.services import ManifestAnalyzer, SbomAnalyzer
from oss_compliance.core.services.results import dependency_summary
from oss_compliance.core.services.sbom_analyzer import (
    analyze_lockfile,
    count_package_json,
    dependency_analysis_from_sbom,
    process_sbom,
)

SBOM_PATH = "/repos/acme/widget/dependency-graph/sbom"


def _sbom(*packages):
    return {"sbom": {"spdxVersion": "SPDX-2.3", "packages": list(packages)}}


class TestProcessSbom:
    def test_breakdown_sums_to_package_count(self):
        payload = _sbom(
            {"name": "left-pad", "licenseConcluded": "MIT", "versionInfo": "1.3.0"},
            {"name": "react", "licenseConcluded": "MIT"},
            {"name": "gpl-thing", "licenseConcluded": "GPL-3.0"},
            {"name": "mystery"},
            {"licenseConcluded": "Apache-2.0"},
        )

        analysis = process_sbom(payload)

        assert analysis.sbom_dependencies_count == 5
        assert sum(analysis.license_breakdown.values()) == 5
        assert analysis.license_breakdown == {"MIT": 2, "GPL-3.0": 1, "Unknown": 1, "Apache-2.0": 1}
        assert analysis.mit_count == 2
        # unnamed packages are counted but not listed
        assert [d.name for d in analysis.dependencies] == ["left-pad", "react", "gpl-thing", "mystery"]
        assert analysis.dependencies[0].version == "1.3.0"
        assert analysis.dependencies[1].version == "unknown"
        assert analysis.raw_sbom_data is payload

    def test_top_level_document_accepted(self):
        analysis = process_sbom({"packages": [{"name": "a", "licenseConcluded": "MIT"}]})

        assert analysis.sbom_dependencies_count == 1

    def test_malformed_document_is_empty(self):
        analysis = process_sbom({"sbom": {"packages": "nope"}})

        assert analysis.sbom_dependencies_count == 0
        assert analysis.available is False

    @pytest.mark.parametrize("concluded", [["MIT"], 5, {"id": "MIT"}, None, ""])
    def test_non_string_license_counts_as_unknown(self, concluded):
        analysis = process_sbom(
            _sbom({"name": "a", "licenseConcluded": concluded}, {"name": "b", "licenseConcluded": "MIT"})
        )

        assert analysis.license_breakdown == {"Unknown": 1, "MIT": 1}
        assert analysis.dependencies[0].license == "Unknown"
        # flagged as unknown rather than crashing the copyleft rule
        assert dependency_analysis_from_sbom(analysis).flagged_licenses == ["Unknown"]

    def test_dependency_analysis_from_sbom(self):
        sbom = process_sbom(_sbom(
            {"name": "a", "licenseConcluded": "GPL-2.0-only"},
            {"name": "b", "licenseConcluded": "AGPL-3.0"},
            {"name": "c", "licenseConcluded": "MIT"},
        ))

        analysis = dependency_analysis_from_sbom(sbom, dependencies_count=4, dev_dependencies_count=1)

        assert analysis.source == "sbom"
        assert analysis.total == 3
        assert analysis.gpl_dependencies == ("a: GPL-2.0-only",)
        assert analysis.agpl_dependencies == ("b: AGPL-3.0",)
        assert analysis.dependencies_count == 4
        assert analysis.dev_dependencies_count == 1


class TestDependencySummary:
    def test_copyleft_breakdown_is_warning(self):
        sbom = SbomAnalysis(
            mit_count=5,
            sbom_dependencies_count=8,
            license_breakdown={"GPL-3.0": 2, "LGPL-2.1": 1, "MIT": 5},
        )

        result = dependency_summary(dependency_analysis_from_sbom(sbom))

        assert result.status == "warning"
        assert result.dependency_analysis.flagged_licenses == ["GPL-3.0"]

    def test_unknown_only_is_warning(self):
        sbom = SbomAnalysis(sbom_dependencies_count=1, license_breakdown={"Unknown": 1})

        assert dependency_summary(dependency_analysis_from_sbom(sbom)).status == "warning"

    def test_permissive_only_is_success(self):
        sbom = SbomAnalysis(mit_count=2, sbom_dependencies_count=3, license_breakdown={"MIT": 2, "LGPL-3.0": 1})

        result = dependency_summary(dependency_analysis_from_sbom(sbom))

        assert result.status == "success"
        assert result.message == "Dependency analysis completed"

    def test_no_data(self):
        result = dependency_summary(None)

        assert result.exists is False
        assert result.status == "success"
        assert result.message == "No dependency data available"


class TestLockfile:
    def test_packages_section(self):
        lock = {
            "packages": {
                "": {"name": "root", "license": "MIT"},
                "node_modules/a": {"license": "MIT"},
                "node_modules/b": {"license": "GPL-3.0"},
                "node_modules/c": {"licenses": [{"type": "AGPL-3.0"}]},
                "node_modules/d": {},
            }
        }

        analysis = analyze_lockfile(lock)

        assert analysis.source == "lockfile"
        assert analysis.total == 4
        assert analysis.gpl_dependencies == ("b: GPL-3.0",)
        assert analysis.agpl_dependencies == ("c: AGPL-3.0",)
        assert analysis.license_breakdown == {"MIT": 1, "GPL-3.0": 1, "AGPL-3.0": 1, "Unknown": 1}
        assert analysis.has_copyleft is True

    def test_legacy_dependencies_section(self):
        analysis = analyze_lockfile({"dependencies": {"x": {"license": "ISC"}}})

        assert analysis.total == 1
        assert analysis.has_copyleft is False

    def test_lgpl_is_not_flagged(self):
        analysis = analyze_lockfile({"packages": {"node_modules/l": {"license": "LGPL-2.1"}}})

        assert analysis.gpl_dependencies == ()

    def test_count_package_json(self):
        assert count_package_json({"dependencies": {"a": "1", "b": "2"}, "devDependencies": {"c": "3"}}) == (2, 1)
        assert count_package_json({}) == (0, 0)


class TestSbomAnalyzer:
    async def test_404_yields_empty_every_time(self):
        github = FakeGitHub()
        analyzer = SbomAnalyzer(github=github, logger=FakeLogger())

        first = await analyzer.analyze("acme", "widget")
        second = await analyzer.analyze("acme", "widget")

        assert first == second == SbomAnalysis.empty()
        assert first.mit_count == 0
        assert first.sbom_dependencies_count == 0

    async def test_success_is_cached(self):
        github = FakeGitHub().add(SBOM_PATH, _sbom({"name": "a", "licenseConcluded": "MIT"}))
        cache = FakeSbomCache()
        analyzer = SbomAnalyzer(github=github, logger=FakeLogger(), cache=cache)

        analysis = await analyzer.analyze("acme", "widget")
        again = await analyzer.analyze("acme", "widget")

        assert analysis.mit_count == 1
        assert cache.entries[("acme", "widget")] == analysis
        assert again == analysis
        assert len(github.calls) == 1

    async def test_failures_are_not_cached(self):
        github = FakeGitHub().add(SBOM_PATH, status=500, text="boom")
        cache = FakeSbomCache()

        analysis = await SbomAnalyzer(github=github, logger=FakeLogger(), cache=cache).analyze("acme", "widget")

        assert analysis == SbomAnalysis.empty()
        assert cache.entries == {}

    async def test_document_without_packages_is_not_cached(self):
        github = FakeGitHub().add(SBOM_PATH, {"sbom": {"spdxVersion": "SPDX-2.3"}})
        cache = FakeSbomCache()

        analysis = await SbomAnalyzer(github=github, logger=FakeLogger(), cache=cache).analyze("acme", "widget")

        assert analysis.available is False
        assert cache.entries == {}

    async def test_unhashable_license_does_not_raise(self):
        github = FakeGitHub().add(SBOM_PATH, _sbom({"name": "a", "licenseConcluded": ["MIT"]}))

        analysis = await SbomAnalyzer(github=github, logger=FakeLogger()).analyze("acme", "widget")

        assert analysis.license_breakdown == {"Unknown": 1}

    async def test_connection_error_is_empty(self):
        github = FakeGitHub().fail(SBOM_PATH, GitHubConnectionError("u", 3))

        analysis = await SbomAnalyzer(github=github, logger=FakeLogger()).analyze("acme", "widget")

        assert analysis.available is False

    async def test_bad_json_is_empty(self):
        github = FakeGitHub().add(SBOM_PATH, text="<html>")

        analysis = await SbomAnalyzer(github=github, logger=FakeLogger()).analyze("acme", "widget")

        assert analysis == SbomAnalysis.empty()

    async def test_passes_retry_budget(self):
        github = FakeGitHub()

        await SbomAnalyzer(github=github, logger=FakeLogger(), max_retries=0).analyze("acme", "widget")

        assert github.max_retries_seen == [0]


class TestManifestAnalyzer:
    async def test_package_json_counts_from_envelope(self):
        body = json.dumps({"dependencies": {"a": "1"}, "devDependencies": {"b": "1", "c": "1"}})
        github = FakeGitHub().add("/repos/acme/widget/contents/package.json", text=contents_envelope(body))

        counts = await ManifestAnalyzer(github=github, logger=FakeLogger()).package_json_counts(
            github.api_url("/repos/acme/widget/contents/package.json")
        )

        assert counts == (1, 2)

    async def test_missing_lockfile_is_none(self):
        github = FakeGitHub()

        analysis = await ManifestAnalyzer(github=github, logger=FakeLogger()).lockfile_analysis(
            github.api_url("/repos/acme/widget/contents/package-lock.json")
        )

        assert analysis is None

    async def test_malformed_manifest_is_none(self):
        github = FakeGitHub().add("/repos/acme/widget/contents/package.json", text=contents_envelope("{not json"))
        analyzer = ManifestAnalyzer(github=github, logger=FakeLogger())

        counts = await analyzer.package_json_counts(github.api_url("/repos/acme/widget/contents/package.json"))

        assert counts is None
