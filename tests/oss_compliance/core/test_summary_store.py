"""Tests for the generation-tagged summary store."""
from oss_compliance.core.domain.models import ResultPatch, ValidationResult, ValidationSummary
from oss_compliance.core.services import SummaryStore

OK = ValidationResult(exists=True, message="ok", status="success", location="repo")


def _summary(name="acme/widget"):
    owner, repo = name.split("/")
    return ValidationSummary(repo_name=name, repo_url=f"https://github.com/{name}", owner=owner, repo=repo, results={"README.md": OK})


class TestSummaryStore:
    def test_begin_hands_out_increasing_generations(self):
        store = SummaryStore()

        first = store.begin()
        second = store.begin()

        assert second > first
        assert store.is_current(second)
        assert not store.is_current(first)

    def test_patch_merges_single_key(self):
        store = SummaryStore()
        gen = store.begin()
        store.publish(gen, _summary())

        accepted = store.apply(ResultPatch(gen, "telemetry-check", OK))

        assert accepted is True
        assert set(store.snapshot().results) == {"README.md", "telemetry-check"}

    def test_stale_generation_is_dropped(self):
        store = SummaryStore()
        old = store.begin()
        store.publish(old, _summary("acme/old"))
        new = store.begin()
        store.publish(new, _summary("acme/new"))

        assert store.apply(ResultPatch(old, "telemetry-check", OK)) is False
        assert store.publish(old, _summary("acme/old")) is False
        assert store.add_notice(old, "late") is False
        assert store.snapshot().repo_name == "acme/new"
        assert "telemetry-check" not in store.snapshot().results

    def test_patch_before_publish_is_dropped(self):
        store = SummaryStore()
        gen = store.begin()

        assert store.apply(ResultPatch(gen, "telemetry-check", OK)) is False
        assert store.snapshot() is None

    def test_listeners_see_every_accepted_change(self):
        store = SummaryStore()
        seen = []
        unsubscribe = store.subscribe(seen.append)
        gen = store.begin()

        store.publish(gen, _summary())
        store.add_notice(gen, "quota low")
        store.apply(ResultPatch(gen - 1, "x", OK))
        unsubscribe()
        store.apply(ResultPatch(gen, "y", OK))

        assert len(seen) == 2
        assert seen[-1].notices == ("quota low",)
