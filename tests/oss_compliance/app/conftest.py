"""Shared fixtures for app-level tests."""
import httpx
import pytest
from dependency_injector import providers

from fakes import RecordingSleep
from helpers import contents_envelope, listing
from oss_compliance.app import main as main_module
from oss_compliance.app.config import AppConfig, DirectoryConfig, ProbeConfig
from oss_compliance.infra.github_client import GitHubClient

GITHUB_LICENSE = "MIT License\n\nCopyright (c) 2024 GitHub, Inc.\n"


def default_routes():
    """Routes for acme/widget: README and a GitHub LICENSE, nothing else."""
    return {
        "/rate_limit": httpx.Response(
            200, json={"resources": {"core": {"limit": 5000, "remaining": 4990, "reset": 1700000000}}}
        ),
        "/repos/acme/widget": httpx.Response(200, json={
            "full_name": "acme/widget",
            "html_url": "https://github.com/acme/widget",
            "default_branch": "main",
            "description": "",
        }),
        "/repos/acme/widget/contents": httpx.Response(200, json=listing("README.md", "LICENSE")),
        "/repos/acme/widget/contents/LICENSE": httpx.Response(200, text=contents_envelope(GITHUB_LICENSE, "LICENSE")),
    }


class MockGitHubApi:
    """httpx handler answering from a path -> Response map (404 otherwise)."""

    def __init__(self, routes):
        self.routes = routes
        self.paths = []

    def __call__(self, request):
        self.paths.append(request.url.path)
        response = self.routes.get(request.url.path)
        if response is None:
            return httpx.Response(404, json={"message": "Not Found"})
        return httpx.Response(response.status_code, headers=response.headers, content=response.content)


@pytest.fixture
def test_config(tmp_path):
    return AppConfig(
        directories=DirectoryConfig(home=tmp_path),
        probes=ProbeConfig(start_delay_seconds=0, inter_probe_delay_seconds=0),
    )


@pytest.fixture
def github_api():
    return MockGitHubApi(default_routes())


@pytest.fixture
def mocked_container(monkeypatch, github_api):
    """Route every container the facade builds through ``github_api``."""
    real_create = main_module._create_container
    created = []

    def create_mocked_container(config=None):
        container = real_create(config)
        container.github.override(
            providers.Singleton(
                GitHubClient,
                rate_limits=container.rate_limits,
                logger=container.logger,
                transport=httpx.MockTransport(github_api),
                sleep=RecordingSleep(),
            )
        )
        created.append(container)
        return container

    monkeypatch.setattr(main_module, "_create_container", create_mocked_container)
    return created
