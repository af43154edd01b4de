import json
import os
from dataclasses import dataclass

import pytest

os.environ.setdefault("POWERTOOLS_TRACE_DISABLED", "1")
os.environ.setdefault("POWERTOOLS_SERVICE_NAME", "lab-files")
os.environ.setdefault("AWS_DEFAULT_REGION", "eu-west-1")

from github_client import GitHubResponse  # noqa: E402
from settings import get_settings  # noqa: E402

SETTINGS_VARIABLES = [
    "GITHUB_TOKEN",
    "GITHUB_TOKEN_PARAMETER",
    "GITHUB_USERNAME_OR_ORG",
    "GITHUB_REPOS_ENDPOINT",
    "LAB_FILES_ORG",
    "LAB_FILES_BASE_PATH",
    "GITHUB_API_URL",
    "GITHUB_USER_AGENT",
    "GITHUB_TIMEOUT",
    "LAB_FILES_MAX_WORKERS",
]


def entry(path, type="file"):
    name = path.rsplit("/", 1)[-1]
    return {"name": name, "path": path, "type": type, "url": f"https://api.github.com/repos/x/y/contents/{path}"}


class FakeGitHubClient:
    """Answers content listings from a dict of path -> (status, entries)."""

    def __init__(self, listings=None, repositories=None):
        self.listings = listings or {}
        self.repositories = repositories
        self.calls = []

    def get_contents(self, owner, repo, path=""):
        self.calls.append((owner, repo, path))
        listing = self.listings.get(path)
        if listing is None:
            return GitHubResponse(404, json.dumps({"message": "Not Found"}))
        if isinstance(listing, Exception):
            raise listing
        status, body = listing
        if not isinstance(body, str):
            body = json.dumps(body)
        return GitHubResponse(status, body)

    def list_repositories(self, identifier, endpoint="users"):
        self.calls.append((endpoint, identifier))
        if isinstance(self.repositories, Exception):
            raise self.repositories
        return self.repositories


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    for variable in SETTINGS_VARIABLES:
        monkeypatch.delenv(variable, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def lambda_context():
    @dataclass
    class LambdaContext:
        function_name: str = "LabFilesFunction"
        memory_limit_in_mb: int = 256
        invoked_function_arn: str = "arn:aws:lambda:eu-west-1:123456789012:function:LabFilesFunction"
        aws_request_id: str = "52fdfc07-2182-154f-163f-5f0f9a621d72"

    return LambdaContext()


def api_gateway_event(path, resource, path_parameters=None):
    return {
        "resource": resource,
        "path": path,
        "httpMethod": "GET",
        "headers": {"Accept": "application/json"},
        "multiValueHeaders": {"Accept": ["application/json"]},
        "queryStringParameters": None,
        "multiValueQueryStringParameters": None,
        "pathParameters": path_parameters,
        "stageVariables": None,
        "requestContext": {
            "resourcePath": resource,
            "httpMethod": "GET",
            "path": f"/prod{path}",
            "stage": "prod",
            "requestId": "c6af9ac6-7b61-11e6-9a41-93e8deadbeef",
            "identity": {"sourceIp": "127.0.0.1"},
        },
        "body": None,
        "isBase64Encoded": False,
    }
