import pytest
from fluffybot.config import Settings


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        gitlab_url="https://gitlab.example.com",
        gitlab_token="glpat-test",
        bot_username="fluffybot",
        anthropic_api_key="sk-ant-test",
        worker_image="registry.example.com/fluffybot-worker:latest",
        worker_namespace="gitlab",
    )


@pytest.fixture
def project_payload() -> dict:
    return {
        "id": 42,
        "path_with_namespace": "team/service",
        "git_http_url": "https://gitlab.example.com/team/service.git",
    }


@pytest.fixture
def issue_payload(project_payload) -> dict:
    return {
        "object_kind": "issue",
        "user": {"id": 7, "username": "alice", "name": "Alice"},
        "project": project_payload,
        "assignees": [{"username": "fluffybot"}],
        "object_attributes": {
            "iid": 12,
            "title": "Add retry logic",
            "description": "Retry failed uploads three times.",
            "state": "opened",
            "action": "open",
        },
    }


@pytest.fixture
def mr_note_payload(project_payload) -> dict:
    return {
        "object_kind": "note",
        "user": {"id": 7, "username": "alice"},
        "project": project_payload,
        "merge_request": {"iid": 5, "title": "Add retries", "source_branch": "retry", "target_branch": "main"},
        "object_attributes": {
            "note": "@fluffybot what does this do?",
            "noteable_type": "MergeRequest",
            "position": {
                "base_sha": "aaa",
                "head_sha": "bbb",
                "start_sha": "aaa",
                "old_path": "app/upload.py",
                "new_path": "app/upload.py",
                "old_line": None,
                "new_line": 57,
            },
        },
    }
