from abc import ABC, abstractmethod
from typing import Any


class GitPlatform(ABC):
    @abstractmethod
    async def get_issue(self, project_id: int, issue_iid: int) -> dict[str, Any]:
        pass

    @abstractmethod
    async def post_issue_comment(self, project_id: int, issue_iid: int, comment: str) -> None:
        pass

    @abstractmethod
    async def get_mr_info(self, project_id: int, mr_iid: int) -> dict[str, Any]:
        pass

    @abstractmethod
    async def get_mr_changes(self, project_id: int, mr_iid: int) -> dict[str, Any]:
        pass

    @abstractmethod
    async def post_mr_comment(self, project_id: int, mr_iid: int, comment: str) -> None:
        pass

    @abstractmethod
    async def get_wiki_context(self, project_id: int) -> str:
        pass
