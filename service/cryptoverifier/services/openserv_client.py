"""
OpenServ platform API client.

Thin wrapper over the task-creation endpoint. The platform owns task
scheduling and execution; we only create tasks and wire their dependencies.
"""

import httpx
from typing import Optional, Dict, Any

from cryptoverifier.config import get_settings


class OpenServClient:
    """
    Client for the OpenServ REST API.

    Errors are not retried or wrapped: httpx.HTTPStatusError carries the
    status code and response body, httpx.RequestError means no response.
    """

    def __init__(self, api_key: str, base_url: str = "https://api.openserv.ai", timeout: float = 30.0):
        self.base_url = base_url.rstrip("/")
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={"x-openserv-key": api_key},
            timeout=timeout,
        )

    async def create_task(
        self,
        workspace_id: int,
        assignee: int,
        description: str,
        body: str,
        input: str,
        expected_output: str,
        dependencies: list[Any],
    ) -> Dict[str, Any]:
        """
        Call POST /workspaces/{workspace_id}/task.

        Returns the created task; its "id" is what dependent tasks reference.
        """
        response = await self.client.post(
            f"/workspaces/{workspace_id}/task",
            json={
                "assignee": assignee,
                "description": description,
                "body": body,
                "input": input,
                "expectedOutput": expected_output,
                "dependencies": dependencies,
            },
        )
        response.raise_for_status()
        return response.json()

    async def close(self):
        """Close HTTP client."""
        await self.client.aclose()


# Global instance
_openserv_client: Optional[OpenServClient] = None


def get_openserv_client() -> OpenServClient:
    """Get or create OpenServ client singleton."""
    global _openserv_client
    if _openserv_client is None:
        settings = get_settings()
        _openserv_client = OpenServClient(settings.openserv_api_key, settings.openserv_api_url)
    return _openserv_client


async def close_openserv_client() -> None:
    global _openserv_client
    if _openserv_client is not None:
        await _openserv_client.close()
        _openserv_client = None
