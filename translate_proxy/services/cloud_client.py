"""
Resource Manager client - lists clouds and folders, fetches and creates folders.
"""

import logging
from typing import Dict, List, Optional

from ..schemas import (
    Cloud,
    CloudsResponse,
    CreateFolderRequest,
    Folder,
    FolderOperation,
    FoldersResponse,
)
from .request_executor import RequestExecutor

logger = logging.getLogger(__name__)

# Guards against an upstream that keeps returning the same page token
MAX_PAGES = 100


class CloudClient:
    """Thin wrapper over the Resource Manager endpoints."""

    def __init__(self, executor: RequestExecutor, clouds_url: str, folders_url: str):
        self.executor = executor
        self.clouds_url = clouds_url
        self.folders_url = folders_url.rstrip("/")

    async def list_clouds(self) -> List[Cloud]:
        """List all clouds of the account, following pagination."""
        clouds: List[Cloud] = []
        page_token = ""
        for _ in range(MAX_PAGES):
            params: Dict[str, str] = {}
            if page_token:
                params["pageToken"] = page_token
            resp = await self.executor.execute(
                "clouds",
                "GET",
                self.clouds_url,
                params=params or None,
                response_model=CloudsResponse,
            )
            clouds.extend(resp.clouds)
            page_token = resp.next_page_token
            if not page_token:
                break
        else:
            logger.warning(f"Cloud list truncated after {MAX_PAGES} pages")
        logger.debug(f"Found {len(clouds)} cloud(s)")
        return clouds

    async def list_folders(self, cloud_id: str) -> List[Folder]:
        """List all folders of a cloud, following pagination."""
        folders: List[Folder] = []
        page_token = ""
        for _ in range(MAX_PAGES):
            params = {"cloudId": cloud_id}
            if page_token:
                params["pageToken"] = page_token
            resp = await self.executor.execute(
                "cloud folders",
                "GET",
                self.folders_url,
                params=params,
                response_model=FoldersResponse,
            )
            folders.extend(resp.folders)
            page_token = resp.next_page_token
            if not page_token:
                break
        else:
            logger.warning(
                f"Folder list of cloud {cloud_id} truncated after {MAX_PAGES} pages"
            )
        logger.debug(f"Found {len(folders)} folder(s) in cloud {cloud_id}")
        return folders

    async def get_folder(self, folder_id: str) -> Folder:
        return await self.executor.execute(
            "get folder",
            "GET",
            f"{self.folders_url}/{folder_id}",
            response_model=Folder,
        )

    async def create_folder(
        self, cloud_id: str, name: str, description: Optional[str] = None
    ) -> FolderOperation:
        request = CreateFolderRequest(
            cloud_id=cloud_id, name=name, description=description
        )
        return await self.executor.execute(
            "create folder",
            "POST",
            self.folders_url,
            payload=request,
            response_model=FolderOperation,
        )
