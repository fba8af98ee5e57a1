"""
Folder resolver - decides which cloud folder translation requests run under.

Resolution happens once per run:

    configured folder --(exists)--> done
            |
          (404)
            v
    select cloud --> select folder (or create one) --> done

Ambiguous choices are delegated to a `Prompter`; every path ends with a
concrete folder ID or an exception.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from ..config import DEFAULT_NEW_FOLDER_NAME, FOLDER_STATUS_ACTIVE
from ..errors import FolderCreationError, RequestError, ResolutionError
from ..schemas import Cloud, Folder, FolderOperation
from .cloud_client import CloudClient
from .prompt import Prompter, choose

logger = logging.getLogger(__name__)


@dataclass
class ResolvedScope:
    cloud_id: str
    folder_id: str


class FolderResolver:
    """
    Resolves the target folder, interactively when needed.

    Args:
        client: Resource Manager client
        prompter: Interactive input capability
        new_folder_name: Name used when a folder has to be created
        all_folders: Offer folders of any status, not only ACTIVE ones
    """

    def __init__(
        self,
        client: CloudClient,
        prompter: Prompter,
        new_folder_name: str = DEFAULT_NEW_FOLDER_NAME,
        all_folders: bool = False,
    ):
        self.client = client
        self.prompter = prompter
        self.new_folder_name = new_folder_name
        self.all_folders = all_folders

    async def resolve(self, configured_folder_id: Optional[str] = None) -> ResolvedScope:
        """
        Resolve the folder to use.

        Args:
            configured_folder_id: Folder ID from the config file, if any

        Raises:
            ResolutionError: No cloud available or folder creation failed
            RequestError: An upstream call failed
            PromptInputError: Interactive input could not be obtained
        """
        if configured_folder_id:
            scope = await self._validate_configured_folder(configured_folder_id)
            if scope is not None:
                return scope

        cloud = await self._select_cloud()
        folder_id = await self._select_folder(cloud)
        return ResolvedScope(cloud_id=cloud.id, folder_id=folder_id)

    async def _validate_configured_folder(
        self, folder_id: str
    ) -> Optional[ResolvedScope]:
        try:
            folder = await self.client.get_folder(folder_id)
        except RequestError as e:
            if e.is_status(404):
                logger.info(f"Configured folder {folder_id} not found, reselecting")
                return None
            raise
        logger.info(f"Using configured folder {folder.name} (id = {folder_id})")
        return ResolvedScope(cloud_id=folder.cloud_id, folder_id=folder.id or folder_id)

    async def _select_cloud(self) -> Cloud:
        clouds = await self.client.list_clouds()
        if not clouds:
            raise ResolutionError(
                "there is no cloud for your account. Please create it"
            )
        if len(clouds) == 1:
            cloud = clouds[0]
            self.prompter.show(
                f"cloud {cloud.name} (id = {cloud.id}) automatically selected"
            )
            return cloud

        cloud = choose(
            self.prompter,
            "Please select cloud to use:",
            clouds,
            lambda n, c: f"[{n}] cloud{n} (id = {c.id}, name = {c.name})",
            kind="cloud",
        )
        logger.info(f"Selected cloud {cloud.name} (id = {cloud.id})")
        return cloud

    async def _select_folder(self, cloud: Cloud) -> str:
        folders = await self.client.list_folders(cloud.id)
        if not folders:
            logger.info(f"No folders in cloud {cloud.id}")
            return await self._create_folder(cloud.id, self.new_folder_name)

        candidates = self._filter_folders(folders)
        if not candidates:
            logger.info(f"No {FOLDER_STATUS_ACTIVE} folders in cloud {cloud.id}")
            return await self._create_folder(cloud.id, self.new_folder_name)

        if len(candidates) == 1:
            folder = candidates[0]
            self.prompter.show(
                f"folder {folder.name} (id = {folder.id}, status = {folder.status}) "
                "automatically selected"
            )
            return folder.id

        folder = choose(
            self.prompter,
            "Please choose a folder to use:",
            candidates,
            lambda n, f: (
                f"[{n}] folder{n} (id = {f.id}, name = {f.name}, status = {f.status})"
            ),
            kind="folder",
        )
        logger.info(f"Selected folder {folder.name} (id = {folder.id})")
        return folder.id

    def _filter_folders(self, folders: List[Folder]) -> List[Folder]:
        if self.all_folders:
            return folders
        return [f for f in folders if f.status == FOLDER_STATUS_ACTIVE]

    async def _create_folder(self, cloud_id: str, folder_name: str) -> str:
        logger.info(f"Trying to create folder {folder_name}")
        try:
            operation = await self.client.create_folder(cloud_id, folder_name)
        except RequestError as e:
            if not e.is_status(409):
                raise FolderCreationError(folder_name, str(e)) from e
            # The name is still held by a folder pending deletion
            logger.warning(f"Folder name {folder_name} conflicts with another folder")
            folder_name = self.prompter.ask("Please enter your new folder name: ")
            try:
                operation = await self.client.create_folder(cloud_id, folder_name)
            except RequestError as retry_error:
                raise FolderCreationError(folder_name, str(retry_error)) from retry_error

        return self._created_folder_id(folder_name, operation)

    def _created_folder_id(self, folder_name: str, operation: FolderOperation) -> str:
        if not operation.done:
            error = operation.error
            code = error.code if error else ""
            message = error.message if error else "operation not done"
            raise FolderCreationError(folder_name, f"error code {code}, {message}")

        folder_id = operation.folder_id
        self.prompter.show(
            f"folder {folder_name} (id = {folder_id}) automatically created"
        )
        return folder_id
