"""
Filesystem asset store for uploaded images.

Files are kept under <root>/imagens/<category>/<timestamp>_<original-filename>.
Validation of uploads (type, size) happens before the store is called.
"""
import json
import logging
import os
import shutil
import time
from pathlib import Path
from typing import Callable, Optional

from fastapi import UploadFile

from . import config
from .errors import StorageWriteError

logger = logging.getLogger(__name__)

PROFILE_IMAGES = "profile_images"
PRODUCT_IMAGES = "product_images"

MANIFEST_NAME = "imagens.json"


class AssetStore:
    """
    Stores, deletes and locates uploaded images.

    Args:
        root: Directory that contains the "imagens" tree
        clock: Returns the current unix time; used to build stored names
    """

    def __init__(self, root, clock: Callable[[], float] = time.time):
        self.base_dir = Path(root) / "imagens"
        self.clock = clock

    def path_for(self, category: str, stored_name: str) -> Path:
        return self.base_dir / category / stored_name

    def exists(self, category: str, stored_name: Optional[str]) -> bool:
        if not stored_name:
            return False
        return self.path_for(category, stored_name).is_file()

    def store(self, category: str, upload: UploadFile) -> str:
        """
        Persist an upload and return its stored name.

        Raises:
            StorageWriteError: if the directory cannot be created or the write fails
        """
        # Only the basename: a client filename must not escape the category dir
        original = os.path.basename(upload.filename or "")
        stored_name = f"{int(self.clock())}_{original}"
        directory = self.base_dir / category
        destination = directory / stored_name

        try:
            directory.mkdir(mode=0o777, parents=True, exist_ok=True)
            upload.file.seek(0)
            with open(destination, "wb") as out:
                shutil.copyfileobj(upload.file, out)
        except OSError as e:
            logger.error(f"Failed to store {destination}: {e}")
            raise StorageWriteError(str(destination), str(e)) from e

        logger.info(f"Stored {category}/{stored_name}")
        return stored_name

    def delete(self, category: str, stored_name: Optional[str]) -> bool:
        """
        Best-effort removal of a stored file.

        Returns:
            True if a file was removed, False if there was nothing to remove
            or the removal failed (failures are logged, never raised)
        """
        if not stored_name:
            return False
        path = self.path_for(category, stored_name)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.warning(f"Could not delete {path}: {e}")
            return False
        logger.info(f"Deleted {category}/{stored_name}")
        return True

    def load_manifest(self) -> dict:
        """
        Read imagens/imagens.json.

        A missing, unreadable or malformed manifest yields an empty mapping.
        """
        path = self.base_dir / MANIFEST_NAME
        if not path.is_file():
            return {}
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable manifest {path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}


def get_asset_store() -> AssetStore:
    """FastAPI dependency returning the store rooted at PUBLIC_DIR."""
    return AssetStore(config.PUBLIC_DIR)
