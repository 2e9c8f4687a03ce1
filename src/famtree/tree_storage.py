#!/usr/bin/env python3

"""Byte stores for persisted trees.

A store only moves whole byte strings around: ``load(name) -> bytes`` and
``store(name, data)``. Encoding and decoding live in ``tree_codec``.
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .tree_config import Config, config as default_config
from .tree_constants import DEFAULT_FILE_SUFFIX
from .tree_codec import encode_tree, decode_tree
from .tree_data_management import Tree
from .tree_errors import InvalidInput, StoreIOError, StoreNotFound

# Set up logging
logger = logging.getLogger(__name__)


def _normalize_store_name(name: str) -> str:
    if not isinstance(name, str) or not name.strip():
        raise InvalidInput("File name must not be empty")
    name = name.strip()
    if not Path(name).suffix:
        name += DEFAULT_FILE_SUFFIX
    return name


class FileTreeStore:
    """Stores trees as files below a base directory."""

    def __init__(self, base_dir):
        self.base_dir = Path(base_dir).expanduser()

    def _path_for(self, name: str) -> Path:
        path = Path(_normalize_store_name(name))
        if path.is_absolute():
            return path
        return self.base_dir / path

    def load(self, name: str) -> bytes:
        path = self._path_for(name)
        if not path.exists():
            raise StoreNotFound(
                f"Tree file not found: {path}",
                recovery_suggestion="Check the file name, or create a new tree."
            )
        try:
            with open(path, 'rb') as f:
                data = f.read()
        except OSError as e:
            raise StoreIOError(f"Error reading tree file {path}: {e}") from e
        logger.info(f"Loaded {len(data)} bytes from {path}")
        return data

    def store(self, name: str, data: bytes) -> None:
        """Write ``data`` atomically: the old file survives a failed write."""
        path = self._path_for(name)
        tmp_name = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=str(path.parent))
            with os.fdopen(fd, 'wb') as f:
                f.write(data)
            os.replace(tmp_name, path)
            tmp_name = None
        except OSError as e:
            raise StoreIOError(f"Error saving tree file to {path}: {e}") from e
        finally:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
        logger.info(f"Saved {len(data)} bytes to {path}")


class S3TreeStore:
    """Stores trees as objects in an S3 bucket."""

    def __init__(self, bucket: str, prefix: str = "", region: str = None,
                 endpoint_url: Optional[str] = None, s3_client=None):
        if not bucket:
            raise InvalidInput("S3 bucket name must not be empty")
        self.bucket = bucket
        self.prefix = prefix or ""
        self.s3_client = s3_client or boto3.client(
            's3',
            region_name=region,
            endpoint_url=endpoint_url
        )
        logger.info(f"S3 client initialized for bucket {bucket} (endpoint: {endpoint_url or 'default'})")

    def _key_for(self, name: str) -> str:
        return f"{self.prefix}{_normalize_store_name(name)}"

    def load(self, name: str) -> bytes:
        key = self._key_for(name)
        try:
            logger.info(f"Downloading from S3: s3://{self.bucket}/{key}")
            response = self.s3_client.get_object(Bucket=self.bucket, Key=key)
            data = response["Body"].read()
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code", "")
            if code in ("NoSuchKey", "404", "NotFound"):
                raise StoreNotFound(f"Tree not found in S3: s3://{self.bucket}/{key}") from e
            raise StoreIOError(f"Failed to download from S3: {e}") from e
        except BotoCoreError as e:
            raise StoreIOError(
                f"Could not reach S3 for s3://{self.bucket}/{key}: {e}",
                recovery_suggestion="Check the S3 endpoint, credentials and network connection."
            ) from e
        logger.info(f"Downloaded {len(data)} bytes from s3://{self.bucket}/{key}")
        return data

    def store(self, name: str, data: bytes) -> None:
        key = self._key_for(name)
        try:
            self.s3_client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType="application/json; charset=utf-8"
            )
        except ClientError as e:
            raise StoreIOError(f"Failed to upload to S3: {e}") from e
        except BotoCoreError as e:
            raise StoreIOError(
                f"Could not reach S3 for s3://{self.bucket}/{key}: {e}",
                recovery_suggestion="The tree was not saved; check the S3 endpoint, credentials and network connection."
            ) from e
        logger.info(f"Uploaded {len(data)} bytes to s3://{self.bucket}/{key}")


def get_tree_store(cfg: Config = None):
    """Pick the byte store for the given configuration."""
    cfg = cfg or default_config
    if cfg.S3_BUCKET:
        return S3TreeStore(
            cfg.S3_BUCKET,
            prefix=cfg.S3_PREFIX,
            region=cfg.S3_REGION,
            endpoint_url=cfg.S3_ENDPOINT_URL
        )
    return FileTreeStore(cfg.DATA_DIR)


def serialize(store, name: str, tree: Tree) -> None:
    """Encode ``tree`` and hand the bytes to ``store``."""
    data = encode_tree(tree)
    store.store(name, data)


def deserialize(store, name: str) -> Tree:
    """Load bytes from ``store`` and decode them into a new Tree."""
    data = store.load(name)
    return decode_tree(data)
